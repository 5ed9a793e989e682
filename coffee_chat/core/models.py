"""Domain models for Coffee Chat."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class FollowUpStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    SENT = "sent"
    COMPLETED = "completed"


class ReminderStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    CANCELLED = "cancelled"


class DirectiveKind(str, Enum):
    NOW = "now"
    TOMORROW = "tomorrow"
    CUSTOM_AT = "custom_at"
    NO_REMINDER = "no_reminder"
    INVALID = "invalid"


@dataclass
class Contact:
    name: str
    event: str
    met_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    follow_up_status: FollowUpStatus = FollowUpStatus.PENDING
    context: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    scheduled_follow_up: Optional[datetime] = None
    last_interaction: Optional[datetime] = None
    notes: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ContactUpdate:
    """Partial update for a stored contact; fields left as None are untouched."""

    follow_up_status: Optional[FollowUpStatus] = None
    scheduled_follow_up: Optional[datetime] = None
    last_interaction: Optional[datetime] = None
    notes: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None

    def as_fields(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def is_empty(self) -> bool:
        return not self.as_fields()


@dataclass
class ContactSummary:
    total_count: int
    recent: List[Contact] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedTrigger:
    name: str
    event: str
    context: Optional[str]
    is_valid: bool

    @classmethod
    def invalid(cls) -> "ParsedTrigger":
        return cls(name="", event="", context=None, is_valid=False)


@dataclass(frozen=True)
class ContactInfo:
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class TimeSlot:
    date: str
    start_time: str
    end_time: str
    day_of_week: str


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender: str
    text: str
    timestamp: datetime


@dataclass(frozen=True)
class PendingInteraction:
    """Draft state held for a sender while a scheduling reply is awaited."""

    sender: str
    contact: Optional[Contact]
    draft_message: Optional[str]
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(frozen=True)
class ScheduleDirective:
    """Classified outcome of a scheduling reply.

    Only ``CUSTOM_AT`` carries a timestamp in ``at``.
    """

    kind: DirectiveKind
    at: Optional[datetime] = None

    @classmethod
    def now(cls) -> "ScheduleDirective":
        return cls(DirectiveKind.NOW)

    @classmethod
    def tomorrow(cls) -> "ScheduleDirective":
        return cls(DirectiveKind.TOMORROW)

    @classmethod
    def custom_at(cls, at: datetime) -> "ScheduleDirective":
        return cls(DirectiveKind.CUSTOM_AT, at)

    @classmethod
    def no_reminder(cls) -> "ScheduleDirective":
        return cls(DirectiveKind.NO_REMINDER)

    @classmethod
    def invalid(cls) -> "ScheduleDirective":
        return cls(DirectiveKind.INVALID)


@dataclass
class ScheduledReminder:
    id: str
    contact_id: int
    message: str
    fire_at: datetime
    status: ReminderStatus = ReminderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    handle: Optional[asyncio.TimerHandle] = field(default=None, repr=False, compare=False)
