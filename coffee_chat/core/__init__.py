"""Core domain logic for Coffee Chat."""

from .config import Config, load_config
from .errors import (
    CalendarError,
    CoffeeChatError,
    ConfigError,
    MissingSessionData,
    SlackError,
    StorageError,
    TextGenerationError,
)
from .models import (
    Contact,
    ContactSummary,
    ContactUpdate,
    DirectiveKind,
    FollowUpStatus,
    InboundMessage,
    ParsedTrigger,
    PendingInteraction,
    ReminderStatus,
    ScheduleDirective,
    ScheduledReminder,
    TimeSlot,
)
from .conversation import ResponseClassifier, SessionStore
from .scheduler import ReminderScheduler
from .dispatch import ReminderDispatcher
from .router import Router
from .poller import MessagePoller

__all__ = [
    "Config",
    "load_config",
    "CoffeeChatError",
    "ConfigError",
    "SlackError",
    "StorageError",
    "CalendarError",
    "TextGenerationError",
    "MissingSessionData",
    "Contact",
    "ContactSummary",
    "ContactUpdate",
    "DirectiveKind",
    "FollowUpStatus",
    "InboundMessage",
    "ParsedTrigger",
    "PendingInteraction",
    "ReminderStatus",
    "ScheduleDirective",
    "ScheduledReminder",
    "TimeSlot",
    "ResponseClassifier",
    "SessionStore",
    "ReminderScheduler",
    "ReminderDispatcher",
    "Router",
    "MessagePoller",
]
