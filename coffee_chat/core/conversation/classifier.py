"""Classify scheduling replies into directives."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence, Tuple

from ..models import DirectiveKind, ScheduleDirective

LOGGER = logging.getLogger(__name__)

NOW_KEYWORDS = ("now", "immediately", "send it")
TOMORROW_KEYWORDS = ("tomorrow", "morning")
NO_REMINDER_KEYWORDS = ("no", "never")

RELATIVE_PATTERN = re.compile(r"\bin\s+(\d+)\s+(minute|min|hour|hr|day)s?\b")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

WEEKDAY_REMINDER_HOUR = 9

_UNIT_DELTAS = {
    "minute": timedelta(minutes=1),
    "min": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "hr": timedelta(hours=1),
    "day": timedelta(days=1),
}


def _contains_any(
    keywords: Sequence[str], directive: ScheduleDirective
) -> Callable[[str, datetime], Optional[ScheduleDirective]]:
    def _match(text: str, now: datetime) -> Optional[ScheduleDirective]:
        return directive if any(word in text for word in keywords) else None

    return _match


def _relative_time(text: str, now: datetime) -> Optional[ScheduleDirective]:
    match = RELATIVE_PATTERN.search(text)
    if not match:
        return None
    amount = int(match.group(1))
    return ScheduleDirective.custom_at(now + amount * _UNIT_DELTAS[match.group(2)])


def _weekday(text: str, now: datetime) -> Optional[ScheduleDirective]:
    for index, day in enumerate(WEEKDAYS):
        if day in text:
            days_until = (index - now.weekday()) % 7 or 7
            target = (now + timedelta(days=days_until)).replace(
                hour=WEEKDAY_REMINDER_HOUR, minute=0, second=0, microsecond=0
            )
            return ScheduleDirective.custom_at(target)
    return None


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    match: Callable[[str, datetime], Optional[ScheduleDirective]]


# Order is significant: the first matching rule wins ("now or tomorrow" is NOW).
RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("now", _contains_any(NOW_KEYWORDS, ScheduleDirective.now())),
    ClassificationRule("tomorrow", _contains_any(TOMORROW_KEYWORDS, ScheduleDirective.tomorrow())),
    ClassificationRule("no_reminder", _contains_any(NO_REMINDER_KEYWORDS, ScheduleDirective.no_reminder())),
    ClassificationRule("relative", _relative_time),
    ClassificationRule("weekday", _weekday),
)


class ResponseClassifier:
    """Maps free-text scheduling replies onto a ``ScheduleDirective``."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def classify(self, text: str, now: datetime | None = None) -> ScheduleDirective:
        """
        Return the directive of the first matching rule, or ``INVALID``.

        Matching is case-insensitive substring matching on the trimmed text.

        Args:
            text: The raw reply text
            now: Reference time for relative and weekday replies

        Returns:
            The classified directive (never None)
        """
        normalized = text.strip().lower()
        reference = now or self._clock()
        for rule in RULES:
            directive = rule.match(normalized, reference)
            if directive is not None:
                LOGGER.debug("Reply %r matched rule %s", normalized, rule.name)
                return directive
        return ScheduleDirective.invalid()

    def is_recognized(self, text: str, now: datetime | None = None) -> bool:
        """True when ``classify`` resolves to anything other than ``INVALID``."""
        return self.classify(text, now).kind is not DirectiveKind.INVALID
