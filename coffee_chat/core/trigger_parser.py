"""Parser for "met <name> at <event>" trigger messages."""

from __future__ import annotations

import re

from .models import ContactInfo, ParsedTrigger

TRIGGER_PATTERN = re.compile(r"^met\s+([A-Za-z\s]+?)\s+at\s+([^,]+?)(?:,\s*(.+))?$", re.IGNORECASE | re.DOTALL)

NAME_STOPWORDS = frozenset(
    {"at", "from", "the", "a", "an", "in", "on", "with", "during", "after", "before"}
)

PHONE_PATTERN = re.compile(r"(\+?1[-.\s]?)?(\([0-9]{3}\)|[0-9]{3})[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}")
EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

_NAME_WORD = re.compile(r"^[A-Za-z]{2,}$")


def parse_trigger(text: str) -> ParsedTrigger:
    """Parse trigger text into its name, event and optional context.

    Supported syntax:
      - ``met <NAME> at <EVENT>``
      - ``met <NAME> at <EVENT>, <CONTEXT>``
    """

    match = TRIGGER_PATTERN.match(text.strip())
    if not match:
        return ParsedTrigger.invalid()

    raw_name, raw_event, raw_context = match.groups()
    name = _clean_name(raw_name)
    if not _is_valid_name(name):
        return ParsedTrigger.invalid()

    event = raw_event.strip()
    if not event:
        return ParsedTrigger.invalid()

    context = raw_context.strip() if raw_context and raw_context.strip() else None
    return ParsedTrigger(name=name, event=event, context=context, is_valid=True)


def extract_contact_info(context: str) -> ContactInfo:
    """Pull a phone number and/or e-mail address out of free-text context."""
    phone = PHONE_PATTERN.search(context)
    email = EMAIL_PATTERN.search(context)
    return ContactInfo(
        phone=phone.group(0) if phone else None,
        email=email.group(0) if email else None,
    )


def _clean_name(raw_name: str) -> str:
    words = [word for word in raw_name.split() if word.lower() not in NAME_STOPWORDS]
    return " ".join(word.capitalize() for word in words)


def _is_valid_name(name: str) -> bool:
    words = name.split(" ")
    return 1 <= len(words) <= 3 and all(_NAME_WORD.match(word) for word in words)
