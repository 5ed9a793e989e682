"""Outbound message templates."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from .models import Contact, ContactSummary, TimeSlot

FALLBACK_AVAILABILITY = "I have some time to meet this week"

SCHEDULING_OPTIONS = (
    "When would you like me to remind you to send it?\n\n"
    "Reply with:\n"
    '- "now" - Send it immediately\n'
    '- "tomorrow" - Remind me tomorrow morning\n'
    '- "Friday" - Remind me on a specific day\n'
    '- "in 2 hours" - Remind me in X hours\n'
    '- "in 5 minutes" - Remind me in X minutes\n'
    '- "no" - Don\'t set a reminder'
)

REPROMPT = (
    "Please respond with:\n"
    '- "now" - Send it immediately\n'
    '- "tomorrow" - Remind me tomorrow morning\n'
    '- "Friday" - Remind me on a specific day\n'
    '- "in 2 hours" - Remind me in X hours\n'
    '- "in 5 minutes" - Remind me in X minutes\n'
    '- "no" - Don\'t set a reminder\n'
    '- "cancel" - Don\'t save contact'
)

HELP = (
    "Wanna grab coffee?\n\n"
    "To log someone you met, text me:\n"
    '"met John at networking event, he works in tech"\n\n'
    "Commands:\n"
    '"summary" - List all contacts\n'
    '"cancel" - Cancel current interaction\n\n'
    "Reminder scheduling:\n"
    '"now" - Send immediately\n'
    '"tomorrow" - Remind tomorrow at 9 AM\n'
    '"in 5 minutes" - For testing\n'
    '"no" - No reminder'
)

CANCELLED = "Cancelled. Contact not saved."
READY = "Ready for new contacts!"
MISSING_SESSION_DATA = "Contact data not found. Please try again."
SUMMARY_FAILED = "Sorry, I had trouble getting your contact summary."
SCHEDULING_FAILED = "Sorry, I had trouble scheduling that reminder."
MEETING_FAILED = "Sorry, I had trouble processing that meeting. Please try again."


def error(text: str) -> str:
    return f"Error: {text}"


def storage_failed(name: str) -> str:
    return f"Sorry, I couldn't save {name}. Nothing was scheduled, please send the meeting again."


def processing_failed(text: str) -> str:
    return (
        f'Sorry, I had trouble processing your message "{text}". '
        'Please try the format: "met [person] at [event]" '
        'For example: "met Benjamin Franklin at Penn"'
    )


def to_12_hour(time_24: str) -> str:
    hours, _, minutes = time_24.partition(":")
    if not hours.isdigit() or not minutes:
        return time_24
    hour = int(hours)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes}{suffix}"


def availability_text(slots: Sequence[TimeSlot], limit: int = 3) -> str:
    if not slots:
        return FALLBACK_AVAILABILITY
    rendered = ", ".join(f"{slot.day_of_week} {to_12_hour(slot.start_time)}" for slot in slots[:limit])
    return f"I'm free {rendered}"


def draft_message(name: str, event: str, topic_sentence: Optional[str], availability: str) -> str:
    message = f"Hi {name}! It was great meeting you at {event}. Would you like to grab coffee sometime?"
    if topic_sentence:
        message += f" {topic_sentence}"
    message += f" {availability}. Let me know what would work!"
    return message


def suggestion_prompt(contact: Contact, draft: str) -> str:
    return f"You met {contact.name} at {contact.event}.\n\n" f'Draft message:\n"{draft}"\n\n' + SCHEDULING_OPTIONS


def reminder_payload(name: str, draft: str) -> str:
    return f'Time to follow up with {name}. Here\'s your draft message:\n\n"{draft}"\n\nReady to send?'


def confirm_now(name: str, draft: str) -> str:
    return f'Here\'s your message for {name}:\n\n"{draft}"\n\nCopy and send when ready'


def confirm_tomorrow(name: str, hour: int = 9) -> str:
    clock = to_12_hour(f"{hour}:00").replace("AM", " AM").replace("PM", " PM")
    return f"I'll remind you tomorrow morning ({clock}) to follow up with {name}"


def confirm_custom(name: str, when: datetime) -> str:
    return f"Reminder set for {name} at {format_when(when)}"


def confirm_no_reminder(name: str) -> str:
    return f"{name} saved with no reminder set."


def format_when(when: datetime) -> str:
    clock = to_12_hour(when.strftime("%H:%M")).replace("AM", " AM").replace("PM", " PM")
    return f"{when.strftime('%A, %B')} {when.day} at {clock}"


def summary(summary_data: ContactSummary) -> str:
    lines = ["Your people list", "", f"Total people: {summary_data.total_count}", ""]
    if summary_data.recent:
        lines.append("People:")
        for contact in summary_data.recent:
            met = contact.met_at
            lines.append(f"- {contact.name} ({contact.event}) - {met.month}/{met.day}/{met.year}")
    else:
        lines.append("No people found.")
    return "\n".join(lines)
