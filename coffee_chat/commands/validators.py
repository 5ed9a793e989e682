"""Input validation utilities for the coffee-chat config commands."""

from __future__ import annotations

import re

_CHANNEL_ID = re.compile(r"^[CDG][A-Z0-9]{7,}$")


def validate_slack_bot_token(token: str) -> tuple[bool, str]:
    """Validate SLACK_BOT_TOKEN format (xoxb-*)."""
    if not token:
        return False, "Token is required"
    if not token.startswith("xoxb-"):
        return False, "Token must start with 'xoxb-'"
    if len(token) < 20:
        return False, "Token appears too short"
    return True, ""


def validate_slack_channel_id(channel_id: str) -> tuple[bool, str]:
    """Validate SLACK_CHANNEL_ID (public, private or DM conversation id)."""
    if not channel_id:
        return False, "Channel ID is required"
    if not _CHANNEL_ID.match(channel_id):
        return False, "Channel ID should look like C01ABC234 (or D.../G... for DMs and private channels)"
    return True, ""


def validate_slack_user_ids(ids: str) -> tuple[bool, str]:
    """Validate comma-separated Slack user IDs."""
    if not ids:
        return False, "At least one user ID is required"

    parts = [uid.strip() for uid in ids.split(",") if uid.strip()]
    if not parts:
        return False, "At least one user ID is required"

    for uid in parts:
        if not uid.startswith(("U", "W")):
            return False, f"User ID '{uid}' should start with 'U' or 'W'"
        if len(uid) < 8:
            return False, f"User ID '{uid}' appears too short"

    return True, ""


def validate_authorization_code(code: str) -> tuple[bool, str]:
    if not code:
        return False, "Authorization code is required"
    if any(char.isspace() for char in code):
        return False, "Authorization code cannot contain whitespace"
    return True, ""
