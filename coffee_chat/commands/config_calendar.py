"""Google Calendar authorization command."""

from __future__ import annotations

import logging

from ..core.config import load_config
from ..core.errors import CalendarError, ConfigError
from ..integrations.calendar_client import CalendarClient
from .utils import get_env_file_path, update_env_values
from .validators import validate_authorization_code

LOGGER = logging.getLogger(__name__)


def run_config_calendar_command(args) -> int:
    """Print the authorization URL, or exchange a code for tokens."""
    config_dir = getattr(args, "config_dir", None)
    try:
        config = load_config(config_dir)
    except ConfigError as exc:
        print(f"Error: {exc}")
        return 1

    if config.calendar is None:
        print("Google Calendar is not configured.")
        print(
            "Set GOOGLE_CALENDAR_CLIENT_ID, GOOGLE_CALENDAR_CLIENT_SECRET and "
            f"GOOGLE_CALENDAR_REDIRECT_URI in {get_env_file_path(config_dir)} first."
        )
        return 1

    client = CalendarClient(config.calendar, config.tz)
    code = (getattr(args, "code", None) or "").strip()
    if not code:
        print("\nOpen this URL, approve access, then run:")
        print("  coffee-chat config calendar <CODE>\n")
        print(client.authorization_url())
        return 0

    is_valid, error = validate_authorization_code(code)
    if not is_valid:
        print(f"Error: {error}")
        return 1

    try:
        client.exchange_code(code)
    except CalendarError as exc:
        LOGGER.error("Calendar authorization failed: %s", exc)
        print(f"Error: {exc}")
        return 1

    values = {}
    if config.calendar.access_token:
        values["GOOGLE_CALENDAR_ACCESS_TOKEN"] = config.calendar.access_token
    if config.calendar.refresh_token:
        values["GOOGLE_CALENDAR_REFRESH_TOKEN"] = config.calendar.refresh_token
    env_file = get_env_file_path(config_dir)
    update_env_values(env_file, "Google Calendar", values)
    print(f"✓ Calendar tokens saved to {env_file}")
    return 0
