"""Configuration loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("~/.coffee-chat").expanduser()
CONFIG_DIR_ENV = "COFFEE_CHAT_HOME"
ENV_FILE_NAME = ".env"
SETTINGS_FILE = "settings.yaml"
DATABASE_FILE = "coffee_network.db"


@dataclass
class CalendarCredentials:
    client_id: str
    client_secret: str
    redirect_uri: str
    access_token: str | None = None
    refresh_token: str | None = None


@dataclass
class Config:
    slack_bot_token: str
    slack_channel_id: str
    owner_user_ids: list[str]
    config_dir: Path
    database_path: Path
    openai_api_key: str | None = None
    openai_model: str = "gpt-3.5-turbo"
    calendar: CalendarCredentials | None = None
    timezone_name: str | None = None
    poll_interval_seconds: float = 3.0
    poll_limit: int = 10
    recent_window_seconds: float = 30.0
    session_ttl_minutes: float = 10.0
    reminder_hour: int = 9
    summary_window_days: int = 30
    calendar_days_ahead: int = 14
    meeting_duration_minutes: int = 60
    sweep_interval_seconds: float = 3600.0

    @property
    def owner_id(self) -> str:
        """Recipient for reminders; the first configured owner."""
        return self.owner_user_ids[0]

    @property
    def tz(self) -> tzinfo:
        if self.timezone_name:
            return ZoneInfo(self.timezone_name)
        local = datetime.now().astimezone().tzinfo
        return local  # type: ignore[return-value]

    def now(self) -> datetime:
        return datetime.now(self.tz)


def resolve_config_dir(config_dir: Path | str | None) -> Path:
    """Resolve and validate the directory containing .env + settings.yaml."""
    raw = config_dir or os.getenv(CONFIG_DIR_ENV)
    target = (Path(raw).expanduser() if raw else DEFAULT_CONFIG_DIR).resolve()
    if not target.exists():
        raise ConfigError(
            f"Config directory {target} does not exist. "
            "Create it and add a .env file (see `coffee-chat config slack`)."
        )
    if not target.is_dir():
        raise ConfigError(f"Config directory {target} is not a directory")
    return target


def load_config(config_dir: Path | str | None = None) -> Config:
    """Load Coffee Chat configuration from the provided or default directory."""
    root = resolve_config_dir(config_dir)
    return _load_config_from_root(root)


def _load_config_from_root(root: Path) -> Config:
    _load_env_file(root / ENV_FILE_NAME)
    settings = _load_settings(root / SETTINGS_FILE)

    slack_bot_token = _require_env("SLACK_BOT_TOKEN")
    slack_channel_id = _require_env("SLACK_CHANNEL_ID")
    owner_user_ids = _load_owner_ids()

    database_path = Path(settings.pop("database_path", root / DATABASE_FILE)).expanduser()
    if not database_path.is_absolute():
        database_path = (root / database_path).resolve()

    timezone_name = settings.pop("timezone", None)
    if timezone_name:
        _validate_timezone(timezone_name)

    config = Config(
        slack_bot_token=slack_bot_token,
        slack_channel_id=slack_channel_id,
        owner_user_ids=owner_user_ids,
        config_dir=root,
        database_path=database_path,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL") or "gpt-3.5-turbo",
        calendar=_load_calendar_credentials(),
        timezone_name=timezone_name,
    )
    _apply_tunables(config, settings)
    if settings:
        LOGGER.warning("Ignoring unknown settings in %s: %s", SETTINGS_FILE, ", ".join(sorted(settings)))
    return config


def _load_env_file(path: Path) -> None:
    if not path.exists():
        LOGGER.warning("No .env file found at %s; relying on shell environment.", path)
        return
    load_dotenv(dotenv_path=path, override=False)


def _load_settings(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings.yaml structure at {path}")
    return dict(data)


_TUNABLES = {
    "poll_interval_seconds": float,
    "poll_limit": int,
    "recent_window_seconds": float,
    "session_ttl_minutes": float,
    "reminder_hour": int,
    "summary_window_days": int,
    "calendar_days_ahead": int,
    "meeting_duration_minutes": int,
    "sweep_interval_seconds": float,
}


def _apply_tunables(config: Config, settings: Dict[str, Any]) -> None:
    for name, cast in _TUNABLES.items():
        if name not in settings:
            continue
        raw = settings.pop(name)
        try:
            value = cast(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Setting {name} must be a number, got {raw!r}") from exc
        if value <= 0 and name != "reminder_hour":
            raise ConfigError(f"Setting {name} must be positive")
        setattr(config, name, value)
    if not 0 <= config.reminder_hour <= 23:
        raise ConfigError("Setting reminder_hour must be between 0 and 23")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} is not set")
    return value


def _load_owner_ids() -> list[str]:
    raw_value = os.getenv("SLACK_OWNER_USER_IDS") or os.getenv("SLACK_OWNER_USER_ID")
    if not raw_value:
        raise ConfigError("SLACK_OWNER_USER_IDS (or SLACK_OWNER_USER_ID) must be set")
    ids = [uid.strip() for uid in raw_value.split(",") if uid.strip()]
    if not ids:
        raise ConfigError("SLACK_OWNER_USER_IDS does not contain any user IDs")
    return ids


def _load_calendar_credentials() -> Optional[CalendarCredentials]:
    client_id = os.getenv("GOOGLE_CALENDAR_CLIENT_ID")
    client_secret = os.getenv("GOOGLE_CALENDAR_CLIENT_SECRET")
    redirect_uri = os.getenv("GOOGLE_CALENDAR_REDIRECT_URI")
    if not (client_id and client_secret and redirect_uri):
        LOGGER.info("Google Calendar not configured; drafts will use the fallback availability text.")
        return None
    return CalendarCredentials(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
        access_token=os.getenv("GOOGLE_CALENDAR_ACCESS_TOKEN") or None,
        refresh_token=os.getenv("GOOGLE_CALENDAR_REFRESH_TOKEN") or None,
    )


def _validate_timezone(name: str) -> None:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown timezone {name!r}") from exc
