"""Commands module for the coffee-chat CLI."""

from .config_calendar import run_config_calendar_command
from .config_slack import run_config_slack_command
from .summary import run_summary_command

__all__ = [
    "run_config_calendar_command",
    "run_config_slack_command",
    "run_summary_command",
]
