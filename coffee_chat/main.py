"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from datetime import timedelta
from pathlib import Path
from typing import Sequence

from .chat_adapters.slack_adapter import SlackAdapter
from .core import (
    Config,
    ConfigError,
    MessagePoller,
    ReminderDispatcher,
    ReminderScheduler,
    Router,
    SessionStore,
    load_config,
)
from .core.config import resolve_config_dir
from .integrations.calendar_client import CalendarClient
from .integrations.text_generation import TopicGenerator
from .storage.contact_store import ContactStore

LOGGER = logging.getLogger(__name__)


def cli(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="coffee-chat",
        description="Coffee Chat - Slack assistant for following up with people you meet",
    )
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory holding .env and settings.yaml (default: ~/.coffee-chat)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "summary",
        help="Print recent contacts from the local database",
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
    )
    config_subparsers = config_parser.add_subparsers(
        dest="config_command",
        help="Configuration options",
    )
    config_subparsers.add_parser(
        "slack",
        help="Configure Slack integration (guided setup)",
    )
    calendar_parser = config_subparsers.add_parser(
        "calendar",
        help="Authorize Google Calendar access",
    )
    calendar_parser.add_argument(
        "code",
        nargs="?",
        default=None,
        help="Authorization code returned by Google",
    )

    args = parser.parse_args(argv)

    if args.command == "summary":
        from .commands import run_summary_command

        return run_summary_command(args)
    elif args.command == "config":
        if args.config_command == "slack":
            from .commands import run_config_slack_command

            return run_config_slack_command(args)
        elif args.config_command == "calendar":
            from .commands import run_config_calendar_command

            return run_config_calendar_command(args)
        else:
            config_parser.print_help()
            return 1
    else:
        try:
            asyncio.run(_run_async(args.config_dir))
        except ConfigError as exc:
            LOGGER.error("Configuration error: %s", exc)
            return 1
        except KeyboardInterrupt:
            LOGGER.info("Interrupted by user")
            return 130
        return 0


async def _run_async(config_dir: str | Path | None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    resolved_dir = resolve_config_dir(config_dir)
    LOGGER.info("Using config directory: %s", resolved_dir)

    config: Config = load_config(resolved_dir)

    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    logging.getLogger().setLevel(log_level)

    contact_store = ContactStore(config.database_path)
    await asyncio.to_thread(contact_store.initialize)
    LOGGER.info("Contacts database ready at %s", config.database_path)

    slack_adapter = SlackAdapter(bot_token=config.slack_bot_token, channel_id=config.slack_channel_id)
    session_store = SessionStore(ttl=timedelta(minutes=config.session_ttl_minutes), clock=config.now)
    scheduler = ReminderScheduler(
        ReminderDispatcher(contact_store, slack_adapter, config.owner_id),
        clock=config.now,
        reminder_hour=config.reminder_hour,
        sweep_interval=config.sweep_interval_seconds,
    )

    calendar = None
    if config.calendar is not None:
        calendar = CalendarClient(config.calendar, config.tz)
        if not calendar.is_configured():
            LOGGER.warning("Google Calendar has no tokens; run `coffee-chat config calendar`")
            calendar = None
    topic_generator = TopicGenerator(config.openai_api_key, config.openai_model)
    if not topic_generator.is_configured():
        LOGGER.info("No OpenAI API key; drafts will not include a topic sentence")

    router = Router(
        config,
        session_store,
        scheduler,
        contact_store,
        calendar=calendar,
        topic_generator=topic_generator,
    )
    router.bind_adapter(slack_adapter)
    poller = MessagePoller(
        slack_adapter,
        router,
        config.owner_user_ids,
        interval=config.poll_interval_seconds,
        limit=config.poll_limit,
        recent_window=config.recent_window_seconds,
    )

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _request_shutdown() -> None:
        LOGGER.info("Shutdown requested")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown)
        except NotImplementedError:
            # Windows event loops before 3.11 do not support signal handlers.
            pass

    await scheduler.start()
    poll_task = asyncio.create_task(poller.run(stop_event))
    LOGGER.info("Coffee Chat started; watching channel %s", config.slack_channel_id)

    await stop_event.wait()
    await poll_task
    await scheduler.shutdown()
    cleared = session_store.clear_all()
    if cleared:
        LOGGER.info("Dropped %d pending interaction(s)", cleared)
    await slack_adapter.close()
    LOGGER.info("Shutdown complete")


if __name__ == "__main__":
    raise SystemExit(cli())
