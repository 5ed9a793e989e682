"""Print the stored contact summary."""

from __future__ import annotations

from ..core import messages
from ..core.config import load_config
from ..core.errors import ConfigError, StorageError
from ..storage.contact_store import ContactStore


def run_summary_command(args) -> int:
    try:
        config = load_config(getattr(args, "config_dir", None))
    except ConfigError as exc:
        print(f"Error: {exc}")
        return 1

    store = ContactStore(config.database_path)
    try:
        store.initialize()
        summary = store.get_summary_sync(config.summary_window_days)
        stats = store.get_stats()
    except StorageError as exc:
        print(f"Error: {exc}")
        return 1

    print(messages.summary(summary))
    print(f"\nMet in the last 7 days: {stats['recent_contacts']}")
    return 0
