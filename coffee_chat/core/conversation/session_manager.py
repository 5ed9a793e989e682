"""Hold the pending interaction for each sender."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Callable, Dict, Optional

from ..models import Contact, PendingInteraction

LOGGER = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=10)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Thread-safe in-memory store with at most one pending interaction per sender.

    Expiry is lazy: entries past their TTL stay in memory until the next
    ``peek`` for that sender (or a ``purge_expired`` call) removes them, but
    they are never returned.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Clock = _utc_now) -> None:
        self._pending: Dict[str, PendingInteraction] = {}
        self._lock = RLock()
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def begin(self, sender: str, contact: Optional[Contact], draft_message: Optional[str]) -> PendingInteraction:
        """Install a new pending interaction, replacing any existing one."""
        now = self._clock()
        interaction = PendingInteraction(
            sender=sender,
            contact=contact,
            draft_message=draft_message,
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            replaced = self._pending.get(sender)
            self._pending[sender] = interaction
        if replaced is not None:
            LOGGER.info("Replaced pending interaction for %s", sender)
        else:
            LOGGER.debug("Pending interaction started for %s", sender)
        return interaction

    def peek(self, sender: str) -> Optional[PendingInteraction]:
        with self._lock:
            interaction = self._pending.get(sender)
            if interaction is None:
                return None
            if interaction.is_expired(self._clock()):
                del self._pending[sender]
                LOGGER.info("Pending interaction for %s expired", sender)
                return None
            return interaction

    def end(self, sender: str) -> None:
        with self._lock:
            self._pending.pop(sender, None)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, item in self._pending.items() if item.is_expired(now)]
            for key in expired:
                del self._pending[key]
        return len(expired)

    def clear_all(self) -> int:
        """Drop every pending interaction (used on shutdown)."""
        with self._lock:
            count = len(self._pending)
            self._pending.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
