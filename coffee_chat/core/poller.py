"""Polls the chat transport and feeds new owner messages to the router."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from . import messages
from .errors import SlackError
from .models import InboundMessage

if TYPE_CHECKING:
    from ..chat_adapters.i_chat_adapter import IChatAdapter
    from .router import Router

LOGGER = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 3.0
DEFAULT_LIMIT = 10
DEFAULT_RECENT_WINDOW_SECONDS = 30.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessagePoller:
    """Reads recent channel history on an interval and routes unseen messages.

    Each poll handles messages newer than the last processed id, oldest first,
    skipping anything from a non-owner or older than the recency window. On the
    first poll every fetched message counts as unseen, so only history inside
    the recency window is replayed at startup. A tick that starts while the
    previous one is still running is skipped.
    """

    def __init__(
        self,
        chat_adapter: IChatAdapter,
        router: Router,
        owner_ids: Iterable[str],
        *,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        limit: int = DEFAULT_LIMIT,
        recent_window: float = DEFAULT_RECENT_WINDOW_SECONDS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._chat_adapter = chat_adapter
        self._router = router
        self._owner_ids = frozenset(owner_ids)
        self._interval = interval
        self._limit = limit
        self._recent_window = timedelta(seconds=recent_window)
        self._clock = clock
        self._is_processing = False
        self.last_processed_id: Optional[str] = None

    async def run(self, stop_event: asyncio.Event) -> None:
        LOGGER.info("Polling for messages every %.1fs", self._interval)
        while not stop_event.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue
        LOGGER.info("Message polling stopped")

    async def poll_once(self) -> int:
        """Run a single poll tick and return how many messages were routed."""
        if self._is_processing:
            LOGGER.debug("Previous poll still running; skipping tick")
            return 0
        self._is_processing = True
        try:
            try:
                recent = await self._chat_adapter.poll_recent(self._limit)
            except SlackError:
                LOGGER.exception("Error polling messages")
                return 0
            return await self._process(recent)
        finally:
            self._is_processing = False

    async def _process(self, recent: List[InboundMessage]) -> int:
        # Transports return newest first.
        unseen = self._unseen(list(recent))
        if not unseen:
            return 0
        if self.last_processed_id is None:
            LOGGER.info("Initialized message polling at %s", unseen[0].id)
        self.last_processed_id = unseen[0].id

        routed = 0
        cutoff = self._clock() - self._recent_window
        for message in reversed(unseen):
            if message.sender not in self._owner_ids:
                LOGGER.debug("Ignoring message %s from non-owner %s", message.id, message.sender)
                continue
            if message.timestamp < cutoff:
                LOGGER.debug("Ignoring stale message %s", message.id)
                continue
            await self._route(message)
            routed += 1
        return routed

    def _unseen(self, newest_first: List[InboundMessage]) -> List[InboundMessage]:
        unseen: List[InboundMessage] = []
        for message in newest_first:
            if message.id == self.last_processed_id:
                break
            unseen.append(message)
        return unseen

    async def _route(self, message: InboundMessage) -> None:
        LOGGER.info("Processing message from %s: %s", message.sender, message.text)
        try:
            await self._router.handle_message(message)
        except Exception:
            LOGGER.exception("Error processing message %s", message.id)
            await self._notify_failure(message)

    async def _notify_failure(self, message: InboundMessage) -> None:
        try:
            await self._chat_adapter.send_message(message.sender, messages.processing_failed(message.text))
        except SlackError:
            LOGGER.exception("Failed to report processing error to %s", message.sender)
