"""Handlers for contact listing commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .. import messages
from ..errors import StorageError
from .base import BaseCommandHandler, SendMessageFn
from .context import CommandContext

if TYPE_CHECKING:
    from ...storage.contact_store import ContactStore

LOGGER = logging.getLogger(__name__)


class ContactCommandHandler(BaseCommandHandler):
    """Read-only views over stored contacts."""

    def __init__(self, contact_store: ContactStore, window_days: int, send_message: SendMessageFn) -> None:
        super().__init__(send_message)
        self._contact_store = contact_store
        self._window_days = window_days

    async def handle_summary(self, context: CommandContext) -> None:
        LOGGER.info("Executing summary command for %s", context.sender)
        try:
            summary = await self._contact_store.get_summary(self._window_days)
        except StorageError:
            LOGGER.exception("Error getting summary")
            await self._reply_error(context, messages.SUMMARY_FAILED)
            return
        await self._reply(context, messages.summary(summary))
