"""Handlers for pending interaction commands."""

from __future__ import annotations

import logging

from .. import messages
from ..conversation import SessionStore
from .base import BaseCommandHandler, SendMessageFn
from .context import CommandContext

LOGGER = logging.getLogger(__name__)


class SessionCommandHandler(BaseCommandHandler):
    """Implements commands that manipulate the pending interaction."""

    def __init__(self, session_store: SessionStore, send_message: SendMessageFn) -> None:
        super().__init__(send_message)
        self._session_store = session_store

    async def handle_cancel(self, context: CommandContext) -> None:
        LOGGER.info("Executing cancel command for %s", context.sender)
        self._session_store.end(context.sender)
        if context.pending is not None:
            LOGGER.info("Discarded pending draft for %s", context.sender)
            await self._reply(context, messages.CANCELLED)
        else:
            await self._reply(context, messages.READY)

    async def handle_help(self, context: CommandContext) -> None:
        await self._reply(context, messages.HELP)
