"""Reply plumbing shared by command handlers."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from .. import messages
from .context import CommandContext

SendMessageFn = Callable[[str, str], Awaitable[None]]


class BaseCommandHandler:
    """Handlers answer whoever sent the command, over the router's transport."""

    def __init__(self, send_message: Optional[SendMessageFn]) -> None:
        self._send_message = send_message

    async def _reply(self, context: CommandContext, text: str) -> None:
        if self._send_message is None:
            raise RuntimeError(f"Cannot reply to {context.sender}: no send_message bound")
        await self._send_message(context.sender, text)

    async def _reply_error(self, context: CommandContext, text: str) -> None:
        await self._reply(context, messages.error(text))
