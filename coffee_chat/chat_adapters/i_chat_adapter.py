"""Chat adapter abstraction."""

from __future__ import annotations

import abc
from typing import List

from ..core.models import InboundMessage


class IChatAdapter(abc.ABC):
    """Abstraction for message transports (Slack, iMessage bridges, etc.)."""

    @abc.abstractmethod
    async def send_message(self, recipient: str, text: str) -> None:
        """Deliver ``text`` to ``recipient``."""

    @abc.abstractmethod
    async def poll_recent(self, limit: int) -> List[InboundMessage]:
        """Return up to ``limit`` recent inbound messages, newest first."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
