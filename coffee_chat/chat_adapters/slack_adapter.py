"""Slack adapter using the official Slack SDK."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from .i_chat_adapter import IChatAdapter
from ..core.errors import SlackError
from ..core.models import InboundMessage

LOGGER = logging.getLogger(__name__)


class SlackAdapter(IChatAdapter):
    """Polls one Slack conversation and replies to users over direct messages."""

    def __init__(
        self,
        bot_token: str,
        channel_id: str,
        web_client: Optional[AsyncWebClient] = None,
    ) -> None:
        self._web_client = web_client or AsyncWebClient(token=bot_token)
        self._channel_id = channel_id
        self._dm_channels: Dict[str, str] = {}

    async def send_message(self, recipient: str, text: str) -> None:
        channel = await self._resolve_dm_channel(recipient)
        try:
            await self._web_client.chat_postMessage(channel=channel, text=text)
        except SlackApiError as exc:
            raise SlackError(f"Failed to send Slack message: {exc}") from exc

    async def poll_recent(self, limit: int) -> List[InboundMessage]:
        try:
            result = await self._web_client.conversations_history(channel=self._channel_id, limit=limit)
        except SlackApiError as exc:
            raise SlackError(f"Failed to read Slack history: {exc}") from exc

        messages = []
        for raw in result.get("messages") or []:
            message = self._to_inbound(raw)
            if message is not None:
                messages.append(message)
        return messages

    async def close(self) -> None:
        session = getattr(self._web_client, "session", None)
        if session is not None and not session.closed:
            await session.close()

    async def _resolve_dm_channel(self, recipient: str) -> str:
        # Channel and DM ids can be used as-is; user ids need a DM opened first.
        if not recipient.startswith(("U", "W")):
            return recipient
        cached = self._dm_channels.get(recipient)
        if cached:
            return cached
        try:
            result = await self._web_client.conversations_open(users=recipient)
        except SlackApiError as exc:
            raise SlackError(f"Failed to open DM with {recipient}: {exc}") from exc
        channel_id = (result.get("channel") or {}).get("id")
        if not channel_id:
            raise SlackError(f"Slack returned no DM channel for {recipient}")
        self._dm_channels[recipient] = channel_id
        return channel_id

    @staticmethod
    def _to_inbound(raw: Dict[str, Any]) -> Optional[InboundMessage]:
        subtype = raw.get("subtype")
        bot_id = raw.get("bot_id")
        if subtype == "bot_message" or bot_id:
            LOGGER.debug("Ignoring Slack message with subtype %s, bot_id %s", subtype, bot_id)
            return None
        ts = raw.get("ts")
        user = raw.get("user")
        if not ts or not user:
            return None
        return InboundMessage(
            id=ts,
            sender=user,
            text=raw.get("text") or "",
            timestamp=datetime.fromtimestamp(float(ts), tz=timezone.utc),
        )
