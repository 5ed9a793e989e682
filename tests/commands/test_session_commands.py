"""Tests for SessionCommandHandler."""

from __future__ import annotations

import pytest

from coffee_chat.core import messages
from coffee_chat.core.commands.session import SessionCommandHandler


class TestSessionCommands:
    """Session command handler test suite."""

    @pytest.fixture
    def handler(self, session_store, mock_send_message):
        return SessionCommandHandler(session_store=session_store, send_message=mock_send_message)

    @pytest.mark.asyncio
    async def test_cancel_discards_pending(self, handler, pending_context, session_store, mock_send_message):
        await handler.handle_cancel(pending_context)

        assert session_store.peek("U123OWNER") is None
        assert mock_send_message.messages[-1] == {"recipient": "U123OWNER", "text": messages.CANCELLED}

    @pytest.mark.asyncio
    async def test_cancel_when_idle(self, handler, idle_context, mock_send_message):
        await handler.handle_cancel(idle_context)

        assert mock_send_message.messages[-1]["text"] == messages.READY

    @pytest.mark.asyncio
    async def test_help(self, handler, idle_context, mock_send_message):
        await handler.handle_help(idle_context)

        assert '"summary"' in mock_send_message.messages[-1]["text"]
        assert '"cancel"' in mock_send_message.messages[-1]["text"]

    @pytest.mark.asyncio
    async def test_unbound_sender_raises(self, session_store, idle_context):
        handler = SessionCommandHandler(session_store=session_store, send_message=None)

        with pytest.raises(RuntimeError):
            await handler.handle_help(idle_context)
