"""Shared fixtures for command handler tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from coffee_chat.core.commands.context import CommandContext
from coffee_chat.core.conversation import SessionStore
from coffee_chat.core.models import Contact


@pytest.fixture
def session_store():
    """Create a real SessionStore for tests."""
    return SessionStore(ttl=timedelta(minutes=10))


@pytest.fixture
def pending_context(session_store):
    """CommandContext for a sender with a pending draft."""
    contact = Contact(name="Sarah", event="conference", met_at=datetime.now(timezone.utc))
    pending = session_store.begin("U123OWNER", contact, "Hi Sarah!")
    return CommandContext(sender="U123OWNER", text="cancel", pending=pending)


@pytest.fixture
def idle_context():
    return CommandContext(sender="U123OWNER", text="cancel")
