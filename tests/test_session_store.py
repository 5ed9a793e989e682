"""Tests for SessionStore pending interaction tracking."""

from __future__ import annotations

from datetime import timedelta

import pytest

from coffee_chat.core.conversation import SessionStore
from coffee_chat.core.models import Contact


class TestSessionStore:
    """Test cases for SessionStore."""

    @pytest.fixture
    def store(self, clock):
        return SessionStore(ttl=timedelta(minutes=10), clock=clock)

    @pytest.fixture
    def contact(self, clock):
        return Contact(name="Sarah", event="conference", met_at=clock())

    def test_begin_then_peek(self, store, contact, clock):
        interaction = store.begin("U1", contact, "Hi Sarah!")

        assert store.peek("U1") == interaction
        assert interaction.created_at == clock()
        assert interaction.expires_at == clock() + timedelta(minutes=10)

    def test_peek_unknown_sender(self, store):
        assert store.peek("nobody") is None

    def test_begin_replaces_existing(self, store, contact):
        store.begin("U1", contact, "first draft")
        store.begin("U1", contact, "second draft")

        assert store.peek("U1").draft_message == "second draft"
        assert len(store) == 1

    def test_senders_are_independent(self, store, contact):
        store.begin("U1", contact, "draft one")
        store.begin("U2", contact, "draft two")

        store.end("U1")

        assert store.peek("U1") is None
        assert store.peek("U2").draft_message == "draft two"

    def test_end_is_idempotent(self, store, contact):
        store.begin("U1", contact, "draft")

        store.end("U1")
        store.end("U1")

        assert store.peek("U1") is None

    def test_expired_entry_is_never_returned(self, store, contact, clock):
        store.begin("U1", contact, "draft")
        clock.advance(minutes=10)

        assert store.peek("U1") is None
        assert len(store) == 0

    def test_entry_alive_just_before_expiry(self, store, contact, clock):
        store.begin("U1", contact, "draft")
        clock.advance(minutes=9, seconds=59)

        assert store.peek("U1") is not None

    def test_begin_after_expiry_starts_fresh(self, store, contact, clock):
        store.begin("U1", contact, "old draft")
        clock.advance(minutes=30)

        interaction = store.begin("U1", contact, "new draft")

        assert store.peek("U1") == interaction
        assert interaction.expires_at == clock() + timedelta(minutes=10)

    def test_purge_expired(self, store, contact, clock):
        store.begin("U1", contact, "draft")
        clock.advance(minutes=5)
        store.begin("U2", contact, "draft")
        clock.advance(minutes=6)

        assert store.purge_expired() == 1
        assert store.peek("U2") is not None

    def test_clear_all(self, store, contact):
        store.begin("U1", contact, "draft")
        store.begin("U2", contact, "draft")

        assert store.clear_all() == 2
        assert len(store) == 0
