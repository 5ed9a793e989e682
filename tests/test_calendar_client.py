"""Tests for calendar availability."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from coffee_chat.core.config import CalendarCredentials
from coffee_chat.core.errors import CalendarError
from coffee_chat.integrations.calendar_client import CalendarClient, compute_free_slots

# Friday afternoon.
NOW = datetime(2026, 10, 16, 15, 0, tzinfo=timezone.utc)


def _event(start: str, end: str) -> dict:
    return {"start": {"dateTime": start}, "end": {"dateTime": end}}


def _response(status: int, payload: dict) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.json.return_value = payload
    response.text = str(payload)
    return response


class TestComputeFreeSlots:
    """Slot computation over busy events."""

    def test_skips_today_and_weekends(self):
        slots = compute_free_slots([], NOW, days_ahead=4, duration_minutes=60, tz=timezone.utc)

        assert [(s.date, s.start_time, s.day_of_week) for s in slots] == [
            ("2026-10-19", "09:00", "Monday"),
            ("2026-10-20", "09:00", "Tuesday"),
        ]

    def test_gaps_between_events(self):
        events = [
            _event("2026-10-19T09:00:00Z", "2026-10-19T10:30:00Z"),
            _event("2026-10-19T11:00:00Z", "2026-10-19T17:00:00Z"),
        ]

        slots = compute_free_slots(events, NOW, days_ahead=3, duration_minutes=60, tz=timezone.utc)

        assert [(s.start_time, s.end_time) for s in slots] == [("17:00", "18:00")]

    def test_gap_shorter_than_duration_is_skipped(self):
        events = [_event("2026-10-19T09:30:00Z", "2026-10-19T19:00:00Z")]

        slots = compute_free_slots(events, NOW, days_ahead=3, duration_minutes=60, tz=timezone.utc)

        assert slots == []

    def test_all_day_events_are_ignored(self):
        events = [{"start": {"date": "2026-10-19"}, "end": {"date": "2026-10-20"}}]

        slots = compute_free_slots(events, NOW, days_ahead=3, duration_minutes=60, tz=timezone.utc)

        assert len(slots) == 1

    def test_result_is_capped(self):
        slots = compute_free_slots([], NOW, days_ahead=30, duration_minutes=60, tz=timezone.utc)

        assert len(slots) == 10


class TestCalendarClient:
    """REST calls with a mocked HTTP session."""

    @pytest.fixture
    def credentials(self):
        return CalendarCredentials(
            client_id="client",
            client_secret="secret",
            redirect_uri="http://localhost/callback",
            access_token="stale",
            refresh_token="refresh",
        )

    def test_authorization_url(self, credentials):
        url = CalendarClient(credentials, timezone.utc, session=MagicMock()).authorization_url()

        assert url.startswith("https://accounts.google.com/o/oauth2/v2/auth?")
        assert "access_type=offline" in url
        assert "client_id=client" in url

    def test_refreshes_expired_token(self, credentials):
        session = MagicMock()
        session.get.side_effect = [
            _response(401, {}),
            _response(200, {"items": [_event("2026-10-19T09:00:00Z", "2026-10-19T19:00:00Z")]}),
        ]
        session.post.return_value = _response(200, {"access_token": "fresh"})
        client = CalendarClient(credentials, timezone.utc, session=session)

        slots = client.find_slots_sync(days_ahead=3, now=NOW)

        assert credentials.access_token == "fresh"
        assert slots == []
        assert session.get.call_count == 2

    def test_api_error_raises(self, credentials):
        session = MagicMock()
        session.get.return_value = _response(500, {"error": "backend"})
        client = CalendarClient(credentials, timezone.utc, session=session)

        with pytest.raises(CalendarError):
            client.find_slots_sync(now=NOW)

    def test_unconfigured_client_raises(self, credentials):
        credentials.access_token = None
        credentials.refresh_token = None
        client = CalendarClient(credentials, timezone.utc, session=MagicMock())

        with pytest.raises(CalendarError):
            client.find_slots_sync(now=NOW)

    def test_exchange_code_stores_tokens(self, credentials):
        session = MagicMock()
        session.post.return_value = _response(200, {"access_token": "new", "refresh_token": "new-refresh"})
        client = CalendarClient(credentials, timezone.utc, session=session)

        client.exchange_code("auth-code")

        assert credentials.access_token == "new"
        assert credentials.refresh_token == "new-refresh"
        assert session.post.call_args.kwargs["data"]["grant_type"] == "authorization_code"
