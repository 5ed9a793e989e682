"""Google Calendar availability lookup over the REST API."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests

from ..core.config import CalendarCredentials
from ..core.errors import CalendarError
from ..core.models import TimeSlot

LOGGER = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"
CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"

DAY_START = time(9, 0)
DAY_END = time(19, 0)
MAX_SLOTS = 10
REQUEST_TIMEOUT = 15


class CalendarClient:
    """Finds free meeting slots on the user's primary Google calendar."""

    def __init__(
        self,
        credentials: CalendarCredentials,
        tz: tzinfo,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._credentials = credentials
        self._tz = tz
        self._http = session or requests.Session()

    def is_configured(self) -> bool:
        return bool(self._credentials.access_token or self._credentials.refresh_token)

    def authorization_url(self) -> str:
        params = {
            "client_id": self._credentials.client_id,
            "redirect_uri": self._credentials.redirect_uri,
            "response_type": "code",
            "scope": CALENDAR_SCOPE,
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> Dict[str, Any]:
        """Trade an authorization code for access/refresh tokens."""
        tokens = self._token_request(
            {
                "code": code,
                "client_id": self._credentials.client_id,
                "client_secret": self._credentials.client_secret,
                "redirect_uri": self._credentials.redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        self._credentials.access_token = tokens.get("access_token")
        if tokens.get("refresh_token"):
            self._credentials.refresh_token = tokens["refresh_token"]
        return tokens

    async def find_slots(self, days_ahead: int = 14, duration_minutes: int = 60) -> List[TimeSlot]:
        return await asyncio.to_thread(self.find_slots_sync, days_ahead, duration_minutes)

    def find_slots_sync(
        self,
        days_ahead: int = 14,
        duration_minutes: int = 60,
        now: Optional[datetime] = None,
    ) -> List[TimeSlot]:
        now = now or datetime.now(self._tz)
        events = self._list_events(now, now + timedelta(days=days_ahead))
        return compute_free_slots(events, now, days_ahead, duration_minutes, self._tz)

    def _list_events(self, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        if not self.is_configured():
            raise CalendarError("Google Calendar has no access or refresh token")
        params = {
            "timeMin": start.isoformat(),
            "timeMax": end.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": 250,
        }
        response = self._get_events(params)
        if response.status_code == 401 and self._credentials.refresh_token:
            LOGGER.info("Calendar access token rejected; refreshing")
            self._refresh_access_token()
            response = self._get_events(params)
        if not response.ok:
            raise CalendarError(f"Calendar API error {response.status_code}: {response.text[:200]}")
        return list(response.json().get("items") or [])

    def _get_events(self, params: Dict[str, Any]) -> requests.Response:
        headers = {"Authorization": f"Bearer {self._credentials.access_token or ''}"}
        try:
            return self._http.get(EVENTS_URL, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise CalendarError(f"Calendar request failed: {exc}") from exc

    def _refresh_access_token(self) -> None:
        tokens = self._token_request(
            {
                "refresh_token": self._credentials.refresh_token,
                "client_id": self._credentials.client_id,
                "client_secret": self._credentials.client_secret,
                "grant_type": "refresh_token",
            }
        )
        self._credentials.access_token = tokens.get("access_token")

    def _token_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._http.post(TOKEN_URL, data=data, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise CalendarError(f"Token request failed: {exc}") from exc
        if not response.ok:
            raise CalendarError(f"Token request rejected ({response.status_code}): {response.text[:200]}")
        return response.json()


def compute_free_slots(
    events: List[Dict[str, Any]],
    now: datetime,
    days_ahead: int,
    duration_minutes: int,
    tz: tzinfo,
) -> List[TimeSlot]:
    """Free slots on weekdays after today, first one per gap in 09:00-19:00."""
    busy = sorted(
        (start, end)
        for start, end in (_event_bounds(event, tz) for event in events)
        if start is not None and end is not None
    )
    duration = timedelta(minutes=duration_minutes)
    slots: List[TimeSlot] = []
    local_today = now.astimezone(tz).date()
    for offset in range(1, days_ahead + 1):
        day = local_today + timedelta(days=offset)
        if day.weekday() >= 5:
            continue
        slots.extend(_day_slots(day, busy, duration, tz))
        if len(slots) >= MAX_SLOTS:
            break
    return slots[:MAX_SLOTS]


def _day_slots(
    day: date,
    busy: List[tuple[datetime, datetime]],
    duration: timedelta,
    tz: tzinfo,
) -> List[TimeSlot]:
    day_start = datetime.combine(day, DAY_START, tzinfo=tz)
    day_end = datetime.combine(day, DAY_END, tzinfo=tz)
    slots: List[TimeSlot] = []
    cursor = day_start
    for start, end in busy:
        if start.date() != day:
            continue
        if start - cursor >= duration:
            slots.append(_slot(cursor, cursor + duration))
        cursor = max(cursor, end)
    if day_end - cursor >= duration:
        slots.append(_slot(cursor, cursor + duration))
    return slots


def _slot(start: datetime, end: datetime) -> TimeSlot:
    return TimeSlot(
        date=start.strftime("%Y-%m-%d"),
        start_time=start.strftime("%H:%M"),
        end_time=end.strftime("%H:%M"),
        day_of_week=start.strftime("%A"),
    )


def _event_bounds(event: Dict[str, Any], tz: tzinfo) -> tuple[Optional[datetime], Optional[datetime]]:
    start_raw = (event.get("start") or {}).get("dateTime")
    if not start_raw:
        return None, None
    end_raw = (event.get("end") or {}).get("dateTime") or start_raw
    start = _parse_rfc3339(start_raw).astimezone(tz)
    end = _parse_rfc3339(end_raw).astimezone(tz)
    return start, end


def _parse_rfc3339(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
