"""SQLite-backed contact storage."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from ..core.errors import StorageError
from ..core.models import Contact, ContactSummary, ContactUpdate, FollowUpStatus

LOGGER = logging.getLogger(__name__)

RECENT_LIMIT = 10

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS contacts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    event TEXT NOT NULL,
    context TEXT,
    met_at TIMESTAMP NOT NULL,
    phone_number TEXT,
    email TEXT,
    follow_up_status TEXT NOT NULL DEFAULT 'pending'
        CHECK (follow_up_status IN ('pending', 'scheduled', 'sent', 'completed')),
    scheduled_follow_up TIMESTAMP,
    last_interaction TIMESTAMP,
    notes TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_contacts_met_at ON contacts(met_at);
"""

_UPDATABLE_COLUMNS = frozenset(
    {"follow_up_status", "scheduled_follow_up", "last_interaction", "notes", "phone_number", "email"}
)


def _to_db(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, FollowUpStatus):
        return value.value
    return value


def _from_db(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class ContactStore:
    """Persists contacts in SQLite; async methods run the queries off the event loop."""

    def __init__(self, db_path: Path | str, busy_timeout_ms: int = 10000) -> None:
        self._db_path = Path(db_path)
        self._busy_timeout_ms = busy_timeout_ms

    @property
    def db_path(self) -> Path:
        return self._db_path

    def initialize(self) -> None:
        """Create the database file and schema if needed."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connection() as conn:
                conn.execute("PRAGMA journal_mode=WAL")
                conn.executescript(SCHEMA_SQL)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Failed to initialize database at {self._db_path}: {exc}") from exc
        LOGGER.info("Contact database ready at %s", self._db_path)

    async def add_contact(self, contact: Contact) -> int:
        return await asyncio.to_thread(self.add_contact_sync, contact)

    async def update_contact(self, contact_id: int, update: ContactUpdate) -> None:
        await asyncio.to_thread(self.update_contact_sync, contact_id, update)

    async def get_contact(self, contact_id: int) -> Optional[Contact]:
        return await asyncio.to_thread(self.get_contact_sync, contact_id)

    async def get_summary(self, window_days: int = 30) -> ContactSummary:
        return await asyncio.to_thread(self.get_summary_sync, window_days)

    def add_contact_sync(self, contact: Contact) -> int:
        with self._guard("add contact"), self._connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO contacts (
                    name, event, context, met_at, phone_number, email,
                    follow_up_status, scheduled_follow_up, last_interaction, notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    contact.name,
                    contact.event,
                    contact.context,
                    _to_db(contact.met_at),
                    contact.phone_number,
                    contact.email,
                    _to_db(contact.follow_up_status),
                    _to_db(contact.scheduled_follow_up),
                    _to_db(contact.last_interaction),
                    contact.notes,
                ),
            )
            contact_id = int(cursor.lastrowid)
        LOGGER.info("Saved contact %s (id %d)", contact.name, contact_id)
        return contact_id

    def update_contact_sync(self, contact_id: int, update: ContactUpdate) -> None:
        values = update.as_fields()
        unknown = set(values) - _UPDATABLE_COLUMNS
        if unknown:
            raise StorageError(f"Cannot update columns: {', '.join(sorted(unknown))}")

        assignments = [f"{column} = ?" for column in values]
        assignments.append("updated_at = CURRENT_TIMESTAMP")
        params = [_to_db(value) for value in values.values()]
        params.append(contact_id)

        with self._guard("update contact"), self._connection() as conn:
            cursor = conn.execute(
                f"UPDATE contacts SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
            if cursor.rowcount == 0:
                LOGGER.warning("Update for unknown contact id %s ignored", contact_id)

    def get_contact_sync(self, contact_id: int) -> Optional[Contact]:
        with self._guard("read contact"), self._connection() as conn:
            row = conn.execute("SELECT * FROM contacts WHERE id = ?", (contact_id,)).fetchone()
        return self._row_to_contact(row) if row else None

    def get_summary_sync(self, window_days: int = 30) -> ContactSummary:
        since = datetime.now(timezone.utc) - timedelta(days=window_days)
        with self._guard("summarize contacts"), self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM contacts WHERE met_at >= ? ORDER BY met_at DESC LIMIT ?",
                (_to_db(since), RECENT_LIMIT),
            ).fetchall()
            total = conn.execute("SELECT COUNT(*) AS total FROM contacts").fetchone()["total"]
        return ContactSummary(total_count=int(total), recent=[self._row_to_contact(row) for row in rows])

    def get_stats(self) -> Dict[str, int]:
        week_ago = datetime.now(timezone.utc) - timedelta(days=7)
        with self._guard("read stats"), self._connection() as conn:
            total = conn.execute("SELECT COUNT(*) AS count FROM contacts").fetchone()["count"]
            recent = conn.execute(
                "SELECT COUNT(*) AS count FROM contacts WHERE met_at >= ?", (_to_db(week_ago),)
            ).fetchone()["count"]
        return {"total_contacts": int(total), "recent_contacts": int(recent)}

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(
            str(self._db_path),
            timeout=self._busy_timeout_ms / 1000,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to {action}: {exc}") from exc

    @staticmethod
    def _row_to_contact(row: sqlite3.Row) -> Contact:
        return Contact(
            id=row["id"],
            name=row["name"],
            event=row["event"],
            met_at=_from_db(row["met_at"]) or datetime.now(timezone.utc),
            follow_up_status=FollowUpStatus(row["follow_up_status"]),
            context=row["context"],
            phone_number=row["phone_number"],
            email=row["email"],
            scheduled_follow_up=_from_db(row["scheduled_follow_up"]),
            last_interaction=_from_db(row["last_interaction"]),
            notes=row["notes"],
        )
