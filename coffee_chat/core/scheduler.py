"""In-process one-shot reminder scheduler."""

from __future__ import annotations

import asyncio
import itertools
import logging
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Awaitable, Callable, Dict, List, Optional, Set

from .models import DirectiveKind, ReminderStatus, ScheduleDirective, ScheduledReminder

LOGGER = logging.getLogger(__name__)

ReminderAction = Callable[[int, str], Awaitable[None]]
Clock = Callable[[], datetime]

DEFAULT_SWEEP_INTERVAL = 3600.0
DEFAULT_REMINDER_HOUR = 9


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def tomorrow_morning(now: datetime, hour: int = DEFAULT_REMINDER_HOUR) -> datetime:
    return (now + timedelta(days=1)).replace(hour=hour, minute=0, second=0, microsecond=0)


class ReminderScheduler:
    """Registers one-shot reminders and fires each of them at most once.

    Timers are ``loop.call_later`` handles on the running event loop. A reminder
    is claimed (moved from PENDING to SENT) under the lock before its action
    runs, so a timer, ``fire_now`` and ``cancel`` racing on the same id resolve
    to a single outcome. Reminders live only in memory.
    """

    def __init__(
        self,
        action: ReminderAction,
        *,
        clock: Clock = _utc_now,
        reminder_hour: int = DEFAULT_REMINDER_HOUR,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
    ) -> None:
        self._action = action
        self._clock = clock
        self._reminder_hour = reminder_hour
        self._sweep_interval = sweep_interval
        self._reminders: Dict[str, ScheduledReminder] = {}
        self._lock = RLock()
        self._sequence = itertools.count(1)
        self._tasks: Set[asyncio.Task] = set()
        self._sweep_task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Start the periodic sweep of finished reminders."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def shutdown(self) -> None:
        """Cancel every timer and drop all reminders, pending ones included."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            await asyncio.gather(self._sweep_task, return_exceptions=True)
            self._sweep_task = None
        with self._lock:
            for reminder in self._reminders.values():
                if reminder.handle is not None:
                    reminder.handle.cancel()
                    reminder.handle = None
            dropped = sum(1 for r in self._reminders.values() if r.status == ReminderStatus.PENDING)
            self._reminders.clear()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if dropped:
            LOGGER.warning("Discarded %d pending reminder(s) on shutdown", dropped)

    async def schedule_at(self, contact_id: int, message: str, fire_at: datetime) -> str:
        """
        Register a one-shot reminder for ``fire_at``.

        A ``fire_at`` that is not in the future fires before this call returns
        and the reminder is recorded as SENT.

        Returns:
            The new reminder id
        """
        now = self._clock()
        reminder = ScheduledReminder(
            id=self._generate_reminder_id(contact_id, now),
            contact_id=contact_id,
            message=message,
            fire_at=max(fire_at, now),
            created_at=now,
        )
        with self._lock:
            self._reminders[reminder.id] = reminder

        delay = (reminder.fire_at - now).total_seconds()
        if delay <= 0:
            LOGGER.info("Reminder %s due immediately", reminder.id)
            await self._fire(reminder.id)
            return reminder.id

        loop = asyncio.get_running_loop()
        with self._lock:
            if reminder.status == ReminderStatus.PENDING:
                reminder.handle = loop.call_later(delay, self._on_timer, reminder.id)
        LOGGER.info("Reminder %s scheduled for %s", reminder.id, reminder.fire_at.isoformat())
        return reminder.id

    async def schedule_directive(
        self, contact_id: int, message: str, directive: ScheduleDirective
    ) -> Optional[str]:
        """Schedule according to a classified reply; None when no reminder is wanted."""
        fire_at = self.resolve_fire_time(directive)
        if fire_at is None:
            LOGGER.info("No reminder requested for contact %s", contact_id)
            return None
        return await self.schedule_at(contact_id, message, fire_at)

    def resolve_fire_time(self, directive: ScheduleDirective) -> Optional[datetime]:
        now = self._clock()
        if directive.kind is DirectiveKind.NOW:
            return now
        if directive.kind is DirectiveKind.TOMORROW:
            return tomorrow_morning(now, self._reminder_hour)
        if directive.kind is DirectiveKind.CUSTOM_AT and directive.at is not None:
            return directive.at
        if directive.kind is DirectiveKind.NO_REMINDER:
            return None
        # Unrecognized replies should have been re-prompted by the caller.
        LOGGER.warning("Scheduling unrecognized directive %s as tomorrow morning", directive.kind.value)
        return tomorrow_morning(now, self._reminder_hour)

    def cancel(self, reminder_id: str) -> bool:
        with self._lock:
            reminder = self._reminders.get(reminder_id)
            if reminder is None or reminder.status != ReminderStatus.PENDING:
                return False
            reminder.status = ReminderStatus.CANCELLED
            if reminder.handle is not None:
                reminder.handle.cancel()
                reminder.handle = None
        LOGGER.info("Reminder %s cancelled", reminder_id)
        return True

    async def fire_now(self, reminder_id: str) -> bool:
        """Fire a pending reminder ahead of its time; False if it is not pending."""
        return await self._fire(reminder_id)

    def get(self, reminder_id: str) -> Optional[ScheduledReminder]:
        with self._lock:
            return self._reminders.get(reminder_id)

    def pending_reminders(self) -> List[ScheduledReminder]:
        with self._lock:
            return [r for r in self._reminders.values() if r.status == ReminderStatus.PENDING]

    def reminders_for_contact(self, contact_id: int) -> List[ScheduledReminder]:
        with self._lock:
            return [r for r in self._reminders.values() if r.contact_id == contact_id]

    def sweep(self) -> int:
        """Remove every reminder that is no longer pending."""
        with self._lock:
            finished = [rid for rid, r in self._reminders.items() if r.status != ReminderStatus.PENDING]
            for rid in finished:
                del self._reminders[rid]
        if finished:
            LOGGER.info("Cleaned up %d completed reminder(s)", len(finished))
        return len(finished)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reminders)

    def _on_timer(self, reminder_id: str) -> None:
        task = asyncio.create_task(self._fire(reminder_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _claim(self, reminder_id: str) -> Optional[ScheduledReminder]:
        with self._lock:
            reminder = self._reminders.get(reminder_id)
            if reminder is None or reminder.status != ReminderStatus.PENDING:
                return None
            reminder.status = ReminderStatus.SENT
            if reminder.handle is not None:
                reminder.handle.cancel()
                reminder.handle = None
            return reminder

    async def _fire(self, reminder_id: str) -> bool:
        reminder = self._claim(reminder_id)
        if reminder is None:
            LOGGER.debug("Reminder %s is not pending; skipping fire", reminder_id)
            return False
        LOGGER.info("Executing reminder %s for contact %s", reminder.id, reminder.contact_id)
        try:
            await self._action(reminder.contact_id, reminder.message)
        except Exception:
            LOGGER.exception("Reminder %s failed to deliver; not retrying", reminder.id)
        return True

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()

    def _generate_reminder_id(self, contact_id: int, now: datetime) -> str:
        return f"reminder_{contact_id}_{int(now.timestamp() * 1000)}_{next(self._sequence)}"
