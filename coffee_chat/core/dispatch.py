"""Deliver fired reminders to the owner."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..chat_adapters.i_chat_adapter import IChatAdapter
    from ..storage.contact_store import ContactStore

LOGGER = logging.getLogger(__name__)


class ReminderDispatcher:
    """Scheduler action that sends a reminder for a stored contact.

    Transport errors propagate so the scheduler can log them; the reminder is
    not retried.
    """

    def __init__(self, contact_store: ContactStore, chat_adapter: IChatAdapter, recipient: str) -> None:
        self._contact_store = contact_store
        self._chat_adapter = chat_adapter
        self._recipient = recipient

    async def __call__(self, contact_id: int, message: str) -> None:
        contact = await self._contact_store.get_contact(contact_id)
        if contact is None:
            LOGGER.warning("Contact %s no longer exists; dropping reminder", contact_id)
            return
        await self._chat_adapter.send_message(self._recipient, message)
        LOGGER.info("Sent follow-up reminder for %s", contact.name)
