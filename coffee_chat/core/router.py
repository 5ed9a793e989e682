"""Routes inbound messages through the contact follow-up conversation."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Optional

from . import messages
from .commands import CommandContext, CommandDispatcher, CommandSpec, ContactCommandHandler, SessionCommandHandler
from .config import Config
from .conversation import ResponseClassifier, SessionStore
from .errors import MissingSessionData, StorageError
from .models import (
    Contact,
    ContactUpdate,
    DirectiveKind,
    FollowUpStatus,
    InboundMessage,
    ParsedTrigger,
    PendingInteraction,
    ScheduleDirective,
)
from .scheduler import ReminderScheduler
from .trigger_parser import extract_contact_info, parse_trigger

if TYPE_CHECKING:
    from ..chat_adapters.i_chat_adapter import IChatAdapter
    from ..integrations.calendar_client import CalendarClient
    from ..integrations.text_generation import TopicGenerator
    from ..storage.contact_store import ContactStore

LOGGER = logging.getLogger(__name__)

CommandHandler = Callable[[CommandContext], Awaitable[None]]


class Router:
    """Central orchestrator of the per-sender conversation.

    A sender is either idle or awaiting a scheduling reply (a live entry in the
    session store). Each sender's messages are handled under that sender's
    lock, so reading the pending interaction and acting on it is atomic.
    """

    def __init__(
        self,
        config: Config,
        session_store: SessionStore,
        scheduler: ReminderScheduler,
        contact_store: ContactStore,
        *,
        calendar: Optional[CalendarClient] = None,
        topic_generator: Optional[TopicGenerator] = None,
        classifier: Optional[ResponseClassifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._config = config
        self._session_store = session_store
        self._scheduler = scheduler
        self._contact_store = contact_store
        self._calendar = calendar
        self._topic_generator = topic_generator
        self._clock = clock or config.now
        self._classifier = classifier or ResponseClassifier(clock=self._clock)
        self._chat_adapter: Optional[IChatAdapter] = None
        self._sender_locks: Dict[str, asyncio.Lock] = {}
        self._lock_holders: Dict[str, int] = {}
        self._command_dispatcher = CommandDispatcher()
        self._session_commands = SessionCommandHandler(
            session_store=self._session_store,
            send_message=self._send_message,
        )
        self._contact_commands = ContactCommandHandler(
            contact_store=self._contact_store,
            window_days=self._config.summary_window_days,
            send_message=self._send_message,
        )
        self._command_handlers: Dict[str, CommandHandler] = {
            "contacts.summary": self._contact_commands.handle_summary,
            "session.cancel": self._session_commands.handle_cancel,
            "catalog.help": self._session_commands.handle_help,
        }

    def bind_adapter(self, adapter: IChatAdapter) -> None:
        """Attach the chat adapter so the router can send replies."""

        self._chat_adapter = adapter

    async def handle_message(self, message: InboundMessage) -> None:
        text = message.text.strip()
        if not text:
            LOGGER.debug("Ignoring empty message %s", message.id)
            return

        lock = self._acquire_sender_lock(message.sender)
        try:
            async with lock:
                await self._route(message.sender, text)
        finally:
            self._release_sender_lock(message.sender)

    async def _route(self, sender: str, text: str) -> None:
        pending = self._session_store.peek(sender)

        command_spec = self._command_dispatcher.match(text)
        if command_spec:
            await self._handle_command(command_spec, CommandContext(sender, text, pending))
            return

        if pending is not None and not parse_trigger(text).is_valid:
            await self._handle_scheduling_reply(pending, text)
            return

        # A new trigger replaces any pending draft.
        await self._handle_trigger(sender, text)

    async def _handle_command(self, spec: CommandSpec, context: CommandContext) -> None:
        handler = self._command_handlers.get(spec.handler_id)
        if not handler:
            LOGGER.error("No handler registered for command %s (%s)", spec.name, spec.handler_id)
            await self._send_message(context.sender, messages.HELP)
            return
        await handler(context)

    async def _handle_trigger(self, sender: str, text: str) -> None:
        parsed = parse_trigger(text)
        if not parsed.is_valid:
            LOGGER.info("Message from %s is not a trigger; sending help", sender)
            await self._send_message(sender, messages.HELP)
            return

        LOGGER.info("Processing meeting: %s at %s", parsed.name, parsed.event)
        try:
            contact = self._build_contact(parsed)
            draft = await self._compose_draft(contact)
        except Exception:
            LOGGER.exception("Error preparing draft for %s", parsed.name)
            await self._send_message(sender, messages.error(messages.MEETING_FAILED))
            return

        self._session_store.begin(sender, contact, draft)
        await self._send_message(sender, messages.suggestion_prompt(contact, draft))

    def _build_contact(self, parsed: ParsedTrigger) -> Contact:
        info = extract_contact_info(parsed.context or "")
        return Contact(
            name=parsed.name,
            event=parsed.event,
            met_at=self._clock(),
            follow_up_status=FollowUpStatus.PENDING,
            context=parsed.context,
            phone_number=info.phone,
            email=info.email,
        )

    async def _compose_draft(self, contact: Contact) -> str:
        availability = await self._availability_text()
        topic = await self._topic_sentence(contact)
        return messages.draft_message(contact.name, contact.event, topic, availability)

    async def _availability_text(self) -> str:
        if self._calendar is None:
            return messages.FALLBACK_AVAILABILITY
        try:
            slots = await self._calendar.find_slots(
                self._config.calendar_days_ahead,
                self._config.meeting_duration_minutes,
            )
        except Exception:
            LOGGER.warning("Calendar unavailable, using fallback time text", exc_info=True)
            return messages.FALLBACK_AVAILABILITY
        return messages.availability_text(slots)

    async def _topic_sentence(self, contact: Contact) -> Optional[str]:
        from ..integrations.text_generation import has_meaningful_context

        if self._topic_generator is None or not has_meaningful_context(contact.context):
            LOGGER.debug("No meaningful context for %s, skipping topic sentence", contact.name)
            return None
        try:
            return await self._topic_generator.topic_sentence(contact.name, contact.context or "", contact.event)
        except Exception:
            LOGGER.warning("Topic generation unavailable, omitting topic sentence", exc_info=True)
            return None

    async def _handle_scheduling_reply(self, pending: PendingInteraction, text: str) -> None:
        sender = pending.sender
        now = self._clock()
        try:
            contact, draft = self._require_draft(pending)
        except MissingSessionData:
            LOGGER.error("Pending interaction for %s has no draft; clearing it", sender)
            self._session_store.end(sender)
            await self._send_message(sender, messages.error(messages.MISSING_SESSION_DATA))
            return

        if not self._classifier.is_recognized(text, now):
            LOGGER.info("Unrecognized scheduling reply from %s: %r", sender, text)
            await self._send_message(sender, messages.REPROMPT)
            return

        directive = self._classifier.classify(text, now)
        try:
            await self._commit(sender, contact, draft, directive)
        except StorageError:
            LOGGER.exception("Storage failed while saving %s", contact.name)
            await self._send_message(sender, messages.error(messages.storage_failed(contact.name)))
        except Exception:
            LOGGER.exception("Error handling scheduling response from %s", sender)
            await self._send_message(sender, messages.error(messages.SCHEDULING_FAILED))
        finally:
            self._session_store.end(sender)

    @staticmethod
    def _require_draft(pending: PendingInteraction) -> tuple[Contact, str]:
        if pending.contact is None or not pending.draft_message:
            raise MissingSessionData(pending.sender)
        return pending.contact, pending.draft_message

    async def _commit(self, sender: str, contact: Contact, draft: str, directive: ScheduleDirective) -> None:
        contact_id = await self._contact_store.add_contact(contact)

        if directive.kind is DirectiveKind.NO_REMINDER:
            await self._contact_store.update_contact(
                contact_id, ContactUpdate(follow_up_status=FollowUpStatus.COMPLETED)
            )
            await self._send_message(sender, messages.confirm_no_reminder(contact.name))
            return

        fire_at = max(self._scheduler.resolve_fire_time(directive), self._clock())
        if directive.kind is DirectiveKind.NOW:
            confirmation = messages.confirm_now(contact.name, draft)
            update = ContactUpdate(follow_up_status=FollowUpStatus.SENT)
        elif directive.kind is DirectiveKind.CUSTOM_AT and directive.at is not None:
            confirmation = messages.confirm_custom(contact.name, directive.at)
            update = ContactUpdate(follow_up_status=FollowUpStatus.SCHEDULED, scheduled_follow_up=fire_at)
        else:
            confirmation = messages.confirm_tomorrow(contact.name, self._config.reminder_hour)
            update = ContactUpdate(follow_up_status=FollowUpStatus.SCHEDULED, scheduled_follow_up=fire_at)

        # Storage must succeed before anything is scheduled.
        await self._contact_store.update_contact(contact_id, update)
        reminder_id = await self._scheduler.schedule_at(
            contact_id, messages.reminder_payload(contact.name, draft), fire_at
        )
        await self._send_message(sender, confirmation)
        LOGGER.info("Follow-up for %s resolved as %s (reminder %s)", contact.name, directive.kind.value, reminder_id)

    def _acquire_sender_lock(self, sender: str) -> asyncio.Lock:
        lock = self._sender_locks.get(sender)
        if lock is None:
            lock = asyncio.Lock()
            self._sender_locks[sender] = lock
        self._lock_holders[sender] = self._lock_holders.get(sender, 0) + 1
        return lock

    def _release_sender_lock(self, sender: str) -> None:
        remaining = self._lock_holders.get(sender, 0) - 1
        if remaining > 0:
            self._lock_holders[sender] = remaining
            return
        # Nobody holds or waits on the lock, so the sender's entry can go.
        self._lock_holders.pop(sender, None)
        self._sender_locks.pop(sender, None)

    async def _send_message(self, recipient: str, text: str) -> None:
        if not self._chat_adapter:
            LOGGER.warning("Chat adapter not bound; dropping message: %s", text)
            return
        await self._chat_adapter.send_message(recipient, text)
