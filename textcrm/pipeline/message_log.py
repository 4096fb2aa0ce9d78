#!/usr/bin/env python3
"""
message_log.py
--------------
The message log service: the in-memory log, its registries and the
durable store kept in step.

Every change to the log reruns reconciliation from scratch and notifies
subscribers with the new RegistrySnapshot.

Sending is optimistic: the message joins the local log and registries
at once and is rolled back if the store refuses it. Deleting goes to the
store first and only then touches local state, so a failed delete
changes nothing.

Deleting a person or place removes every message whose mentions all
refer to that entity. Messages that also mention someone or something
else are kept. The deletion itself is recorded in the store, so their
mentions stay uncounted after a reload, and only a newly sent message
brings the entity back.

Usage:
    log = MessageLog(store, contacts, logger)
    await log.load()
    await log.send("Lunch with @Alice at @Deli", confirmed=selections)
    log.snapshot.people
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

# --- Local imports ---
from textcrm.core.exceptions import ValidationError
from textcrm.core.logging_manager import CrmLogger, safe_logger
from textcrm.core.validators import DataValidator
from textcrm.dataclasses import (
    ConfirmedSelection,
    Message,
    MentionType,
    Person,
    RegistryMarks,
    RegistrySnapshot,
)
from textcrm.nlp.classifier import resolve_mentions
from textcrm.sources.contacts import ContactSource
from textcrm.utils.name_matching import find_name, name_key
from .reconciler import chronological, messages_for, reconcile

LogListener = Callable[[RegistrySnapshot], None]


class MessageLog:
    """
    Message log with derived People and Places registries.

    Attributes:
        store: Durable MessageStore
        contacts: ContactSource for classification and add-contact
        logger: Optional CrmLogger
        snapshot: Current registries
    """

    def __init__(
        self,
        store,
        contacts: ContactSource,
        logger: Optional[CrmLogger] = None,
    ) -> None:
        self.store = store
        self.contacts = contacts
        self.logger = logger
        self.snapshot = RegistrySnapshot()
        self._messages: Dict[str, Message] = {}
        self._marks = RegistryMarks()
        self._listeners: List[LogListener] = []

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        """
        Register a listener called with each new snapshot.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _refresh(self) -> RegistrySnapshot:
        self.snapshot = reconcile(self._messages.values(), self._marks)
        for listener in list(self._listeners):
            listener(self.snapshot)
        return self.snapshot

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def messages(self) -> List[Message]:
        """Every message, oldest first."""
        return chronological(self._messages.values())

    def get_message(self, message_id: str) -> Optional[Message]:
        return self._messages.get(message_id)

    def contact_names(self) -> List[str]:
        return self.contacts.list_contacts()

    def known_people(self) -> List[str]:
        """Names that classify as persons: contacts, pinned and registry people."""
        names: List[str] = []
        for name in [*self.contact_names(), *self._marks.pinned, *self.snapshot.known_people]:
            if find_name(name, names) is None:
                names.append(name)
        return names

    def messages_for_person(self, name: str) -> List[Message]:
        return messages_for(self._messages.values(), name, MentionType.PERSON, self._marks)

    def messages_for_place(self, name: str) -> List[Message]:
        return messages_for(self._messages.values(), name, MentionType.PLACE, self._marks)

    # -------------------------------------------------------------------------
    # Log changes
    # -------------------------------------------------------------------------

    async def load(self) -> RegistrySnapshot:
        """
        Replace the local log and registry marks with the store's contents.

        On failure the current log and registries are left as they were
        and the error propagates.
        """
        logger = safe_logger(self.logger)
        try:
            loaded = await self.store.load_all()
            marks = await self.store.load_marks()
        except Exception as e:
            logger.log_error(e, {"operation": "load_messages"})
            raise

        self._messages = {message.id: message for message in loaded}
        self._marks = marks
        logger.log_operation(
            "messages_loaded",
            {"count": len(self._messages), "deleted_entities": len(marks.deleted)},
        )
        return self._refresh()

    async def send(
        self,
        text: str,
        confirmed: Sequence[ConfirmedSelection] = (),
    ) -> Message:
        """
        Create and store a message.

        Mentions are resolved against contacts, registry entries and the
        suggestions confirmed while drafting. The registries update
        before the store responds; a failed append rolls the message
        back and re-raises.

        Args:
            text: Message text
            confirmed: Selections confirmed in the suggestion composer

        Returns:
            The stored Message

        Raises:
            ValidationError: If the text is blank
            PersistenceError: If the store rejects the message
        """
        if DataValidator.normalize_string(text) is None:
            raise ValidationError("Message text cannot be empty")

        logger = safe_logger(self.logger)
        mentions = resolve_mentions(
            text,
            known_people=self.known_people(),
            known_places=self.snapshot.known_places,
            confirmed=confirmed,
        )
        message = Message.create(text, mentions)

        self._messages[message.id] = message
        self._refresh()

        try:
            await self.store.append(message)
        except Exception as e:
            self._messages.pop(message.id, None)
            self._refresh()
            logger.log_error(e, {"operation": "send", "message_id": message.id})
            raise

        logger.log_operation(
            "message_sent",
            {"message_id": message.id, "mentions": [m.text for m in mentions]},
        )
        return message

    async def delete_message(self, message_id: str) -> bool:
        """
        Delete a message through the store, then locally.

        Returns:
            False when the id is not in the local log
        """
        logger = safe_logger(self.logger)
        if message_id not in self._messages:
            logger.log_warning("Delete of unknown message ignored", {"message_id": message_id})
            return False

        try:
            await self.store.delete(message_id)
        except Exception as e:
            logger.log_error(e, {"operation": "delete_message", "message_id": message_id})
            raise

        del self._messages[message_id]
        self._refresh()
        logger.log_operation("message_deleted", {"message_id": message_id})
        return True

    def _removal_time(self, name: str, mention_type: MentionType) -> datetime:
        # Never earlier than a message that still mentions the entity
        latest = [m.timestamp for m in self._messages.values() if m.mentions_of(name, mention_type)]
        return max([datetime.now(timezone.utc), *latest])

    async def _delete_entity(self, name: str, mention_type: MentionType) -> List[Message]:
        logger = safe_logger(self.logger)
        key = name_key(name)
        if not key:
            raise ValidationError(f"{mention_type.display_name} name cannot be empty")

        doomed = [
            m for m in chronological(self._messages.values())
            if m.mentions_only(name, mention_type)
        ]
        removed_at = self._removal_time(name, mention_type)

        removed: List[Message] = []
        try:
            for message in doomed:
                await self.store.delete(message.id)
                removed.append(message)
            await self.store.mark_deleted(mention_type, name, removed_at)
        except Exception as e:
            for message in removed:
                self._messages.pop(message.id, None)
            self._refresh()
            logger.log_error(
                e,
                {
                    "operation": f"delete_{mention_type.value}",
                    "name": name,
                    "deleted_before_failure": len(removed),
                },
            )
            raise

        for message in removed:
            self._messages.pop(message.id, None)
        pinned = self._marks.pinned
        if mention_type == MentionType.PERSON:
            pinned = tuple(p for p in pinned if name_key(p) != key)
        self._marks = RegistryMarks(
            deleted={**self._marks.deleted, (mention_type, key): removed_at},
            pinned=pinned,
        )
        self._refresh()

        logger.log_operation(
            f"{mention_type.value}_deleted",
            {"name": name, "messages_deleted": len(removed)},
        )
        return removed

    async def delete_person(self, name: str) -> List[Message]:
        """
        Delete a person and every message that mentions only them.

        Messages that also mention someone or something else are kept,
        but their mentions of this person no longer count.

        Returns:
            The messages that were deleted
        """
        return await self._delete_entity(name, MentionType.PERSON)

    async def delete_place(self, name: str) -> List[Message]:
        """Delete a place and every message that mentions only it."""
        return await self._delete_entity(name, MentionType.PLACE)

    async def add_person(self, name: str) -> Person:
        """
        Add a contact explicitly and list them with no mentions yet.

        The person is pinned in the store, which also lifts an earlier
        deletion of the same name.

        Returns:
            The registry Person
        """
        logger = safe_logger(self.logger)
        display = self.contacts.add_contact(name)
        key = name_key(display)

        try:
            await self.store.pin_person(display)
        except Exception as e:
            logger.log_error(e, {"operation": "add_person", "name": display})
            raise

        pinned = self._marks.pinned
        if find_name(display, pinned) is None:
            pinned = (*pinned, display)
        deleted = dict(self._marks.deleted)
        deleted.pop((MentionType.PERSON, key), None)
        self._marks = RegistryMarks(deleted=deleted, pinned=pinned)
        snapshot = self._refresh()

        logger.log_operation("person_added", {"name": display})
        return snapshot.find_person(display)
