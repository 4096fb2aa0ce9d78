#!/usr/bin/env python3
"""
store.py
--------
Durable message log implementations.

The core treats a MessageStore as the single source of truth: every
registry can be rebuilt from ``load_all()`` plus ``load_marks()``, which
holds deletions and explicitly added people. Failures are reported by
raising PersistenceError; nothing is fabricated to hide them.

Classes:
    MessageStore: Protocol consumed by the message log service
    SqlMessageStore: SQLAlchemy/SQLite store scoped to a UserSession
    InMemoryMessageStore: Process-local store for tests and scratch use
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import asyncio
from datetime import datetime
from typing import Dict, List, Optional, Protocol

# --- Third party ---
from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

# --- Local imports ---
from textcrm.core.exceptions import PersistenceError
from textcrm.core.logging_manager import CrmLogger, safe_logger
from textcrm.core.session import UserSession
from textcrm.core.validators import DataValidator
from textcrm.dataclasses import EntityKey, MentionType, Message, RegistryMarks
from textcrm.utils.name_matching import name_key
from .decorators import StoreOperation, handle_db_errors, log_store_operation
from .manager import CrmDB
from .models import EntityTombstone, MessageRecord, PinnedPerson


class MessageStore(Protocol):
    """Asynchronous durable message log."""

    async def append(self, message: Message) -> None:
        ...

    async def delete(self, message_id: str) -> None:
        ...

    async def load_all(self) -> List[Message]:
        ...

    async def load_marks(self) -> RegistryMarks:
        ...

    async def mark_deleted(
        self, mention_type: MentionType, name: str, removed_at: datetime
    ) -> None:
        ...

    async def pin_person(self, name: str) -> None:
        ...


class SqlMessageStore:
    """
    Message store backed by SQLAlchemy.

    ORM work is synchronous and runs in a worker thread. Every row is
    tagged with the session's user id and reads are filtered by it.

    Attributes:
        db: CrmDB owning the engine
        session: Active UserSession
        logger: Optional CrmLogger
    """

    def __init__(
        self,
        db: CrmDB,
        session: UserSession,
        logger: Optional[CrmLogger] = None,
    ) -> None:
        self.db = db
        self.session = session
        self.logger = logger if logger is not None else db.logger

    # ---- Synchronous operations ----
    @handle_db_errors("append")
    @log_store_operation("append_message")
    def append_sync(self, message: Message) -> None:
        user_id = self.session.require_active()
        with self.db.session_scope() as session:
            if session.get(MessageRecord, message.id) is not None:
                raise PersistenceError(
                    f"Message already stored: {message.id}", operation="append"
                )
            session.add(MessageRecord.from_message(message, user_id))

    def delete_sync(self, message_id: str) -> None:
        user_id = self.session.require_active()
        with StoreOperation(self.logger, "delete", {"message_id": message_id}):
            with self.db.session_scope() as session:
                record = session.get(MessageRecord, message_id)
                if record is None or record.user_id != user_id:
                    safe_logger(self.logger).log_warning(
                        "Delete of unknown message ignored", {"message_id": message_id}
                    )
                    return
                session.delete(record)

    @handle_db_errors("load")
    @log_store_operation("load_messages")
    def load_all_sync(self) -> List[Message]:
        user_id = self.session.require_active()
        with self.db.session_scope() as session:
            records = session.scalars(
                select(MessageRecord)
                .where(MessageRecord.user_id == user_id)
                .options(selectinload(MessageRecord.mentions))
                .order_by(MessageRecord.timestamp, MessageRecord.id)
            ).all()
            return [record.to_message() for record in records]

    @handle_db_errors("load_marks")
    @log_store_operation("load_registry_marks")
    def load_marks_sync(self) -> RegistryMarks:
        user_id = self.session.require_active()
        with self.db.session_scope() as session:
            tombstones = session.scalars(
                select(EntityTombstone).where(EntityTombstone.user_id == user_id)
            ).all()
            pins = session.scalars(
                select(PinnedPerson)
                .where(PinnedPerson.user_id == user_id)
                .order_by(PinnedPerson.pinned_at, PinnedPerson.id)
            ).all()
            return RegistryMarks(
                deleted={
                    (t.type, t.key): DataValidator.normalize_datetime(t.removed_at)
                    for t in tombstones
                },
                pinned=tuple(p.name for p in pins),
            )

    @handle_db_errors("mark_deleted")
    @log_store_operation("mark_entity_deleted")
    def mark_deleted_sync(
        self, mention_type: MentionType, name: str, removed_at: datetime
    ) -> None:
        user_id = self.session.require_active()
        key = name_key(name)
        with self.db.session_scope() as session:
            tombstone = session.scalars(
                select(EntityTombstone).where(
                    EntityTombstone.user_id == user_id,
                    EntityTombstone.type == mention_type,
                    EntityTombstone.key == key,
                )
            ).first()
            if tombstone is None:
                session.add(
                    EntityTombstone(
                        user_id=user_id,
                        type=mention_type,
                        key=key,
                        name=name,
                        removed_at=removed_at,
                    )
                )
            else:
                tombstone.name = name
                tombstone.removed_at = removed_at

            if mention_type == MentionType.PERSON:
                session.execute(
                    delete(PinnedPerson).where(
                        PinnedPerson.user_id == user_id, PinnedPerson.key == key
                    )
                )

    @handle_db_errors("pin_person")
    @log_store_operation("pin_person")
    def pin_person_sync(self, name: str) -> None:
        user_id = self.session.require_active()
        key = name_key(name)
        with self.db.session_scope() as session:
            pinned = session.scalars(
                select(PinnedPerson).where(
                    PinnedPerson.user_id == user_id, PinnedPerson.key == key
                )
            ).first()
            if pinned is None:
                session.add(PinnedPerson(user_id=user_id, key=key, name=name))

            session.execute(
                delete(EntityTombstone).where(
                    EntityTombstone.user_id == user_id,
                    EntityTombstone.type == MentionType.PERSON,
                    EntityTombstone.key == key,
                )
            )

    # ---- MessageStore protocol ----
    async def append(self, message: Message) -> None:
        await asyncio.to_thread(self.append_sync, message)

    async def delete(self, message_id: str) -> None:
        await asyncio.to_thread(self.delete_sync, message_id)

    async def load_all(self) -> List[Message]:
        return await asyncio.to_thread(self.load_all_sync)

    async def load_marks(self) -> RegistryMarks:
        return await asyncio.to_thread(self.load_marks_sync)

    async def mark_deleted(
        self, mention_type: MentionType, name: str, removed_at: datetime
    ) -> None:
        await asyncio.to_thread(self.mark_deleted_sync, mention_type, name, removed_at)

    async def pin_person(self, name: str) -> None:
        await asyncio.to_thread(self.pin_person_sync, name)


class InMemoryMessageStore:
    """Message store kept in a dict, lost when the process exits."""

    def __init__(self, messages: Optional[List[Message]] = None) -> None:
        self._messages: Dict[str, Message] = {m.id: m for m in messages or []}
        self._deleted: Dict[EntityKey, datetime] = {}
        self._pinned: Dict[str, str] = {}

    async def append(self, message: Message) -> None:
        if message.id in self._messages:
            raise PersistenceError(f"Message already stored: {message.id}", operation="append")
        self._messages[message.id] = message

    async def delete(self, message_id: str) -> None:
        self._messages.pop(message_id, None)

    async def load_all(self) -> List[Message]:
        return sorted(self._messages.values(), key=lambda m: (m.timestamp, m.id))

    async def load_marks(self) -> RegistryMarks:
        return RegistryMarks(deleted=dict(self._deleted), pinned=tuple(self._pinned.values()))

    async def mark_deleted(
        self, mention_type: MentionType, name: str, removed_at: datetime
    ) -> None:
        key = name_key(name)
        self._deleted[(mention_type, key)] = removed_at
        if mention_type == MentionType.PERSON:
            self._pinned.pop(key, None)

    async def pin_person(self, name: str) -> None:
        key = name_key(name)
        self._pinned.setdefault(key, name)
        self._deleted.pop((MentionType.PERSON, key), None)

    def __len__(self) -> int:
        return len(self._messages)
