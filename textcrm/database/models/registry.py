"""
Registry Models
---------------

Registry edits that cannot be derived from the messages.

Models:
    - EntityTombstone: A person or place deleted by the user
    - PinnedPerson: A person added through the add-contact action

Tombstones tell "deleted" apart from "never mentioned": mentions in
messages sent up to ``removed_at`` stay hidden when the registries are
rebuilt, while newer mentions bring the entity back.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone

# --- Third party ---
from sqlalchemy import DateTime, Enum as SAEnum, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

# --- Local imports ---
from textcrm.dataclasses import MentionType
from .base import Base


class EntityTombstone(Base):
    """
    Deleted registry entity.

    One row per (user, type, key); deleting again moves ``removed_at``.

    Attributes:
        id: Primary key
        user_id: Owner of the registry
        type: MentionType of the deleted entity
        key: Case-insensitive name key
        name: Name as given when deleting
        removed_at: Deletion time (UTC)

    Examples:
        EntityTombstone(
            user_id="ada",
            type=MentionType.PERSON,
            key="alice",
            name="Alice",
        )
    """

    __tablename__ = "entity_tombstones"
    __table_args__ = (
        UniqueConstraint("user_id", "type", "key", name="uq_tombstone_entity"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[MentionType] = mapped_column(
        SAEnum(
            MentionType,
            name="mentiontype",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    removed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<EntityTombstone(type={self.type.value}, key={self.key!r}, "
            f"removed_at={self.removed_at})>"
        )


class PinnedPerson(Base):
    """
    Person listed in the People registry without any mention.

    Attributes:
        id: Primary key
        user_id: Owner of the registry
        key: Case-insensitive name key
        name: Display name
        pinned_at: When the contact was added (UTC)
    """

    __tablename__ = "pinned_people"
    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uq_pinned_person"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    pinned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PinnedPerson(name={self.name!r})>"
