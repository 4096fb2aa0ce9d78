"""
Core Models
-----------

Tables backing the message log.

Models:
    - MessageRecord: One sent message, scoped to a user
    - MentionRecord: One confirmed mention inside a message

People and Places are not stored: they are rebuilt from these rows and
the registry edits in ``registry``.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from typing import List, Optional

# --- Third party ---
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from textcrm.dataclasses import Coordinate, Mention, MentionType, Message
from .base import Base


class MessageRecord(Base):
    """
    Persisted message.

    Attributes:
        id: Message UUID (string)
        user_id: Owner of the message
        text: Immutable message text
        timestamp: UTC creation time

    Relationships:
        mentions: One-to-many with MentionRecord, deleted with the message
    """

    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    mentions: Mapped[List["MentionRecord"]] = relationship(
        "MentionRecord",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="MentionRecord.position",
    )

    @classmethod
    def from_message(cls, message: Message, user_id: str) -> "MessageRecord":
        record = cls(
            id=message.id,
            user_id=user_id,
            text=message.text,
            timestamp=message.timestamp,
        )
        record.mentions = [MentionRecord.from_mention(m) for m in message.mentions]
        return record

    def to_message(self) -> Message:
        return Message(
            id=self.id,
            text=self.text,
            timestamp=self.timestamp,
            mentions=tuple(m.to_mention() for m in self.mentions),
        )

    def __repr__(self) -> str:
        return f"<MessageRecord(id={self.id}, user_id={self.user_id})>"


class MentionRecord(Base):
    """
    Persisted mention.

    Attributes:
        id: Primary key
        message_id: Owning message
        text: Mention text including the marker
        type: MentionType
        position/length: Range within the message text
        latitude/longitude: Optional confirmed place position
    """

    __tablename__ = "mentions"
    __table_args__ = (
        CheckConstraint("length > 0", name="ck_mention_positive_length"),
        CheckConstraint("position >= 0", name="ck_mention_non_negative_position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    message_id: Mapped[str] = mapped_column(
        ForeignKey("messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[MentionType] = mapped_column(
        SAEnum(
            MentionType,
            name="mentiontype",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    length: Mapped[int] = mapped_column(Integer, nullable=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    message: Mapped["MessageRecord"] = relationship(
        "MessageRecord", back_populates="mentions"
    )

    @classmethod
    def from_mention(cls, mention: Mention) -> "MentionRecord":
        return cls(
            text=mention.text,
            type=mention.type,
            position=mention.offset,
            length=mention.length,
            latitude=mention.coordinate.latitude if mention.coordinate else None,
            longitude=mention.coordinate.longitude if mention.coordinate else None,
        )

    def to_mention(self) -> Mention:
        coordinate = None
        if self.latitude is not None and self.longitude is not None:
            coordinate = Coordinate(latitude=self.latitude, longitude=self.longitude)
        return Mention(
            text=self.text,
            type=self.type,
            source_range=(self.position, self.length),
            coordinate=coordinate,
        )

    def __repr__(self) -> str:
        return f"<MentionRecord(text={self.text!r}, type={self.type.value})>"
