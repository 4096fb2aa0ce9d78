"""
message.py
----------
Dataclasses for messages and the mentions attached to them.

A Message is immutable once created; it is only ever deleted. Each
Mention belongs to exactly one Message and records where in the message
text it was found.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from textcrm.core.exceptions import ValidationError
from textcrm.core.validators import DataValidator
from textcrm.utils.name_matching import clean_mention_name, name_key


class MentionType(str, Enum):
    """
    Enumeration of mention kinds.
    - PERSON: A contact or previously mentioned person
    - PLACE: A venue or previously mentioned place
    """

    PERSON = "person"
    PLACE = "place"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available mention type choices."""
        return [mention_type.value for mention_type in cls]

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        display_map = {
            self.PERSON: "Person",
            self.PLACE: "Place",
        }
        return display_map.get(self, self.value.title())


@dataclass(frozen=True)
class Coordinate:
    """Geographic position attached to a confirmed place mention."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat, lon = DataValidator.validate_coordinate(self.latitude, self.longitude)
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Coordinate"]:
        if not data:
            return None
        return cls(latitude=data.get("latitude"), longitude=data.get("longitude"))


@dataclass(frozen=True)
class Mention:
    """
    A classified ``@name`` occurrence inside a message.

    Attributes:
        text: Mention text including the leading marker ("@Alice")
        type: MentionType of the mention
        source_range: (offset, length) of the mention in the message text
        coordinate: Optional position supplied when a place was confirmed
    """

    text: str
    type: MentionType
    source_range: Tuple[int, int]
    coordinate: Optional[Coordinate] = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, MentionType):
            object.__setattr__(self, "type", MentionType(self.type))
        offset, length = self.source_range
        if offset < 0 or length <= 0:
            raise ValidationError(f"Invalid mention range: {self.source_range}")
        object.__setattr__(self, "source_range", (int(offset), int(length)))

    @property
    def name(self) -> str:
        """Display name without the marker."""
        return clean_mention_name(self.text)

    @property
    def key(self) -> str:
        """Case-insensitive registry key."""
        return name_key(self.text)

    @property
    def offset(self) -> int:
        return self.source_range[0]

    @property
    def length(self) -> int:
        return self.source_range[1]

    def refers_to(self, name: str, mention_type: MentionType) -> bool:
        """Check whether this mention points at the given registry entry."""
        return self.type == mention_type and self.key == name_key(name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "text": self.text,
            "type": self.type.value,
            "offset": self.offset,
            "length": self.length,
        }
        if self.coordinate is not None:
            data["coordinate"] = self.coordinate.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mention":
        DataValidator.validate_required_fields(data, ["text", "type", "offset", "length"])
        try:
            mention_type = MentionType(data["type"])
        except ValueError:
            raise ValidationError(f"Unknown mention type: {data['type']}")
        return cls(
            text=data["text"],
            type=mention_type,
            source_range=(
                DataValidator.normalize_int(data["offset"]),
                DataValidator.normalize_int(data["length"]),
            ),
            coordinate=Coordinate.from_dict(data.get("coordinate")),
        )


@dataclass(frozen=True)
class Message:
    """
    A sent note and the mentions confirmed for it.

    Attributes:
        id: Unique identifier
        text: Full message text, never modified after creation
        timestamp: UTC creation time
        mentions: Mentions whose ranges lie within ``text``
    """

    id: str
    text: str
    timestamp: datetime
    mentions: Tuple[Mention, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "mentions", tuple(self.mentions))
        object.__setattr__(
            self, "timestamp", DataValidator.normalize_datetime(self.timestamp)
        )
        for mention in self.mentions:
            if mention.offset + mention.length > len(self.text):
                raise ValidationError(
                    f"Mention {mention.text!r} range {mention.source_range} "
                    f"exceeds message length {len(self.text)}"
                )

    @classmethod
    def create(
        cls,
        text: str,
        mentions: Optional[List[Mention]] = None,
        timestamp: Optional[datetime] = None,
    ) -> "Message":
        """Create a new message with a fresh id and the current UTC time."""
        return cls(
            id=str(uuid.uuid4()),
            text=text,
            timestamp=timestamp or datetime.now(timezone.utc),
            mentions=tuple(mentions or ()),
        )

    def mentions_of(self, name: str, mention_type: MentionType) -> bool:
        """Check whether any mention refers to the given entity."""
        return any(m.refers_to(name, mention_type) for m in self.mentions)

    def mentions_only(self, name: str, mention_type: MentionType) -> bool:
        """
        Check whether every mention refers to the given entity.

        A message without mentions mentions nobody exclusively.
        """
        return bool(self.mentions) and all(
            m.refers_to(name, mention_type) for m in self.mentions
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "mentions": [m.to_dict() for m in self.mentions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        DataValidator.validate_required_fields(data, ["id", "text", "timestamp"])
        return cls(
            id=str(data["id"]),
            text=data["text"],
            timestamp=DataValidator.normalize_datetime(data["timestamp"]),
            mentions=tuple(Mention.from_dict(m) for m in data.get("mentions") or ()),
        )

    def __str__(self) -> str:
        count = len(self.mentions)
        label = "mention" if count == 1 else "mentions"
        return f"[{self.timestamp:%Y-%m-%d %H:%M}] {self.text} ({count} {label})"
