"""
entities.py
-----------
Registry entities derived from the message log.

People and Places are never edited directly: the reconciler rebuilds
them from the log, so every field here is implied by the messages
(coordinates come from the place mentions themselves).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from textcrm.dataclasses.message import Coordinate, MentionType
from textcrm.utils.name_matching import name_key

# Fixed namespace so entity ids are stable across reconciliations
ENTITY_NAMESPACE = uuid.UUID("6f1d6c1e-2b7a-4e55-9d4c-3f0a8e9b5c21")


def entity_id(mention_type: MentionType, name: str) -> str:
    """Deterministic id for a registry entry."""
    return str(uuid.uuid5(ENTITY_NAMESPACE, f"{mention_type.value}:{name_key(name)}"))


@dataclass(frozen=True)
class Person:
    """
    A person in the People registry.

    Attributes:
        id: Deterministic identifier
        name: Display name (spelling of its earliest mention)
        message_count: Number of messages mentioning this person
        last_mentioned_at: Timestamp of the newest such message
    """

    id: str
    name: str
    message_count: int = 0
    last_mentioned_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return name_key(self.name)

    @property
    def type(self) -> MentionType:
        return MentionType.PERSON

    def __str__(self) -> str:
        label = "message" if self.message_count == 1 else "messages"
        return f"{self.name} ({self.message_count} {label})"


@dataclass(frozen=True)
class Place:
    """
    A place in the Places registry.

    Attributes:
        id: Deterministic identifier
        name: Display name (spelling of its earliest mention)
        message_count: Number of messages mentioning this place
        last_mentioned_at: Timestamp of the newest such message
        coordinate: Position from the earliest mention that carried one
    """

    id: str
    name: str
    message_count: int = 0
    last_mentioned_at: Optional[datetime] = None
    coordinate: Optional[Coordinate] = None

    @property
    def key(self) -> str:
        return name_key(self.name)

    @property
    def type(self) -> MentionType:
        return MentionType.PLACE

    @property
    def latitude(self) -> Optional[float]:
        return self.coordinate.latitude if self.coordinate else None

    @property
    def longitude(self) -> Optional[float]:
        return self.coordinate.longitude if self.coordinate else None

    def __str__(self) -> str:
        label = "message" if self.message_count == 1 else "messages"
        return f"{self.name} ({self.message_count} {label})"


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable People and Places registries at one point in time."""

    people: Tuple[Person, ...] = field(default_factory=tuple)
    places: Tuple[Place, ...] = field(default_factory=tuple)

    def find_person(self, name: str) -> Optional[Person]:
        key = name_key(name)
        return next((p for p in self.people if p.key == key), None)

    def find_place(self, name: str) -> Optional[Place]:
        key = name_key(name)
        return next((p for p in self.places if p.key == key), None)

    @property
    def known_people(self) -> Set[str]:
        return {p.name for p in self.people}

    @property
    def known_places(self) -> Set[str]:
        return {p.name for p in self.places}

    def place_names(self) -> List[str]:
        return [p.name for p in self.places]


EntityKey = Tuple[MentionType, str]


@dataclass(frozen=True)
class RegistryMarks:
    """
    Registry edits that are not implied by the messages.

    Attributes:
        deleted: (type, key) of each deleted entity mapped to the deletion
            time; mentions in messages up to that time no longer count
        pinned: People added explicitly as contacts, listed even with no
            mentions
    """

    deleted: Dict[EntityKey, datetime] = field(default_factory=dict)
    pinned: Tuple[str, ...] = field(default_factory=tuple)

    def hides(self, key: EntityKey, timestamp: datetime) -> bool:
        """Check whether a mention sent at ``timestamp`` predates a deletion."""
        removed_at = self.deleted.get(key)
        return removed_at is not None and timestamp <= removed_at
