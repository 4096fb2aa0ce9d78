#!/usr/bin/env python3
"""
reconciler.py
-------------
Rebuild the People and Places registries from the message log.

Reconciliation is a pure function of its inputs and is rerun in full on
every log change; registries are never patched incrementally.

Two passes:
    1. Upsert: walk the log oldest first and create one entry per
       (type, case-insensitive name). The earliest spelling becomes the
       display name and the earliest coordinate of a place sticks.
    2. Recount: for each entry, filter the whole log again and derive
       message_count and last_mentioned_at from the matching messages.

RegistryMarks add what the log cannot say on its own: people pinned by
the add-contact action, and deletions. A deleted entity's mentions in
messages sent up to the deletion are skipped by both passes, so it
only comes back through newer messages.

The recount cost is O(entities x messages), fine for personal-scale logs.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

# --- Local imports ---
from textcrm.dataclasses import (
    Coordinate,
    EntityKey,
    Mention,
    Message,
    MentionType,
    Person,
    Place,
    RegistryMarks,
    RegistrySnapshot,
    entity_id,
)
from textcrm.utils.name_matching import clean_mention_name, name_key


def chronological(log: Iterable[Message]) -> List[Message]:
    """Order messages oldest first, ties broken by id."""
    return sorted(log, key=lambda m: (m.timestamp, m.id))


def messages_for(
    log: Iterable[Message],
    name: str,
    mention_type: MentionType,
    marks: Optional[RegistryMarks] = None,
) -> List[Message]:
    """
    Messages mentioning an entity, newest first.

    Args:
        log: Message log
        name: Entity name (case-insensitive)
        mention_type: Registry the entity belongs to
        marks: When given, messages predating the entity's deletion are
            left out, matching what the registry counts
    """
    key = (mention_type, name_key(name))
    matching = [
        m for m in log
        if m.mentions_of(name, mention_type)
        and (marks is None or not marks.hides(key, m.timestamp))
    ]
    return sorted(matching, key=lambda m: (m.timestamp, m.id), reverse=True)


def _visible_mentions(
    message: Message, marks: RegistryMarks
) -> Iterator[Tuple[EntityKey, Mention]]:
    for mention in message.mentions:
        key = (mention.type, mention.key)
        if mention.key and not marks.hides(key, message.timestamp):
            yield key, mention


def _count(
    log: Sequence[Message], key: EntityKey, marks: RegistryMarks
) -> Tuple[int, Optional[datetime]]:
    matching = [
        m for m in log
        if any(seen == key for seen, _ in _visible_mentions(m, marks))
    ]
    if not matching:
        return 0, None
    return len(matching), max(m.timestamp for m in matching)


def reconcile(
    log: Iterable[Message],
    marks: Optional[RegistryMarks] = None,
) -> RegistrySnapshot:
    """
    Derive both registries from the message log.

    Args:
        log: Every message currently in the log, in any order
        marks: Pinned people, listed even with no mentions, and deleted
            entities, whose mentions up to the deletion time are ignored

    Returns:
        RegistrySnapshot with people and places sorted by name
    """
    messages = chronological(log)
    marks = marks if marks is not None else RegistryMarks()

    # --- Pass 1: upsert ---
    names: Dict[EntityKey, str] = {}
    coordinates: Dict[EntityKey, Coordinate] = {}

    for pinned in marks.pinned:
        display = clean_mention_name(pinned)
        if display:
            names.setdefault((MentionType.PERSON, name_key(display)), display)

    for message in messages:
        for key, mention in _visible_mentions(message, marks):
            names.setdefault(key, mention.name)
            if mention.type == MentionType.PLACE and mention.coordinate is not None:
                coordinates.setdefault(key, mention.coordinate)

    # --- Pass 2: recount ---
    # Matched on the pass-1 key; display names are never re-keyed
    people: List[Person] = []
    places: List[Place] = []
    for key, display in names.items():
        mention_type = key[0]
        count, last_seen = _count(messages, key, marks)
        if mention_type == MentionType.PERSON:
            people.append(
                Person(
                    id=entity_id(mention_type, display),
                    name=display,
                    message_count=count,
                    last_mentioned_at=last_seen,
                )
            )
        else:
            places.append(
                Place(
                    id=entity_id(mention_type, display),
                    name=display,
                    message_count=count,
                    last_mentioned_at=last_seen,
                    coordinate=coordinates.get(key),
                )
            )

    people.sort(key=lambda p: (p.key, p.name))
    places.sort(key=lambda p: (p.key, p.name))
    return RegistrySnapshot(people=tuple(people), places=tuple(places))
