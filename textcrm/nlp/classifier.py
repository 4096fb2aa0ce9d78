#!/usr/bin/env python3
"""
classifier.py
-------------
Mention classification against known sources.

Only names that are already known become mentions: contacts and
registry people classify as persons, registry places and confirmed
search results as places. People are checked first, so a name present
in both sets is a person. Anything else is rejected; an unknown
``@token`` is never promoted to a registry entry on its own.

Usage:
    classify("alice", {"Alice"}, {"Deli"})   # MentionType.PERSON
    classify("Project-X", {"Alice"}, set())  # None

    mentions = resolve_mentions(
        "Meeting @Bob-Smith re @project-x tomorrow",
        known_people=["Bob-Smith"],
        known_places=[],
    )
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Dict, Iterable, List, Optional, Sequence, Set

# --- Local imports ---
from textcrm.dataclasses import ConfirmedSelection, Coordinate, Mention, MentionType
from textcrm.nlp.extractor import extract_mentions
from textcrm.utils.name_matching import key_set, name_key


def _classify_key(key: str, people_keys: Set[str], place_keys: Set[str]) -> Optional[MentionType]:
    if not key:
        return None
    if key in people_keys:
        return MentionType.PERSON
    if key in place_keys:
        return MentionType.PLACE
    return None


def classify(
    cleaned_text: str,
    known_people: Iterable[str],
    known_places: Iterable[str],
) -> Optional[MentionType]:
    """
    Classify a cleaned mention by exact, case-insensitive name lookup.

    Args:
        cleaned_text: Mention text, with or without the marker
        known_people: Names that classify as persons
        known_places: Names that classify as places

    Returns:
        MentionType, or None when the name is unknown
    """
    return _classify_key(name_key(cleaned_text), key_set(known_people), key_set(known_places))


def resolve_mentions(
    text: str,
    known_people: Iterable[str],
    known_places: Iterable[str],
    confirmed: Sequence[ConfirmedSelection] = (),
) -> List[Mention]:
    """
    Extract and classify every mention in a message text.

    For each extracted span the longest word prefix that classifies wins,
    and the mention range covers exactly those words. Spans with no
    accepted prefix are dropped.

    Args:
        text: Message text
        known_people: Contact and registry person names
        known_places: Registry place names
        confirmed: Suggestions picked while drafting this message; they
            extend the known sets and provide place coordinates

    Returns:
        Confirmed mentions in source order
    """
    people_keys = key_set(known_people)
    place_keys = key_set(known_places)
    coordinates: Dict[str, Coordinate] = {}

    for selection in confirmed:
        key = name_key(selection.name)
        if selection.kind == MentionType.PERSON:
            people_keys.add(key)
        else:
            place_keys.add(key)
            if selection.coordinate is not None:
                coordinates.setdefault(key, selection.coordinate)

    mentions: List[Mention] = []
    for span in extract_mentions(text):
        for candidate in span.candidates():
            key = name_key(candidate.text)
            mention_type = _classify_key(key, people_keys, place_keys)
            if mention_type is None:
                continue
            mentions.append(
                Mention(
                    text=candidate.text,
                    type=mention_type,
                    source_range=candidate.source_range,
                    coordinate=(
                        coordinates.get(key) if mention_type == MentionType.PLACE else None
                    ),
                )
            )
            break
    return mentions
