#!/usr/bin/env python3
"""
name_matching.py
----------------
Shared utilities for mention name matching.

Registry names are unique case-insensitively, so every comparison goes
through the same key function. Accents and hyphens are significant:
"Bob-Smith" and "Bob Smith" are different names.

Usage:
    from textcrm.utils.name_matching import clean_mention_name, name_key

    clean_mention_name("@Alice ")   # "Alice"
    name_key("ALICE")               # "alice"
    names_match("@alice", "Alice")  # True
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from typing import Iterable, Optional, Set

MENTION_MARKER = "@"


def clean_mention_name(text: str) -> str:
    """
    Strip the leading marker and surrounding whitespace from a mention.

    Internal whitespace runs are collapsed to a single space.

    Args:
        text: Mention text with or without the marker

    Returns:
        Bare display name
    """
    if not text:
        return ""
    result = text.strip()
    if result.startswith(MENTION_MARKER):
        result = result[len(MENTION_MARKER):]
    return re.sub(r"\s+", " ", result).strip()


def name_key(name: str) -> str:
    """
    Case-insensitive lookup key for a name.

    Args:
        name: Display name or mention text

    Returns:
        Case-folded, marker-free name
    """
    return clean_mention_name(name).casefold()


def names_match(left: str, right: str) -> bool:
    """Check whether two names refer to the same registry entry."""
    key = name_key(left)
    return bool(key) and key == name_key(right)


def key_set(names: Iterable[str]) -> Set[str]:
    """
    Pre-compute lookup keys for a collection of names.

    Blank names are skipped.
    """
    return {key for key in (name_key(n) for n in names) if key}


def starts_with(name: str, partial: str) -> bool:
    """Case-insensitive prefix test used by suggestions."""
    return name.casefold().startswith(partial.casefold())


def overlaps(left: str, right: str) -> bool:
    """Case-insensitive substring test in either direction."""
    a, b = left.casefold(), right.casefold()
    return a in b or b in a


def find_name(name: str, candidates: Iterable[str]) -> Optional[str]:
    """
    Find the candidate that matches a name case-insensitively.

    Returns:
        Matching candidate as spelled in the collection, or None
    """
    key = name_key(name)
    for candidate in candidates:
        if name_key(candidate) == key:
            return candidate
    return None
