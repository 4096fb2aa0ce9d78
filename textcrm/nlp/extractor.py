#!/usr/bin/env python3
"""
extractor.py
------------
Mention extraction from raw message text.

A mention starts at the ``@`` marker and runs greedily over letters,
digits, whitespace and hyphens. Because whitespace is part of that run,
a raw span often carries trailing words of the sentence ("@Alice at").
Cleanup trims it, and a run of more than three words is cut back to its
first two. The classifier later picks the longest word prefix it
recognises (see ``RawSpan.candidates``).

Extraction is total: any string yields a (possibly empty) list.

Usage:
    spans = extract_mentions("Lunch with @Alice at @Deli")
    [s.text for s in spans]           # ['@Alice at', '@Deli']
    [c.text for c in spans[0].candidates()]  # ['@Alice at', '@Alice']
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
import string
from dataclasses import dataclass
from typing import Iterator, List, Tuple

# --- Local imports ---
from textcrm.utils.name_matching import MENTION_MARKER

# Letters and digits (any script), whitespace and hyphen. The marker
# itself is excluded, so "@@name" closes the first span at length 1.
MENTION_PATTERN = re.compile(r"@(?:[^\W_]|[\s\-])+")
WORD_PATTERN = re.compile(r"\S+")

MAX_WORDS = 3
TRUNCATED_WORDS = 2
_TRAILING_PUNCTUATION = set(string.punctuation) - {"-"}


@dataclass(frozen=True)
class MentionCandidate:
    """
    One possible reading of a raw span.

    Attributes:
        text: Candidate text including the marker
        offset: Position of the marker in the source text
        length: Source length from the marker to the candidate's last word
    """

    text: str
    offset: int
    length: int

    @property
    def source_range(self) -> Tuple[int, int]:
        return (self.offset, self.length)


@dataclass(frozen=True)
class RawSpan:
    """
    A cleaned mention candidate found in a text.

    Attributes:
        text: Cleaned text including the marker ("@Bob-Smith re")
        offset: Position of the marker in the source text
        length: Source length up to the end of the last kept word
        raw_length: Source length of the greedy match before cleanup
        words: Kept words, in order
        word_ends: Source end position of each kept word
    """

    text: str
    offset: int
    length: int
    raw_length: int
    words: Tuple[str, ...]
    word_ends: Tuple[int, ...]

    @property
    def source_range(self) -> Tuple[int, int]:
        return (self.offset, self.length)

    def candidates(self) -> Iterator[MentionCandidate]:
        """Yield word prefixes of this span, longest first."""
        for count in range(len(self.words), 0, -1):
            yield MentionCandidate(
                text=MENTION_MARKER + " ".join(self.words[:count]),
                offset=self.offset,
                length=self.word_ends[count - 1] - self.offset,
            )


def _trim_trailing_punctuation(word: str) -> str:
    while word and word[-1] in _TRAILING_PUNCTUATION:
        word = word[:-1]
    return word


def _clean(text: str, start: int, end: int) -> List[Tuple[str, int]]:
    """
    Split a greedy match into kept words with their source end offsets.

    Leading and trailing whitespace is dropped, trailing punctuation
    other than hyphens is trimmed, and runs of more than MAX_WORDS words
    are cut to TRUNCATED_WORDS.
    """
    body_start = start + len(MENTION_MARKER)
    words: List[Tuple[str, int]] = []
    for match in WORD_PATTERN.finditer(text, body_start, end):
        words.append((match.group(), match.end()))

    if words:
        last_word, last_end = words[-1]
        trimmed = _trim_trailing_punctuation(last_word)
        if trimmed:
            words[-1] = (trimmed, last_end - (len(last_word) - len(trimmed)))
        else:
            words.pop()

    if len(words) > MAX_WORDS:
        words = words[:TRUNCATED_WORDS]
    return words


def extract_mentions(text: str) -> List[RawSpan]:
    """
    Scan text for mention spans.

    Args:
        text: Raw message text (any string)

    Returns:
        Spans in source order. Every span's cleaned text is longer than
        the marker and its range lies within ``text``.
    """
    if not text:
        return []

    spans: List[RawSpan] = []
    for match in MENTION_PATTERN.finditer(text):
        words = _clean(text, match.start(), match.end())
        if not words:
            continue

        cleaned = MENTION_MARKER + " ".join(word for word, _ in words)
        if len(cleaned) <= len(MENTION_MARKER):
            continue

        spans.append(
            RawSpan(
                text=cleaned,
                offset=match.start(),
                length=words[-1][1] - match.start(),
                raw_length=match.end() - match.start(),
                words=tuple(word for word, _ in words),
                word_ends=tuple(end for _, end in words),
            )
        )
    return spans
