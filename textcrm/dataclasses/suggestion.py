"""
suggestion.py
-------------
Dataclasses exchanged by the suggestion composer and its collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from textcrm.dataclasses.message import Coordinate, MentionType


@dataclass(frozen=True)
class PlaceSearchResult:
    """A venue returned by a live place search."""

    name: str
    address: str
    coordinate: Optional[Coordinate] = None


@dataclass(frozen=True)
class SuggestionItem:
    """
    A proposed completion for the mention being typed.

    Attributes:
        name: Completion without the marker
        kind: Whether selecting it yields a person or a place mention
        subtitle: Address for live search places
        coordinate: Position for live search places
    """

    name: str
    kind: MentionType
    subtitle: Optional[str] = None
    coordinate: Optional[Coordinate] = None

    @property
    def label(self) -> str:
        return f"@{self.name}"

    @classmethod
    def from_search_result(cls, result: PlaceSearchResult) -> "SuggestionItem":
        return cls(
            name=result.name,
            kind=MentionType.PLACE,
            subtitle=result.address,
            coordinate=result.coordinate,
        )


@dataclass(frozen=True)
class ConfirmedSelection:
    """A suggestion the user picked while drafting a message."""

    name: str
    kind: MentionType
    coordinate: Optional[Coordinate] = None

    @classmethod
    def from_item(cls, item: SuggestionItem) -> "ConfirmedSelection":
        return cls(name=item.name, kind=item.kind, coordinate=item.coordinate)
