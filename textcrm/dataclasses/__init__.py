"""
Domain value types for TextCRM.

Usage:
    from textcrm.dataclasses import Message, Mention, MentionType, Person, Place
"""
from .message import Coordinate, Mention, MentionType, Message
from .entities import EntityKey, Person, Place, RegistryMarks, RegistrySnapshot, entity_id
from .suggestion import ConfirmedSelection, PlaceSearchResult, SuggestionItem

__all__ = [
    "Coordinate",
    "Mention",
    "MentionType",
    "Message",
    "Person",
    "Place",
    "EntityKey",
    "RegistryMarks",
    "RegistrySnapshot",
    "entity_id",
    "ConfirmedSelection",
    "PlaceSearchResult",
    "SuggestionItem",
]
