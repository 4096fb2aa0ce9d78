"""
Database Models Package
------------------------

SQLAlchemy ORM models for the durable message log.

- base: Declarative base
- core: MessageRecord and MentionRecord
- registry: EntityTombstone and PinnedPerson

Usage:
    from textcrm.database.models import Base, MessageRecord, MentionRecord
"""
from .base import Base
from .core import MentionRecord, MessageRecord
from .registry import EntityTombstone, PinnedPerson

__all__ = [
    "Base",
    "EntityTombstone",
    "MentionRecord",
    "MessageRecord",
    "PinnedPerson",
]
