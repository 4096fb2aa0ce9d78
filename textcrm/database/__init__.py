#!/usr/bin/env python3
"""
TextCRM Database Package
------------------------

Durable storage for the message log:
- CrmDB: engine, schema and transactional sessions
- SqlMessageStore: user-scoped asynchronous message store
- InMemoryMessageStore: non-durable store for tests
"""

from .manager import CrmDB
from .store import InMemoryMessageStore, MessageStore, SqlMessageStore
from .decorators import StoreOperation, handle_db_errors, log_store_operation

__all__ = [
    "CrmDB",
    "InMemoryMessageStore",
    "MessageStore",
    "SqlMessageStore",
    "StoreOperation",
    "handle_db_errors",
    "log_store_operation",
]
