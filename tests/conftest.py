"""
conftest.py
-----------
Shared pytest fixtures for TextCRM tests.

Provides fixtures for:
- Temporary directories and database setup/teardown
- Sample messages and contact lists
- Controllable store and place search doubles
"""
import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import List

import pytest

from textcrm.core.exceptions import PersistenceError, SearchError
from textcrm.core.session import UserSession
from textcrm.database import CrmDB, InMemoryMessageStore, SqlMessageStore
from textcrm.dataclasses import Coordinate, Mention, MentionType, Message, PlaceSearchResult
from textcrm.sources import StaticContactSource


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Message Factories -----

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def mention(text: str, message_text: str, mention_type: MentionType, coordinate=None) -> Mention:
    """Build a mention located at the first occurrence of ``text``."""
    offset = message_text.index(text)
    return Mention(
        text=text,
        type=mention_type,
        source_range=(offset, len(text)),
        coordinate=coordinate,
    )


def make_message(text: str, mentions=(), minutes: int = 0, message_id: str = None) -> Message:
    """Build a message from (mention_text, type[, coordinate]) tuples."""
    built = [mention(item[0], text, item[1], *item[2:]) for item in mentions]
    return Message(
        id=message_id or f"msg-{minutes:04d}",
        text=text,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        mentions=tuple(built),
    )


@pytest.fixture
def message_factory():
    """Factory building messages with located mentions."""
    return make_message


@pytest.fixture
def deli_coordinate():
    return Coordinate(latitude=40.7223, longitude=-73.9874)


@pytest.fixture
def sample_log() -> List[Message]:
    """The Alice/Deli log: two messages about Alice, one at the Deli."""
    return [
        make_message(
            "Lunch with @Alice at @Deli",
            [("@Alice", MentionType.PERSON), ("@Deli", MentionType.PLACE)],
            minutes=0,
        ),
        make_message("Call @Alice", [("@Alice", MentionType.PERSON)], minutes=30),
    ]


@pytest.fixture
def contacts():
    return StaticContactSource(["Alice", "Bob-Smith"])


# ----- Database Fixtures -----

@pytest.fixture
def test_db(tmp_dir):
    """CrmDB on a throwaway SQLite file."""
    db = CrmDB(tmp_dir / "test.db")
    yield db
    db.dispose()


@pytest.fixture
def user_session():
    session = UserSession.open("user-1", email="user@example.com")
    yield session
    session.close()


@pytest.fixture
def sql_store(test_db, user_session):
    return SqlMessageStore(test_db, user_session)


@pytest.fixture
def memory_store():
    return InMemoryMessageStore()


# ----- Collaborator Doubles -----

class FailingStore(InMemoryMessageStore):
    """In-memory store whose operations can be switched to fail."""

    def __init__(self, messages=None):
        super().__init__(messages)
        self.fail_append = False
        self.fail_delete = False
        self.fail_load = False
        self.fail_marks = False

    async def append(self, message):
        if self.fail_append:
            raise PersistenceError("backend unavailable", operation="append")
        await super().append(message)

    async def delete(self, message_id):
        if self.fail_delete:
            raise PersistenceError("backend unavailable", operation="delete")
        await super().delete(message_id)

    async def load_all(self):
        if self.fail_load:
            raise PersistenceError("backend unavailable", operation="load")
        return await super().load_all()

    async def mark_deleted(self, mention_type, name, removed_at):
        if self.fail_marks:
            raise PersistenceError("backend unavailable", operation="mark_deleted")
        await super().mark_deleted(mention_type, name, removed_at)

    async def pin_person(self, name):
        if self.fail_marks:
            raise PersistenceError("backend unavailable", operation="pin_person")
        await super().pin_person(name)


@pytest.fixture
def failing_store():
    return FailingStore()


class ControlledPlaceSearch:
    """Place search that resolves only when the test releases it."""

    def __init__(self, results=(), error: Exception = None):
        self.results = list(results)
        self.error = error
        self.release = asyncio.Event()
        self.queries: List[str] = []

    async def search(self, query):
        self.queries.append(query)
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return list(self.results)


@pytest.fixture
def luigis_result():
    return PlaceSearchResult(
        name="Luigi Trattoria",
        address="12 Mulberry Street, New York, New York",
        coordinate=Coordinate(latitude=40.7196, longitude=-73.9970),
    )


@pytest.fixture
def search_failure():
    return SearchError("timed out")


@pytest.fixture
def controlled_search():
    """Factory for place searches released by the test."""
    return ControlledPlaceSearch
