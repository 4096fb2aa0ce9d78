#!/usr/bin/env python3
"""
session.py
----------
Explicit user session object.

A UserSession is created when a user signs in and closed at sign-out.
It is passed to the message store, which scopes every row to the
session's user id. There is no global session and no fallback identity:
opening a session either succeeds with a real user id or raises.

Usage:
    session = UserSession.open("user-42", email="ada@example.com")
    store = SqlMessageStore(db, session)
    ...
    session.close()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

# --- Local imports ---
from .exceptions import AuthenticationError
from .validators import DataValidator


@dataclass
class UserSession:
    """
    Authenticated user context.

    Attributes:
        user_id: Identifier rows are scoped to
        email: Optional contact email
        started_at: UTC time the session was opened
        closed_at: UTC time of sign-out, None while active
    """

    user_id: str
    email: Optional[str] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    closed_at: Optional[datetime] = None

    @classmethod
    def open(cls, user_id: str, email: Optional[str] = None) -> "UserSession":
        """
        Open a session for an authenticated user.

        Raises:
            AuthenticationError: If the user id is blank
        """
        normalized = DataValidator.normalize_string(user_id)
        if not normalized:
            raise AuthenticationError("Cannot open a session without a user id")
        return cls(user_id=normalized, email=DataValidator.normalize_string(email))

    @property
    def is_active(self) -> bool:
        return self.closed_at is None

    def require_active(self) -> str:
        """
        Return the user id of an active session.

        Raises:
            AuthenticationError: If the session was closed
        """
        if not self.is_active:
            raise AuthenticationError(f"Session for '{self.user_id}' is closed")
        return self.user_id

    def close(self) -> None:
        """Sign out. Idempotent."""
        if self.closed_at is None:
            self.closed_at = datetime.now(timezone.utc)
