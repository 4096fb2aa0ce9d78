#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the TextCRM project.

Exception Hierarchy:
    Exception (built-in)
    └── TextCrmError - Base for all project errors
        ├── PersistenceError - Message store append/delete/load failures
        ├── SearchError - Live place search failures
        ├── ValidationError - Data validation failures
        ├── AuthenticationError - Missing or closed user session
        └── ConfigError - Invalid configuration files or values

Extraction never fails and an unclassified mention is a valid outcome,
so neither has an exception class.

Usage:
    from textcrm.core.exceptions import PersistenceError

    try:
        await log.send("Lunch with @Alice")
    except PersistenceError as e:
        logger.error(f"Store rejected message: {e}")
"""
from typing import Optional


class TextCrmError(Exception):
    """Base exception for all TextCRM errors."""

    pass


class PersistenceError(TextCrmError):
    """
    Exception for message store failures.

    Raised when the durable log cannot complete an operation:
    - Appending a new message
    - Deleting a message
    - Loading the full log

    The caller decides how to recover: an optimistic append is rolled
    back, a failed delete leaves local state untouched and a failed load
    leaves the registries as they were.

    Attributes:
        operation: Store operation that failed ('append', 'delete', 'load')

    Examples:
        >>> raise PersistenceError("disk I/O error", operation="append")
    """

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation

    def __str__(self) -> str:
        base = super().__str__()
        if self.operation:
            return f"{self.operation} failed: {base}"
        return base


class SearchError(TextCrmError):
    """
    Exception for live place search failures.

    Raised by place search clients on transport or decoding problems.
    The suggestion composer treats it as zero results.

    Examples:
        >>> raise SearchError("Place search returned HTTP 503")
    """

    pass


class ValidationError(TextCrmError):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks:
    - Blank message text
    - Missing required fields
    - Coordinates out of range
    - Malformed serialized messages

    Examples:
        >>> raise ValidationError("Required field 'text' missing or empty")
        >>> raise ValidationError("Latitude must be within [-90, 90]")
    """

    pass


class AuthenticationError(TextCrmError):
    """
    Exception for user session problems.

    Authentication is strictly pass/fail: there is no local stand-in
    identity when a session cannot be opened.

    Examples:
        >>> raise AuthenticationError("No active user session")
    """

    pass


class ConfigError(TextCrmError):
    """
    Exception for configuration problems.

    Examples:
        >>> raise ConfigError("suggestion_limit must be a positive integer")
    """

    pass
