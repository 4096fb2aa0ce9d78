#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators and context managers for store operations.

Every SQLAlchemy failure surfaces as PersistenceError so callers only
handle one exception type for the durable log.
"""
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from textcrm.core.exceptions import PersistenceError
from textcrm.core.logging_manager import CrmLogger, safe_logger


def log_store_operation(operation_name: str):
    """
    Decorator to log store operations with timing and context.

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            start_time = datetime.now()
            operation_id = f"{operation_name}_{start_time.strftime('%Y%m%d_%H%M%S_%f')}"
            logger = safe_logger(getattr(self, "logger", None))

            logger.log_debug(
                f"Starting {operation_name}",
                {"operation_id": operation_id, "args_count": len(args)},
            )

            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                logger.log_error(
                    e,
                    {
                        "operation": operation_name,
                        "operation_id": operation_id,
                        "duration_seconds": (datetime.now() - start_time).total_seconds(),
                    },
                )
                raise

            logger.log_operation(
                f"{operation_name}_completed",
                {
                    "operation_id": operation_id,
                    "duration_seconds": (datetime.now() - start_time).total_seconds(),
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


def handle_db_errors(operation: str) -> Callable:
    """
    Decorator translating SQLAlchemy errors into PersistenceError.

    Args:
        operation: Store operation name recorded on the error
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(*args, **kwargs):
            try:
                return function(*args, **kwargs)
            except IntegrityError as e:
                raise PersistenceError(f"Data integrity violation: {e}", operation=operation) from e
            except SQLAlchemyError as e:
                raise PersistenceError(f"Database operation failed: {e}", operation=operation) from e

        return wrapper

    return decorator


class StoreOperation:
    """
    Context manager combining logging and error translation.

    Usage:
        with StoreOperation(self.logger, "append", {"message_id": message.id}):
            session.add(record)
    """

    def __init__(
        self,
        logger: Optional[CrmLogger],
        operation: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.logger = safe_logger(logger)
        self.operation = operation
        self.details = details or {}
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "StoreOperation":
        self.start_time = datetime.now()
        self.logger.log_debug(f"Starting {self.operation}", self.details)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        duration = (datetime.now() - self.start_time).total_seconds()

        if exc is None:
            self.logger.log_operation(
                f"{self.operation}_completed",
                {**self.details, "duration_seconds": duration, "success": True},
            )
            return False

        self.logger.log_error(exc, {"operation": self.operation, **self.details})

        if isinstance(exc, IntegrityError):
            raise PersistenceError(
                f"Data integrity violation: {exc}", operation=self.operation
            ) from exc
        if isinstance(exc, SQLAlchemyError):
            raise PersistenceError(
                f"Database operation failed: {exc}", operation=self.operation
            ) from exc
        return False
