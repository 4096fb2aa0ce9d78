#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Logging for TextCRM: store calls, message log changes, live place
searches and CLI failures.

Each CrmLogger writes two rotating files under its log directory:
    <component>.log   every operation, debug line and warning
    errors.log        errors with their context and traceback

Warnings are echoed to the console as well. Fields bound with
``CrmLogger.bind`` (the signed-in user id, for instance) are stamped on
every line.

Code that may run without a logger goes through ``safe_logger``, which
hands back a shared NullLogger.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _format_error(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


class CrmLogger:
    """
    Operation and error logger for one component ('cli', 'store', ...).

    Attributes:
        log_dir: Directory for log files
        component_name: Component name, also the log file stem
        bound: Fields added to every logged line
        main_logger: Operations, debug lines and warnings
        error_logger: Errors only
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "textcrm",
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ) -> None:
        """
        Args:
            log_dir: Directory for log files, created if missing
            component_name: Component name (e.g. 'store', 'cli')
            max_bytes: Size at which a log file rotates (default: 5MB)
            backup_count: Rotated files to keep (default: 3)
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.bound: Dict[str, Any] = {}

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.main_logger = self._build_logger(
            "operations", self.log_dir / f"{component_name}.log", logging.DEBUG
        )
        self.error_logger = self._build_logger(
            "errors", self.log_dir / "errors.log", logging.ERROR
        )

        console = logging.StreamHandler()
        console.setLevel(logging.WARNING)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        self.main_logger.addHandler(console)

    def _build_logger(self, channel: str, file_path: Path, level: int) -> logging.Logger:
        logger = logging.getLogger(f"{self.component_name}.{channel}")
        logger.setLevel(level)
        # Only this component's handlers are replaced
        logger.handlers = []

        handler = RotatingFileHandler(
            file_path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        return logger

    def bind(self, **fields: Any) -> None:
        """
        Add fields to every subsequent line.

        Examples:
            >>> logger.bind(user_id="ada")
            >>> logger.log_operation("message_sent", {"message_id": "m1"})
            # OPERATION - message_sent: {"user_id": "ada", "message_id": "m1"}
        """
        self.bound.update(fields)

    def close(self) -> None:
        """Close and detach every handler."""
        for logger in (self.main_logger, self.error_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def _emit(
        self, level: int, label: str, message: str, details: Optional[Dict[str, Any]]
    ) -> None:
        fields = {**self.bound, **(details or {})}
        line = f"{label} - {message}"
        if fields:
            line += f": {json.dumps(fields, default=str)}"
        self.main_logger.log(level, line)

    def log_operation(
        self, operation: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Record a completed operation ('message_sent', 'append_completed', ...).

        Args:
            operation: Operation name
            details: JSON-serialisable details; other values go through str()
        """
        self._emit(logging.INFO, "OPERATION", operation, details)

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.DEBUG, "DEBUG", message, details)

    def log_warning(
        self, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Record a warning, also shown on the console."""
        self._emit(logging.WARNING, "WARNING", message, details)

    def log_error(
        self, error: BaseException, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Write an error, its context and its traceback to errors.log.

        The traceback is the one attached to ``error``, so this can be
        called after the ``except`` block that caught it.

        Args:
            error: The exception
            context: Where it happened (operation, message id, ...)
        """
        fields = {**self.bound, **(context or {})}
        self.error_logger.error(f"ERROR - {_format_error(error)}")
        if fields:
            self.error_logger.error(f"Context: {json.dumps(fields, default=str)}")
        if error.__traceback__ is not None:
            trace = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
            self.error_logger.error(f"Traceback:\n{trace}")

    def log_cli_error(
        self,
        error: BaseException,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log a failed command and build the line shown to the user.

        Args:
            error: The exception that ended the command
            context: Command name and arguments
            show_traceback: Append the traceback (``--verbose``)

        Returns:
            Display line, e.g. '❌ PersistenceError: append failed: locked'
        """
        self.log_error(error, context or {"source": "cli"})

        message = f"❌ {_format_error(error)}"
        if show_traceback:
            trace = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
            return f"{message}\n\n{trace}"
        return message


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Report a failed ``crm`` command and exit.

    The error is logged with the command name and arguments; the user
    sees one line on stderr, plus the traceback with ``--verbose``.

    Args:
        ctx: Click context holding 'logger' and 'verbose'
        error: Exception that ended the command
        operation: Command name (e.g. 'send', 'delete-person')
        additional_context: Command arguments worth logging
        exit_code: Process exit code (default: 1)

    Note:
        Never returns.
    """
    logger: Optional[CrmLogger] = ctx.obj.get("logger")
    verbose: bool = ctx.obj.get("verbose", False)

    context = {"operation": operation}
    if additional_context:
        context.update(additional_context)

    error_msg = safe_logger(logger).log_cli_error(error, context, show_traceback=verbose)

    click.echo(error_msg, err=True)
    sys.exit(exit_code)


class NullLogger:
    """CrmLogger stand-in that records nothing."""

    bound: Dict[str, Any] = {}

    def bind(self, **fields: Any) -> None:
        pass

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: BaseException, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: BaseException,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return f"❌ {_format_error(error)}"


_null_logger = NullLogger()


def safe_logger(logger: Optional[CrmLogger]) -> CrmLogger:
    """Return ``logger``, or the shared NullLogger when it is None."""
    return logger if logger is not None else _null_logger  # type: ignore[return-value]


def setup_logger(log_dir: Path, component_name: str) -> CrmLogger:
    """
    Logger for a CLI run.

    Args:
        log_dir: Base log directory (paths.LOG_DIR by default)
        component_name: Component name, e.g. 'cli'

    Returns:
        CrmLogger writing under ``log_dir/operations``
    """
    return CrmLogger(Path(log_dir) / "operations", component_name=component_name)
