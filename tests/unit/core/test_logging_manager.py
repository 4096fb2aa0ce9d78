"""
Tests for logging_manager module.

Tests the CrmLogger file output, the safe_logger function and the
NullLogger class that provide null-safe logging throughout the codebase.
"""
import pytest
from unittest.mock import MagicMock

import click

from textcrm.core.exceptions import PersistenceError
from textcrm.core.logging_manager import (
    CrmLogger,
    NullLogger,
    handle_cli_error,
    safe_logger,
    setup_logger,
)


class TestNullLogger:
    """Tests for NullLogger class."""

    def test_null_logger_methods_are_no_ops(self):
        """NullLogger logging methods should do nothing."""
        logger = NullLogger()
        logger.log_operation("test_op", {"key": "value"})
        logger.log_error(ValueError("test error"), {"context": "test"})
        logger.log_debug("debug message", {"key": "value"})
        logger.log_warning("warning message", {"key": "value"})

    def test_null_logger_log_cli_error_returns_formatted(self):
        """NullLogger.log_cli_error should return formatted error string."""
        result = NullLogger().log_cli_error(ValueError("test error"))
        assert result == "❌ ValueError: test error"


class TestSafeLogger:
    """Tests for safe_logger function."""

    def test_safe_logger_returns_logger_when_provided(self):
        """safe_logger should return the same logger when not None."""
        mock_logger = MagicMock(spec=CrmLogger)
        assert safe_logger(mock_logger) is mock_logger

    def test_safe_logger_returns_null_logger_when_none(self):
        """safe_logger should return NullLogger when logger is None."""
        assert isinstance(safe_logger(None), NullLogger)

    def test_safe_logger_null_logger_is_singleton(self):
        """safe_logger should return the same NullLogger instance."""
        assert safe_logger(None) is safe_logger(None)


class TestCrmLogger:
    """Tests for file output of CrmLogger."""

    @pytest.fixture
    def logger(self, tmp_dir):
        logger = CrmLogger(tmp_dir / "logs", component_name="store")
        yield logger
        logger.close()

    def test_creates_log_files(self, logger, tmp_dir):
        """Main and error log files should be created on setup."""
        assert (tmp_dir / "logs" / "store.log").exists()
        assert (tmp_dir / "logs" / "errors.log").exists()

    def test_log_operation_writes_json_details(self, logger, tmp_dir):
        """Operations should be logged with JSON details."""
        logger.log_operation("message_sent", {"message_id": "abc"})
        content = (tmp_dir / "logs" / "store.log").read_text(encoding="utf-8")
        assert "OPERATION - message_sent" in content
        assert '"message_id": "abc"' in content

    def test_log_error_goes_to_error_log(self, logger, tmp_dir):
        """Errors should land in errors.log with context."""
        logger.log_error(ValueError("broken"), {"operation": "append"})
        content = (tmp_dir / "logs" / "errors.log").read_text(encoding="utf-8")
        assert "ValueError: broken" in content
        assert '"operation": "append"' in content

    def test_bound_fields_on_every_line(self, logger, tmp_dir):
        """Bound fields should appear on operations and errors alike."""
        logger.bind(user_id="ada")
        logger.log_operation("message_sent", {"message_id": "m1"})
        logger.log_error(ValueError("broken"))

        operations = (tmp_dir / "logs" / "store.log").read_text(encoding="utf-8")
        errors = (tmp_dir / "logs" / "errors.log").read_text(encoding="utf-8")
        assert '{"user_id": "ada", "message_id": "m1"}' in operations
        assert '"user_id": "ada"' in errors

    def test_traceback_logged_after_except_block(self, logger, tmp_dir):
        """The traceback attached to the error is written, wherever it is logged."""
        try:
            raise PersistenceError("locked", operation="append")
        except PersistenceError as e:
            caught = e

        logger.log_error(caught)
        content = (tmp_dir / "logs" / "errors.log").read_text(encoding="utf-8")
        assert "Traceback" in content
        assert "test_traceback_logged_after_except_block" in content

    def test_unraised_error_has_no_traceback(self, logger, tmp_dir):
        logger.log_error(ValueError("never raised"))
        content = (tmp_dir / "logs" / "errors.log").read_text(encoding="utf-8")
        assert "Traceback" not in content

    def test_log_cli_error_format(self, logger):
        """CLI errors should be short, with the operation in the message."""
        message = logger.log_cli_error(PersistenceError("locked", operation="append"))
        assert message == "❌ PersistenceError: append failed: locked"

    def test_log_cli_error_with_traceback(self, logger):
        """Verbose mode should append a traceback section."""
        message = logger.log_cli_error(ValueError("x"), show_traceback=True)
        assert message.startswith("❌ ValueError: x\n\n")


class TestSetupLogger:
    """Tests for setup_logger helper."""

    def test_writes_under_operations_directory(self, tmp_dir):
        logger = setup_logger(tmp_dir, "cli")
        try:
            assert (tmp_dir / "operations" / "cli.log").exists()
        finally:
            logger.close()


class TestHandleCliError:
    """Tests for handle_cli_error."""

    def test_exits_with_code_and_logs(self):
        """handle_cli_error should log, print and exit."""
        mock_logger = MagicMock(spec=CrmLogger)
        mock_logger.log_cli_error.return_value = "❌ ValueError: bad"
        ctx = click.Context(click.Command("test"), obj={"logger": mock_logger})

        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ctx, ValueError("bad"), "send", {"text": "hi"}, exit_code=2)

        assert exc_info.value.code == 2
        context = mock_logger.log_cli_error.call_args[0][1]
        assert context == {"operation": "send", "text": "hi"}

    def test_works_without_logger(self):
        """A missing logger should fall back to the null logger."""
        ctx = click.Context(click.Command("test"), obj={})
        with pytest.raises(SystemExit):
            handle_cli_error(ctx, ValueError("bad"), "send")
