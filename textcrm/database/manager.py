#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the TextCRM message store.

Provides the CrmDB class owning the SQLite engine and session factory.

Notes
==============
- The schema is created with ``Base.metadata.create_all``
- All datetimes are stored as UTC
- SQLite foreign keys are switched on for every connection so mention
  rows cascade with their message
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Union

# --- Third party ---
from sqlalchemy import Engine, create_engine, event, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from textcrm.core.exceptions import PersistenceError
from textcrm.core.logging_manager import CrmLogger
from .models import Base


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class CrmDB:
    """
    Engine and session management for the message store.

    Attributes:
        db_path: Filesystem path to the SQLite database file
        engine: SQLAlchemy engine instance
        SessionLocal: SQLAlchemy session factory
        logger: Optional CrmLogger

    Usage:
        db = CrmDB("~/data/textcrm.db")
        with db.session_scope() as session:
            session.add(record)
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        logger: Optional[CrmLogger] = None,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            db_path: Path to the SQLite file
            log_dir: Directory for log files (optional)
            logger: Existing logger to reuse (takes precedence over log_dir)
        """
        self.db_path = Path(db_path).expanduser().resolve()

        if logger is not None:
            self.logger: Optional[CrmLogger] = logger
        elif log_dir:
            self.logger = CrmLogger(
                Path(log_dir).expanduser().resolve() / "system",
                component_name="database",
            )
        else:
            self.logger = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine, session factory and schema."""
        try:
            if self.logger:
                self.logger.log_operation("database_init_start", {"db_path": str(self.db_path)})

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.initialize_schema()

            if self.logger:
                self.logger.log_operation("database_init_complete", {"success": True})

        except (SQLAlchemyError, OSError) as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "database_init"})
            raise PersistenceError(f"Database initialization failed: {e}", operation="init") from e

    def initialize_schema(self) -> None:
        """Create any missing tables."""
        Base.metadata.create_all(bind=self.engine)

    def table_names(self) -> list:
        return inspect(self.engine).get_table_names()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Commits on success, rolls back and re-raises on any error.
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        if self.logger:
            self.logger.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            if self.logger:
                self.logger.log_debug("session_commit", {"session_id": session_id})
        except Exception as e:
            session.rollback()
            if self.logger:
                self.logger.log_error(e, {"session_id": session_id, "operation": "session_scope"})
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
