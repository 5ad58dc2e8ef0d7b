"""
Database Management Layer.

DatabaseManager owns one engine and its session factory. The application
factory creates it and hands it to whatever needs it; there is no
process-wide connection.

Pooling by URL:
- sqlite:// (in-memory): StaticPool, so every session sees the same database
- sqlite:///file.db: SQLAlchemy's default pool, usable across threads
- anything else: QueuePool sized from settings

Usage:
    from core.db import DatabaseManager

    database = DatabaseManager()
    database.initialize("sqlite:///issue_tracker.db")
    database.create_all_tables()
    with database.session() as session:
        issue = session.query(Issue).first()
    database.dispose()
"""

import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import Settings, get_settings
from .errors import StorageUnavailableError

# Failures that mean the store itself is unreachable, as opposed to a bad query
CONNECTIVITY_ERRORS = (OperationalError, InterfaceError, DisconnectionError)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


def _engine_options(url: str, settings: Settings) -> dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
    }


class DatabaseManager:
    """
    Database handle with connection pooling and health checks.

    Features:
    - Pool chosen from the database URL
    - Context manager for automatic commit/rollback
    - Health check used by startup and the readiness probe
    """

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.SessionLocal: sessionmaker[Session] | None = None
        self._initialized = False

    def initialize(self, database_url: str | None = None) -> None:
        """
        Open the engine. Calling it again on an open manager does nothing.

        Args:
            database_url: Optional override. Uses settings.database_url if not provided.
        """
        if self._initialized:
            return

        settings = get_settings()
        url = database_url or settings.database_url

        self.engine = create_engine(url, echo=settings.debug, **_engine_options(url, settings))
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )
        self._initialized = True

    def create_all_tables(self) -> None:
        """Create missing tables. Existing tables are left as they are."""
        self._ensure_initialized()
        # Register models on the metadata before creating tables
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions with auto-commit/rollback.

        Usage:
            with database.session() as session:
                IssueRepository(session).insert(...)
        """
        self._ensure_initialized()
        session = self.SessionLocal()
        try:
            yield session
            try:
                session.commit()
            except CONNECTIVITY_ERRORS as e:
                raise StorageUnavailableError("commit", e) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def health_check(self) -> dict:
        """
        Run SELECT 1 against the engine.

        Returns:
            dict with 'healthy' (bool), 'latency_ms' (float), and 'error' (str or None)
        """
        if not self._initialized:
            return {"healthy": False, "latency_ms": 0, "error": "Database not initialized"}

        start = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            error = None
        except Exception as e:
            error = str(e)
        latency = round((time.perf_counter() - start) * 1000, 2)
        return {"healthy": error is None, "latency_ms": latency, "error": error}

    def dispose(self) -> None:
        """Close the engine and its pooled connections. Call at app shutdown."""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")


__all__ = ["Base", "CONNECTIVITY_ERRORS", "DatabaseManager"]
