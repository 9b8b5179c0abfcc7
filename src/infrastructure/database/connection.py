# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Record store database connection management using SQLAlchemy.

Uses the SQLAlchemy 2.0 sync API with the psycopg2 driver. The engine
only reads from this database, so sessions are short lived and opened
per lookup.

Example:
    from src.infrastructure.database.connection import DatabaseManager

    manager = DatabaseManager(settings)
    with manager.session() as session:
        units = session.execute(select(Unit)).scalars().all()
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Base exception for database setup operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


def create_store_engine(url: str, pool_size: int = 10, max_overflow: int = 20, echo: bool = False) -> Engine:
    """Create a sync engine for the record store.

    In-memory SQLite URLs share a single connection so every session
    sees the same database.

    Args:
        url: SQLAlchemy database URL.
        pool_size: Connection pool size (ignored for SQLite).
        max_overflow: Maximum overflow connections (ignored for SQLite).
        echo: Log emitted SQL.

    Returns:
        Configured engine.

    Raises:
        DatabaseError: If the engine cannot be created.
    """
    try:
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in url or url.rstrip("/").endswith("sqlite:"):
                kwargs["poolclass"] = StaticPool
            return create_engine(url, echo=echo, **kwargs)

        return create_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
            echo=echo,
        )
    except (SQLAlchemyError, ImportError, ValueError) as e:
        raise DatabaseError("Failed to initialize record store connection", e) from e


class DatabaseManager:
    """Owns the record store engine and session factory.

    Attributes:
        engine: SQLAlchemy engine.
        sessionmaker: Session factory bound to the engine.
    """

    def __init__(self, settings: "Settings", engine: Engine | None = None) -> None:
        """Initialize the database manager.

        Args:
            settings: Application settings containing database configuration.
            engine: Prebuilt engine, mainly for tests.
        """
        self._settings = settings
        self.engine = engine or create_store_engine(
            settings.database.url,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            echo=settings.debug,
        )
        self.sessionmaker = sessionmaker(
            bind=self.engine,
            class_=Session,
            expire_on_commit=False,
            autoflush=False,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Get a session for the record store.

        The session is committed on success and rolled back on exception.

        Yields:
            Session for database operations.
        """
        session = self.sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def check_connection(self) -> bool:
        """Check if the record store is reachable.

        Returns:
            True if the database is reachable, False otherwise.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Record store unreachable", error=str(e))
            return False

    def close(self) -> None:
        """Dispose the connection pool."""
        self.engine.dispose()
