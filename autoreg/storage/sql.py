"""SQL-backed key-value store.

Stores each key as one row in ``kv_entries``. The engine and session factory
are created lazily so importing this module never opens a connection.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime, timezone

from loguru import logger
from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from autoreg.storage.errors import StorageUnavailableError


class Base(DeclarativeBase):
    """Base class for all database models."""


class KeyValueEntry(Base):
    """One persisted key.

    Stores:
    - key: Fixed storage key (e.g. "mesocycle_history")
    - value: Serialized JSON payload
    - updated_at: Timestamp of the last write
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )


class SqlKeyValueStore:
    """Key-value store on top of SQLAlchemy."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    def _get_engine(self) -> Engine:
        """Get or create the database engine (lazy initialization)."""
        if self._engine is None:
            logger.info(f"Initializing key-value store engine: {self.database_url}")
            self._engine = create_engine(
                self.database_url,
                connect_args={"check_same_thread": False} if "sqlite" in self.database_url else {},
                echo=False,
            )
            Base.metadata.create_all(bind=self._engine)
        return self._engine

    def _get_session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._get_engine())
        return self._session_factory

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get database session context manager.

        Raises:
            StorageUnavailableError: If the backend fails; the session is rolled back
        """
        try:
            session = self._get_session_factory()()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Cannot open key-value store: {e}") from e

        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Key-value store session error, rolling back: {e}")
            session.rollback()
            raise StorageUnavailableError(str(e)) from e
        finally:
            session.close()

    def get(self, key: str) -> str | None:
        with self.get_session() as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with self.get_session() as session:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
                entry.updated_at = datetime.now(timezone.utc)
        logger.debug(f"Key-value store write: key={key}, bytes={len(value)}")

    def remove(self, key: str) -> None:
        with self.get_session() as session:
            entry = session.get(KeyValueEntry, key)
            if entry is not None:
                session.delete(entry)

    def dispose(self) -> None:
        """Release pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
