"""
Database configuration and connection management.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Manages the async engine and sessions for the local cache database."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self._database_url = database_url
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def database_url(self) -> str:
        """The configured database URL."""
        return self._database_url

    @property
    def is_sqlite(self) -> bool:
        """Check if the database is SQLite."""
        return make_url(self._database_url).get_backend_name() == "sqlite"

    def ensure_database_directory(self) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        url = make_url(self._database_url)
        if self.is_sqlite and url.database and url.database != ":memory:":
            Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    def get_engine(self) -> AsyncEngine:
        """Get or create async database engine."""
        if self._engine is None:
            self._engine = create_async_engine(
                self._database_url,
                echo=self._echo,
                future=True,
            )
            if self.is_sqlite:
                event.listen(
                    self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys
                )
        return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.get_engine(),
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session wrapped in a single transaction.

        The transaction commits when the block exits normally and rolls back
        when it raises.
        """
        session_factory = self.get_session_factory()
        async with session_factory() as session:
            async with session.begin():
                yield session

    async def close(self) -> None:
        """Close database connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None
