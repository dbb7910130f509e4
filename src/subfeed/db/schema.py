"""
Idempotent schema management for the local cache database.

``ensure_schema`` is safe to run on every startup:

1. ``create_all`` creates any table that does not exist yet.
2. Each ``ColumnMigration`` is applied only when an inspection shows the
   column is missing, so re-running is a no-op rather than a swallowed
   "duplicate column" error.
3. Indexes are created with ``checkfirst``.
4. The default "Watch Later" list is inserted unless it already exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Connection, inspect, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine

from subfeed.db.models import Base, WatchList
from subfeed.models.watch_state import DEFAULT_WATCH_LATER_LIST

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMigration:
    """An additive, nullable column that older databases may lack."""

    table: str
    column: str
    ddl_type: str


ADDITIVE_COLUMNS: tuple[ColumnMigration, ...] = (
    ColumnMigration("videos", "thumbnail_url", "TEXT"),
    ColumnMigration("videos", "view_count", "BIGINT"),
    ColumnMigration("videos", "like_count", "BIGINT"),
    ColumnMigration("videos", "description", "TEXT"),
)


def missing_columns(
    connection: Connection, migrations: tuple[ColumnMigration, ...] = ADDITIVE_COLUMNS
) -> list[ColumnMigration]:
    """Return the migrations whose column is not present yet."""
    inspector = inspect(connection)
    existing: dict[str, set[str]] = {}
    pending = []
    for migration in migrations:
        if migration.table not in existing:
            existing[migration.table] = {
                column["name"] for column in inspector.get_columns(migration.table)
            }
        if migration.column not in existing[migration.table]:
            pending.append(migration)
    return pending


def _ensure_schema_sync(connection: Connection) -> list[ColumnMigration]:
    Base.metadata.create_all(connection, checkfirst=True)

    applied = missing_columns(connection)
    for migration in applied:
        logger.info(
            "Adding column %s.%s (%s)",
            migration.table,
            migration.column,
            migration.ddl_type,
        )
        connection.execute(
            text(
                f"ALTER TABLE {migration.table} "
                f"ADD COLUMN {migration.column} {migration.ddl_type}"
            )
        )

    for table in Base.metadata.sorted_tables:
        for index in table.indexes:
            index.create(connection, checkfirst=True)

    connection.execute(
        sqlite_insert(WatchList)
        .values(name=DEFAULT_WATCH_LATER_LIST, created_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=[WatchList.name])
    )
    return applied


async def ensure_schema(engine: AsyncEngine) -> list[ColumnMigration]:
    """
    Bring the database schema up to date.

    Parameters
    ----------
    engine : AsyncEngine
        Engine bound to the cache database.

    Returns
    -------
    list[ColumnMigration]
        Column migrations that were applied during this call (empty when the
        schema was already current).
    """
    async with engine.begin() as conn:
        applied = await conn.run_sync(_ensure_schema_sync)
    if applied:
        logger.info("Applied %d column migration(s)", len(applied))
    else:
        logger.debug("Schema already up to date")
    return applied
