"""
Cache store service.

Async facade over the local SQLite cache. Every operation runs in its own
transaction and operations are serialized through one ``asyncio.Lock``, so
a watch-state toggle never interleaves with a catalog upsert.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable, Iterable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from subfeed.config.database import DatabaseManager
from subfeed.db.schema import ColumnMigration, ensure_schema
from subfeed.exceptions import PersistenceError, SchemaInitError
from subfeed.models.video import VideoRecord
from subfeed.models.watch_state import (
    CacheStats,
    WatchHistoryEntry,
    WatchLaterEntry,
)
from subfeed.repositories import (
    VideoRepository,
    WatchHistoryRepository,
    WatchLaterRepository,
    to_record,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class CacheStore:
    """
    Persistent store for cached videos and watch state.

    Parameters
    ----------
    database : DatabaseManager | str
        Database manager, or a database URL to build one from.
    clock : Callable[[], datetime], optional
        Source of "now"; injectable for freshness tests.
    """

    def __init__(self, database: DatabaseManager | str, clock: Clock = utc_now) -> None:
        if isinstance(database, str):
            database = DatabaseManager(database)
        self._db = database
        self._clock = clock
        self._lock = asyncio.Lock()
        self._videos = VideoRepository()
        self._watch_later = WatchLaterRepository()
        self._history = WatchHistoryRepository()

    @property
    def database(self) -> DatabaseManager:
        """The underlying database manager."""
        return self._db

    # ═══════════════════════════════════════════════════════════════════════
    # Schema
    # ═══════════════════════════════════════════════════════════════════════

    async def ensure_schema(self) -> list[ColumnMigration]:
        """
        Open storage and bring the schema up to date.

        Returns
        -------
        list[ColumnMigration]
            Column migrations applied by this call.

        Raises
        ------
        SchemaInitError
            If the database cannot be opened or initialized.
        """
        async with self._lock:
            try:
                self._db.ensure_database_directory()
                return await ensure_schema(self._db.get_engine())
            except (SQLAlchemyError, OSError) as e:
                logger.error("Schema initialization failed: %s", e)
                raise SchemaInitError(
                    f"Failed to initialize the cache database: {e}",
                    database_url=self._db.database_url,
                    original_error=e,
                ) from e

    # ═══════════════════════════════════════════════════════════════════════
    # Videos
    # ═══════════════════════════════════════════════════════════════════════

    async def load_fresh(self, max_age: timedelta) -> List[VideoRecord]:
        """
        Load videos cached within ``max_age`` of now.

        Parameters
        ----------
        max_age : timedelta
            Freshness window; a row cached exactly ``max_age`` ago is fresh.

        Returns
        -------
        List[VideoRecord]
            Fresh videos ordered by publication time, oldest first.
        """
        cutoff = self._clock() - max_age
        async with self._operation("load_fresh", "Video") as session:
            rows = await self._videos.get_fresh(session, cached_since=cutoff)
            return [to_record(row) for row in rows]

    async def upsert_all(self, records: Iterable[VideoRecord]) -> int:
        """
        Store ``records`` in one transaction, stamping them as cached now.

        Returns
        -------
        int
            Number of distinct videos written.
        """
        records = list(records)
        now = self._clock()
        async with self._operation("upsert_all", "Video") as session:
            written = await self._videos.upsert_many(session, records, cached_at=now)
        logger.info("Cached %d videos", written)
        return written

    async def clear_videos(self) -> int:
        """Delete every cached video. Watch state is left untouched."""
        async with self._operation("clear_videos", "Video") as session:
            deleted = await self._videos.delete_all(session)
        logger.info("Cleared %d cached videos", deleted)
        return deleted

    # ═══════════════════════════════════════════════════════════════════════
    # Watch state
    # ═══════════════════════════════════════════════════════════════════════

    async def load_watch_later_set(self) -> set[str]:
        """Video IDs in the default watch-later list."""
        async with self._operation("load_watch_later_set", "WatchLaterEntry") as session:
            return await self._watch_later.get_video_ids(session)

    async def load_watched_set(self) -> set[str]:
        """Video IDs in the watch history."""
        async with self._operation("load_watched_set", "WatchHistoryEntry") as session:
            return await self._history.get_video_ids(session)

    async def toggle_watch_later(self, video_id: str) -> bool:
        """Flip watch-later membership; returns the new state."""
        async with self._operation("toggle_watch_later", "WatchLaterEntry") as session:
            member = await self._watch_later.toggle(session, video_id, now=self._clock())
        logger.debug("Watch later %s: %s", video_id, member)
        return member

    async def toggle_watched(self, video_id: str) -> bool:
        """Flip the watched flag; returns the new state."""
        async with self._operation("toggle_watched", "WatchHistoryEntry") as session:
            watched = await self._history.toggle(session, video_id, now=self._clock())
        logger.debug("Watched %s: %s", video_id, watched)
        return watched

    async def mark_watched(self, video_id: str) -> None:
        """Record ``video_id`` as watched now. Never removes."""
        async with self._operation("mark_watched", "WatchHistoryEntry") as session:
            await self._history.mark(session, video_id, now=self._clock())

    async def list_watch_later(self) -> List[WatchLaterEntry]:
        """Watch-later entries, most recently added first."""
        async with self._operation("list_watch_later", "WatchLaterEntry") as session:
            rows = await self._watch_later.list_entries(session)
            return [WatchLaterEntry.model_validate(row) for row in rows]

    async def list_watch_history(self) -> List[WatchHistoryEntry]:
        """Watch-history entries, most recently watched first."""
        async with self._operation("list_watch_history", "WatchHistoryEntry") as session:
            rows = await self._history.list_entries(session)
            return [WatchHistoryEntry.model_validate(row) for row in rows]

    # ═══════════════════════════════════════════════════════════════════════
    # Maintenance
    # ═══════════════════════════════════════════════════════════════════════

    async def stats(self, max_age: timedelta) -> CacheStats:
        """Summarize cache and watch-state contents."""
        cutoff = self._clock() - max_age
        async with self._operation("stats", "Video") as session:
            oldest, newest = await self._videos.get_cached_at_range(session)
            return CacheStats(
                video_count=await self._videos.count(session),
                fresh_count=await self._videos.count_fresh(session, cached_since=cutoff),
                oldest_cached_at=oldest,
                newest_cached_at=newest,
                watch_later_count=len(await self._watch_later.get_video_ids(session)),
                watched_count=await self._history.count(session),
            )

    async def close(self) -> None:
        """Dispose of database connections."""
        await self._db.close()

    @asynccontextmanager
    async def _operation(
        self, operation: str, entity_type: str
    ) -> AsyncGenerator[AsyncSession, None]:
        async with self._lock:
            try:
                async with self._db.transaction() as session:
                    yield session
            except SQLAlchemyError as e:
                logger.warning("Cache store %s failed: %s", operation, e)
                raise PersistenceError(
                    f"Failed to {operation.replace('_', ' ')}: {e}",
                    operation=operation,
                    entity_type=entity_type,
                    original_error=e,
                ) from e
