"""
Video repository.

Provides the data access layer for cached feed videos: freshness-bounded
loads and batch upserts keyed by video ID.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import Video as VideoDB
from ..models.video import VideoRecord
from .base import BaseSQLAlchemyRepository

# Rows per INSERT statement; keeps bound parameters under SQLite's limit
UPSERT_CHUNK_SIZE = 200

_UPSERT_COLUMNS = (
    "title",
    "channel",
    "link",
    "published",
    "is_short",
    "thumbnail_url",
    "view_count",
    "like_count",
    "description",
    "cached_at",
)


def to_record(db_video: VideoDB) -> VideoRecord:
    """Convert a database row into a ``VideoRecord``."""
    return VideoRecord(
        video_id=db_video.video_id,
        title=db_video.title,
        channel=db_video.channel,
        link=db_video.link,
        published=db_video.published,
        is_short=db_video.is_short,
        thumbnail_url=db_video.thumbnail_url,
        view_count=db_video.view_count,
        like_count=db_video.like_count,
        description=db_video.description,
    )


class VideoRepository(BaseSQLAlchemyRepository[VideoDB]):
    """Repository for cached feed videos."""

    def __init__(self) -> None:
        """Initialize repository with Video model."""
        super().__init__(VideoDB)

    async def get(self, session: AsyncSession, id: str) -> Optional[VideoDB]:
        """Get a cached video by ID."""
        result = await session.execute(select(VideoDB).where(VideoDB.video_id == id))
        return result.scalar_one_or_none()

    async def exists(self, session: AsyncSession, id: str) -> bool:
        """Check if a video is cached."""
        result = await session.execute(
            select(VideoDB.video_id).where(VideoDB.video_id == id)
        )
        return result.first() is not None

    async def get_fresh(
        self, session: AsyncSession, *, cached_since: datetime
    ) -> List[VideoDB]:
        """
        Get videos cached at or after ``cached_since``.

        Parameters
        ----------
        session : AsyncSession
            Database session
        cached_since : datetime
            Inclusive freshness cutoff.

        Returns
        -------
        List[VideoDB]
            Fresh videos ordered by publication time, oldest first.
        """
        result = await session.execute(
            select(VideoDB)
            .where(VideoDB.cached_at >= cached_since)
            .order_by(VideoDB.published.asc(), VideoDB.video_id.asc())
        )
        return list(result.scalars().all())

    async def count_fresh(self, session: AsyncSession, *, cached_since: datetime) -> int:
        """Count videos cached at or after ``cached_since``."""
        result = await session.execute(
            select(func.count())
            .select_from(VideoDB)
            .where(VideoDB.cached_at >= cached_since)
        )
        return result.scalar() or 0

    async def get_cached_at_range(
        self, session: AsyncSession
    ) -> tuple[Optional[datetime], Optional[datetime]]:
        """Return the oldest and newest ``cached_at`` stamps."""
        result = await session.execute(
            select(func.min(VideoDB.cached_at), func.max(VideoDB.cached_at))
        )
        # min/max inherit the column type, so values come back as aware UTC
        oldest, newest = result.one()
        return oldest, newest

    async def upsert_many(
        self,
        session: AsyncSession,
        records: Iterable[VideoRecord],
        *,
        cached_at: datetime,
    ) -> int:
        """
        Insert or wholesale-replace videos keyed by ``video_id``.

        Parameters
        ----------
        session : AsyncSession
            Database session; the caller owns the transaction.
        records : Iterable[VideoRecord]
            Videos to store. Later duplicates of an ID win.
        cached_at : datetime
            Freshness stamp applied to every row.

        Returns
        -------
        int
            Number of distinct videos written.
        """
        rows: dict[str, dict[str, Any]] = {}
        for record in records:
            row = record.model_dump()
            row["cached_at"] = cached_at
            rows[record.video_id] = row

        values = list(rows.values())
        for start in range(0, len(values), UPSERT_CHUNK_SIZE):
            chunk = values[start : start + UPSERT_CHUNK_SIZE]
            stmt = sqlite_insert(VideoDB).values(chunk)
            stmt = stmt.on_conflict_do_update(
                index_elements=[VideoDB.video_id],
                set_={column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
            )
            await session.execute(stmt)
        return len(values)
