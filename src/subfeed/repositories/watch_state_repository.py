"""
Watch-state repositories.

Watch-later membership and watch history are keyed by video ID only; neither
table references the videos cache, so entries survive cache expiry and
clearing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import WatchHistoryEntry as WatchHistoryDB
from ..db.models import WatchLaterEntry as WatchLaterDB
from ..db.models import WatchList as WatchListDB
from ..models.watch_state import DEFAULT_WATCH_LATER_LIST
from .base import BaseSQLAlchemyRepository

logger = logging.getLogger(__name__)


class WatchLaterRepository(BaseSQLAlchemyRepository[WatchLaterDB]):
    """Repository for watch-later membership in a named list."""

    def __init__(self, list_name: str = DEFAULT_WATCH_LATER_LIST) -> None:
        super().__init__(WatchLaterDB)
        self.list_name = list_name

    async def get_list_id(self, session: AsyncSession) -> int:
        """
        Resolve the list ID, creating the list if it is missing.

        Parameters
        ----------
        session : AsyncSession
            Database session

        Returns
        -------
        int
            Primary key of the watch list.
        """
        result = await session.execute(
            select(WatchListDB.list_id).where(WatchListDB.name == self.list_name)
        )
        list_id = result.scalar_one_or_none()
        if list_id is not None:
            return list_id

        logger.info("Creating watch list %r", self.list_name)
        await session.execute(
            sqlite_insert(WatchListDB)
            .values(name=self.list_name, created_at=datetime.now().astimezone())
            .on_conflict_do_nothing(index_elements=[WatchListDB.name])
        )
        result = await session.execute(
            select(WatchListDB.list_id).where(WatchListDB.name == self.list_name)
        )
        return result.scalar_one()

    async def get(
        self, session: AsyncSession, id: str
    ) -> Optional[WatchLaterDB]:
        """Get the membership row for a video."""
        list_id = await self.get_list_id(session)
        result = await session.execute(
            select(WatchLaterDB).where(
                WatchLaterDB.list_id == list_id, WatchLaterDB.video_id == id
            )
        )
        return result.scalar_one_or_none()

    async def exists(self, session: AsyncSession, id: str) -> bool:
        """Check if a video is in the list."""
        return await self.get(session, id) is not None

    async def get_video_ids(self, session: AsyncSession) -> set[str]:
        """Return every video ID in the list."""
        list_id = await self.get_list_id(session)
        result = await session.execute(
            select(WatchLaterDB.video_id).where(WatchLaterDB.list_id == list_id)
        )
        return set(result.scalars().all())

    async def list_entries(self, session: AsyncSession) -> List[WatchLaterDB]:
        """Return list entries, most recently added first."""
        list_id = await self.get_list_id(session)
        result = await session.execute(
            select(WatchLaterDB)
            .where(WatchLaterDB.list_id == list_id)
            .order_by(WatchLaterDB.added_at.desc(), WatchLaterDB.video_id.asc())
        )
        return list(result.scalars().all())

    async def toggle(
        self, session: AsyncSession, video_id: str, *, now: datetime
    ) -> bool:
        """
        Flip membership of ``video_id``.

        Parameters
        ----------
        session : AsyncSession
            Database session; the caller owns the transaction.
        video_id : str
            Video to toggle.
        now : datetime
            Timestamp recorded when the video is added.

        Returns
        -------
        bool
            The new membership state.
        """
        list_id = await self.get_list_id(session)
        removed = await session.execute(
            delete(WatchLaterDB).where(
                WatchLaterDB.list_id == list_id, WatchLaterDB.video_id == video_id
            )
        )
        if removed.rowcount:
            return False

        await session.execute(
            sqlite_insert(WatchLaterDB)
            .values(list_id=list_id, video_id=video_id, added_at=now)
            .on_conflict_do_nothing()
        )
        return True


class WatchHistoryRepository(BaseSQLAlchemyRepository[WatchHistoryDB]):
    """Repository for the set of watched videos."""

    def __init__(self) -> None:
        super().__init__(WatchHistoryDB)

    async def get(
        self, session: AsyncSession, id: str
    ) -> Optional[WatchHistoryDB]:
        """Get the history row for a video."""
        result = await session.execute(
            select(WatchHistoryDB).where(WatchHistoryDB.video_id == id)
        )
        return result.scalar_one_or_none()

    async def exists(self, session: AsyncSession, id: str) -> bool:
        """Check if a video has been watched."""
        return await self.get(session, id) is not None

    async def get_video_ids(self, session: AsyncSession) -> set[str]:
        """Return every watched video ID."""
        result = await session.execute(select(WatchHistoryDB.video_id))
        return set(result.scalars().all())

    async def list_entries(self, session: AsyncSession) -> List[WatchHistoryDB]:
        """Return history entries, most recently watched first."""
        result = await session.execute(
            select(WatchHistoryDB).order_by(
                WatchHistoryDB.watched_at.desc(), WatchHistoryDB.video_id.asc()
            )
        )
        return list(result.scalars().all())

    async def mark(self, session: AsyncSession, video_id: str, *, now: datetime) -> None:
        """Record ``video_id`` as watched, refreshing ``watched_at`` if present."""
        stmt = sqlite_insert(WatchHistoryDB).values(video_id=video_id, watched_at=now)
        await session.execute(
            stmt.on_conflict_do_update(
                index_elements=[WatchHistoryDB.video_id],
                set_={"watched_at": stmt.excluded.watched_at},
            )
        )

    async def toggle(
        self, session: AsyncSession, video_id: str, *, now: datetime
    ) -> bool:
        """Flip the watched state of ``video_id`` and return the new state."""
        removed = await session.execute(
            delete(WatchHistoryDB).where(WatchHistoryDB.video_id == video_id)
        )
        if removed.rowcount:
            return False
        await self.mark(session, video_id, now=now)
        return True
