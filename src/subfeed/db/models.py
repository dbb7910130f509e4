"""
Database models for subfeed.

This module contains the SQLAlchemy models for the local feed cache: cached
videos plus the watch-later and watch-history tables that live independently
of cache freshness.
"""

from __future__ import annotations

import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class UTCDateTime(TypeDecorator[datetime.datetime]):
    """
    Timezone-aware datetime stored as naive UTC.

    SQLite has no native timestamp type and drops offsets, so values are
    normalized to UTC on the way in and tagged as UTC on the way out.
    Naive inputs are assumed to already be UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(
        self, value: Optional[datetime.datetime], dialect  # type: ignore[no-untyped-def]
    ) -> Optional[datetime.datetime]:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(
        self, value: Optional[datetime.datetime], dialect  # type: ignore[no-untyped-def]
    ) -> Optional[datetime.datetime]:
        if value is None:
            return None
        return value.replace(tzinfo=datetime.timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Video(Base):
    """Cached feed video. Replaced wholesale on every upsert."""

    __tablename__ = "videos"

    # Primary key
    video_id: Mapped[str] = mapped_column(String(20), primary_key=True)

    # Feed metadata
    title: Mapped[str] = mapped_column(Text, nullable=False)
    channel: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str] = mapped_column(Text, nullable=False)
    published: Mapped[datetime.datetime] = mapped_column(UTCDateTime, nullable=False)
    is_short: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Optional feed data (added after the first schema release)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text)
    view_count: Mapped[Optional[int]] = mapped_column(BigInteger)
    like_count: Mapped[Optional[int]] = mapped_column(BigInteger)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Freshness
    cached_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("idx_published", "published"),
        Index("idx_cached_at", "cached_at"),
        Index("idx_is_short", "is_short"),
    )


class WatchList(Base):
    """Named membership list; the default list is "Watch Later"."""

    __tablename__ = "watch_lists"

    list_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    created_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, nullable=False)

    entries: Mapped[list["WatchLaterEntry"]] = relationship(
        "WatchLaterEntry", back_populates="watch_list", cascade="all, delete-orphan"
    )


class WatchLaterEntry(Base):
    """Watch-later membership. Not tied to the videos table."""

    __tablename__ = "watch_later"

    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("watch_lists.list_id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    added_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, nullable=False)

    watch_list: Mapped[WatchList] = relationship("WatchList", back_populates="entries")


class WatchHistoryEntry(Base):
    """A video that has been opened or manually marked as watched."""

    __tablename__ = "watch_history"

    video_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    watched_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, nullable=False)
