"""
Watch-state models.

Watch-later membership and watch history are per-video flags persisted
independently of the video cache.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .youtube_types import VideoId

DEFAULT_WATCH_LATER_LIST = "Watch Later"


class WatchLaterEntry(BaseModel):
    """Membership of a video in a watch-later list."""

    list_id: int = Field(..., ge=1, description="Watch list ID")
    video_id: VideoId = Field(..., description="YouTube video ID")
    added_at: datetime = Field(..., description="When the video was added")

    model_config = ConfigDict(from_attributes=True)


class WatchHistoryEntry(BaseModel):
    """A video the user has seen."""

    video_id: VideoId = Field(..., description="YouTube video ID")
    watched_at: datetime = Field(..., description="When the video was last opened")

    model_config = ConfigDict(from_attributes=True)


class CacheStats(BaseModel):
    """Statistics about the local cache contents.

    Attributes
    ----------
    video_count : int
        Number of cached videos.
    fresh_count : int
        Number of cached videos within the freshness window.
    oldest_cached_at : datetime | None
        Oldest ``cached_at`` stamp.
    newest_cached_at : datetime | None
        Newest ``cached_at`` stamp.
    watch_later_count : int
        Number of videos in the default watch-later list.
    watched_count : int
        Number of videos in the watch history.
    """

    video_count: int
    fresh_count: int
    oldest_cached_at: datetime | None
    newest_cached_at: datetime | None
    watch_later_count: int
    watched_count: int
