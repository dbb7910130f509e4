"""
Repository layer for data access.

This module provides repository implementations for the local cache database.
"""

from __future__ import annotations

from .base import BaseRepository, BaseSQLAlchemyRepository
from .video_repository import VideoRepository, to_record
from .watch_state_repository import WatchHistoryRepository, WatchLaterRepository

__all__ = [
    "BaseRepository",
    "BaseSQLAlchemyRepository",
    "VideoRepository",
    "WatchHistoryRepository",
    "WatchLaterRepository",
    "to_record",
]
