"""
Data models module for subfeed.

Defines Pydantic models for feed videos, subscriptions, watch state and the
events emitted while aggregating feeds.
"""

from __future__ import annotations

from .aggregation import (
    AggregationComplete,
    AggregationEvent,
    BatchCompleted,
    ProgressEvent,
    StatusEvent,
)
from .enums import AggregationPhase, NavigationKind, SessionPhase
from .subscription import Subscription, channel_url
from .video import VideoRecord, derive_thumbnail_url, watch_url
from .watch_state import (
    DEFAULT_WATCH_LATER_LIST,
    CacheStats,
    WatchHistoryEntry,
    WatchLaterEntry,
)
from .youtube_types import ChannelId, VideoId

__all__ = [
    "AggregationComplete",
    "AggregationEvent",
    "AggregationPhase",
    "BatchCompleted",
    "CacheStats",
    "ChannelId",
    "DEFAULT_WATCH_LATER_LIST",
    "NavigationKind",
    "ProgressEvent",
    "SessionPhase",
    "StatusEvent",
    "Subscription",
    "VideoId",
    "VideoRecord",
    "WatchHistoryEntry",
    "WatchLaterEntry",
    "channel_url",
    "derive_thumbnail_url",
    "watch_url",
]
