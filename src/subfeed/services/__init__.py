"""
Services for subfeed.

Business logic for fetching channel feeds, caching them locally and
rendering thumbnail previews.
"""

from __future__ import annotations

from .batch_scheduler import BatchScheduler
from .cache_store import CacheStore
from .feed_fetcher import FeedFetcher
from .feed_service import FeedService
from .subscriptions import SubscriptionList, resolve_channel
from .thumbnail_cache import ThumbnailCache

__all__ = [
    "BatchScheduler",
    "CacheStore",
    "FeedFetcher",
    "FeedService",
    "SubscriptionList",
    "ThumbnailCache",
    "resolve_channel",
]
