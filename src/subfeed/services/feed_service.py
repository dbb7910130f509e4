"""
Feed aggregation pipeline.

Ties together the subscription list, the cache store and the batch
scheduler: serve a fresh cache when there is one, otherwise fetch every
channel, de-duplicate, persist and return the new catalog.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Optional

from subfeed.exceptions import AggregationError, PersistenceError
from subfeed.models.aggregation import (
    AggregationComplete,
    AggregationEvent,
    BatchCompleted,
    ProgressEvent,
    StatusEvent,
)
from subfeed.models.enums import AggregationPhase
from subfeed.models.video import VideoRecord
from subfeed.services.batch_scheduler import (
    BatchScheduler,
    ProgressCallback,
    StatusCallback,
)
from subfeed.services.cache_store import CacheStore
from subfeed.services.subscriptions import SubscriptionList

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(minutes=30)


def deduplicate(videos: list[VideoRecord]) -> list[VideoRecord]:
    """Keep one record per video ID; the last occurrence wins."""
    by_id: dict[str, VideoRecord] = {}
    for video in videos:
        by_id.pop(video.video_id, None)
        by_id[video.video_id] = video
    return list(by_id.values())


class FeedService:
    """
    Loads the video catalog from cache or from the channel feeds.

    Parameters
    ----------
    subscriptions : SubscriptionList
        Source of subscribed channels.
    cache_store : CacheStore
        Local cache.
    scheduler : BatchScheduler
        Paced concurrent fetcher.
    max_age : timedelta, optional
        Cache freshness window (default 30 minutes).
    max_channels : int | None, optional
        Only fetch the first ``max_channels`` subscriptions.
    """

    def __init__(
        self,
        subscriptions: SubscriptionList,
        cache_store: CacheStore,
        scheduler: BatchScheduler,
        max_age: timedelta = DEFAULT_MAX_AGE,
        max_channels: Optional[int] = None,
    ) -> None:
        self.subscriptions = subscriptions
        self.cache_store = cache_store
        self.scheduler = scheduler
        self.max_age = max_age
        self.max_channels = max_channels

    async def stream(self, force_refresh: bool = False) -> AsyncIterator[AggregationEvent]:
        """
        Run the pipeline, yielding status and progress events.

        The final event is always an ``AggregationComplete`` whose videos are
        ordered by publication time, oldest first.

        Raises
        ------
        AggregationError
            If the subscription list or the cache store is unavailable.
        """
        yield StatusEvent(AggregationPhase.LOADING_SUBSCRIPTIONS)
        subscriptions = self.subscriptions.load()
        if self.max_channels is not None:
            subscriptions = subscriptions[: self.max_channels]

        if not force_refresh:
            yield StatusEvent(AggregationPhase.CHECKING_CACHE)
            try:
                cached = await self.cache_store.load_fresh(self.max_age)
            except PersistenceError as e:
                raise AggregationError(
                    f"Failed to read the cache: {e.message}", original_error=e
                ) from e
            if cached:
                logger.info("Serving %d videos from cache", len(cached))
                yield AggregationComplete(
                    videos=cached, subscriptions=subscriptions, from_cache=True
                )
                return

        videos: list[VideoRecord] = []
        async for event in self.scheduler.stream(subscriptions):
            if isinstance(event, BatchCompleted):
                videos = event.videos
            else:
                yield event

        videos = deduplicate(videos)
        videos.sort(key=lambda video: video.published)

        yield StatusEvent(AggregationPhase.SAVING)
        try:
            await self.cache_store.upsert_all(videos)
        except PersistenceError as e:
            raise AggregationError(
                f"Failed to save videos: {e.message}", original_error=e
            ) from e

        yield AggregationComplete(
            videos=videos, subscriptions=subscriptions, from_cache=False
        )

    async def fetch_videos(
        self,
        force_refresh: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> AggregationComplete:
        """
        Run the pipeline, reporting through callbacks.

        Returns
        -------
        AggregationComplete
            The loaded catalog and the subscriptions it was built from.
        """
        result: Optional[AggregationComplete] = None
        async for event in self.stream(force_refresh=force_refresh):
            if isinstance(event, StatusEvent):
                if on_status:
                    on_status(event.label)
            elif isinstance(event, ProgressEvent):
                if on_progress:
                    on_progress(event.current, event.total)
            elif isinstance(event, AggregationComplete):
                result = event
        if result is None:
            raise AggregationError("Feed pipeline ended without a result")
        return result
