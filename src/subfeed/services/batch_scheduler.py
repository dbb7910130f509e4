"""
Batch scheduler for channel fetches.

Splits the subscription list into fixed-size batches, fetches each batch
concurrently and pauses between batches so a large subscription list does
not hammer the feed host.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Optional

from subfeed.models.aggregation import (
    AggregationEvent,
    BatchCompleted,
    ProgressEvent,
    StatusEvent,
)
from subfeed.models.enums import AggregationPhase
from subfeed.models.subscription import Subscription
from subfeed.models.video import VideoRecord
from subfeed.services.feed_fetcher import FeedFetcher

logger = logging.getLogger(__name__)

# Type aliases for callbacks
ProgressCallback = Callable[[int, int], None]
StatusCallback = Callable[[str], None]

DEFAULT_BATCH_SIZE = 50
DEFAULT_BATCH_DELAY = 0.5


class BatchScheduler:
    """
    Fetches every subscription in paced, concurrent batches.

    Parameters
    ----------
    fetcher : FeedFetcher
        Per-channel fetcher.
    batch_size : int, optional
        Channels fetched concurrently per batch (default 50).
    batch_delay : float, optional
        Seconds to pause between batches (default 0.5).
    """

    def __init__(
        self,
        fetcher: FeedFetcher,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.fetcher = fetcher
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def stream(
        self, subscriptions: Sequence[Subscription]
    ) -> AsyncIterator[AggregationEvent]:
        """
        Fetch all subscriptions, yielding progress as batches are dispatched.

        Yields
        ------
        AggregationEvent
            ``StatusEvent(FETCHING)``, ``ProgressEvent(0, total)``, one
            ``ProgressEvent`` before each later batch, ``ProgressEvent(total,
            total)``, then a single ``BatchCompleted``.
        """
        total = len(subscriptions)
        videos: list[VideoRecord] = []
        failed = 0

        yield StatusEvent(AggregationPhase.FETCHING)
        yield ProgressEvent(0, total)

        for start in range(0, total, self.batch_size):
            if start > 0:
                await asyncio.sleep(self.batch_delay)
                yield ProgressEvent(start, total)

            batch = subscriptions[start : start + self.batch_size]
            results = await asyncio.gather(
                *(self.fetcher.fetch(sub.channel_id, sub.title) for sub in batch),
                return_exceptions=True,
            )
            for sub, result in zip(batch, results):
                if isinstance(result, BaseException):
                    if isinstance(result, asyncio.CancelledError):
                        raise result
                    failed += 1
                    logger.warning(
                        "Fetch for %s (%s) raised: %s", sub.title, sub.channel_id, result
                    )
                    continue
                videos.extend(result)

        yield ProgressEvent(total, total)
        logger.info(
            "Fetched %d videos from %d channels (%d failed)", len(videos), total, failed
        )
        yield BatchCompleted(videos=videos, failed_channels=failed)

    async def run(
        self,
        subscriptions: Sequence[Subscription],
        on_progress: Optional[ProgressCallback] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> list[VideoRecord]:
        """
        Fetch all subscriptions, reporting through callbacks.

        Returns
        -------
        list[VideoRecord]
            Every record fetched, in subscription order.
        """
        videos: list[VideoRecord] = []
        async for event in self.stream(subscriptions):
            if isinstance(event, StatusEvent):
                if on_status:
                    on_status(event.label)
            elif isinstance(event, ProgressEvent):
                if on_progress:
                    on_progress(event.current, event.total)
            elif isinstance(event, BatchCompleted):
                videos = event.videos
        return videos
