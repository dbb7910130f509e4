"""
Tests for the FeedService aggregation pipeline.

Runs against a real temporary cache and subscription file with a fake
fetcher standing in for the network.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from subfeed.exceptions import AggregationError, PersistenceError, SubscriptionListError
from subfeed.models.aggregation import AggregationComplete, StatusEvent
from subfeed.models.enums import AggregationPhase
from subfeed.services.batch_scheduler import BatchScheduler
from subfeed.services.cache_store import CacheStore
from subfeed.services.feed_service import FeedService, deduplicate
from subfeed.services.subscriptions import SubscriptionList
from tests.factories.clock import FakeClock
from tests.factories.video_factory import VideoRecordFactory

# CRITICAL: This line ensures async tests work with coverage
pytestmark = pytest.mark.asyncio

CHANNEL_A = "UCaaaaaaaaaaaaaaaaaaaaaa"
CHANNEL_B = "UCbbbbbbbbbbbbbbbbbbbbbb"


@pytest.fixture
def subscriptions(tmp_path: Path) -> SubscriptionList:
    path = tmp_path / "subscriptions.csv"
    path.write_text(
        "Channel Id,Channel Url,Channel Title\n"
        f"{CHANNEL_A},https://www.youtube.com/channel/{CHANNEL_A},Alpha\n"
        f"{CHANNEL_B},https://www.youtube.com/channel/{CHANNEL_B},Beta\n",
        encoding="utf-8",
    )
    return SubscriptionList(path)


@pytest.fixture
def fetcher() -> AsyncMock:
    fetcher = AsyncMock()
    fetcher.fetch.return_value = []
    return fetcher


@pytest.fixture
def service(
    subscriptions: SubscriptionList, cache_store: CacheStore, fetcher: AsyncMock
) -> FeedService:
    return FeedService(
        subscriptions, cache_store, BatchScheduler(fetcher, batch_delay=0)
    )


class TestDeduplicate:
    """Tests for deduplicate."""

    def test_last_occurrence_wins(self) -> None:
        video = VideoRecordFactory.build(title="first")
        other = VideoRecordFactory.build()
        replacement = video.model_copy(update={"title": "second"})

        result = deduplicate([video, other, replacement])

        assert [v.video_id for v in result] == [other.video_id, video.video_id]
        assert result[1].title == "second"


class TestFetchVideos:
    """Tests for FeedService.fetch_videos."""

    async def test_fresh_cache_skips_network(
        self, service: FeedService, cache_store: CacheStore, fetcher: AsyncMock
    ) -> None:
        cached = VideoRecordFactory.build_batch(2)
        await cache_store.upsert_all(cached)

        result = await service.fetch_videos()

        assert result.from_cache is True
        assert result.videos == cached
        fetcher.fetch.assert_not_awaited()

    async def test_stale_cache_triggers_fetch(
        self,
        service: FeedService,
        cache_store: CacheStore,
        fetcher: AsyncMock,
        clock: FakeClock,
    ) -> None:
        await cache_store.upsert_all(VideoRecordFactory.build_batch(2))
        clock.advance(minutes=40)
        fetched = VideoRecordFactory.build_batch(3)
        fetcher.fetch.side_effect = [fetched[:2], fetched[2:]]

        result = await service.fetch_videos()

        assert result.from_cache is False
        assert fetcher.fetch.await_count == 2
        assert [v.video_id for v in result.videos] == [v.video_id for v in fetched]
        assert len(await cache_store.load_fresh(service.max_age)) == 3

    async def test_force_refresh_ignores_fresh_cache(
        self, service: FeedService, cache_store: CacheStore, fetcher: AsyncMock
    ) -> None:
        await cache_store.upsert_all(VideoRecordFactory.build_batch(1))

        result = await service.fetch_videos(force_refresh=True)

        assert result.from_cache is False
        assert fetcher.fetch.await_count == 2

    async def test_result_is_deduplicated_and_sorted(
        self, service: FeedService, fetcher: AsyncMock
    ) -> None:
        older, newer = VideoRecordFactory.build_batch(2)
        fetcher.fetch.side_effect = [[newer, older], [newer]]

        result = await service.fetch_videos(force_refresh=True)

        assert [v.video_id for v in result.videos] == [older.video_id, newer.video_id]

    async def test_callbacks_receive_phases_and_progress(
        self, service: FeedService
    ) -> None:
        statuses: list[str] = []
        progress: list[tuple[int, int]] = []

        await service.fetch_videos(
            on_status=statuses.append,
            on_progress=lambda current, total: progress.append((current, total)),
        )

        assert statuses == [
            AggregationPhase.LOADING_SUBSCRIPTIONS.value,
            AggregationPhase.CHECKING_CACHE.value,
            AggregationPhase.FETCHING.value,
            AggregationPhase.SAVING.value,
        ]
        assert progress[-1] == (2, 2)

    async def test_subscriptions_are_reported(self, service: FeedService) -> None:
        result = await service.fetch_videos()

        assert [s.title for s in result.subscriptions] == ["Alpha", "Beta"]

    async def test_max_channels_limits_fetch(
        self,
        subscriptions: SubscriptionList,
        cache_store: CacheStore,
        fetcher: AsyncMock,
    ) -> None:
        service = FeedService(
            subscriptions,
            cache_store,
            BatchScheduler(fetcher, batch_delay=0),
            max_channels=1,
        )

        await service.fetch_videos(force_refresh=True)

        fetcher.fetch.assert_awaited_once_with(CHANNEL_A, "Alpha")

    async def test_all_channels_failing_yields_empty_catalog(
        self, service: FeedService, fetcher: AsyncMock
    ) -> None:
        fetcher.fetch.side_effect = RuntimeError("offline")

        result = await service.fetch_videos(force_refresh=True)

        assert result.videos == []


class TestPipelineFailures:
    """Tests for pipeline-level failures."""

    async def test_missing_subscription_file(
        self, tmp_path: Path, cache_store: CacheStore, fetcher: AsyncMock
    ) -> None:
        service = FeedService(
            SubscriptionList(tmp_path / "missing.csv"),
            cache_store,
            BatchScheduler(fetcher, batch_delay=0),
        )

        with pytest.raises(SubscriptionListError):
            await service.fetch_videos()

    async def test_cache_read_failure_becomes_aggregation_error(
        self, subscriptions: SubscriptionList, fetcher: AsyncMock
    ) -> None:
        store = AsyncMock(spec=CacheStore)
        store.load_fresh.side_effect = PersistenceError("locked", operation="load_fresh")
        service = FeedService(subscriptions, store, BatchScheduler(fetcher, batch_delay=0))

        with pytest.raises(AggregationError) as exc_info:
            await service.fetch_videos()

        assert isinstance(exc_info.value.original_error, PersistenceError)

    async def test_save_failure_becomes_aggregation_error(
        self, subscriptions: SubscriptionList, fetcher: AsyncMock
    ) -> None:
        store = AsyncMock(spec=CacheStore)
        store.upsert_all.side_effect = PersistenceError("disk full", operation="upsert_all")
        service = FeedService(subscriptions, store, BatchScheduler(fetcher, batch_delay=0))

        with pytest.raises(AggregationError):
            await service.fetch_videos(force_refresh=True)


class TestStream:
    """Tests for the event stream shape."""

    async def test_ends_with_exactly_one_result(self, service: FeedService) -> None:
        events = [event async for event in service.stream(force_refresh=True)]

        assert isinstance(events[-1], AggregationComplete)
        assert sum(isinstance(e, AggregationComplete) for e in events) == 1
        assert events[0] == StatusEvent(AggregationPhase.LOADING_SUBSCRIPTIONS)
