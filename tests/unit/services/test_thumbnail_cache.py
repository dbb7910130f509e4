"""
Unit tests for ThumbnailCache and the half-block renderer.
"""

from __future__ import annotations

import io

import httpx
import pytest
from PIL import Image, UnidentifiedImageError

from subfeed.services.thumbnail_cache import ThumbnailCache, render_thumbnail
from tests.factories.video_factory import VideoRecordFactory

# CRITICAL: This line ensures async tests work with coverage
pytestmark = pytest.mark.asyncio

PANEL_WIDTH = 30
PANEL_HEIGHT = 14


def _png(color: tuple[int, int, int] = (255, 0, 0), size: tuple[int, int] = (8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class _ImageServer:
    """MockTransport handler that counts requests and serves one PNG."""

    def __init__(self, status_code: int = 200, body: bytes | None = None) -> None:
        self.status_code = status_code
        self.body = _png() if body is None else body
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        return httpx.Response(self.status_code, content=self.body)


def _cache(server: _ImageServer, capacity: int = 100) -> ThumbnailCache:
    client = httpx.AsyncClient(transport=httpx.MockTransport(server))
    return ThumbnailCache(
        capacity, client, prefetch_pause=0, prefetch_delay=0
    )


# ═══════════════════════════════════════════════════════════════════════════
# Rendering
# ═══════════════════════════════════════════════════════════════════════════


class TestRenderThumbnail:
    """Tests for render_thumbnail."""

    def test_solid_image_uses_truecolor_half_blocks(self) -> None:
        rendered = render_thumbnail(_png((255, 0, 0), (4, 4)), 2, 1)

        lines = rendered.split("\n")
        assert len(lines) == 1
        assert lines[0].count("▀") == 2
        assert "\x1b[38;2;255;0;0m" in lines[0]
        assert "\x1b[48;2;255;0;0m" in lines[0]
        assert lines[0].endswith("\x1b[0m")

    def test_preserves_aspect_ratio(self) -> None:
        # 16:9 source into a 20x20 cell box is width-bound
        rendered = render_thumbnail(_png(size=(160, 90)), 20, 20)

        lines = rendered.split("\n")
        assert lines[0].count("▀") == 20
        assert len(lines) == 5

    def test_rejects_non_image_bytes(self) -> None:
        with pytest.raises(UnidentifiedImageError):
            render_thumbnail(b"definitely not an image", 10, 5)


# ═══════════════════════════════════════════════════════════════════════════
# Cache behaviour
# ═══════════════════════════════════════════════════════════════════════════


class TestLoadOrFetch:
    """Tests for ThumbnailCache.load_or_fetch."""

    async def test_fetches_once_then_serves_from_cache(self) -> None:
        server = _ImageServer()
        cache = _cache(server)
        video = VideoRecordFactory.build()

        first = await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT)
        second = await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT)

        assert first is not None
        assert first == second
        assert len(server.requests) == 1
        assert cache.get(video, PANEL_WIDTH, PANEL_HEIGHT) == first
        await cache.close()

    async def test_key_is_quantized_target_size(self) -> None:
        cache = _cache(_ImageServer())
        video = VideoRecordFactory.build()

        assert cache.key_for(video, 30, 14) == (video.video_id, 26, 10)
        assert cache.key_for(video, 60, 24) == (video.video_id, 44, 20)
        assert cache.key_for(video, 100, 30) == (video.video_id, 60, 20)
        await cache.close()

    async def test_missing_thumbnail_url_returns_none(self) -> None:
        server = _ImageServer()
        cache = _cache(server)
        video = VideoRecordFactory.build(thumbnail_url=None)

        assert await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT) is None
        assert server.requests == []
        await cache.close()

    async def test_http_failure_is_not_cached(self) -> None:
        server = _ImageServer(status_code=404)
        cache = _cache(server)
        video = VideoRecordFactory.build()

        assert await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT) is None
        assert await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT) is None

        assert len(cache) == 0
        assert len(server.requests) == 2
        await cache.close()

    async def test_undecodable_body_returns_none(self) -> None:
        cache = _cache(_ImageServer(body=b"<html>not an image</html>"))
        video = VideoRecordFactory.build()

        assert await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT) is None
        assert len(cache) == 0
        await cache.close()

    async def test_network_error_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        cache = ThumbnailCache(client=client)

        assert await cache.load_or_fetch(VideoRecordFactory.build(), 30, 14) is None
        await client.aclose()


class TestEviction:
    """Tests for the bounded, insertion-ordered store."""

    async def test_capacity_plus_one_evicts_first_inserted(self) -> None:
        cache = _cache(_ImageServer(), capacity=2)
        first, second, third = VideoRecordFactory.build_batch(3)

        for video in (first, second, third):
            await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT)

        assert len(cache) == 2
        assert [key[0] for key in cache.keys()] == [second.video_id, third.video_id]
        await cache.close()

    async def test_access_does_not_refresh_eviction_order(self) -> None:
        cache = _cache(_ImageServer(), capacity=2)
        first, second, third = VideoRecordFactory.build_batch(3)

        await cache.load_or_fetch(first, PANEL_WIDTH, PANEL_HEIGHT)
        await cache.load_or_fetch(second, PANEL_WIDTH, PANEL_HEIGHT)
        await cache.load_or_fetch(first, PANEL_WIDTH, PANEL_HEIGHT)
        await cache.load_or_fetch(third, PANEL_WIDTH, PANEL_HEIGHT)

        assert cache.key_for(first, PANEL_WIDTH, PANEL_HEIGHT) not in cache
        await cache.close()

    async def test_same_video_at_new_size_is_a_new_entry(self) -> None:
        cache = _cache(_ImageServer(), capacity=2)
        video = VideoRecordFactory.build()

        await cache.load_or_fetch(video, 30, 14)
        await cache.load_or_fetch(video, 60, 24)

        assert len(cache) == 2
        await cache.close()

    async def test_rejects_non_positive_capacity(self) -> None:
        with pytest.raises(ValueError):
            ThumbnailCache(capacity=0)


class TestPrefetch:
    """Tests for background prefetch."""

    async def test_prefetch_warms_cache(self) -> None:
        server = _ImageServer()
        cache = _cache(server)
        videos = VideoRecordFactory.build_batch(5)

        task = cache.prefetch(videos, PANEL_WIDTH, PANEL_HEIGHT, limit=3)
        assert task is not None
        await task

        assert len(server.requests) == 3
        for video in videos[:3]:
            assert cache.get(video, PANEL_WIDTH, PANEL_HEIGHT) is not None
        assert cache.get(videos[3], PANEL_WIDTH, PANEL_HEIGHT) is None
        await cache.close()

    async def test_prefetch_skips_cached_and_urlless_videos(self) -> None:
        server = _ImageServer()
        cache = _cache(server)
        cached, urlless, fresh = VideoRecordFactory.build_batch(3)
        urlless = urlless.model_copy(update={"thumbnail_url": None})
        await cache.load_or_fetch(cached, PANEL_WIDTH, PANEL_HEIGHT)

        task = cache.prefetch([cached, urlless, fresh], PANEL_WIDTH, PANEL_HEIGHT)
        assert task is not None
        await task

        assert len(server.requests) == 2
        assert cache.get(fresh, PANEL_WIDTH, PANEL_HEIGHT) is not None
        await cache.close()

    async def test_nothing_to_prefetch_returns_none(self) -> None:
        cache = _cache(_ImageServer())
        video = VideoRecordFactory.build()
        await cache.load_or_fetch(video, PANEL_WIDTH, PANEL_HEIGHT)

        assert cache.prefetch([video], PANEL_WIDTH, PANEL_HEIGHT) is None
        await cache.close()

    async def test_prefetch_failures_are_swallowed(self) -> None:
        cache = _cache(_ImageServer(status_code=500))

        task = cache.prefetch(VideoRecordFactory.build_batch(2), PANEL_WIDTH, PANEL_HEIGHT)
        assert task is not None
        await task

        assert len(cache) == 0
        await cache.close()

    async def test_close_cancels_pending_prefetch(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(_ImageServer()))
        cache = ThumbnailCache(client=client, prefetch_delay=60)

        task = cache.prefetch(VideoRecordFactory.build_batch(1), PANEL_WIDTH, PANEL_HEIGHT)
        await cache.close()

        assert task is not None
        assert task.cancelled()
        await client.aclose()
