"""
Thumbnail preview cache.

Downloads video thumbnails, renders them as true-colour half-block text for
the terminal and keeps a bounded number of renders in memory. Eviction is by
insertion order, not access recency.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Iterable, Optional

import httpx
from PIL import Image, UnidentifiedImageError

from subfeed.browse.layout import DEFAULT_WIDTH_BREAKPOINTS, thumbnail_target_size
from subfeed.models.video import VideoRecord

logger = logging.getLogger(__name__)

ThumbnailKey = tuple[str, int, int]

DEFAULT_CAPACITY = 100
DEFAULT_PREFETCH_LIMIT = 3
DEFAULT_GROUP_SIZE = 2
DEFAULT_GROUP_PAUSE = 0.1
DEFAULT_PREFETCH_DELAY = 0.05

_HALF_BLOCK = "▀"
_RESET = "\x1b[0m"


def render_thumbnail(data: bytes, width: int, height: int) -> str:
    """
    Render image bytes as ANSI half-block text.

    Each character cell shows two vertically stacked pixels: the upper one
    as the foreground of "▀" and the lower one as the background. The image
    is scaled to fit ``width`` columns by ``height`` rows preserving its
    aspect ratio.

    Raises
    ------
    PIL.UnidentifiedImageError
        If the bytes are not a decodable image.
    """
    with Image.open(io.BytesIO(data)) as source:
        img = source.convert("RGB")

    src_w, src_h = img.size
    max_w, max_h = max(1, width), max(1, height) * 2
    scale = min(max_w / src_w, max_h / src_h)
    px_w = max(1, int(src_w * scale))
    px_h = max(2, int(src_h * scale))
    px_h -= px_h % 2
    img = img.resize((px_w, px_h), resample=Image.Resampling.LANCZOS)

    pixels = img.load()
    lines = []
    for y in range(0, px_h, 2):
        cells = []
        for x in range(px_w):
            r1, g1, b1 = pixels[x, y]
            r2, g2, b2 = pixels[x, y + 1]
            cells.append(
                f"\x1b[38;2;{r1};{g1};{b1}m\x1b[48;2;{r2};{g2};{b2}m{_HALF_BLOCK}"
            )
        lines.append("".join(cells) + _RESET)
    return "\n".join(lines)


class ThumbnailCache:
    """
    Bounded cache of rendered thumbnails.

    Parameters
    ----------
    capacity : int, optional
        Maximum number of renders kept (default 100).
    client : httpx.AsyncClient | None, optional
        Shared HTTP client; one is created lazily when omitted.
    timeout : float, optional
        Download timeout in seconds for the lazily created client.
    breakpoints : tuple[int, int, int], optional
        Panel-width breakpoints for the target size step function.
    prefetch_group_size : int, optional
        Thumbnails loaded concurrently by a prefetch (default 2).
    prefetch_pause : float, optional
        Seconds between prefetch groups (default 0.1).
    prefetch_delay : float, optional
        Seconds a prefetch waits before starting (default 0.05).
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 15.0,
        breakpoints: tuple[int, int, int] = DEFAULT_WIDTH_BREAKPOINTS,
        prefetch_group_size: int = DEFAULT_GROUP_SIZE,
        prefetch_pause: float = DEFAULT_GROUP_PAUSE,
        prefetch_delay: float = DEFAULT_PREFETCH_DELAY,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.breakpoints = breakpoints
        self.prefetch_group_size = max(1, prefetch_group_size)
        self.prefetch_pause = prefetch_pause
        self.prefetch_delay = prefetch_delay
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        # dicts preserve insertion order, which is the eviction order
        self._entries: dict[ThumbnailKey, str] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    # ═══════════════════════════════════════════════════════════════════════
    # Lookup
    # ═══════════════════════════════════════════════════════════════════════

    def key_for(self, video: VideoRecord, width: int, height: int) -> ThumbnailKey:
        """Cache key for ``video`` shown in a ``width`` x ``height`` panel."""
        target_width, target_height = thumbnail_target_size(
            width, height, self.breakpoints
        )
        return (video.video_id, target_width, target_height)

    def get(self, video: VideoRecord, width: int, height: int) -> Optional[str]:
        """Cached render, without fetching."""
        if not video.thumbnail_url:
            return None
        return self._entries.get(self.key_for(video, width, height))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[ThumbnailKey]:
        """Cached keys, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def _store(self, key: ThumbnailKey, value: str) -> None:
        if key not in self._entries and len(self._entries) >= self.capacity:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Evicted thumbnail %s", oldest)
        self._entries[key] = value

    # ═══════════════════════════════════════════════════════════════════════
    # Loading
    # ═══════════════════════════════════════════════════════════════════════

    async def load_or_fetch(
        self, video: VideoRecord, width: int, height: int
    ) -> Optional[str]:
        """
        Return the render for ``video``, fetching it on a miss.

        Returns
        -------
        Optional[str]
            The ANSI render, or None when the video has no thumbnail URL or
            the download or decode fails. Failures are not cached.
        """
        if not video.thumbnail_url:
            return None

        key = self.key_for(video, width, height)
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        data = await self._download(video.thumbnail_url)
        if data is None:
            return None

        _, target_width, target_height = key
        try:
            rendered = await asyncio.to_thread(
                render_thumbnail, data, target_width, target_height
            )
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.debug("Could not decode thumbnail for %s: %s", video.video_id, e)
            return None

        self._store(key, rendered)
        return rendered

    async def _download(self, url: str) -> Optional[bytes]:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout, follow_redirects=True
            )
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.debug("Thumbnail request to %s failed: %s", url, e)
            return None
        if response.status_code != 200:
            logger.debug("Thumbnail request to %s returned %d", url, response.status_code)
            return None
        return response.content

    # ═══════════════════════════════════════════════════════════════════════
    # Prefetch
    # ═══════════════════════════════════════════════════════════════════════

    def prefetch(
        self,
        videos: Iterable[VideoRecord],
        width: int,
        height: int,
        limit: int = DEFAULT_PREFETCH_LIMIT,
    ) -> Optional[asyncio.Task[None]]:
        """
        Warm the cache for up to ``limit`` upcoming videos in the background.

        Videos without a thumbnail URL or already cached are skipped.

        Returns
        -------
        Optional[asyncio.Task[None]]
            The detached task, or None when there is nothing to load.
        """
        pending = []
        for video in list(videos)[: max(0, limit)]:
            if not video.thumbnail_url:
                continue
            if self.key_for(video, width, height) in self._entries:
                continue
            pending.append(video)
        if not pending:
            return None

        task = asyncio.create_task(self._prefetch(pending, width, height))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _prefetch(
        self, videos: list[VideoRecord], width: int, height: int
    ) -> None:
        await asyncio.sleep(self.prefetch_delay)
        size = self.prefetch_group_size
        for start in range(0, len(videos), size):
            if start > 0:
                await asyncio.sleep(self.prefetch_pause)
            group = videos[start : start + size]
            results = await asyncio.gather(
                *(self.load_or_fetch(video, width, height) for video in group),
                return_exceptions=True,
            )
            for video, result in zip(group, results):
                if isinstance(result, Exception):
                    logger.debug("Prefetch for %s failed: %s", video.video_id, result)

    async def close(self) -> None:
        """Cancel outstanding prefetches and close an owned HTTP client."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
