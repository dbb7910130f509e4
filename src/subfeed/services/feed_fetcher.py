"""
Per-channel feed fetcher.

Downloads one channel's syndication feed with httpx, parses it with
feedparser and normalizes each entry into a ``VideoRecord``. A failing
channel yields an empty list instead of an exception.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

import feedparser
import httpx
from pydantic import ValidationError

from subfeed.exceptions import ChannelFetchError
from subfeed.models.video import DEFAULT_THUMBNAIL_HOST, VideoRecord, derive_thumbnail_url
from subfeed.models.youtube_types import is_valid_video_id

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL_TEMPLATE = (
    "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"
)
DEFAULT_TIMEOUT = 15.0

_ENTRY_ID_PREFIX = "yt:video:"
_SHORTS_SEGMENT = "/shorts/"


# ═══════════════════════════════════════════════════════════════════════════
# Entry normalization
# ═══════════════════════════════════════════════════════════════════════════


def resolve_video_id(entry: Any) -> Optional[str]:
    """
    Resolve the video ID of a feed entry.

    Tried in order: ``yt:videoId``, the ``v`` query parameter of the link,
    a ``/shorts/<id>`` link path, then a ``yt:video:<id>`` entry ID.

    Returns
    -------
    Optional[str]
        The video ID, or None when no candidate is well formed.
    """
    candidates: list[str] = []
    if entry.get("yt_videoid"):
        candidates.append(entry["yt_videoid"])

    link = entry.get("link") or ""
    if link:
        parsed = urlparse(link)
        candidates.extend(parse_qs(parsed.query).get("v", []))
        if _SHORTS_SEGMENT in parsed.path:
            candidates.append(parsed.path.split(_SHORTS_SEGMENT, 1)[1].split("/")[0])

    entry_id = entry.get("id") or ""
    if entry_id.startswith(_ENTRY_ID_PREFIX):
        candidates.append(entry_id[len(_ENTRY_ID_PREFIX) :])

    for candidate in candidates:
        candidate = candidate.strip()
        if is_valid_video_id(candidate):
            return candidate
    return None


def select_thumbnail(entry: Any) -> Optional[str]:
    """
    Pick the largest declared ``media:thumbnail``.

    Later thumbnails win ties, so with no declared dimensions the last one
    is chosen.
    """
    best_url: Optional[str] = None
    best_area = -1
    for thumbnail in entry.get("media_thumbnail") or []:
        url = thumbnail.get("url")
        if not url:
            continue
        area = (_parse_count(thumbnail.get("width")) or 0) * (
            _parse_count(thumbnail.get("height")) or 0
        )
        if area >= best_area:
            best_url, best_area = url, area
    return best_url


def _parse_count(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        count = int(str(value).strip())
    except ValueError:
        return None
    return count if count >= 0 else None


def _parse_published(entry: Any) -> Optional[datetime]:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed is not None:
        return datetime(*parsed[:6], tzinfo=timezone.utc)

    raw = entry.get("published") or entry.get("updated")
    if raw:
        try:
            published = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        return published
    return None


def entry_to_record(
    entry: Any, channel_name: str, thumbnail_host: str = DEFAULT_THUMBNAIL_HOST
) -> Optional[VideoRecord]:
    """
    Convert one feedparser entry into a ``VideoRecord``.

    Parameters
    ----------
    entry : FeedParserDict
        A parsed feed entry.
    channel_name : str
        Fallback channel name when the entry has no author.
    thumbnail_host : str, optional
        Host used to derive a thumbnail URL when the entry declares none.

    Returns
    -------
    Optional[VideoRecord]
        The record, or None when the entry lacks an ID, link or timestamp.
    """
    video_id = resolve_video_id(entry)
    link = entry.get("link")
    published = _parse_published(entry)
    if video_id is None or not link or published is None:
        return None

    statistics = entry.get("media_statistics") or {}
    rating = entry.get("media_starrating") or {}
    description = entry.get("media_description") or entry.get("summary")

    return VideoRecord(
        video_id=video_id,
        title=entry.get("title") or "",
        channel=entry.get("author") or channel_name,
        link=link,
        published=published,
        is_short=_SHORTS_SEGMENT in urlparse(link).path,
        thumbnail_url=select_thumbnail(entry)
        or derive_thumbnail_url(video_id, thumbnail_host),
        view_count=_parse_count(statistics.get("views")),
        like_count=_parse_count(rating.get("count")),
        description=description or None,
    )


def parse_feed(
    text: str, channel_name: str, thumbnail_host: str = DEFAULT_THUMBNAIL_HOST
) -> list[VideoRecord]:
    """
    Parse a channel feed document into video records.

    Entries that cannot be normalized are skipped.

    Raises
    ------
    ChannelFetchError
        If the document is malformed and yields no entries at all.
    """
    feed = feedparser.parse(text)
    if feed.bozo and not feed.entries:
        raise ChannelFetchError(
            f"Unparseable feed for {channel_name}",
            original_error=feed.get("bozo_exception"),
        )

    records = []
    for entry in feed.entries:
        try:
            record = entry_to_record(entry, channel_name, thumbnail_host)
        except ValidationError as e:
            logger.debug("Skipping invalid entry in %s feed: %s", channel_name, e)
            continue
        if record is None:
            logger.debug("Skipping incomplete entry in %s feed", channel_name)
            continue
        records.append(record)
    return records


# ═══════════════════════════════════════════════════════════════════════════
# Fetcher
# ═══════════════════════════════════════════════════════════════════════════


class FeedFetcher:
    """
    Fetches and parses one channel feed at a time.

    Parameters
    ----------
    client : httpx.AsyncClient | None, optional
        Shared HTTP client. When omitted a client is opened per fetch.
    feed_url_template : str, optional
        Feed URL with a ``{channel_id}`` placeholder.
    thumbnail_host : str, optional
        Host used for derived thumbnail URLs.
    timeout : float, optional
        Request timeout in seconds for per-fetch clients.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        feed_url_template: str = DEFAULT_FEED_URL_TEMPLATE,
        thumbnail_host: str = DEFAULT_THUMBNAIL_HOST,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client
        self.feed_url_template = feed_url_template
        self.thumbnail_host = thumbnail_host
        self.timeout = timeout

    def feed_url(self, channel_id: str) -> str:
        """Feed URL for a channel."""
        return self.feed_url_template.format(channel_id=channel_id)

    async def fetch(self, channel_id: str, channel_name: str) -> list[VideoRecord]:
        """
        Fetch a channel's recent videos.

        Never raises: network errors, bad statuses and malformed documents
        are logged and produce an empty list.

        Parameters
        ----------
        channel_id : str
            Channel to fetch.
        channel_name : str
            Subscription title, used when entries carry no author.

        Returns
        -------
        list[VideoRecord]
            The channel's videos in feed order.
        """
        try:
            text = await self._download(channel_id)
            records = parse_feed(text, channel_name, self.thumbnail_host)
        except ChannelFetchError as e:
            logger.warning(
                "Skipping channel %s (%s): %s", channel_name, channel_id, e.message
            )
            return []

        logger.debug("Fetched %d videos from %s", len(records), channel_name)
        return records

    async def _download(self, channel_id: str) -> str:
        url = self.feed_url(channel_id)
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            raise ChannelFetchError(
                f"Request failed: {e}", channel_id=channel_id, original_error=e
            ) from e

        if response.status_code != 200:
            raise ChannelFetchError(
                f"HTTP {response.status_code}",
                channel_id=channel_id,
                status_code=response.status_code,
            )
        return response.text
