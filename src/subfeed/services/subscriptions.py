"""
Subscription list management.

The subscription list is a CSV file with the header
``Channel Id,Channel Url,Channel Title``. This module reads it, appends new
channels, and resolves channel page URLs to a channel ID and title.
"""

from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import List, Optional

import feedparser
import httpx
from pydantic import ValidationError

from subfeed.exceptions import (
    ChannelResolveError,
    SubscriptionExistsError,
    SubscriptionListError,
)
from subfeed.models.subscription import Subscription, channel_url
from subfeed.services.feed_fetcher import DEFAULT_FEED_URL_TEMPLATE

logger = logging.getLogger(__name__)

CSV_HEADER = ("Channel Id", "Channel Url", "Channel Title")

_CHANNEL_URL_PATTERN = re.compile(r"youtube\.com/channel/([^/?&]+)")
_HANDLE_URL_PATTERN = re.compile(r"youtube\.com/(@[^/?&]+|c/[^/?&]+)")

# Most reliable first
_PAGE_CHANNEL_ID_PATTERNS = (
    re.compile(r'<link[^>]*rel="canonical"[^>]*href="[^"]*/channel/([^"/]+)"'),
    re.compile(r'<meta[^>]*property="og:url"[^>]*content="[^"]*/channel/([^"/]+)"'),
    re.compile(r"channel/([a-zA-Z0-9_-]{24})"),
    re.compile(r'"channelId":"([^"]+)"'),
)

_TITLE_SUFFIX = " - YouTube"

_BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class SubscriptionList:
    """
    CSV-backed list of subscribed channels.

    Parameters
    ----------
    path : Path
        Location of the subscription CSV file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> List[Subscription]:
        """
        Read all subscriptions.

        The header row and blank lines are ignored. Rows with an invalid
        channel ID are skipped with a warning.

        Raises
        ------
        SubscriptionListError
            If the file cannot be read.
        """
        try:
            with self.path.open(newline="", encoding="utf-8") as handle:
                rows = list(csv.reader(handle))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise SubscriptionListError(
                f"Failed to load subscriptions from {self.path}: {e}",
                path=str(self.path),
                original_error=e,
            ) from e

        subscriptions = []
        for line_number, row in enumerate(rows[1:], start=2):
            if not row or not any(cell.strip() for cell in row):
                continue
            subscription = _row_to_subscription(row)
            if subscription is None:
                logger.warning(
                    "Skipping malformed subscription on line %d of %s",
                    line_number,
                    self.path,
                )
                continue
            subscriptions.append(subscription)

        logger.debug("Loaded %d subscriptions from %s", len(subscriptions), self.path)
        return subscriptions

    def add(self, channel_id: str, title: str) -> Subscription:
        """
        Append a channel to the list, creating the file if needed.

        Raises
        ------
        SubscriptionExistsError
            If the channel is already subscribed.
        SubscriptionListError
            If the file cannot be read or written.
        """
        subscription = Subscription(
            channel_id=channel_id, title=title, channel_url=channel_url(channel_id)
        )
        exists = self.path.exists()
        if exists and any(
            sub.channel_id == subscription.channel_id for sub in self.load()
        ):
            raise SubscriptionExistsError(subscription.channel_id, subscription.title)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            needs_newline = exists and _lacks_trailing_newline(self.path)
            with self.path.open("a", newline="", encoding="utf-8") as handle:
                if needs_newline:
                    handle.write("\n")
                writer = csv.writer(handle, lineterminator="\n")
                if not exists:
                    writer.writerow(CSV_HEADER)
                writer.writerow(
                    [
                        subscription.channel_id,
                        subscription.channel_url,
                        subscription.title,
                    ]
                )
        except OSError as e:
            raise SubscriptionListError(
                f"Failed to update {self.path}: {e}",
                path=str(self.path),
                original_error=e,
            ) from e

        logger.info("Added subscription %s (%s)", subscription.title, channel_id)
        return subscription


def _row_to_subscription(row: list[str]) -> Optional[Subscription]:
    channel_id = row[0].strip()
    url = row[1].strip() if len(row) > 1 else ""
    # Unquoted titles may contain commas
    title = ",".join(row[2:]).strip() if len(row) > 2 else ""
    try:
        return Subscription(
            channel_id=channel_id,
            title=title or channel_id,
            channel_url=url or None,
        )
    except ValidationError:
        return None


def _lacks_trailing_newline(path: Path) -> bool:
    with path.open("rb") as handle:
        handle.seek(0, 2)
        if handle.tell() == 0:
            return False
        handle.seek(-1, 2)
        return handle.read(1) != b"\n"


# ═══════════════════════════════════════════════════════════════════════════
# Channel resolution
# ═══════════════════════════════════════════════════════════════════════════


def extract_channel_id(html: str) -> Optional[str]:
    """Find a channel ID in a channel page's HTML."""
    for pattern in _PAGE_CHANNEL_ID_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def feed_title(xml: str) -> Optional[str]:
    """Channel title from its feed, without a trailing " - YouTube"."""
    title = feedparser.parse(xml).feed.get("title")
    if not title:
        return None
    title = title.strip()
    if title.endswith(_TITLE_SUFFIX):
        title = title[: -len(_TITLE_SUFFIX)]
    return title or None


async def resolve_channel(
    url: str,
    client: httpx.AsyncClient | None = None,
    *,
    feed_url_template: str = DEFAULT_FEED_URL_TEMPLATE,
) -> tuple[str, str]:
    """
    Resolve a channel URL to ``(channel_id, title)``.

    Accepts ``/channel/<id>`` URLs directly; ``@handle`` and ``/c/<name>``
    URLs are resolved by fetching the channel page.

    Raises
    ------
    ChannelResolveError
        If the URL is unsupported or the channel cannot be found.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=15.0, follow_redirects=True) as owned:
            return await resolve_channel(url, owned, feed_url_template=feed_url_template)

    channel_id: Optional[str] = None
    match = _CHANNEL_URL_PATTERN.search(url)
    if match:
        channel_id = match.group(1)
    elif _HANDLE_URL_PATTERN.search(url):
        html = await _get_text(client, url, headers=_BROWSER_HEADERS)
        if html is not None:
            channel_id = extract_channel_id(html)
    else:
        raise ChannelResolveError(f"Unsupported channel URL: {url}", url=url)

    if not channel_id:
        raise ChannelResolveError(url=url)

    xml = await _get_text(client, feed_url_template.format(channel_id=channel_id))
    title = feed_title(xml) if xml is not None else None
    if not title:
        raise ChannelResolveError(
            f"Could not read the feed title for channel {channel_id}", url=url
        )
    return channel_id, title


async def _get_text(
    client: httpx.AsyncClient, url: str, headers: dict[str, str] | None = None
) -> Optional[str]:
    try:
        response = await client.get(url, headers=headers)
    except httpx.HTTPError as e:
        logger.warning("Request to %s failed: %s", url, e)
        return None
    if response.status_code != 200:
        logger.warning("Request to %s returned HTTP %d", url, response.status_code)
        return None
    return response.text
