"""
Builders for channel feed documents used by fetcher tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class FeedEntry:
    """One ``<entry>`` of a channel feed."""

    video_id: str
    title: str = "Entry title"
    author: Optional[str] = "Feed Author"
    published: str = "2024-05-31T10:00:00+00:00"
    link: Optional[str] = None
    include_video_id: bool = True
    thumbnails: list[tuple[str, Optional[int], Optional[int]]] = field(
        default_factory=list
    )
    views: Optional[str] = None
    rating_count: Optional[str] = None
    description: Optional[str] = None

    def to_xml(self) -> str:
        link = self.link or f"https://www.youtube.com/watch?v={self.video_id}"
        parts = [
            "<entry>",
            f"<id>yt:video:{self.video_id}</id>",
        ]
        if self.include_video_id:
            parts.append(f"<yt:videoId>{self.video_id}</yt:videoId>")
        parts.append(f"<title>{self.title}</title>")
        parts.append(f'<link rel="alternate" href="{link}"/>')
        if self.author:
            parts.append(f"<author><name>{self.author}</name></author>")
        parts.append(f"<published>{self.published}</published>")
        parts.append(f"<updated>{self.published}</updated>")

        parts.append("<media:group>")
        parts.append(f"<media:title>{self.title}</media:title>")
        for url, width, height in self.thumbnails:
            size = ""
            if width is not None and height is not None:
                size = f' width="{width}" height="{height}"'
            parts.append(f'<media:thumbnail url="{url}"{size}/>')
        if self.description is not None:
            parts.append(f"<media:description>{self.description}</media:description>")
        if self.views is not None or self.rating_count is not None:
            parts.append("<media:community>")
            if self.rating_count is not None:
                parts.append(
                    f'<media:starRating count="{self.rating_count}" '
                    'average="5.00" min="1" max="5"/>'
                )
            if self.views is not None:
                parts.append(f'<media:statistics views="{self.views}"/>')
            parts.append("</media:community>")
        parts.append("</media:group>")
        parts.append("</entry>")
        return "".join(parts)


def build_feed(title: str, entries: list[FeedEntry]) -> str:
    """Render a YouTube-style Atom feed document."""
    body = "".join(entry.to_xml() for entry in entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" '
        'xmlns:media="http://search.yahoo.com/mrss/" '
        'xmlns="http://www.w3.org/2005/Atom">'
        f"<title>{title}</title>"
        f"{body}"
        "</feed>"
    )
