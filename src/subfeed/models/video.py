"""
Video models for the aggregated subscription feed.

Defines the Pydantic model for one feed video. Every feed-derived attribute
beyond the required identity fields is an explicit optional.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .youtube_types import VideoId

DEFAULT_THUMBNAIL_HOST = "img.youtube.com"


def derive_thumbnail_url(video_id: str, host: str = DEFAULT_THUMBNAIL_HOST) -> str:
    """
    Build the thumbnail URL used when a feed entry declares none.

    Parameters
    ----------
    video_id : str
        YouTube video ID.
    host : str, optional
        Image host (default ``img.youtube.com``).

    Returns
    -------
    str
        ``https://<host>/vi/<video_id>/mqdefault.jpg``
    """
    return f"https://{host}/vi/{video_id}/mqdefault.jpg"


def watch_url(video_id: str) -> str:
    """Canonical watch URL for a video ID."""
    return f"https://www.youtube.com/watch?v={video_id}"


class VideoRecord(BaseModel):
    """A normalized video from a channel feed."""

    video_id: VideoId = Field(..., description="YouTube video ID (validated)")
    title: str = Field(..., description="Video title")
    channel: str = Field(..., description="Channel display name")
    link: str = Field(..., min_length=1, description="Canonical watch URL")
    published: datetime = Field(..., description="Publication instant (UTC)")
    is_short: bool = Field(default=False, description="Whether the video is a Short")
    thumbnail_url: Optional[str] = Field(default=None, description="Preview image URL")
    view_count: Optional[int] = Field(default=None, ge=0, description="Number of views")
    like_count: Optional[int] = Field(default=None, ge=0, description="Number of ratings")
    description: Optional[str] = Field(default=None, description="Video description")

    @field_validator("title", "channel")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Strip surrounding whitespace."""
        return v.strip()

    @field_validator("published")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Normalize the publication time to an aware UTC datetime."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    model_config = ConfigDict(frozen=True)
