"""
Subscription models.

A subscription is one row of the user's subscription list: the channel to
fetch and the title to fall back on when its feed omits an author.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .youtube_types import ChannelId


def channel_url(channel_id: str) -> str:
    """Canonical channel page URL."""
    return f"https://www.youtube.com/channel/{channel_id}"


class Subscription(BaseModel):
    """A subscribed channel."""

    channel_id: ChannelId = Field(..., description="Channel ID")
    title: str = Field(..., min_length=1, description="Channel title")
    channel_url: Optional[str] = Field(default=None, description="Channel page URL")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is not empty."""
        if not v or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    model_config = ConfigDict(frozen=True)
