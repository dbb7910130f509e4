"""
Custom validated types for YouTube identifiers.

Provides strongly-typed wrappers for YouTube IDs that enforce format and length
constraints at the type level.
"""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BeforeValidator, Field

_VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")


def validate_video_id(v: str) -> str:
    """Validate YouTube Video ID format."""
    if not isinstance(v, str):
        raise TypeError("VideoId must be a string")

    v = v.strip()
    if len(v) != 11:
        raise ValueError(
            f"VideoId must be exactly 11 characters long, got {len(v)}: {v}"
        )

    if not _VIDEO_ID_PATTERN.match(v):
        raise ValueError(f"VideoId contains invalid characters: {v}")

    return v


def validate_channel_id(v: str) -> str:
    """Validate a channel identifier is a non-empty token without whitespace."""
    if not isinstance(v, str):
        raise TypeError("ChannelId must be a string")

    v = v.strip()
    if not v:
        raise ValueError("ChannelId cannot be empty")
    if any(ch.isspace() for ch in v):
        raise ValueError(f"ChannelId cannot contain whitespace: {v}")

    return v


def is_valid_video_id(v: str) -> bool:
    """Return True when ``v`` is a well-formed YouTube video ID."""
    return isinstance(v, str) and bool(_VIDEO_ID_PATTERN.match(v))


# Type aliases for use in Pydantic models
VideoId = Annotated[
    str,
    BeforeValidator(validate_video_id),
    Field(description="YouTube Video ID (11 chars, alphanumeric)"),
]

ChannelId = Annotated[
    str,
    BeforeValidator(validate_channel_id),
    Field(description="YouTube Channel ID"),
]
