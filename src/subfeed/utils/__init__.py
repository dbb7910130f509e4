"""Utility modules for subfeed."""

from subfeed.utils.formatting import (
    age_color,
    channel_color,
    format_time_ago,
    truncate,
)

__all__ = ["age_color", "channel_color", "format_time_ago", "truncate"]
