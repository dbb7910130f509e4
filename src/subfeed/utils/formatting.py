"""
Display formatting helpers for the feed list.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from rich.text import Text

# Divisors between successive units: seconds, minutes, hours, days, weeks,
# months, years
_UNIT_STEPS = (60, 60, 24, 7, 365 / 7 / 12, 12)
_UNITS = ("second", "minute", "hour", "day", "week", "month", "year")


def format_time_ago(dt: datetime, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago ``dt`` was, e.g. "5 minutes ago".

    Values under ten seconds read "just now"; future instants are treated
    as now.
    """
    now = now or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    diff = max(0.0, (now - dt).total_seconds())

    unit = 0
    while unit < len(_UNIT_STEPS) and diff >= _UNIT_STEPS[unit]:
        diff /= _UNIT_STEPS[unit]
        unit += 1
    count = int(diff)

    if unit == 0 and count <= 9:
        return "just now"
    if unit > 0 and count <= 1:
        return f"1 {_UNITS[unit]} ago"
    return f"{count} {_UNITS[unit]}s ago"


def channel_color(name: str) -> str:
    """
    Stable, lightened hex colour for a channel name.

    Each RGB byte of a 32-bit string hash is raised by 100 and capped at 255
    so every channel stays readable on a dark background.
    """
    hash_value = 0
    units = name.encode("utf-16-le")
    for index in range(0, len(units), 2):
        code = units[index] | (units[index + 1] << 8)
        hash_value = (code + ((hash_value << 5) - hash_value)) & 0xFFFFFFFF

    channels = []
    for shift in (0, 8, 16):
        value = (hash_value >> shift) & 0xFF
        channels.append(min(255, value + 100))
    return "#" + "".join(f"{value:02x}" for value in channels)


def age_color(published: datetime, now: Optional[datetime] = None) -> str:
    """Rich colour name for a publication age."""
    now = now or datetime.now(timezone.utc)
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    hours = (now - published).total_seconds() / 3600
    if hours < 2:
        return "red"
    if hours < 24:
        return "yellow"
    if hours < 24 * 7:
        return "cyan"
    return "green"


def truncate(text: str, width: int) -> str:
    """Fit ``text`` into ``width`` terminal cells, ending with an ellipsis."""
    if width <= 0:
        return ""
    rich_text = Text(text.replace("\n", " "))
    rich_text.truncate(width, overflow="ellipsis")
    return rich_text.plain
