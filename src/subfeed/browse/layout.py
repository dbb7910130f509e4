"""
Viewport layout for the browse list.

Column widths follow a two-phase policy: with room to spare, minimum widths
are padded proportionally; without it, every column is scaled down, floored,
and any leftover overflow is clawed back title first. The policy must stay
stable so columns do not jump around while the terminal is resized.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

CHANNEL_MIN = 20
TITLE_MIN = 40
DATE_MIN = 12
TOTAL_MIN = CHANNEL_MIN + TITLE_MIN + DATE_MIN

# Absolute floors used when shrinking
CHANNEL_FLOOR = 12
TITLE_FLOOR = 15
DATE_FLOOR = 8

CHANNEL_SURPLUS_SHARE = 0.20
TITLE_SURPLUS_SHARE = 0.65

PREVIEW_MAX_WIDTH = 60
PREVIEW_WIDTH_SHARE = 0.5
LIST_CHROME_HEIGHT = 10
LIST_CHROME_WIDTH = 15

THUMBNAIL_BORDER = 4
THUMBNAIL_MAX_WIDTH = 60
THUMBNAIL_MAX_HEIGHT = 20
DEFAULT_WIDTH_BREAKPOINTS: tuple[int, int, int] = (30, 45, 70)
_WIDTH_SCALES = (1.0, 0.9, 0.8, 0.75)


@dataclass(frozen=True)
class ColumnWidths:
    channel: int
    title: int
    date: int

    @property
    def total(self) -> int:
        return self.channel + self.title + self.date


def column_widths(available: int) -> ColumnWidths:
    """
    Split ``available`` columns between channel, title and date.

    Parameters
    ----------
    available : int
        Width left for the three text columns.

    Returns
    -------
    ColumnWidths
        Widths that sum to at most ``available`` whenever the absolute
        floors fit.

    Examples
    --------
    >>> column_widths(200)
    ColumnWidths(channel=45, title=123, date=32)
    >>> column_widths(50)
    ColumnWidths(channel=13, title=27, date=8)
    """
    surplus = available - TOTAL_MIN
    if surplus > 0:
        extra_channel = math.floor(surplus * CHANNEL_SURPLUS_SHARE)
        extra_title = math.floor(surplus * TITLE_SURPLUS_SHARE)
        extra_date = surplus - extra_channel - extra_title
        return ColumnWidths(
            channel=CHANNEL_MIN + extra_channel,
            title=TITLE_MIN + extra_title,
            date=DATE_MIN + extra_date,
        )

    scale = min(1.0, max(available, 0) / TOTAL_MIN)
    channel = max(CHANNEL_FLOOR, math.floor(CHANNEL_MIN * scale))
    title = max(TITLE_FLOOR, math.floor(TITLE_MIN * scale))
    date = max(DATE_FLOOR, math.floor(DATE_MIN * scale))

    overflow = channel + title + date - available
    if overflow > 0:
        taken = min(overflow, title - TITLE_FLOOR)
        title -= taken
        remaining = overflow - taken
        if remaining > 0:
            date = max(DATE_FLOOR, date - math.ceil(remaining / 2))
            channel = max(CHANNEL_FLOOR, channel - math.floor(remaining / 2))

    return ColumnWidths(channel=channel, title=title, date=date)


def thumbnail_target_size(
    width: int,
    height: int,
    breakpoints: tuple[int, int, int] = DEFAULT_WIDTH_BREAKPOINTS,
) -> tuple[int, int]:
    """
    Quantized render size for a preview panel of ``width`` x ``height``.

    The inner width (panel minus border) is scaled by a step function of the
    panel width: 100% up to the first breakpoint, then 90%, 80%, and 75%
    capped at 60 columns beyond the last one.

    Returns
    -------
    tuple[int, int]
        ``(target_width, target_height)``, each at least 1.
    """
    inner = max(1, width - THUMBNAIL_BORDER)
    narrow, medium, wide = breakpoints
    if width <= narrow:
        scale = _WIDTH_SCALES[0]
    elif width <= medium:
        scale = _WIDTH_SCALES[1]
    elif width <= wide:
        scale = _WIDTH_SCALES[2]
    else:
        scale = _WIDTH_SCALES[3]

    target_width = max(1, math.floor(inner * scale))
    if width > wide:
        target_width = min(target_width, THUMBNAIL_MAX_WIDTH)
    target_height = max(1, min(height - THUMBNAIL_BORDER, THUMBNAIL_MAX_HEIGHT))
    return target_width, target_height


@dataclass(frozen=True)
class ViewportLayout:
    """Sizes derived from the terminal dimensions."""

    terminal_width: int
    terminal_height: int
    preview_width: int
    list_width: int
    list_height: int
    available_width: int
    columns: ColumnWidths

    @property
    def show_preview(self) -> bool:
        return self.preview_width > 0

    @property
    def preview_height(self) -> int:
        return self.list_height + 2

    @property
    def page_size(self) -> int:
        """Rows moved by page up/down."""
        return max(1, self.list_height - 1)


def compute_layout(
    terminal_width: int, terminal_height: int, show_preview: bool
) -> ViewportLayout:
    """Derive panel sizes and column widths for a terminal."""
    preview_width = (
        min(PREVIEW_MAX_WIDTH, math.floor(terminal_width * PREVIEW_WIDTH_SHARE))
        if show_preview
        else 0
    )
    list_width = terminal_width - preview_width
    list_height = max(1, terminal_height - LIST_CHROME_HEIGHT)
    available_width = list_width - LIST_CHROME_WIDTH
    return ViewportLayout(
        terminal_width=terminal_width,
        terminal_height=terminal_height,
        preview_width=preview_width,
        list_width=list_width,
        list_height=list_height,
        available_width=available_width,
        columns=column_widths(available_width),
    )
