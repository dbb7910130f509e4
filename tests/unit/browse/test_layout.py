"""
Tests for the browse list layout policy.
"""

from __future__ import annotations

import pytest

from subfeed.browse.layout import (
    CHANNEL_FLOOR,
    CHANNEL_MIN,
    DATE_FLOOR,
    DATE_MIN,
    TITLE_FLOOR,
    TITLE_MIN,
    ColumnWidths,
    column_widths,
    compute_layout,
    thumbnail_target_size,
)


class TestColumnWidths:
    """Tests for the two-phase column width policy."""

    def test_wide_terminal_distributes_surplus(self) -> None:
        widths = column_widths(200)

        assert widths == ColumnWidths(channel=45, title=123, date=32)
        assert widths.total <= 200
        assert widths.channel >= CHANNEL_MIN
        assert widths.title >= TITLE_MIN
        assert widths.date >= DATE_MIN

    def test_surplus_remainder_goes_to_date(self) -> None:
        # surplus 10: channel +2, title +6, date gets the remaining 2
        assert column_widths(82) == ColumnWidths(channel=22, title=46, date=14)

    def test_exact_minimum_uses_minimums(self) -> None:
        assert column_widths(72) == ColumnWidths(channel=20, title=40, date=12)

    def test_narrow_terminal_shrinks_proportionally(self) -> None:
        widths = column_widths(50)

        assert widths == ColumnWidths(channel=13, title=27, date=8)
        assert widths.total <= 50

    def test_overflow_is_clawed_back_from_title_first(self) -> None:
        # scaled widths are 12/16/8; one column comes off the title
        widths = column_widths(30)

        assert widths.title == TITLE_FLOOR
        assert widths.channel == CHANNEL_FLOOR
        assert widths.date == DATE_FLOOR

    def test_clawback_trims_title_to_fit(self) -> None:
        # scale 40/72: 11->12, 22, 6->8 = 42, title loses 2
        assert column_widths(40) == ColumnWidths(channel=12, title=20, date=8)

    @pytest.mark.parametrize("available", [35, 45, 60, 71, 73, 100, 150, 300])
    def test_widths_never_exceed_available_when_floors_fit(self, available: int) -> None:
        widths = column_widths(available)

        assert widths.total <= available
        assert widths.channel >= CHANNEL_FLOOR
        assert widths.title >= TITLE_FLOOR
        assert widths.date >= DATE_FLOOR

    def test_negative_width_returns_floors(self) -> None:
        widths = column_widths(-5)

        assert widths == ColumnWidths(
            channel=CHANNEL_FLOOR, title=TITLE_FLOOR, date=DATE_FLOOR
        )


class TestThumbnailTargetSize:
    """Tests for the preview size step function."""

    @pytest.mark.parametrize(
        ("width", "expected_width"),
        [
            (30, 26),  # full inner width up to the first breakpoint
            (45, 36),  # 90% of 41
            (70, 52),  # 80% of 66
            (71, 50),  # 75% of 67
            (200, 60),  # capped beyond the last breakpoint
        ],
    )
    def test_width_steps(self, width: int, expected_width: int) -> None:
        assert thumbnail_target_size(width, 30)[0] == expected_width

    def test_height_is_capped(self) -> None:
        assert thumbnail_target_size(40, 100)[1] == 20
        assert thumbnail_target_size(40, 10)[1] == 6

    def test_tiny_panel_is_at_least_one_cell(self) -> None:
        assert thumbnail_target_size(2, 2) == (1, 1)

    def test_custom_breakpoints(self) -> None:
        assert thumbnail_target_size(40, 24, (50, 60, 80))[0] == 36


class TestComputeLayout:
    """Tests for compute_layout."""

    def test_preview_takes_half_up_to_sixty(self) -> None:
        layout = compute_layout(200, 50, show_preview=True)

        assert layout.preview_width == 60
        assert layout.list_width == 140
        assert layout.list_height == 40
        assert layout.available_width == 125
        assert layout.columns == column_widths(125)
        assert layout.preview_height == 42

    def test_without_preview(self) -> None:
        layout = compute_layout(100, 30, show_preview=False)

        assert layout.show_preview is False
        assert layout.list_width == 100
        assert layout.available_width == 85

    def test_short_terminal_keeps_one_row(self) -> None:
        layout = compute_layout(80, 5, show_preview=True)

        assert layout.list_height == 1
        assert layout.page_size == 1
