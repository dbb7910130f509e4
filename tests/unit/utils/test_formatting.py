"""
Tests for display formatting helpers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from subfeed.utils.formatting import age_color, channel_color, format_time_ago, truncate

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestFormatTimeAgo:
    """Tests for format_time_ago."""

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(seconds=5), "just now"),
            (timedelta(seconds=30), "30 seconds ago"),
            (timedelta(seconds=90), "1 minute ago"),
            (timedelta(minutes=45), "45 minutes ago"),
            (timedelta(hours=2), "2 hours ago"),
            (timedelta(days=3), "3 days ago"),
            (timedelta(days=14), "2 weeks ago"),
            (timedelta(days=60), "1 month ago"),
            (timedelta(days=400), "1 year ago"),
            (timedelta(days=800), "2 years ago"),
        ],
    )
    def test_relative_descriptions(self, delta: timedelta, expected: str) -> None:
        assert format_time_ago(NOW - delta, NOW) == expected

    def test_future_is_just_now(self) -> None:
        assert format_time_ago(NOW + timedelta(hours=1), NOW) == "just now"

    def test_naive_datetime_is_treated_as_utc(self) -> None:
        naive = (NOW - timedelta(hours=3)).replace(tzinfo=None)

        assert format_time_ago(naive, NOW) == "3 hours ago"


class TestChannelColor:
    """Tests for channel_color."""

    def test_is_stable(self) -> None:
        assert channel_color("Some Channel") == channel_color("Some Channel")

    def test_empty_name_is_base_grey(self) -> None:
        assert channel_color("") == "#646464"

    def test_single_character(self) -> None:
        # hash("a") == 97 -> bytes (97, 0, 0) lifted by 100
        assert channel_color("a") == "#c56464"

    def test_components_are_lightened(self) -> None:
        color = channel_color("Another Channel With A Long Name")
        components = [int(color[i : i + 2], 16) for i in (1, 3, 5)]

        assert all(100 <= value <= 255 for value in components)


class TestAgeColor:
    """Tests for age_color."""

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(minutes=30), "red"),
            (timedelta(hours=5), "yellow"),
            (timedelta(days=3), "cyan"),
            (timedelta(days=30), "green"),
        ],
    )
    def test_buckets(self, delta: timedelta, expected: str) -> None:
        assert age_color(NOW - delta, NOW) == expected


class TestTruncate:
    """Tests for truncate."""

    def test_short_text_is_unchanged(self) -> None:
        assert truncate("Hello", 10) == "Hello"

    def test_long_text_ends_with_ellipsis(self) -> None:
        result = truncate("Hello wonderful world", 8)

        assert len(result) == 8
        assert result.endswith("…")

    def test_newlines_are_flattened(self) -> None:
        assert "\n" not in truncate("line one\nline two", 40)

    def test_non_positive_width(self) -> None:
        assert truncate("anything", 0) == ""
