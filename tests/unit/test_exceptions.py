"""
Tests for custom exceptions module.

This module tests the exception classes, their attributes, the inheritance
hierarchy and the exit codes.
"""

from __future__ import annotations

import pytest

from subfeed.exceptions import (
    EXIT_CODE_GENERAL_ERROR,
    EXIT_CODE_INTERRUPTED,
    EXIT_CODE_INVALID_ARGS,
    EXIT_CODE_SCHEMA_INIT_FAILED,
    EXIT_CODE_SUCCESS,
    AggregationError,
    ChannelFetchError,
    ChannelResolveError,
    PersistenceError,
    SchemaInitError,
    SubfeedError,
    SubscriptionExistsError,
    SubscriptionListError,
)


class TestSubfeedError:
    """Tests for base SubfeedError exception."""

    def test_base_error_with_message(self) -> None:
        error = SubfeedError("Test error message")
        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_base_error_can_be_raised(self) -> None:
        with pytest.raises(SubfeedError, match="Test error"):
            raise SubfeedError("Test error")


class TestChannelFetchError:
    """Tests for ChannelFetchError."""

    def test_default_values(self) -> None:
        error = ChannelFetchError()
        assert error.message == "Channel feed fetch failed"
        assert error.channel_id is None
        assert error.status_code is None
        assert error.original_error is None

    def test_carries_status_and_cause(self) -> None:
        cause = TimeoutError("slow")
        error = ChannelFetchError(
            "HTTP 503", channel_id="UCabc", status_code=503, original_error=cause
        )
        assert error.channel_id == "UCabc"
        assert error.status_code == 503
        assert error.original_error is cause


class TestAggregationErrors:
    """Tests for AggregationError and SubscriptionListError."""

    def test_aggregation_default_message(self) -> None:
        assert AggregationError().message == "Failed to load videos"

    def test_subscription_list_error_is_an_aggregation_error(self) -> None:
        cause = FileNotFoundError("subs.csv")
        error = SubscriptionListError(
            "Subscription file not found", path="subs.csv", original_error=cause
        )

        assert isinstance(error, AggregationError)
        assert error.path == "subs.csv"
        assert error.original_error is cause


class TestSubscriptionErrors:
    """Tests for SubscriptionExistsError and ChannelResolveError."""

    def test_exists_message_prefers_title(self) -> None:
        error = SubscriptionExistsError("UCabc", "Cooking")
        assert error.message == 'Channel "Cooking" is already subscribed'
        assert error.channel_id == "UCabc"

    def test_exists_message_falls_back_to_id(self) -> None:
        assert "UCabc" in SubscriptionExistsError("UCabc").message

    def test_resolve_error_keeps_url(self) -> None:
        error = ChannelResolveError(url="https://example.com")
        assert error.url == "https://example.com"
        assert error.message == "Could not extract channel information from URL"


class TestPersistenceErrors:
    """Tests for PersistenceError and SchemaInitError."""

    def test_persistence_error_attributes(self) -> None:
        cause = RuntimeError("locked")
        error = PersistenceError(
            "write failed", operation="upsert_all", entity_type="video", original_error=cause
        )
        assert error.operation == "upsert_all"
        assert error.entity_type == "video"
        assert error.original_error is cause

    def test_schema_init_error_default(self) -> None:
        error = SchemaInitError(database_url="sqlite+aiosqlite:///x.db")
        assert error.message == "Failed to initialize the cache database"
        assert error.database_url == "sqlite+aiosqlite:///x.db"

    @pytest.mark.parametrize(
        "error_class",
        [
            ChannelFetchError,
            AggregationError,
            SubscriptionListError,
            ChannelResolveError,
            PersistenceError,
            SchemaInitError,
        ],
    )
    def test_all_errors_derive_from_base(self, error_class: type[SubfeedError]) -> None:
        assert issubclass(error_class, SubfeedError)


class TestExitCodes:
    """Tests for exit code constants."""

    def test_values(self) -> None:
        assert EXIT_CODE_SUCCESS == 0
        assert EXIT_CODE_GENERAL_ERROR == 1
        assert EXIT_CODE_INVALID_ARGS == 2
        assert EXIT_CODE_SCHEMA_INIT_FAILED == 3
        assert EXIT_CODE_INTERRUPTED == 130
