"""
Custom exceptions for the subfeed application.

This module defines domain-specific exceptions for the feed aggregation
pipeline, the local cache store and the CLI exit codes built on top of them.
"""

from __future__ import annotations


class SubfeedError(Exception):
    """Base exception for all subfeed errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize SubfeedError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class ChannelFetchError(SubfeedError):
    """
    Exception raised when a single channel feed cannot be fetched or parsed.

    This exception never leaves ``FeedFetcher.fetch``: the fetcher logs it
    and contributes zero videos for the channel so one broken channel does
    not affect the rest of the aggregation.

    Attributes
    ----------
    message : str
        Human-readable error message.
    channel_id : str | None
        The channel whose feed failed.
    status_code : int | None
        HTTP status code, when the failure was a non-success response.
    original_error : Exception | None
        The underlying network or parse exception.
    """

    def __init__(
        self,
        message: str = "Channel feed fetch failed",
        channel_id: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize ChannelFetchError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Channel feed fetch failed").
        channel_id : str | None, optional
            The channel whose feed failed (default: None).
        status_code : int | None, optional
            HTTP status code of a non-success response (default: None).
        original_error : Exception | None, optional
            The underlying exception (default: None).
        """
        self.channel_id: str | None = channel_id
        self.status_code: int | None = status_code
        self.original_error: Exception | None = original_error
        super().__init__(message)


class AggregationError(SubfeedError):
    """
    Exception raised when the load/refresh pipeline as a whole fails.

    Examples of pipeline failures are an unreadable subscription list or an
    unavailable cache store. The browse session turns this exception into
    its error state and keeps the previous catalog for display.

    Attributes
    ----------
    message : str
        Human-readable error message.
    original_error : Exception | None
        The exception that caused the pipeline to fail.

    Examples
    --------
    >>> try:
    ...     result = await feed_service.fetch_videos(force_refresh=True)
    ... except AggregationError as e:
    ...     print(f"Refresh failed: {e.message}")
    """

    def __init__(
        self,
        message: str = "Failed to load videos",
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize AggregationError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Failed to load videos").
        original_error : Exception | None, optional
            The exception that caused the failure (default: None).
        """
        self.original_error: Exception | None = original_error
        super().__init__(message)


class SubscriptionListError(AggregationError):
    """
    Exception raised when the subscription list cannot be read or updated.

    Attributes
    ----------
    message : str
        Human-readable error message.
    path : str | None
        Location of the subscription list file.
    original_error : Exception | None
        The underlying I/O or parse exception.
    """

    def __init__(
        self,
        message: str = "Failed to load subscriptions",
        path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize SubscriptionListError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Failed to load subscriptions").
        path : str | None, optional
            Location of the subscription list file (default: None).
        original_error : Exception | None, optional
            The underlying exception (default: None).
        """
        self.path: str | None = path
        super().__init__(message, original_error=original_error)


class SubscriptionExistsError(SubfeedError):
    """Exception raised when adding a channel that is already subscribed."""

    def __init__(self, channel_id: str, title: str | None = None) -> None:
        """
        Initialize SubscriptionExistsError.

        Parameters
        ----------
        channel_id : str
            The channel that is already in the subscription list.
        title : str | None, optional
            Display title of the channel (default: None).
        """
        self.channel_id = channel_id
        self.title = title
        super().__init__(f'Channel "{title or channel_id}" is already subscribed')


class ChannelResolveError(SubfeedError):
    """
    Exception raised when a channel URL cannot be resolved to an ID and title.

    Attributes
    ----------
    message : str
        Human-readable error message.
    url : str | None
        The URL that could not be resolved.
    """

    def __init__(
        self,
        message: str = "Could not extract channel information from URL",
        url: str | None = None,
    ) -> None:
        self.url = url
        super().__init__(message)


class PersistenceError(SubfeedError):
    """
    Exception raised when a single cache store operation fails.

    A persistence failure on a toggle or mark operation is recoverable: the
    session shows a transient message and keeps its previous in-memory
    state.

    Attributes
    ----------
    message : str
        Human-readable error message.
    operation : str | None
        The store operation that failed (e.g., "toggle_watch_later").
    entity_type : str | None
        The type of entity involved (e.g., "Video", "WatchLaterEntry").
    original_error : Exception | None
        The original database exception that caused this error.

    Examples
    --------
    >>> try:
    ...     await cache_store.toggle_watch_later(video_id)
    ... except PersistenceError as e:
    ...     print(f"Failed to {e.operation} {e.entity_type}: {e.message}")
    """

    def __init__(
        self,
        message: str = "Cache store operation failed",
        operation: str | None = None,
        entity_type: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize PersistenceError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Cache store operation failed").
        operation : str | None, optional
            The store operation that failed (default: None).
        entity_type : str | None, optional
            The type of entity involved (default: None).
        original_error : Exception | None, optional
            The original database exception (default: None).
        """
        self.operation: str | None = operation
        self.entity_type: str | None = entity_type
        self.original_error: Exception | None = original_error
        super().__init__(message)


class SchemaInitError(SubfeedError):
    """
    Exception raised when the cache database cannot be opened or initialized.

    This failure is fatal to the cache layer; there is no in-memory fallback.

    Attributes
    ----------
    message : str
        Human-readable error message.
    database_url : str | None
        The database URL that failed to initialize.
    original_error : Exception | None
        The original exception.
    """

    def __init__(
        self,
        message: str = "Failed to initialize the cache database",
        database_url: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize SchemaInitError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message.
        database_url : str | None, optional
            The database URL that failed to initialize (default: None).
        original_error : Exception | None, optional
            The original exception (default: None).
        """
        self.database_url: str | None = database_url
        self.original_error: Exception | None = original_error
        super().__init__(message)


# =============================================================================
# CLI exit codes
# =============================================================================

EXIT_CODE_SUCCESS = 0
EXIT_CODE_GENERAL_ERROR = 1
EXIT_CODE_INVALID_ARGS = 2
EXIT_CODE_SCHEMA_INIT_FAILED = 3
EXIT_CODE_INTERRUPTED = 130  # Standard Unix signal interrupt exit code
