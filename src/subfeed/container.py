"""
Dependency Injection Container for subfeed.

This module provides a centralized container for wiring the feed pipeline,
the caches and the browse session. It implements a lightweight dependency
injection pattern that:

- Provides factory methods for creating repository instances (transient)
- Manages singleton service instances via cached properties
- Enables easy mock injection for testing

Usage
-----
    >>> from subfeed.container import container
    >>> feed_service = container.feed_service
    >>> session = container.create_browse_session(on_select=open_in_browser)

Design Principles
-----------------
- Repository factories return new instances each call (transient)
- Service singletons are cached via @cached_property (lazy initialization)
- Caches are owned by the container, never by module globals
- Container can be reset for testing isolation
"""

from __future__ import annotations

from datetime import timedelta
from functools import cached_property
from typing import Optional

from subfeed.browse.session import (
    BrowseSession,
    Callback,
    ChangeCallback,
    SelectCallback,
)
from subfeed.config.preferences import PreferencesStore
from subfeed.config.settings import Settings, get_settings
from subfeed.repositories import (
    VideoRepository,
    WatchHistoryRepository,
    WatchLaterRepository,
)
from subfeed.services import (
    BatchScheduler,
    CacheStore,
    FeedFetcher,
    FeedService,
    SubscriptionList,
    ThumbnailCache,
)

_SINGLETONS = (
    "settings",
    "cache_store",
    "thumbnail_cache",
    "feed_fetcher",
    "batch_scheduler",
    "subscription_list",
    "feed_service",
    "preferences_store",
)


class Container:
    """
    Dependency injection container for subfeed.

    - **Transient**: Repository factories create new instances each call
    - **Singleton**: Service properties return cached instances

    Parameters
    ----------
    settings : Settings | None, optional
        Settings to use instead of loading them from the environment.

    Examples
    --------
        >>> container = Container()
        >>> container.cache_store is container.cache_store
        True
    """

    def __init__(self, settings: Settings | None = None) -> None:
        if settings is not None:
            self.__dict__["settings"] = settings

    # -------------------------------------------------------------------------
    # Repository Factories (Transient - new instance each call)
    # -------------------------------------------------------------------------

    def create_video_repository(self) -> VideoRepository:
        """Create a new VideoRepository instance."""
        return VideoRepository()

    def create_watch_later_repository(self) -> WatchLaterRepository:
        """Create a new WatchLaterRepository for the default list."""
        return WatchLaterRepository()

    def create_watch_history_repository(self) -> WatchHistoryRepository:
        """Create a new WatchHistoryRepository instance."""
        return WatchHistoryRepository()

    # -------------------------------------------------------------------------
    # Singleton Service Properties (Cached - same instance on repeated access)
    # -------------------------------------------------------------------------

    @cached_property
    def settings(self) -> Settings:
        """Application settings loaded from the environment."""
        return get_settings()

    @cached_property
    def cache_store(self) -> CacheStore:
        """
        Get the singleton CacheStore instance.

        Returns
        -------
        CacheStore
            Store bound to ``settings.effective_database_url``.
        """
        return CacheStore(self.settings.effective_database_url)

    @cached_property
    def thumbnail_cache(self) -> ThumbnailCache:
        """Get the singleton ThumbnailCache instance."""
        return ThumbnailCache(
            capacity=self.settings.thumbnail_cache_size,
            timeout=self.settings.request_timeout,
            breakpoints=self.settings.thumbnail_width_breakpoints,
            prefetch_group_size=self.settings.prefetch_group_size,
            prefetch_pause=self.settings.prefetch_pause,
        )

    @cached_property
    def feed_fetcher(self) -> FeedFetcher:
        """Get the singleton FeedFetcher instance."""
        return FeedFetcher(
            feed_url_template=self.settings.feed_url_template,
            thumbnail_host=self.settings.thumbnail_host,
            timeout=self.settings.request_timeout,
        )

    @cached_property
    def batch_scheduler(self) -> BatchScheduler:
        """Get the singleton BatchScheduler instance."""
        return BatchScheduler(
            self.feed_fetcher,
            batch_size=self.settings.batch_size,
            batch_delay=self.settings.batch_delay,
        )

    @cached_property
    def subscription_list(self) -> SubscriptionList:
        """Get the singleton SubscriptionList instance."""
        return SubscriptionList(self.settings.subscriptions_file)

    @cached_property
    def feed_service(self) -> FeedService:
        """Get the singleton FeedService instance."""
        return self.create_feed_service()

    @cached_property
    def preferences_store(self) -> PreferencesStore:
        """Get the singleton PreferencesStore instance."""
        return PreferencesStore(self.settings.preferences_path)

    # -------------------------------------------------------------------------
    # Wired Factories
    # -------------------------------------------------------------------------

    def create_feed_service(self, max_channels: Optional[int] = None) -> FeedService:
        """
        Create a FeedService wired to the singleton dependencies.

        Parameters
        ----------
        max_channels : int | None, optional
            Only fetch the first ``max_channels`` subscriptions.
        """
        return FeedService(
            subscriptions=self.subscription_list,
            cache_store=self.cache_store,
            scheduler=self.batch_scheduler,
            max_age=timedelta(minutes=self.settings.cache_max_age_minutes),
            max_channels=max_channels,
        )

    def create_browse_session(
        self,
        *,
        on_select: SelectCallback | None = None,
        on_exit: Callback | None = None,
        on_refresh: Callback | None = None,
        on_change: ChangeCallback | None = None,
    ) -> BrowseSession:
        """Create a BrowseSession over the shared services and caches."""
        return BrowseSession(
            self.feed_service,
            self.cache_store,
            self.thumbnail_cache,
            preferences_store=self.preferences_store,
            auto_refresh_interval=self.settings.auto_refresh_interval,
            prefetch_limit=self.settings.prefetch_limit,
            on_select=on_select,
            on_exit=on_exit,
            on_refresh=on_refresh,
            on_change=on_change,
        )

    # -------------------------------------------------------------------------
    # Testing Support
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """
        Reset the container by clearing all cached singleton instances.

        This method is primarily for testing purposes, allowing tests to
        inject mocks and then restore the container to a clean state.
        """
        for prop in _SINGLETONS:
            self.__dict__.pop(prop, None)


# Global container instance
container = Container()
