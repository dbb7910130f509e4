"""
Interactive browse session.

``BrowseSession`` owns a ``BrowseState`` and performs the effects the pure
reducer cannot: loading through ``FeedService``, watch-state writes through
``CacheStore``, thumbnail previews through ``ThumbnailCache`` and the
auto-refresh timer. Terminal drawing and key decoding are left to the
caller, which feeds key names to ``handle_key`` and repaints from
``on_change``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

from subfeed.browse.events import (
    BrowseEvent,
    DismissNotice,
    LoadFailed,
    LoadProgress,
    LoadRequested,
    LoadStatus,
    LoadSucceeded,
    Navigate,
    PersistenceFailed,
    Resize,
    SetAutoRefresh,
    TogglePreview,
    ToggleWatchLaterOnly,
    WatchedChanged,
    WatchLaterToggled,
)
from subfeed.browse.layout import ViewportLayout, compute_layout
from subfeed.browse.state import BrowseState, reduce
from subfeed.config.preferences import PreferencesStore, UserPreferences
from subfeed.exceptions import AggregationError, PersistenceError
from subfeed.models.enums import NavigationKind
from subfeed.models.video import VideoRecord
from subfeed.services.cache_store import CacheStore
from subfeed.services.feed_service import FeedService
from subfeed.services.thumbnail_cache import DEFAULT_PREFETCH_LIMIT, ThumbnailCache

logger = logging.getLogger(__name__)

SelectCallback = Callable[[VideoRecord], Any]
Callback = Callable[[], Any]
ChangeCallback = Callable[[BrowseState], Any]

DEFAULT_AUTO_REFRESH_INTERVAL = 300.0
DEFAULT_TERMINAL_SIZE = (80, 24)

KEY_BINDINGS: dict[str, str] = {
    "up": "up",
    "k": "up",
    "down": "down",
    "j": "down",
    "pageup": "page_up",
    "pagedown": "page_down",
    "home": "home",
    "g": "home",
    "end": "end",
    "G": "end",
    "enter": "open",
    "return": "open",
    "o": "open",
    "q": "exit",
    "escape": "exit",
    "r": "refresh",
    "p": "preview",
    "w": "watch_later",
    "l": "watch_later_only",
    "m": "watched",
}

_NAVIGATION_ACTIONS = {
    "up": NavigationKind.UP,
    "down": NavigationKind.DOWN,
    "page_up": NavigationKind.PAGE_UP,
    "page_down": NavigationKind.PAGE_DOWN,
    "home": NavigationKind.HOME,
    "end": NavigationKind.END,
}


async def _call(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class BrowseSession:
    """
    Effectful driver around the browse-state reducer.

    Parameters
    ----------
    feed_service : FeedService
        Loads the video catalog.
    cache_store : CacheStore
        Source and sink of watch state.
    thumbnail_cache : ThumbnailCache
        Preview renders.
    preferences_store : PreferencesStore | None, optional
        Persists preview and auto-refresh preferences when given.
    preferences : UserPreferences | None, optional
        Initial preferences; loaded from ``preferences_store`` when omitted.
    auto_refresh_interval : float, optional
        Seconds between automatic refreshes (default 300).
    prefetch_limit : int, optional
        Thumbnails prefetched after the selection (default 3).
    on_select, on_exit, on_refresh, on_change : callable, optional
        Outward notifications; each may be a plain or async callable.
    """

    def __init__(
        self,
        feed_service: FeedService,
        cache_store: CacheStore,
        thumbnail_cache: ThumbnailCache,
        *,
        preferences_store: PreferencesStore | None = None,
        preferences: UserPreferences | None = None,
        auto_refresh_interval: float = DEFAULT_AUTO_REFRESH_INTERVAL,
        prefetch_limit: int = DEFAULT_PREFETCH_LIMIT,
        on_select: SelectCallback | None = None,
        on_exit: Callback | None = None,
        on_refresh: Callback | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self.feed_service = feed_service
        self.cache_store = cache_store
        self.thumbnail_cache = thumbnail_cache
        self.preferences_store = preferences_store
        self.auto_refresh_interval = auto_refresh_interval
        self.prefetch_limit = prefetch_limit
        self.on_select = on_select
        self.on_exit = on_exit
        self.on_refresh = on_refresh
        self.on_change = on_change

        if preferences is None:
            preferences = (
                preferences_store.load() if preferences_store else UserPreferences()
            )
        self._state = BrowseState(
            show_preview=preferences.thumbnail_preview,
            auto_refresh=preferences.auto_refresh,
        )
        self._terminal_size = DEFAULT_TERMINAL_SIZE
        self._layout = compute_layout(*self._terminal_size, self._state.show_preview)
        self._state = reduce(self._state, Resize(self._layout.list_height))
        self._auto_refresh_task: Optional[asyncio.Task[None]] = None
        self._change_tasks: set[asyncio.Future[Any]] = set()
        self.closed = False

    @property
    def state(self) -> BrowseState:
        return self._state

    @property
    def layout(self) -> ViewportLayout:
        return self._layout

    def dispatch(self, event: BrowseEvent) -> BrowseState:
        """Apply ``event`` and notify ``on_change`` if the state moved."""
        previous = self._state
        self._state = reduce(previous, event)
        if self._state is not previous and self.on_change is not None:
            result = self.on_change(self._state)
            if inspect.isawaitable(result):
                # Async repaint hooks run on the loop; aclose waits for them
                task = asyncio.ensure_future(result)
                self._change_tasks.add(task)
                task.add_done_callback(self._change_done)
        return self._state

    def _change_done(self, task: asyncio.Future[Any]) -> None:
        self._change_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("on_change callback failed", exc_info=task.exception())

    # ═══════════════════════════════════════════════════════════════════════
    # Loading
    # ═══════════════════════════════════════════════════════════════════════

    async def load(self, force_refresh: bool = False) -> bool:
        """
        Load the catalog unless a load is already running.

        Returns
        -------
        bool
            True when a new catalog was installed; False when the request
            was dropped or the load failed.
        """
        if self._state.loading:
            logger.debug("Ignoring load request; one is already in flight")
            return False
        self.dispatch(LoadRequested())

        try:
            result = await self.feed_service.fetch_videos(
                force_refresh=force_refresh,
                on_progress=lambda current, total: self.dispatch(
                    LoadProgress(current, total)
                ),
                on_status=lambda label: self.dispatch(LoadStatus(label)),
            )
            watch_later = await self.cache_store.load_watch_later_set()
            watched = await self.cache_store.load_watched_set()
        except (AggregationError, PersistenceError) as e:
            logger.warning("Feed load failed: %s", e.message)
            self.dispatch(LoadFailed(e.message))
            return False
        except BaseException as e:
            # Clear the in-flight flag so a later refresh can retry
            logger.error("Feed load aborted: %r", e)
            self.dispatch(LoadFailed(str(e) or type(e).__name__))
            raise

        self.dispatch(
            LoadSucceeded(
                videos=tuple(result.videos),
                watch_later=frozenset(watch_later),
                watched=frozenset(watched),
                loaded_at=datetime.now(timezone.utc),
            )
        )
        self._prefetch_upcoming()
        return True

    async def refresh(self) -> bool:
        """Force a reload from the channel feeds."""
        if self._state.loading:
            return False
        await _call(self.on_refresh)
        return await self.load(force_refresh=True)

    def start_auto_refresh(self) -> asyncio.Task[None]:
        """Start the recurring refresh timer if it is not running."""
        if self._auto_refresh_task is None or self._auto_refresh_task.done():
            self._auto_refresh_task = asyncio.create_task(self._auto_refresh_loop())
        return self._auto_refresh_task

    async def _auto_refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.auto_refresh_interval)
            if not self._state.auto_refresh or self._state.loading:
                logger.debug("Skipping auto-refresh tick")
                continue
            logger.info("Auto-refreshing feed")
            await self.refresh()

    # ═══════════════════════════════════════════════════════════════════════
    # Navigation and view options
    # ═══════════════════════════════════════════════════════════════════════

    def navigate(self, kind: NavigationKind) -> None:
        """Move the selection and warm previews for what comes next."""
        before = self._state.selection
        self.dispatch(Navigate(kind))
        if self._state.selection != before:
            self._prefetch_upcoming()

    def resize(self, width: int, height: int) -> ViewportLayout:
        """Recompute the layout for a terminal of ``width`` x ``height``."""
        self._terminal_size = (width, height)
        self._layout = compute_layout(width, height, self._state.show_preview)
        self.dispatch(Resize(self._layout.list_height))
        return self._layout

    def toggle_watch_later_only(self) -> None:
        self.dispatch(ToggleWatchLaterOnly())

    def toggle_preview(self) -> None:
        """Show or hide the preview panel and remember the choice."""
        self.dispatch(TogglePreview())
        self.resize(*self._terminal_size)
        self._save_preferences(thumbnail_preview=self._state.show_preview)
        self._prefetch_upcoming()

    def set_auto_refresh(self, enabled: bool) -> None:
        """Enable or suspend auto-refresh and remember the choice."""
        self.dispatch(SetAutoRefresh(enabled))
        self._save_preferences(auto_refresh=enabled)

    def dismiss_notice(self) -> None:
        self.dispatch(DismissNotice())

    def _save_preferences(self, **changes: bool) -> None:
        if self.preferences_store is not None:
            self.preferences_store.update(**changes)

    # ═══════════════════════════════════════════════════════════════════════
    # Watch state
    # ═══════════════════════════════════════════════════════════════════════

    async def toggle_watch_later(self) -> Optional[bool]:
        """
        Flip watch-later membership of the selected video.

        Returns
        -------
        Optional[bool]
            The new membership, or None when nothing is selected or the
            write failed.
        """
        video = self._state.selected_video
        if video is None:
            return None
        try:
            member = await self.cache_store.toggle_watch_later(video.video_id)
        except PersistenceError as e:
            self.dispatch(PersistenceFailed(e.message))
            return None
        self.dispatch(WatchLaterToggled(video.video_id, member))
        return member

    async def toggle_watched(self) -> Optional[bool]:
        """Flip the watched flag of the selected video."""
        video = self._state.selected_video
        if video is None:
            return None
        try:
            watched = await self.cache_store.toggle_watched(video.video_id)
        except PersistenceError as e:
            self.dispatch(PersistenceFailed(e.message))
            return None
        self.dispatch(WatchedChanged(video.video_id, watched))
        return watched

    async def open_selected(self) -> Optional[VideoRecord]:
        """Mark the selected video watched, then hand it to ``on_select``."""
        video = self._state.selected_video
        if video is None:
            return None
        try:
            await self.cache_store.mark_watched(video.video_id)
        except PersistenceError as e:
            self.dispatch(PersistenceFailed(e.message))
        else:
            self.dispatch(WatchedChanged(video.video_id, True))
        await _call(self.on_select, video)
        return video

    # ═══════════════════════════════════════════════════════════════════════
    # Previews
    # ═══════════════════════════════════════════════════════════════════════

    def current_thumbnail(self) -> Optional[str]:
        """Cached preview for the selection, without fetching."""
        video = self._state.selected_video
        if video is None or not self._state.show_preview:
            return None
        return self.thumbnail_cache.get(
            video, self._layout.preview_width, self._layout.preview_height
        )

    async def load_thumbnail(self) -> Optional[str]:
        """Preview for the selection, fetching it on a miss."""
        video = self._state.selected_video
        if video is None or not self._state.show_preview:
            return None
        return await self.thumbnail_cache.load_or_fetch(
            video, self._layout.preview_width, self._layout.preview_height
        )

    def _prefetch_upcoming(self) -> Optional[asyncio.Task[None]]:
        state = self._state
        if not state.show_preview or state.selection < 0:
            return None
        upcoming = state.view[state.selection + 1 : state.selection + 1 + self.prefetch_limit]
        return self.thumbnail_cache.prefetch(
            upcoming,
            self._layout.preview_width,
            self._layout.preview_height,
            limit=self.prefetch_limit,
        )

    # ═══════════════════════════════════════════════════════════════════════
    # Input and lifecycle
    # ═══════════════════════════════════════════════════════════════════════

    async def handle_key(self, key: str) -> bool:
        """
        Run the action bound to ``key``.

        Returns
        -------
        bool
            False once the session should end, True otherwise.
        """
        action = KEY_BINDINGS.get(key)
        if action is None:
            return True

        if self._state.notice is not None:
            self.dismiss_notice()

        if action in _NAVIGATION_ACTIONS:
            self.navigate(_NAVIGATION_ACTIONS[action])
        elif action == "open":
            await self.open_selected()
        elif action == "exit":
            await _call(self.on_exit)
            return False
        elif action == "refresh":
            await self.refresh()
        elif action == "preview":
            self.toggle_preview()
        elif action == "watch_later":
            await self.toggle_watch_later()
        elif action == "watch_later_only":
            self.toggle_watch_later_only()
        elif action == "watched":
            await self.toggle_watched()
        return True

    async def aclose(self) -> None:
        """Stop the auto-refresh timer and wait for pending change hooks."""
        if self.closed:
            return
        self.closed = True
        task, self._auto_refresh_task = self._auto_refresh_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._change_tasks:
            await asyncio.wait(set(self._change_tasks))
        await self.thumbnail_cache.close()
