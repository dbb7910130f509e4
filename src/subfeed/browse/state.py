"""
Browse-session state and its reducer.

``reduce`` is a pure function: it takes the current ``BrowseState`` and one
event and returns the next state. Side effects (network, storage, timers)
live in ``subfeed.browse.session``.

Invariants maintained by every transition:

- ``selection`` is ``NO_SELECTION`` exactly when the view is empty, and is
  otherwise a valid index into ``view``.
- ``scroll_offset <= selection <= scroll_offset + page_height - 1``.
- A failed load never touches ``catalog``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional

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
from subfeed.models.enums import NavigationKind, SessionPhase
from subfeed.models.video import VideoRecord

logger = logging.getLogger(__name__)

NO_SELECTION = -1


def derive_view(
    catalog: Iterable[VideoRecord],
    watch_later: frozenset[str],
    watch_later_only: bool,
) -> tuple[VideoRecord, ...]:
    """
    Compute the displayed list from the catalog.

    Shorts are always dropped; with ``watch_later_only`` only watch-later
    members remain. The result is sorted newest first; ties keep catalog
    order.
    """
    visible = [
        video
        for video in catalog
        if not video.is_short
        and (not watch_later_only or video.video_id in watch_later)
    ]
    visible.sort(key=lambda video: video.published, reverse=True)
    return tuple(visible)


def adjust_scroll(selection: int, offset: int, page_height: int) -> int:
    """Move ``offset`` the minimum needed to keep ``selection`` visible."""
    if selection < 0:
        return 0
    page_height = max(1, page_height)
    if selection < offset:
        return selection
    if selection >= offset + page_height:
        return selection - page_height + 1
    return max(0, offset)


@dataclass(frozen=True)
class BrowseState:
    """Snapshot of a browse session."""

    phase: SessionPhase = SessionPhase.LOADING
    catalog: tuple[VideoRecord, ...] = ()
    catalog_version: int = 0
    view: tuple[VideoRecord, ...] = ()
    selection: int = NO_SELECTION
    scroll_offset: int = 0
    page_height: int = 1
    watch_later: frozenset[str] = field(default_factory=frozenset)
    watched: frozenset[str] = field(default_factory=frozenset)
    watch_later_only: bool = False
    show_preview: bool = True
    auto_refresh: bool = True
    loading: bool = False
    status: Optional[str] = None
    progress: Optional[tuple[int, int]] = None
    error: Optional[str] = None
    notice: Optional[str] = None
    loaded_at: Optional[datetime] = None

    @property
    def has_catalog(self) -> bool:
        return self.catalog_version > 0

    @property
    def selected_video(self) -> Optional[VideoRecord]:
        if self.selection == NO_SELECTION:
            return None
        return self.view[self.selection]

    @property
    def visible_videos(self) -> tuple[VideoRecord, ...]:
        """The slice of the view inside the scroll window."""
        return self.view[self.scroll_offset : self.scroll_offset + self.page_height]

    def is_watch_later(self, video_id: str) -> bool:
        return video_id in self.watch_later

    def is_watched(self, video_id: str) -> bool:
        return video_id in self.watched


# ═══════════════════════════════════════════════════════════════════════════
# Transitions
# ═══════════════════════════════════════════════════════════════════════════


def _refilter(state: BrowseState, **changes: object) -> BrowseState:
    """Apply ``changes``, recompute the view and keep the selection stable."""
    previous = state.selected_video
    state = replace(state, **changes)  # type: ignore[arg-type]
    view = derive_view(state.catalog, state.watch_later, state.watch_later_only)

    if not view:
        selection = NO_SELECTION
    else:
        selection = -1
        if previous is not None:
            for index, video in enumerate(view):
                if video.video_id == previous.video_id:
                    selection = index
                    break
        if selection < 0:
            selection = min(max(state.selection, 0), len(view) - 1)

    # A shrunken view may leave the page half empty; pull the window back up
    offset = adjust_scroll(selection, state.scroll_offset, state.page_height)
    offset = min(offset, max(0, len(view) - max(1, state.page_height)))
    return replace(state, view=view, selection=selection, scroll_offset=offset)


def _navigate(state: BrowseState, kind: NavigationKind) -> BrowseState:
    if not state.view:
        return state

    last = len(state.view) - 1
    current = max(state.selection, 0)
    page = max(1, state.page_height - 1)

    if kind is NavigationKind.UP:
        selection = max(0, current - 1)
    elif kind is NavigationKind.DOWN:
        selection = min(last, current + 1)
    elif kind is NavigationKind.PAGE_UP:
        selection = max(0, current - page)
    elif kind is NavigationKind.PAGE_DOWN:
        selection = min(last, current + page)
    elif kind is NavigationKind.HOME:
        selection = 0
    else:
        selection = last

    if selection == state.selection:
        return state
    return replace(
        state,
        selection=selection,
        scroll_offset=adjust_scroll(selection, state.scroll_offset, state.page_height),
    )


def _load_succeeded(state: BrowseState, event: LoadSucceeded) -> BrowseState:
    catalog = tuple(event.videos)
    view = derive_view(catalog, event.watch_later, state.watch_later_only)
    return replace(
        state,
        phase=SessionPhase.READY,
        catalog=catalog,
        catalog_version=state.catalog_version + 1,
        view=view,
        selection=0 if view else NO_SELECTION,
        scroll_offset=0,
        watch_later=frozenset(event.watch_later),
        watched=frozenset(event.watched),
        loading=False,
        status=None,
        progress=None,
        error=None,
        loaded_at=event.loaded_at,
    )


def reduce(state: BrowseState, event: BrowseEvent) -> BrowseState:
    """
    Compute the state that follows ``event``.

    Parameters
    ----------
    state : BrowseState
        Current state.
    event : BrowseEvent
        Event to apply.

    Returns
    -------
    BrowseState
        The next state. ``state`` itself is returned when the event is a
        no-op, such as a load requested while another one is in flight.
    """
    if isinstance(event, LoadRequested):
        if state.loading:
            logger.debug("Load already in flight, dropping request")
            return state
        return replace(
            state,
            phase=SessionPhase.REFRESHING if state.has_catalog else SessionPhase.LOADING,
            loading=True,
            status=None,
            progress=None,
            error=None,
        )

    if isinstance(event, LoadStatus):
        return replace(state, status=event.label)

    if isinstance(event, LoadProgress):
        return replace(state, progress=(event.current, event.total))

    if isinstance(event, LoadSucceeded):
        return _load_succeeded(state, event)

    if isinstance(event, LoadFailed):
        return replace(
            state,
            phase=SessionPhase.ERROR,
            loading=False,
            status=None,
            progress=None,
            error=event.message,
        )

    if isinstance(event, Navigate):
        return _navigate(state, event.kind)

    if isinstance(event, Resize):
        page_height = max(1, event.page_height)
        return replace(
            state,
            page_height=page_height,
            scroll_offset=adjust_scroll(state.selection, state.scroll_offset, page_height),
        )

    if isinstance(event, ToggleWatchLaterOnly):
        return _refilter(state, watch_later_only=not state.watch_later_only)

    if isinstance(event, TogglePreview):
        return replace(state, show_preview=not state.show_preview)

    if isinstance(event, SetAutoRefresh):
        return replace(state, auto_refresh=event.enabled)

    if isinstance(event, WatchLaterToggled):
        if event.member:
            watch_later = state.watch_later | {event.video_id}
        else:
            watch_later = state.watch_later - {event.video_id}
        return _refilter(state, watch_later=watch_later)

    if isinstance(event, WatchedChanged):
        if event.watched:
            watched = state.watched | {event.video_id}
        else:
            watched = state.watched - {event.video_id}
        return replace(state, watched=watched)

    if isinstance(event, PersistenceFailed):
        return replace(state, notice=event.message)

    if isinstance(event, DismissNotice):
        return replace(state, notice=None)

    raise TypeError(f"Unknown browse event: {event!r}")
