"""
Events consumed by the browse-state reducer.

Each event is a small frozen dataclass. User input, load results and the
outcome of watch-state writes all reach the state through these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from subfeed.models.enums import NavigationKind
from subfeed.models.video import VideoRecord


# Loading


@dataclass(frozen=True)
class LoadRequested:
    pass


@dataclass(frozen=True)
class LoadStatus:
    label: str


@dataclass(frozen=True)
class LoadProgress:
    current: int
    total: int


@dataclass(frozen=True)
class LoadSucceeded:
    videos: tuple[VideoRecord, ...]
    watch_later: frozenset[str] = field(default_factory=frozenset)
    watched: frozenset[str] = field(default_factory=frozenset)
    loaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class LoadFailed:
    message: str


# Navigation and view options


@dataclass(frozen=True)
class Navigate:
    kind: NavigationKind


@dataclass(frozen=True)
class Resize:
    page_height: int


@dataclass(frozen=True)
class ToggleWatchLaterOnly:
    pass


@dataclass(frozen=True)
class TogglePreview:
    pass


@dataclass(frozen=True)
class SetAutoRefresh:
    enabled: bool


# Watch state


@dataclass(frozen=True)
class WatchLaterToggled:
    video_id: str
    member: bool


@dataclass(frozen=True)
class WatchedChanged:
    video_id: str
    watched: bool


@dataclass(frozen=True)
class PersistenceFailed:
    message: str


@dataclass(frozen=True)
class DismissNotice:
    pass


BrowseEvent = Union[
    LoadRequested,
    LoadStatus,
    LoadProgress,
    LoadSucceeded,
    LoadFailed,
    Navigate,
    Resize,
    ToggleWatchLaterOnly,
    TogglePreview,
    SetAutoRefresh,
    WatchLaterToggled,
    WatchedChanged,
    PersistenceFailed,
    DismissNotice,
]
