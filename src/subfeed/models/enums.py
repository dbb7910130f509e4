"""
Enums for subfeed models.

Defines enumeration types used across the application for consistent
type safety and validation.
"""

from __future__ import annotations

from enum import Enum


class SessionPhase(str, Enum):
    """Lifecycle phases of a browse session."""

    LOADING = "loading"  # first load in progress, no catalog yet
    READY = "ready"
    REFRESHING = "refreshing"  # catalog shown while a reload runs
    ERROR = "error"


class AggregationPhase(str, Enum):
    """Human-readable phases reported while loading the feed."""

    LOADING_SUBSCRIPTIONS = "Loading subscriptions…"
    CHECKING_CACHE = "Checking cache…"
    FETCHING = "Fetching videos…"
    SAVING = "Saving to cache…"


class NavigationKind(str, Enum):
    """Selection movements supported by the browse list."""

    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
