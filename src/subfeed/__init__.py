"""
subfeed - Terminal feed reader for YouTube channel subscriptions.

Aggregates the syndication feeds of subscribed channels, caches the result
in a local SQLite database, and drives an interactive browsing session with
watch-later and watched tracking.
"""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "subfeed"
__email__ = "noreply@subfeed.dev"
__license__ = "AGPL-3.0-or-later"
