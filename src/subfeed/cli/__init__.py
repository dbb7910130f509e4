"""
CLI interface module for subfeed.

Provides the Typer-based command-line interface for listing the feed,
managing subscriptions, watch state, the local cache and preferences.
"""

from __future__ import annotations

__all__: list[str] = []
