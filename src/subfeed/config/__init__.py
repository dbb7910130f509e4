"""
Configuration management module for subfeed.

Handles application settings, environment variables, user preferences,
database connections and logging setup.
"""

from __future__ import annotations

__all__: list[str] = []
