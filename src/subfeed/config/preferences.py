"""
User preference persistence.

Preferences live in a small JSON document next to the cache database::

    {"userPreferences": {"thumbnailPreview": true, "autoRefresh": true}}

A missing file is created with defaults; an unreadable or invalid file is
replaced with defaults so a broken edit never prevents startup.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class UserPreferences(BaseModel):
    """Toggles persisted across sessions."""

    thumbnail_preview: bool = Field(
        default=True,
        alias="thumbnailPreview",
        description="Show the thumbnail preview panel",
    )
    auto_refresh: bool = Field(
        default=True,
        alias="autoRefresh",
        description="Periodically refresh the feed in the background",
    )

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class PreferencesFile(BaseModel):
    """On-disk layout of the preferences document."""

    user_preferences: UserPreferences = Field(
        default_factory=UserPreferences, alias="userPreferences"
    )

    model_config = ConfigDict(populate_by_name=True)


class PreferencesStore:
    """
    Load and save ``UserPreferences`` at a fixed path.

    Parameters
    ----------
    path : Path
        Location of the JSON preferences file.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Location of the preferences file."""
        return self._path

    def load(self) -> UserPreferences:
        """
        Load preferences, writing defaults when the file is missing or invalid.

        Returns
        -------
        UserPreferences
            The stored preferences, or defaults.
        """
        if not self._path.exists():
            defaults = UserPreferences()
            self.save(defaults)
            return defaults

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return PreferencesFile.model_validate(raw).user_preferences
        except (OSError, ValueError, ValidationError):
            logger.warning(
                "Failed to load preferences from %s; using defaults",
                self._path,
                exc_info=True,
            )
            defaults = UserPreferences()
            self.save(defaults)
            return defaults

    def save(self, preferences: UserPreferences) -> None:
        """Write preferences to disk; failures are logged, not raised."""
        document = PreferencesFile(user_preferences=preferences)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(document.model_dump(by_alias=True), indent=2),
                encoding="utf-8",
            )
        except OSError:
            logger.error("Failed to save preferences to %s", self._path, exc_info=True)

    def update(self, **changes: Any) -> UserPreferences:
        """
        Merge ``changes`` into the stored preferences and save them.

        Parameters
        ----------
        **changes : Any
            Field names (``thumbnail_preview``, ``auto_refresh``) and values.
            ``None`` values are ignored.

        Returns
        -------
        UserPreferences
            The updated preferences.
        """
        current = self.load()
        updates = {key: value for key, value in changes.items() if value is not None}
        updated = current.model_copy(update=updates)
        self.save(updated)
        return updated
