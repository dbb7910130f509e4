"""
Tests for user preference persistence.
"""

from __future__ import annotations

import json
from pathlib import Path

from subfeed.config.preferences import PreferencesStore, UserPreferences


class TestPreferencesStore:
    """Tests for PreferencesStore."""

    def test_missing_file_is_created_with_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config" / "config.json"

        preferences = PreferencesStore(path).load()

        assert preferences == UserPreferences()
        assert json.loads(path.read_text()) == {
            "userPreferences": {"thumbnailPreview": True, "autoRefresh": True}
        }

    def test_round_trip(self, tmp_path: Path) -> None:
        store = PreferencesStore(tmp_path / "config.json")

        store.save(UserPreferences(thumbnail_preview=False, auto_refresh=True))

        assert store.load().thumbnail_preview is False

    def test_reads_camel_case_document(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"userPreferences": {"autoRefresh": False}}))

        preferences = PreferencesStore(path).load()

        assert preferences.auto_refresh is False
        assert preferences.thumbnail_preview is True

    def test_invalid_json_falls_back_to_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")

        assert PreferencesStore(path).load() == UserPreferences()
        assert json.loads(path.read_text())["userPreferences"]["autoRefresh"] is True

    def test_wrong_types_fall_back_to_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"userPreferences": {"autoRefresh": "sometimes"}}))

        assert PreferencesStore(path).load() == UserPreferences()

    def test_update_merges_and_ignores_none(self, tmp_path: Path) -> None:
        store = PreferencesStore(tmp_path / "config.json")
        store.update(auto_refresh=False)

        updated = store.update(thumbnail_preview=False, auto_refresh=None)

        assert updated == UserPreferences(thumbnail_preview=False, auto_refresh=False)
        assert store.load() == updated
