"""
Pytest configuration and fixtures for subfeed tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import pytest

from subfeed.config.settings import Settings
from subfeed.services.cache_store import CacheStore
from tests.factories.clock import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at a fixed instant."""
    return FakeClock(datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite database file under the test's temporary directory."""
    return f"sqlite+aiosqlite:///{tmp_path / 'cache' / 'app.db'}"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated to the test's temporary directory."""
    return Settings(
        config_dir=tmp_path / "config",
        logs_dir=tmp_path / "logs",
        subscriptions_file=tmp_path / "subscriptions.csv",
        batch_delay=0.0,
        prefetch_pause=0.0,
    )


@pytest.fixture
async def cache_store(database_url: str, clock: FakeClock) -> AsyncIterator[CacheStore]:
    """Initialized cache store backed by a temporary SQLite file."""
    store = CacheStore(database_url, clock=clock)
    await store.ensure_schema()
    yield store
    await store.close()
