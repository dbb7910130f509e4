"""
Fixtures for CLI tests.

Every CLI test runs against the global container with settings pointing
into a temporary directory, so commands touch real files and a real SQLite
database without leaking between tests.
"""

from __future__ import annotations

import logging
from typing import Iterator

import pytest
from typer.testing import CliRunner

from subfeed.config.settings import Settings
from subfeed.container import container


@pytest.fixture
def runner() -> CliRunner:
    """CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_settings(settings: Settings) -> Iterator[Settings]:
    """Install isolated settings into the global container."""
    container.reset()
    container.__dict__["settings"] = settings
    yield settings
    container.reset()
    logger = logging.getLogger("subfeed")
    for handler in list(logger.handlers):
        if getattr(handler, "_subfeed_handler", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
