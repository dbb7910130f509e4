"""
Controllable clock for freshness and time-ago tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta


class FakeClock:
    """Controllable replacement for ``datetime.now(timezone.utc)``."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now
