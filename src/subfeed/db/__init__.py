"""
Database module for subfeed.

Contains SQLAlchemy models and the idempotent schema-ensure routine for the
local SQLite cache.
"""

from __future__ import annotations

from subfeed.db.models import Base
from subfeed.db.schema import ensure_schema

__all__: list[str] = ["Base", "ensure_schema"]
