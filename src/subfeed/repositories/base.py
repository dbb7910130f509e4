"""
Base repository interface and implementation.

Provides common read operations and patterns for all repositories.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=DeclarativeBase)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Base repository interface defining common operations.

    This abstract base class provides a consistent interface for all repositories
    following the Repository pattern.
    """

    @abstractmethod
    async def get(self, session: AsyncSession, id: Any) -> Optional[ModelType]:
        """Get entity by ID."""
        pass

    @abstractmethod
    async def exists(self, session: AsyncSession, id: Any) -> bool:
        """Check if entity exists by ID."""
        pass


class BaseSQLAlchemyRepository(BaseRepository[ModelType]):
    """
    Base SQLAlchemy repository implementation.

    Provides common SQLAlchemy-based implementations that can be inherited
    by specific repository implementations.
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def count(self, session: AsyncSession) -> int:
        """Count total number of entities."""
        result = await session.execute(select(func.count()).select_from(self.model))
        return result.scalar() or 0

    async def delete_all(self, session: AsyncSession) -> int:
        """Delete every row of the model's table and return the row count."""
        result = await session.execute(delete(self.model))
        return result.rowcount or 0
