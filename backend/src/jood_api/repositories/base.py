"""Base repository with common database operations."""

from collections.abc import Iterable
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.models.orm.base import Base

T = TypeVar("T", bound=Base)

class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations."""

    model: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def get(self, id: UUID) -> T | None:
        """Get a record by ID.

        Args:
            id: Record UUID

        Returns:
            Record or None if not found
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: Iterable[UUID]) -> list[T]:
        """Get all records whose ID is in the given collection.

        Args:
            ids: Record UUIDs

        Returns:
            Matching records (missing IDs are skipped)
        """
        id_list = list(ids)
        if not id_list:
            return []
        result = await self.session.execute(
            select(self.model).where(self.model.id.in_(id_list))
        )
        return list(result.scalars().all())

    async def create(self, **kwargs: Any) -> T:
        """Create a new record.

        Args:
            **kwargs: Field values

        Returns:
            Created record
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance
