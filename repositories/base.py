"""Base repository class."""

from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """Initialize repository."""
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get entity by ID."""
        stmt = select(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, ids: Sequence[int]) -> List[ModelType]:
        """Get entities whose ID is in `ids` (missing ones are simply absent)."""
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(list(ids)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_one_where(self, *conditions: Any) -> Optional[ModelType]:
        stmt = select(self.model).where(*conditions).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_where(
        self,
        *conditions: Any,
        limit: Optional[int] = 100,
        offset: int = 0,
        order_by: Sequence[Any] = (),
    ) -> List[ModelType]:
        """Get entities matching `conditions` with pagination."""
        stmt = select(self.model).where(*conditions)
        stmt = stmt.order_by(*order_by) if order_by else stmt.order_by(self.model.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        stmt = stmt.offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_where(self, *conditions: Any) -> int:
        stmt = select(func.count(self.model.id)).where(*conditions)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def create(self, **kwargs) -> ModelType:
        """Create new entity."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: int, **kwargs) -> Optional[ModelType]:
        """Update entity by ID."""
        instance = await self.get_by_id(id)
        if not instance:
            return None

        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> bool:
        """Delete entity by ID."""
        instance = await self.get_by_id(id)
        if not instance:
            return False

        await self.session.delete(instance)
        await self.session.flush()
        return True
