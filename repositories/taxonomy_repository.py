"""Gender / category / subcategory repositories."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Category, Gender, Subcategory
from repositories.base import BaseRepository


class GenderRepository(BaseRepository[Gender]):
    """Repository for Gender entity."""

    def __init__(self, session: AsyncSession):
        super().__init__(Gender, session)

    async def get_by_name(self, name: str, parent_id: Optional[int] = None) -> Optional[Gender]:
        return await self.find_one_where(Gender.name == name)

    async def get_by_slug(self, slug: str, parent_id: Optional[int] = None) -> Optional[Gender]:
        return await self.find_one_where(Gender.slug == slug)


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category entity. Names and slugs are unique per gender."""

    def __init__(self, session: AsyncSession):
        super().__init__(Category, session)

    async def get_by_name(self, name: str, parent_id: Optional[int] = None) -> Optional[Category]:
        return await self.find_one_where(Category.name == name, Category.gender_id == parent_id)

    async def get_by_slug(self, slug: str, parent_id: Optional[int] = None) -> Optional[Category]:
        conditions = [Category.slug == slug]
        if parent_id is not None:
            conditions.append(Category.gender_id == parent_id)
        return await self.find_one_where(*conditions)

    async def count_by_gender(self, gender_id: int) -> int:
        return await self.count_where(Category.gender_id == gender_id)


class SubcategoryRepository(BaseRepository[Subcategory]):
    """Repository for Subcategory entity. Names and slugs are unique per category."""

    def __init__(self, session: AsyncSession):
        super().__init__(Subcategory, session)

    async def get_by_name(self, name: str, parent_id: Optional[int] = None) -> Optional[Subcategory]:
        return await self.find_one_where(
            Subcategory.name == name, Subcategory.category_id == parent_id
        )

    async def get_by_slug(self, slug: str, parent_id: Optional[int] = None) -> Optional[Subcategory]:
        conditions = [Subcategory.slug == slug]
        if parent_id is not None:
            conditions.append(Subcategory.category_id == parent_id)
        return await self.find_one_where(*conditions)

    async def count_by_category(self, category_id: int) -> int:
        return await self.count_where(Subcategory.category_id == category_id)
