"""Cached taxonomy services: genders, categories, subcategories."""

import re
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.models import Category, Gender, Product, Subcategory
from repositories.product_repository import ProductRepository
from repositories.taxonomy_repository import (
    CategoryRepository,
    GenderRepository,
    SubcategoryRepository,
)
from schemas.common import PaginatedResponse, Pagination
from schemas.taxonomy import CategoryResponse, GenderResponse, SubcategoryResponse
from services.base import BaseService
from services.exceptions import ConflictError, NotFoundError
from utils.cache import CacheManager, CacheNamespace
from utils.cache_keys import CacheKeys
from utils.logger import logger

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def generate_slug(name: str) -> str:
    """`"Men's Shoes"` -> `"men-s-shoes"`."""
    return _NON_SLUG.sub("-", name.strip().lower()).strip("-")


class TaxonomyService(BaseService):
    """
    Cache-aside CRUD shared by the three taxonomy levels.

    Reads go through the entity's cache namespace; every write invalidates
    the whole namespace. Subclasses name the entity, its repository and, for
    child levels, the parent service used to validate the parent id.
    """

    entity: str
    label: str
    model: Type[Any]
    repository_class: Type[Any]
    response_type: Type[BaseModel]
    parent_field: Optional[str] = None

    def __init__(
        self,
        session_factory: async_sessionmaker,
        cache: CacheManager,
        parent: Optional["TaxonomyService"] = None,
        strategy: Optional[str] = None,
    ):
        super().__init__(session_factory)
        self.parent = parent
        self.namespace = CacheNamespace(cache, self.entity, CacheKeys.TTL_TAXONOMY, strategy)

    def _conditions(self, parent_id: Optional[int], is_active: Optional[bool]) -> List[Any]:
        conditions = []
        if self.parent_field and parent_id is not None:
            conditions.append(getattr(self.model, self.parent_field) == parent_id)
        if is_active is not None:
            conditions.append(self.model.is_active == is_active)
        return conditions

    async def find_all(
        self,
        page: int = 1,
        limit: int = 10,
        parent_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> PaginatedResponse:
        """List one page, newest first."""
        filters: Dict[str, Any] = {"is_active": is_active}
        if self.parent_field:
            filters[self.parent_field] = parent_id
        key = CacheKeys.query(self.entity, "all", page, limit, filters)
        snapshot = PaginatedResponse[self.response_type]

        async def work(session: AsyncSession):
            repo = self.repository_class(session)
            conditions = self._conditions(parent_id, is_active)
            rows = await repo.list_where(
                *conditions,
                limit=limit,
                offset=(page - 1) * limit,
                order_by=(self.model.created_at.desc(), self.model.id.desc()),
            )
            total = await repo.count_where(*conditions)
            return snapshot(
                data=[self.response_type.model_validate(row) for row in rows],
                pagination=Pagination.build(total, page, limit),
            )

        return await self.namespace.get_or_load(
            key, lambda: self.run(f"{self.entity}.find_all", work), snapshot
        )

    async def find_one(self, entity_id: int) -> BaseModel:
        """
        Get one record by id.

        Raises:
            NotFoundError: If it does not exist.
        """

        async def work(session: AsyncSession):
            row = await self.repository_class(session).get_by_id(entity_id)
            if not row:
                raise NotFoundError(f"{self.label} with ID {entity_id} not found")
            return self.response_type.model_validate(row)

        return await self.namespace.get_or_load(
            CacheKeys.by_id(self.entity, entity_id),
            lambda: self.run(f"{self.entity}.find_one", work),
            self.response_type,
        )

    async def find_by_slug(self, slug: str, parent_id: Optional[int] = None) -> BaseModel:
        async def work(session: AsyncSession):
            row = await self.repository_class(session).get_by_slug(slug, parent_id)
            if not row:
                raise NotFoundError(f"{self.label} with slug {slug} not found")
            return self.response_type.model_validate(row)

        return await self.namespace.get_or_load(
            CacheKeys.by_slug(self.entity, slug, parent_id),
            lambda: self.run(f"{self.entity}.find_by_slug", work),
            self.response_type,
        )

    async def _ensure_unique(
        self,
        repo,
        name: str,
        slug: str,
        parent_id: Optional[int],
        exclude_id: Optional[int] = None,
    ):
        suffix = f" for this {self.parent.label.lower()}" if self.parent else ""
        existing = await repo.get_by_name(name, parent_id)
        if existing and existing.id != exclude_id:
            raise ConflictError(f"{self.label} with this name already exists{suffix}")
        existing = await repo.get_by_slug(slug, parent_id)
        if existing and existing.id != exclude_id:
            raise ConflictError(f"{self.label} with this slug already exists{suffix}")

    async def create(self, data: BaseModel) -> BaseModel:
        """
        Create a record; the slug is generated from the name when omitted.

        Raises:
            NotFoundError: If the parent does not exist.
            ConflictError: On a duplicate name or slug.
        """
        values = data.model_dump()
        values["slug"] = values.get("slug") or generate_slug(values["name"])
        parent_id = values.get(self.parent_field) if self.parent_field else None
        if self.parent is not None:
            await self.parent.find_one(parent_id)

        async def work(session: AsyncSession):
            repo = self.repository_class(session)
            await self._ensure_unique(repo, values["name"], values["slug"], parent_id)
            row = await repo.create(**values)
            return self.response_type.model_validate(row)

        created = await self.run(f"{self.entity}.create", work)
        await self.namespace.invalidate()
        logger.info(f"{self.label} created", id=created.id, slug=created.slug)
        return created

    async def update(self, entity_id: int, data: BaseModel) -> BaseModel:
        """
        Update a record. Renaming without an explicit slug regenerates it.

        Raises:
            NotFoundError: If the record or the new parent does not exist.
            ConflictError: On a duplicate name or slug.
        """
        changes = data.model_dump(exclude_unset=True)
        if self.parent is not None and changes.get(self.parent_field) is not None:
            await self.parent.find_one(changes[self.parent_field])

        async def work(session: AsyncSession):
            repo = self.repository_class(session)
            row = await repo.get_by_id(entity_id)
            if not row:
                raise NotFoundError(f"{self.label} with ID {entity_id} not found")

            if changes.get("name") and not changes.get("slug"):
                changes["slug"] = generate_slug(changes["name"])
            name = changes.get("name") or row.name
            slug = changes.get("slug") or row.slug
            parent_id = getattr(row, self.parent_field) if self.parent_field else None
            if self.parent_field and changes.get(self.parent_field) is not None:
                parent_id = changes[self.parent_field]
            await self._ensure_unique(repo, name, slug, parent_id, exclude_id=entity_id)

            row = await repo.update(entity_id, **{k: v for k, v in changes.items() if v is not None})
            return self.response_type.model_validate(row)

        updated = await self.run(f"{self.entity}.update", work)
        await self.namespace.invalidate()
        logger.info(f"{self.label} updated", id=entity_id)
        return updated

    async def _dependents(self, session: AsyncSession, entity_id: int) -> Optional[str]:
        """Reason the record cannot be deleted, or None."""
        return None

    async def remove(self, entity_id: int) -> BaseModel:
        """
        Delete a record.

        Raises:
            NotFoundError: If it does not exist.
            ConflictError: If other records still reference it. Nothing is deleted.
        """

        async def work(session: AsyncSession):
            repo = self.repository_class(session)
            row = await repo.get_by_id(entity_id)
            if not row:
                raise NotFoundError(f"{self.label} with ID {entity_id} not found")
            reason = await self._dependents(session, entity_id)
            if reason:
                raise ConflictError(f"Cannot delete {self.label.lower()}: {reason}")
            snapshot = self.response_type.model_validate(row)
            await repo.delete(entity_id)
            return snapshot

        removed = await self.run(f"{self.entity}.remove", work)
        await self.namespace.invalidate()
        logger.info(f"{self.label} deleted", id=entity_id)
        return removed


class GenderService(TaxonomyService):
    entity = CacheKeys.GENDER
    label = "Gender"
    model = Gender
    repository_class = GenderRepository
    response_type = GenderResponse

    async def _dependents(self, session: AsyncSession, entity_id: int) -> Optional[str]:
        categories = await CategoryRepository(session).count_by_gender(entity_id)
        if categories:
            return f"{categories} categories are associated with it"
        products = await ProductRepository(session).count_where(Product.gender_id == entity_id)
        if products:
            return f"{products} products are associated with it"
        return None


class CategoryService(TaxonomyService):
    entity = CacheKeys.CATEGORY
    label = "Category"
    model = Category
    repository_class = CategoryRepository
    response_type = CategoryResponse
    parent_field = "gender_id"

    async def _dependents(self, session: AsyncSession, entity_id: int) -> Optional[str]:
        subcategories = await SubcategoryRepository(session).count_by_category(entity_id)
        if subcategories:
            return f"{subcategories} subcategories are associated with it"
        products = await ProductRepository(session).count_by_category(entity_id)
        if products:
            return f"{products} products are associated with it"
        return None


class SubcategoryService(TaxonomyService):
    entity = CacheKeys.SUBCATEGORY
    label = "Subcategory"
    model = Subcategory
    repository_class = SubcategoryRepository
    response_type = SubcategoryResponse
    parent_field = "category_id"

    async def _dependents(self, session: AsyncSession, entity_id: int) -> Optional[str]:
        products = await ProductRepository(session).count_by_subcategory(entity_id)
        if products:
            return f"{products} products are associated with it"
        return None
