"""Product business logic service."""

import secrets
import string
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from repositories.product_repository import ProductRepository
from schemas.common import PaginatedResponse, Pagination
from schemas.product import ProductCreate, ProductFilters, ProductResponse, ProductUpdate
from services.base import BaseService
from services.catalog_service import CategoryService, GenderService, SubcategoryService
from services.exceptions import ConflictError, NotFoundError, ValidationFailedError
from utils.cache import CacheManager, CacheNamespace
from utils.cache_keys import CacheKeys
from utils.logger import logger

SKU_ALPHABET = string.ascii_uppercase + string.digits
SKU_ATTEMPTS = 10
NULLABLE_FIELDS = {"description", "discount_price", "family_sku"}


def generate_sku(gender_name: str, category_name: str) -> str:
    """`MEN-SHI-4F9K2A`: gender and category prefixes plus a random suffix."""
    suffix = "".join(secrets.choice(SKU_ALPHABET) for _ in range(6))
    prefix = "-".join(
        "".join(ch for ch in part.upper() if ch.isalnum())[:3] or "GEN"
        for part in (gender_name, category_name)
    )
    return f"{prefix}-{suffix}"


class ProductService(BaseService):
    """Service for product-related business logic."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        cache: CacheManager,
        genders: GenderService,
        categories: CategoryService,
        subcategories: SubcategoryService,
        strategy: Optional[str] = None,
    ):
        super().__init__(session_factory)
        self.genders = genders
        self.categories = categories
        self.subcategories = subcategories
        self.namespace = CacheNamespace(cache, CacheKeys.PRODUCT, CacheKeys.TTL_PRODUCT, strategy)

    async def find_all(
        self, page: int = 1, limit: int = 10, filters: Optional[ProductFilters] = None
    ) -> PaginatedResponse[ProductResponse]:
        """Filtered product page, newest first."""
        filters = filters or ProductFilters()
        key = CacheKeys.query(CacheKeys.PRODUCT, "all", page, limit, filters.as_key_parts())

        async def work(session: AsyncSession):
            products, total = await ProductRepository(session).find_page(
                filters, limit=limit, offset=(page - 1) * limit
            )
            return PaginatedResponse[ProductResponse](
                data=[ProductResponse.model_validate(p) for p in products],
                pagination=Pagination.build(total, page, limit),
            )

        return await self.namespace.get_or_load(
            key, lambda: self.run("product.find_all", work), PaginatedResponse[ProductResponse]
        )

    async def find_one(self, product_id: int) -> ProductResponse:
        """
        Get product by ID.

        Raises:
            NotFoundError: If the product does not exist.
        """

        async def work(session: AsyncSession):
            product = await ProductRepository(session).get_by_id(product_id)
            if not product:
                raise NotFoundError(f"Product with ID {product_id} not found")
            return ProductResponse.model_validate(product)

        return await self.namespace.get_or_load(
            CacheKeys.by_id(CacheKeys.PRODUCT, product_id),
            lambda: self.run("product.find_one", work),
            ProductResponse,
        )

    async def find_by_sku(self, sku: str) -> ProductResponse:
        """Get product by SKU. Not cached."""

        async def work(session: AsyncSession):
            product = await ProductRepository(session).get_by_sku(sku)
            if not product:
                raise NotFoundError(f"Product with SKU {sku} not found")
            return ProductResponse.model_validate(product)

        return await self.run("product.find_by_sku", work)

    async def find_by_family_sku(self, family_sku: str) -> List[ProductResponse]:
        """Active variants sharing a family SKU."""

        async def work(session: AsyncSession):
            products = await ProductRepository(session).get_by_family_sku(family_sku)
            return [ProductResponse.model_validate(p) for p in products]

        return await self.namespace.get_or_load(
            CacheKeys.scoped(CacheKeys.PRODUCT, "family", family_sku.upper()),
            lambda: self.run("product.find_by_family_sku", work),
            List[ProductResponse],
        )

    async def get_featured(self, limit: int = 10) -> List[ProductResponse]:
        """Newest active, in-stock products."""

        async def work(session: AsyncSession):
            products = await ProductRepository(session).get_featured(limit)
            return [ProductResponse.model_validate(p) for p in products]

        return await self.namespace.get_or_load(
            CacheKeys.scoped(CacheKeys.PRODUCT, "featured", limit),
            lambda: self.run("product.get_featured", work),
            List[ProductResponse],
            ttl=CacheKeys.TTL_FEATURED,
        )

    async def get_by_category(
        self, category_id: int, page: int = 1, limit: int = 10
    ) -> PaginatedResponse[ProductResponse]:
        await self.categories.find_one(category_id)
        return await self.find_all(
            page, limit, ProductFilters(category_id=category_id, is_active=True)
        )

    async def get_by_subcategory(
        self, subcategory_id: int, page: int = 1, limit: int = 10
    ) -> PaginatedResponse[ProductResponse]:
        await self.subcategories.find_one(subcategory_id)
        return await self.find_all(
            page, limit, ProductFilters(subcategory_id=subcategory_id, is_active=True)
        )

    async def get_many(self, product_ids: Sequence[int]) -> Dict[int, ProductResponse]:
        """
        Current snapshots for `product_ids`, read from the database.

        Used for cart pricing and stock checks; missing products are absent
        from the result.
        """
        if not product_ids:
            return {}

        async def work(session: AsyncSession):
            products = await ProductRepository(session).get_many(list(set(product_ids)))
            return {p.id: ProductResponse.model_validate(p) for p in products}

        return await self.run("product.get_many", work)

    async def _validate_taxonomy(self, gender_id: int, category_id: int, subcategory_id: int):
        """Referenced taxonomy must exist and be consistent."""
        gender = await self.genders.find_one(gender_id)
        category = await self.categories.find_one(category_id)
        subcategory = await self.subcategories.find_one(subcategory_id)
        if category.gender_id != gender_id:
            raise ValidationFailedError(
                "Category does not belong to the given gender",
                details={"gender_id": gender_id, "category_id": category_id},
            )
        if subcategory.category_id != category_id:
            raise ValidationFailedError(
                "Subcategory does not belong to the given category",
                details={"category_id": category_id, "subcategory_id": subcategory_id},
            )
        return gender, category

    async def create(self, data: ProductCreate) -> ProductResponse:
        """
        Create a product.

        The SKU is upper-cased, or generated from the gender and category
        names when omitted.

        Raises:
            NotFoundError: If a referenced gender/category/subcategory is missing.
            ConflictError: If the SKU is taken.
        """
        gender, category = await self._validate_taxonomy(
            data.gender_id, data.category_id, data.subcategory_id
        )
        values = data.model_dump()
        if values.get("family_sku"):
            values["family_sku"] = values["family_sku"].upper()

        async def work(session: AsyncSession):
            repo = ProductRepository(session)
            if values.get("sku"):
                values["sku"] = values["sku"].upper()
                if await repo.get_by_sku(values["sku"]):
                    raise ConflictError(f"Product with SKU {values['sku']} already exists")
            else:
                for _ in range(SKU_ATTEMPTS):
                    candidate = generate_sku(gender.name, category.name)
                    if not await repo.get_by_sku(candidate):
                        values["sku"] = candidate
                        break
                else:
                    raise ConflictError("Could not generate a unique SKU")
            product = await repo.create(**values)
            return ProductResponse.model_validate(product)

        created = await self.run("product.create", work)
        await self.namespace.invalidate()
        logger.info("Product created", id=created.id, sku=created.sku)
        return created

    async def update(self, product_id: int, data: ProductUpdate) -> ProductResponse:
        """
        Update product.

        Raises:
            NotFoundError: If the product or a referenced taxonomy record is missing.
            ConflictError: If the new SKU is taken.
            ValidationFailedError: If the resulting discount price is not below the price.
        """
        current = await self.find_one(product_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }

        taxonomy = {
            field: changes.get(field) or getattr(current, field)
            for field in ("gender_id", "category_id", "subcategory_id")
        }
        if any(field in changes for field in taxonomy):
            await self._validate_taxonomy(**taxonomy)

        price = changes.get("price") or current.price
        discount_price = changes["discount_price"] if "discount_price" in changes else current.discount_price
        if discount_price is not None and discount_price >= price:
            raise ValidationFailedError(
                "Discount price must be less than the regular price",
                details={"price": price, "discount_price": discount_price},
            )
        if changes.get("family_sku"):
            changes["family_sku"] = changes["family_sku"].upper()

        async def work(session: AsyncSession):
            repo = ProductRepository(session)
            if changes.get("sku"):
                changes["sku"] = changes["sku"].upper()
                existing = await repo.get_by_sku(changes["sku"])
                if existing and existing.id != product_id:
                    raise ConflictError(f"Product with SKU {changes['sku']} already exists")
            product = await repo.update(product_id, **changes)
            if not product:
                raise NotFoundError(f"Product with ID {product_id} not found")
            return ProductResponse.model_validate(product)

        updated = await self.run("product.update", work)
        await self.namespace.invalidate()
        logger.info("Product updated", id=product_id, fields=sorted(changes))
        return updated

    async def remove(self, product_id: int) -> ProductResponse:
        async def work(session: AsyncSession):
            repo = ProductRepository(session)
            product = await repo.get_by_id(product_id)
            if not product:
                raise NotFoundError(f"Product with ID {product_id} not found")
            snapshot = ProductResponse.model_validate(product)
            await repo.delete(product_id)
            return snapshot

        removed = await self.run("product.remove", work)
        await self.namespace.invalidate()
        logger.info("Product deleted", id=product_id, sku=removed.sku)
        return removed

    async def update_stock(self, product_id: int, delta: int) -> ProductResponse:
        """Apply a stock delta; stock never goes below zero."""

        async def work(session: AsyncSession):
            product = await ProductRepository(session).adjust_stock(product_id, delta)
            if not product:
                raise NotFoundError(f"Product with ID {product_id} not found")
            return ProductResponse.model_validate(product)

        updated = await self.run("product.update_stock", work)
        await self.namespace.invalidate()
        logger.info("Product stock updated", id=product_id, delta=delta, stock=updated.stock)
        return updated
