"""Product repository for data access."""

from typing import Any, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Product
from repositories.base import BaseRepository
from schemas.product import ProductFilters


class ProductRepository(BaseRepository[Product]):
    """Repository for Product entity."""

    def __init__(self, session: AsyncSession):
        super().__init__(Product, session)

    @staticmethod
    def build_conditions(filters: ProductFilters) -> List[Any]:
        """Translate list filters into WHERE clauses."""
        effective_price = func.coalesce(Product.discount_price, Product.price)
        conditions = []

        if filters.gender_id is not None:
            conditions.append(Product.gender_id == filters.gender_id)
        if filters.category_id is not None:
            conditions.append(Product.category_id == filters.category_id)
        if filters.subcategory_id is not None:
            conditions.append(Product.subcategory_id == filters.subcategory_id)
        if filters.min_price is not None:
            conditions.append(effective_price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(effective_price <= filters.max_price)
        if filters.under_price_amount is not None:
            conditions.append(effective_price <= filters.under_price_amount)
        if filters.in_stock is True:
            conditions.append(Product.stock > 0)
        elif filters.in_stock is False:
            conditions.append(Product.stock == 0)
        if filters.is_active is not None:
            conditions.append(Product.is_active == filters.is_active)
        if filters.family_sku:
            conditions.append(Product.family_sku == filters.family_sku.upper())
        if filters.product_ids is not None:
            conditions.append(Product.id.in_(filters.product_ids))
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(
                or_(
                    Product.name.ilike(pattern),
                    Product.sku.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )
        return conditions

    async def find_page(
        self, filters: ProductFilters, limit: int, offset: int
    ) -> Tuple[List[Product], int]:
        """Filtered page, newest first, plus the total match count."""
        conditions = self.build_conditions(filters)
        products = await self.list_where(
            *conditions,
            limit=limit,
            offset=offset,
            order_by=(Product.created_at.desc(), Product.id.desc()),
        )
        total = await self.count_where(*conditions)
        return products, total

    async def get_by_sku(self, sku: str) -> Optional[Product]:
        """Get product by SKU (case-insensitive, SKUs are stored upper-cased)."""
        return await self.find_one_where(Product.sku == sku.upper())

    async def get_by_family_sku(self, family_sku: str, only_active: bool = True) -> List[Product]:
        conditions = [Product.family_sku == family_sku.upper()]
        if only_active:
            conditions.append(Product.is_active == True)  # noqa: E712
        return await self.list_where(*conditions, limit=None)

    async def get_featured(self, limit: int) -> List[Product]:
        """Active, in-stock products, newest first."""
        return await self.list_where(
            Product.is_active == True,  # noqa: E712
            Product.stock > 0,
            limit=limit,
            order_by=(Product.created_at.desc(), Product.id.desc()),
        )

    async def count_by_category(self, category_id: int) -> int:
        return await self.count_where(Product.category_id == category_id)

    async def count_by_subcategory(self, subcategory_id: int) -> int:
        return await self.count_where(Product.subcategory_id == subcategory_id)

    async def adjust_stock(self, product_id: int, delta: int) -> Optional[Product]:
        """Apply a stock delta under a row lock; the result is never below zero."""
        stmt = select(Product).where(Product.id == product_id).with_for_update()
        result = await self.session.execute(stmt)
        product = result.scalar_one_or_none()

        if not product:
            return None

        product.stock = max(0, product.stock + delta)
        await self.session.flush()
        await self.session.refresh(product)
        return product
