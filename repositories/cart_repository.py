"""Cart and wishlist line repositories (registered users)."""

from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import CartItem, WishlistItem
from repositories.base import BaseRepository


class CartItemRepository(BaseRepository[CartItem]):
    """Repository for a user's cart lines."""

    def __init__(self, session: AsyncSession):
        super().__init__(CartItem, session)

    async def get_for_user(self, user_id: int) -> List[CartItem]:
        return await self.list_where(
            CartItem.user_id == user_id,
            limit=None,
            order_by=(CartItem.added_at, CartItem.id),
        )

    async def replace_for_user(self, user_id: int, lines: List[dict]) -> None:
        """Replace all lines of a user with `lines` (product_id, quantity, added_at)."""
        await self.clear_for_user(user_id)
        for line in lines:
            self.session.add(CartItem(user_id=user_id, **line))
        await self.session.flush()

    async def clear_for_user(self, user_id: int) -> int:
        result = await self.session.execute(delete(CartItem).where(CartItem.user_id == user_id))
        return result.rowcount or 0

    async def total_quantity(self, user_id: int) -> int:
        stmt = select(func.coalesce(func.sum(CartItem.quantity), 0)).where(CartItem.user_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)


class WishlistItemRepository(BaseRepository[WishlistItem]):
    """Repository for a user's wishlist lines."""

    def __init__(self, session: AsyncSession):
        super().__init__(WishlistItem, session)

    async def get_for_user(self, user_id: int) -> List[WishlistItem]:
        return await self.list_where(
            WishlistItem.user_id == user_id,
            limit=None,
            order_by=(WishlistItem.added_at, WishlistItem.id),
        )

    async def replace_for_user(self, user_id: int, lines: List[dict]) -> None:
        await self.clear_for_user(user_id)
        for line in lines:
            self.session.add(WishlistItem(user_id=user_id, **line))
        await self.session.flush()

    async def clear_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(WishlistItem).where(WishlistItem.user_id == user_id)
        )
        return result.rowcount or 0
