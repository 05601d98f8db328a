"""Offer repository for data access."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Offer
from repositories.base import BaseRepository


class OfferRepository(BaseRepository[Offer]):
    """Repository for Offer entity."""

    def __init__(self, session: AsyncSession):
        super().__init__(Offer, session)

    async def get_active(self) -> List[Offer]:
        """Offers flagged active. Date window and usage are checked at pricing time."""
        return await self.list_where(
            Offer.is_active == True,  # noqa: E712
            limit=None,
            order_by=(Offer.priority.desc(), Offer.id),
        )

    async def find_page(
        self, limit: int, offset: int, is_active: Optional[bool] = None
    ) -> tuple[List[Offer], int]:
        conditions = [] if is_active is None else [Offer.is_active == is_active]
        offers = await self.list_where(
            *conditions,
            limit=limit,
            offset=offset,
            order_by=(Offer.priority.desc(), Offer.created_at.desc(), Offer.id),
        )
        return offers, await self.count_where(*conditions)
