"""Offer business logic service."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from repositories.offer_repository import OfferRepository
from schemas.common import PaginatedResponse, Pagination
from schemas.offer import OfferCreate, OfferResponse, OfferUpdate
from schemas.product import ProductResponse
from services.base import BaseService
from services.exceptions import NotFoundError, ValidationFailedError
from services.offer_engine import OfferSelection, select_best_offer
from utils.cache import CacheManager, CacheNamespace
from utils.cache_keys import CacheKeys
from utils.logger import logger
from utils.timeutils import utc_now


def _offer_values(data: OfferCreate) -> dict:
    values = data.model_dump(mode="json")
    values["start_date"] = data.start_date
    values["end_date"] = data.end_date
    return values


class OfferService(BaseService):
    """Offer CRUD plus the cached active-offer list used by cart pricing."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        cache: CacheManager,
        strategy: Optional[str] = None,
    ):
        super().__init__(session_factory)
        self.namespace = CacheNamespace(cache, CacheKeys.OFFER, CacheKeys.TTL_OFFER, strategy)

    async def find_all(
        self, page: int = 1, limit: int = 10, is_active: Optional[bool] = None
    ) -> PaginatedResponse[OfferResponse]:
        key = CacheKeys.query(CacheKeys.OFFER, "all", page, limit, {"is_active": is_active})

        async def work(session: AsyncSession):
            offers, total = await OfferRepository(session).find_page(
                limit=limit, offset=(page - 1) * limit, is_active=is_active
            )
            return PaginatedResponse[OfferResponse](
                data=[OfferResponse.from_model(o) for o in offers],
                pagination=Pagination.build(total, page, limit),
            )

        return await self.namespace.get_or_load(
            key, lambda: self.run("offer.find_all", work), PaginatedResponse[OfferResponse]
        )

    async def find_one(self, offer_id: int) -> OfferResponse:
        async def work(session: AsyncSession):
            offer = await OfferRepository(session).get_by_id(offer_id)
            if not offer:
                raise NotFoundError(f"Offer with ID {offer_id} not found")
            return OfferResponse.from_model(offer)

        return await self.namespace.get_or_load(
            CacheKeys.by_id(CacheKeys.OFFER, offer_id),
            lambda: self.run("offer.find_one", work),
            OfferResponse,
        )

    async def get_active_offers(self) -> List[OfferResponse]:
        """Offers flagged active; the date window is checked against "now" by the caller."""

        async def work(session: AsyncSession):
            offers = await OfferRepository(session).get_active()
            return [OfferResponse.from_model(o) for o in offers]

        return await self.namespace.get_or_load(
            CacheKeys.scoped(CacheKeys.OFFER, "active"),
            lambda: self.run("offer.get_active_offers", work),
            List[OfferResponse],
        )

    async def get_display_offers(self, placement: str, now: Optional[datetime] = None) -> List[OfferResponse]:
        """Currently running offers flagged for the homepage or the navbar."""
        flag = {"homepage": "display_on_homepage", "navbar": "display_in_navbar"}.get(placement)
        if flag is None:
            raise ValidationFailedError(f"Unknown placement {placement}")
        now = now or utc_now()
        return [
            offer
            for offer in await self.get_active_offers()
            if getattr(offer, flag) and offer.start_date <= now <= offer.end_date
        ]

    async def get_best_offer_for_product(
        self, product: ProductResponse, quantity: int = 1, now: Optional[datetime] = None
    ) -> OfferSelection:
        offers = await self.get_active_offers()
        return select_best_offer(product, offers, quantity, now or utc_now())

    async def create(self, data: OfferCreate) -> OfferResponse:
        async def work(session: AsyncSession):
            offer = await OfferRepository(session).create(**_offer_values(data))
            return OfferResponse.from_model(offer)

        created = await self.run("offer.create", work)
        await self.namespace.invalidate()
        logger.info("Offer created", id=created.id, offer_type=created.offer_type.value)
        return created

    async def update(self, offer_id: int, data: OfferUpdate) -> OfferResponse:
        """
        Update an offer. The merged result is validated as a whole, so
        changing `offer_type` requires matching `rules`.

        Raises:
            NotFoundError: If the offer does not exist.
            ValidationFailedError: If the merged offer is invalid.
        """
        current = await self.find_one(offer_id)
        merged = current.model_dump(
            exclude={"id", "usage_count", "created_at", "updated_at"}, mode="json"
        )
        merged.update(data.model_dump(exclude_unset=True, exclude_none=True, mode="json"))
        try:
            validated = OfferCreate.model_validate(merged)
        except ValueError as exc:
            raise ValidationFailedError("Invalid offer", details=str(exc)) from exc

        async def work(session: AsyncSession):
            offer = await OfferRepository(session).update(offer_id, **_offer_values(validated))
            if not offer:
                raise NotFoundError(f"Offer with ID {offer_id} not found")
            return OfferResponse.from_model(offer)

        updated = await self.run("offer.update", work)
        await self.namespace.invalidate()
        logger.info("Offer updated", id=offer_id)
        return updated

    async def remove(self, offer_id: int) -> OfferResponse:
        async def work(session: AsyncSession):
            repo = OfferRepository(session)
            offer = await repo.get_by_id(offer_id)
            if not offer:
                raise NotFoundError(f"Offer with ID {offer_id} not found")
            snapshot = OfferResponse.from_model(offer)
            await repo.delete(offer_id)
            return snapshot

        removed = await self.run("offer.remove", work)
        await self.namespace.invalidate()
        logger.info("Offer deleted", id=offer_id)
        return removed
