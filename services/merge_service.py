"""Move a guest's cart and wishlist into a user account on login."""

from typing import Awaitable, Callable, Optional

from schemas.user import LoginMergeResult, MergeLineError, MergeResult
from services.cart_service import CartService
from services.exceptions import ConflictError, ServiceError
from services.wishlist_service import WishlistService
from utils.logger import logger


class MergeService:
    """
    Guest -> user merge.

    Every guest line goes through the user's normal add checks, so stock and
    availability rules apply. A line counts as failed only when its own write
    fails; lines are reported, not retried. The guest record is cleared once
    read, whatever the outcome of the lines.
    """

    def __init__(
        self,
        guest_cart: CartService,
        guest_wishlist: WishlistService,
        user_cart: CartService,
        user_wishlist: WishlistService,
    ):
        self.guest_cart = guest_cart
        self.guest_wishlist = guest_wishlist
        self.user_cart = user_cart
        self.user_wishlist = user_wishlist

    async def merge_cart_on_login(self, guest_id: str, user_id: int) -> MergeResult:
        lines = await self.guest_cart.storage.load(guest_id)
        result = MergeResult()
        try:
            for line in lines:
                try:
                    await self.user_cart.add_line(user_id, line.product_id, line.quantity)
                    result.merged += 1
                except ServiceError as exc:
                    result.failed += 1
                    result.errors.append(
                        MergeLineError(product_id=line.product_id, error=exc.error, message=exc.message)
                    )
        finally:
            await self.guest_cart.clear(guest_id)

        logger.info(
            "Guest cart merged",
            guest_id=guest_id,
            user_id=user_id,
            merged=result.merged,
            failed=result.failed,
        )
        return result

    async def merge_wishlist_on_login(self, guest_id: str, user_id: int) -> MergeResult:
        lines = await self.guest_wishlist.storage.load(guest_id)
        result = MergeResult()
        try:
            for line in lines:
                try:
                    await self.user_wishlist.add_line(user_id, line.product_id)
                    result.merged += 1
                except ConflictError:
                    # already in the user's wishlist
                    result.merged += 1
                except ServiceError as exc:
                    result.failed += 1
                    result.errors.append(
                        MergeLineError(product_id=line.product_id, error=exc.error, message=exc.message)
                    )
        finally:
            await self.guest_wishlist.clear(guest_id)

        logger.info(
            "Guest wishlist merged",
            guest_id=guest_id,
            user_id=user_id,
            merged=result.merged,
            failed=result.failed,
        )
        return result

    async def _guarded(
        self,
        record: str,
        merge: Callable[[str, int], Awaitable[MergeResult]],
        guest_id: str,
        user_id: int,
    ) -> Optional[MergeResult]:
        try:
            return await merge(guest_id, user_id)
        except Exception as exc:
            logger.exception(
                "Guest merge failed", record=record, guest_id=guest_id, user_id=user_id, error=str(exc)
            )
            return None

    async def merge_on_login(self, guest_id: str, user_id: int) -> Optional[LoginMergeResult]:
        """
        Merge both records, each on its own.

        Never raises. A record whose merge could not run is null in the
        result; None is returned when neither could run.
        """
        cart = await self._guarded("cart", self.merge_cart_on_login, guest_id, user_id)
        wishlist = await self._guarded("wishlist", self.merge_wishlist_on_login, guest_id, user_id)
        if cart is None and wishlist is None:
            return None
        return LoginMergeResult(cart=cart, wishlist=wishlist)
