"""Guest session service."""

import uuid

from schemas.cart import CartResponse
from schemas.user import GuestSessionResponse
from services.cart_service import CartService
from services.cart_storage import GUEST_ID_PREFIX, is_guest_id
from services.exceptions import ValidationFailedError
from services.wishlist_service import WishlistService
from utils.cache_keys import CacheKeys
from utils.logger import logger


class GuestService:
    """
    Anonymous shopping sessions.

    A guest id is `guest_<uuid4>`; it never collides with a user id
    (integers). The guest's cart and wishlist are the generic services
    running over the guest key-value storage.
    """

    def __init__(self, cart: CartService, wishlist: WishlistService, ttl: int = CacheKeys.TTL_GUEST):
        self.cart = cart
        self.wishlist = wishlist
        self.ttl = ttl

    @staticmethod
    def generate_id() -> str:
        return f"{GUEST_ID_PREFIX}{uuid.uuid4()}"

    @staticmethod
    def validate_guest_id(guest_id: str) -> str:
        """
        Raises:
            ValidationFailedError: If `guest_id` is not a guest id.
        """
        if not is_guest_id(guest_id):
            raise ValidationFailedError("Invalid guest id", details={"guest_id": guest_id})
        return guest_id

    def create_session(self) -> GuestSessionResponse:
        """Nothing is stored until the first mutation."""
        guest_id = self.generate_id()
        logger.info("Guest session created", guest_id=guest_id)
        return GuestSessionResponse(guest_id=guest_id, expires_in=self.ttl)

    async def move_to_cart(self, guest_id: str, product_id: int, quantity: int = 1) -> CartResponse:
        return await self.wishlist.move_to_cart(self.validate_guest_id(guest_id), product_id, quantity)
