"""Wishlist business logic, shared by guest and user wishlists."""

from schemas.cart import CartResponse
from schemas.wishlist import WishlistItemResponse, WishlistLine, WishlistResponse
from services.cart_service import CartService
from services.cart_storage import LineStorage, Owner
from services.exceptions import ConflictError, NotFoundError
from services.product_service import ProductService
from utils.logger import logger


class WishlistService:
    """Wishlist operations over a storage strategy. A product appears at most once."""

    def __init__(self, storage: LineStorage, products: ProductService, cart: CartService):
        self.storage = storage
        self.products = products
        self.cart = cart

    async def get_wishlist(self, owner: Owner) -> WishlistResponse:
        lines = await self.storage.load(owner)
        products = await self.products.get_many([line.product_id for line in lines])
        items = [
            WishlistItemResponse(
                product_id=line.product_id,
                added_at=line.added_at,
                product=products.get(line.product_id),
            )
            for line in lines
        ]
        return WishlistResponse(items=items, count=len(items))

    async def get_count(self, owner: Owner) -> int:
        return len(await self.storage.load(owner))

    async def contains(self, owner: Owner, product_id: int) -> bool:
        return any(line.product_id == product_id for line in await self.storage.load(owner))

    async def add_item(self, owner: Owner, product_id: int) -> WishlistResponse:
        """
        Raises:
            NotFoundError: If the product does not exist.
            ConflictError: If the product is already in the wishlist.
        """
        await self.add_line(owner, product_id)
        return await self.get_wishlist(owner)

    async def add_line(self, owner: Owner, product_id: int) -> None:
        """`add_item` without reading the wishlist back."""
        if product_id not in await self.products.get_many([product_id]):
            raise NotFoundError(f"Product with ID {product_id} not found")

        lines = await self.storage.load(owner)
        if any(line.product_id == product_id for line in lines):
            raise ConflictError("Product already in wishlist", details={"product_id": product_id})

        lines.append(WishlistLine(product_id=product_id))
        await self.storage.save(owner, lines)
        logger.info("Wishlist item added", owner=str(owner), product_id=product_id)

    async def remove_item(self, owner: Owner, product_id: int) -> WishlistResponse:
        lines = await self.storage.load(owner)
        remaining = [line for line in lines if line.product_id != product_id]
        if len(remaining) == len(lines):
            raise NotFoundError("Item not found in wishlist", details={"product_id": product_id})

        await self.storage.save(owner, remaining)
        logger.info("Wishlist item removed", owner=str(owner), product_id=product_id)
        return await self.get_wishlist(owner)

    async def clear(self, owner: Owner) -> None:
        await self.storage.clear(owner)
        logger.info("Wishlist cleared", owner=str(owner))

    async def move_to_cart(self, owner: Owner, product_id: int, quantity: int = 1) -> CartResponse:
        """
        Add the product to the owner's cart, then drop it from the wishlist.

        The wishlist is left untouched when the cart add fails.
        """
        if not await self.contains(owner, product_id):
            raise NotFoundError("Item not found in wishlist", details={"product_id": product_id})

        cart = await self.cart.add_item(owner, product_id, quantity)
        await self.remove_item(owner, product_id)
        return cart
