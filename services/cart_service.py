"""Cart business logic, shared by guest and user carts."""

from typing import List, Optional

from schemas.cart import CartLine, CartResponse
from schemas.product import ProductResponse
from services.cart_pricing import price_cart
from services.cart_storage import LineStorage, Owner
from services.exceptions import InsufficientStockError, NotFoundError, ValidationFailedError
from services.offer_service import OfferService
from services.product_service import ProductService
from utils.logger import logger
from utils.timeutils import utc_now


class CartService:
    """
    Cart operations over a storage strategy.

    The same code serves guests (key-value record with TTL) and registered
    users (SQL rows); only the `storage` differs. Every mutation checks the
    product against the database and returns the freshly priced cart.
    """

    def __init__(self, storage: LineStorage, products: ProductService, offers: OfferService):
        self.storage = storage
        self.products = products
        self.offers = offers

    async def _available_product(self, product_id: int) -> ProductResponse:
        product = (await self.products.get_many([product_id])).get(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")
        if not product.is_active:
            raise ValidationFailedError(
                "Product is not available", details={"product_id": product_id}
            )
        return product

    @staticmethod
    def _find(lines: List[CartLine], product_id: int) -> Optional[CartLine]:
        return next((line for line in lines if line.product_id == product_id), None)

    async def get_cart(self, owner: Owner) -> CartResponse:
        """Priced cart; lines for missing or inactive products are skipped."""
        lines = await self.storage.load(owner)
        if not lines:
            return CartResponse()
        products = await self.products.get_many([line.product_id for line in lines])
        offers = await self.offers.get_active_offers()
        return price_cart(lines, products, offers, utc_now())

    async def get_count(self, owner: Owner) -> int:
        """Total quantity across lines."""
        return sum(line.quantity for line in await self.storage.load(owner))

    async def add_item(self, owner: Owner, product_id: int, quantity: int = 1) -> CartResponse:
        """
        Add `quantity` units, merging with an existing line.

        Raises:
            NotFoundError: If the product does not exist.
            ValidationFailedError: If the product is inactive.
            InsufficientStockError: If stock < quantity already in cart + quantity.
        """
        await self.add_line(owner, product_id, quantity)
        return await self.get_cart(owner)

    async def add_line(self, owner: Owner, product_id: int, quantity: int = 1) -> None:
        """Same checks and write as `add_item`, without pricing the cart afterwards."""
        if quantity < 1:
            raise ValidationFailedError("Quantity must be at least 1")
        product = await self._available_product(product_id)
        lines = await self.storage.load(owner)
        line = self._find(lines, product_id)
        in_cart = line.quantity if line else 0

        if product.stock < in_cart + quantity:
            raise InsufficientStockError(product_id, product.stock, quantity, in_cart)

        if line:
            line.quantity += quantity
        else:
            lines.append(CartLine(product_id=product_id, quantity=quantity))
        await self.storage.save(owner, lines)

        logger.info("Cart item added", owner=str(owner), product_id=product_id, quantity=quantity)

    async def update_item(self, owner: Owner, product_id: int, quantity: int) -> CartResponse:
        """
        Set the quantity of an existing line.

        Raises:
            NotFoundError: If the line or the product does not exist.
            InsufficientStockError: If stock < quantity.
        """
        if quantity < 1:
            raise ValidationFailedError("Quantity must be at least 1")
        lines = await self.storage.load(owner)
        line = self._find(lines, product_id)
        if line is None:
            raise NotFoundError("Item not found in cart", details={"product_id": product_id})

        product = await self._available_product(product_id)
        if product.stock < quantity:
            raise InsufficientStockError(product_id, product.stock, quantity)

        line.quantity = quantity
        await self.storage.save(owner, lines)

        logger.info("Cart item updated", owner=str(owner), product_id=product_id, quantity=quantity)
        return await self.get_cart(owner)

    async def remove_item(self, owner: Owner, product_id: int) -> CartResponse:
        lines = await self.storage.load(owner)
        remaining = [line for line in lines if line.product_id != product_id]
        if len(remaining) == len(lines):
            raise NotFoundError("Item not found in cart", details={"product_id": product_id})

        await self.storage.save(owner, remaining)
        logger.info("Cart item removed", owner=str(owner), product_id=product_id)
        return await self.get_cart(owner)

    async def clear(self, owner: Owner) -> None:
        await self.storage.clear(owner)
        logger.info("Cart cleared", owner=str(owner))
