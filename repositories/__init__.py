"""Data access layer repositories."""

from repositories.cart_repository import CartItemRepository, WishlistItemRepository
from repositories.offer_repository import OfferRepository
from repositories.product_repository import ProductRepository
from repositories.taxonomy_repository import (
    CategoryRepository,
    GenderRepository,
    SubcategoryRepository,
)
from repositories.user_repository import UserRepository

__all__ = [
    "CartItemRepository",
    "WishlistItemRepository",
    "OfferRepository",
    "ProductRepository",
    "GenderRepository",
    "CategoryRepository",
    "SubcategoryRepository",
    "UserRepository",
]
