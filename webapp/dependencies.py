"""Service graph wiring for the HTTP layer."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from services.cart_service import CartService
from services.cart_storage import (
    GuestCartStorage,
    GuestWishlistStorage,
    UserCartStorage,
    UserWishlistStorage,
)
from services.catalog_service import CategoryService, GenderService, SubcategoryService
from services.guest_service import GuestService
from services.merge_service import MergeService
from services.offer_service import OfferService
from services.product_service import ProductService
from services.user_service import UserService
from services.wishlist_service import WishlistService
from utils.cache import CacheManager


@dataclass
class Services:
    cache: CacheManager
    genders: GenderService
    categories: CategoryService
    subcategories: SubcategoryService
    products: ProductService
    offers: OfferService
    guest: GuestService
    guest_cart: CartService
    guest_wishlist: WishlistService
    user_cart: CartService
    user_wishlist: WishlistService
    merge: MergeService
    users: UserService


def build_services(
    session_factory: async_sessionmaker,
    cache: CacheManager,
    guest_store,
    strategy: Optional[str] = None,
) -> Services:
    """
    Build every service once.

    `guest_store` holds guest carts and wishlists. It is usually the same
    Redis connection the cache uses, but it is authoritative for guest data
    and is never bypassed when the cache is disabled.
    """
    genders = GenderService(session_factory, cache, strategy=strategy)
    categories = CategoryService(session_factory, cache, parent=genders, strategy=strategy)
    subcategories = SubcategoryService(session_factory, cache, parent=categories, strategy=strategy)
    products = ProductService(session_factory, cache, genders, categories, subcategories, strategy=strategy)
    offers = OfferService(session_factory, cache, strategy=strategy)

    guest_cart = CartService(GuestCartStorage(guest_store), products, offers)
    guest_wishlist = WishlistService(GuestWishlistStorage(guest_store), products, guest_cart)
    user_cart = CartService(UserCartStorage(session_factory), products, offers)
    user_wishlist = WishlistService(UserWishlistStorage(session_factory), products, user_cart)

    merge = MergeService(guest_cart, guest_wishlist, user_cart, user_wishlist)

    return Services(
        cache=cache,
        genders=genders,
        categories=categories,
        subcategories=subcategories,
        products=products,
        offers=offers,
        guest=GuestService(guest_cart, guest_wishlist),
        guest_cart=guest_cart,
        guest_wishlist=guest_wishlist,
        user_cart=user_cart,
        user_wishlist=user_wishlist,
        merge=merge,
        users=UserService(session_factory, merge),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
