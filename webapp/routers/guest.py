"""Guest session endpoints. Every call carries the `guest_id` query parameter."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from middlewares.rate_limit import limiter
from middlewares.rate_limit_config import RateLimitConfig
from schemas.cart import CartCountResponse, CartItemAdd, CartItemUpdate, CartResponse
from schemas.common import MessageResponse
from schemas.user import GuestSessionResponse
from schemas.wishlist import (
    MoveToCartRequest,
    WishlistContainsResponse,
    WishlistCountResponse,
    WishlistItemAdd,
    WishlistResponse,
)
from webapp.dependencies import Services, get_services

router = APIRouter(prefix="/api/guest", tags=["guest"])

GuestId = Annotated[
    str,
    Query(min_length=7, max_length=64, description="Guest session id from POST /api/guest/session"),
]


@router.post("/session", response_model=GuestSessionResponse)
@limiter.limit(RateLimitConfig.GUEST_SESSION)
async def create_session(request: Request, response: Response, services: Services = Depends(get_services)):
    """Issue a new guest id. Nothing is stored until the first cart or wishlist write."""
    return services.guest.create_session()


# === Cart ===

@router.get("/cart", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_GET)
async def get_guest_cart(
    request: Request, response: Response, guest_id: GuestId, services: Services = Depends(get_services)
):
    return await services.guest_cart.get_cart(services.guest.validate_guest_id(guest_id))


@router.get("/cart/count", response_model=CartCountResponse)
@limiter.limit(RateLimitConfig.CART_GET)
async def get_guest_cart_count(
    request: Request, response: Response, guest_id: GuestId, services: Services = Depends(get_services)
):
    count = await services.guest_cart.get_count(services.guest.validate_guest_id(guest_id))
    return CartCountResponse(count=count)


@router.post("/cart/add", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def add_to_guest_cart(
    request: Request,
    response: Response,
    data: CartItemAdd,
    guest_id: GuestId,
    services: Services = Depends(get_services),
):
    return await services.guest_cart.add_item(
        services.guest.validate_guest_id(guest_id), data.product_id, data.quantity
    )


@router.patch("/cart/item/{product_id}", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def update_guest_cart_item(
    request: Request,
    response: Response,
    product_id: int,
    data: CartItemUpdate,
    guest_id: GuestId,
    services: Services = Depends(get_services),
):
    return await services.guest_cart.update_item(
        services.guest.validate_guest_id(guest_id), product_id, data.quantity
    )


@router.delete("/cart/item/{product_id}", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def remove_guest_cart_item(
    request: Request,
    response: Response,
    product_id: int,
    guest_id: GuestId,
    services: Services = Depends(get_services),
):
    return await services.guest_cart.remove_item(services.guest.validate_guest_id(guest_id), product_id)


@router.delete("/cart", response_model=MessageResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def clear_guest_cart(
    request: Request, response: Response, guest_id: GuestId, services: Services = Depends(get_services)
):
    await services.guest_cart.clear(services.guest.validate_guest_id(guest_id))
    return MessageResponse(message="Cart cleared")


# === Wishlist ===

@router.get("/wishlist", response_model=WishlistResponse)
@limiter.limit(RateLimitConfig.WISHLIST_GET)
async def get_guest_wishlist(
    request: Request, response: Response, guest_id: GuestId, services: Services = Depends(get_services)
):
    return await services.guest_wishlist.get_wishlist(services.guest.validate_guest_id(guest_id))


@router.get("/wishlist/count", response_model=WishlistCountResponse)
@limiter.limit(RateLimitConfig.WISHLIST_GET)
async def get_guest_wishlist_count(
    request: Request, response: Response, guest_id: GuestId, services: Services = Depends(get_services)
):
    count = await services.guest_wishlist.get_count(services.guest.validate_guest_id(guest_id))
    return WishlistCountResponse(count=count)


@router.get("/wishlist/check/{product_id}", response_model=WishlistContainsResponse)
@limiter.limit(RateLimitConfig.WISHLIST_GET)
async def check_guest_wishlist(
    request: Request,
    response: Response,
    product_id: int,
    guest_id: GuestId,
    services: Services = Depends(get_services),
):
    in_wishlist = await services.guest_wishlist.contains(services.guest.validate_guest_id(guest_id), product_id)
    return WishlistContainsResponse(product_id=product_id, in_wishlist=in_wishlist)


@router.post("/wishlist/add", response_model=WishlistResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def add_to_guest_wishlist(
    request: Request,
    response: Response,
    data: WishlistItemAdd,
    guest_id: GuestId,
    services: Services = Depends(get_services),
):
    return await services.guest_wishlist.add_item(services.guest.validate_guest_id(guest_id), data.product_id)


@router.post("/wishlist/item/{product_id}/move-to-cart", response_model=CartResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def move_guest_wishlist_item_to_cart(
    request: Request,
    response: Response,
    product_id: int,
    data: MoveToCartRequest,
    guest_id: GuestId,
    services: Services = Depends(get_services),
):
    return await services.guest.move_to_cart(guest_id, product_id, data.quantity)


@router.delete("/wishlist/item/{product_id}", response_model=WishlistResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def remove_guest_wishlist_item(
    request: Request,
    response: Response,
    product_id: int,
    guest_id: GuestId,
    services: Services = Depends(get_services),
):
    return await services.guest_wishlist.remove_item(services.guest.validate_guest_id(guest_id), product_id)


@router.delete("/wishlist", response_model=MessageResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def clear_guest_wishlist(
    request: Request, response: Response, guest_id: GuestId, services: Services = Depends(get_services)
):
    await services.guest_wishlist.clear(services.guest.validate_guest_id(guest_id))
    return MessageResponse(message="Wishlist cleared")
