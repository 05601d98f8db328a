"""Cart and wishlist endpoints for registered users.

The owner is the `user_id` query parameter; issuing and checking tokens is
handled outside this service.
"""

from fastapi import APIRouter, Depends, Query, Request, Response

from middlewares.rate_limit import limiter
from middlewares.rate_limit_config import RateLimitConfig
from schemas.cart import CartCountResponse, CartItemAdd, CartItemUpdate, CartResponse
from schemas.common import MessageResponse
from schemas.wishlist import (
    MoveToCartRequest,
    WishlistContainsResponse,
    WishlistCountResponse,
    WishlistItemAdd,
    WishlistResponse,
)
from webapp.dependencies import Services, get_services

router = APIRouter(prefix="/api", tags=["cart"])


# === Cart ===

@router.get("/cart", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_GET)
async def get_cart(
    request: Request,
    response: Response,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_cart.get_cart(user_id)


@router.get("/cart/count", response_model=CartCountResponse)
@limiter.limit(RateLimitConfig.CART_GET)
async def get_cart_count(
    request: Request,
    response: Response,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return CartCountResponse(count=await services.user_cart.get_count(user_id))


@router.post("/cart/add", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def add_to_cart(
    request: Request,
    response: Response,
    data: CartItemAdd,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_cart.add_item(user_id, data.product_id, data.quantity)


@router.patch("/cart/item/{product_id}", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def update_cart_item(
    request: Request,
    response: Response,
    product_id: int,
    data: CartItemUpdate,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_cart.update_item(user_id, product_id, data.quantity)


@router.delete("/cart/item/{product_id}", response_model=CartResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def remove_cart_item(
    request: Request,
    response: Response,
    product_id: int,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_cart.remove_item(user_id, product_id)


@router.delete("/cart", response_model=MessageResponse)
@limiter.limit(RateLimitConfig.CART_WRITE)
async def clear_cart(
    request: Request,
    response: Response,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    await services.user_cart.clear(user_id)
    return MessageResponse(message="Cart cleared")


# === Wishlist ===

@router.get("/wishlist", response_model=WishlistResponse)
@limiter.limit(RateLimitConfig.WISHLIST_GET)
async def get_wishlist(
    request: Request,
    response: Response,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_wishlist.get_wishlist(user_id)


@router.get("/wishlist/count", response_model=WishlistCountResponse)
@limiter.limit(RateLimitConfig.WISHLIST_GET)
async def get_wishlist_count(
    request: Request,
    response: Response,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return WishlistCountResponse(count=await services.user_wishlist.get_count(user_id))


@router.get("/wishlist/check/{product_id}", response_model=WishlistContainsResponse)
@limiter.limit(RateLimitConfig.WISHLIST_GET)
async def check_wishlist(
    request: Request,
    response: Response,
    product_id: int,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    in_wishlist = await services.user_wishlist.contains(user_id, product_id)
    return WishlistContainsResponse(product_id=product_id, in_wishlist=in_wishlist)


@router.post("/wishlist/add", response_model=WishlistResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def add_to_wishlist(
    request: Request,
    response: Response,
    data: WishlistItemAdd,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_wishlist.add_item(user_id, data.product_id)


@router.post("/wishlist/item/{product_id}/move-to-cart", response_model=CartResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def move_wishlist_item_to_cart(
    request: Request,
    response: Response,
    product_id: int,
    data: MoveToCartRequest,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_wishlist.move_to_cart(user_id, product_id, data.quantity)


@router.delete("/wishlist/item/{product_id}", response_model=WishlistResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def remove_wishlist_item(
    request: Request,
    response: Response,
    product_id: int,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    return await services.user_wishlist.remove_item(user_id, product_id)


@router.delete("/wishlist", response_model=MessageResponse)
@limiter.limit(RateLimitConfig.WISHLIST_WRITE)
async def clear_wishlist(
    request: Request,
    response: Response,
    user_id: int = Query(..., gt=0),
    services: Services = Depends(get_services),
):
    await services.user_wishlist.clear(user_id)
    return MessageResponse(message="Wishlist cleared")
