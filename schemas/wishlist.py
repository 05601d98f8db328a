"""Wishlist schemas shared by guest and user wishlists."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schemas.product import ProductResponse
from utils.timeutils import utc_now


class WishlistLine(BaseModel):
    product_id: int = Field(..., gt=0)
    added_at: datetime = Field(default_factory=utc_now)


class WishlistItemAdd(BaseModel):
    product_id: int = Field(..., gt=0, description="Product ID")


class MoveToCartRequest(BaseModel):
    quantity: int = Field(1, ge=1)


class WishlistItemResponse(BaseModel):
    product_id: int
    added_at: Optional[datetime] = None
    product: Optional[ProductResponse] = Field(
        None, description="Current product snapshot; null when the product no longer exists"
    )


class WishlistResponse(BaseModel):
    items: List[WishlistItemResponse] = Field(default_factory=list)
    count: int = 0


class WishlistCountResponse(BaseModel):
    count: int = Field(..., ge=0)


class WishlistContainsResponse(BaseModel):
    product_id: int
    in_wishlist: bool
