"""Cart schemas shared by guest and user carts."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schemas.offer import AppliedOffer
from utils.timeutils import utc_now


class CartLine(BaseModel):
    """What is stored per cart line. Prices are always derived at read time."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=1)
    added_at: datetime = Field(default_factory=utc_now)


class CartItemAdd(BaseModel):
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(1, ge=1, description="Quantity to add")

    class Config:
        json_schema_extra = {"example": {"product_id": 7, "quantity": 2}}


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1, description="New quantity")


class CartItemResponse(BaseModel):
    """Priced cart line."""

    product_id: int
    name: str
    sku: str
    image: Optional[str] = None
    price: float
    discount_price: Optional[float] = None
    effective_price: float
    quantity: int
    stock: int
    product_discount: float = 0.0
    applied_offer: Optional[AppliedOffer] = None
    offer_discount: float = 0.0
    item_total: float
    added_at: Optional[datetime] = None


class CartSummary(BaseModel):
    subtotal: float = 0.0
    total_product_discount: float = 0.0
    total_offer_discount: float = 0.0
    total_discount: float = 0.0
    total: float = 0.0
    total_items: int = Field(0, description="Sum of quantities")
    item_count: int = Field(0, description="Number of distinct lines")
    skipped_product_ids: List[int] = Field(
        default_factory=list, description="Lines left out because the product is gone or inactive"
    )


class CartResponse(BaseModel):
    items: List[CartItemResponse] = Field(default_factory=list)
    summary: CartSummary = Field(default_factory=CartSummary)

    class Config:
        json_schema_extra = {
            "example": {
                "items": [
                    {
                        "product_id": 7,
                        "name": "Oxford Shirt",
                        "sku": "MEN-SHI-4F9K2A",
                        "image": None,
                        "price": 1499.0,
                        "discount_price": 1199.0,
                        "effective_price": 1199.0,
                        "quantity": 2,
                        "stock": 25,
                        "product_discount": 600.0,
                        "applied_offer": None,
                        "offer_discount": 0.0,
                        "item_total": 2398.0,
                    }
                ],
                "summary": {
                    "subtotal": 2998.0,
                    "total_product_discount": 600.0,
                    "total_offer_discount": 0.0,
                    "total_discount": 600.0,
                    "total": 2398.0,
                    "total_items": 2,
                    "item_count": 1,
                    "skipped_product_ids": [],
                },
            }
        }


class CartCountResponse(BaseModel):
    count: int = Field(..., ge=0, description="Total quantity in the cart")
