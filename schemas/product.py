"""Product-related schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _two_decimals(v: Optional[float]) -> Optional[float]:
    if v is not None and round(v, 2) != v:
        raise ValueError("Price must have at most 2 decimal places")
    return v


class ProductBase(BaseModel):
    """Base product schema with common fields."""

    name: str = Field(..., min_length=1, max_length=500, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    family_sku: Optional[str] = Field(None, max_length=64, description="Shared SKU of variants")
    price: float = Field(..., gt=0, description="List price")
    discount_price: Optional[float] = Field(None, gt=0, description="Sale price, below list price")
    stock: int = Field(..., ge=0, description="Units in stock")
    gender_id: int = Field(..., gt=0)
    category_id: int = Field(..., gt=0)
    subcategory_id: int = Field(..., gt=0)
    images: List[str] = Field(default_factory=list)

    @field_validator("price", "discount_price")
    @classmethod
    def validate_price(cls, v):
        """Ensure prices have max 2 decimal places."""
        return _two_decimals(v)

    @model_validator(mode="after")
    def validate_discount_price(self):
        if self.discount_price is not None and self.discount_price >= self.price:
            raise ValueError("Discount price must be less than the regular price")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Oxford Shirt",
                "description": "Slim fit cotton shirt",
                "family_sku": "OXF-SHIRT",
                "price": 1499.00,
                "discount_price": 1199.00,
                "stock": 25,
                "gender_id": 1,
                "category_id": 2,
                "subcategory_id": 5,
                "images": [],
            }
        }


class ProductCreate(ProductBase):
    """Schema for creating a new product."""

    sku: Optional[str] = Field(None, min_length=1, max_length=64, description="Generated when omitted")
    is_active: bool = Field(True, description="Product active status")


class ProductUpdate(BaseModel):
    """Schema for updating product (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, min_length=1, max_length=64)
    family_sku: Optional[str] = Field(None, max_length=64)
    price: Optional[float] = Field(None, gt=0)
    discount_price: Optional[float] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    gender_id: Optional[int] = Field(None, gt=0)
    category_id: Optional[int] = Field(None, gt=0)
    subcategory_id: Optional[int] = Field(None, gt=0)
    images: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("price", "discount_price")
    @classmethod
    def validate_price(cls, v):
        return _two_decimals(v)


class ProductResponse(BaseModel):
    """Product snapshot returned by the API and stored in the cache."""

    id: int = Field(..., description="Product ID")
    name: str
    sku: str
    family_sku: Optional[str] = None
    description: Optional[str] = None
    price: float
    discount_price: Optional[float] = None
    stock: int = Field(0, ge=0)
    is_active: bool = True
    gender_id: int
    category_id: int
    subcategory_id: int
    images: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Computed fields
    effective_price: Optional[float] = Field(
        None, description="Discount price if present, else list price"
    )

    @model_validator(mode="after")
    def calculate_effective_price(self):
        self.effective_price = self.discount_price if self.discount_price else self.price
        return self

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 7,
                "name": "Oxford Shirt",
                "sku": "MEN-SHI-4F9K2A",
                "family_sku": "OXF-SHIRT",
                "description": "Slim fit cotton shirt",
                "price": 1499.00,
                "discount_price": 1199.00,
                "stock": 25,
                "is_active": True,
                "gender_id": 1,
                "category_id": 2,
                "subcategory_id": 5,
                "images": [],
                "effective_price": 1199.00,
            }
        }


class ProductFilters(BaseModel):
    """Filters accepted by the product list query."""

    gender_id: Optional[int] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    under_price_amount: Optional[float] = Field(None, ge=0)
    in_stock: Optional[bool] = None
    is_active: Optional[bool] = None
    search: Optional[str] = None
    family_sku: Optional[str] = None
    product_ids: Optional[List[int]] = None

    def as_key_parts(self) -> Dict[str, Any]:
        """Every filter, including unset ones, so cache keys always have the same shape."""
        return self.model_dump()


class StockUpdate(BaseModel):
    quantity: int = Field(..., description="Stock delta, negative to decrease")
