"""Common response schemas."""

import math
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "ok",
                "service": "storefront",
                "version": "1.0.0",
            }
        }


class MessageResponse(BaseModel):
    """Generic success message response."""

    success: bool = Field(True, description="Operation success status")
    message: str = Field(..., description="Success message")
    data: Optional[Any] = Field(None, description="Optional additional data")

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "Item added to cart",
                "data": {"guest_id": "guest_0b6f3c1e-5d1f-4a7e-9c55-2f0d7c1a9e42"},
            }
        }


class ErrorResponse(BaseModel):
    """Error response."""

    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Any] = Field(None, description="Additional error details")

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "error": "InsufficientStock",
                "message": "Insufficient stock. Available: 2, Requested: 5",
                "details": {"product_id": 7, "available": 2, "requested": 5, "in_cart": 0},
            }
        }


class Pagination(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit))


class PaginatedResponse(BaseModel, Generic[T]):
    """`{data, pagination}` envelope for list queries."""

    data: List[T]
    pagination: Pagination
