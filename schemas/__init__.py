"""Pydantic schemas for API contracts and cache snapshots."""

from schemas.cart import (
    CartCountResponse,
    CartItemAdd,
    CartItemResponse,
    CartItemUpdate,
    CartLine,
    CartResponse,
    CartSummary,
)
from schemas.common import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    PaginatedResponse,
    Pagination,
)
from schemas.offer import (
    AppliedOffer,
    OfferCreate,
    OfferResponse,
    OfferType,
    OfferUpdate,
)
from schemas.product import (
    ProductCreate,
    ProductFilters,
    ProductResponse,
    ProductUpdate,
)
from schemas.taxonomy import (
    CategoryResponse,
    GenderResponse,
    SubcategoryResponse,
)
from schemas.user import AuthResponse, GuestSessionResponse, LoginMergeResult, MergeResult
from schemas.wishlist import WishlistLine, WishlistResponse

__all__ = [
    # Cart
    "CartCountResponse",
    "CartItemAdd",
    "CartItemResponse",
    "CartItemUpdate",
    "CartLine",
    "CartResponse",
    "CartSummary",
    # Common
    "ErrorResponse",
    "HealthResponse",
    "MessageResponse",
    "PaginatedResponse",
    "Pagination",
    # Offer
    "AppliedOffer",
    "OfferCreate",
    "OfferResponse",
    "OfferType",
    "OfferUpdate",
    # Product
    "ProductCreate",
    "ProductFilters",
    "ProductResponse",
    "ProductUpdate",
    # Taxonomy
    "CategoryResponse",
    "GenderResponse",
    "SubcategoryResponse",
    # User / guest
    "AuthResponse",
    "GuestSessionResponse",
    "LoginMergeResult",
    "MergeResult",
    # Wishlist
    "WishlistLine",
    "WishlistResponse",
]
