"""Admin write endpoints for the catalog. Every write invalidates the entity's cache."""

from fastapi import APIRouter, Depends, Request, Response, status

from middlewares.rate_limit import limiter
from middlewares.rate_limit_config import RateLimitConfig
from schemas.common import MessageResponse
from schemas.offer import OfferCreate, OfferResponse, OfferUpdate
from schemas.product import ProductCreate, ProductResponse, ProductUpdate, StockUpdate
from schemas.taxonomy import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    GenderCreate,
    GenderResponse,
    GenderUpdate,
    SubcategoryCreate,
    SubcategoryResponse,
    SubcategoryUpdate,
)
from webapp.dependencies import Services, get_services

router = APIRouter(prefix="/api/admin", tags=["admin"])

ADMIN_LIMIT = RateLimitConfig.get_limit("ADMIN_WRITE")


def _deleted(label: str, name: str) -> MessageResponse:
    return MessageResponse(message=f"{label} {name} has been deleted successfully")


# === Genders ===

@router.post("/genders", response_model=GenderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ADMIN_LIMIT)
async def create_gender(
    request: Request, response: Response, data: GenderCreate, services: Services = Depends(get_services)
):
    return await services.genders.create(data)


@router.patch("/genders/{gender_id}", response_model=GenderResponse)
@limiter.limit(ADMIN_LIMIT)
async def update_gender(
    request: Request,
    response: Response,
    gender_id: int,
    data: GenderUpdate,
    services: Services = Depends(get_services),
):
    return await services.genders.update(gender_id, data)


@router.delete("/genders/{gender_id}", response_model=MessageResponse)
@limiter.limit(ADMIN_LIMIT)
async def delete_gender(
    request: Request, response: Response, gender_id: int, services: Services = Depends(get_services)
):
    removed = await services.genders.remove(gender_id)
    return _deleted("Gender", removed.name)


# === Categories ===

@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ADMIN_LIMIT)
async def create_category(
    request: Request, response: Response, data: CategoryCreate, services: Services = Depends(get_services)
):
    return await services.categories.create(data)


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
@limiter.limit(ADMIN_LIMIT)
async def update_category(
    request: Request,
    response: Response,
    category_id: int,
    data: CategoryUpdate,
    services: Services = Depends(get_services),
):
    return await services.categories.update(category_id, data)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
@limiter.limit(ADMIN_LIMIT)
async def delete_category(
    request: Request, response: Response, category_id: int, services: Services = Depends(get_services)
):
    removed = await services.categories.remove(category_id)
    return _deleted("Category", removed.name)


# === Subcategories ===

@router.post("/subcategories", response_model=SubcategoryResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ADMIN_LIMIT)
async def create_subcategory(
    request: Request, response: Response, data: SubcategoryCreate, services: Services = Depends(get_services)
):
    return await services.subcategories.create(data)


@router.patch("/subcategories/{subcategory_id}", response_model=SubcategoryResponse)
@limiter.limit(ADMIN_LIMIT)
async def update_subcategory(
    request: Request,
    response: Response,
    subcategory_id: int,
    data: SubcategoryUpdate,
    services: Services = Depends(get_services),
):
    return await services.subcategories.update(subcategory_id, data)


@router.delete("/subcategories/{subcategory_id}", response_model=MessageResponse)
@limiter.limit(ADMIN_LIMIT)
async def delete_subcategory(
    request: Request, response: Response, subcategory_id: int, services: Services = Depends(get_services)
):
    removed = await services.subcategories.remove(subcategory_id)
    return _deleted("Subcategory", removed.name)


# === Products ===

@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ADMIN_LIMIT)
async def create_product(
    request: Request, response: Response, data: ProductCreate, services: Services = Depends(get_services)
):
    return await services.products.create(data)


@router.patch("/products/{product_id}", response_model=ProductResponse)
@limiter.limit(ADMIN_LIMIT)
async def update_product(
    request: Request,
    response: Response,
    product_id: int,
    data: ProductUpdate,
    services: Services = Depends(get_services),
):
    return await services.products.update(product_id, data)


@router.patch("/products/{product_id}/stock", response_model=ProductResponse)
@limiter.limit(ADMIN_LIMIT)
async def update_product_stock(
    request: Request,
    response: Response,
    product_id: int,
    data: StockUpdate,
    services: Services = Depends(get_services),
):
    return await services.products.update_stock(product_id, data.quantity)


@router.delete("/products/{product_id}", response_model=MessageResponse)
@limiter.limit(ADMIN_LIMIT)
async def delete_product(
    request: Request, response: Response, product_id: int, services: Services = Depends(get_services)
):
    removed = await services.products.remove(product_id)
    return _deleted("Product", f"{removed.name} (SKU: {removed.sku})")


# === Offers ===

@router.post("/offers", response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ADMIN_LIMIT)
async def create_offer(
    request: Request, response: Response, data: OfferCreate, services: Services = Depends(get_services)
):
    return await services.offers.create(data)


@router.patch("/offers/{offer_id}", response_model=OfferResponse)
@limiter.limit(ADMIN_LIMIT)
async def update_offer(
    request: Request,
    response: Response,
    offer_id: int,
    data: OfferUpdate,
    services: Services = Depends(get_services),
):
    return await services.offers.update(offer_id, data)


@router.delete("/offers/{offer_id}", response_model=MessageResponse)
@limiter.limit(ADMIN_LIMIT)
async def delete_offer(
    request: Request, response: Response, offer_id: int, services: Services = Depends(get_services)
):
    removed = await services.offers.remove(offer_id)
    return _deleted("Offer", removed.name)
