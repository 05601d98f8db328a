"""Public catalog endpoints: taxonomy, products, offers."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from middlewares.rate_limit import limiter
from middlewares.rate_limit_config import RateLimitConfig
from schemas.common import PaginatedResponse
from schemas.offer import AppliedOffer, BestOfferResponse, OfferResponse
from schemas.product import ProductFilters, ProductResponse
from schemas.taxonomy import CategoryResponse, GenderResponse, SubcategoryResponse
from webapp.dependencies import Services, get_services

router = APIRouter(prefix="/api", tags=["catalog"])


# === Taxonomy ===

@router.get("/genders", response_model=PaginatedResponse[GenderResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def list_genders(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_active: Optional[bool] = None,
    services: Services = Depends(get_services),
):
    return await services.genders.find_all(page, limit, is_active=is_active)


@router.get("/genders/slug/{slug}", response_model=GenderResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_gender_by_slug(
    request: Request, response: Response, slug: str, services: Services = Depends(get_services)
):
    return await services.genders.find_by_slug(slug)


@router.get("/genders/{gender_id}", response_model=GenderResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_gender(
    request: Request, response: Response, gender_id: int, services: Services = Depends(get_services)
):
    return await services.genders.find_one(gender_id)


@router.get("/categories", response_model=PaginatedResponse[CategoryResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def list_categories(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    gender_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    services: Services = Depends(get_services),
):
    return await services.categories.find_all(page, limit, parent_id=gender_id, is_active=is_active)


@router.get("/categories/slug/{slug}", response_model=CategoryResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_category_by_slug(
    request: Request,
    response: Response,
    slug: str,
    gender_id: Optional[int] = None,
    services: Services = Depends(get_services),
):
    return await services.categories.find_by_slug(slug, gender_id)


@router.get("/categories/{category_id}", response_model=CategoryResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_category(
    request: Request, response: Response, category_id: int, services: Services = Depends(get_services)
):
    return await services.categories.find_one(category_id)


@router.get("/subcategories", response_model=PaginatedResponse[SubcategoryResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def list_subcategories(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    services: Services = Depends(get_services),
):
    return await services.subcategories.find_all(page, limit, parent_id=category_id, is_active=is_active)


@router.get("/subcategories/slug/{slug}", response_model=SubcategoryResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_subcategory_by_slug(
    request: Request,
    response: Response,
    slug: str,
    category_id: Optional[int] = None,
    services: Services = Depends(get_services),
):
    return await services.subcategories.find_by_slug(slug, category_id)


@router.get("/subcategories/{subcategory_id}", response_model=SubcategoryResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_subcategory(
    request: Request, response: Response, subcategory_id: int, services: Services = Depends(get_services)
):
    return await services.subcategories.find_one(subcategory_id)


# === Products ===

@router.get("/products", response_model=PaginatedResponse[ProductResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def list_products(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    gender_id: Optional[int] = None,
    category_id: Optional[int] = None,
    subcategory_id: Optional[int] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    under_price_amount: Optional[float] = Query(None, ge=0),
    in_stock: Optional[bool] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    family_sku: Optional[str] = None,
    services: Services = Depends(get_services),
):
    filters = ProductFilters(
        gender_id=gender_id,
        category_id=category_id,
        subcategory_id=subcategory_id,
        min_price=min_price,
        max_price=max_price,
        under_price_amount=under_price_amount,
        in_stock=in_stock,
        is_active=is_active,
        search=search,
        family_sku=family_sku,
    )
    return await services.products.find_all(page, limit, filters)


@router.get("/products/featured", response_model=List[ProductResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def featured_products(
    request: Request,
    response: Response,
    limit: int = Query(10, ge=1, le=50),
    services: Services = Depends(get_services),
):
    return await services.products.get_featured(limit)


@router.get("/products/sku/{sku}", response_model=ProductResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_product_by_sku(
    request: Request, response: Response, sku: str, services: Services = Depends(get_services)
):
    return await services.products.find_by_sku(sku)


@router.get("/products/family/{family_sku}", response_model=List[ProductResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_product_family(
    request: Request, response: Response, family_sku: str, services: Services = Depends(get_services)
):
    return await services.products.find_by_family_sku(family_sku)


@router.get("/products/category/{category_id}", response_model=PaginatedResponse[ProductResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def products_by_category(
    request: Request,
    response: Response,
    category_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    services: Services = Depends(get_services),
):
    return await services.products.get_by_category(category_id, page, limit)


@router.get("/products/subcategory/{subcategory_id}", response_model=PaginatedResponse[ProductResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def products_by_subcategory(
    request: Request,
    response: Response,
    subcategory_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    services: Services = Depends(get_services),
):
    return await services.products.get_by_subcategory(subcategory_id, page, limit)


@router.get("/products/{product_id}", response_model=ProductResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_product(
    request: Request, response: Response, product_id: int, services: Services = Depends(get_services)
):
    return await services.products.find_one(product_id)


# === Offers ===

@router.get("/offers", response_model=PaginatedResponse[OfferResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def list_offers(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_active: Optional[bool] = None,
    services: Services = Depends(get_services),
):
    return await services.offers.find_all(page, limit, is_active)


@router.get("/offers/active", response_model=List[OfferResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def active_offers(request: Request, response: Response, services: Services = Depends(get_services)):
    return await services.offers.get_active_offers()


@router.get("/offers/display/{placement}", response_model=List[OfferResponse])
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def display_offers(
    request: Request, response: Response, placement: str, services: Services = Depends(get_services)
):
    """Running offers for `homepage` or `navbar`."""
    return await services.offers.get_display_offers(placement)


@router.get("/offers/best/{product_id}", response_model=BestOfferResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def best_offer(
    request: Request,
    response: Response,
    product_id: int,
    quantity: int = Query(1, ge=1),
    services: Services = Depends(get_services),
):
    """Best offer for `quantity` units of a product, right now."""
    product = await services.products.find_one(product_id)
    selection = await services.offers.get_best_offer_for_product(product, quantity)
    offer = selection.offer
    return BestOfferResponse(
        offer=(
            AppliedOffer(id=offer.id, name=offer.name, description=offer.description, offer_type=offer.offer_type)
            if offer
            else None
        ),
        discount=float(selection.discount),
    )


@router.get("/offers/{offer_id}", response_model=OfferResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_offer(
    request: Request, response: Response, offer_id: int, services: Services = Depends(get_services)
):
    return await services.offers.find_one(offer_id)
