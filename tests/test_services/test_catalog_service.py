"""Tests for cached catalog services."""

import pytest

from database.models import Gender
from schemas.product import ProductCreate, ProductFilters, ProductUpdate
from schemas.taxonomy import CategoryCreate, GenderCreate, GenderUpdate, SubcategoryCreate
from services.catalog_service import generate_slug
from services.exceptions import ConflictError, NotFoundError, ValidationFailedError
from services.product_service import generate_sku
from utils.cache import CacheManager
from webapp.dependencies import build_services


def test_generate_slug():
    assert generate_slug("Men's Shoes") == "men-s-shoes"
    assert generate_slug("  Kids  ") == "kids"


def test_generate_sku_shape():
    sku = generate_sku("Men", "Shirts")

    prefix, suffix = sku.rsplit("-", 1)
    assert prefix == "MEN-SHI"
    assert len(suffix) == 6 and suffix.isalnum() and suffix == suffix.upper()


async def test_find_all_is_served_from_cache(services, catalog, store, session_factory):
    first = await services.genders.find_all(page=1, limit=10)
    assert await store.scan_prefix("gender:all:")

    # a write behind the service's back is not visible until invalidation
    async with session_factory() as session:
        async with session.begin():
            session.add(Gender(name="Kids", slug="kids"))
    second = await services.genders.find_all(page=1, limit=10)

    assert first == second
    assert first.pagination.total == 1
    assert first.data[0].slug == "men"


async def test_search_for_all_is_not_served_the_unfiltered_page(services, catalog):
    unfiltered = await services.products.find_all(page=1, limit=10, filters=ProductFilters())
    searched = await services.products.find_all(page=1, limit=10, filters=ProductFilters(search="all"))

    assert unfiltered.pagination.total == 2
    assert searched.pagination.total == 0


async def test_write_invalidates_namespace(services, catalog, store):
    await services.genders.find_all(page=1, limit=10)
    await services.genders.find_one(catalog.gender.id)

    await services.genders.create(GenderCreate(name="Women"))

    assert await store.scan_prefix("gender:") == []
    listing = await services.genders.find_all(page=1, limit=10)
    assert listing.pagination.total == 2


async def test_update_is_visible_on_next_read(services, catalog):
    await services.genders.find_one(catalog.gender.id)

    await services.genders.update(catalog.gender.id, GenderUpdate(name="Gents"))

    updated = await services.genders.find_one(catalog.gender.id)
    assert updated.name == "Gents"
    assert updated.slug == "gents"


async def test_generation_strategy_hides_stale_entries(session_factory, cache, store, catalog):
    services = build_services(session_factory, cache, store, strategy="generation")
    await services.products.find_one(catalog.shirt.id)

    await services.products.update(catalog.shirt.id, ProductUpdate(price=120.0))

    assert (await services.products.find_one(catalog.shirt.id)).price == 120.0


async def test_cache_wipe_does_not_change_results(services, catalog, store):
    filters = ProductFilters(category_id=catalog.category.id, in_stock=True)
    before = await services.products.find_all(page=1, limit=10, filters=filters)
    featured_before = await services.products.get_featured(5)

    await store.flush()

    assert await services.products.find_all(page=1, limit=10, filters=filters) == before
    assert await services.products.get_featured(5) == featured_before


async def test_reads_work_without_cache(session_factory, store, catalog):
    services = build_services(session_factory, CacheManager(), store)

    product = await services.products.find_one(catalog.jeans.id)

    assert product.effective_price == 150.0


async def test_find_by_slug_scoped_to_parent(services, catalog):
    category = await services.categories.find_by_slug("shirts", catalog.gender.id)
    assert category.id == catalog.category.id

    with pytest.raises(NotFoundError):
        await services.categories.find_by_slug("shirts", catalog.gender.id + 1)


async def test_find_one_missing_raises_not_found(services):
    with pytest.raises(NotFoundError):
        await services.genders.find_one(999)


async def test_duplicate_name_conflicts(services, catalog):
    with pytest.raises(ConflictError):
        await services.genders.create(GenderCreate(name="Men"))

    # same name under another parent is allowed
    women = await services.genders.create(GenderCreate(name="Women"))
    shirts = await services.categories.create(CategoryCreate(name="Shirts", gender_id=women.id))
    assert shirts.slug == "shirts"


async def test_child_requires_existing_parent(services):
    with pytest.raises(NotFoundError):
        await services.categories.create(CategoryCreate(name="Shirts", gender_id=42))


@pytest.mark.parametrize("level", ["genders", "categories", "subcategories"])
async def test_delete_with_dependents_conflicts(services, catalog, level):
    target = {
        "genders": catalog.gender,
        "categories": catalog.category,
        "subcategories": catalog.subcategory,
    }[level]
    service = getattr(services, level)

    with pytest.raises(ConflictError):
        await service.remove(target.id)

    assert (await service.find_one(target.id)).id == target.id


async def test_delete_leaf_then_parent(services, catalog):
    await services.products.remove(catalog.shirt.id)
    await services.products.remove(catalog.jeans.id)
    await services.subcategories.remove(catalog.subcategory.id)
    await services.categories.remove(catalog.category.id)
    await services.genders.remove(catalog.gender.id)

    assert (await services.genders.find_all()).pagination.total == 0


async def test_product_sku_is_generated_and_unique(services, catalog):
    data = ProductCreate(
        name="Polo",
        price=50.0,
        stock=1,
        gender_id=catalog.gender.id,
        category_id=catalog.category.id,
        subcategory_id=catalog.subcategory.id,
    )

    created = await services.products.create(data)
    assert created.sku.startswith("MEN-SHI-")

    with pytest.raises(ConflictError):
        await services.products.create(data.model_copy(update={"sku": "oxf-001"}))


async def test_product_taxonomy_must_be_consistent(services, catalog):
    women = await services.genders.create(GenderCreate(name="Women"))

    with pytest.raises(ValidationFailedError):
        await services.products.create(
            ProductCreate(
                name="Polo",
                price=50.0,
                stock=1,
                gender_id=women.id,
                category_id=catalog.category.id,
                subcategory_id=catalog.subcategory.id,
            )
        )


async def test_update_checks_discount_against_stored_price(services, catalog):
    with pytest.raises(ValidationFailedError):
        await services.products.update(catalog.shirt.id, ProductUpdate(discount_price=150.0))

    cleared = await services.products.update(catalog.jeans.id, ProductUpdate(discount_price=None))
    assert cleared.discount_price is None
    assert cleared.effective_price == 200.0


async def test_update_stock_clamps_and_invalidates(services, catalog):
    await services.products.find_one(catalog.jeans.id)

    await services.products.update_stock(catalog.jeans.id, -10)

    assert (await services.products.find_one(catalog.jeans.id)).stock == 0


async def test_family_and_sku_lookups(services, catalog):
    await services.products.update(catalog.shirt.id, ProductUpdate(family_sku="oxf"))

    assert (await services.products.find_by_sku("oxf-001")).id == catalog.shirt.id
    family = await services.products.find_by_family_sku("OXF")
    assert [p.id for p in family] == [catalog.shirt.id]


async def test_products_by_subcategory(services, catalog):
    page = await services.products.get_by_subcategory(catalog.subcategory.id)
    assert page.pagination.total == 2

    with pytest.raises(NotFoundError):
        await services.products.get_by_subcategory(999)


async def test_subcategory_create_generates_slug(services, catalog):
    created = await services.subcategories.create(
        SubcategoryCreate(name="Casual Wear", category_id=catalog.category.id)
    )
    assert created.slug == "casual-wear"
