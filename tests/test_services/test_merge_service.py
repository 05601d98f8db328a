"""Tests for the guest -> user merge."""

from unittest.mock import AsyncMock

import pytest

from schemas.user import UserRegister
from services.exceptions import StoreTimeoutError, StoreUnavailableError
from utils.cache_keys import CacheKeys


@pytest.fixture
async def user_id(services):
    auth = await services.users.register(UserRegister(email="jane@example.com", password="secret123"))
    return auth.user.id


@pytest.fixture
def guest_id(services):
    return services.guest.generate_id()


async def test_cart_lines_move_to_user(services, catalog, user_id, guest_id):
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 2)
    await services.guest_cart.add_item(guest_id, catalog.jeans.id, 1)

    result = await services.merge.merge_cart_on_login(guest_id, user_id)

    assert (result.merged, result.failed, result.errors) == (2, 0, [])
    cart = await services.user_cart.get_cart(user_id)
    assert {(item.product_id, item.quantity) for item in cart.items} == {
        (catalog.shirt.id, 2),
        (catalog.jeans.id, 1),
    }
    assert await services.guest_cart.get_count(guest_id) == 0


async def test_quantities_add_up_with_existing_user_cart(services, catalog, user_id, guest_id):
    await services.user_cart.add_item(user_id, catalog.shirt.id, 3)
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 2)

    result = await services.merge.merge_cart_on_login(guest_id, user_id)

    assert result.merged == 1
    assert await services.user_cart.get_count(user_id) == 5


async def test_deleted_products_are_reported_not_merged(services, catalog, user_id, guest_id):
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 1)
    await services.guest_cart.add_item(guest_id, catalog.jeans.id, 1)
    await services.products.remove(catalog.jeans.id)

    result = await services.merge.merge_cart_on_login(guest_id, user_id)

    assert result.merged == 1
    assert result.failed == 1
    assert result.errors[0].product_id == catalog.jeans.id
    assert result.errors[0].error == "NotFound"
    assert await services.guest_cart.get_count(guest_id) == 0


async def test_stock_shortfall_is_reported(services, catalog, user_id, guest_id):
    await services.user_cart.add_item(user_id, catalog.jeans.id, 2)
    await services.guest_cart.add_item(guest_id, catalog.jeans.id, 2)

    result = await services.merge.merge_cart_on_login(guest_id, user_id)

    assert result.failed == 1
    assert result.errors[0].error == "InsufficientStock"
    assert await services.user_cart.get_count(user_id) == 2


async def test_wishlist_duplicates_count_as_merged(services, catalog, user_id, guest_id):
    await services.user_wishlist.add_item(user_id, catalog.shirt.id)
    await services.guest_wishlist.add_item(guest_id, catalog.shirt.id)
    await services.guest_wishlist.add_item(guest_id, catalog.jeans.id)

    result = await services.merge.merge_wishlist_on_login(guest_id, user_id)

    assert (result.merged, result.failed) == (2, 0)
    assert await services.user_wishlist.get_count(user_id) == 2
    assert await services.guest_wishlist.get_count(guest_id) == 0


async def test_empty_guest_session_merges_nothing(services, catalog, user_id, guest_id):
    result = await services.merge.merge_on_login(guest_id, user_id)

    assert result.cart.merged == 0
    assert result.wishlist.merged == 0


async def test_guest_record_is_cleared_when_a_line_fails_unexpectedly(services, catalog, user_id, guest_id):
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 1)
    services.merge.user_cart = AsyncMock()
    services.merge.user_cart.add_line.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await services.merge.merge_cart_on_login(guest_id, user_id)

    assert await services.guest_cart.get_count(guest_id) == 0


async def test_merge_on_login_never_raises(services, catalog, user_id, guest_id, store, monkeypatch):
    async def broken_get(key):
        raise StoreUnavailableError("Redis GET failed")

    monkeypatch.setattr(store, "get", broken_get)

    assert await services.merge.merge_on_login(guest_id, user_id) is None


async def test_line_timeout_is_a_line_failure(services, catalog, user_id, guest_id, monkeypatch):
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 1)
    await services.guest_cart.add_item(guest_id, catalog.jeans.id, 1)
    add_line = services.user_cart.add_line

    async def slow_for_shirt(owner, product_id, quantity=1):
        if product_id == catalog.shirt.id:
            raise StoreTimeoutError("cart save timed out")
        await add_line(owner, product_id, quantity)

    monkeypatch.setattr(services.user_cart, "add_line", slow_for_shirt)

    result = await services.merge.merge_cart_on_login(guest_id, user_id)

    assert (result.merged, result.failed) == (1, 1)
    assert result.errors[0].product_id == catalog.shirt.id
    assert result.errors[0].error == "StoreTimeout"
    assert await services.user_cart.get_count(user_id) == 1
    assert await services.guest_cart.get_count(guest_id) == 0


async def test_saved_line_counts_as_merged_when_pricing_fails(
    services, catalog, user_id, guest_id, monkeypatch
):
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 2)

    async def offers_down():
        raise StoreTimeoutError("offers timed out")

    monkeypatch.setattr(services.user_cart.offers, "get_active_offers", offers_down)

    result = await services.merge.merge_cart_on_login(guest_id, user_id)

    assert (result.merged, result.failed) == (1, 0)
    assert await services.user_cart.get_count(user_id) == 2


async def test_wishlist_merges_when_cart_merge_cannot_run(
    services, catalog, user_id, guest_id, store, monkeypatch
):
    await services.guest_wishlist.add_item(guest_id, catalog.jeans.id)
    get = store.get

    async def cart_unreadable(key):
        if key == CacheKeys.guest_cart(guest_id):
            raise StoreUnavailableError("Redis GET failed")
        return await get(key)

    monkeypatch.setattr(store, "get", cart_unreadable)

    result = await services.merge.merge_on_login(guest_id, user_id)

    assert result.cart is None
    assert result.wishlist.merged == 1
    assert await services.user_wishlist.contains(user_id, catalog.jeans.id)
