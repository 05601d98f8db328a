"""Tests for registration, login and user carts."""

import pytest

from schemas.user import UserLogin, UserRegister
from services.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationFailedError
from services.user_service import hash_password, verify_password


def test_password_hashing():
    hashed = hash_password("secret123", rounds=4)

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", "not-a-hash")


async def test_register_and_login(services):
    registered = await services.users.register(
        UserRegister(email="Jane@Example.com", password="secret123", full_name="Jane")
    )
    assert registered.user.email == "jane@example.com"
    assert registered.merge_result is None

    logged_in = await services.users.login(UserLogin(email="JANE@example.com", password="secret123"))

    assert logged_in.user.id == registered.user.id
    assert logged_in.user.last_login_at is not None


async def test_duplicate_email_conflicts(services):
    await services.users.register(UserRegister(email="jane@example.com", password="secret123"))

    with pytest.raises(ConflictError):
        await services.users.register(UserRegister(email="jane@example.com", password="other123"))


@pytest.mark.parametrize("email, password", [("jane@example.com", "wrong"), ("nobody@example.com", "secret123")])
async def test_bad_credentials(services, email, password):
    await services.users.register(UserRegister(email="jane@example.com", password="secret123"))

    with pytest.raises(AuthenticationError):
        await services.users.login(UserLogin(email=email, password=password))


async def test_login_merges_guest_session(services, catalog):
    registered = await services.users.register(UserRegister(email="jane@example.com", password="secret123"))
    guest_id = services.guest.generate_id()
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 2)
    await services.guest_wishlist.add_item(guest_id, catalog.jeans.id)

    auth = await services.users.login(
        UserLogin(email="jane@example.com", password="secret123", guest_id=guest_id)
    )

    assert auth.merge_result.cart.merged == 1
    assert auth.merge_result.wishlist.merged == 1
    assert await services.user_cart.get_count(registered.user.id) == 2
    assert await services.user_wishlist.contains(registered.user.id, catalog.jeans.id)


async def test_register_merges_guest_session(services, catalog):
    guest_id = services.guest.generate_id()
    await services.guest_cart.add_item(guest_id, catalog.shirt.id, 1)

    auth = await services.users.register(
        UserRegister(email="jane@example.com", password="secret123", guest_id=guest_id)
    )

    assert auth.merge_result.cart.merged == 1
    assert await services.user_cart.get_count(auth.user.id) == 1


async def test_invalid_guest_id_does_not_fail_login(services):
    await services.users.register(UserRegister(email="jane@example.com", password="secret123"))

    auth = await services.users.login(
        UserLogin(email="jane@example.com", password="secret123", guest_id="not-a-guest")
    )

    assert auth.merge_result is None


async def test_get_user(services):
    registered = await services.users.register(UserRegister(email="jane@example.com", password="secret123"))

    assert (await services.users.get_user(registered.user.id)).email == "jane@example.com"
    with pytest.raises(NotFoundError):
        await services.users.get_user(999)


async def test_user_cart_requires_existing_user(services, catalog):
    with pytest.raises(NotFoundError):
        await services.user_cart.add_item(999, catalog.shirt.id, 1)


async def test_user_cart_rejects_guest_owner(services, catalog):
    with pytest.raises(ValidationFailedError):
        await services.user_cart.get_cart("guest_123")


async def test_user_cart_round_trip(services, catalog):
    auth = await services.users.register(UserRegister(email="jane@example.com", password="secret123"))
    user_id = auth.user.id

    await services.user_cart.add_item(user_id, catalog.shirt.id, 2)
    cart = await services.user_cart.update_item(user_id, catalog.shirt.id, 4)
    assert cart.summary.total_items == 4

    await services.user_cart.clear(user_id)
    assert await services.user_cart.get_count(user_id) == 0
