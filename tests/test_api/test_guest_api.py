"""Test guest session endpoints"""

import pytest


@pytest.fixture
async def guest_id(client):
    response = await client.post("/api/guest/session")
    assert response.status_code == 200
    return response.json()["guest_id"]


async def test_create_session(client):
    response = await client.post("/api/guest/session")

    data = response.json()
    assert data["guest_id"].startswith("guest_")
    assert data["expires_in"] == 86400


async def test_guest_cart_flow(client, catalog, guest_id):
    params = {"guest_id": guest_id}

    response = await client.post(
        "/api/guest/cart/add", params=params, json={"product_id": catalog.shirt.id, "quantity": 2}
    )
    assert response.status_code == 200
    assert response.json()["summary"]["total"] == 200.0

    response = await client.patch(
        f"/api/guest/cart/item/{catalog.shirt.id}", params=params, json={"quantity": 4}
    )
    assert response.json()["items"][0]["quantity"] == 4

    response = await client.get("/api/guest/cart/count", params=params)
    assert response.json() == {"count": 4}

    response = await client.delete(f"/api/guest/cart/item/{catalog.shirt.id}", params=params)
    assert response.json()["items"] == []

    response = await client.delete("/api/guest/cart", params=params)
    assert response.json()["success"] is True


async def test_insufficient_stock_error_shape(client, catalog, guest_id):
    response = await client.post(
        "/api/guest/cart/add",
        params={"guest_id": guest_id},
        json={"product_id": catalog.jeans.id, "quantity": 5},
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "InsufficientStock",
        "message": "Insufficient stock. Available: 3, Requested: 5",
        "details": {"product_id": catalog.jeans.id, "available": 3, "requested": 5, "in_cart": 0},
    }


async def test_invalid_guest_id(client, catalog):
    response = await client.get("/api/guest/cart", params={"guest_id": "user_12345"})

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_missing_guest_id(client):
    response = await client.get("/api/guest/cart")

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "ValidationError"


async def test_guest_wishlist_flow(client, catalog, guest_id):
    params = {"guest_id": guest_id}

    response = await client.post("/api/guest/wishlist/add", params=params, json={"product_id": catalog.jeans.id})
    assert response.json()["count"] == 1

    response = await client.post("/api/guest/wishlist/add", params=params, json={"product_id": catalog.jeans.id})
    assert response.status_code == 409
    assert response.json()["error"] == "Conflict"

    response = await client.get(f"/api/guest/wishlist/check/{catalog.jeans.id}", params=params)
    assert response.json() == {"product_id": catalog.jeans.id, "in_wishlist": True}

    response = await client.post(
        f"/api/guest/wishlist/item/{catalog.jeans.id}/move-to-cart", params=params, json={"quantity": 1}
    )
    assert response.status_code == 200
    assert response.json()["summary"]["total"] == 150.0

    response = await client.get("/api/guest/wishlist/count", params=params)
    assert response.json() == {"count": 0}


async def test_unknown_product_is_not_found(client, guest_id):
    response = await client.post(
        "/api/guest/cart/add", params={"guest_id": guest_id}, json={"product_id": 999}
    )

    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"
