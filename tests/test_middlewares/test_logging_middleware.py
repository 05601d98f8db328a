"""Tests for the logging middleware and error handlers."""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from middlewares.error_handlers import setup_error_handlers
from middlewares.logging_middleware import parse_timeout, setup_logging
from services.exceptions import NotFoundError, StoreUnavailableError
from utils.deadline import remaining, with_timeout
from utils.logger import get_correlation_id

app = FastAPI()
setup_logging(app)
setup_error_handlers(app)


@app.get("/remaining")
async def time_left():
    return {"remaining": remaining(100.0), "correlation_id": get_correlation_id()}


@app.get("/slow")
async def slow():
    try:
        await with_timeout(asyncio.sleep(1), 5.0)
    except asyncio.TimeoutError as exc:
        raise StoreUnavailableError("slow timed out") from exc
    return {"done": True}


@app.get("/missing")
async def missing():
    raise NotFoundError("Product with ID 1 not found", details={"product_id": 1})


@pytest.fixture
def client():
    return TestClient(app)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, None), ("", None), ("abc", None), ("0", None), ("-1", None), ("2.5", 2.5)],
)
def test_parse_timeout(raw, expected):
    assert parse_timeout(raw) == expected


def test_no_header_means_no_deadline(client):
    assert client.get("/remaining").json()["remaining"] == 100.0


def test_header_bounds_store_calls(client):
    data = client.get("/remaining", headers={"X-Request-Timeout": "2"}).json()

    assert 0 < data["remaining"] <= 2


def test_expired_deadline_becomes_retryable_error(client):
    response = client.get("/slow", headers={"X-Request-Timeout": "0.01"})

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json()["error"] == "StoreUnavailable"


def test_correlation_id_visible_inside_request(client):
    response = client.get("/remaining", headers={"X-Correlation-ID": "cid-1"})

    assert response.json()["correlation_id"] == "cid-1"
    assert response.headers["X-Correlation-ID"] == "cid-1"


def test_service_error_shape(client):
    response = client.get("/missing")

    assert response.status_code == 404
    assert "Retry-After" not in response.headers
    assert response.json() == {
        "success": False,
        "error": "NotFound",
        "message": "Product with ID 1 not found",
        "details": {"product_id": 1},
    }
