"""Pytest configuration and fixtures"""
import os

# Settings are read at import time
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("CACHE_INVALIDATION", "prefix")

from datetime import timedelta
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from database.engine import build_engine, build_session_factory, init_db
from database.redis_store import MemoryStore
from middlewares.rate_limit import limiter
from schemas.offer import OfferCreate
from schemas.product import ProductCreate
from schemas.taxonomy import CategoryCreate, GenderCreate, SubcategoryCreate
from utils.cache import CacheManager
from utils.timeutils import utc_now
from webapp.api import create_app
from webapp.dependencies import build_services


class FakeClock:
    """Monotonic clock the tests can move forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite per test; every session sees the same data."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_session_factory(test_engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> MemoryStore:
    return MemoryStore(clock=clock)


@pytest.fixture
def cache(store) -> CacheManager:
    return CacheManager(store)


@pytest.fixture
def services(session_factory, cache, store):
    return build_services(session_factory, cache, store)


@pytest.fixture
async def client(services):
    app = create_app(services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def catalog(services):
    """Men > Shirts > Formal, with two products."""
    gender = await services.genders.create(GenderCreate(name="Men"))
    category = await services.categories.create(CategoryCreate(name="Shirts", gender_id=gender.id))
    subcategory = await services.subcategories.create(
        SubcategoryCreate(name="Formal", category_id=category.id)
    )
    shirt = await services.products.create(
        ProductCreate(
            name="Oxford Shirt",
            sku="OXF-001",
            price=100.0,
            stock=10,
            gender_id=gender.id,
            category_id=category.id,
            subcategory_id=subcategory.id,
        )
    )
    jeans = await services.products.create(
        ProductCreate(
            name="Slim Jeans",
            sku="JNS-001",
            price=200.0,
            discount_price=150.0,
            stock=3,
            gender_id=gender.id,
            category_id=category.id,
            subcategory_id=subcategory.id,
        )
    )
    return SimpleNamespace(
        gender=gender, category=category, subcategory=subcategory, shirt=shirt, jeans=jeans
    )


@pytest.fixture
def offer_window():
    now = utc_now()
    return now - timedelta(days=1), now + timedelta(days=1)


@pytest.fixture
def make_offer(services, offer_window):
    """Create a running offer; keyword arguments override the defaults."""

    async def factory(**overrides):
        start, end = offer_window
        data = {
            "name": "Offer",
            "offer_type": "percentageOff",
            "rules": {"discount_percentage": 10},
            "start_date": start,
            "end_date": end,
        }
        data.update(overrides)
        return await services.offers.create(OfferCreate(**data))

    return factory
