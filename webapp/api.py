"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response

from config import settings
from database.engine import async_session, engine, init_db
from database.redis_store import MemoryStore, RedisStore
from middlewares.error_handlers import setup_error_handlers
from middlewares.logging_middleware import setup_logging
from middlewares.rate_limit import limiter, setup_rate_limiting
from middlewares.rate_limit_config import RateLimitConfig
from schemas.common import HealthResponse
from utils.cache import CacheManager
from utils.logger import api_logger
from webapp.dependencies import Services, build_services
from webapp.routers import admin, cart, catalog, guest, user


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect stores and build the service graph unless one was injected."""
    if getattr(app.state, "services", None) is not None:
        yield
        return

    store = RedisStore.from_url(settings.REDIS_URL) if settings.REDIS_ENABLED else MemoryStore()
    cache = CacheManager()
    await cache.connect(store)
    await init_db(engine)
    app.state.services = build_services(async_session, cache, store)
    api_logger.info("Application started", version=settings.APP_VERSION, cache_enabled=cache.enabled)
    try:
        yield
    finally:
        await store.close()
        await engine.dispose()
        api_logger.info("Application stopped")


@limiter.limit(RateLimitConfig.HEALTH)
async def health_check(request: Request, response: Response):
    """Service status."""
    return HealthResponse(status="ok", service=settings.APP_NAME, version=settings.APP_VERSION)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the application.

    Pass `services` to run against an already wired graph (tests);
    otherwise stores are connected on startup.
    """
    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.services = services

    setup_logging(app)
    setup_rate_limiting(app)
    setup_error_handlers(app)

    app.add_api_route("/health", health_check, methods=["GET"], response_model=HealthResponse)
    for module in (catalog, cart, guest, user, admin):
        app.include_router(module.router)

    return app


app = create_app()
