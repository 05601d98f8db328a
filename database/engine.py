"""Async database engine and session factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from config import settings
from database.models import Base
from utils.logger import db_logger


def build_engine(url: str = settings.DATABASE_URL, echo: bool = settings.DB_ECHO) -> AsyncEngine:
    return create_async_engine(url, echo=echo, pool_pre_ping=not url.startswith("sqlite"))


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


engine = build_engine()
async_session = build_session_factory(engine)


async def init_db(target: AsyncEngine = engine):
    """Create missing tables."""
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    db_logger.info("Database schema ensured")
