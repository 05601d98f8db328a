"""Base service class."""

import asyncio
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import settings
from services.exceptions import ConflictError, StoreTimeoutError, StoreUnavailableError
from utils.deadline import with_timeout
from utils.logger import db_logger

T = TypeVar("T")


class BaseService:
    """Base service with common functionality.

    Every relational store call runs in its own session and transaction,
    bounded by `DB_OP_TIMEOUT` and the request deadline.
    """

    def __init__(self, session_factory: async_sessionmaker, op_timeout: float = settings.DB_OP_TIMEOUT):
        """Initialize service with a session factory."""
        self.session_factory = session_factory
        self.op_timeout = op_timeout

    async def _transaction(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_factory() as session:
            async with session.begin():
                return await work(session)

    async def run(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """
        Run `work(session)` in a transaction.

        Raises:
            StoreTimeoutError: The call ran past the request deadline.
            StoreUnavailableError: The database failed.
            ConflictError: A uniqueness constraint was violated.
        """
        try:
            return await with_timeout(self._transaction(work), self.op_timeout)
        except asyncio.TimeoutError as exc:
            db_logger.error("Database operation timed out", operation=operation)
            raise StoreTimeoutError(f"{operation} timed out") from exc
        except IntegrityError as exc:
            db_logger.warning("Integrity error", operation=operation, error=str(exc.orig))
            raise ConflictError("Resource already exists", details=operation) from exc
        except SQLAlchemyError as exc:
            db_logger.error("Database operation failed", operation=operation, error=str(exc))
            raise StoreUnavailableError(f"{operation} failed") from exc
