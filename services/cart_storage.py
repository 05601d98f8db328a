"""
Storage strategies for cart and wishlist lines.

The cart and wishlist services are written once against `LineStorage`;
guests keep their lines as one JSON record in the key-value store, users
keep them as rows in the relational store.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Generic, List, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import settings
from repositories.cart_repository import CartItemRepository, WishlistItemRepository
from repositories.user_repository import UserRepository
from schemas.cart import CartLine
from schemas.wishlist import WishlistLine
from services.base import BaseService
from services.exceptions import NotFoundError, StoreTimeoutError, ValidationFailedError
from utils.cache_keys import CacheKeys
from utils.deadline import with_timeout
from utils.logger import logger

LineType = TypeVar("LineType", bound=BaseModel)
Owner = Union[str, int]

GUEST_ID_PREFIX = "guest_"


def is_guest_id(owner: Owner) -> bool:
    return isinstance(owner, str) and owner.startswith(GUEST_ID_PREFIX) and len(owner) > len(GUEST_ID_PREFIX)


class LineStorage(ABC, Generic[LineType]):
    """Whole-list load/save for one owner."""

    line_type: Type[LineType]

    @abstractmethod
    async def load(self, owner: Owner) -> List[LineType]:
        ...

    @abstractmethod
    async def save(self, owner: Owner, lines: List[LineType]) -> None:
        ...

    @abstractmethod
    async def clear(self, owner: Owner) -> None:
        ...


class GuestLineStorage(LineStorage[LineType]):
    """
    Guest lines as a JSON list under `{prefix}:{guest_id}`.

    Every save rewrites the whole record with the full TTL, so a guest
    record expires `ttl` seconds after its last mutation. Reads never touch
    the TTL. Store failures surface as StoreUnavailableError.
    """

    key_builder: Callable[[str], str]

    def __init__(self, store, ttl: int = CacheKeys.TTL_GUEST, op_timeout: float = settings.GUEST_OP_TIMEOUT):
        self.store = store
        self.ttl = ttl
        self.op_timeout = op_timeout
        self._adapter = TypeAdapter(List[self.line_type])

    def key(self, guest_id: Owner) -> str:
        if not is_guest_id(guest_id):
            raise ValidationFailedError("Invalid guest id", details={"guest_id": str(guest_id)})
        return self.key_builder(guest_id)

    async def _call(self, operation: str, awaitable):
        try:
            return await with_timeout(awaitable, self.op_timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Guest store timed out", operation=operation)
            raise StoreTimeoutError(f"Guest store {operation} timed out") from exc

    async def load(self, owner: Owner) -> List[LineType]:
        key = self.key(owner)
        raw = await self._call("get", self.store.get(key))
        if raw is None:
            return []
        try:
            return self._adapter.validate_json(raw)
        except ValidationError:
            logger.error("Unreadable guest record, treating as empty", key=key)
            return []

    async def save(self, owner: Owner, lines: List[LineType]) -> None:
        key = self.key(owner)
        payload = self._adapter.dump_json(lines).decode()
        await self._call("set", self.store.set(key, payload, self.ttl))

    async def clear(self, owner: Owner) -> None:
        await self._call("delete", self.store.delete(self.key(owner)))


class GuestCartStorage(GuestLineStorage[CartLine]):
    line_type = CartLine
    key_builder = staticmethod(CacheKeys.guest_cart)


class GuestWishlistStorage(GuestLineStorage[WishlistLine]):
    line_type = WishlistLine
    key_builder = staticmethod(CacheKeys.guest_wishlist)


class UserLineStorage(BaseService, LineStorage[LineType]):
    """User lines as rows; a save replaces the user's rows in one transaction."""

    repository_class: Type
    fields: tuple

    def __init__(self, session_factory: async_sessionmaker):
        super().__init__(session_factory)

    @staticmethod
    def _user_id(owner: Owner) -> int:
        if isinstance(owner, bool) or not isinstance(owner, int):
            raise ValidationFailedError("Invalid user id", details={"user_id": str(owner)})
        return owner

    async def load(self, owner: Owner) -> List[LineType]:
        user_id = self._user_id(owner)

        async def work(session: AsyncSession):
            rows = await self.repository_class(session).get_for_user(user_id)
            return [
                self.line_type(**{field: getattr(row, field) for field in self.fields})
                for row in rows
            ]

        return await self.run(f"{self.repository_class.__name__}.load", work)

    async def save(self, owner: Owner, lines: List[LineType]) -> None:
        user_id = self._user_id(owner)

        async def work(session: AsyncSession):
            if not await UserRepository(session).get_by_id(user_id):
                raise NotFoundError(f"User with ID {user_id} not found")
            await self.repository_class(session).replace_for_user(
                user_id, [line.model_dump() for line in lines]
            )

        await self.run(f"{self.repository_class.__name__}.save", work)

    async def clear(self, owner: Owner) -> None:
        user_id = self._user_id(owner)

        async def work(session: AsyncSession):
            await self.repository_class(session).clear_for_user(user_id)

        await self.run(f"{self.repository_class.__name__}.clear", work)


class UserCartStorage(UserLineStorage[CartLine]):
    line_type = CartLine
    repository_class = CartItemRepository
    fields = ("product_id", "quantity", "added_at")


class UserWishlistStorage(UserLineStorage[WishlistLine]):
    line_type = WishlistLine
    repository_class = WishlistItemRepository
    fields = ("product_id", "added_at")
