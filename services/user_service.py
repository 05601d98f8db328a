"""User registration and login."""

import asyncio
from typing import Optional

import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import settings
from repositories.user_repository import UserRepository
from schemas.user import AuthResponse, UserLogin, UserRegister, UserResponse
from services.base import BaseService
from services.exceptions import AuthenticationError, ConflictError, NotFoundError
from services.cart_storage import is_guest_id
from services.merge_service import MergeService
from utils.logger import logger


def hash_password(password: str, rounds: int = settings.BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class UserService(BaseService):
    """Accounts. No tokens are issued; the user id identifies the owner of user carts."""

    def __init__(self, session_factory: async_sessionmaker, merge: MergeService):
        super().__init__(session_factory)
        self.merge = merge

    async def _merge_guest(self, guest_id: Optional[str], user_id: int):
        if not guest_id:
            return None
        if not is_guest_id(guest_id):
            logger.warning("Ignoring invalid guest id on login", user_id=user_id)
            return None
        return await self.merge.merge_on_login(guest_id, user_id)

    async def get_user(self, user_id: int) -> UserResponse:
        async def work(session: AsyncSession):
            user = await UserRepository(session).get_by_id(user_id)
            if not user:
                raise NotFoundError(f"User with ID {user_id} not found")
            return UserResponse.model_validate(user)

        return await self.run("user.get_user", work)

    async def register(self, data: UserRegister) -> AuthResponse:
        """
        Create an account and merge the guest session, if one is given.

        Raises:
            ConflictError: If the email is already registered.
        """
        password_hash = await asyncio.to_thread(hash_password, data.password)

        async def work(session: AsyncSession):
            repo = UserRepository(session)
            if await repo.get_by_email(data.email):
                raise ConflictError("User with this email already exists")
            user = await repo.create(
                email=data.email, password_hash=password_hash, full_name=data.full_name
            )
            await repo.touch_login(user)
            return UserResponse.model_validate(user)

        user = await self.run("user.register", work)
        logger.info("User registered", user_id=user.id)
        merge_result = await self._merge_guest(data.guest_id, user.id)
        return AuthResponse(user=user, merge_result=merge_result)

    async def login(self, data: UserLogin) -> AuthResponse:
        """
        Check credentials and merge the guest session, if one is given.

        A failed merge never fails the login; `merge_result` is then null.

        Raises:
            AuthenticationError: On unknown email or wrong password.
        """

        async def fetch(session: AsyncSession):
            user = await UserRepository(session).get_by_email(data.email)
            return (user.id, user.password_hash) if user else None

        found = await self.run("user.login", fetch)
        if not found or not await asyncio.to_thread(verify_password, data.password, found[1]):
            logger.warning("Login failed", email=data.email)
            raise AuthenticationError("Invalid email or password")

        user_id = found[0]

        async def touch(session: AsyncSession):
            repo = UserRepository(session)
            user = await repo.touch_login(await repo.get_by_id(user_id))
            return UserResponse.model_validate(user)

        user = await self.run("user.touch_login", touch)
        logger.info("User logged in", user_id=user.id)
        merge_result = await self._merge_guest(data.guest_id, user.id)
        return AuthResponse(user=user, merge_result=merge_result)
