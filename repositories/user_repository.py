"""User repository for data access."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User
from repositories.base import BaseRepository
from utils.timeutils import utc_now


class UserRepository(BaseRepository[User]):
    """Repository for User entity."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.find_one_where(User.email == email.strip().lower())

    async def touch_login(self, user: User) -> User:
        """Record a successful login."""
        user.last_login_at = utc_now()
        await self.session.flush()
        return user
