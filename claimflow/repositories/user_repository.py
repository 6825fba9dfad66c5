"""Repository for user data access operations."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.database.models import User
from claimflow.repositories.base_repository import BaseRepository
from claimflow.schemas.enums import UserRole


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_users(self, role: Optional[UserRole] = None) -> list[User]:
        """List users ordered by name, optionally restricted to one role."""
        stmt = select(User).order_by(User.name)
        if role is not None:
            stmt = stmt.where(User.role == role)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
