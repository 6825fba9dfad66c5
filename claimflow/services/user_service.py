"""User service for business logic operations.

This module provides user management business logic,
acting as an intermediary between repositories and API endpoints.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.exceptions import ConflictError, NotFoundError
from claimflow.core.security import hash_password
from claimflow.database.models import User
from claimflow.repositories.user_repository import UserRepository
from claimflow.schemas.enums import UserRole
from claimflow.schemas.users import UserCreate, UserResponse
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class UserService:
    """Service for user business logic operations."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.session = db_session
        self.repository = UserRepository(db_session)

    async def list_users(self, role: Optional[UserRole] = None) -> list[UserResponse]:
        """List users who can act as approvers or signers.

        Args:
            role: Restrict to one role

        Returns:
            Public user views, ordered by name
        """
        users = await self.repository.list_users(role)
        return [UserResponse.model_validate(user) for user in users]

    async def get_user(self, user_id: UUID) -> User:
        user = await self.repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def create_user(self, payload: UserCreate) -> User:
        """Create a user account.

        Args:
            payload: Account details; the password is stored as a bcrypt hash

        Returns:
            The created user

        Raises:
            ConflictError: If the email or employee number is already taken
        """
        try:
            user = await self.repository.create(
                name=payload.name.strip(),
                email=payload.email.strip().lower(),
                role=payload.role,
                position=payload.position,
                employee_number=payload.employee_number,
                password_hash=hash_password(payload.password) if payload.password else None,
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(f"User {payload.email} already exists", original_error=e) from e

        LOGGER.info(f"Created user {user.id}", extra={"email": user.email, "role": user.role.value})
        return user
