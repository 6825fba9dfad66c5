"""Local credential login issuing bearer tokens."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.exceptions import AuthenticationError
from claimflow.core.jwt import JWTService, jwt_service
from claimflow.core.security import verify_password
from claimflow.repositories.user_repository import UserRepository
from claimflow.schemas.auth import LoginResponse
from claimflow.schemas.users import UserResponse
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class AuthService:
    """Checks credentials and issues access tokens."""

    def __init__(self, db_session: AsyncSession, tokens: Optional[JWTService] = None):
        self.repository = UserRepository(db_session)
        self.tokens = tokens or jwt_service

    async def login(self, email: str, password: str) -> LoginResponse:
        """Authenticate a user by email and password.

        Args:
            email: Account email
            password: Plaintext password

        Returns:
            LoginResponse with the user and a signed token

        Raises:
            AuthenticationError: If the credentials do not match an account
        """
        user = await self.repository.get_by_email(email)
        if not user or not user.password_hash or not verify_password(password, user.password_hash):
            LOGGER.warning("Failed login attempt", extra={"email": email})
            raise AuthenticationError("Invalid email or password")

        token = self.tokens.create_token(
            user_id=str(user.id), email=user.email, name=user.name, role=user.role.value
        )
        LOGGER.info(f"User {user.id} logged in")
        return LoginResponse(user=UserResponse.model_validate(user), token=token)
