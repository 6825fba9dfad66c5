"""JWT issuing and verification utilities.

Access tokens are HS256-signed with the configured secret and carry the
user's id, email, display name and role.
"""

import time
from typing import Optional

import jwt

from claimflow.core.config import settings
from claimflow.schemas.auth import JWTClaims
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class JWTService:
    """Issues and verifies access tokens.

    This class handles:
    - Token signing with the shared secret
    - Signature, expiry and required-claim validation on decode
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 480):
        """Initialize the JWT service.

        Args:
            secret: Shared signing secret
            algorithm: Signing algorithm
            expire_minutes: Token lifetime
        """
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_token(self, user_id: str, email: str, name: str, role: str, now: Optional[int] = None) -> str:
        """Sign an access token for a user.

        Args:
            user_id: User ID (becomes ``sub``)
            email: User email
            name: Display name
            role: User role
            now: Issue time override, seconds since epoch

        Returns:
            Encoded JWT
        """
        issued_at = int(now if now is not None else time.time())
        payload = {
            "sub": str(user_id),
            "email": email,
            "name": name,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.expire_minutes * 60,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> JWTClaims:
        """Verify and decode an access token.

        Args:
            token: JWT access token from Authorization header

        Returns:
            Decoded and validated JWT claims

        Raises:
            jwt.InvalidTokenError: If token is invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "email", "role", "exp", "iat"]},
            )
            claims = JWTClaims(name=payload.get("name") or payload["email"], **{
                k: v for k, v in payload.items() if k != "name"
            })
        except jwt.ExpiredSignatureError as e:
            LOGGER.warning(f"Token expired: {e}")
            raise jwt.InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            LOGGER.warning(f"Invalid token: {e}")
            raise
        except ValueError as e:
            # Signature was fine but the claims do not fit JWTClaims (e.g. unknown role)
            LOGGER.warning(f"Malformed token claims: {e}")
            raise jwt.InvalidTokenError("Malformed token claims") from e

        LOGGER.debug(f"Successfully verified token for user: {claims.sub}")
        return claims


jwt_service = JWTService(
    secret=settings.auth.jwt_secret,
    algorithm=settings.auth.jwt_algorithm,
    expire_minutes=settings.auth.token_expire_minutes,
)
