"""JWT Authentication Middleware for FastAPI.

This middleware verifies the JWT access token in the Authorization header
and attaches the user information to the request state.
"""

import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from claimflow.core.auth import current_user_from_claims
from claimflow.core.config import settings
from claimflow.core.jwt import jwt_service
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Paths that don't require authentication
EXCLUDED_PATHS = {
    "/",
    "/docs",
    "/redoc",
    "/openapi.json",
    f"{settings.api_prefix}/auth/login",
}

EXCLUDED_PREFIXES = ("/health", "/docs/", settings.storage.public_prefix.rstrip("/") + "/")


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": {"error": "AuthenticationError", "message": message}},
        headers={"WWW-Authenticate": "Bearer"},
    )


def is_public_path(path: str) -> bool:
    normalized = path.rstrip("/") or "/"
    return normalized in EXCLUDED_PATHS or path.startswith(EXCLUDED_PREFIXES)


class JWTAuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware for JWT authentication.

    Verifies Bearer token in 'Authorization' header and populates request.state.user.
    """

    async def dispatch(self, request: Request, call_next):
        # CORS preflight carries no credentials
        if request.method == "OPTIONS" or is_public_path(request.url.path):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            LOGGER.warning(f"Missing authentication for {request.url.path}")
            return _unauthorized("Authentication required")

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            LOGGER.warning(f"Invalid Authorization header format for {request.url.path}")
            return _unauthorized("Invalid authentication scheme. Use Bearer token.")

        try:
            claims = jwt_service.verify_token(token.strip())
            user = current_user_from_claims(claims)
        except (jwt.InvalidTokenError, ValueError) as e:
            LOGGER.warning(f"Invalid token for {request.url.path}: {e}")
            return _unauthorized("Invalid authentication token")

        request.state.user = user
        LOGGER.debug(f"Authenticated user {claims.sub} via middleware")

        return await call_next(request)
