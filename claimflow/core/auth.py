"""Authentication dependencies for FastAPI routes.

This module provides FastAPI dependency injection functions for
JWT token verification and role checks.
"""

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from claimflow.core.jwt import jwt_service
from claimflow.schemas.auth import CurrentUser, JWTClaims
from claimflow.schemas.enums import UserRole
from claimflow.utils.logging import get_logger
from claimflow.workflow.transitions import Actor

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def current_user_from_claims(claims: JWTClaims) -> CurrentUser:
    return CurrentUser(id=claims.sub, email=claims.email, name=claims.name, role=claims.role)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Get the current authenticated user.

    The authentication middleware normally resolves the user once per request
    and stores it on ``request.state.user``; the Bearer token is only decoded
    here when that has not happened.

    Raises:
        HTTPException: If token is missing, invalid, or expired
    """
    user = getattr(request.state, "user", None)
    if user is not None:
        return user

    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = jwt_service.verify_token(credentials.credentials)
        user = current_user_from_claims(claims)
    except (jwt.InvalidTokenError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    request.state.user = user
    return user


async def get_current_actor(user: CurrentUser = Depends(get_current_user)) -> Actor:
    """The authenticated user as a workflow actor."""
    return Actor(id=user.id, role=user.role)


def require_any_role(*required_roles: UserRole):
    """Create a dependency that requires any of the specified roles.

    Args:
        required_roles: Roles that are allowed access

    Returns:
        Dependency function that checks if user has any required role

    Example:
        managers_only = require_any_role(UserRole.MANAGER)

        @router.post("/{claim_id}/manager")
        async def manager_action(user: CurrentUser = Depends(managers_only)):
            ...
    """

    async def role_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in required_roles:
            LOGGER.warning(
                f"Access denied for user {user.id}: role '{user.role.value}' not in "
                f"{[r.value for r in required_roles]}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"error": "ForbiddenError", "message": "Forbidden"},
            )
        return user

    return role_checker


require_manager = require_any_role(UserRole.MANAGER)
