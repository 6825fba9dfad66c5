"""Authentication schemas.

This module defines Pydantic models for login, JWT claims and the
per-request authenticated user.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from claimflow.schemas.common import CamelModel
from claimflow.schemas.enums import UserRole
from claimflow.schemas.users import UserResponse


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class LoginResponse(CamelModel):
    user: UserResponse
    token: str = Field(..., description="Bearer token for the Authorization header")


class JWTClaims(BaseModel):
    """Claims carried by an access token issued by this service."""

    sub: str = Field(..., description="Subject (user ID)")
    email: str = Field(..., description="User email")
    name: str = Field(..., description="Display name")
    role: UserRole = Field(..., description="User role")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")


class CurrentUser(BaseModel):
    """Current authenticated user information."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    name: str = Field(..., description="Display name")
    role: UserRole = Field(default=UserRole.USER, description="User role")
    employee_number: Optional[str] = None
