from typing import Optional
from uuid import UUID

from pydantic import Field

from claimflow.schemas.common import CamelModel
from claimflow.schemas.enums import UserRole


class UserResponse(CamelModel):
    """Public view of a user; the password hash is never part of it."""

    id: UUID
    name: str
    email: str
    role: UserRole
    position: Optional[str] = None
    employee_number: Optional[str] = None


class UserListResponse(CamelModel):
    users: list[UserResponse] = Field(default_factory=list)


class UserCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    role: UserRole = UserRole.USER
    position: Optional[str] = None
    employee_number: Optional[str] = None
    password: Optional[str] = None
