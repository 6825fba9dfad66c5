from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from claimflow.core.auth import get_current_user
from claimflow.core.dependencies import get_user_service
from claimflow.schemas.auth import CurrentUser
from claimflow.schemas.enums import UserRole
from claimflow.schemas.users import UserListResponse, UserResponse
from claimflow.services.user_service import UserService
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="List users selectable as approvers or signers",
    operation_id="list_users",
)
async def list_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    role: Annotated[Optional[UserRole], Query()] = None,
) -> UserListResponse:
    users = await user_service.list_users(role)
    return UserListResponse(users=users)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
    description="Get the current authenticated user's profile information",
    operation_id="get_current_user_profile",
)
async def get_current_user_profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    user = await user_service.get_user(current_user.id)
    return UserResponse.model_validate(user)
