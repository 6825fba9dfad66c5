from typing import Annotated

from fastapi import APIRouter, Depends

from claimflow.core.dependencies import get_auth_service
from claimflow.schemas.auth import LoginRequest, LoginResponse
from claimflow.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Exchange email and password for a bearer token",
    operation_id="login",
)
async def login(
    payload: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    return await auth_service.login(payload.email, payload.password)


@router.get(
    "/logout",
    summary="Logout user",
    description="Tokens are stateless; the client discards its token",
    operation_id="logout_user",
)
async def logout_user():
    return {"message": "Logged out successfully", "status": "success"}
