from fastapi import APIRouter

from claimflow.api.v1.endpoints import auth, claims, fppa04, users

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(claims.router, prefix="/claims", tags=["Claims"])
api_router.include_router(fppa04.router, prefix="/fppa04", tags=["FPPA04"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])

__all__ = ["api_router"]
