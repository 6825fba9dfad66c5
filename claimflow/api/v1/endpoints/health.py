"""Health check API endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from claimflow.core.config import settings
from claimflow.core.database import db_client

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Health check status")
    version: str = Field(..., description="Running application version")
    service: str = Field(..., description="Service name")
    database: str = Field(..., description="Database health status")


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Health check endpoint",
    description="Check if the service is running and its database reachable",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    db_health = await db_client.health_check()
    return HealthCheckResponse(
        status="healthy" if db_health["status"] == "healthy" else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        database=db_health["status"],
    )
