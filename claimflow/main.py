"""FastAPI application entry point."""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from claimflow.api.v1.endpoints import health
from claimflow.api.v1.middleware.auth import JWTAuthenticationMiddleware
from claimflow.api.v1.router import api_router
from claimflow.core.config import settings
from claimflow.core.database import close_database, init_database
from claimflow.core.exceptions import AppError
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__, level=settings.log_level)


class RootResponse(BaseModel):
    """Root endpoint response payload."""

    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    docs: str = Field(..., description="Path to the interactive API docs")
    health: str = Field(..., description="Path to the health check endpoint")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    LOGGER.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    try:
        await asyncio.wait_for(
            init_database(auto_migrate=settings.db.auto_migrate),
            timeout=settings.db_init_timeout,
        )
        LOGGER.info("Database initialized successfully")
    except asyncio.TimeoutError:
        LOGGER.error(f"Database initialization timed out after {settings.db_init_timeout}s")
    except Exception as e:
        LOGGER.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    LOGGER.info("Shutting down application")
    await close_database()


def _error_body(error: str, message: str, **extra) -> dict:
    return {"detail": {"error": error, "message": message, **extra}}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = LOGGER.error if exc.status_code >= 500 else LOGGER.info
    log(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
        exc_info=exc.status_code >= 500,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(type(exc).__name__, exc.message),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(
            "ValidationError", "Invalid request", errors=jsonable_encoder(exc.errors())
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("InternalServerError", "Internal server error"),
    )


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Insurance claim submission and approval workflow",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


# Correlation ID middleware - before JWT auth
@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid4()))
    request.state.correlation_id = correlation_id
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


app.add_middleware(JWTAuthenticationMiddleware)

# CORS middleware - added last to ensure it wraps all other middleware/responses
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)

app.include_router(api_router, prefix=settings.api_prefix)
app.include_router(health.router, prefix="/health", tags=["Health"])
app.mount(
    settings.storage.public_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.get(
    "/",
    response_model=RootResponse,
    tags=["Root"],
    summary="Root endpoint",
    description="Get basic information about the API",
    operation_id="get_public_root_metadata",
)
async def root() -> RootResponse:
    """Root endpoint.

    Returns:
        RootResponse: Basic API information
    """
    return RootResponse(
        message="Server is running",
        version=settings.app_version,
        docs="/docs",
        health="/health",
    )


def run() -> None:
    import uvicorn

    uvicorn.run(
        "claimflow.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
