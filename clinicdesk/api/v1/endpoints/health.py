"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from clinicdesk.config import settings
from clinicdesk.core.redis_client import check_redis_connection
from clinicdesk.database import check_database_connection
from clinicdesk.schemas.common import ApiResponse

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health check including backing services."""

    database: str
    redis: str


@router.get(
    "/health",
    response_model=ApiResponse[HealthResponse],
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> ApiResponse[HealthResponse]:
    """Report that the API process is up."""
    return ApiResponse(
        message="Service is healthy",
        data=HealthResponse(
            status="healthy",
            version=settings.app_version,
            environment=settings.environment,
        ),
    )


@router.get(
    "/health/detailed",
    response_model=ApiResponse[DetailedHealthResponse],
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check() -> ApiResponse[DetailedHealthResponse]:
    """
    Detailed health check with database and Redis status.

    Returns:
        ``degraded`` when either backing service is unreachable
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    return ApiResponse(
        data=DetailedHealthResponse(
            status="healthy" if db_healthy and redis_healthy else "degraded",
            version=settings.app_version,
            environment=settings.environment,
            database="healthy" if db_healthy else "unhealthy",
            redis="healthy" if redis_healthy else "unhealthy",
        ),
    )


@router.get("/ping", status_code=status.HTTP_200_OK, summary="Simple ping")
async def ping() -> dict[str, str]:
    """Liveness probe."""
    return {"message": "pong"}
