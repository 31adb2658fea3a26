"""Health check API routes."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from ibcrm import __version__
from ibcrm.shared.database import check_db_health

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(
        ...,
        description="Overall health status",
    )
    version: str = Field(
        default=__version__,
        description="API version",
    )


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str = Field(
        ...,
        description="Overall readiness status",
    )
    database: str = Field(
        ...,
        description="Database connection status",
    )


class LivenessResponse(BaseModel):
    """Liveness check response."""

    status: str = Field(
        default="alive",
        description="Liveness status",
    )


@router.get(
    "",
    response_model=HealthResponse,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if the service can reach its database.",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Readiness check with a single database health check.

    Answers 503 while the database is unreachable.
    """
    if await check_db_health(max_retries=1):
        return ReadinessResponse(status="ready", database="healthy")

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="not_ready", database="unhealthy")


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness check",
)
async def liveness_check() -> LivenessResponse:
    return LivenessResponse()
