"""
Health check router.

Liveness probe reporting status, version and the configured chart
series source.
"""

from fastapi import APIRouter

from app.core.config import settings
from app.interfaces.analytics.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=settings.version,
        series_source=settings.series_source,
    )
