"""Health check API endpoints."""

from fastapi import APIRouter

from app.core.config import settings
from app.models.response.response import HealthCheckResponse
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Health check endpoint",
    description="Check if the service is running and healthy",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint.

    Reports ``degraded`` when a credential the pipeline needs is missing;
    the service still answers, with fallbacks.
    """
    configured = all(
        (
            settings.llm.gemini_api_key,
            settings.registry.zenrows_api_key,
            settings.storage.url,
            settings.storage.service_role_key,
        )
    )
    if not configured:
        LOGGER.debug("Health check: some integrations are not configured")

    return HealthCheckResponse(
        status="healthy" if configured else "degraded",
        version=settings.app_version,
        service=settings.app_name,
    )
