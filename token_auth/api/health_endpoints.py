"""
Health Check Endpoints
---------------------
Liveness endpoint for the token service.
"""

from datetime import datetime, timezone
from fastapi import APIRouter
from loguru import logger

from token_auth.core.config_manager import ApplicationSettings
from token_auth.models.auth_models import HealthStatus


def build_health_router(app_settings: ApplicationSettings) -> APIRouter:
    """Health routes reporting the version of the app they are mounted on."""
    router = APIRouter(prefix="/api/v1/health", tags=["Health"])

    @router.get("/", response_model=HealthStatus)
    async def health_check():
        """
        Basic health check endpoint.
        Returns service status and version information.
        """
        logger.debug("Health check requested")

        return HealthStatus(
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            version=app_settings.app_version,
        )

    return router
