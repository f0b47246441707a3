"""
FastAPI Application Entry Point
-------------------------------
Builds the token service application: one TokenMaker per process, shared by
every route group that needs authentication.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from loguru import logger

from token_auth.api.health_endpoints import build_health_router
from token_auth.api.auth_endpoints import build_auth_router
from token_auth.auth.token_maker import TokenMaker, TokenMakerConfig
from token_auth.core.config_manager import ApplicationSettings, settings


def create_app(
    app_settings: Optional[ApplicationSettings] = None,
    token_maker: Optional[TokenMaker] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        app_settings: Settings to use instead of the process-wide ones
        token_maker: Pre-built TokenMaker; built from settings when omitted

    Raises:
        KeyIOError: If key material cannot be established; raised before any
            app object exists, so startup aborts
    """
    app_settings = app_settings or settings

    if token_maker is None:
        token_maker = TokenMaker(TokenMakerConfig.from_settings(app_settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {app_settings.app_name} v{app_settings.app_version}")
        logger.info(f"Debug mode: {app_settings.debug}")
        logger.info(f"Token signing key ID: {token_maker.key_id}")
        yield
        logger.info("Shutting down application")

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="Stateless token issuance and verification service",
        lifespan=lifespan,
        debug=app_settings.debug,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.token_maker = token_maker

    app.include_router(build_health_router(app_settings))
    app.include_router(
        build_auth_router(
            token_maker,
            cookie_name=app_settings.auth_cookie_name,
            skip_paths=app_settings.auth_skip_paths,
        )
    )

    @app.get("/")
    async def root():
        """Root endpoint with basic information."""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "status": "running",
            "docs": "/api/docs",
        }

    return app
