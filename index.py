"""
Uvicorn Startup Script
----------------------
FastAPI application startup script.
"""

import uvicorn

from token_auth.app import create_app
from token_auth.core.config_manager import settings
from token_auth.core.logger_setup import configure_logger


if __name__ == "__main__":
    configure_logger(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        log_level=settings.log_level.lower(),
    )
