"""
Logger Setup
-----------
Centralized logging configuration using loguru.
Console output for every run; a rotating file sink outside debug mode.
"""

import sys
from typing import Optional

from loguru import logger

from token_auth.core.config_manager import ApplicationSettings, settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} | {message}"
)
LOG_FILE_PATTERN = "logs/token_auth_{time:YYYY-MM-DD}.log"


def configure_logger(app_settings: Optional[ApplicationSettings] = None) -> None:
    """
    Replace loguru's default handler with the service's sinks.

    Args:
        app_settings: Settings supplying level and debug flag; defaults to the
            process-wide settings
    """
    app_settings = app_settings or settings
    level = app_settings.log_level

    logger.remove()

    # Variable values in tracebacks may include token material
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=app_settings.debug,
    )

    if not app_settings.debug:
        logger.add(
            LOG_FILE_PATTERN,
            rotation="500 MB",
            retention="10 days",
            level=level,
            format=FILE_FORMAT,
            backtrace=True,
            diagnose=False,
        )

    logger.info(
        f"Logger configured for {app_settings.app_name} with level: {level}"
    )
