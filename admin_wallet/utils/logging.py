"""
Logging setup.

Configures the loguru logger for the admin wallet.
"""

import sys

from loguru import logger

from admin_wallet.config.settings import Settings


def setup_logging(settings: Settings) -> None:
    """Configure stderr sink and optional file sink with rotation."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format="{time:HH:mm:ss} | {level} | {name} | {message}",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="1 day",
            retention="7 days",
            level=settings.log_level.upper(),
            encoding="utf-8",
        )
