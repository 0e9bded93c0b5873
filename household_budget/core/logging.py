"""
Logging configuration.

All modules log through the loguru ``logger`` re-exported here. Production
writes JSON lines to stdout; other environments get colored, human-readable
output with full tracebacks.
"""

import sys
from typing import Any, Dict

from loguru import logger

from .config import Environment, Settings, settings


def _console_options(config: Settings) -> Dict[str, Any]:
    if config.environment == Environment.PRODUCTION:
        return {"colorize": False, "serialize": True}
    return {"colorize": True, "backtrace": True, "diagnose": True}


def setup_logging(config: Settings = settings) -> None:
    """Replace loguru's default handler with the configured sinks."""
    log_settings = config.logging

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    logger.add(
        sys.stdout,
        format=log_settings.format,
        level=log_settings.level,
        **_console_options(config),
    )

    if log_settings.file_enabled:
        logger.add(
            log_settings.file_path,
            format=log_settings.format,
            level=log_settings.level,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
        )

    logger.debug(
        f"Logging configured for {config.environment.value} at level {log_settings.level}"
    )


setup_logging()
