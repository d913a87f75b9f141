"""
Loguru logging configuration for the course app.

``COURSE_LOG_LEVEL`` sets the minimum level and ``COURSE_LOG_JSON`` switches the
stderr sink to serialized JSON records. Stdlib logging (Streamlit, urllib3,
matplotlib) is intercepted and routed through loguru.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

from course_utils.config import get_settings

_configured = False


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller depth outside logging module
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(app_name: str) -> None:
    """Install the loguru sink once per process; later calls are no-ops."""
    global _configured
    if _configured:
        return

    settings = get_settings()
    level = settings.log_level.strip().upper()

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger().setLevel(logging.INFO)

    if settings.log_json:
        handler = {"sink": sys.stderr, "serialize": True, "level": level}
    else:
        handler = {
            "sink": sys.stderr,
            "level": level,
            "colorize": True,
            "format": (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                "<level>{message}</level>"
            ),
        }

    logger.configure(handlers=[handler], extra={"app": app_name})

    # Reduce noisy third-party loggers
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    _configured = True
    logger.info("Logging configured")
