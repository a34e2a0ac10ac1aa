"""Logging setup for terrain generation."""

import logging
from typing import Optional

import structlog

from ..config.config import Settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structlog for the package.

    Uses the stdlib logging bridge so log level filtering follows the
    configured level. JSON output is the default; ``log_format="console"``
    switches to the human readable renderer.

    Args:
        settings: Application settings, read from the environment when omitted
    """
    settings = settings or Settings()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)

    if settings.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
