"""Shared logging utilities for structured logging across the application.

structlog is configured once per process to emit JSON lines on stdout through
the standard library. Events are named in snake_case (``transcript_fetched``)
and carry their context as keyword arguments.
"""

import logging
import os
import sys

import structlog

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Args:
        level: Log level name. Defaults to ``LOG_LEVEL`` or INFO.
    """
    global _configured

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_name)
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module).

    Returns:
        structlog logger bound to ``name``.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("transcript_fetched", video_id="dQw4w9WgXcQ", length=5120)
        >>> logger.bind(video_id="dQw4w9WgXcQ").warning("caption_fetch_failed")
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
