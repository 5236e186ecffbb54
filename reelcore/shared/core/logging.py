"""
Logging Configuration

Structured logging setup using structlog for consistent, parseable logs.

Log Output:
===========
Development:
    2026-01-15 10:30:00 [warning  ] Media check inconclusive        media_ref=videos/video_1_ab error=timeout

Production (JSON):
    {"timestamp": "2026-01-15T10:30:00", "level": "warning", "event": "Media check inconclusive", ...}

Usage:
======
    from reelcore.shared.core.logging import logger, get_logger, log_context

    logger.info("Reel invalidated", content_id=str(content_id), reason="media_missing")

    sweep_logger = get_logger("reconciliation")
    sweep_logger.debug("Batch validated", size=len(batch))

    log_context(request_id=request_id, actor_id=actor_id)
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor

from reelcore.config.settings import settings


# boto3 logs every S3 request at INFO; the engine echoes SQL at INFO
_NOISY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3", "sqlalchemy.engine")


def setup_logging() -> None:
    """
    Configure structured logging for the application.

    - Development: colored console output
    - Anything else: JSON lines for log aggregation

    Third-party loggers stay at WARNING unless DEBUG is on.
    Called automatically when this module is imported.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )
    if not settings.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_development:
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name, defaults to module name if not specified

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> None:
    """
    Add context variables to all subsequent log calls in this context.

    Example:
        log_context(request_id="abc-123", actor_id="user-456")
        logger.info("Like toggled")  # Includes request_id, actor_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    """Clear all context variables bound with log_context()."""
    structlog.contextvars.clear_contextvars()


# Initialize logging on module import
setup_logging()

# Default logger instance for convenient import
logger = get_logger("reelcore")
