"""
Core Module

Provides core functionality shared across the application:
- Structured logging
- Custom exceptions

Usage:
======
    from reelcore.shared.core.logging import logger, get_logger
    from reelcore.shared.core.exceptions import ReelCoreException, ContentNotFoundError
"""

from reelcore.shared.core.logging import (
    logger,
    get_logger,
    log_context,
    clear_log_context,
)
from reelcore.shared.core.exceptions import (
    ReelCoreException,
    ForbiddenError,
    NotFoundError,
    ContentNotFoundError,
    UserNotFoundError,
    InvalidArgumentError,
    ConflictError,
    UpstreamUnavailableError,
    PartialFailureError,
)

__all__ = [
    # Logging
    "logger",
    "get_logger",
    "log_context",
    "clear_log_context",
    # Exceptions
    "ReelCoreException",
    "ForbiddenError",
    "NotFoundError",
    "ContentNotFoundError",
    "UserNotFoundError",
    "InvalidArgumentError",
    "ConflictError",
    "UpstreamUnavailableError",
    "PartialFailureError",
]
