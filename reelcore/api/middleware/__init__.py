"""
API Middleware

- error_handler: maps exceptions to the standard error response
- request_context: request id in every log line
"""

from reelcore.api.middleware.error_handler import setup_exception_handlers
from reelcore.api.middleware.request_context import setup_request_context

__all__ = [
    "setup_exception_handlers",
    "setup_request_context",
]
