"""
API Handlers

Route handlers for the ReelCore API.

Handlers follow the pattern:
- Parse HTTP requests
- Call service methods
- Format HTTP responses

All business logic is delegated to the service layer.
"""

from reelcore.api.handlers import (
    admin_handler,
    category_handler,
    health_handler,
    reel_handler,
)

__all__ = [
    "admin_handler",
    "category_handler",
    "health_handler",
    "reel_handler",
]
