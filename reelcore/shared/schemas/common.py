"""
Common Schemas

Shared schemas used across the API for consistent responses.

Schema Types:
=============
- BaseSchema: Base with common config (from_attributes, populate_by_name)
- PaginationMeta: page / page_size / total / total_pages / has_next / has_prev
- Standard responses: ErrorResponse, HealthResponse

Usage:
======
    from reelcore.shared.schemas.common import BaseSchema, PaginationMeta

    return FeedResponse(
        items=items,
        pagination=PaginationMeta.from_page(page),
    )
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from reelcore.shared.utils.time import utcnow


class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    Provides:
    - from_attributes: Allow creating from ORM models
    - populate_by_name: Allow field population by name or alias
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# PAGINATION
# ═══════════════════════════════════════════════════════════════════════════════


class PaginationMeta(BaseModel):
    """Pagination metadata in feed responses."""

    page: int = Field(description="Current page number (1-indexed)")
    page_size: int = Field(description="Items per page")
    total: int = Field(description="Total number of matching reels")
    total_pages: int = Field(description="Total number of pages")
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, page: Any) -> "PaginationMeta":
        """Build from a FeedPage."""
        return cls(
            page=page.page,
            page_size=page.page_size,
            total=page.total,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# STANDARD RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorDetail(BaseModel):
    """Error detail structure in error responses."""

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Additional error context",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response schema.

    Example:
        {
            "error": {
                "code": "NOT_FOUND",
                "message": "Content with id 'abc-123' not found",
                "details": {}
            }
        }
    """

    error: ErrorDetail


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str = "healthy"
    service: str = "reelcore"
    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=utcnow)
