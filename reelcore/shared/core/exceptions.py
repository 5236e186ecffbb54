"""
Custom Exceptions

Application-specific exceptions with HTTP status codes and error codes.

Exception Hierarchy:
====================
    ReelCoreException (base)
       │
       ├── ForbiddenError (403)            ← Moderation call by a non-moderator
       ├── NotFoundError (404)             ← Referenced content or actor absent
       │      ├── ContentNotFoundError
       │      └── UserNotFoundError
       ├── InvalidArgumentError (400)      ← Bad category, platform, sort, pagination
       ├── ConflictError (409)             ← Optimistic-concurrency retries exhausted
       ├── UpstreamUnavailableError (503)  ← Blob store unreachable (degrades to fail-open)
       └── PartialFailureError (500)       ← Fan-out cascade left some entries behind

Propagation:
============
- NotFoundError / InvalidArgumentError surface directly to the caller.
- ConflictError is raised only after the bounded internal retries.
- UpstreamUnavailableError never leaves the reconciliation pipeline.
- PartialFailureError is logged by the background job; the delete that
  scheduled the cascade has already succeeded.

Usage:
======
    from reelcore.shared.core.exceptions import ContentNotFoundError

    raise ContentNotFoundError(str(content_id))
    # {"error": {"code": "NOT_FOUND", "message": "Content with id '...' not found"}}
"""

from typing import Any, Optional


class ReelCoreException(Exception):
    """
    Base exception for all ReelCore application errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (default 500)
        error_code: Machine-readable error code
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dictionary with error details for JSON response
        """
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ForbiddenError(ReelCoreException):
    """
    Forbidden error (403).

    Raised when a non-moderator actor calls a moderation or admin operation.
    """

    def __init__(
        self,
        message: str = "Moderator role required",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN",
            details=details,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# NOT FOUND ERRORS (404)
# ═══════════════════════════════════════════════════════════════════════════════


class NotFoundError(ReelCoreException):
    """
    Resource not found error (404 Not Found).

    Example:
        raise NotFoundError("Content", content_id)
        # Message: "Content with id 'abc-123' not found"
    """

    def __init__(
        self,
        resource: str,
        resource_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class ContentNotFoundError(NotFoundError):
    """Content missing, inactive, or not visible to the caller."""

    def __init__(self, content_id: str) -> None:
        super().__init__(resource="Content", resource_id=content_id)


class UserNotFoundError(NotFoundError):
    """User not found error."""

    def __init__(self, user_id: str) -> None:
        super().__init__(resource="User", resource_id=user_id)


# ═══════════════════════════════════════════════════════════════════════════════
# INVALID ARGUMENT & CONFLICT ERRORS (400, 409)
# ═══════════════════════════════════════════════════════════════════════════════


class InvalidArgumentError(ReelCoreException):
    """
    Invalid argument error (400 Bad Request).

    Raised for values outside the closed enumerations (category, share
    platform, sort mode) and for out-of-range pagination.
    """

    def __init__(
        self,
        message: str = "Invalid argument",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_ARGUMENT",
            details=details,
        )


class ConflictError(ReelCoreException):
    """
    Resource conflict error (409 Conflict).

    Raised when a per-item version claim keeps losing to concurrent
    writers after the configured number of retries.
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# UPSTREAM & PARTIAL FAILURES (503, 500)
# ═══════════════════════════════════════════════════════════════════════════════


class UpstreamUnavailableError(ReelCoreException):
    """
    External service unavailable error (503).

    Raised by the blob store adapter for timeouts, throttling and 5xx
    responses. Reconciliation resolves it to "assume the media exists".
    """

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        msg = message or f"{service_name} service unavailable"
        extra_details = details or {}
        extra_details["service"] = service_name
        super().__init__(
            message=msg,
            status_code=503,
            error_code="UPSTREAM_UNAVAILABLE",
            details=extra_details,
        )


class PartialFailureError(ReelCoreException):
    """
    Fan-out operation completed only partially.

    Carries the identifiers that still need cleanup so a later sweep can
    pick them up.
    """

    def __init__(
        self,
        message: str,
        failed_ids: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.failed_ids = failed_ids or []
        extra_details = details or {}
        extra_details["failed_ids"] = self.failed_ids
        super().__init__(
            message=message,
            status_code=500,
            error_code="PARTIAL_FAILURE",
            details=extra_details,
        )
