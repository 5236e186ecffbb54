"""
Error Handler Middleware

Global exception handling for the API.

Error Response Format:
======================
    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Content with id 'abc-123' not found",
            "details": {}
        }
    }

Exception Handling:
===================
1. ReelCoreException subclasses → their status_code and to_dict()
2. Request validation errors (bad UUID, wrong body type) → 400 INVALID_ARGUMENT
3. Other exceptions → 500 with generic message (details hidden)

Usage:
======
    from reelcore.api.middleware.error_handler import setup_exception_handlers

    app = FastAPI()
    setup_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from reelcore.shared.core.exceptions import ReelCoreException
from reelcore.shared.core.logging import logger


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Set up global exception handlers.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ReelCoreException)
    async def reelcore_exception_handler(
        request: Request,
        exc: ReelCoreException,
    ) -> JSONResponse:
        """Handle application exceptions; each carries its own status code."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Application error",
            error_code=exc.error_code,
            message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """
        Handle request validation errors.

        These occur when path, query or body values don't match the
        declared types.
        """
        errors = jsonable_encoder(exc.errors())
        logger.warning(
            "Validation error",
            errors=errors,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": "INVALID_ARGUMENT",
                    "message": "Request validation failed",
                    "details": {"errors": errors},
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Handle unexpected exceptions.

        Full error details are logged but not exposed to clients.
        """
        logger.error(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                }
            },
        )
