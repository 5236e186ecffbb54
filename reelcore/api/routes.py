"""
Route Registration

Centralizes all route registration for the FastAPI application.

Route Hierarchy:
================
    /health, /ready, /live  → Health checks
    /reels                  → Feed, reel lifecycle, engagement
    /categories             → Per-category active reel counts
    /admin                  → Moderation, sweeps, counter maintenance

Usage:
======
    from reelcore.api.routes import register_routes

    app = FastAPI()
    register_routes(app)
"""

from fastapi import FastAPI

from reelcore.api.handlers import admin_handler, category_handler, health_handler, reel_handler
from reelcore.shared.schemas.common import ErrorResponse


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def register_routes(app: FastAPI) -> None:
    """
    Register all API routes.

    Args:
        app: FastAPI application instance
    """
    # Health check endpoints (no prefix, root level)
    app.include_router(
        health_handler.router,
        tags=["Health"],
    )

    # Feed, lifecycle and engagement
    app.include_router(
        reel_handler.router,
        prefix="/reels",
        tags=["Reels"],
        responses=ERROR_RESPONSES,
    )

    # Moderation and maintenance
    app.include_router(
        admin_handler.router,
        prefix="/admin",
        tags=["Admin"],
        responses={**ERROR_RESPONSES, 403: {"model": ErrorResponse}},
    )

    # Category counters
    app.include_router(
        category_handler.router,
        prefix="/categories",
        tags=["Categories"],
    )
