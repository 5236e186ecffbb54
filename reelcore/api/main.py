"""
ReelCore API Application Entry Point

FastAPI application setup with routers, middleware, and lifecycle management.

Application Architecture:
=========================
┌─────────────────────────────────────────────────────────────────────────────┐
│                           REELCORE API                                      │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│   Middleware:    CORS → Request context → Error handlers                    │
│                              │                                              │
│                              ▼                                              │
│   Routers:       Health │ Reels │ Categories │ Admin                    │
│                              │                                              │
│                              ▼                                              │
│   Dependencies:  Database │ Actor │ Services │ Blob store │ Sweep registry  │
│                              │                                              │
│                              ▼                                              │
│   Background:    feed sampling, delete cascade (BackgroundTasks)            │
│                  reconciliation sweeps (SweepRegistry tasks)                │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘

Lifecycle:
==========
1. Application starts → lifespan startup
2. Database checked and categories seeded
3. Application serves requests
4. Application stops → running sweeps cancelled, database pool closed

Usage:
======
    # Run with uvicorn
    uvicorn reelcore.api.main:app --host 0.0.0.0 --port 8000 --reload

    # Or programmatically
    from reelcore.api.main import create_application
    app = create_application()
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reelcore.api.middleware import setup_exception_handlers, setup_request_context
from reelcore.api.routes import register_routes
from reelcore.config.settings import settings
from reelcore.shared.core.logging import logger
from reelcore.shared.db import close_db, init_db
from reelcore.worker.sweeps import SweepRegistry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
    - Check the database and seed category counters

    Shutdown:
    - Stop running sweeps (progress so far is kept)
    - Close database connections
    """
    # ═══════════════════════════════════════════════════════════════════════════
    # STARTUP
    # ═══════════════════════════════════════════════════════════════════════════
    logger.info(
        "Starting ReelCore API",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.APP_ENV,
    )

    await init_db()
    logger.info("ReelCore API started successfully")

    yield

    # ═══════════════════════════════════════════════════════════════════════════
    # SHUTDOWN
    # ═══════════════════════════════════════════════════════════════════════════
    logger.info("Shutting down ReelCore API")

    await app.state.sweep_registry.shutdown()
    await close_db()

    logger.info("ReelCore API shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Content lifecycle and engagement consistency engine for short videos",
        version=settings.APP_VERSION,
        # Only show docs in development
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.sweep_registry = SweepRegistry()

    # ═══════════════════════════════════════════════════════════════════════════
    # MIDDLEWARE
    # ═══════════════════════════════════════════════════════════════════════════

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_request_context(app)

    # ═══════════════════════════════════════════════════════════════════════════
    # EXCEPTION HANDLERS
    # ═══════════════════════════════════════════════════════════════════════════

    setup_exception_handlers(app)

    # ═══════════════════════════════════════════════════════════════════════════
    # ROUTES
    # ═══════════════════════════════════════════════════════════════════════════

    register_routes(app)

    return app


# Create the application instance
app = create_application()
