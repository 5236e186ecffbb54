"""
Database Dependency

FastAPI dependency for database sessions.

The session is committed when the handler returns and rolled back if it
raises. Handlers that schedule background work touching the same rows
commit explicitly before scheduling it.

Usage:
======
    from reelcore.api.dependencies.database import DbSession

    @router.get("/reels/{content_id}")
    async def get_reel(content_id: UUID, db: DbSession):
        ...
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.shared.db import get_db as _get_db


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Yields:
        AsyncSession: Database session for the current request
    """
    async for session in _get_db():
        yield session


# Type alias for cleaner route signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
