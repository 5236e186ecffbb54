"""
User Repository

Database operations specific to the User model. Actors are only looked up
by id (``get``); users are managed by an upstream service.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.shared.repositories.base import BaseRepository
from reelcore.shared.models.user import User


class UserRepository(BaseRepository[User]):
    """Repository for User database operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(User, session)
