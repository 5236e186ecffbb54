"""
Base Repository

Generic base repository with the CRUD operations every entity needs.
Entity-specific repositories inherit from this class.

What This Provides:
===================
- get(id)            → Fetch single record by UUID
- get_by_ids()       → Fetch multiple records by UUIDs
- create()           → Insert a new record
- dialect_insert()   → INSERT construct with ON CONFLICT support for the
                       bound dialect (PostgreSQL in production, SQLite in tests)

Generic Type Pattern:
=====================
    class UserRepository(BaseRepository[User]):
        pass

    repo = UserRepository(db)
    user = await repo.get(id)  # typed as User

flush() vs commit():
====================
Repository methods only flush. The owner of the session (get_db() for
requests, the job wrapper for background work) decides when to commit, so
a whole service operation lands in one transaction.
"""

from typing import Any, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.shared.models.base import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameter:
        ModelType: The SQLAlchemy model class this repository manages

    Attributes:
        model: The SQLAlchemy model class
        session: The async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    # ═══════════════════════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get(self, record_id: UUID) -> Optional[ModelType]:
        """
        Get a single record by its UUID.

        Returns:
            The model instance if found, None otherwise

        SQL Generated:
            SELECT * FROM content_items WHERE id = '550e8400-...'
        """
        result = await self.session.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: list[UUID]) -> list[ModelType]:
        """
        Get multiple records by their UUIDs in one IN query.

        Returns:
            Found instances (may be fewer than requested)
        """
        if not ids:
            return []

        result = await self.session.execute(select(self.model).where(self.model.id.in_(ids)))
        return list(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Flushes to obtain generated values, then refreshes so server
        defaults are loaded.

        Example:
            user = await repo.create(username="dancequeen")
            print(user.id)
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    # ═══════════════════════════════════════════════════════════════════════════
    # DIALECT HELPERS
    # ═══════════════════════════════════════════════════════════════════════════

    def dialect_insert(self) -> Any:
        """
        INSERT construct for this model that supports ON CONFLICT.

        Both PostgreSQL and SQLite expose on_conflict_do_update /
        on_conflict_do_nothing with the same signature.

        Raises:
            NotImplementedError: For dialects without ON CONFLICT support
        """
        dialect_name = self.session.get_bind().dialect.name
        if dialect_name == "postgresql":
            return postgresql.insert(self.model)
        if dialect_name == "sqlite":
            return sqlite.insert(self.model)
        raise NotImplementedError(f"Upserts are not supported on dialect '{dialect_name}'")
