"""
Category Repository

Atomic counter operations on the per-category reel counts.

Every write is a single SQL statement evaluated by the database, so
concurrent creations and deletions in the same category never lose an
update. Nothing here reads a count and writes it back.

Common Operations:
==================
- seed_all()     → Insert a zero row for every category that is missing
- increment()    → Upsert: create at 0 if absent, then + delta
- decrement()    → - 1, floored at zero
- set_count()    → Overwrite (counter drift correction only)
- get_count()    → Current stored value
- list_all()     → All counters (category listing)
"""

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.shared.repositories.base import BaseRepository
from reelcore.shared.models.category import Category
from reelcore.shared.models.enums import ContentCategory
from reelcore.shared.utils.time import utcnow


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category counters."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Category, session)

    async def get_count(self, name: ContentCategory) -> int:
        result = await self.session.execute(
            select(Category.content_count).where(Category.name == name)
        )
        return result.scalar_one_or_none() or 0

    async def list_all(self) -> list[Category]:
        result = await self.session.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def seed_all(self) -> int:
        """
        Make sure a counter row exists for every category.

        Returns:
            Number of rows created
        """
        created = 0
        for name in ContentCategory:
            stmt = (
                self.dialect_insert()
                .values(name=name, content_count=0)
                .on_conflict_do_nothing(index_elements=[Category.name])
            )
            result = await self.session.execute(stmt)
            created += result.rowcount or 0
        return created

    async def increment(self, name: ContentCategory, delta: int = 1) -> None:
        """
        Upsert-increment a category counter.

        SQL Generated:
            INSERT INTO categories (name, content_count) VALUES (:name, :delta)
            ON CONFLICT (name) DO UPDATE
            SET content_count = categories.content_count + :delta
        """
        insert_stmt = self.dialect_insert().values(name=name, content_count=delta)
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=[Category.name],
            set_={
                "content_count": Category.content_count + delta,
                "updated_at": utcnow(),
            },
        )
        await self.session.execute(stmt)

    async def decrement(self, name: ContentCategory) -> None:
        """
        Decrement a category counter, never below zero.

        Replayed or out-of-order decrements leave the counter at 0.

        SQL Generated:
            UPDATE categories
            SET content_count = CASE WHEN content_count > 0
                                THEN content_count - 1 ELSE 0 END
            WHERE name = :name
        """
        await self.session.execute(
            update(Category)
            .where(Category.name == name)
            .values(
                content_count=case(
                    (Category.content_count > 0, Category.content_count - 1),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )

    async def set_count(self, name: ContentCategory, value: int) -> None:
        stmt = (
            self.dialect_insert()
            .values(name=name, content_count=value)
            .on_conflict_do_update(
                index_elements=[Category.name],
                set_={"content_count": value, "updated_at": utcnow()},
            )
        )
        await self.session.execute(stmt)
