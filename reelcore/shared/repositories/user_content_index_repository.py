"""
UserContentIndex Repository

Per-user authored / saved / liked reel ids.

Inserts are idempotent (ON CONFLICT DO NOTHING on the unique triple), so a
retried ledger call never creates a duplicate entry.
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.shared.repositories.base import BaseRepository
from reelcore.shared.models.content_item import ContentItem
from reelcore.shared.models.enums import IndexRelation
from reelcore.shared.models.user_content_index import UserContentIndexEntry


class UserContentIndexRepository(BaseRepository[UserContentIndexEntry]):
    """Repository for per-user content index entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(UserContentIndexEntry, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # SINGLE ENTRY
    # ═══════════════════════════════════════════════════════════════════════════

    async def add_entry(self, user_id: UUID, content_id: UUID, relation: IndexRelation) -> bool:
        """
        Add an index entry if absent.

        Returns:
            True if a row was inserted, False if it already existed
        """
        stmt = (
            self.dialect_insert()
            .values(user_id=user_id, content_id=content_id, relation=relation)
            .on_conflict_do_nothing(
                index_elements=[
                    UserContentIndexEntry.user_id,
                    UserContentIndexEntry.content_id,
                    UserContentIndexEntry.relation,
                ]
            )
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def remove_entry(self, user_id: UUID, content_id: UUID, relation: IndexRelation) -> bool:
        result = await self.session.execute(
            delete(UserContentIndexEntry).where(
                UserContentIndexEntry.user_id == user_id,
                UserContentIndexEntry.content_id == content_id,
                UserContentIndexEntry.relation == relation,
            )
        )
        return (result.rowcount or 0) > 0

    async def has_entry(self, user_id: UUID, content_id: UUID, relation: IndexRelation) -> bool:
        result = await self.session.execute(
            select(func.count(UserContentIndexEntry.id)).where(
                UserContentIndexEntry.user_id == user_id,
                UserContentIndexEntry.content_id == content_id,
                UserContentIndexEntry.relation == relation,
            )
        )
        return (result.scalar() or 0) > 0

    # ═══════════════════════════════════════════════════════════════════════════
    # USER-SIDE QUERIES
    # ═══════════════════════════════════════════════════════════════════════════

    async def count_for_user(self, user_id: UUID, relation: IndexRelation) -> int:
        result = await self.session.execute(
            select(func.count(UserContentIndexEntry.id)).where(
                UserContentIndexEntry.user_id == user_id,
                UserContentIndexEntry.relation == relation,
            )
        )
        return result.scalar() or 0

    async def content_ids_for_user(
        self,
        user_id: UUID,
        relation: IndexRelation,
        among: list[UUID],
    ) -> set[UUID]:
        """
        Which of ``among`` the user holds under ``relation``.

        One query per feed page, used for the ``is_saved`` flag.
        """
        if not among:
            return set()

        result = await self.session.execute(
            select(UserContentIndexEntry.content_id).where(
                UserContentIndexEntry.user_id == user_id,
                UserContentIndexEntry.relation == relation,
                UserContentIndexEntry.content_id.in_(among),
            )
        )
        return set(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════════
    # CONTENT-SIDE QUERIES (fan-out cascade)
    # ═══════════════════════════════════════════════════════════════════════════

    async def holders_of(self, content_id: UUID, relations: list[IndexRelation]) -> list[UUID]:
        """Distinct users holding the reel under any of ``relations``."""
        result = await self.session.execute(
            select(UserContentIndexEntry.user_id)
            .where(
                UserContentIndexEntry.content_id == content_id,
                UserContentIndexEntry.relation.in_(relations),
            )
            .distinct()
            .order_by(UserContentIndexEntry.user_id)
        )
        return list(result.scalars().all())

    async def remove_for_users(
        self,
        content_id: UUID,
        user_ids: list[UUID],
        relations: list[IndexRelation],
    ) -> int:
        """
        Pull a reel id out of several users' indexes.

        Returns:
            Number of entries removed
        """
        if not user_ids:
            return 0

        result = await self.session.execute(
            delete(UserContentIndexEntry).where(
                UserContentIndexEntry.content_id == content_id,
                UserContentIndexEntry.user_id.in_(user_ids),
                UserContentIndexEntry.relation.in_(relations),
            )
        )
        return result.rowcount or 0

    async def remove_dangling(self) -> int:
        """
        Delete entries whose reel no longer exists.

        Catches anything a failed fan-out cascade left behind.

        SQL Generated:
            DELETE FROM user_content_index
            WHERE content_id NOT IN (SELECT id FROM content_items)
        """
        result = await self.session.execute(
            delete(UserContentIndexEntry)
            .where(UserContentIndexEntry.content_id.not_in(select(ContentItem.id)))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
