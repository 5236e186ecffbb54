"""
Counter Ledger

Keeps the denormalized counts consistent with the set of active reels:

- categories.content_count   == active reels in that category
- user_content_index         == reels each user authored / saved / liked

Counters are adjusted incrementally with atomic SQL (see CategoryRepository).
A separate drift sweep, ``reconcile_counters``, recomputes the truth and
corrects any counter that wandered off, logging each correction.

Lifecycle hooks:
================
    create              → +1 category, add AUTHORED entry
    deactivate          → -1 category (floored)
    permanent delete    → -1 category if still active, drop AUTHORED entry,
                          then cascade_unlink in the background
    category change     → -1 old, +1 new in the SAME transaction

Fan-out cascade:
================
Removing a deleted reel from every other user's saved/liked entries touches
an unbounded number of users. ``cascade_unlink`` runs it in chunks, each in
its own short transaction, and raises PartialFailureError listing the users
whose chunk failed. The reel itself is already gone by then; stale index
entries are tolerated by readers until a later sweep retries them.
"""

from dataclasses import dataclass
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.config.settings import settings
from reelcore.shared.core.exceptions import (
    ContentNotFoundError,
    PartialFailureError,
    UserNotFoundError,
)
from reelcore.shared.core.logging import get_logger
from reelcore.shared.models.content_item import ContentItem
from reelcore.shared.models.enums import ContentCategory, IndexRelation
from reelcore.shared.repositories.category_repository import CategoryRepository
from reelcore.shared.repositories.content_item_repository import ContentItemRepository
from reelcore.shared.repositories.user_content_index_repository import UserContentIndexRepository
from reelcore.shared.repositories.user_repository import UserRepository


logger = get_logger(__name__)


SessionFactory = Callable[[], AsyncSession]

CASCADE_RELATIONS = [IndexRelation.SAVED, IndexRelation.LIKED]


@dataclass
class SaveResult:
    is_saved: bool
    saved_count: int


class CounterLedger:
    """
    Atomic, idempotent maintenance of category counters and user indexes.

    All methods work inside the caller's session; the caller commits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.category_repo = CategoryRepository(session)
        self.index_repo = UserContentIndexRepository(session)
        self.content_repo = ContentItemRepository(session)
        self.user_repo = UserRepository(session)

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE HOOKS
    # ═══════════════════════════════════════════════════════════════════════════

    async def on_create(self, item: ContentItem) -> None:
        """Count a newly created reel and index it under its author."""
        await self.category_repo.increment(item.category)
        await self.index_repo.add_entry(item.author_id, item.id, IndexRelation.AUTHORED)
        logger.debug("Ledger create", content_id=str(item.id), category=item.category.value)

    async def on_permanent_delete(
        self,
        item: ContentItem,
        retired_category: Optional[ContentCategory],
    ) -> None:
        """
        Uncount a reel that is about to be hard-deleted.

        ``retired_category`` is what ContentItemRepository.retire_for_delete
        returned: set only when the delete itself flipped the reel inactive.
        A reel deactivated earlier, or concurrently by reconciliation or a
        moderator, was uncounted by that transition and is not touched here.
        """
        if retired_category is not None:
            await self.category_repo.decrement(retired_category)
        await self.index_repo.remove_entry(item.author_id, item.id, IndexRelation.AUTHORED)
        logger.debug(
            "Ledger permanent delete",
            content_id=str(item.id),
            category=item.category.value,
            was_active=retired_category is not None,
        )

    async def on_deactivate(self, category: ContentCategory) -> None:
        """Uncount a reel that just transitioned to inactive."""
        await self.category_repo.decrement(category)

    async def on_category_change(
        self,
        item: ContentItem,
        old_category: ContentCategory,
        new_category: ContentCategory,
    ) -> None:
        """
        Move one count from ``old_category`` to ``new_category``.

        Both statements run in the caller's transaction, so readers see
        either neither adjustment or both. Inactive reels are not counted
        anywhere and need no adjustment.
        """
        if old_category == new_category or not item.is_active:
            return

        await self.category_repo.decrement(old_category)
        await self.category_repo.increment(new_category)
        logger.info(
            "Ledger category change",
            content_id=str(item.id),
            old_category=old_category.value,
            new_category=new_category.value,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # SAVED INDEX
    # ═══════════════════════════════════════════════════════════════════════════

    async def toggle_saved(self, user_id: UUID, content_id: UUID) -> SaveResult:
        """
        Save the reel for the user, or unsave it if already saved.

        Unsaving works on inactive reels too, so entries for reels taken
        out of the feeds can still be cleared by their owner.

        Raises:
            UserNotFoundError: Unknown user
            ContentNotFoundError: Reel missing, or inactive when saving
        """
        if await self.user_repo.get(user_id) is None:
            raise UserNotFoundError(str(user_id))
        item = await self.content_repo.reload(content_id)
        if item is None:
            raise ContentNotFoundError(str(content_id))

        if await self.index_repo.remove_entry(user_id, content_id, IndexRelation.SAVED):
            is_saved = False
        elif not item.is_active:
            raise ContentNotFoundError(str(content_id))
        else:
            await self.index_repo.add_entry(user_id, content_id, IndexRelation.SAVED)
            is_saved = True

        saved_count = await self.index_repo.count_for_user(user_id, IndexRelation.SAVED)
        logger.info(
            "Save toggled",
            user_id=str(user_id),
            content_id=str(content_id),
            is_saved=is_saved,
        )
        return SaveResult(is_saved=is_saved, saved_count=saved_count)

    async def saved_ids_for(self, user_id: UUID, content_ids: list[UUID]) -> set[UUID]:
        """Which of ``content_ids`` the user has saved."""
        return await self.index_repo.content_ids_for_user(
            user_id, IndexRelation.SAVED, content_ids
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # DRIFT SWEEP
    # ═══════════════════════════════════════════════════════════════════════════

    async def reconcile_counters(self) -> dict[ContentCategory, tuple[int, int]]:
        """
        Recompute every category count and correct drift.

        Returns:
            {category: (stored_before, actual)} for each corrected category
        """
        actual_counts = await self.content_repo.count_active_by_category()
        corrections: dict[ContentCategory, tuple[int, int]] = {}

        for category in ContentCategory:
            stored = await self.category_repo.get_count(category)
            actual = actual_counts.get(category, 0)
            if stored == actual:
                continue

            await self.category_repo.set_count(category, actual)
            corrections[category] = (stored, actual)
            logger.warning(
                "Category counter drift corrected",
                category=category.value,
                stored=stored,
                actual=actual,
            )

        logger.info("Counter reconciliation finished", corrected=len(corrections))
        return corrections

    async def prune_dangling_index_entries(self) -> int:
        """
        Remove saved/liked/authored entries pointing at deleted reels.

        This is the cleanup sweep for fan-out cascades that ended in
        PartialFailureError.
        """
        removed = await self.index_repo.remove_dangling()
        if removed:
            logger.warning("Dangling index entries removed", removed=removed)
        return removed


# ═══════════════════════════════════════════════════════════════════════════════
# FAN-OUT CASCADE
# ═══════════════════════════════════════════════════════════════════════════════


async def cascade_unlink(
    content_id: UUID,
    session_factory: SessionFactory,
    chunk_size: int = settings.CASCADE_CHUNK_SIZE,
) -> int:
    """
    Remove a deleted reel from every user's saved and liked entries.

    Each chunk of users is handled in its own transaction; a failing chunk
    does not stop the others.

    Args:
        content_id: The reel that was deleted
        session_factory: Opens a fresh session per chunk
        chunk_size: Users per transaction

    Returns:
        Number of index entries removed

    Raises:
        PartialFailureError: Some chunks failed; ``failed_ids`` lists their users
    """
    async with session_factory() as session:
        holders = await UserContentIndexRepository(session).holders_of(
            content_id, CASCADE_RELATIONS
        )

    removed = 0
    failed_user_ids: list[str] = []

    for start in range(0, len(holders), chunk_size):
        chunk = holders[start : start + chunk_size]
        try:
            async with session_factory() as session:
                chunk_removed = await UserContentIndexRepository(session).remove_for_users(
                    content_id, chunk, CASCADE_RELATIONS
                )
                await session.commit()
            removed += chunk_removed
        except SQLAlchemyError as e:
            logger.warning(
                "Cascade chunk failed",
                content_id=str(content_id),
                chunk_start=start,
                chunk_size=len(chunk),
                error=str(e),
            )
            failed_user_ids.extend(str(user_id) for user_id in chunk)

    if failed_user_ids:
        raise PartialFailureError(
            f"Cascade for content {content_id} left {len(failed_user_ids)} users unprocessed",
            failed_ids=failed_user_ids,
            details={"content_id": str(content_id), "removed": removed},
        )

    logger.info(
        "Cascade completed",
        content_id=str(content_id),
        users=len(holders),
        removed=removed,
    )
    return removed
