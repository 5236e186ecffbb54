"""
ContentItem Repository

Database operations for reels: lookups, the version claim that serializes
engagement writes, conditional deactivation, feed queries and the keyset
walk used by the reconciliation sweep.

Common Operations:
==================
- get_active()            → Reel that is still in the feeds
- reload()                → Re-read a reel, overwriting the identity map
- claim_version()         → UPDATE ... WHERE version = :seen (optimistic lock)
- deactivate_if_active()  → Soft removal that reports whether it transitioned
- retire_for_delete()     → Conditional is_active flip ahead of a hard delete
- feed_conditions()       → WHERE clauses for a feed request
- find_feed_page()        → One page of reels with computed engagement counts
- find_active_after()     → Keyset page ordered by id (sweep)
- count_active_by_category() → Ground truth for the counter drift sweep

Engagement counts are computed in SQL with correlated scalar subqueries so a
feed page is one round trip regardless of page size.
"""

from typing import NamedTuple, Optional
from uuid import UUID

from sqlalchemy import ColumnElement, and_, exists, false, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.shared.repositories.base import BaseRepository
from reelcore.shared.models.content_item import ContentItem, ContentTag
from reelcore.shared.models.engagement import ContentLike, ContentShare, ContentView
from reelcore.shared.models.enums import ContentCategory, FeedSort, InactiveReason, IndexRelation
from reelcore.shared.models.user_content_index import UserContentIndexEntry


class FeedRow(NamedTuple):
    """A reel plus the engagement fields computed for one viewer."""

    item: ContentItem
    likes_count: int
    views_count: int
    shares_count: int
    is_liked: bool


class ContentItemRepository(BaseRepository[ContentItem]):
    """Repository for ContentItem database operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ContentItem, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # LOOKUP METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_active(self, content_id: UUID) -> Optional[ContentItem]:
        """Get a reel only if it is still active."""
        result = await self.session.execute(
            select(ContentItem).where(
                ContentItem.id == content_id,
                ContentItem.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def reload(self, content_id: UUID) -> Optional[ContentItem]:
        """
        Re-read a reel from the database.

        ``populate_existing`` overwrites the copy already held in the
        session, which is stale after a Core UPDATE or a lost version claim.
        """
        result = await self.session.execute(
            select(ContentItem)
            .where(ContentItem.id == content_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    # ═══════════════════════════════════════════════════════════════════════════
    # CONCURRENCY & FLAG UPDATES
    # ═══════════════════════════════════════════════════════════════════════════

    async def claim_version(self, content_id: UUID, seen_version: int) -> bool:
        """
        Claim the right to write engagement state for a reel.

        Succeeds only if nobody bumped the version since it was read. On
        PostgreSQL the winning UPDATE also holds the row lock until commit,
        so competing claims on the same reel queue behind it.

        Returns:
            True if this caller now owns the write, False if it lost a race

        SQL Generated:
            UPDATE content_items SET version = version + 1
            WHERE id = :id AND version = :seen AND is_active = true
        """
        result = await self.session.execute(
            update(ContentItem)
            .where(
                ContentItem.id == content_id,
                ContentItem.version == seen_version,
                ContentItem.is_active.is_(True),
            )
            .values(version=ContentItem.version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_trending(self, content_id: UUID, is_trending: bool) -> None:
        await self.session.execute(
            update(ContentItem)
            .where(ContentItem.id == content_id)
            .values(is_trending=is_trending)
            .execution_options(synchronize_session=False)
        )

    async def set_comments_count(self, content_id: UUID, comments_count: int) -> None:
        await self.session.execute(
            update(ContentItem)
            .where(ContentItem.id == content_id)
            .values(comments_count=comments_count)
            .execution_options(synchronize_session=False)
        )

    async def deactivate_if_active(
        self,
        content_id: UUID,
        reason: InactiveReason,
    ) -> Optional[ContentCategory]:
        """
        Soft-remove a reel if, and only if, it is still active.

        Returns:
            The reel's category when this call performed the transition,
            None if the reel was already inactive or does not exist.
            Callers decrement the category counter only on a non-None result,
            which makes repeated invalidations harmless.

        The UPDATE re-checks the category it read, so a concurrent category
        change makes this call a no-op instead of decrementing the wrong
        counter. The next sweep picks the reel up again.
        """
        result = await self.session.execute(
            select(ContentItem.category).where(
                ContentItem.id == content_id,
                ContentItem.is_active.is_(True),
            )
        )
        category = result.scalar_one_or_none()
        if category is None:
            return None

        result = await self.session.execute(
            update(ContentItem)
            .where(
                ContentItem.id == content_id,
                ContentItem.is_active.is_(True),
                ContentItem.category == category,
            )
            .values(
                is_active=False,
                inactive_reason=reason,
                version=ContentItem.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return category

    async def retire_for_delete(self, content_id: UUID) -> Optional[ContentCategory]:
        """
        Flip a reel that is about to be hard-deleted to inactive.

        Same contract as deactivate_if_active: the category comes back only
        when this statement did the transition, so a reel invalidated or
        removed concurrently is never uncounted twice. No reason is recorded
        because the row is deleted in the same transaction.

        SQL Generated:
            UPDATE content_items SET is_active = false, version = version + 1
            WHERE id = :id AND is_active = true
            RETURNING category
        """
        result = await self.session.execute(
            update(ContentItem)
            .where(
                ContentItem.id == content_id,
                ContentItem.is_active.is_(True),
            )
            .values(is_active=False, version=ContentItem.version + 1)
            .returning(ContentItem.category)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    # ═══════════════════════════════════════════════════════════════════════════
    # FEED QUERIES
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    def feed_conditions(
        *,
        include_unapproved: bool = False,
        include_nsfw: bool = False,
        category: Optional[ContentCategory] = None,
        tags: Optional[list[str]] = None,
        author_id: Optional[UUID] = None,
        search: Optional[str] = None,
        trending_only: bool = False,
        saved_by: Optional[UUID] = None,
        liked_by: Optional[UUID] = None,
    ) -> list[ColumnElement[bool]]:
        """
        Build the AND-ed WHERE clauses for a feed request.

        Args:
            include_unapproved: Moderation queue, approval state ignored
            include_nsfw: Viewer opted in to NSFW reels
            category: Category equality
            tags: Match reels carrying ANY of these (already normalised) tags
            author_id: Author equality
            search: Case-insensitive substring over title, description, tags
            trending_only: Only reels currently flagged trending
            saved_by: Only reels in this user's SAVED index
            liked_by: Only reels in this user's LIKED index
        """
        conditions: list[ColumnElement[bool]] = [ContentItem.is_active.is_(True)]

        if not include_unapproved:
            conditions.append(ContentItem.is_approved.is_(True))
        if not include_nsfw:
            conditions.append(ContentItem.is_nsfw.is_(False))
        if category is not None:
            conditions.append(ContentItem.category == category)
        if tags:
            conditions.append(
                ContentItem.id.in_(
                    select(ContentTag.content_id).where(ContentTag.tag.in_(tags))
                )
            )
        if author_id is not None:
            conditions.append(ContentItem.author_id == author_id)
        if search:
            term = search.strip().lower()
            conditions.append(
                or_(
                    func.lower(ContentItem.title).contains(term, autoescape=True),
                    func.lower(ContentItem.description).contains(term, autoescape=True),
                    ContentItem.id.in_(
                        select(ContentTag.content_id).where(
                            ContentTag.tag.contains(term, autoescape=True)
                        )
                    ),
                )
            )
        if trending_only:
            conditions.append(ContentItem.is_trending.is_(True))
        index_filters = ((saved_by, IndexRelation.SAVED), (liked_by, IndexRelation.LIKED))
        for user_id, relation in index_filters:
            if user_id is not None:
                conditions.append(
                    ContentItem.id.in_(
                        select(UserContentIndexEntry.content_id).where(
                            UserContentIndexEntry.user_id == user_id,
                            UserContentIndexEntry.relation == relation,
                        )
                    )
                )

        return conditions

    async def count_matching(self, conditions: list[ColumnElement[bool]]) -> int:
        """Total number of reels matching the feed conditions."""
        result = await self.session.execute(
            select(func.count(ContentItem.id)).where(and_(*conditions))
        )
        return result.scalar() or 0

    async def find_feed_page(
        self,
        conditions: list[ColumnElement[bool]],
        *,
        sort: FeedSort,
        offset: int,
        limit: int,
        viewer_id: Optional[UUID] = None,
    ) -> list[FeedRow]:
        """
        Fetch one feed page with per-reel engagement counts.

        Ordering always ends with the id so equal timestamps page
        deterministically.

        SQL Generated (abridged):
            SELECT content_items.*,
                   (SELECT count(*) FROM content_likes WHERE content_id = content_items.id),
                   (SELECT count(*) FROM content_views WHERE ...),
                   (SELECT count(*) FROM content_shares WHERE ...),
                   EXISTS (SELECT 1 FROM content_likes WHERE ... AND actor_id = :viewer)
            FROM content_items
            WHERE is_active AND is_approved AND NOT is_nsfw ...
            ORDER BY created_at DESC, id DESC
            OFFSET :offset LIMIT :limit
        """
        likes_count = (
            select(func.count(ContentLike.id))
            .where(ContentLike.content_id == ContentItem.id)
            .correlate(ContentItem)
            .scalar_subquery()
        )
        views_count = (
            select(func.count(ContentView.id))
            .where(ContentView.content_id == ContentItem.id)
            .correlate(ContentItem)
            .scalar_subquery()
        )
        shares_count = (
            select(func.count(ContentShare.id))
            .where(ContentShare.content_id == ContentItem.id)
            .correlate(ContentItem)
            .scalar_subquery()
        )
        if viewer_id is not None:
            is_liked = exists().where(
                ContentLike.content_id == ContentItem.id,
                ContentLike.actor_id == viewer_id,
            )
        else:
            is_liked = false()

        query = (
            select(
                ContentItem,
                likes_count.label("likes_count"),
                views_count.label("views_count"),
                shares_count.label("shares_count"),
                is_liked.label("is_liked"),
            )
            .where(and_(*conditions))
            .order_by(*self._order_by(sort))
            .offset(offset)
            .limit(limit)
        )

        result = await self.session.execute(query)
        return [
            FeedRow(
                item=row[0],
                likes_count=int(row.likes_count or 0),
                views_count=int(row.views_count or 0),
                shares_count=int(row.shares_count or 0),
                is_liked=bool(row.is_liked),
            )
            for row in result.all()
        ]

    @staticmethod
    def _order_by(sort: FeedSort) -> list[ColumnElement]:
        if sort == FeedSort.OLDEST:
            return [ContentItem.created_at.asc(), ContentItem.id.asc()]
        if sort == FeedSort.TRENDING:
            return [
                ContentItem.is_trending.desc(),
                ContentItem.created_at.desc(),
                ContentItem.id.desc(),
            ]
        # NEWEST, and POPULAR which has no popularity index to sort by
        return [ContentItem.created_at.desc(), ContentItem.id.desc()]

    # ═══════════════════════════════════════════════════════════════════════════
    # SWEEP & LEDGER SUPPORT
    # ═══════════════════════════════════════════════════════════════════════════

    async def find_active_after(
        self,
        after_id: Optional[UUID],
        limit: int,
    ) -> list[ContentItem]:
        """
        Keyset page of active reels ordered by id.

        Rows deactivated behind the cursor do not shift later pages, which
        offset pagination would.
        """
        query = select(ContentItem).where(ContentItem.is_active.is_(True))
        if after_id is not None:
            query = query.where(ContentItem.id > after_id)
        query = query.order_by(ContentItem.id.asc()).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_active_by_category(self) -> dict[ContentCategory, int]:
        """
        Number of active reels per category.

        SQL Generated:
            SELECT category, count(id) FROM content_items
            WHERE is_active = true GROUP BY category
        """
        result = await self.session.execute(
            select(ContentItem.category, func.count(ContentItem.id))
            .where(ContentItem.is_active.is_(True))
            .group_by(ContentItem.category)
        )
        return {category: count for category, count in result.all()}


__all__ = ["ContentItemRepository", "FeedRow"]
