"""
Engagement Repository

Reads and writes the three engagement logs of a reel (likes, views,
shares). Serialization of concurrent writers is NOT handled here; callers
claim the reel's version first (see ContentItemRepository.claim_version).

Time windows are evaluated in SQL. A window (since, until] is expressed as
``ts > since AND ts <= until``.
"""

from datetime import datetime
from typing import NamedTuple, Optional
from uuid import UUID

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.shared.models.engagement import ContentLike, ContentShare, ContentView
from reelcore.shared.models.enums import SharePlatform


class WindowCounts(NamedTuple):
    """Engagement events inside one trailing window."""

    views: int
    likes: int
    shares: int


class EngagementRepository:
    """
    Repository for the like, view and share logs.

    Unlike the entity repositories this one spans three tables, so it does
    not derive from BaseRepository.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ═══════════════════════════════════════════════════════════════════════════
    # LIKES
    # ═══════════════════════════════════════════════════════════════════════════

    async def find_like(self, content_id: UUID, actor_id: UUID) -> Optional[ContentLike]:
        result = await self.session.execute(
            select(ContentLike).where(
                ContentLike.content_id == content_id,
                ContentLike.actor_id == actor_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_like(self, content_id: UUID, actor_id: UUID, liked_at: datetime) -> None:
        self.session.add(ContentLike(content_id=content_id, actor_id=actor_id, liked_at=liked_at))
        await self.session.flush()

    async def remove_like(self, content_id: UUID, actor_id: UUID) -> int:
        result = await self.session.execute(
            delete(ContentLike).where(
                ContentLike.content_id == content_id,
                ContentLike.actor_id == actor_id,
            )
        )
        return result.rowcount

    async def count_likes(self, content_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(ContentLike.id)).where(ContentLike.content_id == content_id)
        )
        return result.scalar() or 0

    # ═══════════════════════════════════════════════════════════════════════════
    # VIEWS
    # ═══════════════════════════════════════════════════════════════════════════

    async def has_view_since(self, content_id: UUID, actor_id: UUID, since: datetime) -> bool:
        """
        Whether the actor has a recorded view newer than ``since``.

        SQL Generated:
            SELECT EXISTS (SELECT * FROM content_views
                           WHERE content_id = :c AND actor_id = :a AND viewed_at > :since)
        """
        result = await self.session.execute(
            select(
                exists().where(
                    ContentView.content_id == content_id,
                    ContentView.actor_id == actor_id,
                    ContentView.viewed_at > since,
                )
            )
        )
        return bool(result.scalar())

    async def add_view(
        self,
        content_id: UUID,
        actor_id: UUID,
        viewed_at: datetime,
        watch_duration_seconds: int,
    ) -> None:
        self.session.add(
            ContentView(
                content_id=content_id,
                actor_id=actor_id,
                viewed_at=viewed_at,
                watch_duration_seconds=watch_duration_seconds,
            )
        )
        await self.session.flush()

    # ═══════════════════════════════════════════════════════════════════════════
    # SHARES
    # ═══════════════════════════════════════════════════════════════════════════

    async def add_share(
        self,
        content_id: UUID,
        actor_id: UUID,
        shared_at: datetime,
        platform: SharePlatform,
    ) -> None:
        self.session.add(
            ContentShare(
                content_id=content_id,
                actor_id=actor_id,
                shared_at=shared_at,
                platform=platform,
            )
        )
        await self.session.flush()

    async def count_shares(self, content_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(ContentShare.id)).where(ContentShare.content_id == content_id)
        )
        return result.scalar() or 0

    # ═══════════════════════════════════════════════════════════════════════════
    # WINDOWED COUNTS & CLEANUP
    # ═══════════════════════════════════════════════════════════════════════════

    async def counts_in_window(
        self,
        content_id: UUID,
        since: datetime,
        until: datetime,
    ) -> WindowCounts:
        """
        Count views, likes and shares with ``since < timestamp <= until``.

        Used by the engagement score. A like that was toggled off is gone
        from the table and no longer counts.
        """
        views = await self.session.execute(
            select(func.count(ContentView.id)).where(
                ContentView.content_id == content_id,
                ContentView.viewed_at > since,
                ContentView.viewed_at <= until,
            )
        )
        likes = await self.session.execute(
            select(func.count(ContentLike.id)).where(
                ContentLike.content_id == content_id,
                ContentLike.liked_at > since,
                ContentLike.liked_at <= until,
            )
        )
        shares = await self.session.execute(
            select(func.count(ContentShare.id)).where(
                ContentShare.content_id == content_id,
                ContentShare.shared_at > since,
                ContentShare.shared_at <= until,
            )
        )
        return WindowCounts(
            views=views.scalar() or 0,
            likes=likes.scalar() or 0,
            shares=shares.scalar() or 0,
        )

    async def delete_for_content(self, content_id: UUID) -> None:
        """Remove every engagement row of a reel (permanent delete)."""
        for model in (ContentLike, ContentView, ContentShare):
            await self.session.execute(delete(model).where(model.content_id == content_id))
