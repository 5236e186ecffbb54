"""
Engagement Service

Records likes, views and shares against a reel and keeps its derived
trending flag current.

Serialization:
==============
Every mutating call first claims the reel's version:

    1. Read the reel (version = v)
    2. UPDATE content_items SET version = v + 1 WHERE id = :id AND version = v
    3. Row count 0 → another writer won; re-read and try again
       (at most ENGAGEMENT_MAX_RETRIES times, then ConflictError)
    4. Row count 1 → apply the event, then refresh_trending

Two tabs of the same user liking at the same moment therefore toggle one
after the other instead of both inserting. Everything runs in the caller's
transaction: the event and the trending refresh commit together or not at
all.

Scoring:
========
    score = views × 1 + likes × 3 + comments × 5 + shares × 7

Views, likes and shares count only when ``as_of - 24h < timestamp <= as_of``.
Comments are reported as a plain number by the comment collaborator and
contribute their all-time count.

    is_trending = score > TRENDING_THRESHOLD   (default 50)

Usage:
======
    service = EngagementService(db)
    result = await service.toggle_like(content_id, actor_id)
    result.liked, result.like_count
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from reelcore.config.settings import settings
from reelcore.shared.core.exceptions import (
    ConflictError,
    ContentNotFoundError,
    InvalidArgumentError,
    UserNotFoundError,
)
from reelcore.shared.core.logging import get_logger
from reelcore.shared.models.content_item import ContentItem
from reelcore.shared.models.enums import IndexRelation, SharePlatform
from reelcore.shared.repositories.content_item_repository import ContentItemRepository
from reelcore.shared.repositories.engagement_repository import EngagementRepository
from reelcore.shared.repositories.user_content_index_repository import UserContentIndexRepository
from reelcore.shared.repositories.user_repository import UserRepository
from reelcore.shared.utils.time import Clock, utcnow


logger = get_logger(__name__)


VIEW_WEIGHT = 1
LIKE_WEIGHT = 3
COMMENT_WEIGHT = 5
SHARE_WEIGHT = 7


@dataclass
class LikeResult:
    liked: bool
    like_count: int


@dataclass
class ViewResult:
    counted: bool


@dataclass
class ShareResult:
    share_count: int


def parse_share_platform(value: Union[str, SharePlatform, None]) -> SharePlatform:
    """
    Parse a share platform, defaulting to INTERNAL.

    Raises:
        InvalidArgumentError: For anything outside SharePlatform
    """
    if value is None:
        return SharePlatform.INTERNAL
    if isinstance(value, SharePlatform):
        return value
    try:
        return SharePlatform(value)
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid share platform '{value}'",
            details={"allowed": [p.value for p in SharePlatform]},
        )


class EngagementService:
    """
    Service applying engagement events to reels.

    Handles:
    - Like toggling (and the actor's liked index)
    - Windowed view deduplication
    - Share logging
    - Engagement score and the trending flag (its only writer)
    - Comment count updates reported by the comment collaborator
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Clock = utcnow,
        trending_threshold: Optional[int] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        self.session = session
        self.clock = clock
        self.trending_threshold = (
            settings.TRENDING_THRESHOLD if trending_threshold is None else trending_threshold
        )
        self.max_retries = settings.ENGAGEMENT_MAX_RETRIES if max_retries is None else max_retries
        self.trending_window = timedelta(hours=settings.TRENDING_WINDOW_HOURS)
        self.view_dedup_window = timedelta(hours=settings.VIEW_DEDUP_WINDOW_HOURS)

        self.content_repo = ContentItemRepository(session)
        self.engagement_repo = EngagementRepository(session)
        self.index_repo = UserContentIndexRepository(session)
        self.user_repo = UserRepository(session)

    # ═══════════════════════════════════════════════════════════════════════════
    # EVENTS
    # ═══════════════════════════════════════════════════════════════════════════

    async def toggle_like(self, content_id: UUID, actor_id: UUID) -> LikeResult:
        """
        Add the actor's like, or remove it if present.

        Each call flips state; callers wanting a specific end state must
        look at ``liked`` before calling again.

        Raises:
            UserNotFoundError: Unknown actor
            ContentNotFoundError: Reel missing or inactive
            ConflictError: Version claim kept losing
        """
        await self._require_actor(actor_id)
        item = await self._claim(content_id)
        now = self.clock()

        existing = await self.engagement_repo.find_like(content_id, actor_id)
        if existing is not None:
            await self.engagement_repo.remove_like(content_id, actor_id)
            await self.index_repo.remove_entry(actor_id, content_id, IndexRelation.LIKED)
            liked = False
        else:
            await self.engagement_repo.add_like(content_id, actor_id, now)
            await self.index_repo.add_entry(actor_id, content_id, IndexRelation.LIKED)
            liked = True

        like_count = await self.engagement_repo.count_likes(content_id)
        await self.refresh_trending(item, as_of=now)

        logger.info(
            "Like toggled",
            content_id=str(content_id),
            actor_id=str(actor_id),
            liked=liked,
            like_count=like_count,
        )
        return LikeResult(liked=liked, like_count=like_count)

    async def record_view(
        self,
        content_id: UUID,
        actor_id: UUID,
        watch_duration_seconds: int = 0,
    ) -> ViewResult:
        """
        Record a view unless the actor already viewed within the dedup window.

        The trending flag is refreshed either way; time passing alone can
        move a reel out of the trending window.
        """
        await self._require_actor(actor_id)
        if watch_duration_seconds < 0:
            raise InvalidArgumentError("watch_duration_seconds must not be negative")

        item = await self._claim(content_id)
        now = self.clock()

        already_viewed = await self.engagement_repo.has_view_since(
            content_id, actor_id, now - self.view_dedup_window
        )
        if not already_viewed:
            await self.engagement_repo.add_view(content_id, actor_id, now, watch_duration_seconds)

        await self.refresh_trending(item, as_of=now)

        logger.debug(
            "View recorded",
            content_id=str(content_id),
            actor_id=str(actor_id),
            counted=not already_viewed,
        )
        return ViewResult(counted=not already_viewed)

    async def record_share(
        self,
        content_id: UUID,
        actor_id: UUID,
        platform: Union[str, SharePlatform, None] = SharePlatform.INTERNAL,
    ) -> ShareResult:
        """
        Append a share event. Shares are never deduplicated.

        Raises:
            InvalidArgumentError: Unknown platform
        """
        parsed_platform = parse_share_platform(platform)
        await self._require_actor(actor_id)
        item = await self._claim(content_id)
        now = self.clock()

        await self.engagement_repo.add_share(content_id, actor_id, now, parsed_platform)
        share_count = await self.engagement_repo.count_shares(content_id)
        await self.refresh_trending(item, as_of=now)

        logger.info(
            "Reel shared",
            content_id=str(content_id),
            actor_id=str(actor_id),
            platform=parsed_platform.value,
            share_count=share_count,
        )
        return ShareResult(share_count=share_count)

    async def sync_comment_count(self, content_id: UUID, comments_count: int) -> bool:
        """
        Store the comment count reported by the comment collaborator.

        Returns:
            The reel's trending flag after the refresh
        """
        if comments_count < 0:
            raise InvalidArgumentError("comments_count must not be negative")

        item = await self._claim(content_id)
        await self.content_repo.set_comments_count(content_id, comments_count)
        set_committed_value(item, "comments_count", comments_count)
        return await self.refresh_trending(item)

    # ═══════════════════════════════════════════════════════════════════════════
    # SCORING
    # ═══════════════════════════════════════════════════════════════════════════

    async def compute_engagement_score(
        self,
        item: ContentItem,
        as_of: Optional[datetime] = None,
    ) -> int:
        """
        Weighted engagement score over the trailing window ending at ``as_of``.

        Example:
            10 views, 5 likes, 2 comments, 1 share in the window
            → 10 + 15 + 10 + 7 = 42
        """
        as_of = as_of or self.clock()
        counts = await self.engagement_repo.counts_in_window(
            item.id, as_of - self.trending_window, as_of
        )
        return (
            counts.views * VIEW_WEIGHT
            + counts.likes * LIKE_WEIGHT
            + (item.comments_count or 0) * COMMENT_WEIGHT
            + counts.shares * SHARE_WEIGHT
        )

    async def refresh_trending(
        self,
        item: ContentItem,
        as_of: Optional[datetime] = None,
    ) -> bool:
        """
        Recompute and store ``is_trending``. Returns the new value.

        This is the only place the flag is written.
        """
        score = await self.compute_engagement_score(item, as_of=as_of)
        is_trending = score > self.trending_threshold

        if is_trending != item.is_trending:
            await self.content_repo.set_trending(item.id, is_trending)
            set_committed_value(item, "is_trending", is_trending)
            logger.info(
                "Trending flag changed",
                content_id=str(item.id),
                score=score,
                is_trending=is_trending,
            )
        return is_trending

    # ═══════════════════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════════════════

    async def _require_actor(self, actor_id: UUID) -> None:
        if await self.user_repo.get(actor_id) is None:
            raise UserNotFoundError(str(actor_id))

    async def _claim(self, content_id: UUID) -> ContentItem:
        """Re-read the reel and claim its version, retrying lost races."""
        for attempt in range(1, self.max_retries + 1):
            item = await self.content_repo.reload(content_id)
            if item is None or not item.is_active:
                raise ContentNotFoundError(str(content_id))

            if await self.content_repo.claim_version(content_id, item.version):
                set_committed_value(item, "version", item.version + 1)
                return item

            logger.debug(
                "Version claim lost, retrying",
                content_id=str(content_id),
                attempt=attempt,
            )

        logger.warning(
            "Version claim retries exhausted",
            content_id=str(content_id),
            attempts=self.max_retries,
        )
        raise ConflictError(
            "Content is being modified concurrently, try again",
            details={"content_id": str(content_id)},
        )
