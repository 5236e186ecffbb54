"""
Feed Service

Translates feed requests into one deterministic query and shapes the rows.

Filters (all AND-ed):
=====================
    is_active = true                   always
    is_approved = true                 unless a moderator asks for the moderation queue
    is_nsfw = false                    unless the viewer opted in
    category = :category               optional
    tag IN (:tags)                     optional, any of the given tags
    author_id = :author                optional
    title / description / tags ILIKE  optional free text
    is_trending = true                 optional (trending listing)
    id IN user_content_index           optional, one user's SAVED or LIKED reels

Sorts:
======
    newest    created_at DESC, id DESC
    oldest    created_at ASC,  id ASC
    trending  is_trending DESC, created_at DESC, id DESC
    popular   same as newest (no popularity index exists)

Output:
=======
Each entry carries likes/comments/views/shares counts and the viewer's
is_liked / is_saved flags. Raw engagement logs never leave the service.

Usage:
======
    service = FeedService(db)
    page = await service.list_feed(FeedQuery(page=2, limit=20), viewer)
    page.total_pages, page.has_next
"""

import math
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.config.settings import settings
from reelcore.shared.core.exceptions import ContentNotFoundError, InvalidArgumentError
from reelcore.shared.core.logging import get_logger
from reelcore.shared.models.content_item import ContentItem
from reelcore.shared.models.enums import ContentCategory, FeedSort
from reelcore.shared.models.user import User
from reelcore.shared.repositories.content_item_repository import ContentItemRepository, FeedRow
from reelcore.shared.services.counter_ledger import CounterLedger
from reelcore.shared.services.engagement_service import EngagementService


logger = get_logger(__name__)


@dataclass
class Viewer:
    """Who is asking. Anonymous viewers have no user_id."""

    user_id: Optional[UUID] = None
    show_nsfw: bool = False
    is_moderator: bool = False

    @classmethod
    def anonymous(cls) -> "Viewer":
        return cls()

    @classmethod
    def from_user(cls, user: User) -> "Viewer":
        return cls(user_id=user.id, show_nsfw=user.show_nsfw, is_moderator=user.is_moderator)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


@dataclass
class FeedQuery:
    """Feed request parameters, already parsed into domain types."""

    page: int = 1
    limit: Optional[int] = None
    sort: FeedSort = FeedSort.NEWEST
    category: Optional[ContentCategory] = None
    tags: list[str] = field(default_factory=list)
    author_id: Optional[UUID] = None
    search: Optional[str] = None
    trending_only: bool = False
    moderation_queue: bool = False
    saved_by: Optional[UUID] = None
    liked_by: Optional[UUID] = None


@dataclass
class FeedEntry:
    """A reel as shown to one viewer."""

    item: ContentItem
    likes_count: int
    comments_count: int
    views_count: int
    shares_count: int
    is_liked: bool
    is_saved: bool


@dataclass
class FeedPage:
    """One page of a feed plus pagination info."""

    items: list[FeedEntry]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool


class FeedService:
    """
    Service for feed listing and single-reel reads.

    Handles:
    - Filter composition, sorting and pagination
    - Engagement fields per viewer
    - Single reel reads (which record a view for signed-in viewers)
    """

    def __init__(
        self,
        session: AsyncSession,
        engagement_service: Optional[EngagementService] = None,
    ) -> None:
        self.session = session
        self.content_repo = ContentItemRepository(session)
        self.ledger = CounterLedger(session)
        self.engagement_service = engagement_service or EngagementService(session)

    async def list_feed(self, query: FeedQuery, viewer: Viewer) -> FeedPage:
        """
        Return one page of reels matching ``query`` for ``viewer``.

        Raises:
            InvalidArgumentError: page < 1, or limit outside 1..FEED_MAX_PAGE_SIZE
        """
        page_size = query.limit if query.limit is not None else settings.FEED_DEFAULT_PAGE_SIZE
        self._validate_pagination(query.page, page_size)

        conditions = self.content_repo.feed_conditions(
            include_unapproved=query.moderation_queue and viewer.is_moderator,
            include_nsfw=viewer.show_nsfw,
            category=query.category,
            tags=query.tags,
            author_id=query.author_id,
            search=query.search,
            trending_only=query.trending_only,
            saved_by=query.saved_by,
            liked_by=query.liked_by,
        )

        total = await self.content_repo.count_matching(conditions)
        rows = await self.content_repo.find_feed_page(
            conditions,
            sort=query.sort,
            offset=(query.page - 1) * page_size,
            limit=page_size,
            viewer_id=viewer.user_id,
        )
        items = await self._shape(rows, viewer)

        total_pages = math.ceil(total / page_size) if total else 0
        logger.debug(
            "Feed listed",
            page=query.page,
            page_size=page_size,
            total=total,
            sort=query.sort.value,
        )
        return FeedPage(
            items=items,
            total=total,
            page=query.page,
            page_size=page_size,
            total_pages=total_pages,
            has_next=query.page < total_pages,
            has_prev=query.page > 1,
        )

    async def get_item(
        self,
        content_id: UUID,
        viewer: Viewer,
        *,
        record_view: bool = True,
    ) -> FeedEntry:
        """
        Read a single reel.

        Signed-in viewers get a (deduplicated) view recorded first, so the
        returned counts include it.

        Raises:
            ContentNotFoundError: Missing, inactive, or unapproved for a non-moderator
        """
        item = await self.content_repo.get_active(content_id)
        if item is None or (not item.is_approved and not viewer.is_moderator):
            raise ContentNotFoundError(str(content_id))

        if record_view and viewer.is_authenticated:
            await self.engagement_service.record_view(content_id, viewer.user_id)

        rows = await self.content_repo.find_feed_page(
            [ContentItem.id == content_id],
            sort=FeedSort.NEWEST,
            offset=0,
            limit=1,
            viewer_id=viewer.user_id,
        )
        if not rows:
            raise ContentNotFoundError(str(content_id))

        entries = await self._shape(rows, viewer)
        return entries[0]

    # ═══════════════════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    def _validate_pagination(page: int, page_size: int) -> None:
        if page < 1:
            raise InvalidArgumentError("page must be >= 1", details={"page": page})
        if page_size < 1 or page_size > settings.FEED_MAX_PAGE_SIZE:
            raise InvalidArgumentError(
                f"limit must be between 1 and {settings.FEED_MAX_PAGE_SIZE}",
                details={"limit": page_size},
            )

    async def _shape(self, rows: list[FeedRow], viewer: Viewer) -> list[FeedEntry]:
        if viewer.user_id is not None:
            saved_ids = await self.ledger.saved_ids_for(viewer.user_id, [r.item.id for r in rows])
        else:
            saved_ids = set()

        return [
            FeedEntry(
                item=row.item,
                likes_count=row.likes_count,
                comments_count=row.item.comments_count,
                views_count=row.views_count,
                shares_count=row.shares_count,
                is_liked=row.is_liked,
                is_saved=row.item.id in saved_ids,
            )
            for row in rows
        ]
