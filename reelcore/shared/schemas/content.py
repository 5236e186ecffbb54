"""
Reel-related Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from reelcore.shared.models.enums import ContentCategory
from reelcore.shared.schemas.common import BaseSchema, PaginationMeta


# ═══════════════════════════════════════════════════════════════════════════════
# FEED
# ═══════════════════════════════════════════════════════════════════════════════


class AuthorResponse(BaseSchema):
    """Public author info embedded in a reel."""

    id: str
    username: str


class ReelResponse(BaseModel):
    """
    A reel as shown to one viewer.

    Counts are derived from the engagement logs; the logs themselves are
    never part of a response.
    """

    id: str
    title: str
    description: str
    category: ContentCategory
    tags: List[str]
    is_nsfw: bool
    media_ref: str
    thumbnail_ref: Optional[str] = None
    duration_seconds: Optional[int] = None
    author: AuthorResponse
    likes_count: int
    comments_count: int
    views_count: int
    shares_count: int
    is_liked: bool
    is_saved: bool
    is_trending: bool
    is_approved: bool
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: Any) -> "ReelResponse":
        """Build from a FeedEntry."""
        item = entry.item
        return cls(
            id=str(item.id),
            title=item.title,
            description=item.description,
            category=item.category,
            tags=item.tag_names,
            is_nsfw=item.is_nsfw,
            media_ref=item.media_ref,
            thumbnail_ref=item.thumbnail_ref,
            duration_seconds=item.duration_seconds,
            author=AuthorResponse(id=str(item.author.id), username=item.author.username),
            likes_count=entry.likes_count,
            comments_count=entry.comments_count,
            views_count=entry.views_count,
            shares_count=entry.shares_count,
            is_liked=entry.is_liked,
            is_saved=entry.is_saved,
            is_trending=item.is_trending,
            is_approved=item.is_approved,
            created_at=item.created_at,
        )


class FeedResponse(BaseModel):
    """One page of a feed."""

    items: List[ReelResponse]
    pagination: PaginationMeta


# ═══════════════════════════════════════════════════════════════════════════════
# LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════════


class ReelDetailResponse(BaseModel):
    """Reel record after create/update, without viewer-specific fields."""

    id: str
    author_id: str
    title: str
    description: str
    category: ContentCategory
    tags: List[str]
    is_nsfw: bool
    media_ref: str
    thumbnail_ref: Optional[str] = None
    file_size_bytes: Optional[int] = None
    is_active: bool
    is_approved: bool
    is_trending: bool
    version: int
    created_at: datetime

    @classmethod
    def from_item(cls, item: Any) -> "ReelDetailResponse":
        """Build from a ContentItem."""
        return cls(
            id=str(item.id),
            author_id=str(item.author_id),
            title=item.title,
            description=item.description,
            category=item.category,
            tags=item.tag_names,
            is_nsfw=item.is_nsfw,
            media_ref=item.media_ref,
            thumbnail_ref=item.thumbnail_ref,
            file_size_bytes=item.file_size_bytes,
            is_active=item.is_active,
            is_approved=item.is_approved,
            is_trending=item.is_trending,
            version=item.version,
            created_at=item.created_at,
        )


class UpdateReelRequest(BaseModel):
    """Partial metadata update; omitted fields stay unchanged."""

    title: Optional[str] = Field(None, description="New title (1-100 chars)")
    description: Optional[str] = Field(None, description="New description (max 500 chars)")
    category: Optional[str] = Field(None, description="New category")
    tags: Optional[List[str]] = Field(None, description="Replaces all tags")
    is_nsfw: Optional[bool] = None


class DeleteReelResponse(BaseModel):
    id: str
    deleted: bool = True


# ═══════════════════════════════════════════════════════════════════════════════
# ENGAGEMENT
# ═══════════════════════════════════════════════════════════════════════════════


class LikeResponse(BaseModel):
    liked: bool
    like_count: int


class ViewRequest(BaseModel):
    watch_duration_seconds: int = Field(0, description="Seconds watched")


class ViewResponse(BaseModel):
    counted: bool = Field(description="False when deduplicated")


class ShareRequest(BaseModel):
    platform: Optional[str] = Field(None, description="Defaults to 'internal'")


class ShareResponse(BaseModel):
    share_count: int


class SaveResponse(BaseModel):
    is_saved: bool
    saved_count: int


# ═══════════════════════════════════════════════════════════════════════════════
# ADMIN
# ═══════════════════════════════════════════════════════════════════════════════


class ApprovalRequest(BaseModel):
    approved: bool = True


class RemoveResponse(BaseModel):
    removed: bool = Field(description="False if the reel was already inactive")


class CommentCountRequest(BaseModel):
    comments_count: int


class CommentCountResponse(BaseModel):
    is_trending: bool


class SweepRequest(BaseModel):
    """Sweep options; omitted values fall back to settings."""

    page_size: Optional[int] = Field(None, ge=1)
    batch_size: Optional[int] = Field(None, ge=1)
    inter_batch_delay_ms: Optional[int] = Field(None, ge=0)


class SweepResponse(BaseModel):
    """Status and live progress of a reconciliation sweep."""

    id: str
    status: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    error: Optional[str] = None
    pages: int
    scanned: int
    invalid: int
    invalidated: int
    cancelled: bool

    @classmethod
    def from_run(cls, run: Any) -> "SweepResponse":
        """Build from a SweepRun; the report is read live."""
        return cls(
            id=str(run.id),
            status=run.status.value,
            started_at=run.started_at,
            finished_at=run.finished_at,
            error=run.error,
            pages=run.report.pages,
            scanned=run.report.scanned,
            invalid=run.report.invalid,
            invalidated=run.report.invalidated,
            cancelled=run.report.cancelled,
        )


class CounterReconcileResponse(BaseModel):
    """Categories whose counter was corrected: {category: {stored, actual}}."""

    corrections: Dict[str, Dict[str, int]]


class IndexPruneResponse(BaseModel):
    removed: int


# ═══════════════════════════════════════════════════════════════════════════════
# CATEGORIES
# ═══════════════════════════════════════════════════════════════════════════════


class CategoryCountResponse(BaseModel):
    name: ContentCategory
    content_count: int


class CategoryListResponse(BaseModel):
    categories: List[CategoryCountResponse]
    total: int
