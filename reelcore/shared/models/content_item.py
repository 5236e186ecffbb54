"""
ContentItem Entity Model

One uploaded reel: its metadata, media locators, lifecycle flags and the
optimistic-concurrency version that serializes engagement writes.

SAMPLE CONTENT_ITEM RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id               │ 550e8400-e29b-41d4-a716-446655440000                      │
│ author_id        │ 660e8400-e29b-41d4-a716-446655440000                      │
│ title            │ "Street food in Bangkok"                                   │
│ category         │ FOOD                                                       │
│ media_ref        │ "videos/video_1767225600000_k3j9x2"                        │
│ is_active        │ true                                                       │
│ inactive_reason  │ NULL                                                       │
│ is_approved      │ true                                                       │
│ is_trending      │ false                                                      │
│ comments_count   │ 4                                                          │
│ version          │ 17                                                         │
└──────────────────────────────────────────────────────────────────────────────┘

Engagement logs (likes, views, shares) live in their own tables, see
``engagement.py``. Tags live in ``content_tags``.

Lifecycle:
==========
    upload ──► ACTIVE ──(media missing / moderator)──► INACTIVE (kept for audit)
                 │
                 └──(author/admin delete)──► row removed
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reelcore.shared.models.base import Base, TimestampMixin
from reelcore.shared.models.enums import ContentCategory, InactiveReason


if TYPE_CHECKING:
    from reelcore.shared.models.user import User


class ContentItem(Base, TimestampMixin):
    """
    ContentItem model - a single reel.

    Attributes:
        id: Unique identifier (UUID v4)
        author_id: The one author of this reel, fixed for its lifetime
        category: One of ContentCategory
        media_ref: Blob store key of the video (empty for broken legacy rows)
        is_active: False once removed from feeds (soft removal)
        inactive_reason: Why the reel left the feeds
        is_approved: Moderation state (auto-approved on upload)
        is_trending: Derived flag, written only by EngagementService.refresh_trending
        comments_count: Reported by the comment collaborator, read for scoring
        version: Bumped by every engagement mutation (claim-then-write)

    Relationships:
        author: Owning user (always loaded)
        tags: ContentTag rows (always loaded)
    """

    __tablename__ = "content_items"

    __table_args__ = (
        Index("ix_content_items_feed", "is_active", "is_approved", "created_at"),
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # PRIMARY KEY & OWNERSHIP
    # ═══════════════════════════════════════════════════════════════════════════

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # DESCRIPTIVE METADATA
    # ═══════════════════════════════════════════════════════════════════════════

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    file_size_bytes: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    # ═══════════════════════════════════════════════════════════════════════════
    # CLASSIFICATION
    # ═══════════════════════════════════════════════════════════════════════════

    category: Mapped[ContentCategory] = mapped_column(
        SQLEnum(ContentCategory),
        nullable=False,
        index=True,
    )

    is_nsfw: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # ═══════════════════════════════════════════════════════════════════════════
    # MEDIA REFERENCES
    # ═══════════════════════════════════════════════════════════════════════════

    media_ref: Mapped[str] = mapped_column(Text, nullable=False, default="")
    thumbnail_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ═══════════════════════════════════════════════════════════════════════════
    # ENGAGEMENT (denormalized)
    # ═══════════════════════════════════════════════════════════════════════════

    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE FLAGS
    # ═══════════════════════════════════════════════════════════════════════════

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    inactive_reason: Mapped[Optional[InactiveReason]] = mapped_column(
        SQLEnum(InactiveReason),
        nullable=True,
    )

    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    is_trending: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # CONCURRENCY
    # ═══════════════════════════════════════════════════════════════════════════

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # ═══════════════════════════════════════════════════════════════════════════
    # RELATIONSHIPS
    # ═══════════════════════════════════════════════════════════════════════════

    author: Mapped["User"] = relationship(
        "User",
        foreign_keys=[author_id],
        lazy="joined",
    )

    tags: Mapped[list["ContentTag"]] = relationship(
        "ContentTag",
        back_populates="content",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def tag_names(self) -> list[str]:
        """Tags as sorted plain strings."""
        return sorted(tag.tag for tag in self.tags)

    def __repr__(self) -> str:
        return f"<ContentItem(id={self.id}, category={self.category}, active={self.is_active})>"


class ContentTag(Base):
    """
    One lowercase, trimmed tag (<= 30 chars) attached to a reel.

    The composite primary key makes the tag set a set.
    """

    __tablename__ = "content_tags"

    content_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("content_items.id", ondelete="CASCADE"),
        primary_key=True,
    )

    tag: Mapped[str] = mapped_column(String(30), primary_key=True, index=True)

    content: Mapped["ContentItem"] = relationship(
        "ContentItem",
        back_populates="tags",
    )

    def __repr__(self) -> str:
        return f"<ContentTag(content_id={self.content_id}, tag={self.tag})>"
