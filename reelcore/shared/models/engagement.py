"""
Engagement Event Models

Per-reel engagement logs, one table per kind:

    content_likes   one row per (content, actor) at any instant; a second
                    like from the same actor removes the row (toggle)
    content_views   append-only log; deduplication happens when recording,
                    never at storage time
    content_shares  append-only log, not deduplicated

Rows are removed together with their reel on permanent delete.

SAMPLE CONTENT_VIEWS ROWS:
┌──────────────────────────────────────────────────────────────────────────────┐
│ content_id │ actor_id │ viewed_at            │ watch_duration_seconds        │
│ 550e...    │ 660e...  │ 2026-01-15T10:30:00Z │ 12                            │
│ 550e...    │ 660e...  │ 2026-01-16T11:00:00Z │ 30   ← next day, counted again│
└──────────────────────────────────────────────────────────────────────────────┘
"""

from datetime import datetime
import uuid

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from reelcore.shared.models.base import Base
from reelcore.shared.models.enums import SharePlatform
from reelcore.shared.utils.time import utcnow


class ContentLike(Base):
    """A single actor's like on a reel."""

    __tablename__ = "content_likes"

    __table_args__ = (
        UniqueConstraint("content_id", "actor_id", name="uq_content_likes_content_actor"),
        Index("ix_content_likes_content_liked_at", "content_id", "liked_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    content_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False,
    )

    actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    liked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class ContentView(Base):
    """One recorded (counted) view."""

    __tablename__ = "content_views"

    __table_args__ = (
        Index("ix_content_views_content_actor_viewed_at", "content_id", "actor_id", "viewed_at"),
        Index("ix_content_views_content_viewed_at", "content_id", "viewed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    content_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False,
    )

    actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    watch_duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ContentShare(Base):
    """One share event."""

    __tablename__ = "content_shares"

    __table_args__ = (
        Index("ix_content_shares_content_shared_at", "content_id", "shared_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    content_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False,
    )

    actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    shared_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    platform: Mapped[SharePlatform] = mapped_column(
        SQLEnum(SharePlatform),
        nullable=False,
        default=SharePlatform.INTERNAL,
    )
