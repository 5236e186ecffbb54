"""
Category Entity Model

Denormalized per-category count of active reels. Written only by the
counter ledger, always with atomic SQL increments, never read-then-write.

SAMPLE CATEGORY RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ name             │ FOOD                                                       │
│ content_count    │ 42                                                         │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from sqlalchemy import CheckConstraint, Integer, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from reelcore.shared.models.base import Base, TimestampMixin
from reelcore.shared.models.enums import ContentCategory


class Category(Base, TimestampMixin):
    """
    Category counter.

    Attributes:
        name: ContentCategory value (primary key)
        content_count: Active reels in this category, never negative
    """

    __tablename__ = "categories"

    __table_args__ = (
        CheckConstraint("content_count >= 0", name="ck_categories_content_count_non_negative"),
    )

    name: Mapped[ContentCategory] = mapped_column(
        SQLEnum(ContentCategory),
        primary_key=True,
    )

    content_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return f"<Category(name={self.name}, content_count={self.content_count})>"
