"""
User Entity Model

Represents an account that authors reels and engages with them.

SAMPLE USER RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id               │ 550e8400-e29b-41d4-a716-446655440000                      │
│ username         │ "dancequeen"                                               │
│ role             │ USER                                                       │
│ show_nsfw        │ false                                                      │
│ created_at       │ 2026-01-01T00:00:00Z                                      │
└──────────────────────────────────────────────────────────────────────────────┘

The per-user content lists (authored, saved, liked) do not live here; they
are rows in ``user_content_index`` maintained by the counter ledger.
"""

import uuid

from sqlalchemy import Boolean, String, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from reelcore.shared.models.base import Base, TimestampMixin
from reelcore.shared.models.enums import UserRole


class User(Base, TimestampMixin):
    """
    User model.

    Attributes:
        id: Unique identifier (UUID v4)
        username: Public handle (unique)
        role: USER, MODERATOR or ADMIN; moderators may browse the approval queue
        show_nsfw: Viewer opted in to NSFW reels in feeds
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole),
        nullable=False,
        default=UserRole.USER,
    )

    show_nsfw: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    @property
    def is_moderator(self) -> bool:
        """Moderators and admins can see unapproved reels."""
        return self.role in (UserRole.MODERATOR, UserRole.ADMIN)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
