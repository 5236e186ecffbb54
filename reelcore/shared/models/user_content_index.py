"""
UserContentIndexEntry Model

Per-user denormalized index of reel ids: the reels a user authored, saved
or liked.

``content_id`` is intentionally NOT a foreign key. When a reel is deleted,
the authored entry is removed in the same transaction, while saved/liked
entries held by other users are cleaned up afterwards by the fan-out
cascade (see ``CounterLedger.cascade_unlink``). Until that runs, stale ids
are tolerated by readers.

SAMPLE ROWS:
┌──────────────────────────────────────────────────────────────────────────────┐
│ user_id  │ content_id │ relation                                             │
│ 660e...  │ 550e...    │ AUTHORED                                             │
│ 770e...  │ 550e...    │ SAVED                                                │
│ 770e...  │ 550e...    │ LIKED                                                │
└──────────────────────────────────────────────────────────────────────────────┘
"""

import uuid

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from reelcore.shared.models.base import Base, TimestampMixin
from reelcore.shared.models.enums import IndexRelation


class UserContentIndexEntry(Base, TimestampMixin):
    """
    One (user, reel, relation) membership.

    Attributes:
        user_id: Owner of the index
        content_id: Referenced reel (may dangle until the cascade runs)
        relation: AUTHORED, SAVED or LIKED
    """

    __tablename__ = "user_content_index"

    __table_args__ = (
        UniqueConstraint(
            "user_id", "content_id", "relation", name="uq_user_content_index_entry"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    content_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    relation: Mapped[IndexRelation] = mapped_column(
        SQLEnum(IndexRelation),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<UserContentIndexEntry(user_id={self.user_id}, "
            f"content_id={self.content_id}, relation={self.relation})>"
        )
