# pylint: skip-file
# ruff: noqa
"""Initial schema - create all tables

Revision ID: 001
Revises:
Create Date: 2026-03-01 00:00:00

Tables created:
- users: Actors (role decides moderation rights)
- content_items: Reels and their lifecycle flags
- content_tags: Tag set per reel
- content_likes / content_views / content_shares: Engagement logs
- categories: Per-category active reel counters (seeded)
- user_content_index: Per-user authored / saved / liked reel ids

Enums created (SQLAlchemy stores enum member NAMES):
- contentcategory, userrole, shareplatform, indexrelation, inactivereason
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


CATEGORY_NAMES = (
    "INFOTAINMENT",
    "ENTERTAINMENT",
    "NEWS",
    "MUSIC",
    "DANCE",
    "MAKEUP",
    "BEAUTY",
    "EDITS",
    "COMEDY",
    "SPORTS",
    "FOOD",
    "TRAVEL",
    "EDUCATION",
    "TECHNOLOGY",
)

content_category_enum = postgresql.ENUM(*CATEGORY_NAMES, name="contentcategory", create_type=False)
user_role_enum = postgresql.ENUM("USER", "MODERATOR", "ADMIN", name="userrole", create_type=False)
share_platform_enum = postgresql.ENUM(
    "INTERNAL",
    "FACEBOOK",
    "TWITTER",
    "INSTAGRAM",
    "WHATSAPP",
    "COPY_LINK",
    name="shareplatform",
    create_type=False,
)
index_relation_enum = postgresql.ENUM(
    "AUTHORED", "SAVED", "LIKED", name="indexrelation", create_type=False
)
inactive_reason_enum = postgresql.ENUM(
    "MEDIA_MISSING", "MODERATOR_REMOVED", name="inactivereason", create_type=False
)

ENUM_TYPES = (
    content_category_enum,
    user_role_enum,
    share_platform_enum,
    index_relation_enum,
    inactive_reason_enum,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.create(bind, checkfirst=True)

    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(30), nullable=False),
        sa.Column("role", user_role_enum, nullable=False, server_default="USER"),
        sa.Column("show_nsfw", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # Reels
    op.create_table(
        "content_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "author_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False, server_default=""),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("file_size_bytes", sa.BigInteger(), nullable=True),
        sa.Column("category", content_category_enum, nullable=False),
        sa.Column("is_nsfw", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("media_ref", sa.Text(), nullable=False, server_default=""),
        sa.Column("thumbnail_ref", sa.Text(), nullable=True),
        sa.Column("comments_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("inactive_reason", inactive_reason_enum, nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "approved_by",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_trending", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_content_items_author_id", "content_items", ["author_id"])
    op.create_index("ix_content_items_category", "content_items", ["category"])
    op.create_index("ix_content_items_is_trending", "content_items", ["is_trending"])
    op.create_index(
        "ix_content_items_feed", "content_items", ["is_active", "is_approved", "created_at"]
    )

    # Tags
    op.create_table(
        "content_tags",
        sa.Column(
            "content_id",
            sa.Uuid(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("tag", sa.String(30), primary_key=True),
    )
    op.create_index("ix_content_tags_tag", "content_tags", ["tag"])

    # Engagement logs
    op.create_table(
        "content_likes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "content_id",
            sa.Uuid(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "actor_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("liked_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("content_id", "actor_id", name="uq_content_likes_content_actor"),
    )
    op.create_index("ix_content_likes_actor_id", "content_likes", ["actor_id"])
    op.create_index(
        "ix_content_likes_content_liked_at", "content_likes", ["content_id", "liked_at"]
    )

    op.create_table(
        "content_views",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "content_id",
            sa.Uuid(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "actor_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("watch_duration_seconds", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index(
        "ix_content_views_content_actor_viewed_at",
        "content_views",
        ["content_id", "actor_id", "viewed_at"],
    )
    op.create_index(
        "ix_content_views_content_viewed_at", "content_views", ["content_id", "viewed_at"]
    )

    op.create_table(
        "content_shares",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "content_id",
            sa.Uuid(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "actor_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shared_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("platform", share_platform_enum, nullable=False, server_default="INTERNAL"),
    )
    op.create_index(
        "ix_content_shares_content_shared_at", "content_shares", ["content_id", "shared_at"]
    )

    # Category counters
    categories = op.create_table(
        "categories",
        sa.Column("name", content_category_enum, primary_key=True),
        sa.Column("content_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("content_count >= 0", name="ck_categories_content_count_non_negative"),
    )
    op.bulk_insert(categories, [{"name": name, "content_count": 0} for name in CATEGORY_NAMES])

    # Per-user index (content_id has no FK: entries may briefly outlive a deleted reel)
    op.create_table(
        "user_content_index",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content_id", sa.Uuid(), nullable=False),
        sa.Column("relation", index_relation_enum, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "content_id", "relation", name="uq_user_content_index_entry"
        ),
    )
    op.create_index("ix_user_content_index_user_id", "user_content_index", ["user_id"])
    op.create_index("ix_user_content_index_content_id", "user_content_index", ["content_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("user_content_index")
    op.drop_table("categories")
    op.drop_table("content_shares")
    op.drop_table("content_views")
    op.drop_table("content_likes")
    op.drop_table("content_tags")
    op.drop_table("content_items")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(bind, checkfirst=True)
