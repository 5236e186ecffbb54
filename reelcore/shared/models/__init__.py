"""
ReelCore SQLAlchemy Models

Model Hierarchy:
================
    User
       └── authored reels (ContentItem[] via author_id)

    ContentItem
       ├── tags (ContentTag[])
       ├── content_likes (ContentLike[])
       ├── content_views (ContentView[])
       └── content_shares (ContentShare[])

    Category                 ← per-category active reel counter
    UserContentIndexEntry    ← per-user authored/saved/liked index

Usage:
======
    from reelcore.shared.models import ContentItem, Category, ContentCategory
"""

from reelcore.shared.models.base import Base, TimestampMixin
from reelcore.shared.models.enums import (
    ContentCategory,
    SharePlatform,
    FeedSort,
    UserRole,
    IndexRelation,
    InactiveReason,
)
from reelcore.shared.models.user import User
from reelcore.shared.models.content_item import ContentItem, ContentTag
from reelcore.shared.models.engagement import ContentLike, ContentView, ContentShare
from reelcore.shared.models.category import Category
from reelcore.shared.models.user_content_index import UserContentIndexEntry

__all__ = [
    # Base classes and mixins
    "Base",
    "TimestampMixin",
    # Enums
    "ContentCategory",
    "SharePlatform",
    "FeedSort",
    "UserRole",
    "IndexRelation",
    "InactiveReason",
    # Models
    "User",
    "ContentItem",
    "ContentTag",
    "ContentLike",
    "ContentView",
    "ContentShare",
    "Category",
    "UserContentIndexEntry",
]
