"""
Repository Pattern Implementations

Repositories encapsulate SQL and hand model instances to the services.

Repository Hierarchy:
=====================
    BaseRepository[ModelType]              ← Generic CRUD + dialect upserts
         │
         ├── UserRepository
         ├── ContentItemRepository         ← Version claims, feed queries, sweep pages
         ├── CategoryRepository            ← Atomic counter upserts / floored decrements
         └── UserContentIndexRepository    ← Authored / saved / liked entries

    EngagementRepository                   ← Like, view and share logs

Usage Example:
==============
    from reelcore.shared.repositories import ContentItemRepository

    repo = ContentItemRepository(db)
    item = await repo.get_active(content_id)
"""

from reelcore.shared.repositories.base import BaseRepository
from reelcore.shared.repositories.user_repository import UserRepository
from reelcore.shared.repositories.content_item_repository import ContentItemRepository, FeedRow
from reelcore.shared.repositories.engagement_repository import EngagementRepository, WindowCounts
from reelcore.shared.repositories.category_repository import CategoryRepository
from reelcore.shared.repositories.user_content_index_repository import UserContentIndexRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ContentItemRepository",
    "FeedRow",
    "EngagementRepository",
    "WindowCounts",
    "CategoryRepository",
    "UserContentIndexRepository",
]
