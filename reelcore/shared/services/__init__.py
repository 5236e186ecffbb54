"""
Business Logic Services

Service Pattern:
================
    Handler → Service → Repository → Database
                ↘ Blob store

Available Services:
===================
- EngagementService: likes, views, shares, trending flag
- CounterLedger: category counters, per-user indexes, fan-out cascade
- FeedService: feed listing and single reel reads
- ContentService: upload, edit, moderation, permanent delete

Usage:
======
    from reelcore.shared.services import EngagementService

    service = EngagementService(db)
    result = await service.record_view(content_id, actor_id, 12)
"""

from reelcore.shared.services.engagement_service import EngagementService
from reelcore.shared.services.counter_ledger import CounterLedger, cascade_unlink
from reelcore.shared.services.feed_service import FeedService
from reelcore.shared.services.content_service import ContentService

__all__ = [
    "EngagementService",
    "CounterLedger",
    "cascade_unlink",
    "FeedService",
    "ContentService",
]
