"""
Service Dependencies

FastAPI dependencies for service injection.

Services are created per request around the request's session. The blob
store and the session factory used by background jobs are process-wide;
tests replace them through ``app.dependency_overrides``.

Usage:
======
    from reelcore.api.dependencies.services import EngagementServiceDep

    @router.post("/{content_id}/like")
    async def like(content_id: UUID, actor: CurrentActor, service: EngagementServiceDep):
        return await service.toggle_like(content_id, actor.id)
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from reelcore.api.dependencies.database import DbSession
from reelcore.shared.adapters.blob_store import BlobStore, S3BlobStore
from reelcore.shared.db import AsyncSessionLocal
from reelcore.shared.services.content_service import ContentService
from reelcore.shared.services.counter_ledger import CounterLedger, SessionFactory
from reelcore.shared.services.engagement_service import EngagementService
from reelcore.shared.services.feed_service import FeedService
from reelcore.worker.sweeps import SweepRegistry


@lru_cache
def get_blob_store() -> BlobStore:
    """Process-wide blob store (the boto3 client is created lazily)."""
    return S3BlobStore()


def get_session_factory() -> SessionFactory:
    """Session factory for work that outlives the request."""
    return AsyncSessionLocal


def get_sweep_registry(request: Request) -> SweepRegistry:
    return request.app.state.sweep_registry


async def get_engagement_service(db: DbSession) -> EngagementService:
    return EngagementService(db)


async def get_feed_service(db: DbSession) -> FeedService:
    return FeedService(db)


async def get_content_service(
    db: DbSession,
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
) -> ContentService:
    return ContentService(db, blob_store)


async def get_counter_ledger(db: DbSession) -> CounterLedger:
    return CounterLedger(db)


# ═══════════════════════════════════════════════════════════════════════════════
# TYPE ALIASES
# ═══════════════════════════════════════════════════════════════════════════════

BlobStoreDep = Annotated[BlobStore, Depends(get_blob_store)]
SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]
SweepRegistryDep = Annotated[SweepRegistry, Depends(get_sweep_registry)]
EngagementServiceDep = Annotated[EngagementService, Depends(get_engagement_service)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]
ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
CounterLedgerDep = Annotated[CounterLedger, Depends(get_counter_ledger)]
