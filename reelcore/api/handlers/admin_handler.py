"""
Admin Handler

Moderation and maintenance endpoints. Every route requires an actor with
the moderator or admin role.

Routes:
=======
    POST /admin/reels/{id}/approve             approve / un-approve
    POST /admin/reels/{id}/remove              soft-remove from feeds
    POST /admin/reels/{id}/comments-count      comment count from the comment service
    POST /admin/reconciliation/sweeps          start a media sweep (202)
    GET  /admin/reconciliation/sweeps/{id}     sweep progress
    POST /admin/reconciliation/sweeps/{id}/cancel
    POST /admin/counters/reconcile             correct category counter drift
    POST /admin/index/prune                    drop dangling user index entries
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, status

from reelcore.api.dependencies import ModeratorActor
from reelcore.api.dependencies.services import (
    BlobStoreDep,
    ContentServiceDep,
    CounterLedgerDep,
    EngagementServiceDep,
    SessionFactoryDep,
    SweepRegistryDep,
)
from reelcore.shared.core.logging import logger
from reelcore.shared.schemas.content import (
    ApprovalRequest,
    CommentCountRequest,
    CommentCountResponse,
    CounterReconcileResponse,
    IndexPruneResponse,
    ReelDetailResponse,
    RemoveResponse,
    SweepRequest,
    SweepResponse,
)


router = APIRouter()


# ═══════════════════════════════════════════════════════════════════════════════
# MODERATION
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/reels/{content_id}/approve", response_model=ReelDetailResponse)
async def approve_reel(
    content_id: UUID,
    moderator: ModeratorActor,
    content_service: ContentServiceDep,
    request: Optional[ApprovalRequest] = None,
):
    approved = request.approved if request is not None else True
    item = await content_service.set_approval(content_id, moderator.id, approved)
    return ReelDetailResponse.from_item(item)


@router.post("/reels/{content_id}/remove", response_model=RemoveResponse)
async def remove_reel(
    content_id: UUID,
    moderator: ModeratorActor,
    content_service: ContentServiceDep,
):
    """Take a reel out of the feeds. Calling it twice is harmless."""
    removed = await content_service.remove_content(content_id)
    logger.info(
        "Moderator removal",
        content_id=str(content_id),
        moderator_id=str(moderator.id),
        removed=removed,
    )
    return RemoveResponse(removed=removed)


@router.post("/reels/{content_id}/comments-count", response_model=CommentCountResponse)
async def sync_comment_count(
    content_id: UUID,
    request: CommentCountRequest,
    moderator: ModeratorActor,
    engagement_service: EngagementServiceDep,
):
    is_trending = await engagement_service.sync_comment_count(content_id, request.comments_count)
    return CommentCountResponse(is_trending=is_trending)


# ═══════════════════════════════════════════════════════════════════════════════
# RECONCILIATION SWEEPS
# ═══════════════════════════════════════════════════════════════════════════════


@router.post(
    "/reconciliation/sweeps",
    response_model=SweepResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_sweep(
    moderator: ModeratorActor,
    registry: SweepRegistryDep,
    blob_store: BlobStoreDep,
    session_factory: SessionFactoryDep,
    request: Optional[SweepRequest] = None,
):
    """
    Start a full media sweep in the background.

    Only one sweep runs at a time (409 otherwise). Poll the returned id
    for progress.
    """
    options = request or SweepRequest()
    run = registry.start(
        session_factory=session_factory,
        blob_store=blob_store,
        page_size=options.page_size,
        batch_size=options.batch_size,
        inter_batch_delay_ms=options.inter_batch_delay_ms,
    )
    logger.info("Sweep started by moderator", sweep_id=str(run.id), moderator_id=str(moderator.id))
    return SweepResponse.from_run(run)


@router.get("/reconciliation/sweeps/{sweep_id}", response_model=SweepResponse)
async def get_sweep(
    sweep_id: UUID,
    moderator: ModeratorActor,
    registry: SweepRegistryDep,
):
    return SweepResponse.from_run(registry.get(sweep_id))


@router.post("/reconciliation/sweeps/{sweep_id}/cancel", response_model=SweepResponse)
async def cancel_sweep(
    sweep_id: UUID,
    moderator: ModeratorActor,
    registry: SweepRegistryDep,
):
    """Stop the sweep at its next chunk boundary; invalidations so far are kept."""
    return SweepResponse.from_run(registry.cancel(sweep_id))


# ═══════════════════════════════════════════════════════════════════════════════
# COUNTERS & INDEX
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/counters/reconcile", response_model=CounterReconcileResponse)
async def reconcile_counters(
    moderator: ModeratorActor,
    ledger: CounterLedgerDep,
):
    corrections = await ledger.reconcile_counters()
    return CounterReconcileResponse(
        corrections={
            category.value: {"stored": stored, "actual": actual}
            for category, (stored, actual) in corrections.items()
        }
    )


@router.post("/index/prune", response_model=IndexPruneResponse)
async def prune_index(
    moderator: ModeratorActor,
    ledger: CounterLedgerDep,
):
    removed = await ledger.prune_dangling_index_entries()
    return IndexPruneResponse(removed=removed)
