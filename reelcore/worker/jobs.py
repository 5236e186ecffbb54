"""
Background jobs.

Each job opens its own session(s) from a session factory and never shares
the transaction of the request that scheduled it. Failures are logged and
swallowed here because nobody is waiting for the result: the request that
scheduled the job has already been answered.

Jobs:
=====
- run_cascade_cleanup: pull a deleted reel out of users' saved/liked entries
- run_feed_sample: media check of one feed page
- run_index_cleanup: remove entries left dangling by failed cascades
"""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from reelcore.config.settings import settings
from reelcore.shared.adapters.blob_store import BlobStore
from reelcore.shared.core.exceptions import PartialFailureError
from reelcore.shared.core.logging import get_logger
from reelcore.shared.services.counter_ledger import CounterLedger, SessionFactory, cascade_unlink
from reelcore.worker.pipelines.reconciliation_pipeline import ReconciliationPipeline


logger = get_logger(__name__)


async def run_cascade_cleanup(
    content_id: UUID,
    session_factory: SessionFactory,
    chunk_size: Optional[int] = None,
) -> int:
    """
    Fan-out cascade for a permanently deleted reel.

    Returns:
        Entries removed (0 when the cascade failed)
    """
    try:
        return await cascade_unlink(
            content_id,
            session_factory,
            chunk_size or settings.CASCADE_CHUNK_SIZE,
        )
    except PartialFailureError as e:
        logger.error(
            "Cascade incomplete, left for index cleanup",
            content_id=str(content_id),
            failed_user_ids=e.failed_ids,
        )
    except SQLAlchemyError as e:
        logger.error("Cascade failed", content_id=str(content_id), error=str(e))
    return 0


async def run_feed_sample(
    content_ids: Sequence[UUID],
    session_factory: SessionFactory,
    blob_store: BlobStore,
) -> int:
    """
    Media check for the reels of one feed page.

    Returns:
        Reels invalidated
    """
    async with session_factory() as session:
        pipeline = ReconciliationPipeline(session, blob_store)
        try:
            invalidated = await pipeline.reconcile_items(content_ids)
            await session.commit()
            return invalidated
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Feed sample reconciliation failed", error=str(e))
            return 0


async def run_index_cleanup(session_factory: SessionFactory) -> int:
    """Remove index entries whose reel no longer exists."""
    async with session_factory() as session:
        removed = await CounterLedger(session).prune_dangling_index_entries()
        await session.commit()
        return removed


async def run_counter_reconciliation(session_factory: SessionFactory) -> dict:
    """
    Recompute category counters and correct drift.

    Returns:
        {category value: {"stored": n, "actual": m}} for corrected categories
    """
    async with session_factory() as session:
        corrections = await CounterLedger(session).reconcile_counters()
        await session.commit()
    return {
        category.value: {"stored": stored, "actual": actual}
        for category, (stored, actual) in corrections.items()
    }
