"""
Reconciliation pipeline.
Finds reels whose media no longer exists in the blob store and takes them
out of the feeds, without overrunning the store's rate limits.

Fail-open:
==========
A check only reports "missing" when the store answers a definitive
not-found. Timeouts, throttling and 5xx responses count as "present":
wrongly hiding a live reel is worse than showing a dead one a little longer.

Rate limiting:
==============
    items ──► [chunk 1] ──sleep──► [chunk 2] ──sleep──► ... [chunk n]
               │ checks run concurrently inside a chunk
               └ one failing check never aborts the chunk

Invocation:
===========
- Feed reads: ``should_sample()`` is true for RECONCILE_SAMPLE_RATE of reads;
  the page's ids are then checked in the background (5 per chunk, 200ms apart)
- Operator sweep: ``run_full_sweep`` walks every active reel with keyset
  pagination (10 per chunk, 300ms apart), committing after each chunk.
  Cancelling keeps everything already invalidated; nothing is rolled back.

Invalidation never deletes: the reel is marked inactive with reason
``media_missing`` and its category count is decremented exactly once.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from reelcore.config.settings import settings
from reelcore.shared.adapters.blob_store import BlobStore
from reelcore.shared.core.exceptions import InvalidArgumentError
from reelcore.shared.core.logging import get_logger
from reelcore.shared.models.content_item import ContentItem
from reelcore.shared.models.enums import InactiveReason
from reelcore.shared.repositories.content_item_repository import ContentItemRepository
from reelcore.shared.services.counter_ledger import CounterLedger


logger = get_logger(__name__)


Sleep = Callable[[float], Awaitable[None]]


@dataclass
class BatchValidation:
    """Outcome of checking a list of reels."""

    valid: list[ContentItem] = field(default_factory=list)
    invalid_ids: list[UUID] = field(default_factory=list)
    cancelled: bool = False


@dataclass
class SweepReport:
    """Progress of a full sweep, also returned when cancelled."""

    pages: int = 0
    scanned: int = 0
    invalid: int = 0
    invalidated: int = 0
    cancelled: bool = False


class ReconciliationPipeline:
    """
    Media existence reconciliation.

    Stages:
    1. Check (fail-open, bounded by a timeout)
    2. Validate in rate-limited chunks
    3. Invalidate (idempotent soft removal + counter decrement)
    """

    def __init__(
        self,
        session: AsyncSession,
        blob_store: BlobStore,
        *,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
        check_timeout_seconds: Optional[float] = None,
        sample_rate: Optional[float] = None,
    ):
        self.session = session
        self.blob_store = blob_store
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.check_timeout_seconds = (
            check_timeout_seconds
            if check_timeout_seconds is not None
            else settings.BLOB_CHECK_TIMEOUT_SECONDS
        )
        self.sample_rate = settings.RECONCILE_SAMPLE_RATE if sample_rate is None else sample_rate
        self.content_repo = ContentItemRepository(session)
        self.ledger = CounterLedger(session)

    # ═══════════════════════════════════════════════════════════════════════════
    # CHECK
    # ═══════════════════════════════════════════════════════════════════════════

    async def check_exists(self, media_ref: str) -> bool:
        """
        Ask the blob store whether ``media_ref`` exists.

        Returns:
            False only on a definitive not-found, True otherwise
        """
        try:
            return await asyncio.wait_for(
                self.blob_store.exists(media_ref),
                timeout=self.check_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Media check timed out, assuming present",
                media_ref=media_ref,
                timeout_seconds=self.check_timeout_seconds,
            )
            return True
        except Exception as e:
            logger.warning(
                "Media check inconclusive, assuming present",
                media_ref=media_ref,
                error=str(e),
            )
            return True

    async def _is_valid(self, item: ContentItem) -> bool:
        # No reference at all: nothing to ask the store about
        if not item.media_ref:
            return False
        return await self.check_exists(item.media_ref)

    # ═══════════════════════════════════════════════════════════════════════════
    # VALIDATE
    # ═══════════════════════════════════════════════════════════════════════════

    async def validate_batch(
        self,
        items: Sequence[ContentItem],
        batch_size: int,
        inter_batch_delay_ms: int,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchValidation:
        """
        Check reels in chunks of ``batch_size``.

        Checks inside a chunk run concurrently; the pipeline sleeps
        ``inter_batch_delay_ms`` between chunks but not after the last.
        ``cancel_event`` is looked at before every chunk.

        Returns:
            BatchValidation with valid items and invalid ids in input order
        """
        if batch_size < 1:
            raise InvalidArgumentError("batch_size must be >= 1")

        outcome = BatchValidation()
        chunks = [items[i : i + batch_size] for i in range(0, len(items), batch_size)]

        for index, chunk in enumerate(chunks):
            if cancel_event is not None and cancel_event.is_set():
                outcome.cancelled = True
                logger.info("Validation cancelled", checked=index * batch_size, total=len(items))
                break

            results = await asyncio.gather(*(self._is_valid(item) for item in chunk))
            for item, is_valid in zip(chunk, results):
                if is_valid:
                    outcome.valid.append(item)
                else:
                    outcome.invalid_ids.append(item.id)

            if index < len(chunks) - 1 and inter_batch_delay_ms > 0:
                await self.sleep(inter_batch_delay_ms / 1000)

        return outcome

    # ═══════════════════════════════════════════════════════════════════════════
    # INVALIDATE
    # ═══════════════════════════════════════════════════════════════════════════

    async def invalidate(self, invalid_ids: Sequence[UUID]) -> int:
        """
        Take reels with missing media out of the feeds.

        Safe to repeat: an already-inactive reel is skipped and its counter
        is not touched again.

        Returns:
            Number of reels this call actually deactivated
        """
        transitioned = 0
        for content_id in invalid_ids:
            category = await self.content_repo.deactivate_if_active(
                content_id, InactiveReason.MEDIA_MISSING
            )
            if category is None:
                continue

            await self.ledger.on_deactivate(category)
            transitioned += 1
            logger.info(
                "Reel invalidated",
                content_id=str(content_id),
                reason=InactiveReason.MEDIA_MISSING.value,
            )
        return transitioned

    # ═══════════════════════════════════════════════════════════════════════════
    # FEED SAMPLING
    # ═══════════════════════════════════════════════════════════════════════════

    def should_sample(self) -> bool:
        """True for roughly RECONCILE_SAMPLE_RATE of calls."""
        return self.rng.random() < self.sample_rate

    async def reconcile_items(self, content_ids: Sequence[UUID]) -> int:
        """
        Check a feed page's reels and invalidate the missing ones.

        Returns:
            Number of reels deactivated
        """
        items = [
            item for item in await self.content_repo.get_by_ids(list(content_ids)) if item.is_active
        ]
        if not items:
            return 0

        outcome = await self.validate_batch(
            items,
            batch_size=settings.RECONCILE_FEED_BATCH_SIZE,
            inter_batch_delay_ms=settings.RECONCILE_FEED_DELAY_MS,
        )
        transitioned = await self.invalidate(outcome.invalid_ids)
        logger.info(
            "Feed sample reconciled",
            checked=len(items),
            invalid=len(outcome.invalid_ids),
            invalidated=transitioned,
        )
        return transitioned

    # ═══════════════════════════════════════════════════════════════════════════
    # FULL SWEEP
    # ═══════════════════════════════════════════════════════════════════════════

    async def run_full_sweep(
        self,
        *,
        page_size: Optional[int] = None,
        batch_size: Optional[int] = None,
        inter_batch_delay_ms: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None,
        report: Optional[SweepReport] = None,
    ) -> SweepReport:
        """
        Walk every active reel and invalidate those with missing media.

        Commits after each chunk so progress survives cancellation or a
        crash. The sleep separates consecutive chunks, including across
        page boundaries.

        Pass ``report`` to observe progress while the sweep is running.
        """
        page_size = page_size or settings.RECONCILE_SWEEP_PAGE_SIZE
        batch_size = batch_size or settings.RECONCILE_SWEEP_BATCH_SIZE
        if inter_batch_delay_ms is None:
            inter_batch_delay_ms = settings.RECONCILE_SWEEP_DELAY_MS

        report = report if report is not None else SweepReport()
        after_id: Optional[UUID] = None
        chunks_done = 0

        logger.info("Sweep started", page_size=page_size, batch_size=batch_size)

        while True:
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                break

            page = await self.content_repo.find_active_after(after_id, page_size)
            if not page:
                break
            report.pages += 1
            after_id = page[-1].id

            for start in range(0, len(page), batch_size):
                if chunks_done > 0 and inter_batch_delay_ms > 0:
                    await self.sleep(inter_batch_delay_ms / 1000)
                if cancel_event is not None and cancel_event.is_set():
                    report.cancelled = True
                    break

                chunk = page[start : start + batch_size]
                outcome = await self.validate_batch(chunk, batch_size, 0)
                report.scanned += len(chunk)
                report.invalid += len(outcome.invalid_ids)
                report.invalidated += await self.invalidate(outcome.invalid_ids)
                await self.session.commit()
                chunks_done += 1

            if report.cancelled:
                break

            logger.debug("Sweep page done", page=report.pages, scanned=report.scanned)

        logger.info(
            "Sweep finished",
            pages=report.pages,
            scanned=report.scanned,
            invalid=report.invalid,
            invalidated=report.invalidated,
            cancelled=report.cancelled,
        )
        return report
