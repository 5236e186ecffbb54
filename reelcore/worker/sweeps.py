"""
Sweep registry.

Keeps track of operator-triggered reconciliation sweeps running as asyncio
tasks inside the API process: start one, look at its progress, cancel it.

Only one sweep runs at a time; starting a second while the first is still
running is a ConflictError. Only the most recent SWEEP_HISTORY_LIMIT finished
sweeps stay queryable. Cancellation is cooperative: the sweep stops at
the next chunk boundary and keeps what it already invalidated.

Usage:
======
    registry = SweepRegistry()
    run = registry.start(session_factory=AsyncSessionLocal, blob_store=store)
    registry.get(run.id).report.scanned
    registry.cancel(run.id)
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from reelcore.config.settings import settings
from reelcore.shared.adapters.blob_store import BlobStore
from reelcore.shared.core.exceptions import ConflictError, NotFoundError
from reelcore.shared.core.logging import get_logger
from reelcore.shared.services.counter_ledger import SessionFactory
from reelcore.shared.utils.time import utcnow
from reelcore.worker.pipelines.reconciliation_pipeline import (
    ReconciliationPipeline,
    SweepReport,
)


logger = get_logger(__name__)


class SweepStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class SweepRun:
    """One sweep and its live progress."""

    id: uuid.UUID
    started_at: datetime
    status: SweepStatus = SweepStatus.RUNNING
    report: SweepReport = field(default_factory=SweepReport)
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    finished_at: Optional[datetime] = None
    error: Optional[str] = None
    task: Optional[asyncio.Task] = None


class SweepRegistry:
    """In-process registry of reconciliation sweeps."""

    def __init__(self, history_limit: Optional[int] = None) -> None:
        self._runs: dict[uuid.UUID, SweepRun] = {}
        self.history_limit = (
            settings.SWEEP_HISTORY_LIMIT if history_limit is None else history_limit
        )

    @property
    def running(self) -> Optional[SweepRun]:
        for run in self._runs.values():
            if run.status == SweepStatus.RUNNING:
                return run
        return None

    def start(
        self,
        *,
        session_factory: SessionFactory,
        blob_store: BlobStore,
        page_size: Optional[int] = None,
        batch_size: Optional[int] = None,
        inter_batch_delay_ms: Optional[int] = None,
    ) -> SweepRun:
        """
        Start a sweep as a background task.

        Raises:
            ConflictError: A sweep is already running
        """
        current = self.running
        if current is not None:
            raise ConflictError(
                "A reconciliation sweep is already running",
                details={"sweep_id": str(current.id)},
            )

        self._evict_finished()
        run = SweepRun(id=uuid.uuid4(), started_at=utcnow())
        self._runs[run.id] = run
        run.task = asyncio.create_task(
            self._execute(
                run,
                session_factory,
                blob_store,
                page_size=page_size,
                batch_size=batch_size,
                inter_batch_delay_ms=inter_batch_delay_ms,
            )
        )
        logger.info("Sweep scheduled", sweep_id=str(run.id))
        return run

    def get(self, sweep_id: uuid.UUID) -> SweepRun:
        run = self._runs.get(sweep_id)
        if run is None:
            raise NotFoundError("Sweep", str(sweep_id))
        return run

    def cancel(self, sweep_id: uuid.UUID) -> SweepRun:
        """Ask a sweep to stop at its next chunk boundary."""
        run = self.get(sweep_id)
        if run.status == SweepStatus.RUNNING:
            run.cancel_event.set()
            logger.info("Sweep cancellation requested", sweep_id=str(sweep_id))
        return run

    async def shutdown(self) -> None:
        """Cancel running sweeps and wait for them to wind down."""
        tasks = []
        for run in self._runs.values():
            if run.status == SweepStatus.RUNNING and run.task is not None:
                run.cancel_event.set()
                tasks.append(run.task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _evict_finished(self) -> None:
        # Insertion order: oldest first
        finished = [
            run_id for run_id, run in self._runs.items() if run.status != SweepStatus.RUNNING
        ]
        for run_id in finished[: max(len(finished) - self.history_limit, 0)]:
            del self._runs[run_id]

    async def _execute(
        self,
        run: SweepRun,
        session_factory: SessionFactory,
        blob_store: BlobStore,
        **options: Optional[int],
    ) -> None:
        async with session_factory() as session:
            pipeline = ReconciliationPipeline(session, blob_store)
            try:
                await pipeline.run_full_sweep(
                    cancel_event=run.cancel_event,
                    report=run.report,
                    **options,
                )
                run.status = (
                    SweepStatus.CANCELLED if run.report.cancelled else SweepStatus.COMPLETED
                )
            except Exception as e:
                await session.rollback()
                run.status = SweepStatus.FAILED
                run.error = str(e)
                logger.exception("Sweep failed", sweep_id=str(run.id))
            finally:
                run.finished_at = utcnow()
