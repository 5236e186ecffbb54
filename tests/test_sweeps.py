import uuid

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from reelcore.shared.core.exceptions import ConflictError, NotFoundError
from reelcore.worker.sweeps import SweepRegistry, SweepStatus


@pytest.mark.asyncio
async def test_one_sweep_at_a_time(session, session_factory, blob_store, make_user, make_reel):
    author = await make_user()
    for _ in range(3):
        await make_reel(author)
    await session.commit()
    registry = SweepRegistry()

    first = registry.start(session_factory=session_factory, blob_store=blob_store)
    with pytest.raises(ConflictError):
        registry.start(session_factory=session_factory, blob_store=blob_store)

    await first.task
    assert first.status == SweepStatus.COMPLETED
    assert first.report.scanned == 3

    # Finished sweeps no longer block new ones
    second = registry.start(session_factory=session_factory, blob_store=blob_store)
    await second.task
    assert registry.get(second.id).status == SweepStatus.COMPLETED


@pytest.mark.asyncio
async def test_cancel_before_first_page(
    session, session_factory, blob_store, make_user, make_reel
):
    author = await make_user()
    reel = await make_reel(author)
    await session.commit()
    blob_store.lose(reel.media_ref)
    registry = SweepRegistry()

    run = registry.start(session_factory=session_factory, blob_store=blob_store)
    registry.cancel(run.id)
    await run.task

    assert run.status == SweepStatus.CANCELLED
    assert run.report.scanned == 0
    assert run.finished_at is not None
    # Cancelling a finished sweep changes nothing
    assert registry.cancel(run.id).status == SweepStatus.CANCELLED


@pytest.mark.asyncio
async def test_failed_sweep_records_error(blob_store):
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    registry = SweepRegistry()

    run = registry.start(session_factory=async_sessionmaker(engine), blob_store=blob_store)
    await run.task
    await engine.dispose()

    assert run.status == SweepStatus.FAILED
    assert "content_items" in run.error


def test_unknown_sweep():
    with pytest.raises(NotFoundError):
        SweepRegistry().get(uuid.uuid4())


@pytest.mark.asyncio
async def test_only_recent_finished_sweeps_are_kept(session_factory, blob_store):
    registry = SweepRegistry(history_limit=1)
    runs = []
    for _ in range(3):
        run = registry.start(session_factory=session_factory, blob_store=blob_store)
        await run.task
        runs.append(run)

    with pytest.raises(NotFoundError):
        registry.get(runs[0].id)
    assert registry.get(runs[1].id).status == SweepStatus.COMPLETED
    assert registry.get(runs[2].id).status == SweepStatus.COMPLETED
