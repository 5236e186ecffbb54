import asyncio

import pytest

from reelcore.shared.core.exceptions import InvalidArgumentError
from reelcore.shared.models import ContentCategory, InactiveReason
from reelcore.shared.repositories.category_repository import CategoryRepository
from reelcore.shared.repositories.content_item_repository import ContentItemRepository
from reelcore.worker.pipelines.reconciliation_pipeline import ReconciliationPipeline


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def _pipeline(session, blob_store, sleeps, **kwargs):
    return ReconciliationPipeline(session, blob_store, sleep=sleeps, **kwargs)


async def _reels(make_user, make_reel, count):
    author = await make_user()
    return [await make_reel(author, title=f"Reel {n}") for n in range(count)]


# ═══════════════════════════════════════════════════════════════════════════════
# EXISTENCE CHECKS
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_check_exists_is_fail_open(session, blob_store, sleeps):
    blob_store.objects["videos/present"] = b"x"
    blob_store.unavailable.add("videos/throttled")
    pipeline = _pipeline(session, blob_store, sleeps)

    assert await pipeline.check_exists("videos/present") is True
    assert await pipeline.check_exists("videos/gone") is False
    assert await pipeline.check_exists("videos/throttled") is True


@pytest.mark.asyncio
async def test_slow_check_times_out_as_present(session, blob_store, sleeps):
    blob_store.slow.add("videos/slow")
    pipeline = _pipeline(session, blob_store, sleeps, check_timeout_seconds=0.05)

    assert await pipeline.check_exists("videos/slow") is True


# ═══════════════════════════════════════════════════════════════════════════════
# BATCH VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_validate_batch_splits_valid_and_missing(
    session, blob_store, sleeps, make_user, make_reel
):
    reels = await _reels(make_user, make_reel, 10)
    blob_store.lose(reels[3].media_ref)
    blob_store.lose(reels[6].media_ref)

    outcome = await _pipeline(session, blob_store, sleeps).validate_batch(
        reels, batch_size=3, inter_batch_delay_ms=200
    )

    assert len(outcome.valid) == 8
    assert outcome.invalid_ids == [reels[3].id, reels[6].id]
    assert outcome.cancelled is False
    # 4 chunks, a pause between each pair, none after the last
    assert sleeps.calls == [0.2, 0.2, 0.2]


@pytest.mark.asyncio
async def test_inconclusive_checks_never_invalidate(
    session, blob_store, sleeps, make_user, make_reel
):
    reels = await _reels(make_user, make_reel, 4)
    blob_store.unavailable.add(reels[0].media_ref)
    blob_store.slow.add(reels[1].media_ref)

    outcome = await _pipeline(
        session, blob_store, sleeps, check_timeout_seconds=0.05
    ).validate_batch(reels, batch_size=5, inter_batch_delay_ms=200)

    assert outcome.invalid_ids == []
    assert len(outcome.valid) == 4
    assert sleeps.calls == []


@pytest.mark.asyncio
async def test_missing_media_ref_is_invalid_without_asking(
    session, blob_store, sleeps, make_user, make_reel
):
    reels = await _reels(make_user, make_reel, 2)
    reels[0].media_ref = ""

    outcome = await _pipeline(session, blob_store, sleeps).validate_batch(reels, 5, 0)

    assert outcome.invalid_ids == [reels[0].id]
    assert blob_store.exists_calls == [reels[1].media_ref]


@pytest.mark.asyncio
async def test_validate_batch_rejects_empty_chunks(session, blob_store, sleeps):
    with pytest.raises(InvalidArgumentError):
        await _pipeline(session, blob_store, sleeps).validate_batch([], 0, 0)


@pytest.mark.asyncio
async def test_validate_batch_stops_when_cancelled(
    session, blob_store, sleeps, make_user, make_reel
):
    reels = await _reels(make_user, make_reel, 6)
    cancel_event = asyncio.Event()
    sleeps.on_sleep = cancel_event.set

    outcome = await _pipeline(session, blob_store, sleeps).validate_batch(
        reels, 2, 100, cancel_event=cancel_event
    )

    assert outcome.cancelled is True
    assert len(outcome.valid) == 2


# ═══════════════════════════════════════════════════════════════════════════════
# INVALIDATION
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_invalidate_is_idempotent(session, blob_store, sleeps, make_user, make_reel):
    reels = await _reels(make_user, make_reel, 3)
    pipeline = _pipeline(session, blob_store, sleeps)
    categories = CategoryRepository(session)
    assert await categories.get_count(ContentCategory.FOOD) == 3

    assert await pipeline.invalidate([reels[0].id, reels[1].id]) == 2
    assert await pipeline.invalidate([reels[0].id, reels[1].id]) == 0

    assert await categories.get_count(ContentCategory.FOOD) == 1
    stored = await ContentItemRepository(session).reload(reels[0].id)
    assert stored.is_active is False
    assert stored.inactive_reason == InactiveReason.MEDIA_MISSING


# ═══════════════════════════════════════════════════════════════════════════════
# FEED SAMPLING
# ═══════════════════════════════════════════════════════════════════════════════


def test_should_sample_follows_rate(blob_store, sleeps):
    def sampled(draw, rate):
        pipeline = _pipeline(None, blob_store, sleeps, rng=FixedRandom(draw), sample_rate=rate)
        return pipeline.should_sample()

    assert sampled(0.05, 0.1) is True
    assert sampled(0.5, 0.1) is False
    assert sampled(0.0, 0.0) is False
    assert sampled(0.99, 1.0) is True


@pytest.mark.asyncio
async def test_reconcile_items_invalidates_missing_media(
    session, blob_store, sleeps, make_user, make_reel
):
    reels = await _reels(make_user, make_reel, 7)
    blob_store.lose(reels[5].media_ref)
    pipeline = _pipeline(session, blob_store, sleeps)

    assert await pipeline.reconcile_items([reel.id for reel in reels]) == 1
    # Feed pages are checked 5 at a time, 200ms apart
    assert sleeps.calls == [0.2]

    # Already inactive: nothing left to invalidate
    assert await pipeline.reconcile_items([reels[5].id]) == 0


# ═══════════════════════════════════════════════════════════════════════════════
# FULL SWEEP
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_full_sweep_walks_every_active_reel(
    session, blob_store, sleeps, make_user, make_reel
):
    reels = await _reels(make_user, make_reel, 12)
    for reel in (reels[0], reels[4], reels[11]):
        blob_store.lose(reel.media_ref)

    report = await _pipeline(session, blob_store, sleeps).run_full_sweep(
        page_size=5, batch_size=2, inter_batch_delay_ms=300
    )

    assert report.pages == 3
    assert report.scanned == 12
    assert report.invalid == 3
    assert report.invalidated == 3
    assert report.cancelled is False
    # 3 + 3 + 1 chunks, paused between consecutive ones across pages
    assert sleeps.calls == [0.3] * 6
    assert await CategoryRepository(session).get_count(ContentCategory.FOOD) == 9


@pytest.mark.asyncio
async def test_cancelled_sweep_keeps_its_progress(
    session, session_factory, blob_store, sleeps, make_user, make_reel
):
    reels = await _reels(make_user, make_reel, 6)
    for reel in reels:
        blob_store.lose(reel.media_ref)
    cancel_event = asyncio.Event()
    sleeps.on_sleep = cancel_event.set

    report = await _pipeline(session, blob_store, sleeps).run_full_sweep(
        page_size=10, batch_size=2, inter_batch_delay_ms=300, cancel_event=cancel_event
    )

    assert report.cancelled is True
    assert report.scanned == 2
    assert report.invalidated == 2
    async with session_factory() as check:
        assert await CategoryRepository(check).get_count(ContentCategory.FOOD) == 4


@pytest.mark.asyncio
async def test_sweep_without_reels(session, blob_store, sleeps):
    report = await _pipeline(session, blob_store, sleeps).run_full_sweep()

    assert report.pages == 0
    assert report.scanned == 0
    assert sleeps.calls == []
