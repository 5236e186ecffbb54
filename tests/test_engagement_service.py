import uuid

import pytest

from reelcore.shared.core.exceptions import (
    ConflictError,
    ContentNotFoundError,
    InvalidArgumentError,
    UserNotFoundError,
)
from reelcore.shared.models import IndexRelation, SharePlatform
from reelcore.shared.repositories.user_content_index_repository import UserContentIndexRepository
from reelcore.shared.services.content_service import ContentService
from reelcore.shared.services.engagement_service import EngagementService, parse_share_platform


def _service(session, clock, **kwargs):
    return EngagementService(session, clock=clock, **kwargs)


@pytest.mark.asyncio
async def test_toggle_like_flips_state_and_liked_index(session, clock, make_user, make_reel):
    author = await make_user()
    fan = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)
    index = UserContentIndexRepository(session)

    first = await service.toggle_like(reel.id, fan.id)
    assert first.liked is True
    assert first.like_count == 1
    assert await index.has_entry(fan.id, reel.id, IndexRelation.LIKED)

    second = await service.toggle_like(reel.id, fan.id)
    assert second.liked is False
    assert second.like_count == 0
    assert not await index.has_entry(fan.id, reel.id, IndexRelation.LIKED)


@pytest.mark.asyncio
async def test_every_engagement_write_bumps_the_version(session, clock, make_user, make_reel):
    author = await make_user()
    fan = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)
    start_version = reel.version

    await service.toggle_like(reel.id, fan.id)
    await service.record_share(reel.id, fan.id)

    assert reel.version == start_version + 2


@pytest.mark.asyncio
async def test_view_is_deduplicated_within_24_hours(session, clock, make_user, make_reel):
    author = await make_user()
    viewer = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    assert (await service.record_view(reel.id, viewer.id, 12)).counted is True
    clock.advance(hours=23)
    assert (await service.record_view(reel.id, viewer.id)).counted is False
    clock.advance(hours=2)
    assert (await service.record_view(reel.id, viewer.id)).counted is True


@pytest.mark.asyncio
async def test_views_from_different_actors_each_count(session, clock, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    for _ in range(3):
        viewer = await make_user()
        assert (await service.record_view(reel.id, viewer.id)).counted is True

    assert await service.compute_engagement_score(reel) == 3


@pytest.mark.asyncio
async def test_negative_watch_duration_is_rejected(session, clock, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)

    with pytest.raises(InvalidArgumentError):
        await _service(session, clock).record_view(reel.id, author.id, -1)


@pytest.mark.asyncio
async def test_score_uses_weights(session, clock, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    users = [await make_user() for _ in range(10)]
    for user in users:
        await service.record_view(reel.id, user.id)
    for user in users[:5]:
        await service.toggle_like(reel.id, user.id)
    await service.record_share(reel.id, users[0].id)
    await service.sync_comment_count(reel.id, 2)

    # 10 views + 5 likes * 3 + 2 comments * 5 + 1 share * 7
    assert await service.compute_engagement_score(reel) == 42
    assert reel.is_trending is False


@pytest.mark.asyncio
async def test_likes_older_than_window_do_not_score(session, clock, make_user, make_reel):
    author = await make_user()
    fan = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    await service.toggle_like(reel.id, fan.id)
    liked_at = clock()

    assert await service.compute_engagement_score(reel, as_of=liked_at) == 3
    clock.advance(hours=25)
    assert await service.compute_engagement_score(reel) == 0


@pytest.mark.asyncio
async def test_trending_threshold_is_strictly_greater(session, clock, make_user, make_reel):
    author = await make_user()
    viewer = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    # 10 comments * 5 = 50, exactly the threshold
    assert await service.sync_comment_count(reel.id, 10) is False
    assert reel.is_trending is False

    # One more view makes it 51
    await service.record_view(reel.id, viewer.id)
    assert reel.is_trending is True


@pytest.mark.asyncio
async def test_trending_flag_drops_when_events_age_out(session, clock, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    for _ in range(18):
        fan = await make_user()
        await service.toggle_like(reel.id, fan.id)
    assert reel.is_trending is True

    clock.advance(hours=30)
    assert await service.refresh_trending(reel) is False
    assert reel.is_trending is False


@pytest.mark.asyncio
async def test_comments_count_regardless_of_age(session, clock, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    assert await service.sync_comment_count(reel.id, 11) is True
    clock.advance(days=30)
    assert await service.refresh_trending(reel) is True


@pytest.mark.asyncio
async def test_custom_threshold(session, clock, make_user, make_reel):
    author = await make_user()
    fan = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock, trending_threshold=2)

    await service.toggle_like(reel.id, fan.id)
    assert reel.is_trending is True


@pytest.mark.asyncio
async def test_shares_are_never_deduplicated(session, clock, make_user, make_reel):
    author = await make_user()
    fan = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    assert (await service.record_share(reel.id, fan.id, "whatsapp")).share_count == 1
    assert (await service.record_share(reel.id, fan.id, "whatsapp")).share_count == 2
    assert (await service.record_share(reel.id, fan.id)).share_count == 3


@pytest.mark.asyncio
async def test_unknown_share_platform_is_rejected(session, clock, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)

    with pytest.raises(InvalidArgumentError) as excinfo:
        await _service(session, clock).record_share(reel.id, author.id, "myspace")
    assert "copy-link" in excinfo.value.details["allowed"]


def test_parse_share_platform():
    assert parse_share_platform(None) is SharePlatform.INTERNAL
    assert parse_share_platform("copy-link") is SharePlatform.COPY_LINK
    assert parse_share_platform(SharePlatform.TWITTER) is SharePlatform.TWITTER
    with pytest.raises(InvalidArgumentError):
        parse_share_platform("Twitter")


@pytest.mark.asyncio
async def test_missing_content_and_actor(session, clock, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock)

    with pytest.raises(ContentNotFoundError):
        await service.toggle_like(uuid.uuid4(), author.id)
    with pytest.raises(UserNotFoundError):
        await service.toggle_like(reel.id, uuid.uuid4())
    with pytest.raises(InvalidArgumentError):
        await service.sync_comment_count(reel.id, -1)


@pytest.mark.asyncio
async def test_inactive_reel_rejects_engagement(session, clock, blob_store, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    await ContentService(session, blob_store, clock=clock).remove_content(reel.id)

    with pytest.raises(ContentNotFoundError):
        await _service(session, clock).record_view(reel.id, author.id)


@pytest.mark.asyncio
async def test_lost_version_claims_surface_as_conflict(
    session, clock, make_user, make_reel, monkeypatch
):
    author = await make_user()
    fan = await make_user()
    reel = await make_reel(author)
    service = _service(session, clock, max_retries=3)
    attempts = []

    async def always_lose(content_id, seen_version):
        attempts.append(seen_version)
        return False

    monkeypatch.setattr(service.content_repo, "claim_version", always_lose)

    with pytest.raises(ConflictError):
        await service.toggle_like(reel.id, fan.id)
    assert len(attempts) == 3
