import uuid

import pytest

from reelcore.shared.core.exceptions import (
    ConflictError,
    ContentNotFoundError,
    InvalidArgumentError,
    UpstreamUnavailableError,
    UserNotFoundError,
)
from reelcore.shared.models import ContentCategory, IndexRelation, InactiveReason, UserRole
from reelcore.shared.repositories.category_repository import CategoryRepository
from reelcore.shared.repositories.content_item_repository import ContentItemRepository
from reelcore.shared.repositories.engagement_repository import EngagementRepository
from reelcore.shared.repositories.user_content_index_repository import UserContentIndexRepository
from reelcore.shared.services.content_service import (
    ContentChanges,
    ContentDraft,
    ContentService,
    MediaUpload,
)
from reelcore.shared.services.engagement_service import EngagementService


VIDEO = MediaUpload(data=b"\x00\x00\x00\x18ftypmp42", content_type="video/mp4", filename="a.mp4")
THUMB = MediaUpload(data=b"\x89PNG", content_type="image/png", filename="a.png")


@pytest.fixture
def service(session, blob_store, clock):
    return ContentService(session, blob_store, clock=clock)


# ═══════════════════════════════════════════════════════════════════════════════
# CREATE
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_stores_media_then_counts(session, service, blob_store, make_user):
    author = await make_user()
    draft = ContentDraft(
        title="  Morning run  ",
        category=ContentCategory.SPORTS,
        description="5k along the river",
        tags=["Running", "running", " outdoors "],
    )

    reel = await service.create_content(author.id, draft, VIDEO, THUMB)

    assert reel.title == "Morning run"
    assert reel.tag_names == ["outdoors", "running"]
    assert blob_store.objects[reel.media_ref] == VIDEO.data
    assert blob_store.objects[reel.thumbnail_ref] == THUMB.data
    assert reel.file_size_bytes == len(VIDEO.data)
    assert reel.is_active is True
    assert reel.is_approved is True
    assert reel.author.username == author.username
    assert await CategoryRepository(session).get_count(ContentCategory.SPORTS) == 1
    assert await UserContentIndexRepository(session).has_entry(
        author.id, reel.id, IndexRelation.AUTHORED
    )


@pytest.mark.asyncio
async def test_create_rejects_bad_input_before_uploading(service, blob_store, make_user):
    author = await make_user()

    with pytest.raises(UserNotFoundError):
        await service.create_content(
            uuid.uuid4(), ContentDraft(title="x", category=ContentCategory.NEWS), VIDEO
        )
    with pytest.raises(InvalidArgumentError):
        await service.create_content(
            author.id, ContentDraft(title="   ", category=ContentCategory.NEWS), VIDEO
        )
    with pytest.raises(InvalidArgumentError):
        await service.create_content(
            author.id, ContentDraft(title="t" * 101, category=ContentCategory.NEWS), VIDEO
        )
    with pytest.raises(InvalidArgumentError):
        await service.create_content(
            author.id,
            ContentDraft(title="ok", category=ContentCategory.NEWS, tags=["x" * 31]),
            VIDEO,
        )
    with pytest.raises(InvalidArgumentError):
        await service.create_content(
            author.id, ContentDraft(title="ok", category=ContentCategory.NEWS), MediaUpload(b"")
        )

    assert blob_store.objects == {}


@pytest.mark.asyncio
async def test_failed_thumbnail_discards_uploaded_video(session, service, blob_store, make_user):
    author = await make_user()
    blob_store.fail_upload_kinds.add("thumbnail")

    with pytest.raises(UpstreamUnavailableError):
        await service.create_content(
            author.id, ContentDraft(title="ok", category=ContentCategory.MUSIC), VIDEO, THUMB
        )

    assert blob_store.objects == {}
    assert len(blob_store.deleted) == 1
    assert await CategoryRepository(session).get_count(ContentCategory.MUSIC) == 0


@pytest.mark.asyncio
async def test_failed_video_upload_creates_nothing(session, service, blob_store, make_user):
    author = await make_user()
    blob_store.fail_upload_kinds.add("video")

    with pytest.raises(UpstreamUnavailableError):
        await service.create_content(
            author.id, ContentDraft(title="ok", category=ContentCategory.MUSIC), VIDEO
        )

    assert blob_store.deleted == []
    assert await CategoryRepository(session).get_count(ContentCategory.MUSIC) == 0


# ═══════════════════════════════════════════════════════════════════════════════
# UPDATE
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_metadata_and_tags(service, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author, tags=["food", "thai"])
    version = reel.version

    updated = await service.update_content(
        reel.id,
        ContentChanges(title="Pad thai", description="Late night", tags=["Thai", "noodles"]),
    )

    assert updated.title == "Pad thai"
    assert updated.description == "Late night"
    assert updated.tag_names == ["noodles", "thai"]
    assert updated.category == ContentCategory.FOOD
    assert updated.version == version + 1


@pytest.mark.asyncio
async def test_update_category_moves_counter(session, service, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author, category=ContentCategory.COMEDY)

    await service.update_content(reel.id, ContentChanges(category=ContentCategory.EDITS))
    # Same category again is a no-op for the counters
    await service.update_content(reel.id, ContentChanges(category=ContentCategory.EDITS))

    categories = CategoryRepository(session)
    assert await categories.get_count(ContentCategory.COMEDY) == 0
    assert await categories.get_count(ContentCategory.EDITS) == 1


@pytest.mark.asyncio
async def test_update_conflicts_with_concurrent_writer(service, make_user, make_reel, monkeypatch):
    author = await make_user()
    reel = await make_reel(author)

    async def lose(content_id, seen_version):
        return False

    monkeypatch.setattr(service.content_repo, "claim_version", lose)

    with pytest.raises(ConflictError):
        await service.update_content(reel.id, ContentChanges(category=ContentCategory.NEWS))


@pytest.mark.asyncio
async def test_update_missing_or_inactive(service, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    await service.remove_content(reel.id)

    with pytest.raises(ContentNotFoundError):
        await service.update_content(reel.id, ContentChanges(title="again"))
    with pytest.raises(ContentNotFoundError):
        await service.update_content(uuid.uuid4(), ContentChanges(title="again"))
    with pytest.raises(InvalidArgumentError):
        await service.update_content(reel.id, ContentChanges(description="d" * 501))


# ═══════════════════════════════════════════════════════════════════════════════
# MODERATION
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_set_approval_records_moderator(service, clock, make_user, make_reel):
    author = await make_user()
    moderator = await make_user(role=UserRole.MODERATOR)
    reel = await make_reel(author)

    unapproved = await service.set_approval(reel.id, moderator.id, approved=False)
    assert unapproved.is_approved is False
    assert unapproved.approved_by is None

    approved = await service.set_approval(reel.id, moderator.id)
    assert approved.is_approved is True
    assert approved.approved_by == moderator.id
    assert approved.approved_at == clock()

    with pytest.raises(UserNotFoundError):
        await service.set_approval(reel.id, uuid.uuid4())


@pytest.mark.asyncio
async def test_remove_content_is_idempotent(session, service, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author, category=ContentCategory.BEAUTY)

    assert await service.remove_content(reel.id) is True
    assert await service.remove_content(reel.id) is False

    stored = await ContentItemRepository(session).reload(reel.id)
    assert stored.inactive_reason == InactiveReason.MODERATOR_REMOVED
    assert await CategoryRepository(session).get_count(ContentCategory.BEAUTY) == 0

    with pytest.raises(ContentNotFoundError):
        await service.remove_content(uuid.uuid4())


# ═══════════════════════════════════════════════════════════════════════════════
# DELETE
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_removes_row_blobs_and_engagement(
    session, service, blob_store, clock, make_user
):
    author = await make_user()
    fan = await make_user()
    reel = await service.create_content(
        author.id, ContentDraft(title="bye", category=ContentCategory.NEWS), VIDEO, THUMB
    )
    await EngagementService(session, clock=clock).toggle_like(reel.id, fan.id)
    refs = [reel.media_ref, reel.thumbnail_ref]

    assert await service.delete_content(reel.id) == reel.id

    assert blob_store.deleted == refs
    assert await ContentItemRepository(session).get(reel.id) is None
    assert await EngagementRepository(session).count_likes(reel.id) == 0
    assert await CategoryRepository(session).get_count(ContentCategory.NEWS) == 0


@pytest.mark.asyncio
async def test_delete_survives_blob_store_failure(
    session, service, blob_store, make_user, make_reel
):
    author = await make_user()
    reel = await make_reel(author)
    blob_store.fail_deletes = True

    await service.delete_content(reel.id)

    assert reel.media_ref in blob_store.objects
    assert await ContentItemRepository(session).get(reel.id) is None

    with pytest.raises(ContentNotFoundError):
        await service.delete_content(reel.id)
