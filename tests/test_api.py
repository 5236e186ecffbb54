import uuid

import pytest

from reelcore.api.main import app
from reelcore.config.settings import settings
from reelcore.shared.models import ContentCategory, IndexRelation, UserRole
from reelcore.shared.repositories.category_repository import CategoryRepository
from reelcore.shared.repositories.content_item_repository import ContentItemRepository
from reelcore.shared.repositories.user_content_index_repository import UserContentIndexRepository
from reelcore.worker.sweeps import SweepStatus


def _as(user):
    return {"X-Actor-Id": str(user.id)}


# ═══════════════════════════════════════════════════════════════════════════════
# PLUMBING
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_health_and_request_id(api_client):
    response = await api_client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"] == "req-123"

    generated = await api_client.get("/live")
    assert generated.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_unknown_reel_is_404(api_client):
    response = await api_client.get(f"/reels/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        "/reels?category=Cars",
        "/reels?sort=random",
        "/reels?limit=51",
        "/reels?page=0",
        "/reels/not-a-uuid",
    ],
)
async def test_bad_arguments_are_400(api_client, path):
    response = await api_client.get(path)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_ARGUMENT"


@pytest.mark.asyncio
async def test_actor_header_is_validated(api_client, session, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    await session.commit()

    missing = await api_client.post(f"/reels/{reel.id}/like")
    malformed = await api_client.post(f"/reels/{reel.id}/like", headers={"X-Actor-Id": "bob"})
    unknown = await api_client.post(
        f"/reels/{reel.id}/like", headers={"X-Actor-Id": str(uuid.uuid4())}
    )

    assert missing.status_code == 400
    assert malformed.status_code == 400
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_admin_routes_require_moderator(api_client, session, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author)
    await session.commit()

    response = await api_client.post(f"/admin/reels/{reel.id}/remove", headers=_as(author))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


# ═══════════════════════════════════════════════════════════════════════════════
# REELS
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_upload_then_list(api_client, session, blob_store, make_user):
    author = await make_user()
    await session.commit()

    created = await api_client.post(
        "/reels",
        headers=_as(author),
        data={"title": "Night market", "category": "Food", "tags": "Street, FOOD,street"},
        files={"video": ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")},
    )

    assert created.status_code == 201
    body = created.json()
    assert body["category"] == "Food"
    assert body["tags"] == ["food", "street"]
    assert body["media_ref"] in blob_store.objects

    feed = await api_client.get("/reels", params={"tags": "street"})
    assert feed.status_code == 200
    assert [item["id"] for item in feed.json()["items"]] == [body["id"]]
    assert feed.json()["pagination"]["total"] == 1

    categories = await api_client.get("/categories")
    counts = {entry["name"]: entry["content_count"] for entry in categories.json()["categories"]}
    assert counts["Food"] == 1
    assert categories.json()["total"] == 1


@pytest.mark.asyncio
async def test_upload_with_unknown_category(api_client, session, make_user):
    author = await make_user()
    await session.commit()

    response = await api_client.post(
        "/reels",
        headers=_as(author),
        data={"title": "x", "category": "Cars"},
        files={"video": ("clip.mp4", b"data", "video/mp4")},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_engagement_endpoints(api_client, session, make_user, make_reel):
    author = await make_user()
    fan = await make_user()
    reel = await make_reel(author)
    await session.commit()

    like = await api_client.post(f"/reels/{reel.id}/like", headers=_as(fan))
    view = await api_client.post(
        f"/reels/{reel.id}/view", headers=_as(fan), json={"watch_duration_seconds": 9}
    )
    repeat_view = await api_client.post(f"/reels/{reel.id}/view", headers=_as(fan))
    share = await api_client.post(
        f"/reels/{reel.id}/share", headers=_as(fan), json={"platform": "whatsapp"}
    )
    bad_share = await api_client.post(
        f"/reels/{reel.id}/share", headers=_as(fan), json={"platform": "fax"}
    )
    save = await api_client.post(f"/reels/{reel.id}/save", headers=_as(fan))

    assert like.json() == {"liked": True, "like_count": 1}
    assert view.json() == {"counted": True}
    assert repeat_view.json() == {"counted": False}
    assert share.json() == {"share_count": 1}
    assert bad_share.status_code == 400
    assert save.json() == {"is_saved": True, "saved_count": 1}

    feed = await api_client.get("/reels", headers=_as(fan))
    [entry] = feed.json()["items"]
    assert entry["is_liked"] is True
    assert entry["is_saved"] is True
    assert entry["views_count"] == 1
    assert entry["author"]["username"] == author.username


@pytest.mark.asyncio
async def test_update_reel_category(api_client, session, session_factory, make_user, make_reel):
    author = await make_user()
    reel = await make_reel(author, category=ContentCategory.FOOD)
    await session.commit()

    response = await api_client.patch(
        f"/reels/{reel.id}", headers=_as(author), json={"category": "Travel", "tags": ["Bangkok"]}
    )
    rejected = await api_client.patch(
        f"/reels/{reel.id}", headers=_as(author), json={"category": "Cars"}
    )

    assert response.status_code == 200
    assert response.json()["category"] == "Travel"
    assert response.json()["tags"] == ["bangkok"]
    assert rejected.status_code == 400
    async with session_factory() as check:
        categories = CategoryRepository(check)
        assert await categories.get_count(ContentCategory.FOOD) == 0
        assert await categories.get_count(ContentCategory.TRAVEL) == 1


@pytest.mark.asyncio
async def test_delete_cascades_to_other_users(
    api_client, session, session_factory, blob_store, make_user, make_reel
):
    author = await make_user()
    fans = [await make_user() for _ in range(3)]
    reel = await make_reel(author)
    await session.commit()
    for fan in fans:
        await api_client.post(f"/reels/{reel.id}/save", headers=_as(fan))
    await api_client.post(f"/reels/{reel.id}/like", headers=_as(fans[0]))

    response = await api_client.delete(f"/reels/{reel.id}", headers=_as(author))

    assert response.status_code == 200
    assert response.json() == {"id": str(reel.id), "deleted": True}
    assert reel.media_ref in blob_store.deleted
    async with session_factory() as check:
        index = UserContentIndexRepository(check)
        for fan in fans:
            assert await index.count_for_user(fan.id, IndexRelation.SAVED) == 0
        assert await index.count_for_user(fans[0].id, IndexRelation.LIKED) == 0
        assert await ContentItemRepository(check).get(reel.id) is None

    again = await api_client.delete(f"/reels/{reel.id}", headers=_as(author))
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_saved_and_liked_listings(api_client, session, make_user, make_reel):
    author = await make_user()
    fan = await make_user()
    kept = await make_reel(author, title="kept")
    loved = await make_reel(author, title="loved")
    await session.commit()
    await api_client.post(f"/reels/{kept.id}/save", headers=_as(fan))
    await api_client.post(f"/reels/{loved.id}/like", headers=_as(fan))

    saved = await api_client.get("/reels/saved", headers=_as(fan))
    liked = await api_client.get("/reels/liked", headers=_as(fan), params={"limit": 1})
    nothing = await api_client.get("/reels/saved", headers=_as(author))
    anonymous = await api_client.get("/reels/liked")

    [entry] = saved.json()["items"]
    assert entry["id"] == str(kept.id)
    assert entry["is_saved"] is True
    [entry] = liked.json()["items"]
    assert entry["id"] == str(loved.id)
    assert entry["is_liked"] is True
    assert liked.json()["pagination"]["total"] == 1
    assert nothing.json()["items"] == []
    assert anonymous.status_code == 400


@pytest.mark.asyncio
async def test_reel_lifecycle_end_to_end(api_client, session, make_user):
    author = await make_user()
    likers = [await make_user() for _ in range(3)]
    outsider = await make_user()
    await session.commit()

    async def food_count():
        response = await api_client.get("/categories")
        counts = {entry["name"]: entry["content_count"] for entry in response.json()["categories"]}
        return counts.get("Food", 0)

    before = await food_count()
    created = await api_client.post(
        "/reels",
        headers=_as(author),
        data={"title": "Boat noodles", "category": "Food", "tags": "thai"},
        files={"video": ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")},
    )
    assert created.status_code == 201
    reel_id = created.json()["id"]
    assert await food_count() == before + 1

    for liker in likers:
        response = await api_client.post(f"/reels/{reel_id}/like", headers=_as(liker))
        assert response.json()["liked"] is True
    for liker in likers:
        [entry] = (await api_client.get("/reels", headers=_as(liker))).json()["items"]
        assert entry["likes_count"] == 3
        assert entry["is_liked"] is True
    [entry] = (await api_client.get("/reels", headers=_as(outsider))).json()["items"]
    assert entry["likes_count"] == 3
    assert entry["is_liked"] is False

    deleted = await api_client.delete(f"/reels/{reel_id}", headers=_as(author))
    assert deleted.status_code == 200
    assert await food_count() == before

    feeds = [
        ("/reels", {}),
        ("/reels", {"sort": "oldest"}),
        ("/reels", {"sort": "popular"}),
        ("/reels/trending", {}),
        ("/reels", {"category": "Food"}),
        ("/reels", {"tags": "thai"}),
        ("/reels", {"search": "noodles"}),
        ("/reels", {"author_id": str(author.id)}),
    ]
    for viewer in [None, author, *likers, outsider]:
        headers = _as(viewer) if viewer else {}
        for path, params in feeds:
            response = await api_client.get(path, params=params, headers=headers)
            assert response.status_code == 200
            assert reel_id not in [item["id"] for item in response.json()["items"]]
    for liker in likers:
        liked = await api_client.get("/reels/liked", headers=_as(liker))
        assert liked.json()["items"] == []
    assert (await api_client.get(f"/reels/{reel_id}")).status_code == 404


@pytest.mark.asyncio
async def test_sampled_feed_read_invalidates_missing_media(
    api_client, session, session_factory, blob_store, make_user, make_reel, monkeypatch
):
    monkeypatch.setattr(settings, "RECONCILE_SAMPLE_RATE", 1.0)
    author = await make_user()
    kept = await make_reel(author, title="kept")
    lost = await make_reel(author, title="lost")
    await session.commit()
    blob_store.lose(lost.media_ref)

    first = await api_client.get("/reels")
    second = await api_client.get("/reels")

    # The page that triggered the check was already served
    assert len(first.json()["items"]) == 2
    assert [item["id"] for item in second.json()["items"]] == [str(kept.id)]
    async with session_factory() as check:
        assert await CategoryRepository(check).get_count(ContentCategory.FOOD) == 1


# ═══════════════════════════════════════════════════════════════════════════════
# ADMIN
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_moderation_endpoints(api_client, session, make_user, make_reel):
    author = await make_user()
    moderator = await make_user(role=UserRole.MODERATOR)
    reel = await make_reel(author)
    await session.commit()

    unapprove = await api_client.post(
        f"/admin/reels/{reel.id}/approve", headers=_as(moderator), json={"approved": False}
    )
    public = await api_client.get("/reels")
    queue = await api_client.get(
        "/reels", params={"moderation_queue": "true"}, headers=_as(moderator)
    )
    comments = await api_client.post(
        f"/admin/reels/{reel.id}/comments-count",
        headers=_as(moderator),
        json={"comments_count": 11},
    )
    removed = await api_client.post(f"/admin/reels/{reel.id}/remove", headers=_as(moderator))
    removed_again = await api_client.post(
        f"/admin/reels/{reel.id}/remove", headers=_as(moderator)
    )

    assert unapprove.json()["is_approved"] is False
    assert public.json()["items"] == []
    assert len(queue.json()["items"]) == 1
    assert comments.json() == {"is_trending": True}
    assert removed.json() == {"removed": True}
    assert removed_again.json() == {"removed": False}


@pytest.mark.asyncio
async def test_sweep_lifecycle(api_client, session, blob_store, make_user, make_reel):
    moderator = await make_user(role=UserRole.ADMIN)
    reels = [await make_reel(moderator) for _ in range(4)]
    await session.commit()
    blob_store.lose(reels[2].media_ref)

    started = await api_client.post(
        "/admin/reconciliation/sweeps",
        headers=_as(moderator),
        json={"batch_size": 2, "inter_batch_delay_ms": 0},
    )
    assert started.status_code == 202
    sweep_id = started.json()["id"]

    run = app.state.sweep_registry.get(uuid.UUID(sweep_id))
    await run.task

    status = await api_client.get(
        f"/admin/reconciliation/sweeps/{sweep_id}", headers=_as(moderator)
    )
    body = status.json()
    assert body["status"] == SweepStatus.COMPLETED.value
    assert body["scanned"] == 4
    assert body["invalidated"] == 1
    assert body["finished_at"] is not None

    unknown = await api_client.get(
        f"/admin/reconciliation/sweeps/{uuid.uuid4()}", headers=_as(moderator)
    )
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_counter_and_index_maintenance(api_client, session, make_user, make_reel):
    moderator = await make_user(role=UserRole.MODERATOR)
    await make_reel(moderator, category=ContentCategory.NEWS)
    await CategoryRepository(session).set_count(ContentCategory.NEWS, 5)
    await UserContentIndexRepository(session).add_entry(
        moderator.id, uuid.uuid4(), IndexRelation.SAVED
    )
    await session.commit()

    reconciled = await api_client.post("/admin/counters/reconcile", headers=_as(moderator))
    pruned = await api_client.post("/admin/index/prune", headers=_as(moderator))

    assert reconciled.json() == {"corrections": {"News": {"stored": 5, "actual": 1}}}
    assert pruned.json() == {"removed": 1}
