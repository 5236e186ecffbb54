"""
Reel Handler

Feed reads, reel lifecycle and engagement endpoints.

ARCHITECTURE:
=============
    Handler → Service → Repository → Model

Handlers should ONLY:
- Parse HTTP requests (strings into domain enums, multipart into uploads)
- Call service methods
- Format HTTP responses
- Schedule background jobs (feed sampling, delete cascade)

Business logic belongs in the SERVICE layer.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, File, Form, Query, UploadFile, status

from reelcore.api.dependencies import CurrentActor, DbSession, OptionalViewer
from reelcore.api.dependencies.services import (
    BlobStoreDep,
    ContentServiceDep,
    CounterLedgerDep,
    EngagementServiceDep,
    FeedServiceDep,
    SessionFactoryDep,
)
from reelcore.shared.models.enums import ContentCategory, FeedSort
from reelcore.shared.schemas.common import PaginationMeta
from reelcore.shared.schemas.content import (
    DeleteReelResponse,
    FeedResponse,
    LikeResponse,
    ReelDetailResponse,
    ReelResponse,
    SaveResponse,
    ShareRequest,
    ShareResponse,
    UpdateReelRequest,
    ViewRequest,
    ViewResponse,
)
from reelcore.shared.services.content_service import ContentChanges, ContentDraft, MediaUpload
from reelcore.shared.services.feed_service import FeedPage, FeedQuery, Viewer
from reelcore.shared.utils.validation import normalize_tags, parse_enum
from reelcore.worker.jobs import run_cascade_cleanup, run_feed_sample
from reelcore.worker.pipelines.reconciliation_pipeline import ReconciliationPipeline


router = APIRouter()


def _feed_response(page: FeedPage) -> FeedResponse:
    return FeedResponse(
        items=[ReelResponse.from_entry(entry) for entry in page.items],
        pagination=PaginationMeta.from_page(page),
    )


def _schedule_feed_sample(
    page: FeedPage,
    background_tasks: BackgroundTasks,
    db: DbSession,
    blob_store: BlobStoreDep,
    session_factory: SessionFactoryDep,
) -> None:
    """Check a sampled fraction of served pages for missing media."""
    if not page.items:
        return
    if ReconciliationPipeline(db, blob_store).should_sample():
        background_tasks.add_task(
            run_feed_sample,
            [entry.item.id for entry in page.items],
            session_factory,
            blob_store,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# FEED
# ═══════════════════════════════════════════════════════════════════════════════


@router.get("", response_model=FeedResponse)
async def list_reels(
    viewer: OptionalViewer,
    feed_service: FeedServiceDep,
    background_tasks: BackgroundTasks,
    db: DbSession,
    blob_store: BlobStoreDep,
    session_factory: SessionFactoryDep,
    page: int = Query(1, description="Page number (1-indexed)"),
    limit: Optional[int] = Query(None, description="Items per page (max 50)"),
    sort: str = Query(FeedSort.NEWEST.value, description="newest | oldest | trending | popular"),
    category: Optional[str] = Query(None, description="Filter by category"),
    tags: Optional[str] = Query(None, description="Comma-separated; matches any"),
    author_id: Optional[UUID] = Query(None, description="Filter by author"),
    search: Optional[str] = Query(None, description="Free text over title, description, tags"),
    moderation_queue: bool = Query(False, description="Include unapproved reels (moderators)"),
):
    """
    List reels.

    Anonymous viewers get the public feed. Signed-in viewers additionally
    get is_liked / is_saved and, if opted in, NSFW reels.
    """
    query = FeedQuery(
        page=page,
        limit=limit,
        sort=parse_enum(FeedSort, sort, "sort"),
        category=parse_enum(ContentCategory, category, "category"),
        tags=normalize_tags(tags),
        author_id=author_id,
        search=search,
        moderation_queue=moderation_queue,
    )
    result = await feed_service.list_feed(query, viewer)
    _schedule_feed_sample(result, background_tasks, db, blob_store, session_factory)
    return _feed_response(result)


@router.get("/trending", response_model=FeedResponse)
async def list_trending(
    viewer: OptionalViewer,
    feed_service: FeedServiceDep,
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    category: Optional[str] = Query(None),
):
    """List reels currently flagged trending."""
    query = FeedQuery(
        page=page,
        limit=limit,
        sort=FeedSort.TRENDING,
        category=parse_enum(ContentCategory, category, "category"),
        trending_only=True,
    )
    return _feed_response(await feed_service.list_feed(query, viewer))


@router.get("/saved", response_model=FeedResponse)
async def list_saved(
    actor: CurrentActor,
    feed_service: FeedServiceDep,
    page: int = Query(1),
    limit: Optional[int] = Query(None),
):
    """The caller's saved reels that are still in the feeds."""
    query = FeedQuery(page=page, limit=limit, saved_by=actor.id)
    return _feed_response(await feed_service.list_feed(query, Viewer.from_user(actor)))


@router.get("/liked", response_model=FeedResponse)
async def list_liked(
    actor: CurrentActor,
    feed_service: FeedServiceDep,
    page: int = Query(1),
    limit: Optional[int] = Query(None),
):
    """The caller's liked reels that are still in the feeds."""
    query = FeedQuery(page=page, limit=limit, liked_by=actor.id)
    return _feed_response(await feed_service.list_feed(query, Viewer.from_user(actor)))


@router.get("/{content_id}", response_model=ReelResponse)
async def get_reel(
    content_id: UUID,
    viewer: OptionalViewer,
    feed_service: FeedServiceDep,
):
    """
    Get one reel.

    For a signed-in viewer this also records a (deduplicated) view.
    """
    entry = await feed_service.get_item(content_id, viewer)
    return ReelResponse.from_entry(entry)


# ═══════════════════════════════════════════════════════════════════════════════
# LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("", response_model=ReelDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_reel(
    actor: CurrentActor,
    content_service: ContentServiceDep,
    video: UploadFile = File(..., description="Video file"),
    thumbnail: Optional[UploadFile] = File(None, description="Thumbnail image"),
    title: str = Form(...),
    category: str = Form(...),
    description: str = Form(""),
    tags: Optional[str] = Form(None, description="Comma-separated tags"),
    is_nsfw: bool = Form(False),
    duration_seconds: Optional[int] = Form(None),
):
    """
    Upload a reel.

    The media is stored first; the record only exists once the upload
    succeeded.
    """
    draft = ContentDraft(
        title=title,
        category=parse_enum(ContentCategory, category, "category"),
        description=description,
        tags=normalize_tags(tags),
        is_nsfw=is_nsfw,
        duration_seconds=duration_seconds,
    )
    media = MediaUpload(
        data=await video.read(),
        content_type=video.content_type,
        filename=video.filename,
    )
    thumbnail_upload = None
    if thumbnail is not None:
        thumbnail_upload = MediaUpload(
            data=await thumbnail.read(),
            content_type=thumbnail.content_type,
            filename=thumbnail.filename,
        )

    item = await content_service.create_content(actor.id, draft, media, thumbnail_upload)
    return ReelDetailResponse.from_item(item)


@router.patch("/{content_id}", response_model=ReelDetailResponse)
async def update_reel(
    content_id: UUID,
    request: UpdateReelRequest,
    actor: CurrentActor,
    content_service: ContentServiceDep,
):
    """Update title, description, category, tags or the NSFW flag."""
    changes = ContentChanges(
        title=request.title,
        description=request.description,
        category=parse_enum(ContentCategory, request.category, "category"),
        tags=request.tags,
        is_nsfw=request.is_nsfw,
    )
    item = await content_service.update_content(content_id, changes)
    return ReelDetailResponse.from_item(item)


@router.delete("/{content_id}", response_model=DeleteReelResponse)
async def delete_reel(
    content_id: UUID,
    actor: CurrentActor,
    content_service: ContentServiceDep,
    db: DbSession,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactoryDep,
):
    """
    Permanently delete a reel.

    Other users' saved/liked entries are cleaned up in the background.
    """
    deleted_id = await content_service.delete_content(content_id)
    # The cascade uses its own sessions and must see the delete
    await db.commit()
    background_tasks.add_task(run_cascade_cleanup, deleted_id, session_factory)
    return DeleteReelResponse(id=str(deleted_id))


# ═══════════════════════════════════════════════════════════════════════════════
# ENGAGEMENT
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/{content_id}/like", response_model=LikeResponse)
async def toggle_like(
    content_id: UUID,
    actor: CurrentActor,
    engagement_service: EngagementServiceDep,
):
    """Like the reel, or unlike it if already liked."""
    result = await engagement_service.toggle_like(content_id, actor.id)
    return LikeResponse(liked=result.liked, like_count=result.like_count)


@router.post("/{content_id}/view", response_model=ViewResponse)
async def record_view(
    content_id: UUID,
    actor: CurrentActor,
    engagement_service: EngagementServiceDep,
    request: Optional[ViewRequest] = None,
):
    """Record a view; repeated views within 24 hours are not counted."""
    watch_duration = request.watch_duration_seconds if request is not None else 0
    result = await engagement_service.record_view(content_id, actor.id, watch_duration)
    return ViewResponse(counted=result.counted)


@router.post("/{content_id}/share", response_model=ShareResponse)
async def record_share(
    content_id: UUID,
    actor: CurrentActor,
    engagement_service: EngagementServiceDep,
    request: Optional[ShareRequest] = None,
):
    """Record a share to a platform (default: internal)."""
    platform = request.platform if request is not None else None
    result = await engagement_service.record_share(content_id, actor.id, platform)
    return ShareResponse(share_count=result.share_count)


@router.post("/{content_id}/save", response_model=SaveResponse)
async def toggle_save(
    content_id: UUID,
    actor: CurrentActor,
    ledger: CounterLedgerDep,
):
    """Save the reel, or unsave it if already saved."""
    result = await ledger.toggle_saved(actor.id, content_id)
    return SaveResponse(is_saved=result.is_saved, saved_count=result.saved_count)
