"""
Content Service

Lifecycle of a reel outside of engagement: upload, edit, moderation and
permanent deletion. Every step that changes what is counted goes through
the CounterLedger.

Create flow:
============
    1. Upload video (and thumbnail) to the blob store
    2. Insert the content_items row (+ tags)
    3. ledger.on_create → category +1, author's AUTHORED entry
    If step 2/3 fails the uploaded blobs are deleted (best-effort).

Delete flow:
============
    1. Conditional is_active flip; ledger.on_permanent_delete → category -1 only if
       that flip happened here, AUTHORED entry removed
    2. Blob deletes (best-effort; failures are logged, never raised)
    3. Engagement rows and the content row removed
    4. Caller schedules cascade_unlink for other users' saved/liked entries

Usage:
======
    service = ContentService(db, blob_store)
    item = await service.create_content(author_id, draft, MediaUpload(data, "video/mp4"))
"""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from reelcore.shared.adapters.blob_store import BlobStore
from reelcore.shared.core.exceptions import (
    ConflictError,
    ContentNotFoundError,
    InvalidArgumentError,
    UpstreamUnavailableError,
    UserNotFoundError,
)
from reelcore.shared.core.logging import get_logger
from reelcore.shared.models.content_item import ContentItem, ContentTag
from reelcore.shared.models.enums import ContentCategory, InactiveReason
from reelcore.shared.repositories.content_item_repository import ContentItemRepository
from reelcore.shared.repositories.engagement_repository import EngagementRepository
from reelcore.shared.repositories.user_repository import UserRepository
from reelcore.shared.services.counter_ledger import CounterLedger
from reelcore.shared.utils.time import Clock, utcnow
from reelcore.shared.utils.validation import normalize_tags


logger = get_logger(__name__)


MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


@dataclass
class MediaUpload:
    """Raw bytes of an uploaded file."""

    data: bytes
    content_type: Optional[str] = None
    filename: Optional[str] = None


@dataclass
class ContentDraft:
    """Metadata of a reel being created."""

    title: str
    category: ContentCategory
    description: str = ""
    tags: list[str] = field(default_factory=list)
    is_nsfw: bool = False
    duration_seconds: Optional[int] = None


@dataclass
class ContentChanges:
    """Partial update; None means unchanged."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ContentCategory] = None
    tags: Optional[list[str]] = None
    is_nsfw: Optional[bool] = None


def _validate_text(title: Optional[str], description: Optional[str]) -> None:
    if title is not None and not (1 <= len(title.strip()) <= MAX_TITLE_LENGTH):
        raise InvalidArgumentError(
            f"title must be 1-{MAX_TITLE_LENGTH} characters", details={"field": "title"}
        )
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidArgumentError(
            f"description must be at most {MAX_DESCRIPTION_LENGTH} characters",
            details={"field": "description"},
        )


class ContentService:
    """
    Service for the reel lifecycle.

    Handles:
    - Upload + record creation
    - Metadata edits including category moves
    - Moderator approval and removal
    - Permanent deletion
    """

    def __init__(
        self,
        session: AsyncSession,
        blob_store: BlobStore,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self.session = session
        self.blob_store = blob_store
        self.clock = clock
        self.content_repo = ContentItemRepository(session)
        self.engagement_repo = EngagementRepository(session)
        self.user_repo = UserRepository(session)
        self.ledger = CounterLedger(session)

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_content(
        self,
        author_id: UUID,
        draft: ContentDraft,
        media: MediaUpload,
        thumbnail: Optional[MediaUpload] = None,
    ) -> ContentItem:
        """
        Upload media and create the reel.

        The record is only written after the media is durably stored.

        Raises:
            UserNotFoundError: Unknown author
            InvalidArgumentError: Bad title/description/tags or empty media
            UpstreamUnavailableError: Upload failed
        """
        author = await self.user_repo.get(author_id)
        if author is None:
            raise UserNotFoundError(str(author_id))
        _validate_text(draft.title, draft.description)
        tags = normalize_tags(draft.tags)
        if not media.data:
            raise InvalidArgumentError("Video file is required", details={"field": "video"})

        media_ref = await self.blob_store.upload(
            media.data, kind="video", content_type=media.content_type
        )
        uploaded = [media_ref]
        thumbnail_ref = None
        try:
            if thumbnail is not None and thumbnail.data:
                thumbnail_ref = await self.blob_store.upload(
                    thumbnail.data, kind="thumbnail", content_type=thumbnail.content_type
                )
                uploaded.append(thumbnail_ref)

            item = ContentItem(
                author=author,
                title=draft.title.strip(),
                description=draft.description or "",
                category=draft.category,
                is_nsfw=draft.is_nsfw,
                media_ref=media_ref,
                thumbnail_ref=thumbnail_ref,
                duration_seconds=draft.duration_seconds,
                file_size_bytes=len(media.data),
                created_at=self.clock(),
                tags=[ContentTag(tag=tag) for tag in tags],
            )
            self.session.add(item)
            await self.session.flush()
            await self.ledger.on_create(item)
        except (SQLAlchemyError, UpstreamUnavailableError):
            await self._discard_uploads(uploaded)
            raise

        logger.info(
            "Reel created",
            content_id=str(item.id),
            author_id=str(author_id),
            category=item.category.value,
        )
        return item

    # ═══════════════════════════════════════════════════════════════════════════
    # UPDATE
    # ═══════════════════════════════════════════════════════════════════════════

    async def update_content(self, content_id: UUID, changes: ContentChanges) -> ContentItem:
        """
        Apply a partial metadata update.

        A category change moves the count between the two category counters
        in this same transaction.

        Raises:
            ContentNotFoundError: Reel missing or inactive
            ConflictError: A concurrent engagement write holds a newer version
        """
        _validate_text(changes.title, changes.description)

        item = await self.content_repo.reload(content_id)
        if item is None or not item.is_active:
            raise ContentNotFoundError(str(content_id))
        if not await self.content_repo.claim_version(content_id, item.version):
            raise ConflictError(
                "Content is being modified concurrently, try again",
                details={"content_id": str(content_id)},
            )
        set_committed_value(item, "version", item.version + 1)

        if changes.title is not None:
            item.title = changes.title.strip()
        if changes.description is not None:
            item.description = changes.description
        if changes.is_nsfw is not None:
            item.is_nsfw = changes.is_nsfw
        if changes.tags is not None:
            self._replace_tags(item, normalize_tags(changes.tags))

        if changes.category is not None and changes.category != item.category:
            old_category = item.category
            item.category = changes.category
            await self.ledger.on_category_change(item, old_category, changes.category)

        await self.session.flush()
        logger.info("Reel updated", content_id=str(content_id))
        return item

    @staticmethod
    def _replace_tags(item: ContentItem, tags: list[str]) -> None:
        # Diff rather than reassign: a kept tag must not be deleted and re-inserted
        wanted = set(tags)
        for tag in list(item.tags):
            if tag.tag not in wanted:
                item.tags.remove(tag)
        present = {tag.tag for tag in item.tags}
        for tag in tags:
            if tag not in present:
                item.tags.append(ContentTag(tag=tag))

    # ═══════════════════════════════════════════════════════════════════════════
    # MODERATION
    # ═══════════════════════════════════════════════════════════════════════════

    async def set_approval(
        self,
        content_id: UUID,
        moderator_id: UUID,
        approved: bool = True,
    ) -> ContentItem:
        """Approve or un-approve a reel. Approval does not affect counters."""
        if await self.user_repo.get(moderator_id) is None:
            raise UserNotFoundError(str(moderator_id))
        item = await self.content_repo.get_active(content_id)
        if item is None:
            raise ContentNotFoundError(str(content_id))

        item.is_approved = approved
        item.approved_by = moderator_id if approved else None
        item.approved_at = self.clock() if approved else None
        await self.session.flush()

        logger.info(
            "Reel approval set",
            content_id=str(content_id),
            moderator_id=str(moderator_id),
            approved=approved,
        )
        return item

    async def remove_content(
        self,
        content_id: UUID,
        reason: InactiveReason = InactiveReason.MODERATOR_REMOVED,
    ) -> bool:
        """
        Soft-remove a reel from the feeds. Idempotent.

        Returns:
            True if this call deactivated the reel, False if it already was inactive

        Raises:
            ContentNotFoundError: No such reel at all
        """
        category = await self.content_repo.deactivate_if_active(content_id, reason)
        if category is None:
            if await self.content_repo.get(content_id) is None:
                raise ContentNotFoundError(str(content_id))
            return False

        await self.ledger.on_deactivate(category)
        logger.info("Reel removed", content_id=str(content_id), reason=reason.value)
        return True

    # ═══════════════════════════════════════════════════════════════════════════
    # DELETE
    # ═══════════════════════════════════════════════════════════════════════════

    async def delete_content(self, content_id: UUID) -> UUID:
        """
        Permanently delete a reel.

        Blob deletion is best-effort: an unreachable store leaves an
        orphaned object behind but never fails the delete.

        Returns:
            The deleted id, for scheduling the fan-out cascade

        Raises:
            ContentNotFoundError: No such reel
        """
        item = await self.content_repo.reload(content_id)
        if item is None:
            raise ContentNotFoundError(str(content_id))

        # Reconciliation or a moderator may deactivate the reel after the read
        retired_category = await self.content_repo.retire_for_delete(content_id)
        await self.ledger.on_permanent_delete(item, retired_category)

        for ref in (item.media_ref, item.thumbnail_ref):
            if not ref:
                continue
            try:
                await self.blob_store.delete(ref)
            except UpstreamUnavailableError as e:
                logger.warning(
                    "Blob delete failed, object left orphaned",
                    content_id=str(content_id),
                    ref=ref,
                    error=e.message,
                )

        await self.engagement_repo.delete_for_content(content_id)
        await self.session.delete(item)
        await self.session.flush()

        logger.info("Reel deleted", content_id=str(content_id))
        return content_id

    # ═══════════════════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════════════════

    async def _discard_uploads(self, refs: list[str]) -> None:
        for ref in refs:
            try:
                await self.blob_store.delete(ref)
            except UpstreamUnavailableError as e:
                logger.warning("Could not discard upload", ref=ref, error=e.message)
