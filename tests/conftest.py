import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from reelcore.api.dependencies.database import get_db
from reelcore.api.dependencies.services import get_blob_store, get_session_factory
from reelcore.api.main import app
from reelcore.config.settings import settings
from reelcore.shared.core.exceptions import UpstreamUnavailableError
from reelcore.shared.models import Base, ContentCategory, UserRole
from reelcore.shared.repositories.category_repository import CategoryRepository
from reelcore.shared.repositories.user_repository import UserRepository
from reelcore.shared.services.content_service import ContentDraft, ContentService, MediaUpload
from reelcore.worker.sweeps import SweepRegistry


START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SleepRecorder:
    """Stand-in for asyncio.sleep that records the requested delays."""

    def __init__(self):
        self.calls: list[float] = []
        self.on_sleep = None

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.on_sleep is not None:
            self.on_sleep()


class FakeBlobStore:
    """In-memory blob store with switches for the failure modes of a real one."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.unavailable: set[str] = set()
        self.slow: set[str] = set()
        self.fail_upload_kinds: set[str] = set()
        self.fail_deletes = False
        self.deleted: list[str] = []
        self.exists_calls: list[str] = []
        self._counter = 0

    async def upload(self, data: bytes, *, kind: str, content_type: Optional[str] = None) -> str:
        if kind in self.fail_upload_kinds:
            raise UpstreamUnavailableError("blob_store", f"Upload failed: {kind}")
        self._counter += 1
        ref = f"{kind}s/{kind}_{self._counter}"
        self.objects[ref] = data
        return ref

    async def exists(self, ref: str) -> bool:
        self.exists_calls.append(ref)
        if ref in self.slow:
            await asyncio.sleep(1)
        if ref in self.unavailable:
            raise UpstreamUnavailableError("blob_store", "Existence check failed: 503")
        return ref in self.objects

    async def delete(self, ref: str) -> None:
        if self.fail_deletes:
            raise UpstreamUnavailableError("blob_store", "Delete failed: timeout")
        self.objects.pop(ref, None)
        self.deleted.append(ref)

    def lose(self, ref: str) -> None:
        """Drop an object behind the engine's back."""
        self.objects.pop(ref, None)


# ═══════════════════════════════════════════════════════════════════════════════
# DATABASE
# ═══════════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    db_path = tmp_path / "reelcore.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with factory() as seed_session:
        await CategoryRepository(seed_session).seed_all()
        await seed_session.commit()

    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as db_session:
        yield db_session


# ═══════════════════════════════════════════════════════════════════════════════
# COLLABORATORS
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


# ═══════════════════════════════════════════════════════════════════════════════
# FACTORIES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    async def _make(role: UserRole = UserRole.USER, show_nsfw: bool = False):
        counter["n"] += 1
        return await UserRepository(session).create(
            username=f"user{counter['n']}",
            role=role,
            show_nsfw=show_nsfw,
        )

    return _make


@pytest.fixture
def make_reel(session, blob_store, clock):
    async def _make(
        author,
        *,
        title: str = "Street food in Bangkok",
        category: ContentCategory = ContentCategory.FOOD,
        description: str = "",
        tags: Optional[list[str]] = None,
        is_nsfw: bool = False,
    ):
        clock.advance(seconds=1)
        service = ContentService(session, blob_store, clock=clock)
        return await service.create_content(
            author.id,
            ContentDraft(
                title=title,
                category=category,
                description=description,
                tags=tags or [],
                is_nsfw=is_nsfw,
            ),
            MediaUpload(data=b"\x00\x00\x00\x18ftypmp42", content_type="video/mp4"),
        )

    return _make


# ═══════════════════════════════════════════════════════════════════════════════
# API CLIENT
# ═══════════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def api_client(session_factory, blob_store, monkeypatch):
    monkeypatch.setattr(settings, "RECONCILE_SAMPLE_RATE", 0.0)

    async def override_get_db():
        async with session_factory() as db_session:
            try:
                yield db_session
                await db_session.commit()
            except Exception:
                await db_session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.state.sweep_registry = SweepRegistry()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    await app.state.sweep_registry.shutdown()
    app.dependency_overrides.clear()
