"""
Memory Journal Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite with a
       StaticPool, so all sessions share one connection). HTTP tests talk to
       the real app through httpx's ASGITransport with get_db_session
       overridden to use that database.

Fixture Hierarchy:
    db_engine            fresh schema per test
    ├── session_factory  async_sessionmaker bound to db_engine
    │   ├── db_session   one session for service-level tests
    │   └── test_client  httpx AsyncClient against journal.main.app
    temp_storage         tmp dir for FileService tests
    png_bytes            a real 4x4 PNG produced by Pillow

Timestamps:
    SQLite keeps DateTime values without their offset, so tests that seed
    created_at always pass UTC datetimes.
"""

import io
import os
import tempfile
from typing import AsyncGenerator

# Settings are read at import time; these must precede any journal import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="journal_test_")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["BADGE_TIMEZONE"] = "Asia/Seoul"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image as PILImage
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from journal.database import Base, get_db_session
from journal.models import comment, group, image, post  # noqa: F401


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient bound to the FastAPI app.

    ASGITransport does not run the lifespan, so the scheduler stays off and
    the module-level engine is never used for requests.
    """
    from journal.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    PILImage.new("RGB", (4, 4), (200, 120, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


# ══════════════════════════════════════════════════════════════════════════
# Request bodies
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def group_body():
    return {
        "name": "Hiking Club",
        "password": "trail-secret",
        "imageUrl": "http://test/uploads/cover.png",
        "isPublic": True,
        "introduction": "Weekend hikes around Seoul",
    }


@pytest.fixture
def post_body():
    return {
        "nickname": "mina",
        "title": "Bukhansan sunrise",
        "content": "We reached the summit just before dawn.",
        "postPassword": "post-secret",
        "imageUrl": "http://test/uploads/summit.png",
        "tags": ["hiking", "sunrise"],
        "location": "Bukhansan",
        "moment": "2024-05-01",
        "isPublic": True,
    }
