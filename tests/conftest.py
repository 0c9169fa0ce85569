"""Pytest configuration and fixtures."""

import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import Settings
from core.exceptions import ImageUploadError
from infrastructure.database.models import Base
from infrastructure.storage.provider import ImageUpload


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory, one shared connection per engine)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

IMAGE_HOST = "https://images.test"


class FakeImageStore:
    """In-memory image store.

    Returns ``{IMAGE_HOST}/{filename}`` so tests can tell uploads apart
    without relying on upload order. Payloads listed in ``fail_on`` raise
    ``ImageUploadError``.
    """

    def __init__(self) -> None:
        self.uploads: list[ImageUpload] = []
        self.fail_on: set[bytes] = set()

    async def upload(self, image: ImageUpload) -> str:
        if image.data in self.fail_on:
            raise ImageUploadError("Image store unavailable")
        self.uploads.append(image)
        return f"{IMAGE_HOST}/{image.filename or 'upload'}"


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        app_env="test",
        database_url=TEST_DATABASE_URL,
        create_tables_on_startup=False,
        supabase_url="",
        supabase_service_role_key="",
    )


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def client(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    image_store: FakeImageStore,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to the in-memory database and fake image store.

    The ASGI transport does not run the lifespan, so tables come from the
    ``engine`` fixture.
    """
    from api.v1.dependencies import build_profile_service, get_profile_service
    from main import create_app

    app = create_app(test_settings)
    app.state.session_factory = session_factory
    service = build_profile_service(session_factory, image_store)
    app.dependency_overrides[get_profile_service] = lambda: service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
