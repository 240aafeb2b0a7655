"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tests.fixtures.documents import FakeClock, vision_payload
from typoscale.api.dependencies.services import (
    get_clock,
    get_file_storage,
    get_record_store,
    get_vision_client,
)
from typoscale.api.main import app
from typoscale.core.config import CacheConfig, RateLimitConfig, Settings, get_settings
from typoscale.models.base import Base
from typoscale.store.file_storage import LocalFileStorage
from typoscale.store.record_store import SQLRecordStore
from typoscale.typography.schemas import ComplianceReport
from typoscale.vision.client import VisionClient, parse_vision_report

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limit_config() -> RateLimitConfig:
    return RateLimitConfig(enabled=True, per_identity_limit=3, global_limit=5, window=timedelta(hours=1))


@pytest.fixture
def cache_config() -> CacheConfig:
    return CacheConfig(ttl=timedelta(hours=24))


@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> SQLRecordStore:
    return SQLRecordStore(session_factory)


@pytest.fixture
def file_storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
def mock_vision() -> MagicMock:
    """Vision client whose replies are set per test."""
    vision = MagicMock(spec=VisionClient)
    vision.analyze = AsyncMock(return_value=vision_payload(24, 16, 12))
    vision.check_health = AsyncMock(return_value=True)

    async def analyze_report(image_bytes: bytes) -> ComplianceReport:
        return parse_vision_report(await vision.analyze(image_bytes))

    vision.analyze_report = AsyncMock(side_effect=analyze_report)
    return vision


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=TEST_DATABASE_URL,
        upload_dir=str(tmp_path / "uploads"),
        rate_limit_enabled=True,
        rate_limit_per_hour=3,
        rate_limit_global_per_hour=100,
        openai_api_key="sk-test",
    )


@pytest_asyncio.fixture(scope="function")
async def client(
    test_settings: Settings,
    store: SQLRecordStore,
    file_storage: LocalFileStorage,
    mock_vision: MagicMock,
    clock: FakeClock,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client with storage, vision and clock overridden."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_file_storage] = lambda: file_storage
    app.dependency_overrides[get_vision_client] = lambda: mock_vision
    app.dependency_overrides[get_clock] = lambda: clock
    app.state.rate_limiter = None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.rate_limiter = None
