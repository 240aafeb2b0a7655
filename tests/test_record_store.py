"""Tests for the SQL record store."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from tests.fixtures.documents import FIXED_NOW
from typoscale.core.exceptions import InfrastructureError
from typoscale.models.analysis_cache import AnalysisCache
from typoscale.models.rate_limit import RateLimitWindow
from typoscale.store.record_store import SQLRecordStore


def window(identity: str, minutes_ago: int = 0) -> RateLimitWindow:
    start = FIXED_NOW - timedelta(minutes=minutes_ago)
    return RateLimitWindow(identity=identity, window_start=start, window_end=start + timedelta(hours=1))


class TestSQLRecordStore:
    @pytest.mark.asyncio
    async def test_insert_and_count(self, store: SQLRecordStore) -> None:
        await store.insert(window("ip:a"))
        await store.insert(window("ip:a", minutes_ago=90))
        await store.insert(window("ip:b"))

        assert await store.count_where(RateLimitWindow) == 3
        assert await store.count_where(RateLimitWindow, RateLimitWindow.identity == "ip:a") == 2

    @pytest.mark.asyncio
    async def test_find_where(self, store: SQLRecordStore) -> None:
        await store.insert(window("ip:a"))
        await store.insert(window("ip:b"))

        rows = await store.find_where(RateLimitWindow, RateLimitWindow.identity == "ip:b")

        assert [row.identity for row in rows] == ["ip:b"]

    @pytest.mark.asyncio
    async def test_delete_where_returns_rowcount(self, store: SQLRecordStore) -> None:
        await store.insert(window("ip:a", minutes_ago=180))
        await store.insert(window("ip:a"))

        removed = await store.delete_where(
            RateLimitWindow,
            RateLimitWindow.window_end < FIXED_NOW - timedelta(hours=1),
        )

        assert removed == 1
        assert await store.count_where(RateLimitWindow) == 1

    @pytest.mark.asyncio
    async def test_upsert_replaces_by_primary_key(self, store: SQLRecordStore) -> None:
        expires = FIXED_NOW + timedelta(hours=24)
        await store.upsert(AnalysisCache(content_hash="c" * 64, analysis_result="{}", expires_at=expires))
        await store.upsert(AnalysisCache(content_hash="c" * 64, analysis_result='{"v": 2}', expires_at=expires))

        row = await store.find_by_key(AnalysisCache, "c" * 64)

        assert row is not None
        assert row.analysis_result == '{"v": 2}'
        assert await store.count_where(AnalysisCache) == 1

    @pytest.mark.asyncio
    async def test_find_by_key_missing(self, store: SQLRecordStore) -> None:
        assert await store.find_by_key(AnalysisCache, "missing") is None

    @pytest.mark.asyncio
    async def test_database_errors_become_infrastructure_errors(
        self, store: SQLRecordStore, engine: AsyncEngine
    ) -> None:
        async with engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE rate_limit_windows")

        with pytest.raises(InfrastructureError) as exc_info:
            await store.count_where(RateLimitWindow)

        assert exc_info.value.details == {"operation": "count_where"}
