"""Result cache keyed by upload content hash."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog
from pydantic import ValidationError as PydanticValidationError

from typoscale.core.config import CacheConfig
from typoscale.core.exceptions import InfrastructureError
from typoscale.core.metrics import track_cache_lookup, track_fail_open
from typoscale.models.analysis_cache import AnalysisCache
from typoscale.models.base import as_utc
from typoscale.store.record_store import RecordStore
from typoscale.typography.schemas import ComplianceReport

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    return datetime.now(UTC)


class ResultCache:
    """Stores compliance reports with a time-to-live.

    Expired rows are treated as absent on read and removed by
    ``purge_expired``. Writes are unconditional upserts, so concurrent writers
    for the same hash converge on whichever write lands last. Store outages
    degrade to cache misses rather than failing the analysis.
    """

    def __init__(
        self,
        store: RecordStore,
        config: CacheConfig | None = None,
        clock: Clock = utc_clock,
    ) -> None:
        self.store = store
        self.config = config or CacheConfig()
        self.clock = clock

    async def get(self, content_hash: str) -> ComplianceReport | None:
        try:
            row = await self.store.find_by_key(AnalysisCache, content_hash)
        except InfrastructureError as e:
            track_fail_open("cache_read")
            logger.error("cache_read_failed", content_hash=content_hash, error=str(e))
            return None

        if row is None or as_utc(row.expires_at) <= self.clock():
            track_cache_lookup(hit=False)
            logger.debug("cache_miss", content_hash=content_hash, expired=row is not None)
            return None

        try:
            report = ComplianceReport.from_json(row.analysis_result)
        except PydanticValidationError as e:
            track_cache_lookup(hit=False)
            logger.warning("cache_entry_invalid", content_hash=content_hash, error=str(e))
            return None

        track_cache_lookup(hit=True)
        logger.debug("cache_hit", content_hash=content_hash)
        return report

    async def put(
        self,
        content_hash: str,
        report: ComplianceReport,
        ttl: timedelta | None = None,
    ) -> None:
        expires_at = self.clock() + (ttl if ttl is not None else self.config.ttl)
        entry = AnalysisCache(
            content_hash=content_hash,
            analysis_result=report.to_json(),
            expires_at=expires_at,
        )
        try:
            await self.store.upsert(entry)
        except InfrastructureError as e:
            track_fail_open("cache_write")
            logger.error("cache_write_failed", content_hash=content_hash, error=str(e))
            return
        logger.debug("cache_stored", content_hash=content_hash, expires_at=expires_at.isoformat())

    async def invalidate(self, content_hash: str) -> int:
        return await self.store.delete_where(AnalysisCache, AnalysisCache.content_hash == content_hash)

    async def invalidate_all(self) -> int:
        """Drop every cached report."""
        removed = await self.store.delete_where(AnalysisCache)
        logger.info("cache_invalidated", removed=removed)
        return removed

    async def purge_expired(self) -> int:
        """Physically delete rows that have already expired."""
        removed = await self.store.delete_where(
            AnalysisCache, AnalysisCache.expires_at <= self.clock()
        )
        logger.info("cache_expired_purged", removed=removed)
        return removed
