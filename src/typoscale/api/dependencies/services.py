"""Service wiring for API endpoints.

Each dependency builds its object from settings once per process. Tests
replace them through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from typoscale.analysis.service import AnalysisService
from typoscale.core.config import Settings, get_settings
from typoscale.core.database import get_session_factory
from typoscale.core.logging import get_logger
from typoscale.gateway.rate_limiter import RateLimiter, build_rate_limiter
from typoscale.store.file_storage import LocalFileStorage
from typoscale.store.record_store import RecordStore, SQLRecordStore
from typoscale.typography.cache import Clock, ResultCache, utc_clock
from typoscale.uploads.service import MaintenanceService, UploadService
from typoscale.vision.client import VisionClient

logger = get_logger(__name__)


@lru_cache
def get_record_store() -> RecordStore:
    return SQLRecordStore(get_session_factory())


@lru_cache
def get_file_storage() -> LocalFileStorage:
    return LocalFileStorage(get_settings().upload_dir)


@lru_cache
def get_vision_client() -> VisionClient | None:
    """Vision client, or None when no API key is configured."""
    settings = get_settings()
    if not settings.openai_api_key:
        logger.warning("vision_client_unconfigured")
        return None
    return VisionClient(settings.analysis_config(), api_key=settings.openai_api_key)


def get_clock() -> Clock:
    return utc_clock


def get_result_cache(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[RecordStore, Depends(get_record_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ResultCache:
    return ResultCache(store, settings.cache_config(), clock=clock)


def get_rate_limiter(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> RateLimiter:
    """Admission policy, chosen on first use and kept on the application."""
    limiter: RateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        limiter = build_rate_limiter(settings.rate_limit_config(), store)
        request.app.state.rate_limiter = limiter
    return limiter


def get_upload_service(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[RecordStore, Depends(get_record_store)],
    storage: Annotated[LocalFileStorage, Depends(get_file_storage)],
) -> UploadService:
    return UploadService(store, storage, max_file_size_bytes=settings.max_file_size_bytes)


def get_maintenance_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
    storage: Annotated[LocalFileStorage, Depends(get_file_storage)],
) -> MaintenanceService:
    return MaintenanceService(store, storage)


def get_analysis_service(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[RecordStore, Depends(get_record_store)],
    storage: Annotated[LocalFileStorage, Depends(get_file_storage)],
    cache: Annotated[ResultCache, Depends(get_result_cache)],
    vision: Annotated[VisionClient | None, Depends(get_vision_client)],
) -> AnalysisService:
    return AnalysisService(store, storage, cache, settings.analysis_config(), vision=vision)
