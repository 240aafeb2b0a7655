"""Administrative maintenance routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from typoscale.api.dependencies.services import get_maintenance_service, get_result_cache
from typoscale.schemas.api import CleanupResponse, PurgeResponse
from typoscale.typography.cache import ResultCache
from typoscale.uploads.service import MaintenanceService

router = APIRouter()


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup(
    service: Annotated[MaintenanceService, Depends(get_maintenance_service)],
) -> CleanupResponse:
    """Remove file records whose bytes are missing and reset cache and history."""
    report = await service.cleanup()
    return CleanupResponse(
        message=(
            f"Cleaned up {len(report.invalid_files_removed)} invalid files "
            "and cleared all caches"
        ),
        invalid_files_removed=report.invalid_files_removed,
        valid_files_remaining=report.valid_files_remaining,
        cache_entries_removed=report.cache_entries_removed,
        analyses_removed=report.analyses_removed,
    )


@router.post("/cache/purge", response_model=PurgeResponse)
async def purge_cache(
    cache: Annotated[ResultCache, Depends(get_result_cache)],
) -> PurgeResponse:
    """Delete expired cache rows."""
    return PurgeResponse(removed=await cache.purge_expired())
