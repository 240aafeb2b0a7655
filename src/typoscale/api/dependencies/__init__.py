"""FastAPI dependencies."""

from typoscale.api.dependencies.rate_limiting import enforce_rate_limit
from typoscale.api.dependencies.services import (
    get_analysis_service,
    get_clock,
    get_file_storage,
    get_maintenance_service,
    get_rate_limiter,
    get_record_store,
    get_result_cache,
    get_upload_service,
    get_vision_client,
)

__all__ = [
    "enforce_rate_limit",
    "get_analysis_service",
    "get_clock",
    "get_file_storage",
    "get_maintenance_service",
    "get_rate_limiter",
    "get_record_store",
    "get_result_cache",
    "get_upload_service",
    "get_vision_client",
]
