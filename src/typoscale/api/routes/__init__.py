"""API routes module."""

from typoscale.api.routes.admin import router as admin_router
from typoscale.api.routes.analyze import router as analyze_router
from typoscale.api.routes.files import router as files_router
from typoscale.api.routes.health import router as health_router
from typoscale.api.routes.rate_limit import router as rate_limit_router
from typoscale.api.routes.upload import router as upload_router

__all__ = [
    "admin_router",
    "analyze_router",
    "files_router",
    "health_router",
    "rate_limit_router",
    "upload_router",
]
