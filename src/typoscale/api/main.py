"""FastAPI application factory and main entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from typoscale import __version__
from typoscale.api.middleware.exception_handler import setup_exception_handlers
from typoscale.api.middleware.logging import LoggingMiddleware
from typoscale.api.middleware.metrics import MetricsMiddleware
from typoscale.api.routes import (
    admin_router,
    analyze_router,
    files_router,
    health_router,
    rate_limit_router,
    upload_router,
)
from typoscale.core.config import get_settings
from typoscale.core.database import dispose_engine
from typoscale.core.logging import configure_logging, get_logger

settings = get_settings()

configure_logging(
    json_logs=settings.is_production,
    log_level="DEBUG" if settings.debug else "INFO",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        env=settings.app_env,
        analysis_mode=settings.analysis_mode,
        rate_limit_enabled=settings.rate_limit_enabled,
    )
    yield
    logger.info("application_shutdown")
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Typography compliance analysis for PDF and PNG designs",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_exception_handlers(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(upload_router, prefix=settings.api_v1_prefix, tags=["Uploads"])
    app.include_router(analyze_router, prefix=settings.api_v1_prefix, tags=["Analysis"])
    app.include_router(files_router, prefix=settings.api_v1_prefix, tags=["Files"])
    app.include_router(rate_limit_router, prefix=settings.api_v1_prefix, tags=["Rate Limiting"])
    app.include_router(admin_router, prefix=f"{settings.api_v1_prefix}/admin", tags=["Admin"])

    return app


app = create_app()
