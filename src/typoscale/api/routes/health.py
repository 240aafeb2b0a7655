"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel

from typoscale import __version__
from typoscale.api.dependencies.services import get_vision_client
from typoscale.core.config import Settings, get_settings
from typoscale.core.database import check_database_connection
from typoscale.vision.client import VisionClient

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness with dependency status."""

    status: str
    database: bool
    vision_configured: bool


class VisionHealthResponse(BaseModel):
    status: str
    model: str
    reachable: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=__version__)


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Service not ready"}},
)
async def readiness_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Database reachable and a vision key configured."""
    db_ok = await check_database_connection()
    vision_ok = bool(settings.openai_api_key)
    body = ReadinessResponse(
        status="ready" if db_ok and vision_ok else "degraded",
        database=db_ok,
        vision_configured=vision_ok,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )


@router.get("/health/vision", response_model=VisionHealthResponse)
async def vision_health(
    settings: Annotated[Settings, Depends(get_settings)],
    vision: Annotated[VisionClient | None, Depends(get_vision_client)],
) -> JSONResponse:
    """Live probe of the vision model with a minimal request."""
    reachable = vision is not None and await vision.check_health()
    body = VisionHealthResponse(
        status="healthy" if reachable else "unhealthy",
        model=settings.vision_model,
        reachable=reachable,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if reachable else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus text exposition."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
