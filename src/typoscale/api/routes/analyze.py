"""Analysis routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from typoscale.analysis.service import AnalysisService
from typoscale.api.dependencies.rate_limiting import enforce_rate_limit
from typoscale.api.dependencies.services import get_analysis_service
from typoscale.schemas.api import AnalyzeRequest, AnalyzeResponse

router = APIRouter()


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    dependencies=[Depends(enforce_rate_limit)],
    response_model_exclude_none=True,
)
async def analyze(
    body: AnalyzeRequest,
    service: Annotated[AnalysisService, Depends(get_analysis_service)],
) -> AnalyzeResponse:
    """Produce a typography compliance report for an uploaded file."""
    outcome = await service.analyze(
        body.file_id,
        force_refresh=body.force_refresh,
        method=body.method,
    )
    return AnalyzeResponse(data=outcome.report, cached=outcome.cached)
