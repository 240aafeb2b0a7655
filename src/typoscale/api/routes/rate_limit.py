"""Rate limit status route."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from typoscale.api.dependencies.services import get_clock, get_rate_limiter
from typoscale.gateway.identity import client_identity
from typoscale.gateway.rate_limiter import EnforcingRateLimiter, RateLimiter
from typoscale.schemas.api import RateLimitStatusResponse
from typoscale.typography.cache import Clock

router = APIRouter()


@router.get("/rate-limit", response_model=RateLimitStatusResponse)
async def rate_limit_status(
    request: Request,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> RateLimitStatusResponse:
    """Current quota for the caller. Does not consume a request."""
    identity = client_identity(request)
    decision = await limiter.peek(identity, clock())
    return RateLimitStatusResponse(
        identity=identity,
        enabled=isinstance(limiter, EnforcingRateLimiter),
        limit=decision.limit,
        remaining=decision.remaining,
        reset_at=decision.reset_at,
    )
