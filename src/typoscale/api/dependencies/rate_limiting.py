"""Rate limiting dependencies for API endpoints."""

from typing import Annotated

from fastapi import Depends, Request, Response

from typoscale.api.dependencies.services import get_clock, get_rate_limiter
from typoscale.core.exceptions import RateLimitedError
from typoscale.gateway.identity import client_identity
from typoscale.gateway.rate_limiter import RateLimitDecision, RateLimiter
from typoscale.typography.cache import Clock


async def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> RateLimitDecision:
    """Admit the caller or raise RateLimitedError (HTTP 429)."""
    decision = await limiter.admit(client_identity(request), clock())
    if not decision.allowed:
        raise RateLimitedError(
            retry_after_seconds=decision.retry_after_seconds or limiter.window_seconds,
            limit=decision.limit,
            details={"scope": decision.scope},
        )
    response.headers.update(decision.headers())
    return decision
