"""Request admission: caller identity and rate limiting."""

from typoscale.gateway.identity import client_identity, get_client_ip
from typoscale.gateway.rate_limiter import (
    AlwaysAdmitRateLimiter,
    EnforcingRateLimiter,
    RateLimitDecision,
    RateLimiter,
    build_rate_limiter,
)

__all__ = [
    "AlwaysAdmitRateLimiter",
    "EnforcingRateLimiter",
    "RateLimitDecision",
    "RateLimiter",
    "build_rate_limiter",
    "client_identity",
    "get_client_ip",
]
