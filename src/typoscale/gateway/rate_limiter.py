"""Sliding-window admission control with per-identity and global scopes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

import structlog

from typoscale.core.config import RateLimitConfig
from typoscale.core.exceptions import InfrastructureError
from typoscale.core.metrics import track_fail_open, track_rate_limit_decision
from typoscale.models.rate_limit import RateLimitWindow
from typoscale.store.record_store import RecordStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of an admission check."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime
    retry_after_seconds: int | None = None
    scope: str = "identity"

    def headers(self) -> dict[str, str]:
        """Standard rate limit response headers."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_at.timestamp())),
        }
        if self.retry_after_seconds is not None:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers


class RateLimiter(ABC):
    """Admission policy for analysis requests."""

    def __init__(self, config: RateLimitConfig) -> None:
        self.config = config

    @property
    def window_seconds(self) -> int:
        return int(self.config.window.total_seconds())

    @abstractmethod
    async def admit(self, identity: str, now: datetime) -> RateLimitDecision:
        """Decide whether ``identity`` may make a request at ``now``."""

    @abstractmethod
    async def peek(self, identity: str, now: datetime) -> RateLimitDecision:
        """Report current quota without recording a request."""

    def _allowed(self, now: datetime, remaining: int) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=True,
            limit=self.config.per_identity_limit,
            remaining=max(0, remaining),
            reset_at=now + self.config.window,
        )


class AlwaysAdmitRateLimiter(RateLimiter):
    """Admits everything and records nothing (development and tests)."""

    async def admit(self, identity: str, now: datetime) -> RateLimitDecision:
        logger.debug("rate_limit_skipped", identity=identity)
        return self._allowed(now, self.config.per_identity_limit - 1)

    async def peek(self, identity: str, now: datetime) -> RateLimitDecision:
        return self._allowed(now, self.config.per_identity_limit)


class EnforcingRateLimiter(RateLimiter):
    """Counts one stored row per admitted request within the trailing window.

    The check and the insert are separate store operations, so concurrent
    requests near the limit can both be admitted. Infrastructure errors
    admit the request.
    """

    def __init__(self, store: RecordStore, config: RateLimitConfig) -> None:
        super().__init__(config)
        self.store = store

    async def admit(self, identity: str, now: datetime) -> RateLimitDecision:
        try:
            decision = await self._admit(identity, now)
        except InfrastructureError as e:
            track_fail_open("rate_limiter")
            logger.error("rate_limit_check_failed", identity=identity, error=str(e))
            return self._allowed(now, self.config.per_identity_limit - 1)

        track_rate_limit_decision("allowed" if decision.allowed else f"rejected_{decision.scope}")
        return decision

    async def _admit(self, identity: str, now: datetime) -> RateLimitDecision:
        window_floor = now - self.config.window

        # Garbage collection; counts below only look at live rows.
        await self.store.delete_where(RateLimitWindow, RateLimitWindow.window_end < window_floor)

        identity_count = await self.store.count_where(
            RateLimitWindow,
            RateLimitWindow.identity == identity,
            RateLimitWindow.window_start >= window_floor,
        )
        if identity_count >= self.config.per_identity_limit:
            logger.warning(
                "identity_rate_limit_exceeded",
                identity=identity,
                count=identity_count,
                limit=self.config.per_identity_limit,
            )
            return self._rejected(now, self.config.per_identity_limit, scope="identity")

        global_count = await self.store.count_where(
            RateLimitWindow,
            RateLimitWindow.window_start >= window_floor,
        )
        if global_count >= self.config.global_limit:
            logger.warning(
                "global_rate_limit_exceeded",
                identity=identity,
                count=global_count,
                limit=self.config.global_limit,
            )
            return self._rejected(now, self.config.global_limit, scope="global")

        await self.store.insert(
            RateLimitWindow(
                identity=identity,
                request_count=1,
                window_start=now,
                window_end=now + self.config.window,
            )
        )

        count_after_insert = identity_count + 1
        logger.debug(
            "rate_limit_check_passed",
            identity=identity,
            identity_count=count_after_insert,
            global_count=global_count + 1,
        )
        return self._allowed(now, self.config.per_identity_limit - count_after_insert)

    async def peek(self, identity: str, now: datetime) -> RateLimitDecision:
        count = await self.store.count_where(
            RateLimitWindow,
            RateLimitWindow.identity == identity,
            RateLimitWindow.window_start >= now - self.config.window,
        )
        return self._allowed(now, self.config.per_identity_limit - count)

    def _rejected(self, now: datetime, limit: int, *, scope: str) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=False,
            limit=limit,
            remaining=0,
            reset_at=now + self.config.window,
            retry_after_seconds=self.window_seconds,
            scope=scope,
        )


def build_rate_limiter(config: RateLimitConfig, store: RecordStore) -> RateLimiter:
    """Choose the admission policy once at startup."""
    if not config.enabled:
        logger.warning("rate_limiting_disabled")
        return AlwaysAdmitRateLimiter(config)
    return EnforcingRateLimiter(store, config)
