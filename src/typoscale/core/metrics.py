"""Prometheus metrics for monitoring TypoScale."""

from collections.abc import Iterator
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from prometheus_client import Counter, Gauge, Histogram

# Request metrics
request_latency_seconds = Histogram(
    "typoscale_request_latency_seconds",
    "Latency of HTTP requests in seconds",
    ["endpoint", "method"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

request_total = Counter(
    "typoscale_request_total",
    "Total number of HTTP requests",
    ["endpoint", "method", "status"],
)

active_requests = Gauge(
    "typoscale_active_requests",
    "Number of active HTTP requests",
)

# Analysis metrics
analysis_total = Counter(
    "typoscale_analysis_total",
    "Analysis runs by method and outcome",
    ["method", "outcome"],
)

cache_lookups_total = Counter(
    "typoscale_cache_lookups_total",
    "Result cache lookups",
    ["result"],
)

rate_limit_decisions_total = Counter(
    "typoscale_rate_limit_decisions_total",
    "Rate limiter admission decisions",
    ["decision"],
)

fail_open_total = Counter(
    "typoscale_fail_open_total",
    "Infrastructure failures absorbed by a fail-open policy",
    ["component"],
)

vision_latency_seconds = Histogram(
    "typoscale_vision_latency_seconds",
    "Latency of vision model calls in seconds",
    ["model"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0, 300.0),
)


def track_analysis(method: str, outcome: str) -> None:
    """Count an analysis run.

    Args:
        method: "ai" or "exact".
        outcome: "success", "cached" or "failed".
    """
    analysis_total.labels(method=method, outcome=outcome).inc()


def track_cache_lookup(hit: bool) -> None:
    cache_lookups_total.labels(result="hit" if hit else "miss").inc()


def track_rate_limit_decision(decision: str) -> None:
    rate_limit_decisions_total.labels(decision=decision).inc()


def track_fail_open(component: str) -> None:
    fail_open_total.labels(component=component).inc()


@contextmanager
def track_vision_call(model: str) -> Iterator[None]:
    """Time a vision model call."""
    start = perf_counter()
    try:
        yield
    finally:
        vision_latency_seconds.labels(model=model).observe(perf_counter() - start)


@contextmanager
def track_request(endpoint: str, method: str) -> Iterator[dict[str, Any]]:
    """Track latency and status of one HTTP request.

    The yielded dict receives the response status under ``"status"`` and may
    replace the ``"endpoint"`` label once the route is known.
    """
    active_requests.inc()
    start = perf_counter()
    state: dict[str, Any] = {"status": 500, "endpoint": endpoint}
    try:
        yield state
    finally:
        active_requests.dec()
        label = state["endpoint"]
        request_latency_seconds.labels(endpoint=label, method=method).observe(perf_counter() - start)
        request_total.labels(endpoint=label, method=method, status=str(state["status"])).inc()
