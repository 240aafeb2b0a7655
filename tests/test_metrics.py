"""Tests for Prometheus metrics integration."""

import pytest
from httpx import AsyncClient
from prometheus_client import REGISTRY

from typoscale.core.metrics import (
    active_requests,
    analysis_total,
    request_latency_seconds,
    request_total,
    track_analysis,
    track_cache_lookup,
    track_fail_open,
    track_request,
)


def sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricsCore:
    """Test core metrics functionality."""

    def test_metric_definitions(self) -> None:
        assert request_latency_seconds._name == "typoscale_request_latency_seconds"
        assert request_latency_seconds._type == "histogram"
        # prometheus_client strips _total suffix from counter names
        assert request_total._name == "typoscale_request"
        assert analysis_total._name == "typoscale_analysis"
        assert active_requests._type == "gauge"

    def test_track_analysis(self) -> None:
        labels = {"method": "exact", "outcome": "success"}
        before = sample("typoscale_analysis_total", labels)

        track_analysis("exact", "success")

        assert sample("typoscale_analysis_total", labels) == before + 1

    def test_track_cache_lookup(self) -> None:
        hits = sample("typoscale_cache_lookups_total", {"result": "hit"})
        misses = sample("typoscale_cache_lookups_total", {"result": "miss"})

        track_cache_lookup(hit=True)
        track_cache_lookup(hit=False)
        track_cache_lookup(hit=False)

        assert sample("typoscale_cache_lookups_total", {"result": "hit"}) == hits + 1
        assert sample("typoscale_cache_lookups_total", {"result": "miss"}) == misses + 2

    def test_track_fail_open(self) -> None:
        before = sample("typoscale_fail_open_total", {"component": "rate_limiter"})

        track_fail_open("rate_limiter")

        assert sample("typoscale_fail_open_total", {"component": "rate_limiter"}) == before + 1

    def test_track_request_defaults_to_500(self) -> None:
        labels = {"endpoint": "/boom", "method": "GET", "status": "500"}
        before = sample("typoscale_request_total", labels)

        with pytest.raises(RuntimeError), track_request("/boom", "GET"):
            raise RuntimeError("handler crashed")

        assert sample("typoscale_request_total", labels) == before + 1

    def test_track_request_endpoint_override(self) -> None:
        labels = {"endpoint": "/items/{id}", "method": "GET", "status": "200"}
        before = sample("typoscale_request_total", labels)

        with track_request("/items/42", "GET") as state:
            state["status"] = 200
            state["endpoint"] = "/items/{id}"

        assert sample("typoscale_request_total", labels) == before + 1


class TestMetricsMiddleware:
    @pytest.mark.asyncio
    async def test_labels_use_route_template(self, client: AsyncClient) -> None:
        labels = {"endpoint": "/api/v1/files/{filename}", "method": "GET", "status": "404"}
        before = sample("typoscale_request_total", labels)

        await client.get("/api/v1/files/123-abc.png")

        assert sample("typoscale_request_total", labels) == before + 1

    @pytest.mark.asyncio
    async def test_probe_endpoints_are_not_tracked(self, client: AsyncClient) -> None:
        labels = {"endpoint": "/health", "method": "GET", "status": "200"}
        before = sample("typoscale_request_total", labels)

        await client.get("/health")

        assert sample("typoscale_request_total", labels) == before
