"""Metrics middleware for automatic request tracking."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from typoscale.core.metrics import track_request


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records latency, count and in-flight gauge per route.

    Scrape and probe endpoints are excluded.
    """

    EXCLUDED_PATHS = {"/metrics", "/health", "/health/ready"}

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        with track_request(request.url.path, request.method) as state:
            response = await call_next(request)
            state["status"] = response.status_code
            # Routing has populated the scope by now; use the template path.
            route = request.scope.get("route")
            if route is not None:
                state["endpoint"] = route.path
            return response
