"""FastAPI middleware components."""

from typoscale.api.middleware.exception_handler import setup_exception_handlers
from typoscale.api.middleware.logging import LoggingMiddleware
from typoscale.api.middleware.metrics import MetricsMiddleware

__all__ = [
    "LoggingMiddleware",
    "MetricsMiddleware",
    "setup_exception_handlers",
]
