"""Prometheus metrics for reelstore.

Provides metrics collection and exposure:
- HTTP request counts (by method and status)
- Chunk I/O (chunks written/read, bytes served)
- Upload outcomes

Usage:
    from reelstore.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.chunks_written_total.inc()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from prometheus_client import REGISTRY, Counter, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    http_requests_total: Any = None

    chunks_written_total: Any = None
    chunks_read_total: Any = None
    bytes_served_total: Any = None
    uploads_total: Any = None

    _initialized: bool = field(default=False, repr=False)

    def initialize(self) -> None:
        """Register the collectors with the default Prometheus registry."""
        if self._initialized:
            return

        self.http_requests_total = Counter(
            "reelstore_http_requests_total",
            "Total HTTP requests",
            ["method", "status"],
        )
        self.chunks_written_total = Counter(
            "reelstore_chunks_written_total",
            "Chunks persisted to the chunk store",
        )
        self.chunks_read_total = Counter(
            "reelstore_chunks_read_total",
            "Chunks fetched from the chunk store",
        )
        self.bytes_served_total = Counter(
            "reelstore_bytes_served_total",
            "Bytes emitted by range downloads",
        )
        self.uploads_total = Counter(
            "reelstore_uploads_total",
            "Upload attempts by outcome",
            ["outcome"],
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return generate_latest(REGISTRY)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware counting HTTP requests by method and status."""

    def __init__(self, app: "ASGIApp") -> None:
        super().__init__(app)
        self.metrics = get_metrics()

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        if request.url.path.startswith(("/health", "/metrics")):
            return await call_next(request)

        status_code = 500  # Default in case of exception
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            self.metrics.http_requests_total.labels(
                method=request.method,
                status=status_code,
            ).inc()
