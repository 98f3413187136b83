"""Observability for reelstore: structured logging and Prometheus metrics."""

from reelstore.observability.logging import configure_logging
from reelstore.observability.metrics import MetricsMiddleware, get_metrics

__all__ = ["MetricsMiddleware", "configure_logging", "get_metrics"]
