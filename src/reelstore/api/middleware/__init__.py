"""Middleware for the reelstore API.

- Correlation context for request tracing
- CORS for browser players on other origins
"""

from reelstore.api.middleware.correlation import CorrelationMiddleware
from reelstore.api.middleware.cors import CORSConfig, add_cors_middleware

__all__ = ["CORSConfig", "CorrelationMiddleware", "add_cors_middleware"]
