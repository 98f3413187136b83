"""FastAPI application factory for reelstore.

Creates the application with:
- Video upload, listing, range streaming, replace and delete routes
- Health probes and Prometheus metrics
- Correlation ids, CORS and request metrics middleware
- Structured error bodies for every failure
- Lifecycle management for the database and chunk store
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from reelstore import __version__
from reelstore.api.deps import Services
from reelstore.api.errors import (
    ApiError,
    api_exception_handler,
    domain_exception_handler,
    generic_exception_handler,
)
from reelstore.api.middleware import CORSConfig, CorrelationMiddleware, add_cors_middleware
from reelstore.api.routers import health, videos
from reelstore.api.routers import metrics as metrics_router
from reelstore.config import Settings
from reelstore.config import settings as default_settings
from reelstore.errors import ReelstoreError
from reelstore.observability import MetricsMiddleware, configure_logging, get_metrics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup: configure logging and create tables. On shutdown: release the chunk store and
    dispose of database connections.
    """
    services: Services = app.state.services
    configure_logging(
        json_format=services.settings.env != "dev",
        level=services.settings.log_level,
    )
    logger.info(
        f"Starting reelstore ({services.settings.env}) with "
        f"{services.chunk_store.storage_type} chunk store"
    )
    await services.start()
    logger.info("reelstore startup complete")

    yield

    logger.info("Shutting down reelstore")
    await services.close()
    logger.info("reelstore shutdown complete")


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment-loaded settings
        services: Pre-built components; built from ``settings`` when omitted
    """
    settings = settings or (services.settings if services else default_settings)

    app = FastAPI(
        title="reelstore",
        description="Chunked media blob store with range streaming",
        version=__version__,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.services = services or Services.build(settings)

    # Order: CORS (outer) -> Metrics -> Correlation (inner)
    app.add_middleware(CorrelationMiddleware)
    if settings.enable_metrics:
        get_metrics()
        app.add_middleware(MetricsMiddleware)
    add_cors_middleware(app, CORSConfig.from_settings(settings))

    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(ReelstoreError, cast(ExceptionHandler, domain_exception_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    if settings.enable_metrics:
        app.include_router(metrics_router.router)
    app.include_router(videos.router)

    return app
