"""CORS (Cross-Origin Resource Sharing) middleware configuration.

Browsers playing videos from another origin need the range headers exposed,
so they are always part of the exposed set.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from reelstore.config import Settings


@dataclass
class CORSConfig:
    """CORS configuration settings."""

    allow_origins: list[str] = field(default_factory=lambda: ["*"])
    allow_methods: list[str] = field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = field(
        default_factory=lambda: [
            "Content-Type",
            "Range",
            "X-Request-ID",
            "X-Correlation-ID",
        ]
    )
    expose_headers: list[str] = field(
        default_factory=lambda: [
            "Accept-Ranges",
            "Content-Length",
            "Content-Range",
            "X-Request-ID",
            "X-Correlation-ID",
        ]
    )
    max_age: int = 600

    @classmethod
    def from_settings(cls, settings: Settings) -> CORSConfig:
        origins = settings.cors_origin_list
        if not origins:
            raise ValueError("CORS_ORIGINS must name at least one origin or '*'")
        return cls(allow_origins=origins)


def add_cors_middleware(app: FastAPI, config: CORSConfig | None = None) -> None:
    """Add CORS middleware to the FastAPI application."""
    config = config or CORSConfig()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allow_origins,
        allow_credentials=False,  # Can't use credentials with "*" origins
        allow_methods=config.allow_methods,
        allow_headers=config.allow_headers,
        expose_headers=config.expose_headers,
        max_age=config.max_age,
    )
