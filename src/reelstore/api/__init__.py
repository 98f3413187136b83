"""HTTP API for reelstore."""

from reelstore.api.app import create_app

__all__ = ["create_app"]
