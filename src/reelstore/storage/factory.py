"""Chunk store factory for reelstore."""

from __future__ import annotations

from reelstore.config import Settings
from reelstore.persistence.db import Database
from reelstore.storage.base import ChunkStore
from reelstore.storage.database import DatabaseChunkStore
from reelstore.storage.local import LocalChunkStore


def create_chunk_store(settings: Settings, database: Database) -> ChunkStore:
    """Build the ChunkStore selected by settings."""
    storage_type = settings.chunk_store_type.lower()
    if storage_type in {"database", "db"}:
        return DatabaseChunkStore(database)
    if storage_type == "local":
        return LocalChunkStore(base_path=settings.chunk_store_path)
    raise ValueError("Unsupported chunk_store_type. Supported values: database, local.")
