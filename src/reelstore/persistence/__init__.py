"""Persistence layer for reelstore.

Provides:
- Async SQLAlchemy engine/session handling (``Database``)
- ORM tables for blob records and database-backed chunks
- The blob record store
"""

from reelstore.persistence.db import Database
from reelstore.persistence.tables import Base, BlobTable, ChunkTable
from reelstore.persistence.records import BlobRecord, BlobRecordStore  # noqa: I001

__all__ = [
    "Base",
    "BlobRecord",
    "BlobRecordStore",
    "BlobTable",
    "ChunkTable",
    "Database",
]
