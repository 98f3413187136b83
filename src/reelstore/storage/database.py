"""SQL-backed chunk storage.

Stores each chunk as one row of the ``chunks`` table keyed by
``(content_id, n)``. Each ``put`` runs in its own transaction, so a chunk is
either fully written or absent.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select

from reelstore.errors import ChunkMissingError
from reelstore.persistence.db import Database
from reelstore.persistence.tables import ChunkTable
from reelstore.storage.base import ChunkRef, ChunkStore

logger = logging.getLogger(__name__)


class DatabaseChunkStore(ChunkStore):
    """Chunk store backed by the application database."""

    storage_type = "database"

    def __init__(self, database: Database):
        self.database = database

    async def put(self, content_id: str, index: int, data: bytes) -> ChunkRef:
        async with self.database.session() as session:
            session.add(ChunkTable(content_id=content_id, n=index, data=data))
        return ChunkRef(content_id, index)

    async def get(self, ref: ChunkRef) -> bytes:
        stmt = select(ChunkTable.data).where(
            ChunkTable.content_id == ref.content_id,
            ChunkTable.n == ref.index,
        )
        async with self.database.session() as session:
            data = (await session.execute(stmt)).scalar_one_or_none()
        if data is None:
            raise ChunkMissingError(ref.content_id, ref.index)
        return bytes(data)

    async def delete_content(self, content_id: str) -> int:
        stmt = delete(ChunkTable).where(ChunkTable.content_id == content_id)
        async with self.database.session() as session:
            result = await session.execute(stmt)
        removed = result.rowcount or 0
        logger.debug(f"Deleted {removed} chunks of content {content_id}")
        return removed

    async def list_content_ids(self) -> set[str]:
        stmt = select(ChunkTable.content_id).distinct()
        async with self.database.session() as session:
            result = await session.execute(stmt)
        return set(result.scalars().all())
