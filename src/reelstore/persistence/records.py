"""Blob record store.

Maps a blob id to its metadata and to the ordered chunk references of its
current content. A record row is inserted only after every chunk of its
content has been written, so readers never observe a partial blob.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select

from reelstore.errors import NotFoundError, StorageError
from reelstore.persistence.db import Database
from reelstore.persistence.tables import BlobTable
from reelstore.storage.base import ChunkRef, ChunkStore, chunk_refs
from reelstore.storage.codec import WrittenContent

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops the offset of timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True)
class BlobRecord:
    """A committed blob as seen by readers."""

    id: str
    filename: str
    title: str
    length: int
    content_type: str
    chunk_size: int
    chunk_count: int
    content_id: str
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def chunks(self) -> list[ChunkRef]:
        """Ordered chunk references; index order is byte order."""
        return chunk_refs(self.content_id, self.chunk_count)

    @classmethod
    def from_row(cls, row: BlobTable) -> BlobRecord:
        return cls(
            id=row.id,
            filename=row.filename,
            title=row.title,
            length=row.length,
            content_type=row.content_type,
            chunk_size=row.chunk_size,
            chunk_count=row.chunk_count,
            content_id=row.content_id,
            created_at=_as_utc(row.created_at),  # type: ignore[arg-type]
            updated_at=_as_utc(row.updated_at),
        )


class BlobRecordStore:
    """Persists blob records and owns the lifetime of their chunks."""

    def __init__(self, database: Database, chunk_store: ChunkStore):
        self.database = database
        self.chunk_store = chunk_store

    async def create(
        self,
        blob_id: str,
        filename: str,
        title: str,
        content_type: str,
        content: WrittenContent,
    ) -> BlobRecord:
        """Commit a record for fully written content, making it visible."""
        now = datetime.now(UTC)
        row = BlobTable(
            id=blob_id,
            filename=filename,
            title=title,
            length=content.length,
            content_type=content_type,
            chunk_size=content.chunk_size,
            chunk_count=len(content.chunks),
            content_id=content.content_id,
            created_at=now,
            updated_at=now,
        )
        async with self.database.session() as session:
            session.add(row)
        return BlobRecord.from_row(row)

    async def get(self, blob_id: str) -> BlobRecord:
        """Fetch a live record.

        Raises:
            NotFoundError: If no record has this id
        """
        async with self.database.session() as session:
            row = await session.get(BlobTable, blob_id)
            if row is None:
                raise NotFoundError(blob_id)
            return BlobRecord.from_row(row)

    async def list(self) -> list[BlobRecord]:
        """All live records, oldest first. Empty when nothing is stored."""
        stmt = select(BlobTable).order_by(BlobTable.created_at, BlobTable.id)
        async with self.database.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [BlobRecord.from_row(row) for row in rows]

    async def update_title(self, blob_id: str, title: str) -> BlobRecord:
        """Change the title in place; chunk data is untouched."""
        async with self.database.session() as session:
            row = await session.get(BlobTable, blob_id)
            if row is None:
                raise NotFoundError(blob_id)
            row.title = title
            row.updated_at = datetime.now(UTC)
            return BlobRecord.from_row(row)

    async def swap_content(
        self,
        blob_id: str,
        content: WrittenContent,
        filename: str,
        title: str,
    ) -> tuple[BlobRecord, str]:
        """Point a record at newly written content in one row update.

        Returns:
            The updated record and the content id it previously pointed at

        Raises:
            NotFoundError: If the record vanished before the swap
        """
        async with self.database.session() as session:
            row = await session.get(BlobTable, blob_id, with_for_update=True)
            if row is None:
                raise NotFoundError(blob_id)
            previous_content_id = row.content_id
            row.content_id = content.content_id
            row.length = content.length
            row.chunk_size = content.chunk_size
            row.chunk_count = len(content.chunks)
            row.filename = filename
            row.title = title
            row.updated_at = datetime.now(UTC)
            record = BlobRecord.from_row(row)
        return record, previous_content_id

    async def delete(self, blob_id: str) -> BlobRecord:
        """Remove a record and every chunk it owns.

        The row goes first, so subsequent reads resolve to not-found even if
        chunk removal then fails; such chunks are left as orphans.

        Raises:
            NotFoundError: If no record has this id
            StorageError: If the chunks could not be removed
        """
        async with self.database.session() as session:
            row = await session.get(BlobTable, blob_id)
            if row is None:
                raise NotFoundError(blob_id)
            record = BlobRecord.from_row(row)
            await session.delete(row)

        try:
            removed = await self.chunk_store.delete_content(record.content_id)
        except StorageError:
            logger.error(
                f"Blob {blob_id} deleted but its chunks under {record.content_id} remain",
                exc_info=True,
            )
            raise
        logger.debug(f"Deleted blob {blob_id} and {removed} chunks")
        return record

    async def content_ids(self) -> set[str]:
        """Content ids referenced by live records."""
        async with self.database.session() as session:
            result = await session.execute(select(BlobTable.content_id))
            return set(result.scalars().all())
