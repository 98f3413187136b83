"""Upload pipeline.

Consumes an incoming byte stream, persists it through the chunk codec and
commits a blob record only once the whole stream is stored. Any failure
before the commit leaves no record behind.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable
from uuid import uuid4

from reelstore.errors import StorageError, ValidationError
from reelstore.observability.metrics import get_metrics
from reelstore.persistence.records import BlobRecord, BlobRecordStore
from reelstore.storage.codec import ChunkCodec, WrittenContent

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Opaque identifier for a blob or a content version."""
    return uuid4().hex


class UploadPipeline:
    """Streams uploads into chunks and commits their records."""

    def __init__(
        self,
        codec: ChunkCodec,
        records: BlobRecordStore,
        chunk_size: int,
        content_type: str = "video/mp4",
    ):
        self.codec = codec
        self.records = records
        self.chunk_size = chunk_size
        self.content_type = content_type

    async def stage(self, stream: AsyncIterable[bytes], content_id: str) -> WrittenContent:
        """Write a stream as chunks under ``content_id`` without committing a record."""
        metrics = get_metrics()
        try:
            content = await self.codec.write(stream, content_id, self.chunk_size)
        except BaseException as exc:
            metrics.uploads_total.labels(outcome="aborted").inc()
            logger.warning(f"Upload of content {content_id} aborted: {exc!r}")
            raise
        return content

    async def _discard(self, content_id: str) -> None:
        try:
            await self.records.chunk_store.delete_content(content_id)
        except StorageError:
            logger.error(f"Could not remove chunks of content {content_id}", exc_info=True)

    async def upload(
        self,
        stream: AsyncIterable[bytes] | None,
        title: str | None,
        filename: str | None,
    ) -> BlobRecord:
        """Store a new blob and return its committed record.

        Raises:
            ValidationError: If the title or the stream is missing
            StorageError: If a chunk or the record could not be written
        """
        if not title or stream is None:
            raise ValidationError("Title and video file are required!")

        blob_id = new_id()
        content = await self.stage(stream, content_id=blob_id)

        try:
            record = await self.records.create(
                blob_id=blob_id,
                filename=filename or blob_id,
                title=title,
                content_type=self.content_type,
                content=content,
            )
        except BaseException as exc:
            get_metrics().uploads_total.labels(outcome="aborted").inc()
            logger.warning(f"Commit of blob {blob_id} failed: {exc!r}")
            await self._discard(blob_id)
            raise
        get_metrics().uploads_total.labels(outcome="committed").inc()
        logger.info(
            f"Committed blob {record.id} ({record.length} bytes, {record.chunk_count} chunks)",
            extra={"blob_id": record.id},
        )
        return record
