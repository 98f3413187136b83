"""Title updates, content replacement and deletion of stored blobs.

Content replacement goes through a versioned pointer: the new stream is
staged under a fresh content id, the record is switched to it in a single
row update, and only then are the old chunks removed. The blob id survives
the replace and a failed replace leaves the old content untouched.

A download that resolved the old content before the switch can still lose
its chunks mid-stream once they are removed; such downloads fail with
``ChunkMissingError``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable
from dataclasses import dataclass

from reelstore.errors import StorageError
from reelstore.persistence.records import BlobRecord, BlobRecordStore
from reelstore.services.upload import UploadPipeline, new_id
from reelstore.storage.base import ChunkStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateResult:
    record: BlobRecord
    title_updated: bool = False
    content_replaced: bool = False


class BlobLifecycle:
    """Orchestrates destructive operations on stored blobs."""

    def __init__(
        self,
        records: BlobRecordStore,
        pipeline: UploadPipeline,
        chunk_store: ChunkStore,
    ):
        self.records = records
        self.pipeline = pipeline
        self.chunk_store = chunk_store

    async def update(
        self,
        blob_id: str,
        title: str | None = None,
        stream: AsyncIterable[bytes] | None = None,
        filename: str | None = None,
    ) -> UpdateResult:
        """Update the title and/or replace the content of a blob.

        A supplied title always ends up on the record, whether or not the
        content is replaced in the same call; without one the previous
        title is kept.

        Raises:
            NotFoundError: If the blob does not exist
            StorageError: If staging or switching the new content failed
        """
        existing = await self.records.get(blob_id)

        if stream is None:
            if not title:
                return UpdateResult(record=existing)
            record = await self.records.update_title(blob_id, title)
            logger.info(f"Updated title of blob {blob_id}")
            return UpdateResult(record=record, title_updated=True)

        content_id = new_id()
        content = await self.pipeline.stage(stream, content_id=content_id)
        try:
            record, previous_content_id = await self.records.swap_content(
                blob_id,
                content,
                filename=filename or existing.filename,
                title=title or existing.title,
            )
        except BaseException:
            await self._discard(content_id)
            raise

        logger.info(
            f"Replaced content of blob {blob_id}: {previous_content_id} -> {content_id}",
            extra={"blob_id": blob_id},
        )
        await self._discard(previous_content_id)
        return UpdateResult(record=record, title_updated=bool(title), content_replaced=True)

    async def delete(self, blob_id: str) -> BlobRecord:
        """Remove a blob and all of its chunks.

        Raises:
            NotFoundError: If the blob does not exist
            StorageError: If the chunks could not be removed
        """
        record = await self.records.delete(blob_id)
        logger.info(f"Deleted blob {blob_id}", extra={"blob_id": blob_id})
        return record

    async def _discard(self, content_id: str) -> None:
        """Remove unreferenced content; failures leave orphans for reclamation."""
        try:
            await self.chunk_store.delete_content(content_id)
        except StorageError:
            logger.error(f"Could not remove chunks of content {content_id}", exc_info=True)
