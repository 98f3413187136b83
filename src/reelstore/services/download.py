"""Download streamer for partial-content responses.

Resolves the blob and the requested range up front, so not-found and range
errors are raised before any byte is emitted, then hands back a lazy body
that pulls one chunk at a time from the chunk store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing
from dataclasses import dataclass

from reelstore.errors import StorageError, ValidationError
from reelstore.observability.metrics import get_metrics
from reelstore.persistence.records import BlobRecord, BlobRecordStore
from reelstore.services.ranges import ResolvedRange, resolve_range
from reelstore.storage.codec import ChunkCodec

logger = logging.getLogger(__name__)


@dataclass
class PartialContent:
    """A resolved 206 response: headers are final, body is not yet fetched."""

    record: BlobRecord
    range: ResolvedRange
    body: AsyncGenerator[bytes, None]

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Range": self.range.content_range,
            "Accept-Ranges": "bytes",
            "Content-Length": str(self.range.content_length),
            "Content-Type": self.record.content_type,
        }


class DownloadStreamer:
    """Serves byte windows of stored blobs."""

    def __init__(self, codec: ChunkCodec, records: BlobRecordStore, window: int):
        self.codec = codec
        self.records = records
        self.window = window

    async def open(self, blob_id: str, range_header: str | None) -> PartialContent:
        """Resolve ``blob_id`` and ``range_header`` into a streamable window.

        Raises:
            ValidationError: If the Range header is missing or malformed
            NotFoundError: If the blob does not exist
            RangeNotSatisfiableError: If the range starts past the end
        """
        if not range_header:
            raise ValidationError("Requires Range header")

        record = await self.records.get(blob_id)
        resolved = resolve_range(range_header, record.length, self.window)
        return PartialContent(
            record=record,
            range=resolved,
            body=self._stream(record, resolved),
        )

    async def _stream(
        self, record: BlobRecord, resolved: ResolvedRange
    ) -> AsyncGenerator[bytes, None]:
        sent = 0
        chunks = self.codec.read(record.chunks, record.chunk_size, resolved.start, resolved.end)
        try:
            async with aclosing(chunks):
                async for piece in chunks:
                    yield piece
                    sent += len(piece)
        except (asyncio.CancelledError, GeneratorExit):
            logger.debug(
                f"Client left download of {record.id} after {sent}/{resolved.content_length} bytes"
            )
            raise
        except StorageError:
            logger.error(
                f"Download of {record.id} failed after {sent}/{resolved.content_length} bytes",
                exc_info=True,
            )
            raise
        finally:
            get_metrics().bytes_served_total.inc(sent)
