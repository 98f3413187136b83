"""Chunk codec: splits byte streams into fixed-size chunks and reads ranges back.

Writing buffers exactly ``chunk_size`` bytes per chunk (the final chunk holds
the remainder) and persists chunks in strictly increasing index order.
Reading computes the chunk span of an inclusive byte range and yields the
sliced payloads one chunk at a time, so a range is never held in memory as
a whole.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterable, AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from reelstore.errors import StorageError
from reelstore.observability.metrics import get_metrics
from reelstore.storage.base import ChunkRef, ChunkStore

logger = logging.getLogger(__name__)


@dataclass
class WrittenContent:
    """Result of a completed chunked write."""

    content_id: str
    chunk_size: int
    length: int = 0
    chunks: list[ChunkRef] = field(default_factory=list)


class ChunkWriter:
    """Buffers incoming bytes and persists them as fixed-size chunks.

    Obtain one through ``ChunkCodec.open_writer``; the surrounding context
    either flushes the final partial chunk or discards everything written.
    """

    def __init__(self, store: ChunkStore, content_id: str, chunk_size: int):
        self._store = store
        self._buffer = bytearray()
        self._closed = False
        self.content = WrittenContent(content_id=content_id, chunk_size=chunk_size)

    @property
    def chunks_written(self) -> int:
        return len(self.content.chunks)

    async def write(self, data: bytes) -> None:
        """Append bytes, persisting every chunk that becomes full."""
        if self._closed:
            raise RuntimeError("write() on a finalized ChunkWriter")
        self._buffer.extend(data)
        self.content.length += len(data)

        size = self.content.chunk_size
        while len(self._buffer) >= size:
            await self._persist(bytes(self._buffer[:size]))
            del self._buffer[:size]

    async def _persist(self, data: bytes) -> None:
        index = len(self.content.chunks)
        ref = await self._store.put(self.content.content_id, index, data)
        self.content.chunks.append(ref)
        get_metrics().chunks_written_total.inc()

    async def _flush(self) -> WrittenContent:
        if self._buffer:
            await self._persist(bytes(self._buffer))
            self._buffer.clear()
        self._closed = True
        return self.content

    async def _discard(self) -> None:
        self._closed = True
        self._buffer.clear()
        if not self.content.chunks:
            return
        try:
            await self._store.delete_content(self.content.content_id)
        except StorageError:
            logger.warning(
                f"Could not discard {self.chunks_written} chunks of {self.content.content_id}; "
                "left for orphan reclamation",
                exc_info=True,
            )


class ChunkCodec:
    """Writes byte streams as chunks and reads inclusive byte ranges back."""

    def __init__(self, store: ChunkStore):
        self.store = store

    @asynccontextmanager
    async def open_writer(self, content_id: str, chunk_size: int) -> AsyncIterator[ChunkWriter]:
        """Scoped chunk writer.

        On normal exit the trailing partial chunk is flushed. On any
        exception, including task cancellation, chunks already written are
        discarded (best effort) and the exception propagates.

        Usage:
            async with codec.open_writer(content_id, chunk_size) as writer:
                await writer.write(data)
            written = writer.content
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        writer = ChunkWriter(self.store, content_id, chunk_size)
        try:
            yield writer
            await writer._flush()
        except BaseException:
            await writer._discard()
            raise

    async def write(
        self,
        stream: AsyncIterable[bytes],
        content_id: str,
        chunk_size: int,
    ) -> WrittenContent:
        """Consume ``stream`` to the end and persist it as chunks."""
        async with self.open_writer(content_id, chunk_size) as writer:
            async for data in stream:
                if data:
                    await writer.write(data)
        return writer.content

    def read(
        self,
        chunks: Sequence[ChunkRef],
        chunk_size: int,
        start: int,
        end: int,
    ) -> AsyncGenerator[bytes, None]:
        """Return a lazy iterator over bytes ``start..end`` (inclusive).

        Bounds are checked immediately; chunk fetches happen only as the
        iterator is consumed, one chunk at a time and in index order.

        Raises:
            ValueError: If the range is empty, negative, or extends past the
                last chunk
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if start < 0 or end < start:
            raise ValueError(f"Invalid byte range {start}-{end}")
        if end // chunk_size >= len(chunks):
            raise ValueError(f"Byte {end} lies beyond the last of {len(chunks)} chunks")
        return self._iter_range(chunks, chunk_size, start, end)

    async def _iter_range(
        self,
        chunks: Sequence[ChunkRef],
        chunk_size: int,
        start: int,
        end: int,
    ) -> AsyncGenerator[bytes, None]:
        first = start // chunk_size
        last = end // chunk_size
        metrics = get_metrics()

        for index in range(first, last + 1):
            data = await self.store.get(chunks[index])
            metrics.chunks_read_total.inc()

            lo = start % chunk_size if index == first else 0
            hi = end % chunk_size + 1 if index == last else chunk_size
            piece = data[lo:hi]
            if len(piece) != hi - lo:
                raise StorageError(
                    f"Chunk {index} of {chunks[index].content_id} is short: "
                    f"{len(data)} bytes stored"
                )
            yield piece
