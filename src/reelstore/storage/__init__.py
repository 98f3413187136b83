"""Chunk storage for reelstore.

Provides the chunk codec and the chunk store backends it drives:
- Database storage (chunks as rows keyed by content id and index, default)
- Local filesystem storage (one file per chunk)

Large media never lives in memory as a whole: uploads are persisted chunk
by chunk and range reads fetch only the chunks that overlap the range.
"""

from reelstore.storage.base import ChunkRef, ChunkStore, chunk_refs
from reelstore.storage.codec import ChunkCodec, ChunkWriter, WrittenContent
from reelstore.storage.database import DatabaseChunkStore
from reelstore.storage.factory import create_chunk_store
from reelstore.storage.local import LocalChunkStore

__all__ = [
    "ChunkCodec",
    "ChunkRef",
    "ChunkStore",
    "ChunkWriter",
    "DatabaseChunkStore",
    "LocalChunkStore",
    "WrittenContent",
    "chunk_refs",
    "create_chunk_store",
]
