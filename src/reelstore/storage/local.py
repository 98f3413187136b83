"""Local filesystem chunk storage.

Stores chunks in a local directory structure:
    {base_path}/{content_id[:2]}/{content_id}/{n}

Each chunk is written to a temporary file and renamed into place, so readers
never see a partially written chunk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import cast
from uuid import uuid4

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from reelstore.errors import ChunkMissingError, StorageError
from reelstore.storage.base import ChunkRef, ChunkStore

logger = logging.getLogger(__name__)


class LocalChunkStore(ChunkStore):
    """Local filesystem chunk storage backend."""

    storage_type = "local"

    def __init__(self, base_path: str | Path = "/var/lib/reelstore/chunks"):
        """Initialize local chunk storage.

        Args:
            base_path: Base directory for chunk storage
        """
        self.base_path = Path(base_path)

    def _content_dir(self, content_id: str) -> Path:
        """Directory holding one content's chunks, sharded on the first 2 chars."""
        shard = content_id[:2] if len(content_id) >= 2 else "00"
        return self.base_path / shard / content_id

    def _chunk_path(self, ref: ChunkRef) -> Path:
        return self._content_dir(ref.content_id) / str(ref.index)

    async def put(self, content_id: str, index: int, data: bytes) -> ChunkRef:
        ref = ChunkRef(content_id, index)
        path = self._chunk_path(ref)
        tmp_path = path.with_name(f".{path.name}.{uuid4().hex}.tmp")
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as exc:
            raise StorageError(f"Failed to write chunk {index} of {content_id}: {exc}") from exc
        return ref

    async def get(self, ref: ChunkRef) -> bytes:
        path = self._chunk_path(ref)
        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except FileNotFoundError as exc:
            raise ChunkMissingError(ref.content_id, ref.index) from exc
        except OSError as exc:
            raise StorageError(f"Failed to read chunk {ref.index} of {ref.content_id}") from exc
        return cast(bytes, content)

    async def delete_content(self, content_id: str) -> int:
        content_dir = self._content_dir(content_id)
        if not await aiofiles.os.path.isdir(content_dir):
            return 0

        removed = 0
        try:
            for name in await aiofiles.os.listdir(content_dir):
                await aiofiles.os.remove(content_dir / name)
                if not name.startswith("."):
                    removed += 1
            await aiofiles.os.rmdir(content_dir)
        except OSError as exc:
            raise StorageError(f"Failed to delete content {content_id}: {exc}") from exc

        logger.debug(f"Deleted {removed} chunks at {content_dir}")
        return removed

    async def list_content_ids(self) -> set[str]:
        if not await aiofiles.os.path.isdir(self.base_path):
            return set()

        content_ids: set[str] = set()
        try:
            for shard in await aiofiles.os.listdir(self.base_path):
                shard_dir = self.base_path / shard
                if not await aiofiles.os.path.isdir(shard_dir):
                    continue
                content_ids.update(await aiofiles.os.listdir(shard_dir))
        except OSError as exc:
            raise StorageError(f"Failed to list chunk store at {self.base_path}") from exc
        return content_ids
