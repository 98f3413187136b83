"""Base chunk storage interface.

Defines the abstract interface for the external chunk store: a key-ordered
store of byte payloads addressed by ``(content_id, n)`` with atomic
per-chunk writes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class ChunkRef:
    """Location of one persisted chunk."""

    content_id: str
    index: int


def chunk_refs(content_id: str, count: int) -> list[ChunkRef]:
    """Ordered chunk references for content written as ``count`` chunks."""
    return [ChunkRef(content_id, n) for n in range(count)]


class ChunkStore(ABC):
    """Abstract base class for chunk storage backends."""

    storage_type: str = "abstract"

    @abstractmethod
    async def put(self, content_id: str, index: int, data: bytes) -> ChunkRef:
        """Persist one chunk atomically.

        Args:
            content_id: Namespace of the content the chunk belongs to
            index: Zero-based sequence index
            data: Chunk payload

        Returns:
            Reference to the stored chunk

        Raises:
            StorageError: If the write failed
        """
        ...

    @abstractmethod
    async def get(self, ref: ChunkRef) -> bytes:
        """Fetch one chunk.

        Raises:
            ChunkMissingError: If the chunk does not exist
            StorageError: If the backend failed
        """
        ...

    @abstractmethod
    async def delete_content(self, content_id: str) -> int:
        """Delete every chunk of a content namespace.

        Returns:
            Number of chunks removed (0 if none existed)
        """
        ...

    @abstractmethod
    async def list_content_ids(self) -> set[str]:
        """Return every content namespace that has at least one chunk."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None
