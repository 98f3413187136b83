"""Domain errors raised by the chunk codec, record store and services.

The HTTP layer maps these onto status codes in ``reelstore.api.errors``;
nothing below the API knows about HTTP.
"""

from __future__ import annotations


class ReelstoreError(Exception):
    """Base class for all reelstore errors."""


class ValidationError(ReelstoreError):
    """A required input is missing or malformed."""


class RangeNotSatisfiableError(ValidationError):
    """The requested range starts outside the blob."""

    def __init__(self, start: int, total_length: int):
        self.start = start
        self.total_length = total_length
        super().__init__(f"Range start {start} is outside a blob of {total_length} bytes")


class NotFoundError(ReelstoreError):
    """No live blob record has the given identifier."""

    def __init__(self, blob_id: str):
        self.blob_id = blob_id
        super().__init__(f"Blob '{blob_id}' not found")


class StorageError(ReelstoreError):
    """The underlying chunk or record storage failed mid-operation."""


class StorageUnavailableError(StorageError):
    """The storage backend could not be reached."""


class ChunkMissingError(StorageError):
    """A chunk referenced by a blob record is no longer present."""

    def __init__(self, content_id: str, index: int):
        self.content_id = content_id
        self.index = index
        super().__init__(f"Chunk {index} of content '{content_id}' is missing")
