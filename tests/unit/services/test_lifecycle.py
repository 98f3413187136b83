"""Tests for title updates, content replacement and deletion."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from reelstore.errors import NotFoundError, StorageError
from reelstore.persistence.records import BlobRecord, BlobRecordStore
from reelstore.services.lifecycle import BlobLifecycle
from reelstore.services.upload import UploadPipeline
from reelstore.storage.codec import ChunkCodec
from reelstore.storage.database import DatabaseChunkStore


async def stream_of(data: bytes) -> AsyncIterator[bytes]:
    yield data


async def read_all(codec: ChunkCodec, record: BlobRecord) -> bytes:
    pieces = codec.read(record.chunks, record.chunk_size, 0, record.length - 1)
    return b"".join([p async for p in pieces])


@pytest.fixture
def pipeline(codec: ChunkCodec, records: BlobRecordStore) -> UploadPipeline:
    return UploadPipeline(codec, records, chunk_size=16)


@pytest.fixture
def lifecycle(records: BlobRecordStore, pipeline: UploadPipeline, flaky_store) -> BlobLifecycle:
    return BlobLifecycle(records, pipeline, flaky_store)


@pytest_asyncio.fixture
async def original(pipeline: UploadPipeline) -> BlobRecord:
    return await pipeline.upload(stream_of(b"o" * 40), title="Original", filename="orig.mp4")


class TestUpdate:
    @pytest.mark.asyncio
    async def test_title_only(
        self, lifecycle: BlobLifecycle, original: BlobRecord, codec: ChunkCodec
    ) -> None:
        result = await lifecycle.update(original.id, title="Renamed")

        assert result.title_updated
        assert not result.content_replaced
        assert result.record.title == "Renamed"
        assert result.record.content_id == original.content_id
        assert await read_all(codec, result.record) == b"o" * 40

    @pytest.mark.asyncio
    async def test_nothing_to_update(self, lifecycle: BlobLifecycle, original: BlobRecord) -> None:
        result = await lifecycle.update(original.id)

        assert not result.title_updated
        assert not result.content_replaced
        assert result.record == original

    @pytest.mark.asyncio
    async def test_replace_keeps_id_and_title(
        self,
        lifecycle: BlobLifecycle,
        original: BlobRecord,
        codec: ChunkCodec,
        chunk_store: DatabaseChunkStore,
    ) -> None:
        result = await lifecycle.update(
            original.id, stream=stream_of(b"n" * 70), filename="new.mp4"
        )

        assert result.content_replaced
        assert result.record.id == original.id
        assert result.record.title == "Original"
        assert result.record.filename == "new.mp4"
        assert result.record.length == 70
        assert result.record.content_id != original.content_id
        assert await read_all(codec, result.record) == b"n" * 70
        # Old chunks are gone once the swap is done
        assert await chunk_store.list_content_ids() == {result.record.content_id}

    @pytest.mark.asyncio
    async def test_replace_with_title(self, lifecycle: BlobLifecycle, original: BlobRecord) -> None:
        result = await lifecycle.update(original.id, title="Both", stream=stream_of(b"n"))

        assert result.title_updated
        assert result.content_replaced
        assert result.record.title == "Both"

    @pytest.mark.asyncio
    async def test_failed_replace_keeps_old_content(
        self,
        lifecycle: BlobLifecycle,
        original: BlobRecord,
        records: BlobRecordStore,
        codec: ChunkCodec,
        flaky_store,
        chunk_store: DatabaseChunkStore,
    ) -> None:
        flaky_store.fail_after = flaky_store.puts + 1

        with pytest.raises(StorageError):
            await lifecycle.update(original.id, title="Lost", stream=stream_of(b"n" * 64))

        current = await records.get(original.id)
        assert current.title == "Original"
        assert current.content_id == original.content_id
        assert await read_all(codec, current) == b"o" * 40
        assert await chunk_store.list_content_ids() == {original.content_id}

    @pytest.mark.asyncio
    async def test_unknown_id(self, lifecycle: BlobLifecycle) -> None:
        with pytest.raises(NotFoundError):
            await lifecycle.update("missing", title="x")
        with pytest.raises(NotFoundError):
            await lifecycle.update("missing", stream=stream_of(b"x"))


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_then_get(
        self,
        lifecycle: BlobLifecycle,
        original: BlobRecord,
        records: BlobRecordStore,
        chunk_store: DatabaseChunkStore,
    ) -> None:
        await lifecycle.delete(original.id)

        with pytest.raises(NotFoundError):
            await records.get(original.id)
        assert await chunk_store.list_content_ids() == set()

    @pytest.mark.asyncio
    async def test_delete_unknown(self, lifecycle: BlobLifecycle) -> None:
        with pytest.raises(NotFoundError):
            await lifecycle.delete("missing")
