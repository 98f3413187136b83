"""Tests for the upload pipeline."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from prometheus_client import REGISTRY

from reelstore.errors import StorageError, ValidationError
from reelstore.observability.metrics import get_metrics
from reelstore.persistence.records import BlobRecordStore
from reelstore.services.upload import UploadPipeline
from reelstore.storage.codec import ChunkCodec
from reelstore.storage.database import DatabaseChunkStore


def aborted_uploads() -> float:
    value = REGISTRY.get_sample_value("reelstore_uploads_total", {"outcome": "aborted"})
    return value or 0.0


async def stream_of(data: bytes, piece: int = 10) -> AsyncIterator[bytes]:
    for offset in range(0, len(data), piece):
        yield data[offset : offset + piece]


@pytest.fixture
def pipeline(codec: ChunkCodec, records: BlobRecordStore) -> UploadPipeline:
    return UploadPipeline(codec, records, chunk_size=16)


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_commits_record(
        self, pipeline: UploadPipeline, records: BlobRecordStore
    ) -> None:
        record = await pipeline.upload(stream_of(b"m" * 50), title="Holiday", filename="h.mp4")

        stored = await records.get(record.id)
        assert stored.title == "Holiday"
        assert stored.filename == "h.mp4"
        assert stored.length == 50
        assert stored.chunk_count == 4
        assert stored.content_type == "video/mp4"
        assert stored.content_id == record.id

    @pytest.mark.asyncio
    async def test_each_upload_gets_new_id(self, pipeline: UploadPipeline) -> None:
        first = await pipeline.upload(stream_of(b"1"), title="a", filename="a.mp4")
        second = await pipeline.upload(stream_of(b"1"), title="a", filename="a.mp4")

        assert first.id != second.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", [None, ""])
    async def test_missing_title(
        self, pipeline: UploadPipeline, flaky_store, title: str | None
    ) -> None:
        with pytest.raises(ValidationError, match="Title and video file are required"):
            await pipeline.upload(stream_of(b"data"), title=title, filename="f.mp4")
        assert flaky_store.puts == 0

    @pytest.mark.asyncio
    async def test_missing_stream(self, pipeline: UploadPipeline) -> None:
        with pytest.raises(ValidationError):
            await pipeline.upload(None, title="t", filename=None)

    @pytest.mark.asyncio
    async def test_store_failure_creates_no_record(
        self,
        pipeline: UploadPipeline,
        records: BlobRecordStore,
        flaky_store,
        chunk_store: DatabaseChunkStore,
    ) -> None:
        """Failing after 2 of 4 chunks leaves nothing visible."""
        flaky_store.fail_after = 2

        with pytest.raises(StorageError):
            await pipeline.upload(stream_of(b"q" * 64), title="t", filename="f.mp4")

        assert await records.list() == []
        assert await chunk_store.list_content_ids() == set()

    @pytest.mark.asyncio
    async def test_client_disconnect_creates_no_record(
        self, pipeline: UploadPipeline, records: BlobRecordStore
    ) -> None:
        async def interrupted() -> AsyncIterator[bytes]:
            yield b"p" * 40
            raise ConnectionResetError()

        with pytest.raises(ConnectionResetError):
            await pipeline.upload(interrupted(), title="t", filename="f.mp4")

        assert await records.list() == []

    @pytest.mark.asyncio
    async def test_commit_failure_discards_chunks(
        self,
        pipeline: UploadPipeline,
        records: BlobRecordStore,
        chunk_store: DatabaseChunkStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Chunks written before a failed record commit are removed."""
        get_metrics()
        aborted_before = aborted_uploads()

        async def failing_create(**kwargs):
            raise StorageError("database went away")

        monkeypatch.setattr(records, "create", failing_create)

        with pytest.raises(StorageError, match="database went away"):
            await pipeline.upload(stream_of(b"c" * 40), title="t", filename="f.mp4")

        assert await chunk_store.list_content_ids() == set()
        assert aborted_uploads() == aborted_before + 1
