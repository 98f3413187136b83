"""Global pytest configuration and fixtures.

Tests run against SQLite (aiosqlite) in a per-test temporary directory, so
no external database is required.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from reelstore.api.app import create_app
from reelstore.api.deps import Services
from reelstore.config import Settings
from reelstore.errors import StorageError
from reelstore.persistence.db import Database
from reelstore.persistence.records import BlobRecordStore
from reelstore.storage.base import ChunkRef, ChunkStore
from reelstore.storage.codec import ChunkCodec
from reelstore.storage.database import DatabaseChunkStore


class FlakyChunkStore(ChunkStore):
    """Wraps a real store and fails writes after a number of successful ones."""

    storage_type = "flaky"

    def __init__(self, inner: ChunkStore, fail_after: int | None = None):
        self.inner = inner
        self.fail_after = fail_after
        self.puts = 0
        self.fail_deletes = False

    async def put(self, content_id: str, index: int, data: bytes) -> ChunkRef:
        if self.fail_after is not None and self.puts >= self.fail_after:
            raise StorageError(f"injected write failure at chunk {index}")
        self.puts += 1
        return await self.inner.put(content_id, index, data)

    async def get(self, ref: ChunkRef) -> bytes:
        return await self.inner.get(ref)

    async def delete_content(self, content_id: str) -> int:
        if self.fail_deletes:
            raise StorageError("injected delete failure")
        return await self.inner.delete_content(content_id)

    async def list_content_ids(self) -> set[str]:
        return await self.inner.list_content_ids()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'reelstore.db'}"


@pytest_asyncio.fixture
async def database(sqlite_url: str) -> AsyncIterator[Database]:
    db = Database(sqlite_url)
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def chunk_store(database: Database) -> DatabaseChunkStore:
    return DatabaseChunkStore(database)


@pytest.fixture
def flaky_store(chunk_store: DatabaseChunkStore) -> FlakyChunkStore:
    return FlakyChunkStore(chunk_store)


@pytest.fixture
def codec(flaky_store: FlakyChunkStore) -> ChunkCodec:
    return ChunkCodec(flaky_store)


@pytest.fixture
def records(database: Database, flaky_store: FlakyChunkStore) -> BlobRecordStore:
    return BlobRecordStore(database, flaky_store)


@pytest.fixture
def make_settings(tmp_path: Path, sqlite_url: str) -> Callable[..., Settings]:
    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "database_url": sqlite_url,
            "chunk_store_path": str(tmp_path / "chunks"),
            "env": "test",
            "log_level": "WARNING",
        }
        values.update(overrides)
        return Settings(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def app_settings(make_settings: Callable[..., Settings]) -> Settings:
    # Small chunks and window so boundaries are crossed with tiny payloads
    return make_settings(chunk_size=16, serve_window=40)


@pytest.fixture
def client(app_settings: Settings) -> Iterator[TestClient]:
    app = create_app(app_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def services(client: TestClient) -> Services:
    return client.app.state.services  # type: ignore[attr-defined]
