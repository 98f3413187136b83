"""FastAPI dependencies resolving the components built by the app factory."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from reelstore.config import Settings
from reelstore.persistence.db import Database
from reelstore.persistence.records import BlobRecordStore
from reelstore.services.download import DownloadStreamer
from reelstore.services.lifecycle import BlobLifecycle
from reelstore.services.upload import UploadPipeline
from reelstore.storage.base import ChunkStore
from reelstore.storage.codec import ChunkCodec
from reelstore.storage.factory import create_chunk_store


@dataclass
class Services:
    """Everything a request handler may need, wired once per application."""

    settings: Settings
    database: Database
    chunk_store: ChunkStore
    codec: ChunkCodec
    records: BlobRecordStore
    pipeline: UploadPipeline
    streamer: DownloadStreamer
    lifecycle: BlobLifecycle

    @classmethod
    def build(cls, settings: Settings, database: Database | None = None) -> Services:
        database = database or Database(settings.database_url, echo=settings.db_echo)
        chunk_store = create_chunk_store(settings, database)
        codec = ChunkCodec(chunk_store)
        records = BlobRecordStore(database, chunk_store)
        pipeline = UploadPipeline(
            codec,
            records,
            chunk_size=settings.chunk_size,
            content_type=settings.content_type,
        )
        return cls(
            settings=settings,
            database=database,
            chunk_store=chunk_store,
            codec=codec,
            records=records,
            pipeline=pipeline,
            streamer=DownloadStreamer(codec, records, window=settings.serve_window),
            lifecycle=BlobLifecycle(records, pipeline, chunk_store),
        )

    async def start(self) -> None:
        await self.database.create_tables()

    async def close(self) -> None:
        await self.chunk_store.close()
        await self.database.close()


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return get_services(request).settings


def get_records(request: Request) -> BlobRecordStore:
    return get_services(request).records


def get_pipeline(request: Request) -> UploadPipeline:
    return get_services(request).pipeline


def get_streamer(request: Request) -> DownloadStreamer:
    return get_services(request).streamer


def get_lifecycle(request: Request) -> BlobLifecycle:
    return get_services(request).lifecycle
