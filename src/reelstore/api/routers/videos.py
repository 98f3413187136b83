"""Video endpoints.

- POST   /upload       - Store a new video (multipart: ``video`` file, ``title``)
- GET    /videos       - List stored videos
- GET    /video/{id}   - Stream one window of a video (requires ``Range``)
- PUT    /video/{id}   - Update the title and/or replace the content
- DELETE /video/{id}   - Remove a video and its chunks
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from starlette.responses import StreamingResponse

from reelstore.api.deps import (
    get_lifecycle,
    get_pipeline,
    get_records,
    get_settings,
    get_streamer,
)
from reelstore.api.errors import InternalServerError, VideoNotFoundError
from reelstore.config import Settings
from reelstore.errors import StorageError
from reelstore.persistence.records import BlobRecord, BlobRecordStore
from reelstore.services.download import DownloadStreamer
from reelstore.services.lifecycle import BlobLifecycle
from reelstore.services.upload import UploadPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Videos"])

# Read size when pulling a multipart upload off its spooled file
UPLOAD_READ_SIZE = 256 * 1024


async def iter_upload(file: UploadFile, read_size: int = UPLOAD_READ_SIZE) -> AsyncIterator[bytes]:
    """Yield an uploaded file's bytes in order without loading it whole."""
    while True:
        data = await file.read(read_size)
        if not data:
            break
        yield data


def video_url(request: Request, settings: Settings, record: BlobRecord) -> str:
    if settings.public_base_url:
        return f"{settings.public_base_url.rstrip('/')}/video/{record.id}"
    return str(request.url_for("stream_video", blob_id=record.id))


def video_summary(request: Request, settings: Settings, record: BlobRecord) -> dict[str, Any]:
    return {
        "_id": record.id,
        "filename": record.title,
        "length": record.length,
        "contentType": record.content_type,
        "uploadDate": record.created_at.isoformat(),
        "videoUrl": video_url(request, settings, record),
    }


@router.post("/upload")
async def upload_video(
    video: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    pipeline: UploadPipeline = Depends(get_pipeline),
) -> dict[str, str]:
    """Store an uploaded video as chunks and return its id."""
    stream = iter_upload(video) if video is not None else None
    try:
        record = await pipeline.upload(
            stream,
            title=title,
            filename=video.filename if video is not None else None,
        )
    except (StorageError, OSError) as exc:
        logger.error(f"Upload error: {exc}", exc_info=True)
        raise InternalServerError("Failed to upload video") from exc

    return {"message": "Video uploaded successfully!", "fileId": record.id}


@router.get("/videos")
async def list_videos(
    request: Request,
    records: BlobRecordStore = Depends(get_records),
    settings: Settings = Depends(get_settings),
) -> list[dict[str, Any]]:
    """List every stored video."""
    try:
        stored = await records.list()
    except StorageError as exc:
        logger.error(f"List error: {exc}", exc_info=True)
        raise InternalServerError("Failed to list videos") from exc

    if not stored:
        raise VideoNotFoundError("No videos found")

    return [video_summary(request, settings, record) for record in stored]


@router.get("/video/{blob_id}", name="stream_video")
async def stream_video(
    blob_id: str,
    request: Request,
    streamer: DownloadStreamer = Depends(get_streamer),
) -> StreamingResponse:
    """Stream at most one serving window starting at the Range header's offset."""
    partial = await streamer.open(blob_id, request.headers.get("range"))
    return StreamingResponse(
        partial.body,
        status_code=206,
        headers=partial.headers,
    )


@router.put("/video/{blob_id}")
async def update_video(
    blob_id: str,
    video: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    lifecycle: BlobLifecycle = Depends(get_lifecycle),
) -> dict[str, str]:
    """Update a video's title and/or replace its content."""
    stream = iter_upload(video) if video is not None else None
    try:
        result = await lifecycle.update(
            blob_id,
            title=title,
            stream=stream,
            filename=video.filename if video is not None else None,
        )
    except (StorageError, OSError) as exc:
        logger.error(f"Replace video error: {exc}", exc_info=True)
        raise InternalServerError("Failed to replace video", details=str(exc)) from exc

    if result.content_replaced:
        return {"message": "Video replaced successfully!", "fileId": result.record.id}
    return {"message": "Metadata updated successfully!"}


@router.delete("/video/{blob_id}")
async def delete_video(
    blob_id: str,
    lifecycle: BlobLifecycle = Depends(get_lifecycle),
) -> dict[str, str]:
    """Remove a video and every chunk it owns."""
    try:
        await lifecycle.delete(blob_id)
    except StorageError as exc:
        logger.error(f"Delete video error: {exc}", exc_info=True)
        raise InternalServerError("Failed to delete video") from exc

    return {"message": "Video deleted successfully"}
