"""Blob services: upload, range download, lifecycle and orphan reclamation."""

from reelstore.services.download import DownloadStreamer, PartialContent
from reelstore.services.gc import ReclaimReport, reclaim_orphans
from reelstore.services.lifecycle import BlobLifecycle, UpdateResult
from reelstore.services.ranges import ResolvedRange, resolve_range
from reelstore.services.upload import UploadPipeline

__all__ = [
    "BlobLifecycle",
    "DownloadStreamer",
    "PartialContent",
    "ReclaimReport",
    "ResolvedRange",
    "UpdateResult",
    "UploadPipeline",
    "reclaim_orphans",
    "resolve_range",
]
