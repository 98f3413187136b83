"""Orphaned chunk reclamation.

Chunks written by an upload that never committed, or left behind when chunk
removal failed, are referenced by no blob record. They are invisible to
readers and only cost space until reclaimed here.

Content that is still being uploaded is also unreferenced, so reclamation
should run while no uploads or replaces are in progress.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from reelstore.persistence.records import BlobRecordStore
from reelstore.storage.base import ChunkStore

logger = logging.getLogger(__name__)


@dataclass
class ReclaimReport:
    scanned: int = 0
    orphaned: list[str] = field(default_factory=list)
    chunks_removed: int = 0
    dry_run: bool = False


async def reclaim_orphans(
    records: BlobRecordStore,
    chunk_store: ChunkStore,
    dry_run: bool = False,
) -> ReclaimReport:
    """Delete every content namespace that no live record points at."""
    stored = await chunk_store.list_content_ids()
    referenced = await records.content_ids()

    report = ReclaimReport(scanned=len(stored), dry_run=dry_run)
    report.orphaned = sorted(stored - referenced)

    if dry_run:
        return report

    for content_id in report.orphaned:
        report.chunks_removed += await chunk_store.delete_content(content_id)

    logger.info(
        f"Reclaimed {len(report.orphaned)} orphaned contents "
        f"({report.chunks_removed} chunks) out of {report.scanned}"
    )
    return report
