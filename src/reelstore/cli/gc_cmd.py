"""CLI command for reclaiming orphaned chunks.

Usage:
    reelstore gc
    reelstore gc --dry-run

Run it while no uploads are in progress: chunks of an upload that has not
committed yet are indistinguishable from orphans.
"""

from __future__ import annotations

import asyncio

import typer

from reelstore.api.deps import Services
from reelstore.config import settings
from reelstore.services.gc import ReclaimReport, reclaim_orphans

app = typer.Typer(help="Reclaim chunks that no blob record references")


async def _run(services: Services, dry_run: bool) -> ReclaimReport:
    await services.start()
    try:
        return await reclaim_orphans(services.records, services.chunk_store, dry_run=dry_run)
    finally:
        await services.close()


@app.callback(invoke_without_command=True)
def gc(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="List orphaned content without deleting it",
    ),
) -> None:
    """Delete chunks left behind by failed uploads, replaces and deletes."""
    report = asyncio.run(_run(Services.build(settings), dry_run))

    for content_id in report.orphaned:
        typer.echo(f"  orphan: {content_id}")
    if dry_run:
        typer.echo(f"{len(report.orphaned)} of {report.scanned} contents are orphaned (dry run)")
    else:
        typer.echo(
            f"Removed {report.chunks_removed} chunks from "
            f"{len(report.orphaned)} of {report.scanned} contents"
        )
