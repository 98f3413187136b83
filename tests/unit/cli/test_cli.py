"""Tests for the reelstore CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from typer.testing import CliRunner

from reelstore.api.deps import Services
from reelstore.cli import app, gc_cmd
from reelstore.config import Settings

runner = CliRunner()


def test_help() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "serve" in result.stdout
    assert "gc" in result.stdout


def test_gc_removes_orphans(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'gc.db'}",
        chunk_store_type="local",
        chunk_store_path=str(tmp_path / "chunks"),
    )
    monkeypatch.setattr(gc_cmd, "settings", settings)

    async def seed() -> None:
        services = Services.build(settings)
        await services.start()
        await services.chunk_store.put("deadbeef", 0, b"orphan")
        await services.close()

    asyncio.run(seed())

    preview = runner.invoke(app, ["gc", "--dry-run"])
    assert preview.exit_code == 0
    assert "orphan: deadbeef" in preview.stdout
    assert (tmp_path / "chunks" / "de" / "deadbeef" / "0").exists()

    result = runner.invoke(app, ["gc"])
    assert result.exit_code == 0
    assert "Removed 1 chunks" in result.stdout
    assert not (tmp_path / "chunks" / "de" / "deadbeef").exists()
