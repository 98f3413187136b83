"""CLI command for running the API server.

Usage:
    reelstore serve
    reelstore serve --port 5000 --host 0.0.0.0
    reelstore serve --reload --log-level debug
"""

from __future__ import annotations

import typer

from reelstore.config import settings

app = typer.Typer(help="Run the reelstore API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(
        settings.host,
        "--host",
        "-h",
        help="Host to bind to",
    ),
    port: int = typer.Option(
        settings.port,
        "--port",
        "-p",
        help="Port to listen on",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
    access_log: bool = typer.Option(
        True,
        "--access-log/--no-access-log",
        help="Enable/disable access logging",
    ),
) -> None:
    """Run the reelstore API server.

    Starts the uvicorn server with the FastAPI application. A single worker
    process is used; concurrency comes from the event loop.
    """
    import uvicorn

    typer.echo("Starting reelstore server...")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Chunk store: {settings.chunk_store_type}")
    typer.echo(f"  Log level: {log_level}")
    if reload:
        typer.echo("  Reload: enabled")
    typer.echo()

    uvicorn.run(
        app="reelstore.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
        access_log=access_log,
    )
