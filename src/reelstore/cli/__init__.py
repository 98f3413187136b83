"""CLI commands for reelstore.

Provides command-line interface using Typer:
- reelstore serve: Run the API server
- reelstore gc: Reclaim orphaned chunks

Usage:
    reelstore --help
    reelstore serve --port 5000
    reelstore gc --dry-run
"""

import typer

from reelstore.cli.gc_cmd import app as gc_app
from reelstore.cli.serve import app as serve_app

app = typer.Typer(
    name="reelstore",
    help="reelstore: chunked media blob store with range streaming",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(gc_app, name="gc")


@app.callback()
def callback() -> None:
    """reelstore: chunked media blob store with range streaming."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
