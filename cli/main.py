"""DX-Ascend CLI: entry-point for all server operations.

Usage:
    python cli/main.py --help

Sub-command groups:
    db       → schema bootstrap
    screens  → enabled screens
    runtime  → runtime documents
    tree     → project tree
    serve    → HTTP API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from dxascend.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging

import typer

from dxascend.config import settings
from dxascend.db import get_connection, init_db
from cli.commands.runtime import runtime_app, screens_app
from cli.commands.tree import tree_app

app = typer.Typer(
    name="dxascend",
    help="DX-Ascend server CLI.",
    no_args_is_help=True,
)
app.add_typer(screens_app, name="screens")
app.add_typer(runtime_app, name="runtime")
app.add_typer(tree_app, name="tree")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# HTTP server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option(settings.host, help="Bind address."),
    port: int = typer.Option(settings.port, help="Bind port."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    typer.echo(f"[serve] DX-Ascend API on http://{host}:{port}")
    uvicorn.run(
        "dxascend.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
