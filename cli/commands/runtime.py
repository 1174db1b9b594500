"""Runtime inspection commands."""

import json
from typing import Optional

import typer

from dxascend.db import get_connection, init_db
from dxascend.db.documents import SQLITE_INT_MAX, SQLITE_INT_MIN
from dxascend.errors import InvalidParameter
from dxascend.runtime import RouteResolver, RuntimeComposer, list_runtime_screens

screens_app = typer.Typer(help="Inspect screens available to the runtime.")
runtime_app = typer.Typer(help="Compose runtime documents.")


@screens_app.command("list")
def screens_list() -> None:
    """List enabled screens."""
    conn = get_connection()
    init_db(conn)
    try:
        screens = list_runtime_screens(conn)
    finally:
        conn.close()

    if not screens:
        typer.echo("No screens found.")
        return
    for s in screens:
        typer.echo(f"  {s['id']:>4}  {s['route']:<30} {s['name']}")


@runtime_app.command("show")
def runtime_show(
    screen_id: Optional[int] = typer.Option(
        None, "--id", min=SQLITE_INT_MIN, max=SQLITE_INT_MAX, help="Screen id."
    ),
    route: Optional[str] = typer.Option(None, "--route", help="Route, slug or screen name."),
) -> None:
    """Print the runtime document of a screen as JSON."""
    if screen_id is None and not route:
        typer.echo("❌ Pass --id or --route.")
        raise typer.Exit(code=2)

    conn = get_connection()
    init_db(conn)
    try:
        if screen_id is None:
            try:
                screen = RouteResolver(conn).resolve(route)
            except InvalidParameter as exc:
                typer.echo(f"❌ {exc}")
                raise typer.Exit(code=2)
            if screen is None:
                typer.echo(f"❌ No screen found for route {route!r}.")
                raise typer.Exit(code=1)
            screen_id = screen.id

        runtime = RuntimeComposer(conn).compose(screen_id)
    finally:
        conn.close()

    if runtime is None:
        typer.echo(f"❌ Screen {screen_id} not found or disabled.")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(runtime, indent=2, ensure_ascii=False))
