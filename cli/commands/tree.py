"""Project tree commands."""

import typer
from typing import Optional

from dxascend.db import get_connection, init_db
from dxascend.db.documents import SQLITE_INT_MAX, SQLITE_INT_MIN
from dxascend.errors import StoreError
from dxascend.runtime import ObjectTreeService
from cli.rendering import render_tree

tree_app = typer.Typer(help="Browse and extend the project tree.")


@tree_app.command("list")
def tree_list() -> None:
    """Show the project tree, including virtual nodes for unlinked screens."""
    conn = get_connection()
    init_db(conn)
    try:
        objects = ObjectTreeService(conn).list_objects()
    finally:
        conn.close()

    if not objects:
        typer.echo("Tree is empty.")
        return
    typer.echo(render_tree(objects))


@tree_app.command("add-graphic")
def tree_add_graphic(
    name: str = typer.Argument(..., help="Display name of the new screen."),
    parent_id: Optional[int] = typer.Option(
        None, "--parent-id", min=SQLITE_INT_MIN, max=SQLITE_INT_MAX, help="Parent object id."
    ),
    description: Optional[str] = typer.Option(None, help="Screen description."),
) -> None:
    """Create a Graphic object together with its backing screen."""
    conn = get_connection()
    init_db(conn)
    try:
        obj = ObjectTreeService(conn).create_object(
            name=name, type="Graphic", parent_id=parent_id, description=description
        )
    except StoreError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)
    finally:
        conn.close()

    typer.echo(
        f"✅ Graphic created: {obj.name} (object {obj.id}, "
        f"screen {obj.properties['screenId']}, route {obj.properties['route']})"
    )
