"""CRUD operations for the ``widgets`` table."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from dxascend.db.documents import dump_document, parse_document
from dxascend.db.models import Widget
from dxascend.db.screens import get_screen
from dxascend.errors import InvalidParameter, NotFound

_COLUMNS = "id, screen_id, type, name, x, y, width, height, config_json"


def _row_to_widget(row: sqlite3.Row) -> Widget:
    return Widget(
        id=row["id"],
        screen_id=row["screen_id"],
        type=row["type"],
        name=row["name"],
        x=row["x"],
        y=row["y"],
        width=row["width"],
        height=row["height"],
        config=parse_document(row["config_json"]),
    )


def _layout(kwargs: dict[str, Any]) -> tuple[int, int, int, int]:
    def pick(key: str, default: int) -> int:
        value = kwargs.get(key)
        return default if value is None else value

    return pick("x", 0), pick("y", 0), pick("width", 100), pick("height", 100)


def create_widget(
    conn: sqlite3.Connection,
    screen_id: int,
    type: str,
    name: str,
    config: Optional[dict[str, Any]] = None,
    **layout: Any,
) -> Widget:
    """Insert a widget on ``screen_id`` and return it.

    Layout keywords ``x``, ``y``, ``width``, ``height`` default to
    ``0, 0, 100, 100``.

    Raises:
        InvalidParameter: If ``type``/``name`` are blank or the screen is unknown.
    """
    if not type or not name:
        raise InvalidParameter("type and name are required for a widget")
    if get_screen(conn, screen_id) is None:
        raise InvalidParameter(f"screen_id does not exist: {screen_id}")

    x, y, width, height = _layout(layout)
    with conn:
        cur = conn.execute(
            """
            INSERT INTO widgets (screen_id, type, name, x, y, width, height, config_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (screen_id, type, name, x, y, width, height, dump_document(config)),
        )
    return get_widget(conn, int(cur.lastrowid))  # type: ignore[return-value]


def get_widget(conn: sqlite3.Connection, widget_id: int) -> Optional[Widget]:
    row = conn.execute(
        f"SELECT {_COLUMNS} FROM widgets WHERE id = ?", (widget_id,)
    ).fetchone()
    return _row_to_widget(row) if row else None


def list_widgets(conn: sqlite3.Connection, screen_id: int) -> list[Widget]:
    """Return the widgets of one screen ordered by id."""
    rows = conn.execute(
        f"SELECT {_COLUMNS} FROM widgets WHERE screen_id = ? ORDER BY id",
        (screen_id,),
    ).fetchall()
    return [_row_to_widget(r) for r in rows]


def update_widget(conn: sqlite3.Connection, widget_id: int, **kwargs: Any) -> Widget:
    """Replace a widget's fields (``screen_id``, ``type`` and ``name`` required).

    Raises:
        NotFound: If ``widget_id`` does not exist.
        InvalidParameter: On missing fields or an unknown target screen.
    """
    if get_widget(conn, widget_id) is None:
        raise NotFound(f"Widget not found: {widget_id}")
    screen_id = kwargs.get("screen_id")
    if not screen_id or not kwargs.get("type") or not kwargs.get("name"):
        raise InvalidParameter("screen_id, type and name are required for a widget")
    if get_screen(conn, screen_id) is None:
        raise InvalidParameter(f"screen_id does not exist: {screen_id}")

    x, y, width, height = _layout(kwargs)
    with conn:
        conn.execute(
            """
            UPDATE widgets
            SET screen_id = ?, type = ?, name = ?, x = ?, y = ?,
                width = ?, height = ?, config_json = ?
            WHERE id = ?
            """,
            (
                screen_id,
                kwargs["type"],
                kwargs["name"],
                x,
                y,
                width,
                height,
                dump_document(kwargs.get("config")),
                widget_id,
            ),
        )
    return get_widget(conn, widget_id)  # type: ignore[return-value]


def delete_widget(conn: sqlite3.Connection, widget_id: int) -> bool:
    """Delete a widget (its bindings cascade).  Returns ``False`` if absent."""
    with conn:
        cur = conn.execute("DELETE FROM widgets WHERE id = ?", (widget_id,))
    return cur.rowcount > 0
