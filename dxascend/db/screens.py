"""CRUD operations for the ``screens`` table."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from dxascend.db.models import Screen
from dxascend.errors import InvalidParameter, NotFound

_COLUMNS = "id, name, route, description, enabled"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_screen(row: sqlite3.Row) -> Screen:
    return Screen(
        id=row["id"],
        name=row["name"],
        route=row["route"],
        description=row["description"],
        enabled=bool(row["enabled"]),
    )


def insert_screen(
    conn: sqlite3.Connection,
    name: str,
    route: str,
    description: Optional[str] = None,
    enabled: bool = True,
) -> int:
    """Insert a screen row without committing and return its id.

    The caller owns the transaction; used by the atomic Graphic flow.
    """
    cur = conn.execute(
        "INSERT INTO screens (name, route, description, enabled) VALUES (?, ?, ?, ?)",
        (name, route, description, 1 if enabled else 0),
    )
    return int(cur.lastrowid)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_screen(
    conn: sqlite3.Connection,
    name: str,
    route: str,
    description: Optional[str] = None,
    enabled: bool = True,
) -> Screen:
    """Insert a new screen and return it.

    Raises:
        InvalidParameter: If ``name`` or ``route`` is blank or the route is
            already taken.
    """
    if not name or not route:
        raise InvalidParameter("name and route are required for a screen")
    try:
        with conn:
            sid = insert_screen(conn, name, route, description, enabled)
    except sqlite3.IntegrityError as exc:
        raise InvalidParameter(str(exc)) from exc
    return get_screen(conn, sid)  # type: ignore[return-value]


def get_screen(
    conn: sqlite3.Connection,
    screen_id: int,
    enabled_only: bool = False,
) -> Optional[Screen]:
    """Fetch a screen by id.  Returns ``None`` if not found (or disabled)."""
    sql = f"SELECT {_COLUMNS} FROM screens WHERE id = ?"
    if enabled_only:
        sql += " AND enabled = 1"
    row = conn.execute(sql, (screen_id,)).fetchone()
    return _row_to_screen(row) if row else None


def list_screens(conn: sqlite3.Connection, enabled_only: bool = False) -> list[Screen]:
    """Return screens ordered by id."""
    sql = f"SELECT {_COLUMNS} FROM screens"
    if enabled_only:
        sql += " WHERE enabled = 1"
    rows = conn.execute(sql + " ORDER BY id").fetchall()
    return [_row_to_screen(r) for r in rows]


def find_screen_by_route(conn: sqlite3.Connection, route: str) -> Optional[Screen]:
    """Exact match of an enabled screen's ``route`` column."""
    row = conn.execute(
        f"SELECT {_COLUMNS} FROM screens WHERE route = ? AND enabled = 1 ORDER BY id LIMIT 1",
        (route,),
    ).fetchone()
    return _row_to_screen(row) if row else None


def find_screen_by_name(conn: sqlite3.Connection, name: str) -> Optional[Screen]:
    """Case-insensitive exact match on an enabled screen's name (lowest id wins)."""
    row = conn.execute(
        f"SELECT {_COLUMNS} FROM screens "
        "WHERE lower(name) = lower(?) AND enabled = 1 ORDER BY id LIMIT 1",
        (name,),
    ).fetchone()
    return _row_to_screen(row) if row else None


def route_taken(conn: sqlite3.Connection, route: str) -> bool:
    """True when any screen, enabled or not, already claims ``route``."""
    row = conn.execute("SELECT 1 FROM screens WHERE route = ?", (route,)).fetchone()
    return row is not None


def update_screen(conn: sqlite3.Connection, screen_id: int, **kwargs: Any) -> Screen:
    """Replace the editable fields of a screen.

    Raises:
        NotFound: If ``screen_id`` does not exist.
        InvalidParameter: If ``name``/``route`` are blank or the route clashes.
    """
    if get_screen(conn, screen_id) is None:
        raise NotFound(f"Screen not found: {screen_id}")
    name = kwargs.get("name")
    route = kwargs.get("route")
    if not name or not route:
        raise InvalidParameter("name and route are required for a screen")
    enabled = kwargs.get("enabled")
    try:
        with conn:
            conn.execute(
                """
                UPDATE screens
                SET name = ?, route = ?, description = ?, enabled = ?
                WHERE id = ?
                """,
                (
                    name,
                    route,
                    kwargs.get("description"),
                    0 if enabled is False else 1,
                    screen_id,
                ),
            )
    except sqlite3.IntegrityError as exc:
        raise InvalidParameter(str(exc)) from exc
    return get_screen(conn, screen_id)  # type: ignore[return-value]


def delete_screen(conn: sqlite3.Connection, screen_id: int) -> bool:
    """Delete a screen (widgets and bindings cascade).  Returns ``False`` if absent."""
    with conn:
        cur = conn.execute("DELETE FROM screens WHERE id = ?", (screen_id,))
    return cur.rowcount > 0
