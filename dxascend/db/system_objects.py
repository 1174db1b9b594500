"""CRUD operations for the ``system_objects`` table (the project tree)."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from dxascend.db.documents import dump_document, parse_document
from dxascend.db.models import SystemObject
from dxascend.errors import InvalidParameter, NotFound


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_object(row: sqlite3.Row) -> SystemObject:
    return SystemObject(
        id=row["id"],
        parent_id=row["parent_id"],
        name=row["name"],
        type=row["type"],
        description=row["description"] or "",
        properties=parse_document(row["properties"]),
    )


def insert_object(
    conn: sqlite3.Connection,
    parent_id: Optional[int],
    name: str,
    type: str,
    description: Optional[str] = None,
    properties: Optional[dict[str, Any]] = None,
) -> int:
    """Insert a row without committing and return its id.

    The caller owns the transaction.
    """
    cur = conn.execute(
        """
        INSERT INTO system_objects (parent_id, name, type, description, properties)
        VALUES (?, ?, ?, ?, ?)
        """,
        (parent_id, name, type, description or "", dump_document(properties)),
    )
    return int(cur.lastrowid)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_object(conn: sqlite3.Connection, object_id: int) -> Optional[SystemObject]:
    """Fetch a single object by id.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM system_objects WHERE id = ?", (object_id,)
    ).fetchone()
    return _row_to_object(row) if row else None


def list_objects(conn: sqlite3.Connection) -> list[SystemObject]:
    """Return every object ordered by type (descending) then name."""
    rows = conn.execute(
        "SELECT * FROM system_objects ORDER BY type DESC, name ASC"
    ).fetchall()
    return [_row_to_object(r) for r in rows]


def list_objects_by_id(conn: sqlite3.Connection) -> list[SystemObject]:
    """Return every object in id order (stable scan order)."""
    rows = conn.execute("SELECT * FROM system_objects ORDER BY id").fetchall()
    return [_row_to_object(r) for r in rows]


def value_objects(conn: sqlite3.Connection) -> dict[int, SystemObject]:
    """Map of id → object for every ValueObject (type contains "value")."""
    rows = conn.execute(
        "SELECT * FROM system_objects WHERE lower(type) LIKE '%value%' ORDER BY id"
    ).fetchall()
    return {r["id"]: _row_to_object(r) for r in rows}


def update_object(conn: sqlite3.Connection, object_id: int, **kwargs: Any) -> SystemObject:
    """Update the supplied fields of an object; everything else is kept.

    Allowed keyword arguments: ``parent_id``, ``name``, ``type``,
    ``description``, ``properties`` (dict).

    Raises:
        NotFound: If ``object_id`` does not exist.
        InvalidParameter: On an unknown field or an empty update.
    """
    if get_object(conn, object_id) is None:
        raise NotFound(f"System object not found: {object_id}")

    allowed = {"parent_id", "name", "type", "description", "properties"}
    updates: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key not in allowed:
            raise InvalidParameter(f"Cannot update field {key!r}")
        if key == "properties":
            updates["properties"] = dump_document(value)
        else:
            updates[key] = value

    if not updates:
        raise InvalidParameter("No fields provided to update")

    set_clause = ", ".join(f"{col} = ?" for col in updates)
    values = list(updates.values()) + [object_id]

    with conn:
        conn.execute(
            f"UPDATE system_objects SET {set_clause} WHERE id = ?", values  # noqa: S608
        )

    return get_object(conn, object_id)  # type: ignore[return-value]


def delete_object(conn: sqlite3.Connection, object_id: int) -> None:
    """Hard-delete an object; children are re-parented to the root.

    Screens linked to the object are untouched.  This is a no-op if the
    object does not exist.
    """
    with conn:
        conn.execute("DELETE FROM system_objects WHERE id = ?", (object_id,))
