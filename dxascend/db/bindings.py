"""Operations on the ``bindings`` table (widget → datapoint links)."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from dxascend.db.modbus import get_datapoint
from dxascend.db.models import Binding
from dxascend.db.widgets import get_widget
from dxascend.errors import InvalidParameter

# Flattened listing shape: binding + owning widget/screen + target datapoint.
_DETAIL_SQL = """
    SELECT
        b.id,
        b.mode,
        b.expression,
        w.id   AS widget_id,
        w.name AS widget_name,
        s.id   AS screen_id,
        s.name AS screen_name,
        d.id   AS datapoint_id,
        d.name AS datapoint_name,
        d."function" AS datapoint_function,
        d.address    AS datapoint_address,
        d.unit       AS datapoint_unit
    FROM bindings b
    JOIN widgets    w ON w.id = b.widget_id
    JOIN screens    s ON s.id = w.screen_id
    JOIN datapoints d ON d.id = b.datapoint_id
"""


def create_binding(
    conn: sqlite3.Connection,
    widget_id: int,
    datapoint_id: int,
    mode: Optional[str] = None,
    expression: Optional[str] = None,
) -> Binding:
    """Link a widget to a datapoint.

    ``expression`` is persisted verbatim; nothing evaluates it.

    Raises:
        InvalidParameter: If either id is missing or does not exist.
    """
    if not widget_id or not datapoint_id:
        raise InvalidParameter("widget_id and datapoint_id are required")
    if get_widget(conn, widget_id) is None:
        raise InvalidParameter(f"widget_id does not exist: {widget_id}")
    if get_datapoint(conn, datapoint_id) is None:
        raise InvalidParameter(f"datapoint_id does not exist: {datapoint_id}")

    with conn:
        cur = conn.execute(
            """
            INSERT INTO bindings (widget_id, datapoint_id, mode, expression)
            VALUES (?, ?, ?, ?)
            """,
            (widget_id, datapoint_id, mode or "read", expression),
        )
    return get_binding(conn, int(cur.lastrowid))  # type: ignore[return-value]


def get_binding(conn: sqlite3.Connection, binding_id: int) -> Optional[Binding]:
    row = conn.execute(
        "SELECT id, widget_id, datapoint_id, mode, expression FROM bindings WHERE id = ?",
        (binding_id,),
    ).fetchone()
    if row is None:
        return None
    return Binding(
        id=row["id"],
        widget_id=row["widget_id"],
        datapoint_id=row["datapoint_id"],
        mode=row["mode"],
        expression=row["expression"],
    )


def list_binding_details(
    conn: sqlite3.Connection,
    screen_id: Optional[int] = None,
    widget_id: Optional[int] = None,
    datapoint_id: Optional[int] = None,
    binding_id: Optional[int] = None,
) -> list[dict[str, Any]]:
    """Return flattened binding rows, optionally filtered."""
    clauses: list[str] = []
    params: list[Any] = []
    for column, value in (
        ("s.id", screen_id),
        ("w.id", widget_id),
        ("d.id", datapoint_id),
        ("b.id", binding_id),
    ):
        if value is not None:
            clauses.append(f"{column} = ?")
            params.append(value)

    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = conn.execute(
        _DETAIL_SQL + where + " ORDER BY s.id, w.id, b.id", params
    ).fetchall()
    return [dict(r) for r in rows]


def delete_binding(conn: sqlite3.Connection, binding_id: int) -> bool:
    with conn:
        cur = conn.execute("DELETE FROM bindings WHERE id = ?", (binding_id,))
    return cur.rowcount > 0
