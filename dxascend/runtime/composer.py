"""Runtime document composition.

A runtime document is everything a client needs to paint one screen::

    {
      "screen":  {"id", "name", "route", "description"},
      "widgets": [{..., "config": {...}, "bindings": [{..., "value"}]}],
      "generatedAt": "2026-01-01T12:00:00.000Z"
    }

Widgets and their bindings come out in ``widget.id, binding.id`` order.  A
widget's bindings are taken from the ``bindings`` table; only when it has
none there does the composer look for a ``binding`` descriptor embedded in
the widget's own config that points at a value object.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from dxascend.db.documents import coerce_id, parse_document
from dxascend.db.models import SystemObject
from dxascend.db.screens import get_screen, list_screens
from dxascend.db.system_objects import value_objects
from dxascend.runtime.values import simulate_datapoint_value, static_unit, static_value

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

SCREEN_SQL = """
    SELECT
        w.id   AS widget_id,
        w.name AS widget_name,
        w.type AS widget_type,
        w.x, w.y, w.width, w.height,
        w.config_json AS widget_config_json,

        b.id   AS binding_id,
        b.mode AS binding_mode,

        d.id         AS datapoint_id,
        d.name       AS datapoint_name,
        d.unit       AS datapoint_unit,
        d.scale      AS datapoint_scale,
        d."offset"   AS datapoint_offset,
        d.datatype   AS datapoint_datatype,
        d."function" AS datapoint_function,
        d.address    AS datapoint_address
    FROM widgets w
    LEFT JOIN bindings b ON b.widget_id = w.id
    LEFT JOIN datapoints d ON d.id = b.datapoint_id
    WHERE w.screen_id = ?
    ORDER BY w.id, b.id
"""


@dataclass(frozen=True)
class EmbeddedBinding:
    """A ``{"binding": {...}}`` descriptor found in a widget's config."""

    value_id: int
    value_name: Optional[str] = None

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> Optional["EmbeddedBinding"]:
        """Extract the descriptor, or ``None`` when absent or unusable."""
        binding = config.get("binding")
        if not isinstance(binding, dict):
            return None
        raw = binding.get("valueId")
        if raw is None:
            raw = binding.get("targetId")
        value_id = coerce_id(raw)
        if value_id is None:
            return None
        name = binding.get("valueName")
        return cls(value_id=value_id, value_name=name if isinstance(name, str) and name else None)


def iso_timestamp(now: float) -> str:
    """Render epoch seconds as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    stamp = datetime.fromtimestamp(now, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def list_runtime_screens(conn: sqlite3.Connection) -> list[dict[str, Any]]:
    """Enabled screens, ordered by id, in their runtime shape."""
    return [s.runtime_dict() for s in list_screens(conn, enabled_only=True)]


class RuntimeComposer:
    """Compose runtime documents from the configuration store.

    Args:
        conn: Open DB connection.
        clock: Returns the current time in epoch seconds.  Read once per
            :meth:`compose` call and shared by every simulated value and the
            ``generatedAt`` stamp.
    """

    def __init__(self, conn: sqlite3.Connection, clock: Clock = time.time) -> None:
        self.conn = conn
        self.clock = clock

    def compose(self, screen_id: int) -> Optional[dict[str, Any]]:
        """Build the runtime document for ``screen_id``.

        Returns ``None`` when the screen does not exist or is disabled.
        """
        screen = get_screen(self.conn, screen_id, enabled_only=True)
        if screen is None:
            return None

        now = self.clock()
        rows = self.conn.execute(SCREEN_SQL, (screen_id,)).fetchall()

        widgets: dict[int, dict[str, Any]] = {}
        for row in rows:
            widget = widgets.get(row["widget_id"])
            if widget is None:
                widget = self._widget(row)
                widgets[row["widget_id"]] = widget

            if row["binding_id"] is not None and row["datapoint_id"] is not None:
                widget["bindings"].append(self._datapoint_binding(row, now))

        values: Optional[dict[int, SystemObject]] = None
        for widget in widgets.values():
            if widget["bindings"]:
                continue
            embedded = EmbeddedBinding.from_config(widget["config"])
            if embedded is None:
                continue
            if values is None:
                values = value_objects(self.conn)
            obj = values.get(embedded.value_id)
            if obj is None:
                logger.debug(
                    "Widget %d references unknown value object %d",
                    widget["id"], embedded.value_id,
                )
                continue
            widget["bindings"].append(self._value_object_binding(embedded, obj))

        return {
            "screen": screen.runtime_dict(),
            "widgets": list(widgets.values()),
            "generatedAt": iso_timestamp(now),
        }

    # ------------------------------------------------------------------
    # Row shaping
    # ------------------------------------------------------------------

    @staticmethod
    def _widget(row: sqlite3.Row) -> dict[str, Any]:
        return {
            "id": row["widget_id"],
            "name": row["widget_name"],
            "type": row["widget_type"],
            "x": row["x"],
            "y": row["y"],
            "width": row["width"],
            "height": row["height"],
            "config": parse_document(row["widget_config_json"]),
            "bindings": [],
        }

    @staticmethod
    def _datapoint_binding(row: sqlite3.Row, now: float) -> dict[str, Any]:
        datapoint = {
            "id": row["datapoint_id"],
            "name": row["datapoint_name"],
            "unit": row["datapoint_unit"],
            "scale": row["datapoint_scale"],
            "offset": row["datapoint_offset"],
            "datatype": row["datapoint_datatype"],
            "function": row["datapoint_function"],
            "address": row["datapoint_address"],
        }
        return {
            "id": row["binding_id"],
            "mode": row["binding_mode"],
            "source": "datapoint",
            "datapoint": datapoint,
            "value": simulate_datapoint_value(datapoint, now),
        }

    @staticmethod
    def _value_object_binding(embedded: EmbeddedBinding, obj: SystemObject) -> dict[str, Any]:
        name = embedded.value_name or obj.name or f"Value {obj.id}"
        return {
            "id": None,
            "mode": "read",
            "source": "valueObject",
            "datapoint": {
                "id": obj.id,
                "name": name,
                "unit": static_unit(obj.properties),
                "scale": 1,
                "offset": 0,
                "datatype": obj.type,
                "function": None,
                "address": None,
            },
            "value": static_value(obj.properties),
        }
