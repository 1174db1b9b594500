"""Operations on the field-bus definition tables.

``modbus_interfaces`` → ``modbus_devices`` → ``datapoints``.  Nothing here
talks to real hardware; the rows only describe what *would* be polled, and
the runtime composer simulates their values.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from dxascend.db.models import Datapoint, ModbusDevice, ModbusInterface
from dxascend.errors import InvalidParameter, NotFound

_DATAPOINT_COLUMNS = (
    'id, device_id, name, "function", address, quantity, datatype, '
    'scale, "offset", unit, rw, polling_ms, enabled'
)


def _flag(value: Any) -> int:
    return 0 if value is False or value == 0 else 1


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_interface(row: sqlite3.Row) -> ModbusInterface:
    return ModbusInterface(
        id=row["id"],
        name=row["name"],
        ip_address=row["ip_address"],
        port=row["port"],
        polling_ms=row["polling_ms"],
        enabled=bool(row["enabled"]),
    )


def _row_to_device(row: sqlite3.Row) -> ModbusDevice:
    return ModbusDevice(
        id=row["id"],
        interface_id=row["interface_id"],
        name=row["name"],
        slave_id=row["slave_id"],
        timeout_ms=row["timeout_ms"],
        enabled=bool(row["enabled"]),
    )


def _row_to_datapoint(row: sqlite3.Row) -> Datapoint:
    return Datapoint(
        id=row["id"],
        device_id=row["device_id"],
        name=row["name"],
        function=row["function"],
        address=row["address"],
        quantity=row["quantity"],
        datatype=row["datatype"],
        scale=row["scale"],
        offset=row["offset"],
        unit=row["unit"],
        rw=row["rw"],
        polling_ms=row["polling_ms"],
        enabled=bool(row["enabled"]),
    )


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------

def _interface_values(kwargs: dict[str, Any]) -> tuple[Any, ...]:
    name = kwargs.get("name")
    ip_address = kwargs.get("ip_address")
    if not name or not ip_address:
        raise InvalidParameter("name and ip_address are required")
    port = kwargs.get("port")
    polling_ms = kwargs.get("polling_ms")
    return (
        name,
        ip_address,
        502 if port is None else port,
        1000 if polling_ms is None else polling_ms,
        _flag(kwargs.get("enabled")),
    )


def create_interface(conn: sqlite3.Connection, **kwargs: Any) -> ModbusInterface:
    values = _interface_values(kwargs)
    with conn:
        cur = conn.execute(
            """
            INSERT INTO modbus_interfaces (name, ip_address, port, polling_ms, enabled)
            VALUES (?, ?, ?, ?, ?)
            """,
            values,
        )
    return get_interface(conn, int(cur.lastrowid))  # type: ignore[return-value]


def get_interface(conn: sqlite3.Connection, interface_id: int) -> Optional[ModbusInterface]:
    row = conn.execute(
        "SELECT * FROM modbus_interfaces WHERE id = ?", (interface_id,)
    ).fetchone()
    return _row_to_interface(row) if row else None


def list_interfaces(conn: sqlite3.Connection) -> list[ModbusInterface]:
    rows = conn.execute("SELECT * FROM modbus_interfaces ORDER BY id").fetchall()
    return [_row_to_interface(r) for r in rows]


def update_interface(
    conn: sqlite3.Connection, interface_id: int, **kwargs: Any
) -> ModbusInterface:
    if get_interface(conn, interface_id) is None:
        raise NotFound(f"Interface not found: {interface_id}")
    values = _interface_values(kwargs)
    with conn:
        conn.execute(
            """
            UPDATE modbus_interfaces
            SET name = ?, ip_address = ?, port = ?, polling_ms = ?, enabled = ?
            WHERE id = ?
            """,
            (*values, interface_id),
        )
    return get_interface(conn, interface_id)  # type: ignore[return-value]


def delete_interface(conn: sqlite3.Connection, interface_id: int) -> bool:
    with conn:
        cur = conn.execute("DELETE FROM modbus_interfaces WHERE id = ?", (interface_id,))
    return cur.rowcount > 0


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------

def _device_values(conn: sqlite3.Connection, kwargs: dict[str, Any]) -> tuple[Any, ...]:
    interface_id = kwargs.get("interface_id")
    name = kwargs.get("name")
    slave_id = kwargs.get("slave_id")
    if not interface_id or not name or slave_id is None:
        raise InvalidParameter("interface_id, name and slave_id are required")
    if get_interface(conn, interface_id) is None:
        raise InvalidParameter(f"interface_id does not exist: {interface_id}")
    timeout_ms = kwargs.get("timeout_ms")
    return (
        interface_id,
        name,
        slave_id,
        1000 if timeout_ms is None else timeout_ms,
        _flag(kwargs.get("enabled")),
    )


def create_device(conn: sqlite3.Connection, **kwargs: Any) -> ModbusDevice:
    values = _device_values(conn, kwargs)
    with conn:
        cur = conn.execute(
            """
            INSERT INTO modbus_devices (interface_id, name, slave_id, timeout_ms, enabled)
            VALUES (?, ?, ?, ?, ?)
            """,
            values,
        )
    return get_device(conn, int(cur.lastrowid))  # type: ignore[return-value]


def get_device(conn: sqlite3.Connection, device_id: int) -> Optional[ModbusDevice]:
    row = conn.execute("SELECT * FROM modbus_devices WHERE id = ?", (device_id,)).fetchone()
    return _row_to_device(row) if row else None


def list_devices(
    conn: sqlite3.Connection, interface_id: Optional[int] = None
) -> list[ModbusDevice]:
    if interface_id is not None:
        rows = conn.execute(
            "SELECT * FROM modbus_devices WHERE interface_id = ? ORDER BY id",
            (interface_id,),
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM modbus_devices ORDER BY id").fetchall()
    return [_row_to_device(r) for r in rows]


def update_device(conn: sqlite3.Connection, device_id: int, **kwargs: Any) -> ModbusDevice:
    if get_device(conn, device_id) is None:
        raise NotFound(f"Device not found: {device_id}")
    values = _device_values(conn, kwargs)
    with conn:
        conn.execute(
            """
            UPDATE modbus_devices
            SET interface_id = ?, name = ?, slave_id = ?, timeout_ms = ?, enabled = ?
            WHERE id = ?
            """,
            (*values, device_id),
        )
    return get_device(conn, device_id)  # type: ignore[return-value]


def delete_device(conn: sqlite3.Connection, device_id: int) -> bool:
    with conn:
        cur = conn.execute("DELETE FROM modbus_devices WHERE id = ?", (device_id,))
    return cur.rowcount > 0


# ---------------------------------------------------------------------------
# Datapoints
# ---------------------------------------------------------------------------

def _datapoint_values(conn: sqlite3.Connection, kwargs: dict[str, Any]) -> tuple[Any, ...]:
    device_id = kwargs.get("device_id")
    name = kwargs.get("name")
    function = kwargs.get("function")
    address = kwargs.get("address")
    datatype = kwargs.get("datatype")
    if not device_id or not name or not function or address is None or not datatype:
        raise InvalidParameter(
            "device_id, name, function, address and datatype are required"
        )
    if get_device(conn, device_id) is None:
        raise InvalidParameter(f"device_id does not exist: {device_id}")

    def pick(key: str, default: Any) -> Any:
        value = kwargs.get(key)
        return default if value is None else value

    return (
        device_id,
        name,
        function,
        address,
        pick("quantity", 1),
        datatype,
        pick("scale", 1.0),
        pick("offset", 0.0),
        kwargs.get("unit"),
        pick("rw", "R"),
        kwargs.get("polling_ms"),
        _flag(kwargs.get("enabled")),
    )


def create_datapoint(conn: sqlite3.Connection, **kwargs: Any) -> Datapoint:
    """Insert a datapoint definition.

    Required keywords: ``device_id``, ``name``, ``function``, ``address``,
    ``datatype``.  Optional: ``quantity`` (1), ``scale`` (1.0), ``offset``
    (0.0), ``unit``, ``rw`` ("R"), ``polling_ms``, ``enabled`` (True).

    Raises:
        InvalidParameter: On missing fields or an unknown device.
    """
    values = _datapoint_values(conn, kwargs)
    with conn:
        cur = conn.execute(
            f"""
            INSERT INTO datapoints ({_DATAPOINT_COLUMNS.replace('id, ', '', 1)})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            values,
        )
    return get_datapoint(conn, int(cur.lastrowid))  # type: ignore[return-value]


def get_datapoint(conn: sqlite3.Connection, datapoint_id: int) -> Optional[Datapoint]:
    row = conn.execute(
        f"SELECT {_DATAPOINT_COLUMNS} FROM datapoints WHERE id = ?", (datapoint_id,)
    ).fetchone()
    return _row_to_datapoint(row) if row else None


def list_datapoints(
    conn: sqlite3.Connection, device_id: Optional[int] = None
) -> list[Datapoint]:
    if device_id is not None:
        rows = conn.execute(
            f"SELECT {_DATAPOINT_COLUMNS} FROM datapoints WHERE device_id = ? ORDER BY id",
            (device_id,),
        ).fetchall()
    else:
        rows = conn.execute(
            f"SELECT {_DATAPOINT_COLUMNS} FROM datapoints ORDER BY id"
        ).fetchall()
    return [_row_to_datapoint(r) for r in rows]


def update_datapoint(
    conn: sqlite3.Connection, datapoint_id: int, **kwargs: Any
) -> Datapoint:
    if get_datapoint(conn, datapoint_id) is None:
        raise NotFound(f"Datapoint not found: {datapoint_id}")
    values = _datapoint_values(conn, kwargs)
    with conn:
        conn.execute(
            """
            UPDATE datapoints
            SET device_id = ?, name = ?, "function" = ?, address = ?, quantity = ?,
                datatype = ?, scale = ?, "offset" = ?, unit = ?, rw = ?,
                polling_ms = ?, enabled = ?
            WHERE id = ?
            """,
            (*values, datapoint_id),
        )
    return get_datapoint(conn, datapoint_id)  # type: ignore[return-value]


def delete_datapoint(conn: sqlite3.Connection, datapoint_id: int) -> bool:
    with conn:
        cur = conn.execute("DELETE FROM datapoints WHERE id = ?", (datapoint_id,))
    return cur.rowcount > 0
