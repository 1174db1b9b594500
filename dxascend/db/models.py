"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass
class Screen:
    id: int
    name: str
    route: str
    description: Optional[str]
    enabled: bool = True

    def runtime_dict(self) -> dict[str, Any]:
        """The four fields the runtime surface exposes."""
        return {
            "id": self.id,
            "name": self.name,
            "route": self.route,
            "description": self.description,
        }


@dataclass
class Widget:
    id: int
    screen_id: int
    type: str
    name: str
    x: int
    y: int
    width: int
    height: int
    config: dict[str, Any] = field(default_factory=dict)

    def config_json(self) -> str:
        """Serialise config dict to a JSON string for storage."""
        return json.dumps(self.config)


@dataclass
class Binding:
    id: int
    widget_id: int
    datapoint_id: int
    mode: str = "read"
    # Stored and returned as-is; no read path evaluates it.
    expression: Optional[str] = None


@dataclass
class ModbusInterface:
    id: int
    name: str
    ip_address: str
    port: int = 502
    polling_ms: int = 1000
    enabled: bool = True


@dataclass
class ModbusDevice:
    id: int
    interface_id: int
    name: str
    slave_id: int
    timeout_ms: int = 1000
    enabled: bool = True


@dataclass
class Datapoint:
    id: int
    device_id: int
    name: str
    function: str
    address: int
    datatype: str
    quantity: int = 1
    scale: float = 1.0
    offset: float = 0.0
    unit: Optional[str] = None
    rw: str = "R"
    polling_ms: Optional[int] = None
    enabled: bool = True


@dataclass
class SystemObject:
    id: int
    parent_id: Optional[int]
    name: str
    type: str
    description: str = ""
    properties: dict[str, Any] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------
    def properties_json(self) -> str:
        """Serialise properties dict to a JSON string for storage."""
        return json.dumps(self.properties)

    @property
    def is_value_object(self) -> bool:
        return "value" in (self.type or "").lower()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
