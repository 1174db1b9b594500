"""Value resolution for widget bindings.

Two independent sources, never mixed for the same binding:

* **Simulated datapoints**: no field-bus traffic happens; a datapoint's
  "live" value is a deterministic function of its descriptor and the current
  time.  Callers pass ``now`` explicitly so that identical inputs always give
  identical outputs.
* **Static value objects**: a ``*Value*`` system object carries a literal in
  its properties.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Union

from dxascend.db.documents import coerce_number

DIGITAL_FUNCTIONS = frozenset({"coil", "discrete_input"})

# Half-cycle of the digital square wave, in seconds.
DIGITAL_PERIOD_S = 10.0

_UNIT_KEYS = ("units", "unit", "unitText", "unitsText")

Value = Union[bool, int, float, None]


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def analog_base(unit: Optional[str]) -> float:
    """Centre of the simulated oscillation for a unit class."""
    unit = unit or ""
    if "°C" in unit or " C" in unit:
        return 20.0
    if "%" in unit:
        return 50.0
    return 10.0


def simulate_datapoint_value(descriptor: Mapping[str, Any], now: float) -> Union[bool, float]:
    """Return the simulated value of a datapoint at time ``now`` (seconds).

    Coils and discrete inputs produce a boolean square wave with a 20 second
    cycle; everything else a sine around a unit-dependent base, scaled and
    offset like a real register reading.  The datapoint id shifts the phase so
    neighbouring points do not move in lock-step.
    """
    raw_id = descriptor.get("id")
    dp_id = raw_id if isinstance(raw_id, int) and not isinstance(raw_id, bool) else 0
    function = str(descriptor.get("function") or "").lower()

    if function in DIGITAL_FUNCTIONS:
        phase = (now / DIGITAL_PERIOD_S + dp_id) % 2
        return phase < 1

    base = analog_base(descriptor.get("unit"))
    value = base + 5 * math.sin(now / 10 + dp_id)
    scale = _number(descriptor.get("scale"), 1)
    offset = _number(descriptor.get("offset"), 0)
    return value * scale + offset


def static_value(properties: Mapping[str, Any]) -> Value:
    """Literal carried by a value object's properties.

    ``value`` wins over ``default``; numeric text is turned into a number.
    """
    value = properties.get("value")
    if value is None:
        value = properties.get("default")
    return coerce_number(value)


def static_unit(properties: Mapping[str, Any]) -> Optional[str]:
    """First non-empty unit declaration of a value object, if any."""
    for key in _UNIT_KEYS:
        unit = properties.get(key)
        if unit not in (None, ""):
            return str(unit)
    return None
