"""Helpers for the JSON documents stored as text columns.

``widgets.config_json`` and ``system_objects.properties`` hold open-ended
JSON authored by loosely-validated tooling.  Reading them must never fail:
anything that is not a JSON object degrades to an empty dict.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional

# SQLite INTEGER is a signed 64-bit value.
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


def parse_document(text: Any) -> dict[str, Any]:
    """Parse stored JSON text into a dict, returning ``{}`` on any problem."""
    if isinstance(text, dict):
        return text
    if not text or not isinstance(text, (str, bytes)):
        return {}
    try:
        value = json.loads(text)
    except (ValueError, TypeError):
        return {}
    return value if isinstance(value, dict) else {}


def dump_document(value: Optional[dict[str, Any]]) -> str:
    """Serialise a document for storage (``None`` becomes ``{}``)."""
    return json.dumps(value or {})


def coerce_id(value: Any) -> Optional[int]:
    """Coerce an id-like value (``3``, ``3.0``, ``"3"``) to ``int``.

    Returns ``None`` for booleans, blanks, non-integral numbers, values outside
    the SQLite INTEGER range and anything else that does not name an id.
    """
    number = _integral(value)
    if number is None or not SQLITE_INT_MIN <= number <= SQLITE_INT_MAX:
        return None
    return number


def _integral(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if math.isfinite(number) and number.is_integer() else None
    return None


def coerce_number(value: Any) -> Any:
    """Turn numeric text into a number; return anything else unchanged."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text or "_" in text:
        return value
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    return number if math.isfinite(number) else value
