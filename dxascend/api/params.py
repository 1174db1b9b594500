"""Request parameter helpers shared by the routers."""

from __future__ import annotations

from dxascend.db.documents import SQLITE_INT_MAX, SQLITE_INT_MIN
from dxascend.errors import InvalidParameter


def parse_id(raw: str, label: str = "id") -> int:
    """Parse a path id, rejecting non-integers with a 400 instead of FastAPI's 422.

    Ids outside the SQLite INTEGER range are rejected the same way, since no
    row can carry them.
    """
    try:
        text = raw.strip()
        if "_" in text:
            raise ValueError(text)
        value = int(text)
    except (AttributeError, ValueError) as exc:
        raise InvalidParameter(f"invalid {label}: {raw!r}") from exc
    if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
        raise InvalidParameter(f"{label} out of range: {raw!r}")
    return value
