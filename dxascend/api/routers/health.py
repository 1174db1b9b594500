"""Liveness probe.

Routes
------
GET /health    {"status": "ok", "dbTableSample": <first table name>, "ts": <ISO time>}
"""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request

from dxascend.runtime.composer import iso_timestamp

router = APIRouter()


@router.get("", response_model=dict[str, Any])
def health(request: Request) -> dict[str, Any]:
    """Report that the API is up and the database answers."""
    row = request.app.state.db.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' LIMIT 1"
    ).fetchone()
    return {
        "status": "ok",
        "dbTableSample": row[0] if row else None,
        "ts": iso_timestamp(time.time()),
    }
