"""Read-only runtime endpoints.

Routes
------
GET /screens                     Enabled screens available to the runtime
GET /screen/{screen_id}          Runtime document for one screen
GET /screen-by-route?route=...   Runtime document for a route or screen name
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from dxascend.api.params import parse_id
from dxascend.errors import InvalidParameter, NotFound
from dxascend.runtime import RouteResolver, RuntimeComposer, list_runtime_screens

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class RuntimeScreen(BaseModel):
    id: int
    name: str
    route: str
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _composer(request: Request) -> RuntimeComposer:
    clock = getattr(request.app.state, "clock", None)
    if clock is None:
        return RuntimeComposer(request.app.state.db)
    return RuntimeComposer(request.app.state.db, clock=clock)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/screens", response_model=list[RuntimeScreen])
def runtime_screens(request: Request) -> list[dict[str, Any]]:
    """Return every enabled screen ordered by id."""
    return list_runtime_screens(request.app.state.db)


@router.get("/screen/{screen_id}")
def runtime_by_id(screen_id: str, request: Request) -> dict[str, Any]:
    """Compose the runtime document of a screen by id."""
    sid = parse_id(screen_id, "screen id")
    runtime = _composer(request).compose(sid)
    if runtime is None:
        raise NotFound(f"Screen not found or disabled: {sid}")
    return runtime


@router.get("/screen-by-route")
def runtime_by_route(request: Request, route: Optional[str] = None) -> dict[str, Any]:
    """Resolve ``route`` (path, slug or screen name) and compose its runtime."""
    if not route or not route.strip():
        raise InvalidParameter("missing parameter: route")

    conn = request.app.state.db
    screen = RouteResolver(conn).resolve(route)
    if screen is None:
        raise NotFound(f"No screen found for route {route.strip()!r}")

    runtime = _composer(request).compose(screen.id)
    if runtime is None:
        raise NotFound(f"Could not build runtime for screen {screen.id}")
    return runtime
