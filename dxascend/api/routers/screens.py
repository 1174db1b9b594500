"""Screen and widget configuration endpoints.

Routes
------
GET    /config/screens                     All screens (including disabled)
POST   /config/screens                     Create a screen
PUT    /config/screens/{id}                Replace a screen's fields
DELETE /config/screens/{id}                Delete a screen (widgets cascade)
GET    /config/screens/{id}/widgets        Widgets of a screen
POST   /config/screens/{id}/widgets        Add a widget to a screen
PUT    /config/widgets/{id}                Replace a widget's fields
DELETE /config/widgets/{id}                Delete a widget (bindings cascade)
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from dxascend.api.params import parse_id
from dxascend.db.screens import (
    create_screen,
    delete_screen,
    get_screen,
    list_screens,
    update_screen,
)
from dxascend.db.widgets import create_widget, delete_widget, list_widgets, update_widget
from dxascend.errors import NotFound

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class ScreenBody(BaseModel):
    name: str
    route: str
    description: Optional[str] = None
    enabled: Optional[bool] = None


class ScreenResponse(BaseModel):
    id: int
    name: str
    route: str
    description: Optional[str]
    enabled: bool


class WidgetCreate(BaseModel):
    type: str
    name: str
    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    config: Optional[dict[str, Any]] = None


class WidgetUpdate(WidgetCreate):
    screen_id: int


class WidgetResponse(BaseModel):
    id: int
    screen_id: int
    type: str
    name: str
    x: int
    y: int
    width: int
    height: int
    config: dict[str, Any]


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

@router.get("/screens", response_model=list[ScreenResponse])
def list_all(request: Request) -> list[dict[str, Any]]:
    """Return every screen, enabled or not, ordered by id."""
    return [asdict(s) for s in list_screens(request.app.state.db)]


@router.post("/screens", response_model=ScreenResponse, status_code=201)
def create(body: ScreenBody, request: Request) -> dict[str, Any]:
    conn = request.app.state.db
    screen = create_screen(
        conn,
        name=body.name,
        route=body.route,
        description=body.description,
        enabled=body.enabled is not False,
    )
    return asdict(screen)


@router.put("/screens/{screen_id}", response_model=ScreenResponse)
def update(screen_id: str, body: ScreenBody, request: Request) -> dict[str, Any]:
    screen = update_screen(request.app.state.db, parse_id(screen_id), **body.model_dump())
    return asdict(screen)


@router.delete("/screens/{screen_id}")
def remove(screen_id: str, request: Request) -> Response:
    sid = parse_id(screen_id)
    if not delete_screen(request.app.state.db, sid):
        raise NotFound(f"Screen not found: {sid}")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------

@router.get("/screens/{screen_id}/widgets", response_model=list[WidgetResponse])
def screen_widgets(screen_id: str, request: Request) -> list[dict[str, Any]]:
    conn = request.app.state.db
    sid = parse_id(screen_id, "screen id")
    if get_screen(conn, sid) is None:
        raise NotFound(f"Screen not found: {sid}")
    return [asdict(w) for w in list_widgets(conn, sid)]


@router.post(
    "/screens/{screen_id}/widgets", response_model=WidgetResponse, status_code=201
)
def add_widget(screen_id: str, body: WidgetCreate, request: Request) -> dict[str, Any]:
    fields = body.model_dump()
    widget = create_widget(
        request.app.state.db,
        parse_id(screen_id, "screen id"),
        fields.pop("type"),
        fields.pop("name"),
        fields.pop("config"),
        **fields,
    )
    return asdict(widget)


@router.put("/widgets/{widget_id}", response_model=WidgetResponse)
def edit_widget(widget_id: str, body: WidgetUpdate, request: Request) -> dict[str, Any]:
    widget = update_widget(request.app.state.db, parse_id(widget_id), **body.model_dump())
    return asdict(widget)


@router.delete("/widgets/{widget_id}")
def remove_widget(widget_id: str, request: Request) -> Response:
    wid = parse_id(widget_id)
    if not delete_widget(request.app.state.db, wid):
        raise NotFound(f"Widget not found: {wid}")
    return Response(status_code=204)
