"""Binding endpoints (widget → datapoint links).

Routes
------
GET    /config/bindings          Flattened list (?screen_id=, ?widget_id=, ?datapoint_id=)
POST   /config/bindings          Create a binding
DELETE /config/bindings/{id}     Delete a binding
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from dxascend.api.params import parse_id
from dxascend.db.bindings import create_binding, delete_binding, list_binding_details
from dxascend.errors import NotFound

router = APIRouter()


class BindingCreate(BaseModel):
    widget_id: int
    datapoint_id: int
    mode: Optional[str] = None
    expression: Optional[str] = None


@router.get("", response_model=list[dict[str, Any]])
def list_all(
    request: Request,
    screen_id: Optional[int] = None,
    widget_id: Optional[int] = None,
    datapoint_id: Optional[int] = None,
) -> list[dict[str, Any]]:
    """Return bindings joined with their widget, screen and datapoint."""
    return list_binding_details(
        request.app.state.db,
        screen_id=screen_id,
        widget_id=widget_id,
        datapoint_id=datapoint_id,
    )


@router.post("", status_code=201, response_model=dict[str, Any])
def create(body: BindingCreate, request: Request) -> dict[str, Any]:
    """Create a binding and return its flattened representation."""
    conn = request.app.state.db
    binding = create_binding(
        conn,
        widget_id=body.widget_id,
        datapoint_id=body.datapoint_id,
        mode=body.mode,
        expression=body.expression,
    )
    return list_binding_details(conn, binding_id=binding.id)[0]


@router.delete("/{binding_id}")
def remove(binding_id: str, request: Request) -> Response:
    bid = parse_id(binding_id)
    if not delete_binding(request.app.state.db, bid):
        raise NotFound(f"Binding not found: {bid}")
    return Response(status_code=204)
