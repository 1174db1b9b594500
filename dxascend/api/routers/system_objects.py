"""Project tree endpoints.

Routes
------
GET    /system-objects          Flat tree (persisted + virtual screen nodes)
POST   /system-objects          Create an object (Graphic → also a screen)
PUT    /system-objects/{id}     Partial update
DELETE /system-objects/{id}     Hard delete
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from dxascend.api.params import parse_id
from dxascend.runtime import ObjectTreeService

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class SystemObjectCreate(BaseModel):
    name: str
    type: str
    parent_id: Optional[int] = None
    description: Optional[str] = None
    properties: Optional[dict[str, Any]] = None


class SystemObjectUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    parent_id: Optional[int] = None
    description: Optional[str] = None
    properties: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=list[dict[str, Any]])
def list_tree(request: Request) -> list[dict[str, Any]]:
    """Return every object plus a virtual node for each unlinked screen."""
    return ObjectTreeService(request.app.state.db).list_objects()


@router.post("", status_code=201, response_model=dict[str, Any])
def create(body: SystemObjectCreate, request: Request) -> dict[str, Any]:
    """Create an object and return it with its stored properties."""
    service = ObjectTreeService(request.app.state.db)
    obj = service.create_object(
        name=body.name,
        type=body.type,
        parent_id=body.parent_id,
        description=body.description,
        properties=body.properties,
    )
    return obj.to_dict()


@router.put("/{object_id}", response_model=dict[str, Any])
def update(object_id: str, body: SystemObjectUpdate, request: Request) -> dict[str, Any]:
    """Change only the fields present in the body.

    ``parent_id`` may be sent as ``null`` to move an object to the root;
    ``name`` and ``type`` are ignored when null.
    """
    oid = parse_id(object_id)
    updates = body.model_dump(exclude_unset=True)
    for key in ("name", "type", "description", "properties"):
        if key in updates and updates[key] is None:
            del updates[key]
    obj = ObjectTreeService(request.app.state.db).update_object(oid, **updates)
    return obj.to_dict()


@router.delete("/{object_id}")
def remove(object_id: str, request: Request) -> Response:
    """Delete an object.  Linked screens are kept."""
    ObjectTreeService(request.app.state.db).delete_object(parse_id(object_id))
    return Response(status_code=204)
