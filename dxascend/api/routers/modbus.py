"""Field-bus definition endpoints.

Routes
------
GET/POST       /config/modbus/interfaces
PUT/DELETE     /config/modbus/interfaces/{id}
GET/POST       /config/modbus/devices           (?interface_id=)
PUT/DELETE     /config/modbus/devices/{id}
GET/POST       /config/modbus/datapoints        (?device_id=)
PUT/DELETE     /config/modbus/datapoints/{id}

These rows only describe points; values are simulated by the runtime.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from dxascend.api.params import parse_id
from dxascend.db import modbus
from dxascend.errors import NotFound

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class InterfaceBody(BaseModel):
    name: str
    ip_address: str
    port: Optional[int] = None
    polling_ms: Optional[int] = None
    enabled: Optional[bool] = None


class DeviceBody(BaseModel):
    interface_id: int
    name: str
    slave_id: int
    timeout_ms: Optional[int] = None
    enabled: Optional[bool] = None


class DatapointBody(BaseModel):
    device_id: int
    name: str
    function: str
    address: int
    datatype: str
    quantity: Optional[int] = None
    scale: Optional[float] = None
    offset: Optional[float] = None
    unit: Optional[str] = None
    rw: Optional[str] = None
    polling_ms: Optional[int] = None
    enabled: Optional[bool] = None


def _deleted(removed: bool, label: str, item_id: int) -> Response:
    if not removed:
        raise NotFound(f"{label} not found: {item_id}")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------

@router.get("/interfaces", response_model=list[dict[str, Any]])
def list_interfaces(request: Request) -> list[dict[str, Any]]:
    return [asdict(i) for i in modbus.list_interfaces(request.app.state.db)]


@router.post("/interfaces", status_code=201, response_model=dict[str, Any])
def create_interface(body: InterfaceBody, request: Request) -> dict[str, Any]:
    return asdict(modbus.create_interface(request.app.state.db, **body.model_dump()))


@router.put("/interfaces/{interface_id}", response_model=dict[str, Any])
def update_interface(interface_id: str, body: InterfaceBody, request: Request) -> dict[str, Any]:
    iface = modbus.update_interface(
        request.app.state.db, parse_id(interface_id), **body.model_dump()
    )
    return asdict(iface)


@router.delete("/interfaces/{interface_id}")
def delete_interface(interface_id: str, request: Request) -> Response:
    iid = parse_id(interface_id)
    return _deleted(modbus.delete_interface(request.app.state.db, iid), "Interface", iid)


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------

@router.get("/devices", response_model=list[dict[str, Any]])
def list_devices(request: Request, interface_id: Optional[int] = None) -> list[dict[str, Any]]:
    devices = modbus.list_devices(request.app.state.db, interface_id=interface_id)
    return [asdict(d) for d in devices]


@router.post("/devices", status_code=201, response_model=dict[str, Any])
def create_device(body: DeviceBody, request: Request) -> dict[str, Any]:
    return asdict(modbus.create_device(request.app.state.db, **body.model_dump()))


@router.put("/devices/{device_id}", response_model=dict[str, Any])
def update_device(device_id: str, body: DeviceBody, request: Request) -> dict[str, Any]:
    device = modbus.update_device(request.app.state.db, parse_id(device_id), **body.model_dump())
    return asdict(device)


@router.delete("/devices/{device_id}")
def delete_device(device_id: str, request: Request) -> Response:
    did = parse_id(device_id)
    return _deleted(modbus.delete_device(request.app.state.db, did), "Device", did)


# ---------------------------------------------------------------------------
# Datapoints
# ---------------------------------------------------------------------------

@router.get("/datapoints", response_model=list[dict[str, Any]])
def list_datapoints(request: Request, device_id: Optional[int] = None) -> list[dict[str, Any]]:
    points = modbus.list_datapoints(request.app.state.db, device_id=device_id)
    return [asdict(p) for p in points]


@router.post("/datapoints", status_code=201, response_model=dict[str, Any])
def create_datapoint(body: DatapointBody, request: Request) -> dict[str, Any]:
    return asdict(modbus.create_datapoint(request.app.state.db, **body.model_dump()))


@router.put("/datapoints/{datapoint_id}", response_model=dict[str, Any])
def update_datapoint(datapoint_id: str, body: DatapointBody, request: Request) -> dict[str, Any]:
    point = modbus.update_datapoint(
        request.app.state.db, parse_id(datapoint_id), **body.model_dump()
    )
    return asdict(point)


@router.delete("/datapoints/{datapoint_id}")
def delete_datapoint(datapoint_id: str, request: Request) -> Response:
    pid = parse_id(datapoint_id)
    return _deleted(modbus.delete_datapoint(request.app.state.db, pid), "Datapoint", pid)
