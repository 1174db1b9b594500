"""Tests for the runtime and project-tree HTTP endpoints.

All tests use an in-memory SQLite database via the FastAPI TestClient, with
the composer clock pinned so simulated values are reproducible.
"""

from __future__ import annotations

import math
import sqlite3
import threading

import pytest
from fastapi.testclient import TestClient

from dxascend.api.app import create_app
from dxascend.db.bindings import create_binding
from dxascend.db.connection import get_connection
from dxascend.db.migrations import init_db
from dxascend.db.modbus import create_datapoint, create_device, create_interface
from dxascend.db.screens import create_screen, list_screens
from dxascend.db.widgets import create_widget
from dxascend.runtime.tree import VIRTUAL_ID_OFFSET


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(tmp_path, monkeypatch):
    """Return a TestClient backed by an isolated in-memory DB.

    The lifespan opens its own connection inside a temporary workspace; it is
    replaced with a fresh in-memory connection once the client has started.
    """
    monkeypatch.setattr("dxascend.config.settings.workspace_dir", tmp_path)
    conn = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(conn)
    app = create_app()

    with TestClient(app, raise_server_exceptions=True) as c:
        c.app.state.db = conn
        c.app.state.clock = lambda: 0.0
        yield c

    conn.close()


@pytest.fixture()
def db(client):
    return client.app.state.db  # type: ignore[attr-defined]


def _sample_screen(db) -> int:
    screen = create_screen(db, name="Sala 1", route="/web/sala-1", description="Main hall")
    widget = create_widget(db, screen.id, "gauge", "Temp")
    iface = create_interface(db, name="bus", ip_address="10.0.0.2")
    device = create_device(db, interface_id=iface.id, name="PLC", slave_id=1)
    point = create_datapoint(
        db, device_id=device.id, name="T1", function="input_register",
        address=1, datatype="int16", unit="°C",
    )
    create_binding(db, widget.id, point.id)
    return screen.id


# ---------------------------------------------------------------------------
# Runtime surface
# ---------------------------------------------------------------------------

class TestRuntimeScreens:
    def test_lists_enabled_screens(self, client, db):
        a = create_screen(db, name="A", route="/a")
        create_screen(db, name="B", route="/b", enabled=False)
        resp = client.get("/screens")
        assert resp.status_code == 200
        assert resp.json() == [{"id": a.id, "name": "A", "route": "/a", "description": None}]


class TestScreenById:
    def test_returns_runtime_document(self, client, db):
        sid = _sample_screen(db)
        resp = client.get(f"/screen/{sid}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["screen"]["id"] == sid
        assert data["generatedAt"] == "1970-01-01T00:00:00.000Z"
        binding = data["widgets"][0]["bindings"][0]
        assert binding["datapoint"]["name"] == "T1"
        assert binding["value"] == pytest.approx(20 + 5 * math.sin(1))

    def test_non_numeric_id_is_400(self, client):
        resp = client.get("/screen/abc")
        assert resp.status_code == 400

    def test_unknown_id_is_404(self, client):
        assert client.get("/screen/77").status_code == 404

    @pytest.mark.parametrize("raw", ["99999999999999999999", "-9223372036854775809", "1_0"])
    def test_malformed_or_out_of_range_id_is_400(self, client, raw):
        resp = client.get(f"/screen/{raw}")
        assert resp.status_code == 400
        assert "detail" in resp.json()

    def test_largest_sqlite_id_is_404(self, client):
        assert client.get("/screen/9223372036854775807").status_code == 404

    def test_disabled_screen_is_404(self, client, db):
        sid = _sample_screen(db)
        resp = client.put(
            f"/config/screens/{sid}",
            json={"name": "Sala 1", "route": "/web/sala-1", "enabled": False},
        )
        assert resp.status_code == 200
        assert client.get(f"/screen/{sid}").status_code == 404


class TestScreenByRoute:
    def test_missing_route_is_400(self, client):
        assert client.get("/screen-by-route").status_code == 400

    def test_blank_route_is_400(self, client):
        assert client.get("/screen-by-route", params={"route": "   "}).status_code == 400

    def test_web_fallback(self, client, db):
        sid = _sample_screen(db)
        resp = client.get("/screen-by-route", params={"route": "sala-1"})
        assert resp.status_code == 200
        assert resp.json()["screen"]["id"] == sid

    def test_by_name(self, client, db):
        sid = _sample_screen(db)
        resp = client.get("/screen-by-route", params={"route": "sala 1"})
        assert resp.json()["screen"]["id"] == sid

    def test_unresolved_is_404(self, client, db):
        _sample_screen(db)
        assert client.get("/screen-by-route", params={"route": "nope"}).status_code == 404


# ---------------------------------------------------------------------------
# Project tree
# ---------------------------------------------------------------------------

class TestSystemObjects:
    def test_listing_includes_virtual_nodes(self, client, db):
        sid = _sample_screen(db)
        resp = client.get("/system-objects")
        assert resp.status_code == 200
        nodes = resp.json()
        assert [n["id"] for n in nodes] == [VIRTUAL_ID_OFFSET + sid]
        assert nodes[0]["type"] == "Graphic"

    def test_create_generic(self, client):
        resp = client.post(
            "/system-objects", json={"name": "Scripts", "type": "Folder"}
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "Scripts"
        assert data["properties"] == {}
        assert isinstance(data["id"], int)

    def test_create_graphic_returns_merged_properties(self, client):
        resp = client.post(
            "/system-objects",
            json={"name": "Sala Principal #1", "type": "Graphic", "properties": {"bg": "blue"}},
        )
        assert resp.status_code == 201
        props = resp.json()["properties"]
        assert props["route"] == "/sala-principal-1"
        assert props["bg"] == "blue"

        screens = client.get("/screens").json()
        assert [s["id"] for s in screens] == [props["screenId"]]
        assert client.get("/screen-by-route", params={"route": "sala-principal-1"}).status_code == 200

    def test_linking_object_removes_virtual_node(self, client, db):
        sid = _sample_screen(db)
        client.post(
            "/system-objects",
            json={"name": "Sala 1", "type": "Screen", "properties": {"screenId": sid}},
        )
        nodes = client.get("/system-objects").json()
        assert all(not n.get("virtual") for n in nodes)

    def test_failed_graphic_creation_is_500_and_leaves_nothing(self, client, db):
        resp = client.post(
            "/system-objects", json={"name": "Sala", "type": "Graphic", "parent_id": 4242}
        )
        assert resp.status_code == 500
        assert "detail" in resp.json()
        assert list_screens(db) == []
        assert client.get("/system-objects").json() == []

    def test_partial_update(self, client):
        created = client.post(
            "/system-objects",
            json={"name": "main", "type": "Script", "properties": {"code": "x"}},
        ).json()
        resp = client.put(f"/system-objects/{created['id']}", json={"name": "renamed"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "renamed"
        assert resp.json()["properties"] == {"code": "x"}

    def test_update_unknown_is_404(self, client):
        assert client.put("/system-objects/999", json={"name": "x"}).status_code == 404

    def test_update_bad_id_is_400(self, client):
        assert client.put("/system-objects/x", json={"name": "x"}).status_code == 400

    def test_delete(self, client):
        created = client.post("/system-objects", json={"name": "tmp", "type": "Folder"}).json()
        resp = client.delete(f"/system-objects/{created['id']}")
        assert resp.status_code == 204
        assert client.get("/system-objects").json() == []


class TestOverlappingRequests:
    def test_requests_wait_for_graphic_transaction(self, client, db, monkeypatch):
        other = create_screen(db, name="Other", route="/other")
        seen: dict = {}

        def overlapping() -> None:
            seen["nodes"] = client.get("/system-objects").json()
            seen["deleted"] = client.delete(f"/config/screens/{other.id}").status_code

        def failing_insert(*args, **kwargs):
            worker = threading.Thread(target=overlapping)
            worker.start()
            worker.join(timeout=0.5)
            seen["worker"] = worker
            seen["waited"] = worker.is_alive()
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr("dxascend.runtime.tree.insert_object", failing_insert)
        resp = client.post("/system-objects", json={"name": "Sala", "type": "Graphic"})
        seen["worker"].join(timeout=5)

        assert resp.status_code == 500
        assert seen["waited"] is True
        assert [n["name"] for n in seen["nodes"]] == ["Other"]
        assert seen["deleted"] == 204
        assert list_screens(db) == []
