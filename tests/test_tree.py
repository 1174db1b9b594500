"""Tests for the reconciled project tree and atomic Graphic creation."""

from __future__ import annotations

import sqlite3

import pytest

from dxascend.db import get_connection, init_db
from dxascend.db.screens import create_screen, list_screens
from dxascend.db.system_objects import get_object, list_objects
from dxascend.errors import InvalidParameter, NotFound, StoreError
from dxascend.runtime.tree import (
    VIRTUAL_ID_OFFSET,
    ObjectTreeService,
    slugify,
    unique_route,
)


@pytest.fixture
def conn():
    connection = get_connection(":memory:")
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture
def tree(conn) -> ObjectTreeService:
    return ObjectTreeService(conn)


def _virtual(listing):
    return [o for o in listing if o.get("virtual")]


# ---------------------------------------------------------------------------
# Slugs
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "name, slug",
    [
        ("Sala Principal #1", "/sala-principal-1"),
        ("Estación Térmica", "/estacion-termica"),
        ("  --Ñandú__Área--  ", "/nandu-area"),
        ("###", "/screen"),
        ("", "/screen"),
    ],
)
def test_slugify(name, slug):
    assert slugify(name) == slug


def test_unique_route_appends_counter(conn):
    assert unique_route(conn, "Sala Principal #1") == "/sala-principal-1"
    create_screen(conn, name="a", route="/sala-principal-1")
    create_screen(conn, name="b", route="/sala-principal-1-2", enabled=False)
    assert unique_route(conn, "Sala Principal #1") == "/sala-principal-1-3"


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class TestListing:
    def test_empty(self, tree):
        assert tree.list_objects() == []

    def test_orphan_screen_gets_virtual_node(self, conn, tree):
        screen = create_screen(conn, name="Sala", route="/sala", description="d")
        nodes = _virtual(tree.list_objects())
        assert nodes == [
            {
                "id": VIRTUAL_ID_OFFSET + screen.id,
                "parent_id": None,
                "name": "Sala",
                "type": "Graphic",
                "description": "d",
                "properties": {"screenId": screen.id, "route": "/sala"},
                "virtual": True,
            }
        ]

    def test_disabled_screen_has_no_virtual_node(self, conn, tree):
        create_screen(conn, name="Off", route="/off", enabled=False)
        assert tree.list_objects() == []

    def test_virtual_nodes_follow_real_ones(self, conn, tree):
        tree.create_object(name="Scripts", type="Folder")
        tree.create_object(name="main", type="Script")
        create_screen(conn, name="Sala", route="/sala")
        listing = tree.list_objects()
        assert [o["type"] for o in listing] == ["Script", "Folder", "Graphic"]
        assert listing[-1].get("virtual") is True
        assert "virtual" not in listing[0]

    def test_linking_object_hides_virtual_node(self, conn, tree):
        screen = create_screen(conn, name="Sala", route="/sala")
        assert len(_virtual(tree.list_objects())) == 1
        tree.create_object(name="Sala", type="Screen", properties={"screen_id": str(screen.id)})
        assert _virtual(tree.list_objects()) == []

    def test_deleting_link_restores_virtual_node(self, conn, tree):
        screen = create_screen(conn, name="Sala", route="/sala")
        link = tree.create_object(name="Sala", type="Screen", properties={"screenId": screen.id})
        tree.delete_object(link.id)
        assert [o["id"] for o in _virtual(tree.list_objects())] == [VIRTUAL_ID_OFFSET + screen.id]

    def test_graphics_folder_is_parent(self, conn, tree):
        tree.create_object(name="Project", type="Folder")
        graphics = tree.create_object(name="Graphics", type="Folder")
        create_screen(conn, name="Sala", route="/sala")
        assert _virtual(tree.list_objects())[0]["parent_id"] == graphics.id

    def test_first_top_level_object_is_fallback_parent(self, conn, tree):
        root = tree.create_object(name="Project", type="Folder")
        tree.create_object(name="Nested", type="Script", parent_id=root.id)
        create_screen(conn, name="Sala", route="/sala")
        assert _virtual(tree.list_objects())[0]["parent_id"] == root.id

    def test_properties_are_parsed(self, conn, tree):
        with conn:
            conn.execute(
                "INSERT INTO system_objects (name, type, properties) VALUES ('x', 'Folder', '{\"a\": 1}')"
            )
            conn.execute(
                "INSERT INTO system_objects (name, type, properties) VALUES ('y', 'Folder', 'garbage')"
            )
        props = {o["name"]: o["properties"] for o in tree.list_objects()}
        assert props == {"x": {"a": 1}, "y": {}}


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

class TestCreate:
    def test_generic_object(self, conn, tree):
        obj = tree.create_object(name="Pumps", type="Folder", description="all pumps")
        assert obj.properties == {}
        assert obj.description == "all pumps"
        assert list_screens(conn) == []

    def test_blank_name_rejected(self, tree):
        with pytest.raises(InvalidParameter):
            tree.create_object(name="", type="Folder")

    def test_graphic_provisions_screen(self, conn, tree):
        obj = tree.create_object(name="Sala Principal #1", type="Graphic", properties={"bg": "#000"})
        screens = list_screens(conn)
        assert len(screens) == 1
        assert screens[0].route == "/sala-principal-1"
        assert screens[0].name == "Sala Principal #1"
        assert obj.properties == {
            "bg": "#000",
            "screenId": screens[0].id,
            "route": "/sala-principal-1",
        }
        assert _virtual(tree.list_objects()) == []

    def test_second_graphic_with_same_name_gets_suffix(self, conn, tree):
        tree.create_object(name="Sala Principal #1", type="Graphic")
        second = tree.create_object(name="Sala Principal #1", type="graphic")
        assert second.properties["route"] == "/sala-principal-1-2"
        assert len(list_screens(conn)) == 2

    def test_object_failure_rolls_back_screen(self, conn, tree):
        with pytest.raises(StoreError):
            tree.create_object(name="Sala", type="Graphic", parent_id=9999)
        assert list_screens(conn) == []
        assert list_objects(conn) == []

    def test_forced_insert_failure_rolls_back(self, conn, tree, monkeypatch):
        def boom(*args, **kwargs):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr("dxascend.runtime.tree.insert_object", boom)
        with pytest.raises(StoreError):
            tree.create_object(name="Sala", type="Graphic")
        assert list_screens(conn) == []
        assert list_objects(conn) == []

    def test_screen_failure_leaves_nothing(self, conn, tree, monkeypatch):
        def boom(*args, **kwargs):
            raise sqlite3.IntegrityError("UNIQUE constraint failed: screens.route")

        monkeypatch.setattr("dxascend.runtime.tree.insert_screen", boom)
        with pytest.raises(StoreError):
            tree.create_object(name="Sala", type="Graphic")
        assert list_screens(conn) == []
        assert list_objects(conn) == []


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

class TestUpdateDelete:
    def test_partial_update(self, tree):
        obj = tree.create_object(name="Old", type="Script", properties={"code": "pass"})
        updated = tree.update_object(obj.id, name="New")
        assert updated.name == "New"
        assert updated.properties == {"code": "pass"}

    def test_move_to_root(self, tree):
        parent = tree.create_object(name="P", type="Folder")
        child = tree.create_object(name="C", type="Script", parent_id=parent.id)
        assert tree.update_object(child.id, parent_id=None).parent_id is None

    def test_update_unknown(self, tree):
        with pytest.raises(NotFound):
            tree.update_object(12345, name="x")

    def test_delete_does_not_touch_screens(self, conn, tree):
        obj = tree.create_object(name="Sala", type="Graphic")
        tree.delete_object(obj.id)
        assert get_object(conn, obj.id) is None
        screens = list_screens(conn)
        assert len(screens) == 1
        assert [o["name"] for o in _virtual(tree.list_objects())] == ["Sala"]
