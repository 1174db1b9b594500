"""The project tree as clients see it.

The persisted ``system_objects`` rows are one half of the picture; screens
created through the dedicated table have no tree node of their own.  The
listing closes that gap on every read by appending a *virtual* ``Graphic``
node for each enabled screen that no object links to (through
``properties.screenId`` / ``screen_id``).  Virtual nodes are never written
back; linking an object to the screen makes its virtual node disappear, and
deleting that object makes it come back.

Creating a ``Graphic`` object provisions its backing screen in the same
transaction.
"""

from __future__ import annotations

import logging
import re
import sqlite3
import unicodedata
from typing import Any, Optional

from dxascend.db.documents import coerce_id
from dxascend.db.models import Screen, SystemObject
from dxascend.db.screens import insert_screen, list_screens, route_taken
from dxascend.db.system_objects import (
    delete_object,
    get_object,
    insert_object,
    list_objects,
    update_object,
)
from dxascend.errors import InvalidParameter, StoreError

logger = logging.getLogger(__name__)

# Persisted object ids must stay below this; virtual ids are offset + screen id.
VIRTUAL_ID_OFFSET = 100000

GRAPHIC_TYPE = "Graphic"
DEFAULT_SLUG = "screen"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Turn a display name into a route: ``"Sala Principal #1"`` → ``/sala-principal-1``."""
    decomposed = unicodedata.normalize("NFKD", name or "")
    ascii_only = "".join(c for c in decomposed if not unicodedata.combining(c))
    slug = _NON_ALNUM.sub("-", ascii_only.lower()).strip("-")
    return "/" + (slug or DEFAULT_SLUG)


def unique_route(conn: sqlite3.Connection, name: str) -> str:
    """First of ``slug``, ``slug-2``, ``slug-3``, … no screen claims yet."""
    base = slugify(name)
    route = base
    suffix = 2
    while route_taken(conn, route):
        route = f"{base}-{suffix}"
        suffix += 1
    return route


def is_graphic(type_: Optional[str]) -> bool:
    return (type_ or "").strip().lower() == GRAPHIC_TYPE.lower()


def linked_screen_ids(objects: list[SystemObject]) -> set[int]:
    """Screen ids referenced by any object's ``screenId`` / ``screen_id``."""
    linked = set()
    for obj in objects:
        for key in ("screenId", "screen_id"):
            screen_id = coerce_id(obj.properties.get(key))
            if screen_id is not None:
                linked.add(screen_id)
    return linked


def graphics_container(objects: list[SystemObject]) -> Optional[SystemObject]:
    """Folder virtual screen nodes hang under, if the tree has one."""
    for obj in objects:
        if "graphic" in (obj.type or "").lower() or "graphic" in (obj.name or "").lower():
            return obj
    for obj in objects:
        if obj.parent_id is None:
            return obj
    return None


def virtual_screen_node(screen: Screen, parent_id: Optional[int]) -> dict[str, Any]:
    return {
        "id": VIRTUAL_ID_OFFSET + screen.id,
        "parent_id": parent_id,
        "name": screen.name,
        "type": GRAPHIC_TYPE,
        "description": screen.description or "",
        "properties": {"screenId": screen.id, "route": screen.route},
        "virtual": True,
    }


class ObjectTreeService:
    """Read and write the reconciled project tree."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_objects(self) -> list[dict[str, Any]]:
        """Persisted objects followed by virtual nodes for orphan screens."""
        objects = list_objects(self.conn)
        linked = linked_screen_ids(objects)
        container = graphics_container(objects)
        parent_id = container.id if container else None

        listing = [obj.to_dict() for obj in objects]
        for screen in list_screens(self.conn, enabled_only=True):
            if screen.id not in linked:
                listing.append(virtual_screen_node(screen, parent_id))
        return listing

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_object(
        self,
        name: str,
        type: str,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
        properties: Optional[dict[str, Any]] = None,
    ) -> SystemObject:
        """Insert an object; ``Graphic`` objects get a backing screen.

        Raises:
            InvalidParameter: If ``name`` or ``type`` is blank.
            StoreError: If the store rejects either insert.  For ``Graphic``
                objects neither the screen nor the object survives.
        """
        if not name or not type:
            raise InvalidParameter("name and type are required for a system object")

        properties = dict(properties or {})
        try:
            with self.conn:
                if is_graphic(type):
                    route = unique_route(self.conn, name)
                    screen_id = insert_screen(self.conn, name, route, description)
                    properties.update({"screenId": screen_id, "route": route})
                object_id = insert_object(
                    self.conn, parent_id, name, type, description, properties
                )
        except sqlite3.Error as exc:
            logger.warning("Creating %s object %r rolled back: %s", type, name, exc)
            raise StoreError(f"Error creating object: {exc}") from exc

        if is_graphic(type):
            logger.info("Provisioned screen %d at %s for %r", screen_id, route, name)
        return get_object(self.conn, object_id)  # type: ignore[return-value]

    def update_object(self, object_id: int, **fields: Any) -> SystemObject:
        """Partial update; see :func:`dxascend.db.system_objects.update_object`."""
        try:
            return update_object(self.conn, object_id, **fields)
        except sqlite3.Error as exc:
            raise StoreError(f"Error updating object: {exc}") from exc

    def delete_object(self, object_id: int) -> None:
        """Hard delete; a screen linked only through this object turns virtual again."""
        try:
            delete_object(self.conn, object_id)
        except sqlite3.Error as exc:
            raise StoreError(f"Error deleting object: {exc}") from exc
