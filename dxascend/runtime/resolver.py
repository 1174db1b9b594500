"""Route → screen resolution.

Screens are registered in two places: the dedicated ``screens`` table and,
indirectly, the generic ``system_objects`` tree.  A route token typed by a
user (``sala-1``, ``/sala-1``, ``/web/sala-1``, or a screen's display name)
is matched against the table first and the tree last.

Resolution order:

1. Each route candidate, in priority order, against enabled ``screens.route``.
2. Case-insensitive exact match on ``screens.name``.
3. A scan of ``system_objects`` for an object naming or routing to the token,
   followed through its ``screenId`` / route / name to a screen.

The first hit wins; there is no scoring.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable, Optional

from dxascend.db.documents import coerce_id
from dxascend.db.models import Screen, SystemObject
from dxascend.db.screens import find_screen_by_name, find_screen_by_route, get_screen
from dxascend.db.system_objects import list_objects_by_id
from dxascend.errors import InvalidParameter

logger = logging.getLogger(__name__)

WEB_PREFIX = "/web/"

ROUTE_KEYS = ("route", "screenRoute", "screen_route")
SCREEN_ID_KEYS = ("screenId", "screen_id")


def route_candidates(token: str) -> list[str]:
    """Expand a route token into its ordered, de-duplicated candidates.

    >>> route_candidates("sala-1")
    ['sala-1', '/sala-1', '/web/sala-1']
    >>> route_candidates("/web/sala-1")
    ['/web/sala-1', 'web/sala-1']
    """
    bare = token.lstrip("/")
    ordered = [token, bare]
    if not token.startswith("/"):
        ordered.append("/" + token)
    if not token.lower().startswith(WEB_PREFIX):
        ordered.append(WEB_PREFIX + bare)
    return list(dict.fromkeys(ordered))


def _first_property(properties: dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = properties.get(key)
        if value not in (None, ""):
            return value
    return None


def _declared_routes(obj: SystemObject) -> list[str]:
    routes = []
    for key in ROUTE_KEYS:
        value = obj.properties.get(key)
        if isinstance(value, str) and value.strip():
            routes.append(value.strip())
    return routes


class RouteResolver:
    """Resolve user-supplied route or name tokens to enabled screens."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def resolve(self, token: Optional[str]) -> Optional[Screen]:
        """Return the screen ``token`` designates, or ``None``.

        Raises:
            InvalidParameter: If ``token`` is missing or blank.
        """
        normalized = (token or "").strip()
        if not normalized:
            raise InvalidParameter("missing parameter: route")

        candidates = route_candidates(normalized)

        for candidate in candidates:
            screen = find_screen_by_route(self.conn, candidate)
            if screen is not None:
                logger.debug("Route %r matched screen %d via %r", normalized, screen.id, candidate)
                return screen

        screen = find_screen_by_name(self.conn, normalized)
        if screen is not None:
            logger.debug("Route %r matched screen %d by name", normalized, screen.id)
            return screen

        return self._resolve_from_tree(normalized, candidates)

    # ------------------------------------------------------------------
    # Tree fallback
    # ------------------------------------------------------------------

    def _resolve_from_tree(self, token: str, candidates: list[str]) -> Optional[Screen]:
        wanted = set(candidates)
        wanted_bare = {c.lstrip("/") for c in candidates}
        lowered = token.lower()

        for obj in list_objects_by_id(self.conn):
            if not self._object_matches(obj, lowered, wanted, wanted_bare):
                continue
            screen = self._screen_for_object(obj)
            if screen is not None:
                logger.debug(
                    "Route %r matched screen %d through system object %d",
                    token, screen.id, obj.id,
                )
                return screen
        return None

    @staticmethod
    def _object_matches(
        obj: SystemObject,
        lowered: str,
        wanted: set[str],
        wanted_bare: set[str],
    ) -> bool:
        if (obj.name or "").lower() == lowered:
            return True
        for route in _declared_routes(obj):
            expanded = route_candidates(route)
            if wanted.intersection(expanded):
                return True
            if wanted_bare.intersection(r.lstrip("/") for r in expanded):
                return True
        return False

    def _screen_for_object(self, obj: SystemObject) -> Optional[Screen]:
        screen_id = coerce_id(_first_property(obj.properties, SCREEN_ID_KEYS))
        if screen_id is not None:
            screen = get_screen(self.conn, screen_id, enabled_only=True)
            if screen is not None:
                return screen

        routes = _declared_routes(obj)
        if routes:
            screen = find_screen_by_route(self.conn, routes[0])
            if screen is not None:
                return screen

        if obj.name:
            return find_screen_by_name(self.conn, obj.name)
        return None
