"""Runtime composition: route resolution, value simulation, tree reconciliation.

Public re-exports::

    from dxascend.runtime import RouteResolver, RuntimeComposer, ObjectTreeService
"""

from dxascend.runtime.composer import RuntimeComposer, list_runtime_screens
from dxascend.runtime.resolver import RouteResolver, route_candidates
from dxascend.runtime.tree import ObjectTreeService

__all__ = [
    "ObjectTreeService",
    "RouteResolver",
    "RuntimeComposer",
    "list_runtime_screens",
    "route_candidates",
]
