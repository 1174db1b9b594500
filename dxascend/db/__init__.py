"""Database layer package.

Public re-exports so callers can write::

    from dxascend.db import get_connection, init_db
    from dxascend.db import screens
"""

from dxascend.db.connection import get_connection
from dxascend.db.migrations import init_db
from dxascend.db import screens, system_objects

__all__ = ["get_connection", "init_db", "screens", "system_objects"]
