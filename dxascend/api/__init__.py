"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from dxascend.api import app

    uvicorn dxascend.api:app --reload
"""

from dxascend.api.app import app

__all__ = ["app"]
