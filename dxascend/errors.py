"""Exception types shared by the runtime services and the HTTP layer.

The API app factory maps each class to a status code:

    InvalidParameter  → 400
    NotFound          → 404
    StoreError        → 500
"""

from __future__ import annotations


class DxAscendError(Exception):
    """Base class for errors raised by the DX-Ascend services."""

    status_code = 500


class InvalidParameter(DxAscendError):
    """A required identifying parameter is missing or malformed."""

    status_code = 400


class NotFound(DxAscendError):
    """An id or route does not resolve to an enabled entity."""

    status_code = 404


class StoreError(DxAscendError):
    """The underlying SQLite store rejected an operation."""

    status_code = 500
