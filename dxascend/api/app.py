"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests via ``request.app.state.db``) and initialises the schema.  On
shutdown it closes the connection cleanly.  Requests take
``app.state.db_lock`` for their whole duration, so no request observes
another one's uncommitted writes.

Routers
-------
    /                  runtime surface (screens, screen/{id}, screen-by-route)
    /system-objects    reconciled project tree
    /config            screens / widgets / bindings / modbus definitions
    /health            liveness probe
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from dxascend.config import settings
from dxascend.db import get_connection, init_db
from dxascend.errors import DxAscendError

from dxascend.api.routers import bindings as bindings_router
from dxascend.api.routers import health as health_router
from dxascend.api.routers import modbus as modbus_router
from dxascend.api.routers import runtime as runtime_router
from dxascend.api.routers import screens as screens_router
from dxascend.api.routers import system_objects as system_objects_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB on startup and close it on shutdown."""
    conn = get_connection()
    init_db(conn)
    app.state.db = conn
    logger.info("Database ready at %s", settings.db_path)
    try:
        yield
    finally:
        conn.close()


async def _service_error(request: Request, exc: DxAscendError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


async def _serialize_store_access(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Run one request at a time against the shared connection.

    Sync endpoints execute on the threadpool, so the lock spans the whole
    endpoint call.  Waiters park on the event loop, not on a worker thread.
    """
    async with request.app.state.db_lock:
        return await call_next(request)


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="DX-Ascend API",
        description=(
            "Configuration and runtime interface for DX-Ascend visualization "
            "projects: screen runtime documents with simulated live values, "
            "route resolution, the reconciled project tree, and CRUD for "
            "screens, widgets, bindings and field-bus definitions."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.db_lock = asyncio.Lock()
    app.middleware("http")(_serialize_store_access)
    app.add_exception_handler(DxAscendError, _service_error)  # type: ignore[arg-type]

    app.include_router(runtime_router.router, tags=["runtime"])
    app.include_router(
        system_objects_router.router, prefix="/system-objects", tags=["system-objects"]
    )
    app.include_router(screens_router.router, prefix="/config", tags=["screens"])
    app.include_router(bindings_router.router, prefix="/config/bindings", tags=["bindings"])
    app.include_router(modbus_router.router, prefix="/config/modbus", tags=["modbus"])
    app.include_router(health_router.router, prefix="/health", tags=["health"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn dxascend.api.app:app --reload
app = create_app()
