"""
Web server for Tempest.

Provides the FastAPI application serving schedules and the program guide,
and runs the schedule refresher for the lifetime of the process.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .. import __version__
from ..bootstrap import Services, build_services
from ..infra.exceptions import InvalidInputError, NotFoundError
from .api import schedule_router

logger = logging.getLogger(__name__)


def create_app(services: Services | None = None, start_refresher: bool = True) -> FastAPI:
    """Build the application.

    When ``services`` is None they are built from settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services()
            logger.info("Tempest services built from settings")
        refresher = app.state.services.refresher
        if start_refresher:
            refresher.start()
        try:
            yield
        finally:
            if start_refresher:
                refresher.stop()

    app = FastAPI(title="Tempest Channel Scheduler", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.include_router(schedule_router)

    @app.exception_handler(InvalidInputError)
    async def invalid_input(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"success": False, "error": str(exc)})

    @app.middleware("http")
    async def no_cache_headers(request: Request, call_next):
        resp: Response = await call_next(request)
        # Schedules move every minute; never let a proxy hold on to them
        if request.url.path.startswith("/api/"):
            resp.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        return resp

    @app.get("/api/channels")
    async def list_channels(request: Request):
        channels = request.app.state.services.epg.list_channels()
        return {"success": True, "data": [c.to_dict() for c in channels]}

    @app.get("/")
    async def root():
        return {"service": "tempest", "version": __version__}

    return app


def run_server(host: str = "0.0.0.0", port: int = 8000, services: Services | None = None) -> None:
    app = create_app(services)
    uvicorn.run(app, host=host, port=port)
