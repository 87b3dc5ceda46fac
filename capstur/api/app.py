"""FastAPI application factory wiring routes and the shared workspace.

Serve with ``uvicorn --factory capstur.api.app:create_app``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from capstur.api.routes_upload import router as upload_router
from capstur.api.routes_workspace import (
    WorkspaceEventManager,
    events_router,
    router as workspace_router,
)
from capstur.config import UploadConfigStore
from capstur.core.logs import get_logger
from capstur.core.workspace import Workspace
from capstur.gateway.base import BackendGateway
from capstur.gateway.memory import InMemoryGateway


_LOGGER = get_logger(__name__)


def create_app(
    gateway: Optional[BackendGateway] = None,
    config_path: Optional[Path] = None,
    **workspace_options: Any,
) -> FastAPI:
    """Construct the FastAPI application around one :class:`Workspace`."""

    app = FastAPI(title="Capstur API", version="0.1")

    workspace = Workspace(
        gateway or InMemoryGateway(),
        UploadConfigStore(config_path),
        **workspace_options,
    )
    workspace_events = WorkspaceEventManager()
    workspace.set_event_sink(workspace_events.publish)

    app.state.workspace = workspace
    app.state.workspace_events = workspace_events

    allowed_origins: List[str] = [
        "http://localhost",
        "http://127.0.0.1",
        "http://localhost:1420",
        "http://127.0.0.1:1420",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "tauri://localhost",
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        """Capture the running loop for event fan-out and capture refreshes."""

        loop = asyncio.get_running_loop()
        workspace_events.set_loop(loop)
        workspace.attach_loop(loop)
        _LOGGER.info("Capstur API ready")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await workspace.close()
        _LOGGER.info("Capstur API shutting down")

    app.include_router(workspace_router)
    app.include_router(upload_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health() -> dict:
        """Simple health check endpoint."""

        return {"status": "ok"}

    return app


__all__ = ["create_app"]
