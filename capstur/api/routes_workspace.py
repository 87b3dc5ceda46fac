"""FastAPI router exposing collection, ordering and composition operations."""

from __future__ import annotations

import asyncio
import threading

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field
from starlette.websockets import WebSocket, WebSocketDisconnect

from capstur.core.errors import (
    BackendError,
    ClipboardUnavailable,
    ExportError,
    InvalidReference,
    TransportError,
    ValidationError,
    WorkspaceError,
)
from capstur.core.logs import get_logger
from capstur.core.models import Layout
from capstur.core.workspace import Workspace


_LOGGER = get_logger(__name__)


class WorkspaceEventManager:
    """Fan-out of workspace events towards websocket clients."""

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._subscribers: set[asyncio.Queue] = set()
        self._lock = threading.RLock()

    def set_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Store the asyncio loop used for thread-safe callbacks."""

        self._loop = loop

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        with self._lock:
            self._subscribers.discard(queue)

    def publish(self, event: dict) -> None:
        """Forward ``event`` into all subscriber queues."""

        loop = self._loop
        if loop is None:
            return
        with self._lock:
            subscribers = list(self._subscribers)
        for queue in subscribers:
            loop.call_soon_threadsafe(queue.put_nowait, event)


router = APIRouter(prefix="/workspace", tags=["workspace"])
events_router = APIRouter(tags=["events"])


class MoveRequest(BaseModel):
    """Drag-and-drop reorder request."""

    from_index: int
    to_index: int


class ComposeRequest(BaseModel):
    """Layout chosen for the composition."""

    layout: str = Field(default=Layout.HORIZONTAL.value)


def get_workspace(request: Request) -> Workspace:
    """Resolve the shared Workspace from the FastAPI app state."""

    return request.app.state.workspace


def handle_workspace_exception(exc: WorkspaceError) -> HTTPException:
    """Convert workspace errors into HTTP exceptions."""

    if isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, InvalidReference):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (BackendError, TransportError)):
        code = status.HTTP_502_BAD_GATEWAY
    elif isinstance(exc, ClipboardUnavailable):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, ExportError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


@router.get("")
async def read_workspace(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Return the workspace summary without image payloads."""

    return workspace.describe()


@router.get("/screenshots/{screenshot_id}")
async def read_screenshot(screenshot_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Return a single screenshot including its image data."""

    for shot in workspace.snapshot().screenshots:
        if shot.id == screenshot_id:
            return shot.model_dump()
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown screenshot: {screenshot_id}")


@router.post("/refresh")
async def refresh(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Reload the collection from the backend."""

    try:
        await workspace.refresh()
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    return workspace.describe()


@router.post("/capture", status_code=status.HTTP_202_ACCEPTED)
async def start_capture(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Start a region capture; completion is announced on the websocket."""

    try:
        await workspace.start_capture()
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    return {"status": "capturing"}


@router.delete("/screenshots/{screenshot_id}")
async def delete_screenshot(screenshot_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Delete a screenshot and return the refreshed workspace."""

    try:
        await workspace.delete(screenshot_id)
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    return workspace.describe()


@router.post("/selection/{screenshot_id}/toggle")
async def toggle_selection(screenshot_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Flip the selection of one screenshot."""

    try:
        selected = workspace.toggle_selection(screenshot_id)
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    return {"id": screenshot_id, "selected": selected}


@router.post("/selection/all")
async def select_all(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Select every screenshot."""

    return {"selected_ids": sorted(workspace.select_all())}


@router.delete("/selection")
async def clear_selection(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Deselect every screenshot."""

    workspace.clear_selection()
    return {"selected_ids": []}


@router.post("/order/move")
async def move(payload: MoveRequest, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Apply a drag-and-drop reorder to the display order."""

    moved = workspace.move(payload.from_index, payload.to_index)
    return {"moved": moved, "display_order": workspace.ordering.sequence}


@router.post("/compose")
async def compose(payload: ComposeRequest, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Compose the selection in display order."""

    try:
        image = await workspace.compose(payload.layout)
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    return image.model_dump(mode="json")


@router.delete("/composition")
async def clear_composition(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Discard the held composition."""

    workspace.clear_composition()
    return {"status": "cleared"}


@events_router.websocket("/ws/workspace")
async def workspace_events(websocket: WebSocket) -> None:
    """Stream workspace, upload and notice events over a websocket."""

    await websocket.accept()
    manager: WorkspaceEventManager = websocket.app.state.workspace_events
    workspace: Workspace = websocket.app.state.workspace
    queue = manager.subscribe()

    async def _forward() -> None:
        while True:
            event = await queue.get()
            await websocket.send_json(event)

    forwarder: asyncio.Task | None = None
    try:
        await websocket.send_json({"type": "workspace", "data": workspace.describe()})
        forwarder = asyncio.create_task(_forward())
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        _LOGGER.debug("Workspace websocket disconnected")
    finally:
        if forwarder is not None:
            forwarder.cancel()
        manager.unsubscribe(queue)


__all__ = [
    "router",
    "events_router",
    "WorkspaceEventManager",
    "get_workspace",
    "handle_workspace_exception",
]
