"""FastAPI router for upload, download and clipboard delivery."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from capstur.api.routes_workspace import get_workspace, handle_workspace_exception
from capstur.core.errors import WorkspaceError
from capstur.core.logs import get_logger
from capstur.core.workspace import Workspace


_LOGGER = get_logger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])


class DestinationRequest(BaseModel):
    """New upload destination; may be blank while the user is typing."""

    url: str


class DownloadDirRequest(BaseModel):
    """Default folder for downloaded compositions."""

    directory: str


class DownloadRequest(BaseModel):
    """Optional one-off folder overriding the configured one."""

    directory: Optional[str] = None


@router.get("/destination")
async def read_destination(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Return the persisted upload settings."""

    return workspace.uploads.configuration.model_dump()


@router.put("/destination")
async def set_destination(payload: DestinationRequest, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Persist the upload URL."""

    return workspace.set_destination(payload.url).model_dump()


@router.put("/download-dir")
async def set_download_dir(payload: DownloadDirRequest, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Persist the default download folder."""

    try:
        config = workspace.set_download_dir(payload.directory)
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    return config.model_dump()


@router.get("/status")
async def upload_status(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Return the current upload attempt."""

    return workspace.uploads.attempt.model_dump()


@router.post("")
async def upload(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Upload the composed image; returns once the attempt resolves."""

    try:
        attempt = await workspace.upload()
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    if attempt is None:
        return {"status": "superseded"}
    return attempt.model_dump()


@router.post("/dismiss")
async def dismiss(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Return a finished attempt to idle."""

    return workspace.dismiss_upload().model_dump()


@router.post("/download")
async def download(payload: DownloadRequest, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Save the composed image as a PNG file."""

    try:
        path = workspace.download(payload.directory)
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    _LOGGER.info("Download served at %s", path)
    return {"path": str(path)}


@router.post("/clipboard")
async def copy_to_clipboard(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Copy the composed image to the system clipboard."""

    try:
        workspace.copy_to_clipboard()
    except WorkspaceError as exc:
        raise handle_workspace_exception(exc) from exc
    return {"status": "copied"}


__all__ = ["router"]
