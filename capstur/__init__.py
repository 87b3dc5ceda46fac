"""Core package for the Capstur screenshot workspace."""

from .core.workspace import Workspace
from .config import UploadConfigStore
from .gateway import BackendGateway, InMemoryGateway
from .upload.service import UploadLifecycleController

__all__ = [
    "Workspace",
    "UploadConfigStore",
    "BackendGateway",
    "InMemoryGateway",
    "UploadLifecycleController",
]
