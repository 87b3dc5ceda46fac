"""Workspace state, controllers and the facade tying them together."""

from .collection import ScreenshotCollectionStore
from .composition import CompositionRequestBuilder
from .errors import (
    BackendError,
    ClipboardUnavailable,
    ExportError,
    InvalidComposition,
    InvalidReference,
    TransportError,
    ValidationError,
    WorkspaceError,
)
from .models import (
    CaptureRegion,
    ComposedImage,
    CompositionRequest,
    Layout,
    Screenshot,
    UploadAttempt,
    UploadConfiguration,
    WorkspaceState,
)
from .ordering import OrderingController
from .state import WorkspaceStateStore
from .workspace import Notice, Workspace

__all__ = [
    "ScreenshotCollectionStore",
    "CompositionRequestBuilder",
    "OrderingController",
    "WorkspaceStateStore",
    "Workspace",
    "Notice",
    "BackendError",
    "ClipboardUnavailable",
    "ExportError",
    "InvalidComposition",
    "InvalidReference",
    "TransportError",
    "ValidationError",
    "WorkspaceError",
    "CaptureRegion",
    "ComposedImage",
    "CompositionRequest",
    "Layout",
    "Screenshot",
    "UploadAttempt",
    "UploadConfiguration",
    "WorkspaceState",
]
