"""Error taxonomy shared by the workspace controllers."""

from __future__ import annotations


class WorkspaceError(Exception):
    """Base exception for workspace failures surfaced to the user."""


class BackendError(WorkspaceError):
    """Raised when a backend gateway call fails."""


class ValidationError(WorkspaceError):
    """Raised when local preconditions are not met; never reaches the backend."""


class InvalidComposition(ValidationError):
    """Raised when a composition request is empty or uses an unknown layout."""


class InvalidReference(WorkspaceError):
    """Raised when an operation references an id missing from the collection."""

    def __init__(self, screenshot_id: str) -> None:
        super().__init__(f"Unknown screenshot: {screenshot_id}")
        self.screenshot_id = screenshot_id


class TransportError(WorkspaceError):
    """Raised when an upload fails at the network or HTTP level."""


class ClipboardUnavailable(WorkspaceError):
    """Raised when the platform refuses clipboard access."""


class ExportError(WorkspaceError):
    """Raised when the composed image cannot be written to disk."""


__all__ = [
    "WorkspaceError",
    "BackendError",
    "ValidationError",
    "InvalidComposition",
    "InvalidReference",
    "TransportError",
    "ClipboardUnavailable",
    "ExportError",
]
