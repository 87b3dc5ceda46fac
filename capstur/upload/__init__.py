"""Delivery of composed images: HTTP upload, download and clipboard."""

from .clipboard import ClipboardBackend, QtClipboard
from .service import SOURCE_IDENTIFIER, UploadLifecycleController

__all__ = ["ClipboardBackend", "QtClipboard", "SOURCE_IDENTIFIER", "UploadLifecycleController"]
