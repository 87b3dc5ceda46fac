"""System clipboard access for composed images."""

from __future__ import annotations

from typing import Protocol

from capstur.core.errors import ClipboardUnavailable
from capstur.core.logs import get_logger


_LOGGER = get_logger(__name__)


class ClipboardBackend(Protocol):
    """Anything able to place encoded image bytes on a clipboard."""

    def write_image(self, data: bytes, mime_type: str) -> None:
        ...


class QtClipboard:
    """Clipboard backed by the running Qt application.

    Qt only grants clipboard access to a live ``QGuiApplication``; without
    one (or without PySide6 installed) the clipboard is reported unavailable.
    """

    def write_image(self, data: bytes, mime_type: str) -> None:
        try:
            from PySide6.QtGui import QGuiApplication, QImage
        except ImportError as exc:
            raise ClipboardUnavailable("Clipboard support requires PySide6") from exc

        if QGuiApplication.instance() is None:
            raise ClipboardUnavailable("No running Qt application owns the clipboard")

        clipboard = QGuiApplication.clipboard()
        if clipboard is None:
            raise ClipboardUnavailable("Clipboard not available")

        image = QImage.fromData(data)
        if image.isNull():
            raise ClipboardUnavailable(f"Clipboard rejected {mime_type} payload")
        clipboard.setImage(image)
        _LOGGER.info("Image copied to clipboard (%d bytes)", len(data))


__all__ = ["ClipboardBackend", "QtClipboard"]
