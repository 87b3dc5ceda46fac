"""Asynchronous boundary towards the native capture/compose backend."""

from __future__ import annotations

import abc
from typing import Callable, List, Optional, Sequence

from capstur.core.models import Layout, Screenshot


CaptureCallback = Callable[[Screenshot], None]


class BackendGateway(abc.ABC):
    """Request/response commands plus a push channel for capture events.

    Every command raises :class:`capstur.core.errors.BackendError` on failure.
    Completed captures are not returned by :meth:`start_region_capture`; they
    arrive later through the callback registered with :meth:`set_event_sink`.
    """

    def __init__(self) -> None:
        self._event_sink: Optional[CaptureCallback] = None

    @abc.abstractmethod
    async def list_screenshots(self) -> List[Screenshot]:
        """Return every screenshot currently held by the backend."""

    @abc.abstractmethod
    async def delete_screenshot(self, screenshot_id: str) -> None:
        """Delete ``screenshot_id``; unknown ids are rejected."""

    @abc.abstractmethod
    async def compose_screenshots(self, ordered_ids: Sequence[str], layout: Layout) -> str:
        """Compose the given screenshots and return the encoded result."""

    @abc.abstractmethod
    async def start_region_capture(self) -> None:
        """Ask the backend to start an interactive region capture."""

    def set_event_sink(self, callback: Optional[CaptureCallback]) -> None:
        """Register the callback receiving capture-completed events."""

        self._event_sink = callback

    def _emit_capture(self, screenshot: Screenshot) -> None:
        sink = self._event_sink
        if sink is not None:
            sink(screenshot)


__all__ = ["BackendGateway", "CaptureCallback"]
