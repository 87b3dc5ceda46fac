"""In-process gateway that keeps screenshots in a dictionary."""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional, Sequence

from capstur.core.errors import BackendError
from capstur.core.logs import get_logger
from capstur.core.models import Layout, Screenshot
from capstur.gateway.base import BackendGateway


_LOGGER = get_logger(__name__)

Compositor = Callable[[List[Screenshot], Layout], str]


class InMemoryGateway(BackendGateway):
    """Backend stand-in for development servers and tests.

    Pixel work stays outside this package: composition is delegated to the
    ``compositor`` callable and fails when none is configured.
    """

    def __init__(self, compositor: Optional[Compositor] = None) -> None:
        super().__init__()
        self._screenshots: Dict[str, Screenshot] = {}
        self._compositor = compositor
        self._lock = asyncio.Lock()
        self.capture_requests = 0

    async def list_screenshots(self) -> List[Screenshot]:
        async with self._lock:
            result = list(self._screenshots.values())
        _LOGGER.debug("list_screenshots returning %d items", len(result))
        return result

    async def delete_screenshot(self, screenshot_id: str) -> None:
        async with self._lock:
            if screenshot_id not in self._screenshots:
                raise BackendError(f"Screenshot not found: {screenshot_id}")
            del self._screenshots[screenshot_id]
        _LOGGER.info("Deleted screenshot %s", screenshot_id)

    async def compose_screenshots(self, ordered_ids: Sequence[str], layout: Layout) -> str:
        async with self._lock:
            images = [self._screenshots[i] for i in ordered_ids if i in self._screenshots]
            available = sorted(self._screenshots)
        if not images:
            raise BackendError(
                f"No screenshots found for composition. Selected IDs: {list(ordered_ids)}, "
                f"Available IDs: {available}"
            )
        if self._compositor is None:
            raise BackendError("No compositor configured")

        _LOGGER.info("Composing %d images with layout %s", len(images), layout.value)
        try:
            return self._compositor(images, layout)
        except Exception as exc:
            raise BackendError(f"Image composition failed: {exc}") from exc

    async def start_region_capture(self) -> None:
        self.capture_requests += 1
        _LOGGER.info("Region capture requested (%d so far)", self.capture_requests)

    def add_capture(self, screenshot: Screenshot) -> None:
        """Store ``screenshot`` and announce it as a completed capture."""

        self._screenshots[screenshot.id] = screenshot
        _LOGGER.info("Stored screenshot with ID %s", screenshot.id)
        self._emit_capture(screenshot)


__all__ = ["InMemoryGateway", "Compositor"]
