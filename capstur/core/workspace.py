"""Workspace facade wiring collection, ordering, composition and upload."""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Deque, Dict, Iterator, List, Literal, Optional, Set, Union

from pydantic import BaseModel, Field

from capstur.config import UploadConfigStore
from capstur.core.collection import ScreenshotCollectionStore
from capstur.core.composition import CompositionRequestBuilder
from capstur.core.errors import InvalidReference, WorkspaceError
from capstur.core.logs import get_logger
from capstur.core.models import (
    ComposedImage,
    Layout,
    Screenshot,
    UploadAttempt,
    UploadConfiguration,
    WorkspaceState,
)
from capstur.core.ordering import OrderingController
from capstur.core.state import WorkspaceStateStore
from capstur.gateway.base import BackendGateway
from capstur.upload.clipboard import ClipboardBackend
from capstur.upload.service import UploadLifecycleController


_LOGGER = get_logger(__name__)

_EVENT_CALLBACK = Callable[[Dict[str, object]], None]


class Notice(BaseModel):
    """User-visible outcome of a failed operation."""

    level: Literal["warning", "error"]
    operation: str
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Workspace:
    """Coordinate the workspace controllers behind one operation surface.

    Every operation converts :class:`WorkspaceError` into a :class:`Notice`
    (kept in :attr:`notices` and published to the event sink) before
    re-raising it, so callers and passive observers both learn about it.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        config: UploadConfigStore,
        *,
        state: Optional[WorkspaceStateStore] = None,
        clipboard: Optional[ClipboardBackend] = None,
        **upload_options: Any,
    ) -> None:
        self._gateway = gateway
        self._state = state or WorkspaceStateStore()
        self.collection = ScreenshotCollectionStore(gateway, self._state)
        self.ordering = OrderingController(self._state)
        self.collection.add_listener(self.ordering.sync)
        self.composition = CompositionRequestBuilder(gateway, self._state, self.ordering)
        self.uploads = UploadLifecycleController(
            self._state,
            config,
            on_complete=self._finish_workflow,
            clipboard=clipboard,
            **upload_options,
        )
        self.uploads.set_event_sink(self._publish)
        gateway.set_event_sink(self._on_capture)

        self.notices: Deque[Notice] = deque(maxlen=50)
        self._event_sink: Optional[_EVENT_CALLBACK] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def set_event_sink(self, callback: Optional[_EVENT_CALLBACK]) -> None:
        """Register a callback for workspace, upload and notice events."""

        self._event_sink = callback

    def attach_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Loop used to schedule refreshes for captures reported from other threads."""

        self._loop = loop

    def snapshot(self) -> WorkspaceState:
        """Return a copy of the full workspace state."""

        return self._state.read()

    def describe(self) -> Dict[str, object]:
        """Return a JSON-friendly summary without image payloads."""

        state = self._state.read()
        return {
            "screenshots": [
                shot.model_dump(exclude={"image_data"}) for shot in state.screenshots
            ],
            "selected_ids": sorted(state.selected_ids),
            "display_order": list(state.display_order),
            "has_composition": state.composed_image is not None,
            "upload": state.upload.model_dump(),
        }

    @property
    def last_notice(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    async def refresh(self) -> List[Screenshot]:
        with self._operation("refresh"):
            return await self.collection.refresh()

    async def delete(self, screenshot_id: str) -> None:
        with self._operation("delete"):
            await self.collection.delete(screenshot_id)

    async def start_capture(self) -> None:
        """Ask the backend for a region capture; the result arrives as an event."""

        with self._operation("capture"):
            await self._gateway.start_region_capture()

    # ------------------------------------------------------------------
    # Ordering and selection
    # ------------------------------------------------------------------
    def move(self, from_index: int, to_index: int) -> bool:
        with self._operation("move"):
            return self.ordering.move(from_index, to_index)

    def toggle_selection(self, screenshot_id: str) -> bool:
        with self._operation("toggle_selection"):
            return self.composition.toggle_selection(screenshot_id)

    def select_all(self) -> Set[str]:
        with self._operation("select_all"):
            return self.composition.select_all()

    def clear_selection(self) -> None:
        with self._operation("clear_selection"):
            self.composition.clear_selection()

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------
    async def compose(self, layout: Union[Layout, str]) -> ComposedImage:
        with self._operation("compose"):
            return await self.composition.compose(layout)

    def clear_composition(self) -> None:
        with self._operation("clear_composition"):
            self.composition.clear_composition()

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------
    def set_destination(self, url: str) -> UploadConfiguration:
        with self._operation("set_destination"):
            return self.uploads.set_destination(url)

    def set_download_dir(self, directory: str) -> UploadConfiguration:
        with self._operation("set_download_dir"):
            return self.uploads.set_download_dir(directory)

    async def upload(self) -> Optional[UploadAttempt]:
        with self._operation("upload"):
            return await self.uploads.upload(self._state.read().composed_image)

    def dismiss_upload(self) -> UploadAttempt:
        with self._operation("dismiss_upload"):
            return self.uploads.dismiss()

    def download(self, directory: Optional[Path] = None) -> Path:
        with self._operation("download"):
            return self.uploads.download(self._state.read().composed_image, directory)

    def copy_to_clipboard(self) -> None:
        with self._operation("copy_to_clipboard"):
            self.uploads.copy_to_clipboard(self._state.read().composed_image)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def wait_idle(self) -> None:
        """Wait for capture-triggered refreshes scheduled so far."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self._gateway.set_event_sink(None)
        await self.wait_idle()
        await self.uploads.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        try:
            yield
        except InvalidReference as exc:
            self._notify("warning", name, str(exc))
            raise
        except WorkspaceError as exc:
            self._notify("error", name, str(exc))
            raise
        self._publish({"type": "workspace", "data": self.describe()})

    def _notify(self, level: Literal["warning", "error"], operation: str, message: str) -> None:
        notice = Notice(level=level, operation=operation, message=message)
        self.notices.append(notice)
        log = _LOGGER.warning if level == "warning" else _LOGGER.error
        log("%s failed: %s", operation, message)
        self._publish({"type": "notice", "data": notice.model_dump(mode="json")})

    def _publish(self, event: Dict[str, object]) -> None:
        sink = self._event_sink
        if sink is not None:
            sink(event)

    def _finish_workflow(self) -> None:
        self.composition.clear_composition()
        self.composition.clear_selection()
        self._publish({"type": "workspace", "data": self.describe()})

    def _on_capture(self, screenshot: Screenshot) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None:
            self._schedule_capture_refresh(screenshot)
        elif self._loop is not None:
            self._loop.call_soon_threadsafe(self._schedule_capture_refresh, screenshot)
        else:
            _LOGGER.warning("Capture %s arrived without an event loop; call refresh()", screenshot.id)

    def _schedule_capture_refresh(self, screenshot: Screenshot) -> None:
        task = asyncio.get_running_loop().create_task(self._refresh_after_capture(screenshot))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh_after_capture(self, screenshot: Screenshot) -> None:
        try:
            with self._operation("capture_refresh"):
                await self.collection.notify_external_capture(screenshot)
        except WorkspaceError as exc:
            _LOGGER.debug("Capture refresh for %s abandoned: %s", screenshot.id, exc)


__all__ = ["Workspace", "Notice"]
