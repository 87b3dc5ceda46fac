"""Shared fakes for workspace tests."""

from __future__ import annotations

import base64
from typing import Iterable, List, Sequence, Tuple

from capstur.core.errors import BackendError
from capstur.core.models import CaptureRegion, Layout, Screenshot
from capstur.gateway.base import BackendGateway


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


def make_screenshot(screenshot_id: str, captured_at: int = 1_700_000_000) -> Screenshot:
    return Screenshot(
        id=screenshot_id,
        captured_at=captured_at,
        image_data=PNG_DATA_URI,
        width=10,
        height=10,
        region=CaptureRegion(x=0, y=0, width=10, height=10),
    )


class FakeGateway(BackendGateway):
    """Scriptable gateway recording every call."""

    def __init__(self, screenshots: Iterable[Screenshot] = ()) -> None:
        super().__init__()
        self.screenshots: List[Screenshot] = list(screenshots)
        self.compose_calls: List[Tuple[List[str], Layout]] = []
        self.deleted: List[str] = []
        self.list_calls = 0
        self.capture_requests = 0
        self.fail_list = False
        self.fail_delete = False
        self.fail_compose = False
        self.composed = PNG_DATA_URI

    async def list_screenshots(self) -> List[Screenshot]:
        self.list_calls += 1
        if self.fail_list:
            raise BackendError("list failed")
        return list(self.screenshots)

    async def delete_screenshot(self, screenshot_id: str) -> None:
        if self.fail_delete:
            raise BackendError("delete rejected")
        if screenshot_id not in [shot.id for shot in self.screenshots]:
            raise BackendError(f"Screenshot not found: {screenshot_id}")
        self.screenshots = [shot for shot in self.screenshots if shot.id != screenshot_id]
        self.deleted.append(screenshot_id)

    async def compose_screenshots(self, ordered_ids: Sequence[str], layout: Layout) -> str:
        self.compose_calls.append((list(ordered_ids), layout))
        if self.fail_compose:
            raise BackendError("compose failed")
        return self.composed

    async def start_region_capture(self) -> None:
        self.capture_requests += 1

    def capture(self, screenshot: Screenshot) -> None:
        self.screenshots.append(screenshot)
        self._emit_capture(screenshot)


class FakeClipboard:
    """Clipboard double; set ``denied`` to emulate platform refusal."""

    def __init__(self, denied: bool = False) -> None:
        self.denied = denied
        self.writes: List[Tuple[bytes, str]] = []

    def write_image(self, data: bytes, mime_type: str) -> None:
        from capstur.core.errors import ClipboardUnavailable

        if self.denied:
            raise ClipboardUnavailable("Clipboard access denied")
        self.writes.append((data, mime_type))
