"""Tests for the in-memory backend gateway."""

import asyncio
import unittest

from capstur.core.errors import BackendError
from capstur.core.models import Layout
from capstur.gateway.memory import InMemoryGateway

from workspace_fakes import make_screenshot


class InMemoryGatewayTests(unittest.TestCase):
    """Validate storage, deletion, composition and capture events."""

    def setUp(self) -> None:
        self.calls = []

        def compositor(images, layout):
            self.calls.append(([img.id for img in images], layout))
            return "data:image/png;base64,AAAA"

        self.gateway = InMemoryGateway(compositor=compositor)

    def test_add_capture_emits_event(self) -> None:
        received = []
        self.gateway.set_event_sink(received.append)
        shot = make_screenshot("a")
        self.gateway.add_capture(shot)
        self.assertEqual(received, [shot])
        self.assertEqual(asyncio.run(self.gateway.list_screenshots()), [shot])

    def test_delete_unknown_fails(self) -> None:
        with self.assertRaises(BackendError):
            asyncio.run(self.gateway.delete_screenshot("missing"))

    def test_compose_skips_missing_ids(self) -> None:
        self.gateway.add_capture(make_screenshot("a"))
        self.gateway.add_capture(make_screenshot("b"))
        result = asyncio.run(self.gateway.compose_screenshots(["b", "gone", "a"], Layout.GRID))
        self.assertEqual(result, "data:image/png;base64,AAAA")
        self.assertEqual(self.calls, [(["b", "a"], Layout.GRID)])

    def test_compose_without_matches_fails(self) -> None:
        with self.assertRaises(BackendError):
            asyncio.run(self.gateway.compose_screenshots(["x"], Layout.HORIZONTAL))

    def test_compose_without_compositor_fails(self) -> None:
        gateway = InMemoryGateway()
        gateway.add_capture(make_screenshot("a"))
        with self.assertRaises(BackendError):
            asyncio.run(gateway.compose_screenshots(["a"], Layout.VERTICAL))

    def test_start_region_capture_is_counted(self) -> None:
        asyncio.run(self.gateway.start_region_capture())
        self.assertEqual(self.gateway.capture_requests, 1)

    def test_backend_wire_names_are_accepted(self) -> None:
        from capstur.core.models import Screenshot

        shot = Screenshot.model_validate(
            {
                "id": "x",
                "timestamp": 5,
                "base64_data": "data:image/png;base64,AAAA",
                "width": 2,
                "height": 3,
                "region": {"x": 0, "y": 0, "width": 2, "height": 3},
            }
        )
        self.assertEqual(shot.captured_at, 5)
        self.assertEqual(shot.image_data, "data:image/png;base64,AAAA")


if __name__ == "__main__":
    unittest.main()
