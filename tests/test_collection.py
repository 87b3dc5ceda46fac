"""Tests for the screenshot collection store."""

import asyncio
import unittest

from capstur.core.collection import ScreenshotCollectionStore
from capstur.core.errors import BackendError, InvalidReference
from capstur.core.state import WorkspaceStateStore

from workspace_fakes import FakeGateway, make_screenshot


class ScreenshotCollectionStoreTests(unittest.TestCase):
    """Validate refresh, delete and selection reconciliation."""

    def setUp(self) -> None:
        self.gateway = FakeGateway(
            [make_screenshot("b", 20), make_screenshot("a", 10), make_screenshot("c", 30)]
        )
        self.state = WorkspaceStateStore()
        self.store = ScreenshotCollectionStore(self.gateway, self.state)

    def test_refresh_orders_by_capture_time(self) -> None:
        asyncio.run(self.store.refresh())
        self.assertEqual(self.store.ids(), ["a", "b", "c"])

    def test_refresh_prunes_missing_selection(self) -> None:
        """Selection must stay a subset of the refreshed collection."""

        asyncio.run(self.store.refresh())
        self.state.update(selected_ids={"a", "c"})
        self.gateway.screenshots = [make_screenshot("a", 10)]
        asyncio.run(self.store.refresh())
        self.assertEqual(self.state.read().selected_ids, {"a"})
        self.assertTrue(self.state.read().selected_ids <= set(self.store.ids()))

    def test_refresh_failure_keeps_previous_contents(self) -> None:
        asyncio.run(self.store.refresh())
        self.gateway.fail_list = True
        with self.assertRaises(BackendError):
            asyncio.run(self.store.refresh())
        self.assertEqual(self.store.ids(), ["a", "b", "c"])

    def test_listeners_receive_new_sequence(self) -> None:
        seen = []
        self.store.add_listener(seen.append)
        asyncio.run(self.store.refresh())
        self.assertEqual(seen, [["a", "b", "c"]])

    def test_delete_selected_removes_from_selection(self) -> None:
        asyncio.run(self.store.refresh())
        self.state.update(selected_ids={"b", "c"})
        asyncio.run(self.store.delete("b"))
        self.assertEqual(self.store.ids(), ["a", "c"])
        self.assertEqual(self.state.read().selected_ids, {"c"})
        self.assertEqual(self.gateway.deleted, ["b"])

    def test_delete_failure_leaves_collection_untouched(self) -> None:
        asyncio.run(self.store.refresh())
        self.state.update(selected_ids={"b"})
        self.gateway.fail_delete = True
        with self.assertRaises(BackendError):
            asyncio.run(self.store.delete("b"))
        self.assertEqual(self.store.ids(), ["a", "b", "c"])
        self.assertEqual(self.state.read().selected_ids, {"b"})

    def test_delete_unknown_id_reconciles(self) -> None:
        """Unknown ids trigger a refresh and report an invalid reference."""

        with self.assertRaises(InvalidReference):
            asyncio.run(self.store.delete("zzz"))
        self.assertEqual(self.gateway.list_calls, 1)
        self.assertEqual(self.store.ids(), ["a", "b", "c"])
        self.assertEqual(self.gateway.deleted, [])

    def test_external_capture_triggers_refresh(self) -> None:
        asyncio.run(self.store.refresh())
        shot = make_screenshot("d", 40)
        self.gateway.screenshots.append(shot)
        asyncio.run(self.store.notify_external_capture(shot))
        self.assertEqual(self.store.ids(), ["a", "b", "c", "d"])

    def test_older_refresh_resolving_late_is_discarded(self) -> None:
        """The most recently started refresh wins."""

        gateway = self.gateway
        original = gateway.list_screenshots

        async def scenario() -> None:
            gate = asyncio.Event()
            first_snapshot = [make_screenshot("old", 1)]

            async def slow_list():
                await gate.wait()
                return first_snapshot

            gateway.list_screenshots = slow_list
            first = asyncio.create_task(self.store.refresh())
            await asyncio.sleep(0)
            gateway.list_screenshots = original
            await self.store.refresh()
            gate.set()
            await first

        asyncio.run(scenario())
        self.assertEqual(self.store.ids(), ["a", "b", "c"])


if __name__ == "__main__":
    unittest.main()
