"""HTTP API tests using FastAPI's TestClient."""

import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from capstur.api.app import create_app

from workspace_fakes import FakeClipboard, FakeGateway, make_screenshot


class WorkspaceApiTests(unittest.TestCase):
    """Validate routing and error mapping of the workspace API."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.gateway = FakeGateway([make_screenshot("A", 1), make_screenshot("B", 2)])
        self.clipboard = FakeClipboard()
        self.app = create_app(
            self.gateway,
            Path(self._tmp.name) / "config.json",
            clipboard=self.clipboard,
        )
        self.client = TestClient(self.app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        self._tmp.cleanup()

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_refresh_lists_without_payloads(self) -> None:
        body = self.client.post("/workspace/refresh").json()
        self.assertEqual([shot["id"] for shot in body["screenshots"]], ["A", "B"])
        self.assertNotIn("image_data", body["screenshots"][0])
        detail = self.client.get("/workspace/screenshots/A").json()
        self.assertIn("image_data", detail)

    def test_toggle_unknown_id_is_404(self) -> None:
        self.client.post("/workspace/refresh")
        response = self.client.post("/workspace/selection/ghost/toggle")
        self.assertEqual(response.status_code, 404)

    def test_compose_flow(self) -> None:
        self.client.post("/workspace/refresh")
        self.assertEqual(self.client.post("/workspace/compose", json={"layout": "grid"}).status_code, 422)

        self.client.post("/workspace/selection/all")
        moved = self.client.post("/workspace/order/move", json={"from_index": 1, "to_index": 0}).json()
        self.assertEqual(moved["display_order"], ["B", "A"])
        response = self.client.post("/workspace/compose", json={"layout": "vertical"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["source_ids"], ["B", "A"])
        self.assertEqual(self.client.post("/workspace/compose", json={"layout": "spiral"}).status_code, 422)

    def test_backend_failure_is_502(self) -> None:
        self.gateway.fail_list = True
        self.assertEqual(self.client.post("/workspace/refresh").status_code, 502)

    def test_upload_requires_destination(self) -> None:
        self.client.post("/workspace/refresh")
        self.client.post("/workspace/selection/all")
        self.client.post("/workspace/compose", json={"layout": "horizontal"})
        self.assertEqual(self.client.put("/upload/destination", json={"url": ""}).json()["destination_url"], "")
        self.assertEqual(self.client.post("/upload").status_code, 422)
        self.assertEqual(self.client.get("/upload/status").json()["status"], "idle")

    def test_clipboard_denied_is_409(self) -> None:
        self.client.post("/workspace/refresh")
        self.client.post("/workspace/selection/A/toggle")
        self.client.post("/workspace/compose", json={"layout": "horizontal"})
        self.assertEqual(self.client.post("/upload/clipboard").status_code, 200)
        self.clipboard.denied = True
        self.assertEqual(self.client.post("/upload/clipboard").status_code, 409)

    def test_download_writes_file(self) -> None:
        self.client.post("/workspace/refresh")
        self.client.post("/workspace/selection/A/toggle")
        self.client.post("/workspace/compose", json={"layout": "horizontal"})
        response = self.client.post("/upload/download", json={"directory": self._tmp.name})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(Path(response.json()["path"]).exists())

    def test_download_dir_route_persists_folder(self) -> None:
        exports = Path(self._tmp.name) / "exports"
        response = self.client.put("/upload/download-dir", json={"directory": str(exports)})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Path(response.json()["download_dir"]), exports)
        self.assertEqual(self.client.put("/upload/download-dir", json={"directory": ""}).status_code, 422)

    def test_websocket_sends_initial_snapshot(self) -> None:
        with self.client.websocket_connect("/ws/workspace") as websocket:
            event = websocket.receive_json()
        self.assertEqual(event["type"], "workspace")
        self.assertEqual(event["data"]["screenshots"], [])


if __name__ == "__main__":
    unittest.main()
