"""Tests for composed-image payload helpers."""

import base64
import unittest
from datetime import datetime, timezone

from capstur.core.errors import ValidationError
from capstur.upload.payload import decode_data_uri, iso_timestamp, snapshot_filename


class PayloadTests(unittest.TestCase):
    """Validate data URI decoding and filename synthesis."""

    def test_decode_data_uri(self) -> None:
        encoded = base64.b64encode(b"png-bytes").decode()
        mime, data = decode_data_uri(f"data:image/jpeg;base64,{encoded}")
        self.assertEqual(mime, "image/jpeg")
        self.assertEqual(data, b"png-bytes")

    def test_bare_base64_defaults_to_png(self) -> None:
        mime, data = decode_data_uri(base64.b64encode(b"abc").decode())
        self.assertEqual((mime, data), ("image/png", b"abc"))

    def test_invalid_payloads(self) -> None:
        for value in ["", "data:image/png,plain", "data:image/png;base64,@@@"]:
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    decode_data_uri(value)

    def test_filename_replaces_colons_and_dots(self) -> None:
        moment = datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=timezone.utc)
        self.assertEqual(iso_timestamp(moment), "2024-05-06T07:08:09.123Z")
        self.assertEqual(
            snapshot_filename(moment), "capstur-screenshot-2024-05-06T07-08-09-123Z.png"
        )


if __name__ == "__main__":
    unittest.main()
