"""Helpers turning composed-image handles into binary payloads."""

from __future__ import annotations

import base64
import binascii
import re
from datetime import datetime, timezone
from typing import Optional, Tuple

from capstur.core.errors import ValidationError


_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*),(?P<body>.*)$", re.S)

FILENAME_PREFIX = "capstur-screenshot-"


def decode_data_uri(data: str) -> Tuple[str, bytes]:
    """Return ``(mime_type, raw_bytes)`` for a base64 data URI.

    Bare base64 strings are accepted and assumed to be PNG.
    """

    if not data or not data.strip():
        raise ValidationError("Composed image is empty")

    match = _DATA_URI_RE.match(data.strip())
    if match:
        if ";base64" not in match.group("params"):
            raise ValidationError("Composed image must be base64 encoded")
        mime = match.group("mime") or "image/png"
        body = match.group("body")
    else:
        mime = "image/png"
        body = data.strip()

    try:
        return mime, base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(f"Failed to decode image data: {exc}") from exc


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""

    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def snapshot_filename(moment: Optional[datetime] = None) -> str:
    """Return ``capstur-screenshot-<timestamp>.png`` with ``:`` and ``.`` replaced."""

    stamp = re.sub(r"[:.]", "-", iso_timestamp(moment))
    return f"{FILENAME_PREFIX}{stamp}.png"


__all__ = ["decode_data_uri", "iso_timestamp", "snapshot_filename", "FILENAME_PREFIX"]
