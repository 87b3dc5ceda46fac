"""Upload lifecycle for composed images: validate, transmit, report."""

from __future__ import annotations

import asyncio
import itertools
from pathlib import Path
from typing import Callable, Dict, Optional, Set

import requests

from capstur.config import UploadConfigStore
from capstur.core.errors import ExportError, TransportError, ValidationError
from capstur.core.logs import get_logger
from capstur.core.models import ComposedImage, UploadAttempt, UploadConfiguration
from capstur.core.state import WorkspaceStateStore
from capstur.upload.clipboard import ClipboardBackend, QtClipboard
from capstur.upload.payload import decode_data_uri, iso_timestamp, snapshot_filename


_LOGGER = get_logger(__name__)


_EVENT_CALLBACK = Callable[[Dict[str, object]], None]

SOURCE_IDENTIFIER = "Capstur"


class UploadLifecycleController:
    """Drive a composed image through the ``idle -> uploading -> done`` cycle.

    Only one attempt is tracked. Each call to :meth:`upload` takes a new
    attempt token; a response that resolves after a newer attempt started is
    discarded instead of being applied. Progress is simulated: the transport
    does not report bytes sent, so the indicator creeps towards
    ``progress_ceiling`` until the response arrives.
    """

    def __init__(
        self,
        state: WorkspaceStateStore,
        config: UploadConfigStore,
        on_complete: Optional[Callable[[], None]] = None,
        clipboard: Optional[ClipboardBackend] = None,
        *,
        timeout: float = 30.0,
        progress_interval: float = 0.1,
        progress_step: int = 10,
        progress_ceiling: int = 90,
        completion_delay: float = 3.0,
        preview_length: int = 200,
    ) -> None:
        """Initialise the controller; timings are in seconds."""

        if not 0 <= progress_ceiling < 100:
            raise ValueError("progress_ceiling must stay below 100")
        self._state = state
        self._config = config
        self._on_complete = on_complete
        self._clipboard: ClipboardBackend = clipboard or QtClipboard()
        self._timeout = timeout
        self._progress_interval = progress_interval
        self._progress_step = progress_step
        self._progress_ceiling = progress_ceiling
        self._completion_delay = completion_delay
        self._preview_length = preview_length

        self._tokens = itertools.count(state.read().upload.token + 1)
        self._current_token = state.read().upload.token
        self._background: Set[asyncio.Task] = set()
        self._event_sink: Optional[_EVENT_CALLBACK] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def attempt(self) -> UploadAttempt:
        """Return the current upload attempt."""

        return self._state.read().upload

    @property
    def configuration(self) -> UploadConfiguration:
        """Return the persisted destination settings."""

        return self._config.read()

    def set_event_sink(self, callback: Optional[_EVENT_CALLBACK]) -> None:
        """Register a callback receiving every attempt change."""

        self._event_sink = callback

    def set_destination(self, url: str) -> UploadConfiguration:
        """Persist ``url`` immediately; it is validated only when uploading."""

        config = self._config.set_destination(url)
        _LOGGER.info("Upload destination set to %r", url)
        return config

    def set_download_dir(self, directory: str) -> UploadConfiguration:
        """Persist the default folder used by :meth:`download`."""

        if not directory.strip():
            raise ValidationError("Enter a download folder")
        config = self._config.set_download_dir(directory)
        _LOGGER.info("Download folder set to %s", directory)
        return config

    async def upload(self, composed: Optional[ComposedImage]) -> Optional[UploadAttempt]:
        """Send ``composed`` to the configured destination.

        Returns the finished attempt, or ``None`` when a newer attempt
        superseded this one. Raises :class:`ValidationError` without touching
        the attempt when inputs are missing, and :class:`TransportError` after
        moving the attempt to ``failed``.
        """

        if composed is None:
            raise ValidationError("Compose an image before uploading")
        url = self._config.destination_url.strip()
        if not url:
            raise ValidationError("Enter an upload URL")
        mime_type, payload = decode_data_uri(composed.data)

        token = next(self._tokens)
        self._current_token = token
        self._set_attempt(UploadAttempt(token=token, status="uploading", progress=0))
        _LOGGER.info("Upload %d started to %s (%d bytes)", token, url, len(payload))

        ticker = asyncio.create_task(self._advance_progress(token))
        response: Optional[requests.Response] = None
        failure: Optional[Exception] = None
        try:
            response = await asyncio.to_thread(self._post, url, payload, mime_type)
        except Exception as exc:
            _LOGGER.warning("Upload %d transport error: %s", token, exc)
            failure = exc
        finally:
            ticker.cancel()
            await asyncio.gather(ticker, return_exceptions=True)

        if token != self._current_token:
            _LOGGER.info("Discarding result of superseded upload %d", token)
            return None

        if failure is not None:
            self._fail(token, f"Upload failed: {failure}", failure)
        elif not 200 <= response.status_code < 300:
            self._fail(token, f"Upload failed: HTTP {response.status_code}: {response.reason}")

        body = response.text
        preview = body[: self._preview_length]
        if len(body) > self._preview_length:
            preview += "..."
        attempt = UploadAttempt(
            token=token,
            status="succeeded",
            progress=100,
            result_message=f"Upload succeeded\nStatus: {response.status_code}\nResponse: {preview}",
        )
        self._set_attempt(attempt)
        _LOGGER.info("Upload %d succeeded with HTTP %d", token, response.status_code)

        self._spawn(self._complete_later(token))
        return attempt

    def dismiss(self) -> UploadAttempt:
        """Return a finished attempt to ``idle``; uploads in flight are left alone."""

        attempt = self.attempt
        if attempt.status in ("succeeded", "failed"):
            attempt = UploadAttempt(token=attempt.token)
            self._set_attempt(attempt)
        return attempt

    def download(self, composed: Optional[ComposedImage], directory: Optional[Path] = None) -> Path:
        """Write ``composed`` to disk and return the file path."""

        if composed is None:
            raise ValidationError("Compose an image before downloading")
        _, payload = decode_data_uri(composed.data)
        target_dir = Path(directory) if directory is not None else self._config.download_dir
        target = target_dir / snapshot_filename()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except OSError as exc:
            raise ExportError(f"Could not save image to {target}: {exc}") from exc
        _LOGGER.info("Composed image saved to %s", target)
        return target

    def copy_to_clipboard(self, composed: Optional[ComposedImage]) -> None:
        """Place the decoded image on the system clipboard."""

        if composed is None:
            raise ValidationError("Compose an image before copying")
        mime_type, payload = decode_data_uri(composed.data)
        self._clipboard.write_image(payload, mime_type)

    async def aclose(self) -> None:
        """Cancel pending completion timers."""

        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _post(self, url: str, payload: bytes, mime_type: str) -> requests.Response:
        """POST the multipart form; runs in a worker thread."""

        files = {"image": (snapshot_filename(), payload, mime_type)}
        data = {"timestamp": iso_timestamp(), "source": SOURCE_IDENTIFIER}
        return requests.post(url, files=files, data=data, timeout=self._timeout)

    def _fail(self, token: int, message: str, cause: Optional[Exception] = None) -> None:
        """Move attempt ``token`` to ``failed`` and raise :class:`TransportError`."""

        attempt = self.attempt.model_copy(update={"status": "failed", "result_message": message})
        self._set_attempt(attempt)
        _LOGGER.error("Upload %d failed: %s", token, message)
        raise TransportError(message) from cause

    async def _advance_progress(self, token: int) -> None:
        """Simulate progress for ``token`` until it leaves ``uploading``."""

        while True:
            await asyncio.sleep(self._progress_interval)
            attempt = self.attempt
            if attempt.token != token or attempt.status != "uploading":
                return
            progress = min(attempt.progress + self._progress_step, self._progress_ceiling)
            if progress != attempt.progress:
                self._set_attempt(attempt.model_copy(update={"progress": progress}))

    async def _complete_later(self, token: int) -> None:
        await asyncio.sleep(self._completion_delay)
        attempt = self.attempt
        if token != self._current_token or attempt.token != token or attempt.status != "succeeded":
            _LOGGER.debug("Skipping completion of upload %d", token)
            return
        if self._on_complete is not None:
            self._on_complete()
        self._set_attempt(UploadAttempt(token=token))
        _LOGGER.info("Upload %d workflow completed", token)

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _set_attempt(self, attempt: UploadAttempt) -> None:
        self._state.update(upload=attempt)
        sink = self._event_sink
        if sink is not None:
            sink({"type": "upload", "data": attempt.model_dump()})


__all__ = ["UploadLifecycleController", "SOURCE_IDENTIFIER"]
