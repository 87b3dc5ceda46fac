"""Persisted upload configuration.

Settings live in a small JSON document (``~/.config/capstur/config.json`` by
default). Missing files are created with defaults, corrupt files are
recreated, and every change is written back immediately.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from capstur.core.logs import get_logger
from capstur.core.models import UploadConfiguration


_LOGGER = get_logger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "capstur"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

UPLOAD_URL_KEY = "capstur-upload-url"
DOWNLOAD_DIR_KEY = "download-dir"

DEFAULT_UPLOAD_URL = "https://httpbin.org/post"
DEFAULT_DOWNLOAD_DIR = str(Path.home() / "Pictures" / "Capstur")


class UploadConfigStore:
    """Load and persist :class:`UploadConfiguration`."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_FILE
        self._config = UploadConfiguration(
            destination_url=DEFAULT_UPLOAD_URL,
            download_dir=DEFAULT_DOWNLOAD_DIR,
        )
        self._load()

    @property
    def path(self) -> Path:
        """Location of the JSON settings file."""

        return self._path

    @property
    def destination_url(self) -> str:
        return self._config.destination_url

    @property
    def download_dir(self) -> Path:
        return Path(self._config.download_dir).expanduser()

    def read(self) -> UploadConfiguration:
        """Return a copy of the current settings."""

        return self._config.model_copy()

    def set_destination(self, url: str) -> UploadConfiguration:
        """Store ``url`` as-is and persist it; blank values are allowed."""

        self._config.destination_url = url
        self._save()
        return self.read()

    def set_download_dir(self, directory: str) -> UploadConfiguration:
        """Store ``directory`` as the default download folder and persist it."""

        self._config.download_dir = directory
        self._save()
        return self.read()

    def _load(self) -> None:
        if not self._path.exists():
            _LOGGER.info("Config file not found at %s; using defaults", self._path)
            self._save()
            return

        try:
            loaded = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(loaded, dict):
                raise ValueError("config file does not contain a JSON object")
        except (json.JSONDecodeError, ValueError) as exc:
            _LOGGER.warning("Config file invalid (%s); recreating with defaults", exc)
            self._save()
            return
        except OSError as exc:
            _LOGGER.warning("Could not read config file %s: %s", self._path, exc)
            return

        url = loaded.get(UPLOAD_URL_KEY)
        if isinstance(url, str):
            self._config.destination_url = url
        directory = loaded.get(DOWNLOAD_DIR_KEY)
        if isinstance(directory, str) and directory:
            self._config.download_dir = directory
        _LOGGER.info("Configuration loaded from %s", self._path)

    def _as_document(self) -> Dict[str, Any]:
        return {
            UPLOAD_URL_KEY: self._config.destination_url,
            DOWNLOAD_DIR_KEY: self._config.download_dir,
        }

    def _save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(self._as_document(), indent=2), encoding="utf-8")
        except OSError as exc:
            _LOGGER.error("Could not save config file %s: %s", self._path, exc)
            return
        _LOGGER.debug("Configuration saved to %s", self._path)


__all__ = [
    "UploadConfigStore",
    "UPLOAD_URL_KEY",
    "DOWNLOAD_DIR_KEY",
    "DEFAULT_UPLOAD_URL",
    "DEFAULT_CONFIG_FILE",
]
