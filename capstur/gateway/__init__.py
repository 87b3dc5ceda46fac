"""Gateway implementations reaching the capture/compose backend."""

from .base import BackendGateway, CaptureCallback
from .memory import Compositor, InMemoryGateway

__all__ = ["BackendGateway", "CaptureCallback", "Compositor", "InMemoryGateway"]
