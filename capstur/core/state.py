"""Workspace state container with copy-on-read semantics."""

from __future__ import annotations

import threading

from capstur.core.logs import get_logger
from capstur.core.models import WorkspaceState


_LOGGER = get_logger(__name__)


def _copy_state(state: WorkspaceState, *, update: dict | None = None) -> WorkspaceState:
    """Return a deep copy of ``state`` optionally applying ``update``."""

    if update is None:
        return state.model_copy(deep=True)
    return state.model_copy(update=update, deep=True)


class WorkspaceStateStore:
    """Lock-protected wrapper around :class:`WorkspaceState`.

    Every write swaps the whole snapshot, so observers never see a
    half-applied operation.
    """

    def __init__(self) -> None:
        """Initialise the store with an empty workspace."""

        self._lock = threading.RLock()
        self._state = WorkspaceState()
        _LOGGER.debug("WorkspaceStateStore initialised with default state")

    def read(self) -> WorkspaceState:
        """Return a deep copy of the current state.

        The copy ensures callers cannot mutate the underlying storage without
        going through :meth:`update`.
        """

        with self._lock:
            state_copy = _copy_state(self._state)
        return state_copy

    def update(self, **changes: object) -> WorkspaceState:
        """Update selected fields atomically and return the new state."""

        with self._lock:
            self._state = _copy_state(self._state, update=changes)
            new_state = _copy_state(self._state)
        _LOGGER.debug("WorkspaceState updated: %s", sorted(changes))
        return new_state


__all__ = ["WorkspaceStateStore"]
