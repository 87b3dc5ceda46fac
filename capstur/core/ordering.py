"""View-only arrangement of the screenshot list."""

from __future__ import annotations

from typing import List, Sequence

from capstur.core.logs import get_logger
from capstur.core.state import WorkspaceStateStore


_LOGGER = get_logger(__name__)


class OrderingController:
    """Local drag-and-drop order derived from the collection order.

    Every backend snapshot discards the local arrangement, even when the
    snapshot holds the same ids. The order is never written back to the
    backend and never touches the selection.
    """

    def __init__(self, state: WorkspaceStateStore) -> None:
        """Initialise the arrangement from the current collection."""

        self._state = state
        ids = state.read().ids()
        if state.read().display_order != ids:
            state.update(display_order=ids)

    @property
    def sequence(self) -> List[str]:
        """Return the ids in display order."""

        return self._state.read().display_order

    def sync(self, authoritative: Sequence[str]) -> None:
        """Reset the arrangement to ``authoritative``."""

        ids = list(authoritative)
        self._state.update(display_order=ids)
        _LOGGER.debug("Display order reset to %d ids", len(ids))

    def move(self, from_index: int, to_index: int) -> bool:
        """Move the id at ``from_index`` to ``to_index``.

        Out-of-range indices are ignored because drag gestures pass through
        transient positions; the return value tells whether anything moved.
        """

        order = self.sequence
        size = len(order)
        if not (0 <= from_index < size and 0 <= to_index < size):
            _LOGGER.debug("Ignoring move %d -> %d on %d items", from_index, to_index, size)
            return False
        if from_index == to_index:
            return False

        item = order.pop(from_index)
        order.insert(to_index, item)
        self._state.update(display_order=order)
        return True


__all__ = ["OrderingController"]
