"""Authoritative screenshot list fed by the backend gateway."""

from __future__ import annotations

import itertools
from typing import Callable, List, Optional

from capstur.core.errors import InvalidReference
from capstur.core.logs import get_logger
from capstur.core.models import Screenshot
from capstur.core.state import WorkspaceStateStore
from capstur.gateway.base import BackendGateway


_LOGGER = get_logger(__name__)

CollectionListener = Callable[[List[str]], None]


class ScreenshotCollectionStore:
    """Keep the screenshot list in sync with the backend.

    The store never edits screenshots itself; it only replaces the whole list
    with the latest backend snapshot and prunes the selection accordingly.
    """

    def __init__(self, gateway: BackendGateway, state: WorkspaceStateStore) -> None:
        """Initialise the store around ``gateway``."""

        self._gateway = gateway
        self._state = state
        self._listeners: List[CollectionListener] = []
        self._tickets = itertools.count(1)
        self._applied_ticket = 0

    def add_listener(self, listener: CollectionListener) -> None:
        """Call ``listener`` with the new id sequence after each refresh."""

        self._listeners.append(listener)

    @property
    def screenshots(self) -> List[Screenshot]:
        """Return the collection sorted by capture time."""

        return self._state.read().screenshots

    def ids(self) -> List[str]:
        """Return the ids of the collection in order."""

        return self._state.read().ids()

    def contains(self, screenshot_id: str) -> bool:
        """Return whether ``screenshot_id`` is in the collection."""

        return screenshot_id in self.ids()

    async def refresh(self) -> List[Screenshot]:
        """Replace the collection with the backend's current list.

        Raises :class:`BackendError` and keeps the previous contents when the
        backend call fails. When refreshes overlap, the most recently started
        one wins.
        """

        ticket = next(self._tickets)
        fetched = await self._gateway.list_screenshots()
        if ticket < self._applied_ticket:
            _LOGGER.debug("Discarding stale refresh %d (applied %d)", ticket, self._applied_ticket)
            return self.screenshots
        self._applied_ticket = ticket

        # sorted() is stable, so equal timestamps keep backend order
        ordered = sorted(fetched, key=lambda shot: shot.captured_at)
        present = {shot.id for shot in ordered}
        selected = self._state.read().selected_ids
        dropped = selected - present
        state = self._state.update(screenshots=ordered, selected_ids=selected & present)
        if dropped:
            _LOGGER.info("Dropped stale selections: %s", sorted(dropped))
        _LOGGER.info("Collection refreshed with %d screenshots", len(ordered))

        ids = state.ids()
        for listener in list(self._listeners):
            listener(list(ids))
        return state.screenshots

    async def delete(self, screenshot_id: str) -> None:
        """Delete ``screenshot_id`` on the backend and reload the collection."""

        if not self.contains(screenshot_id):
            _LOGGER.warning("Delete requested for unknown id %s; reconciling", screenshot_id)
            await self.refresh()
            raise InvalidReference(screenshot_id)

        await self._gateway.delete_screenshot(screenshot_id)
        await self.refresh()
        state = self._state.read()
        if screenshot_id in state.selected_ids:
            self._state.update(selected_ids=state.selected_ids - {screenshot_id})
        _LOGGER.info("Screenshot %s deleted", screenshot_id)

    async def notify_external_capture(self, screenshot: Optional[Screenshot] = None) -> List[Screenshot]:
        """React to a capture-completed event by reloading the collection."""

        if screenshot is not None:
            _LOGGER.info("Capture completed: %s (%dx%d)", screenshot.id, screenshot.width, screenshot.height)
        return await self.refresh()


__all__ = ["ScreenshotCollectionStore", "CollectionListener"]
