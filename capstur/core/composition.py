"""Selection handling and composition requests."""

from __future__ import annotations

from typing import Optional, Set, Union

from capstur.core.errors import InvalidComposition, InvalidReference
from capstur.core.logs import get_logger
from capstur.core.models import ComposedImage, CompositionRequest, Layout
from capstur.core.ordering import OrderingController
from capstur.core.state import WorkspaceStateStore
from capstur.gateway.base import BackendGateway


_LOGGER = get_logger(__name__)


class CompositionRequestBuilder:
    """Turn the current selection and a layout into a backend request."""

    def __init__(
        self,
        gateway: BackendGateway,
        state: WorkspaceStateStore,
        ordering: OrderingController,
    ) -> None:
        """Initialise the builder over the shared state and display order."""

        self._gateway = gateway
        self._state = state
        self._ordering = ordering

    @property
    def selection(self) -> Set[str]:
        """Return the ids currently selected."""

        return self._state.read().selected_ids

    @property
    def composed_image(self) -> Optional[ComposedImage]:
        """Return the held composition, if any."""

        return self._state.read().composed_image

    def toggle_selection(self, screenshot_id: str) -> bool:
        """Flip membership of ``screenshot_id`` and return whether it is now selected."""

        state = self._state.read()
        if screenshot_id not in state.ids():
            raise InvalidReference(screenshot_id)

        selected = set(state.selected_ids)
        if screenshot_id in selected:
            selected.discard(screenshot_id)
            now_selected = False
        else:
            selected.add(screenshot_id)
            now_selected = True
        self._state.update(selected_ids=selected)
        return now_selected

    def select_all(self) -> Set[str]:
        """Select every screenshot in the collection."""

        state = self._state.update(selected_ids=set(self._state.read().ids()))
        return state.selected_ids

    def clear_selection(self) -> None:
        """Deselect everything."""

        self._state.update(selected_ids=set())

    def build_request(self, layout: Union[Layout, str]) -> CompositionRequest:
        """Validate preconditions and return the request for ``layout``.

        Ids follow the current display order so the composed image matches
        what the user sees.
        """

        try:
            chosen = Layout(layout)
        except ValueError as exc:
            raise InvalidComposition(f"Unsupported layout: {layout}") from exc

        selected = self.selection
        if not selected:
            raise InvalidComposition("Select at least one screenshot to compose")

        ordered = [i for i in self._ordering.sequence if i in selected]
        if not ordered:
            raise InvalidComposition("Selected screenshots are no longer displayed")
        return CompositionRequest(selected_ids=ordered, layout=chosen)

    async def compose(self, layout: Union[Layout, str]) -> ComposedImage:
        """Request composition from the backend and keep the returned handle."""

        request = self.build_request(layout)
        _LOGGER.info(
            "Composing %d screenshots with layout %s",
            len(request.selected_ids),
            request.layout.value,
        )
        data = await self._gateway.compose_screenshots(request.selected_ids, request.layout)
        image = ComposedImage(
            data=data,
            layout=request.layout,
            source_ids=request.selected_ids,
        )
        self._state.update(composed_image=image)
        return image

    def clear_composition(self) -> None:
        """Drop the held composition; safe to call when there is none."""

        if self._state.read().composed_image is not None:
            self._state.update(composed_image=None)
            _LOGGER.debug("Composed image cleared")


__all__ = ["CompositionRequestBuilder"]
