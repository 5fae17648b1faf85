"""State machine for a pointer-driven reorder gesture."""

from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar

from loguru import logger

from library_collections.models.collection import DragSession

T = TypeVar("T")


class DragPhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DragSessionController(Generic[T]):
    """Track one drag gesture at a time and hand the final pair to a drop handler.

    The adapter for a concrete drag library translates its callbacks into
    ``on_drag_start`` / ``on_drag_over`` / ``on_drag_end`` / ``on_drag_cancel``.
    """

    def __init__(self, on_drop: Callable[[str, str | None], T]) -> None:
        self._on_drop = on_drop
        self._session: DragSession | None = None

    @property
    def phase(self) -> DragPhase:
        return DragPhase.IDLE if self._session is None else DragPhase.DRAGGING

    @property
    def session(self) -> DragSession | None:
        return self._session

    def on_drag_start(self, active_id: str) -> None:
        if self._session is not None:
            logger.debug(
                "Drag of {} started while {} was still active; replacing session",
                active_id,
                self._session.active_id,
            )
        self._session = DragSession(active_id=active_id)

    def on_drag_over(self, over_id: str | None) -> None:
        if self._session is None:
            return
        self._session = DragSession(active_id=self._session.active_id, over_id=over_id)

    def on_drag_end(self) -> T | None:
        """Finish the gesture and run the drop handler.

        The session is cleared before the handler runs, so a slow or failing
        handler never leaves the controller in the dragging phase.
        """
        session = self._session
        self._session = None
        if session is None:
            return None
        return self._on_drop(session.active_id, session.over_id)

    def on_drag_cancel(self) -> None:
        self._session = None
