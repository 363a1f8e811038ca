"""
Drag-and-drop state machine for points and area vertices.

Idle -> Armed (pointer down on a draggable object) -> Dragging (moved at
least the threshold) -> Idle (pointer up). Only one session exists at a
time; a pointer-down while one is active is ignored.
"""

import logging
from typing import Optional

from .state import DragResult, DragSession, EditMode, HitResult, ObjectKind
from .store import AnnotationStore
from .utils import distance, round_half_up

logger = logging.getLogger(__name__)

DRAG_THRESHOLD = 3

# Which object kind can be dragged in which mode
_DRAGGABLE = {
    EditMode.POINT: ObjectKind.POINT,
    EditMode.AREA: ObjectKind.VERTEX,
}


class DragController:
    """
    Moves points and vertices while the pointer is held down.

    Position updates write straight into the entity through its
    position-only mutator; the store is told once the gesture ends.
    """

    def __init__(self, store: AnnotationStore, threshold: float = DRAG_THRESHOLD):
        self.store = store
        self.threshold = threshold
        self._session: Optional[DragSession] = None

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def is_dragging(self) -> bool:
        """True once the threshold has been crossed."""
        return self._session is not None and self._session.has_moved

    def begin(self, hit: Optional[HitResult], x: float, y: float, mode: EditMode) -> bool:
        """
        Arm a drag if ``hit`` is draggable in ``mode``.

        Args:
            hit: Object under the pointer, from hit testing
            x: Pointer logical X
            y: Pointer logical Y
            mode: Current edit mode

        Returns:
            True if a session was started
        """
        if self._session is not None:
            logger.debug("Ignoring pointer down: a drag is already active")
            return False
        if hit is None or _DRAGGABLE[mode] is not hit.kind:
            return False

        self._session = DragSession(
            kind=hit.kind,
            index=hit.index,
            grab_offset_x=hit.x - x,
            grab_offset_y=hit.y - y,
            start_x=x,
            start_y=y,
        )
        return True

    def update(self, x: float, y: float) -> bool:
        """
        Follow the pointer.

        Returns:
            True if an object position was written
        """
        session = self._session
        if session is None:
            return False

        if not session.has_moved:
            if distance(x, y, session.start_x, session.start_y) >= self.threshold:
                session.has_moved = True

        new_x = x + session.grab_offset_x
        new_y = y + session.grab_offset_y

        if session.kind is ObjectKind.POINT:
            if session.index >= self.store.point_count:
                return False
            self.store.points[session.index].move_to(
                round_half_up(new_x), round_half_up(new_y)
            )
            return True

        vertex = self.store.get_vertex(session.index)
        if vertex is None:
            return False
        vertex.move_to(new_x, new_y)
        return True

    def end(self) -> DragResult:
        """
        Release the pointer.

        A dragged point triggers a store notification so sync and
        rendering see its final position; a dragged vertex triggers a
        reorder of the selected area's outline.

        Returns:
            Whether a session existed and whether it crossed the threshold
        """
        session = self._session
        if session is None:
            return DragResult()
        self._session = None

        if session.kind is ObjectKind.POINT:
            self.store.notify_points_moved()
        elif self.store.selected_area_index >= 0:
            self.store.reorder_vertices(self.store.selected_area_index)

        return DragResult(
            was_dragging=True,
            has_moved=session.has_moved,
            kind=session.kind,
            index=session.index,
        )
