"""
In-memory collections of points and areas.

The store is the single owner of the annotation data. Every mutation
emits events so that rendering, label popups and remote sync can react
without the store knowing about any of them.
"""

import logging
from dataclasses import dataclass
from gettext import gettext as _
from typing import List, Optional

from .events import CanvasEvent, EventEmitter, EventType
from .state import Area, Point, Vertex
from .utils import (
    angular_order,
    find_duplicate_labels,
    format_label,
    has_duplicate_label,
    round_half_up,
)

logger = logging.getLogger(__name__)


@dataclass
class LabelUpdate:
    """Result of :meth:`AnnotationStore.update_point_label`."""

    label: str
    is_duplicate: bool = False


class AnnotationStore:
    """
    Owns the point and area collections.

    Points and areas are addressed by their position in the collection.
    A point's ``index`` field is its registration order and does not
    change when earlier points are removed.

    Label uniqueness is advisory: a duplicate label is still written and
    reported through ``EventType.DUPLICATE_LABEL``.
    """

    def __init__(
        self, events: Optional[EventEmitter] = None, label_max_length: int = 4
    ):
        self.events = events or EventEmitter()
        self.label_max_length = label_max_length

        self._points: List[Point] = []
        self._areas: List[Area] = []
        self._selected_area_index = -1
        self._next_point_index = 0

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    @property
    def points(self) -> List[Point]:
        return self._points

    @property
    def point_count(self) -> int:
        return len(self._points)

    def get_point(self, position: int) -> Point:
        self._check_point(position)
        return self._points[position]

    def add_point(self, x: float, y: float, label: str = "") -> Point:
        """
        Append a point.

        Args:
            x: Logical X
            y: Logical Y
            label: Initial label, empty for a point that still needs one

        Returns:
            The new point
        """
        point = Point(x=x, y=y, label=label or "", index=self._next_point_index)
        self._next_point_index += 1
        self._points.append(point)
        logger.debug("Added point %r at (%s, %s)", point.label, x, y)
        self._points_changed()
        return point

    def remove_point(self, position: int) -> Point:
        """Remove the point at ``position`` and return it."""
        self._check_point(position)
        point = self._points.pop(position)
        logger.debug("Removed point %r", point.label)
        self._points_changed()
        return point

    def remove_trailing_unlabeled_points(self) -> int:
        """
        Drop points that never received a label.

        Called before a new point is created so at most one unlabeled
        point exists at a time.

        Returns:
            Number of points removed
        """
        kept = [p for p in self._points if p.is_labeled]
        removed = len(self._points) - len(kept)
        if removed:
            self._points[:] = kept
            self._points_changed()
        return removed

    def update_point_label(
        self, position: int, raw_label: str, is_final: bool
    ) -> LabelUpdate:
        """
        Update a point's label.

        While the user is typing (``is_final`` False) the raw text is kept
        as is. On commit the formatted label is written and checked
        against every other point; a clash is reported but the label is
        written anyway.

        Args:
            position: Point position in the collection
            raw_label: Text from the label input
            is_final: True on blur/commit

        Returns:
            The stored label and whether it duplicates another point's
        """
        point = self.get_point(position)

        if not is_final:
            point.label = raw_label or ""
            self._points_changed(typing=True)
            return LabelUpdate(point.label)

        point.label = format_label(raw_label, self.label_max_length)
        is_duplicate = has_duplicate_label(self.labels(), point.label, position)
        if is_duplicate:
            logger.info("Duplicate point label %r at position %d", point.label, position)
            self.events.emit(
                CanvasEvent(
                    EventType.DUPLICATE_LABEL,
                    {
                        "index": position,
                        "label": point.label,
                        "message": _('Point ID "{label}" is already in use').format(
                            label=point.label
                        ),
                    },
                )
            )
        self._points_changed()
        return LabelUpdate(point.label, is_duplicate)

    def labels(self) -> List[str]:
        return [p.label for p in self._points]

    def duplicate_labels(self) -> List[str]:
        return find_duplicate_labels(self.labels())

    def clear_points(self):
        self._points.clear()
        self._next_point_index = 0
        self._points_changed()

    # ------------------------------------------------------------------
    # Areas
    # ------------------------------------------------------------------

    @property
    def areas(self) -> List[Area]:
        return self._areas

    @property
    def selected_area_index(self) -> int:
        return self._selected_area_index

    @property
    def selected_area(self) -> Optional[Area]:
        if self._selected_area_index < 0:
            return None
        return self._areas[self._selected_area_index]

    def is_selected(self, area_index: int) -> bool:
        return area_index >= 0 and area_index == self._selected_area_index

    def add_area(self, area: Optional[Area] = None) -> int:
        """
        Append an area.

        Args:
            area: Initial area; an unnamed empty one if omitted

        Returns:
            Position of the new area
        """
        if area is None:
            area = Area()
        self._areas.append(area)
        logger.debug("Added area %r", area.area_name)
        self._area_list_changed()
        return len(self._areas) - 1

    def delete_area(self, area_index: int) -> Area:
        """Remove an area, keeping the selection on the same area if it survives."""
        self._check_area(area_index)
        area = self._areas.pop(area_index)

        if self._selected_area_index == area_index:
            self._set_selection(-1)
        elif self._selected_area_index > area_index:
            self._set_selection(self._selected_area_index - 1)

        logger.debug("Deleted area %r", area.area_name)
        self._area_list_changed()
        return area

    def select_area(self, area_index: int):
        """Select an area; -1 clears the selection."""
        if area_index != -1:
            self._check_area(area_index)
        self._set_selection(area_index)
        self._areas_changed()

    def update_area_name(self, name: str) -> bool:
        """Rename the selected area. Returns False if nothing is selected."""
        area = self.selected_area
        if area is None:
            return False
        area.area_name = name
        self.events.emit(
            CanvasEvent(
                EventType.AREA_INFO_CHANGED,
                {"index": self._selected_area_index, "name": name},
            )
        )
        self._area_list_changed()
        return True

    def add_vertex(self, x: float, y: float) -> bool:
        """
        Append a vertex to the selected area.

        Returns:
            False, with a ``NO_AREA_SELECTED`` event, when no area is selected
        """
        area = self.selected_area
        if area is None:
            self.warn_no_area_selected()
            return False
        area.vertices.append(Vertex(x, y))
        self._areas_changed()
        return True

    def remove_vertex(self, vertex_index: int) -> bool:
        """Remove a vertex from the selected area."""
        area = self.selected_area
        if area is None:
            self.warn_no_area_selected()
            return False
        if not 0 <= vertex_index < len(area.vertices):
            return False
        area.vertices.pop(vertex_index)
        self._areas_changed()
        return True

    def get_vertex(self, vertex_index: int) -> Optional[Vertex]:
        """Vertex of the selected area, or None."""
        area = self.selected_area
        if area is None or not 0 <= vertex_index < len(area.vertices):
            return None
        return area.vertices[vertex_index]

    def update_vertex(self, vertex_index: int, x: float, y: float) -> bool:
        """Move a vertex of the selected area in place, without reordering."""
        vertex = self.get_vertex(vertex_index)
        if vertex is None:
            return False
        vertex.move_to(x, y)
        self._areas_changed()
        return True

    def reorder_vertices(self, area_index: int):
        """
        Re-sort an area's vertices by angle around their centroid.

        Run once a vertex drag ends so the outline cannot silently cross
        itself.
        """
        self._check_area(area_index)
        area = self._areas[area_index]
        order = angular_order([(v.x, v.y) for v in area.vertices])
        area.vertices[:] = [area.vertices[i] for i in order]
        self._areas_changed()

    def clear_areas(self):
        self._areas.clear()
        self._set_selection(-1)
        self._area_list_changed()

    # ------------------------------------------------------------------
    # Both collections
    # ------------------------------------------------------------------

    def clear(self):
        self.clear_points()
        self.clear_areas()

    def scale_coordinates(self, scale_x: float, scale_y: float):
        """
        Rescale every point and vertex, rounding to whole pixels.

        Used when the canvas buffer changes size so positions stay at the
        same place relative to the image.
        """
        for point in self._points:
            point.move_to(
                round_half_up(point.x * scale_x), round_half_up(point.y * scale_y)
            )
        for area in self._areas:
            for vertex in area.vertices:
                vertex.move_to(
                    round_half_up(vertex.x * scale_x), round_half_up(vertex.y * scale_y)
                )
        self._points_changed()
        self._areas_changed()

    def notify_points_moved(self):
        """Announce that point positions changed through the drag path."""
        self._points_changed()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _points_changed(self, typing: bool = False):
        self.events.emit(
            CanvasEvent(
                EventType.POINTS_CHANGED,
                {"points": list(self._points), "typing": typing},
            )
        )
        self.events.emit(
            CanvasEvent(EventType.POINT_COUNT_CHANGED, {"count": len(self._points)})
        )

    def _areas_changed(self):
        area = self.selected_area
        self.events.emit(
            CanvasEvent(
                EventType.AREAS_CHANGED,
                {
                    "areas": list(self._areas),
                    "selected_area_index": self._selected_area_index,
                },
            )
        )
        self.events.emit(
            CanvasEvent(
                EventType.VERTEX_COUNT_CHANGED,
                {"count": area.vertex_count if area is not None else 0},
            )
        )

    def _area_list_changed(self):
        self.events.emit(
            CanvasEvent(
                EventType.AREA_LIST_CHANGED,
                {
                    "names": [a.area_name for a in self._areas],
                    "count": len(self._areas),
                },
            )
        )
        self._areas_changed()

    def _set_selection(self, area_index: int):
        if area_index == self._selected_area_index:
            return
        self._selected_area_index = area_index
        name = self._areas[area_index].area_name if area_index >= 0 else ""
        self.events.emit(
            CanvasEvent(
                EventType.AREA_SELECTION_CHANGED,
                {"index": area_index, "name": name},
            )
        )

    def warn_no_area_selected(self):
        logger.debug("Vertex operation without a selected area")
        self.events.emit(
            CanvasEvent(
                EventType.NO_AREA_SELECTED,
                {"message": _("No area is selected. Select or add an area first")},
            )
        )

    def _check_point(self, position: int):
        if not 0 <= position < len(self._points):
            raise IndexError(f"Point position {position} out of range")

    def _check_area(self, area_index: int):
        if not 0 <= area_index < len(self._areas):
            raise IndexError(f"Area index {area_index} out of range")
