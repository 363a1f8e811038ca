"""
Hit testing: what is under a logical coordinate.

Candidates are checked in insertion order and the first one within the
radius wins, so when two markers overlap the older one is found.
"""

from typing import Optional

from .state import EditMode, HitResult, ObjectKind
from .store import AnnotationStore
from .utils import find_first_within

VERTEX_HIT_RADIUS = 10
POINT_HIT_RADIUS = 8


def find_vertex_at(
    store: AnnotationStore, x: float, y: float, radius: float = VERTEX_HIT_RADIUS
) -> Optional[HitResult]:
    """Find a vertex of the selected area within ``radius``."""
    area = store.selected_area
    if area is None:
        return None
    index = find_first_within([(v.x, v.y) for v in area.vertices], x, y, radius)
    if index < 0:
        return None
    vertex = area.vertices[index]
    return HitResult(ObjectKind.VERTEX, index, vertex.x, vertex.y)


def find_point_at(
    store: AnnotationStore, x: float, y: float, radius: float = POINT_HIT_RADIUS
) -> Optional[HitResult]:
    """Find a point within ``radius``."""
    index = find_first_within([(p.x, p.y) for p in store.points], x, y, radius)
    if index < 0:
        return None
    point = store.points[index]
    return HitResult(ObjectKind.POINT, index, point.x, point.y)


def find_object_at(
    store: AnnotationStore,
    x: float,
    y: float,
    mode: EditMode,
    vertex_radius: float = VERTEX_HIT_RADIUS,
    point_radius: float = POINT_HIT_RADIUS,
) -> Optional[HitResult]:
    """
    Resolve the object under a logical coordinate.

    In area mode the selected area's vertices are checked first; points
    are checked in every mode.

    Args:
        store: Annotation data
        x: Logical X
        y: Logical Y
        mode: Current edit mode
        vertex_radius: Inclusive vertex hit radius
        point_radius: Inclusive point hit radius

    Returns:
        The hit, or None
    """
    if mode is EditMode.AREA:
        hit = find_vertex_at(store, x, y, vertex_radius)
        if hit is not None:
            return hit
    return find_point_at(store, x, y, point_radius)
