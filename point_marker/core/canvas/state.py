"""
State for the annotation canvas.

Contains the data classes for points, areas and the transient drag
session. All coordinates held here are logical canvas coordinates.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class EditMode(Enum):
    """What a click on empty canvas creates."""

    POINT = "point"
    AREA = "area"


class ObjectKind(Enum):
    """Kinds of objects that can be found under the pointer."""

    POINT = "point"
    VERTEX = "vertex"


@dataclass
class Point:
    """
    A labeled marker.

    ``label`` is the user-assigned identifier (up to four characters once
    formatted). It may be empty while the user is still typing; such a
    point is "unlabeled" and is never synchronized.
    """

    x: float
    y: float
    label: str = ""
    index: int = 0

    @property
    def is_labeled(self) -> bool:
        return bool(self.label and self.label.strip())

    def move_to(self, x: float, y: float):
        """Position-only mutator used by the drag path."""
        self.x = x
        self.y = y


@dataclass
class Vertex:
    """A polygon corner."""

    x: float
    y: float

    def move_to(self, x: float, y: float):
        """Position-only mutator used by the drag path."""
        self.x = x
        self.y = y


@dataclass
class Area:
    """
    A named polygon.

    ``vertices`` keep the winding order in which they were drawn.
    ``remote_key`` is set once the area has been written to the remote
    store and is used for every later update or delete.
    """

    area_name: str = ""
    vertices: List[Vertex] = field(default_factory=list)
    remote_key: Optional[str] = None

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)


@dataclass
class HitResult:
    """What :func:`find_object_at` found under the pointer."""

    kind: ObjectKind
    index: int
    x: float
    y: float


@dataclass
class DragSession:
    """
    Transient state of one pointer gesture on an object.

    Exists only between pointer-down and pointer-up; never persisted.
    """

    kind: ObjectKind
    index: int
    grab_offset_x: float
    grab_offset_y: float
    start_x: float
    start_y: float
    has_moved: bool = False


@dataclass
class DragResult:
    """Outcome of releasing the pointer."""

    was_dragging: bool = False
    has_moved: bool = False
    kind: Optional[ObjectKind] = None
    index: int = -1
