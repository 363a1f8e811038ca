"""
Remote document store interface.

The core talks to the remote store only through :class:`RemoteStore`.
Records are keyed by project (the image identity) and hold coordinates
in image-relative space.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

POINT_COUNT = "pointCount"
AREA_COUNT = "areaCount"


class RemoteError(Exception):
    """A remote operation did not take effect."""


class RemoteUnavailable(RemoteError):
    """The remote store could not be reached or failed."""


class PermissionDenied(RemoteError):
    """The remote store refused the operation."""


@dataclass
class ProjectMetadata:
    """Per-image project record."""

    project_name: str
    image_name: str = ""
    image_width: int = 0
    image_height: int = 0
    point_count: int = 0
    area_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectName": self.project_name,
            "imageName": self.image_name,
            "imageWidth": self.image_width,
            "imageHeight": self.image_height,
            POINT_COUNT: self.point_count,
            AREA_COUNT: self.area_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectMetadata":
        return cls(
            project_name=data.get("projectName", ""),
            image_name=data.get("imageName", ""),
            image_width=data.get("imageWidth", 0),
            image_height=data.get("imageHeight", 0),
            point_count=data.get(POINT_COUNT, 0),
            area_count=data.get(AREA_COUNT, 0),
        )


@dataclass
class RemotePoint:
    """A stored point. ``x``/``y`` are image-relative."""

    key: str
    label: str
    x: float
    y: float
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.label, "x": self.x, "y": self.y, "index": self.order}

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "RemotePoint":
        return cls(
            key=key,
            label=data.get("id", ""),
            x=data["x"],
            y=data["y"],
            order=data.get("index", 0),
        )


@dataclass
class RemoteArea:
    """A stored polygon. Vertices are image-relative ``{"x", "y"}`` dicts."""

    key: str
    name: str
    vertices: List[Dict[str, float]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "areaName": self.name,
            "vertices": [dict(v) for v in self.vertices],
            "vertexCount": len(self.vertices),
        }

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "RemoteArea":
        return cls(
            key=key,
            name=data.get("areaName", ""),
            vertices=[{"x": v["x"], "y": v["y"]} for v in data.get("vertices", [])],
        )


class RemoteStore(ABC):
    """
    Abstract remote document store.

    Every operation may raise :class:`RemoteUnavailable` or
    :class:`PermissionDenied`.
    """

    # Project metadata

    @abstractmethod
    async def get_project_metadata(self, project_id: str) -> Optional[ProjectMetadata]:
        """Metadata for a project, or None if it was never created."""

    @abstractmethod
    async def create_project_metadata(
        self, project_id: str, name: str, image_width: int, image_height: int
    ) -> None:
        """Create the project record with zeroed counters."""

    @abstractmethod
    async def increment_counter(self, project_id: str, field: str, delta: int) -> None:
        """Add ``delta`` to a counter field of the project record."""

    # Points

    @abstractmethod
    async def add_point(
        self, project_id: str, label: str, x: float, y: float, order: int
    ) -> str:
        """Insert a point and return its remote key."""

    @abstractmethod
    async def find_point_by_label(
        self, project_id: str, label: str
    ) -> Optional[RemotePoint]:
        """Exact label lookup."""

    @abstractmethod
    async def update_point(
        self, project_id: str, remote_key: str, fields: Dict[str, Any]
    ) -> None:
        """Update fields (``x``, ``y``, ``index``) of a stored point."""

    @abstractmethod
    async def delete_point(self, project_id: str, remote_key: str) -> None:
        """Remove a stored point."""

    @abstractmethod
    async def list_points(self, project_id: str) -> List[RemotePoint]:
        """All points, ordered by ``order`` ascending."""

    # Areas

    @abstractmethod
    async def add_area(
        self, project_id: str, name: str, vertices: List[Dict[str, float]]
    ) -> str:
        """Insert an area and return its remote key."""

    @abstractmethod
    async def update_area(
        self, project_id: str, remote_key: str, fields: Dict[str, Any]
    ) -> None:
        """Update fields (``areaName``, ``vertices``) of a stored area."""

    @abstractmethod
    async def delete_area(self, project_id: str, remote_key: str) -> None:
        """Remove a stored area."""

    @abstractmethod
    async def list_areas(self, project_id: str) -> List[RemoteArea]:
        """All areas, in no particular order."""
