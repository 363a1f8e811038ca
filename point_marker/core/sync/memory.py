"""
In-memory remote store.

Keeps documents in dictionaries, mirroring a document database with a
``projects`` collection and ``points``/``areas`` sub-collections. Used
by tests and as the base for :class:`JsonFileRemoteStore`.
"""

import copy
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .remote import (
    ProjectMetadata,
    RemoteArea,
    RemotePoint,
    RemoteStore,
    RemoteUnavailable,
)

logger = logging.getLogger(__name__)


def new_key() -> str:
    """Random document key."""
    return uuid.uuid4().hex[:20]


@dataclass
class ProjectDocuments:
    """Everything stored for one project."""

    metadata: Optional[Dict[str, Any]] = None
    points: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    areas: Dict[str, Dict[str, Any]] = field(default_factory=dict)


class InMemoryRemoteStore(RemoteStore):
    """
    Remote store backed by dictionaries.

    Subclasses persist documents by overriding :meth:`_load` and
    :meth:`_commit`.
    """

    def __init__(self):
        self._projects: Dict[str, ProjectDocuments] = {}

    def _load(self, project_id: str) -> ProjectDocuments:
        if project_id not in self._projects:
            self._projects[project_id] = ProjectDocuments()
        return self._projects[project_id]

    def _commit(self, project_id: str, docs: ProjectDocuments):
        self._projects[project_id] = docs

    # Project metadata

    async def get_project_metadata(self, project_id: str) -> Optional[ProjectMetadata]:
        docs = self._load(project_id)
        if docs.metadata is None:
            return None
        return ProjectMetadata.from_dict(docs.metadata)

    async def create_project_metadata(
        self, project_id: str, name: str, image_width: int, image_height: int
    ) -> None:
        docs = self._load(project_id)
        docs.metadata = ProjectMetadata(
            project_name=name or "Untitled Project",
            image_name=f"{project_id}.png",
            image_width=image_width,
            image_height=image_height,
        ).to_dict()
        self._commit(project_id, docs)
        logger.debug("Created project metadata for %s", project_id)

    async def increment_counter(self, project_id: str, field: str, delta: int) -> None:
        docs = self._load(project_id)
        if docs.metadata is None:
            raise RemoteUnavailable(f"Project {project_id} has no metadata")
        docs.metadata[field] = docs.metadata.get(field, 0) + delta
        self._commit(project_id, docs)

    # Points

    async def add_point(
        self, project_id: str, label: str, x: float, y: float, order: int
    ) -> str:
        if label and label.strip():
            existing = await self.find_point_by_label(project_id, label)
            if existing is not None:
                logger.debug("Point %r already stored as %s", label, existing.key)
                return existing.key

        docs = self._load(project_id)
        key = new_key()
        docs.points[key] = RemotePoint(key, label or "", x, y, order).to_dict()
        self._commit(project_id, docs)
        return key

    async def find_point_by_label(
        self, project_id: str, label: str
    ) -> Optional[RemotePoint]:
        for key, data in self._load(project_id).points.items():
            if data.get("id") == label:
                return RemotePoint.from_dict(key, data)
        return None

    async def update_point(
        self, project_id: str, remote_key: str, fields: Dict[str, Any]
    ) -> None:
        docs = self._load(project_id)
        if remote_key not in docs.points:
            raise RemoteUnavailable(f"Point {remote_key} not found in {project_id}")
        docs.points[remote_key].update(copy.deepcopy(fields))
        self._commit(project_id, docs)

    async def delete_point(self, project_id: str, remote_key: str) -> None:
        docs = self._load(project_id)
        docs.points.pop(remote_key, None)
        self._commit(project_id, docs)

    async def list_points(self, project_id: str) -> List[RemotePoint]:
        points = [
            RemotePoint.from_dict(key, data)
            for key, data in self._load(project_id).points.items()
        ]
        return sorted(points, key=lambda p: p.order)

    # Areas

    async def add_area(
        self, project_id: str, name: str, vertices: List[Dict[str, float]]
    ) -> str:
        docs = self._load(project_id)
        key = new_key()
        docs.areas[key] = RemoteArea(key, name or "Unnamed Area", vertices).to_dict()
        self._commit(project_id, docs)
        return key

    async def update_area(
        self, project_id: str, remote_key: str, fields: Dict[str, Any]
    ) -> None:
        docs = self._load(project_id)
        if remote_key not in docs.areas:
            raise RemoteUnavailable(f"Area {remote_key} not found in {project_id}")
        fields = copy.deepcopy(fields)
        if "vertices" in fields:
            fields["vertexCount"] = len(fields["vertices"])
        docs.areas[remote_key].update(fields)
        self._commit(project_id, docs)

    async def delete_area(self, project_id: str, remote_key: str) -> None:
        docs = self._load(project_id)
        docs.areas.pop(remote_key, None)
        self._commit(project_id, docs)

    async def list_areas(self, project_id: str) -> List[RemoteArea]:
        return [
            RemoteArea.from_dict(key, data)
            for key, data in self._load(project_id).areas.items()
        ]
