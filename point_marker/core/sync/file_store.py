"""
JSON file remote store.

Directory structure:
    <base_path>/
        <project_id>/
            project.json
            points.json
            areas.json
"""

import json
import logging
from pathlib import Path

from .memory import InMemoryRemoteStore, ProjectDocuments
from .remote import PermissionDenied, RemoteUnavailable

logger = logging.getLogger(__name__)


class JsonFileRemoteStore(InMemoryRemoteStore):
    """
    Remote store keeping each project in its own directory.

    Every operation reads the project's files and every write rewrites
    them, so several processes can share a directory (last write wins).
    """

    def __init__(self, base_path: Path = None):
        """
        Initialize file store

        Args:
            base_path: Base directory for projects (default: data/projects)
        """
        super().__init__()
        if base_path is None:
            base_path = Path("data/projects")
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _project_dir(self, project_id: str) -> Path:
        if not project_id or "/" in project_id or "\\" in project_id or project_id in (".", ".."):
            raise ValueError(f"Invalid project id: {project_id!r}")
        return self.base_path / project_id

    def list_projects(self):
        """Names of the projects that have metadata."""
        return sorted(
            item.name
            for item in self.base_path.iterdir()
            if item.is_dir() and (item / "project.json").exists()
        )

    def _load(self, project_id: str) -> ProjectDocuments:
        project_dir = self._project_dir(project_id)
        try:
            return ProjectDocuments(
                metadata=self._read_json(project_dir / "project.json", None),
                points=self._read_json(project_dir / "points.json", {}),
                areas=self._read_json(project_dir / "areas.json", {}),
            )
        except PermissionError as e:
            raise PermissionDenied(str(e)) from e
        except (OSError, ValueError) as e:
            raise RemoteUnavailable(str(e)) from e

    def _commit(self, project_id: str, docs: ProjectDocuments):
        project_dir = self._project_dir(project_id)
        try:
            project_dir.mkdir(parents=True, exist_ok=True)
            if docs.metadata is not None:
                self._write_json(project_dir / "project.json", docs.metadata)
            self._write_json(project_dir / "points.json", docs.points)
            self._write_json(project_dir / "areas.json", docs.areas)
        except PermissionError as e:
            raise PermissionDenied(str(e)) from e
        except OSError as e:
            raise RemoteUnavailable(str(e)) from e

    @staticmethod
    def _read_json(path: Path, default):
        if not path.exists():
            return default
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    @staticmethod
    def _write_json(path: Path, data):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
