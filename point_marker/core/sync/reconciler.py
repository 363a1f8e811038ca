"""
Keeps the annotation store and the remote store consistent.

Coordinates are converted to the image-relative frame before every
remote write and back to the canvas frame after every read, so remote
data does not depend on the window layout.

Identity rules:
    points  the label is the key; deletion matches by position
    areas   the remote key is cached on the area after its first write

Writes are split in two steps. ``snapshot_*``/``locate`` read the store
and the canvas size synchronously and return a record; ``write_*`` and
``delete_point_near`` only send that record. Edits made after the
snapshot do not change what is sent.

Remote failures are logged and swallowed here. Local state stays the
source of truth until the next successful write. Concurrent calls are
not serialized: whichever write completes last wins.
"""

import logging
from dataclasses import dataclass, field
from gettext import gettext as _
from typing import Callable, Dict, List, Optional, Tuple

from ..canvas.coordinates import canvas_to_image, image_to_canvas
from ..canvas.events import CanvasEvent, EventType
from ..canvas.state import Area, Vertex
from ..canvas.store import AnnotationStore
from .remote import AREA_COUNT, POINT_COUNT, RemoteError, RemoteStore

logger = logging.getLogger(__name__)

DELETE_TOLERANCE = 1.0


@dataclass
class ImageContext:
    """The image the annotations belong to."""

    project_id: str
    image_width: int
    image_height: int


@dataclass
class PointRecord:
    """A point as it is written remotely, in image-relative space."""

    image: ImageContext
    x: float
    y: float
    label: str = ""
    order: int = 0


@dataclass
class AreaRecord:
    """An area as it is written remotely, in image-relative space."""

    image: ImageContext
    area: Area
    name: str
    vertices: List[Dict[str, float]] = field(default_factory=list)


@dataclass
class LoadResult:
    """Outcome of :meth:`SyncReconciler.load`."""

    points: int = 0
    areas: int = 0
    cancelled: bool = False
    failed: bool = False


class SyncReconciler:
    """
    Translates store mutations to remote store calls and back.

    All public coroutines return a success flag instead of raising on
    remote failure.
    """

    def __init__(
        self,
        remote: RemoteStore,
        store: AnnotationStore,
        canvas_size: Callable[[], Tuple[float, float]],
        delete_tolerance: float = DELETE_TOLERANCE,
    ):
        """
        Initialize reconciler.

        Args:
            remote: Remote document store
            store: Local annotation data
            canvas_size: Returns the current canvas buffer (width, height)
            delete_tolerance: Per-axis tolerance, in image pixels, for
                matching a point to delete
        """
        self.remote = remote
        self.store = store
        self.canvas_size = canvas_size
        self.delete_tolerance = delete_tolerance
        self.image: Optional[ImageContext] = None

    def set_image(self, project_id: str, image_width: int, image_height: int):
        """Switch to the project of a newly loaded image."""
        self.image = ImageContext(project_id, image_width, image_height)

    @property
    def project_id(self) -> Optional[str]:
        return self.image.project_id if self.image else None

    # ------------------------------------------------------------------
    # Coordinate frames
    # ------------------------------------------------------------------

    def to_image(self, x: float, y: float) -> Tuple[float, float]:
        canvas_width, canvas_height = self.canvas_size()
        return canvas_to_image(
            x,
            y,
            canvas_width,
            canvas_height,
            self.image.image_width,
            self.image.image_height,
        )

    def to_canvas(self, x: float, y: float) -> Tuple[float, float]:
        canvas_width, canvas_height = self.canvas_size()
        return image_to_canvas(
            x,
            y,
            canvas_width,
            canvas_height,
            self.image.image_width,
            self.image.image_height,
        )

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    def snapshot_point(self, position: int) -> Optional[PointRecord]:
        """
        Capture the point at ``position`` for writing.

        Returns:
            The record to write, or None for an unknown position, an
            unlabeled point or a reconciler without an image
        """
        if self.image is None:
            return None
        if not 0 <= position < self.store.point_count:
            return None

        point = self.store.points[position]
        if not point.is_labeled:
            return None

        x, y = self.to_image(point.x, point.y)
        return PointRecord(self.image, x, y, label=point.label, order=point.index)

    def locate(self, x: float, y: float) -> Optional[PointRecord]:
        """Capture a canvas position for :meth:`delete_point_near`."""
        if self.image is None:
            return None
        image_x, image_y = self.to_image(x, y)
        return PointRecord(self.image, image_x, image_y)

    async def upsert_point(self, position: int) -> bool:
        """Snapshot and write the point at ``position``."""
        record = self.snapshot_point(position)
        if record is None:
            return False
        return await self.write_point(record)

    async def write_point(self, record: PointRecord) -> bool:
        """
        Write a point's position under its label.

        Updates the stored point with the same label, or inserts a new
        one.

        Returns:
            True if the remote write succeeded
        """
        image = record.image
        project_id = image.project_id
        label = record.label

        try:
            await self._ensure_project(image)
            existing = await self.remote.find_point_by_label(project_id, label)
            if existing is not None:
                await self.remote.update_point(
                    project_id,
                    existing.key,
                    {"x": record.x, "y": record.y, "index": record.order},
                )
                logger.debug("Updated remote point %r", label)
            else:
                await self.remote.add_point(
                    project_id, label, record.x, record.y, record.order
                )
                logger.debug("Added remote point %r", label)
                await self._bump(project_id, POINT_COUNT, 1)
        except RemoteError as e:
            logger.error("Point sync failed for %r in %s: %s", label, project_id, e)
            return False
        return True

    async def delete_point_at(self, x: float, y: float) -> bool:
        """Delete the stored point at a canvas position."""
        record = self.locate(x, y)
        if record is None:
            return False
        return await self.delete_point_near(record)

    async def delete_point_near(self, record: PointRecord) -> bool:
        """
        Delete the stored point at a captured position.

        Points carry no remote key, so the first stored point within the
        tolerance on both axes is deleted. Two points closer than the
        tolerance cannot be told apart.

        Returns:
            True if a stored point was deleted
        """
        project_id = record.image.project_id

        try:
            for remote_point in await self.remote.list_points(project_id):
                if (
                    abs(remote_point.x - record.x) <= self.delete_tolerance
                    and abs(remote_point.y - record.y) <= self.delete_tolerance
                ):
                    await self.remote.delete_point(project_id, remote_point.key)
                    logger.debug("Deleted remote point %r", remote_point.label)
                    await self._bump(project_id, POINT_COUNT, -1)
                    return True
        except RemoteError as e:
            logger.error(
                "Point delete sync failed at (%s, %s) in %s: %s",
                record.x,
                record.y,
                project_id,
                e,
            )
            return False

        logger.debug("No remote point near (%s, %s)", record.x, record.y)
        return False

    # ------------------------------------------------------------------
    # Areas
    # ------------------------------------------------------------------

    def snapshot_area(self, area_index: int) -> Optional[AreaRecord]:
        """
        Capture an area's name and vertices for writing.

        Areas without a name are skipped.
        """
        if self.image is None:
            return None
        if not 0 <= area_index < len(self.store.areas):
            return None

        area = self.store.areas[area_index]
        if not area.area_name or not area.area_name.strip():
            return None

        vertices = []
        for vertex in area.vertices:
            x, y = self.to_image(vertex.x, vertex.y)
            vertices.append({"x": x, "y": y})
        return AreaRecord(self.image, area, area.area_name, vertices)

    async def upsert_area(self, area_index: int) -> bool:
        """Snapshot and write the area at ``area_index``."""
        record = self.snapshot_area(area_index)
        if record is None:
            return False
        return await self.write_area(record)

    async def write_area(self, record: AreaRecord) -> bool:
        """
        Write an area with its full vertex list.

        The first write stores the returned remote key on the area; later
        writes update that record.

        Returns:
            True if the remote write succeeded
        """
        area = record.area
        project_id = record.image.project_id
        name = record.name

        try:
            if area.remote_key:
                await self.remote.update_area(
                    project_id,
                    area.remote_key,
                    {"areaName": name, "vertices": record.vertices},
                )
                logger.debug("Updated remote area %r", name)
            else:
                await self._ensure_project(record.image)
                area.remote_key = await self.remote.add_area(
                    project_id, name, record.vertices
                )
                logger.debug("Added remote area %r as %s", name, area.remote_key)
                await self._bump(project_id, AREA_COUNT, 1)
        except RemoteError as e:
            logger.error("Area sync failed for %r in %s: %s", name, project_id, e)
            return False
        return True

    async def delete_area(self, area: Area) -> bool:
        """
        Delete an area's remote record.

        An area that was never written has no remote key and nothing is
        sent.

        Returns:
            True if the remote record was deleted
        """
        if self.image is None or not area.remote_key:
            return False

        project_id = self.image.project_id
        try:
            await self.remote.delete_area(project_id, area.remote_key)
            logger.debug("Deleted remote area %r", area.area_name)
            await self._bump(project_id, AREA_COUNT, -1)
        except RemoteError as e:
            logger.error(
                "Area delete sync failed for %r in %s: %s", area.area_name, project_id, e
            )
            return False
        return True

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------

    async def load(self, confirm: Optional[Callable[[], bool]] = None) -> LoadResult:
        """
        Replace local points and areas with the remote project.

        Args:
            confirm: Asked before local data is overwritten; loading is
                cancelled unless it returns True. Without a callback
                non-empty local data is never overwritten.

        Returns:
            Counts of loaded entities, or a cancelled/failed result
        """
        if self.image is None:
            return LoadResult(failed=True)

        project_id = self.image.project_id
        try:
            metadata = await self.remote.get_project_metadata(project_id)
            if metadata is None:
                logger.info("No remote project for %s", project_id)
                return self._loaded(LoadResult())

            if self.store.points or self.store.areas:
                if confirm is None or not confirm():
                    logger.info("Load of %s cancelled", project_id)
                    return LoadResult(cancelled=True)

            remote_points = await self.remote.list_points(project_id)
            remote_areas = await self.remote.list_areas(project_id)
        except RemoteError as e:
            logger.error("Loading %s failed: %s", project_id, e)
            return LoadResult(failed=True)

        self.store.clear()
        for remote_point in remote_points:
            x, y = self.to_canvas(remote_point.x, remote_point.y)
            self.store.add_point(x, y, remote_point.label)

        for remote_area in remote_areas:
            vertices = [Vertex(*self.to_canvas(v["x"], v["y"])) for v in remote_area.vertices]
            self.store.add_area(
                Area(
                    area_name=remote_area.name,
                    vertices=vertices,
                    remote_key=remote_area.key,
                )
            )

        result = LoadResult(points=len(remote_points), areas=len(remote_areas))
        logger.info(
            "Loaded %d points and %d areas from %s", result.points, result.areas, project_id
        )
        return self._loaded(result)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _loaded(self, result: LoadResult) -> LoadResult:
        self.store.events.emit(
            CanvasEvent(
                EventType.PROJECT_LOADED,
                {
                    "points": result.points,
                    "areas": result.areas,
                    "message": _("Loaded {points} points and {areas} areas").format(
                        points=result.points, areas=result.areas
                    ),
                },
            )
        )
        return result

    async def _ensure_project(self, image: ImageContext):
        project_id = image.project_id
        if await self.remote.get_project_metadata(project_id) is None:
            await self.remote.create_project_metadata(
                project_id, project_id, image.image_width, image.image_height
            )
            logger.info("Created remote project %s", project_id)

    async def _bump(self, project_id: str, counter: str, delta: int):
        # counters are relative deltas; a failure here leaves them stale
        try:
            await self.remote.increment_counter(project_id, counter, delta)
        except RemoteError as e:
            logger.warning("Counter update failed for %s.%s: %s", project_id, counter, e)
