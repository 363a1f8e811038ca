"""
Canvas session management.

Wires the store, viewport, hit testing, dragging and remote sync into
one object driven by pointer and input events. UI-agnostic: pointer
positions arrive as logical coordinates (see
:meth:`CanvasSession.screen_to_logical`) and everything going back up is
an event.
"""

import asyncio
import logging
from dataclasses import dataclass
from gettext import gettext as _
from typing import TYPE_CHECKING, Any, Callable, Coroutine, List, Optional, Set

from ..sync.remote import RemoteStore
from .coordinates import CanvasRect
from .drag import DRAG_THRESHOLD, DragController
from .events import CanvasEvent, EventEmitter, EventType
from .hit_test import POINT_HIT_RADIUS, VERTEX_HIT_RADIUS, find_object_at, find_vertex_at
from .resize import ResizeHandler
from .state import Area, DragResult, EditMode, HitResult, ObjectKind, Point
from .store import AnnotationStore, LabelUpdate
from .viewport import PanDirection, Viewport

if TYPE_CHECKING:
    from ..sync.reconciler import LoadResult, SyncReconciler

logger = logging.getLogger(__name__)

Scheduler = Callable[[Coroutine], Any]


@dataclass
class RenderState:
    """Everything a renderer needs for one frame."""

    points: List[Point]
    areas: List[Area]
    selected_area_index: int
    is_area_mode: bool
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


class CanvasSession:
    """
    Manages the state and interaction logic of one annotation canvas.

    This class handles:
    - Edit mode
    - Click vs. drag disambiguation
    - Point labels and area editing
    - Zoom, pan and resize
    - Dispatching remote sync calls

    Sync calls triggered by edits are fire-and-forget: inside a running
    event loop they become tasks (see :meth:`wait_for_sync`), otherwise
    they run to completion before the method returns.
    """

    def __init__(
        self,
        canvas_width: float,
        canvas_height: float,
        remote: Optional[RemoteStore] = None,
        zoom_step: float = 1.25,
        min_scale: float = 1.0,
        max_scale: float = 5.0,
        pan_step: float = 50,
        vertex_radius: float = VERTEX_HIT_RADIUS,
        point_radius: float = POINT_HIT_RADIUS,
        drag_threshold: float = DRAG_THRESHOLD,
        label_max_length: int = 4,
        delete_tolerance: float = 1.0,
        debounce_seconds: float = 0.1,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize canvas session.

        Args:
            canvas_width: Canvas buffer width in pixels
            canvas_height: Canvas buffer height in pixels
            remote: Remote store to keep in sync; None disables sync
            scheduler: Called with each sync coroutine instead of the
                default task/blocking dispatch
        """
        self.events = EventEmitter()
        self.store = AnnotationStore(self.events, label_max_length=label_max_length)
        self.viewport = Viewport(
            canvas_width,
            canvas_height,
            zoom_step=zoom_step,
            min_scale=min_scale,
            max_scale=max_scale,
            pan_step=pan_step,
            events=self.events,
        )
        self.drag = DragController(self.store, threshold=drag_threshold)
        self.resizer = ResizeHandler(
            self.store, self.viewport, debounce_seconds=debounce_seconds
        )
        self.reconciler: Optional["SyncReconciler"] = None
        if remote is not None:
            # the sync package imports this one
            from ..sync.reconciler import SyncReconciler

            self.reconciler = SyncReconciler(
                remote,
                self.store,
                lambda: (self.viewport.canvas_width, self.viewport.canvas_height),
                delete_tolerance=delete_tolerance,
            )

        self.vertex_radius = vertex_radius
        self.point_radius = point_radius
        self.mode = EditMode.POINT
        self.has_image = False

        self._scheduler = scheduler
        self._pending_syncs: Set[asyncio.Task] = set()
        self._suppress_click = False

        for event_type in (
            EventType.POINTS_CHANGED,
            EventType.AREAS_CHANGED,
            EventType.VIEWPORT_CHANGED,
            EventType.CANVAS_RESIZED,
            EventType.MODE_CHANGED,
        ):
            self.events.on(event_type, self._emit_state)

    @classmethod
    def from_config(
        cls,
        cfg,
        canvas_width: float,
        canvas_height: float,
        remote: Optional[RemoteStore] = None,
        **kwargs,
    ) -> "CanvasSession":
        """Build a session from a configuration tree (see ``point_marker.config``)."""
        return cls(
            canvas_width,
            canvas_height,
            remote=remote,
            zoom_step=cfg.viewport.zoom_step,
            min_scale=cfg.viewport.min_scale,
            max_scale=cfg.viewport.max_scale,
            pan_step=cfg.viewport.pan_step,
            vertex_radius=cfg.hit_test.vertex_radius,
            point_radius=cfg.hit_test.point_radius,
            drag_threshold=cfg.drag.threshold,
            label_max_length=cfg.labels.max_length,
            delete_tolerance=cfg.sync.delete_tolerance,
            debounce_seconds=cfg.resize.debounce_seconds,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Image and mode
    # ------------------------------------------------------------------

    def set_image(self, project_id: str, image_width: int, image_height: int):
        """
        Start annotating an image.

        Args:
            project_id: Remote project key, derived from the image name
            image_width: Native image width
            image_height: Native image height
        """
        self.has_image = True
        self.viewport.reset()
        self.set_mode(EditMode.POINT)
        if self.reconciler is not None:
            self.reconciler.set_image(project_id, image_width, image_height)
        logger.info("Image %s loaded (%dx%d)", project_id, image_width, image_height)

    async def open_image(
        self,
        project_id: str,
        image_width: int,
        image_height: int,
        confirm: Optional[Callable[[], bool]] = None,
    ) -> "LoadResult":
        """Start annotating an image and pull its remote annotations."""
        self.set_image(project_id, image_width, image_height)
        return await self.load_remote(confirm)

    async def load_remote(self, confirm: Optional[Callable[[], bool]] = None) -> "LoadResult":
        """
        Replace local data with the remote project.

        Args:
            confirm: Asked before non-empty local data is overwritten
        """
        if self.reconciler is None:
            from ..sync.reconciler import LoadResult

            return LoadResult(failed=True)
        return await self.reconciler.load(confirm)

    def set_mode(self, mode: EditMode):
        if self.mode is mode:
            return
        self.mode = mode
        self.events.emit(CanvasEvent(EventType.MODE_CHANGED, {"mode": mode}))

    # ------------------------------------------------------------------
    # Pointer events (logical coordinates)
    # ------------------------------------------------------------------

    def screen_to_logical(self, screen_x: float, screen_y: float, rect: CanvasRect):
        """Map a pointer position in page pixels to logical coordinates."""
        return self.viewport.screen_to_logical(screen_x, screen_y, rect)

    def find_object_at(self, x: float, y: float) -> Optional[HitResult]:
        return find_object_at(
            self.store,
            x,
            y,
            self.mode,
            vertex_radius=self.vertex_radius,
            point_radius=self.point_radius,
        )

    def pointer_down(self, x: float, y: float) -> bool:
        """Returns True if a drag was armed."""
        if not self.has_image:
            return False
        return self.drag.begin(self.find_object_at(x, y), x, y, self.mode)

    def pointer_move(self, x: float, y: float) -> bool:
        """Returns True if a dragged object moved."""
        if not self.has_image:
            return False
        if self.drag.update(x, y):
            self._emit_state()
            return True
        return False

    def pointer_up(self) -> DragResult:
        """
        End a drag and push the final position to the remote store.

        Every release of a grabbed object is synced. Only a move past the
        threshold suppresses the click that follows the release.
        """
        result = self.drag.end()
        if not result.was_dragging:
            return result

        self._suppress_click = result.has_moved
        if result.kind is ObjectKind.POINT:
            self._sync_point(result.index)
        else:
            self._sync_selected_area()
        return result

    def click(self, x: float, y: float) -> Optional[HitResult]:
        """
        Handle a click: focus an existing object or create a new one.

        Returns:
            The object that was clicked, if any
        """
        if self._suppress_click:
            self._suppress_click = False
            return None
        if not self.has_image or self.drag.is_active:
            return None

        hit = self.find_object_at(x, y)
        if hit is not None:
            if hit.kind is ObjectKind.POINT and self.mode is EditMode.POINT:
                self._request_focus(hit.index)
            return hit

        if self.mode is EditMode.AREA:
            if self.store.add_vertex(x, y):
                self._sync_selected_area()
        else:
            self.store.remove_trailing_unlabeled_points()
            self.store.add_point(x, y)
            self._request_focus(self.store.point_count - 1)
        return None

    def context_click(self, x: float, y: float) -> bool:
        """Remove the selected area's vertex under the pointer (area mode only)."""
        if not self.has_image or self.mode is not EditMode.AREA:
            return False
        hit = find_vertex_at(self.store, x, y, self.vertex_radius)
        if hit is None:
            return False
        if self.store.remove_vertex(hit.index):
            self._sync_selected_area()
            return True
        return False

    # ------------------------------------------------------------------
    # Point labels
    # ------------------------------------------------------------------

    def edit_point_label(self, position: int, raw_label: str) -> LabelUpdate:
        """Label text changed while typing. Nothing is formatted or synced."""
        return self.store.update_point_label(position, raw_label, is_final=False)

    def commit_point_label(self, position: int, raw_label: str) -> Optional[LabelUpdate]:
        """
        Label input lost focus.

        A blank label removes the point here and, by position, remotely.
        Otherwise the formatted label is written and, unless it clashes
        with another point's label, synced.

        Returns:
            The label update, or None if the point was removed
        """
        if not raw_label or not raw_label.strip():
            point = self.store.get_point(position)
            record = None
            if self.reconciler is not None:
                record = self.reconciler.locate(point.x, point.y)
            self.store.remove_point(position)
            if record is not None:
                self._dispatch(self.reconciler.delete_point_near(record))
            return None

        update = self.store.update_point_label(position, raw_label, is_final=True)
        if not update.is_duplicate:
            self._sync_point(position)
        return update

    def cancel_point_label(self, position: int) -> bool:
        """Escape in the label input removes the point (point mode only, local only)."""
        if self.mode is not EditMode.POINT:
            return False
        self.store.remove_point(position)
        return True

    # ------------------------------------------------------------------
    # Areas
    # ------------------------------------------------------------------

    def add_area(self, name: Optional[str] = None) -> int:
        """Add an empty area, select it and return its index."""
        if name is None:
            name = _("Area {number}").format(number=len(self.store.areas) + 1)
        index = self.store.add_area(Area(area_name=name))
        self.store.select_area(index)
        return index

    def select_area(self, area_index: int):
        self.store.select_area(area_index)

    def rename_selected_area(self, name: str) -> bool:
        return self.store.update_area_name(name)

    def commit_area_name(self):
        """Area name input lost focus."""
        self._sync_selected_area()

    async def delete_selected_area(self, confirm: Optional[Callable[[Area], bool]] = None) -> bool:
        """
        Delete the selected area locally and remotely.

        Args:
            confirm: Asked with the area before deleting; None deletes
                without asking

        Returns:
            True if the area was deleted
        """
        index = self.store.selected_area_index
        area = self.store.selected_area
        if area is None:
            self.store.warn_no_area_selected()
            return False
        if confirm is not None and not confirm(area):
            return False

        if self.reconciler is not None:
            await self.reconciler.delete_area(area)
        self.store.delete_area(index)
        return True

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def zoom_in(self) -> bool:
        return self.viewport.zoom_in()

    def zoom_out(self) -> bool:
        return self.viewport.zoom_out()

    def pan(self, direction: PanDirection, rect: Optional[CanvasRect] = None):
        self.viewport.pan(direction, rect)

    def reset_view(self):
        self.viewport.reset()

    def resize(self, width: float, height: float) -> bool:
        """Apply a new canvas buffer size now."""
        return self.resizer.handle_resize(width, height)

    def request_resize(self, width: float, height: float):
        """Debounced variant of :meth:`resize` for layout event bursts."""
        if not self.has_image:
            return
        self.resizer.request_resize(width, height)

    def render_state(self) -> RenderState:
        return RenderState(
            points=list(self.store.points),
            areas=list(self.store.areas),
            selected_area_index=self.store.selected_area_index,
            is_area_mode=self.mode is EditMode.AREA,
            scale=self.viewport.scale,
            offset_x=self.viewport.offset_x,
            offset_y=self.viewport.offset_y,
        )

    # ------------------------------------------------------------------
    # Sync dispatch
    # ------------------------------------------------------------------

    async def wait_for_sync(self):
        """Wait until every sync task started so far has finished."""
        while self._pending_syncs:
            await asyncio.gather(*list(self._pending_syncs))

    @property
    def pending_sync_count(self) -> int:
        return len(self._pending_syncs)

    # records are captured before dispatch; queued writes send them as-is

    def _sync_point(self, position: int):
        if self.reconciler is None:
            return
        record = self.reconciler.snapshot_point(position)
        if record is not None:
            self._dispatch(self.reconciler.write_point(record))

    def _sync_selected_area(self):
        if self.reconciler is None:
            return
        record = self.reconciler.snapshot_area(self.store.selected_area_index)
        if record is not None:
            self._dispatch(self.reconciler.write_area(record))

    def _dispatch(self, coro: Coroutine):
        if self._scheduler is not None:
            self._scheduler(coro)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return
        task = loop.create_task(coro)
        self._pending_syncs.add(task)
        task.add_done_callback(self._pending_syncs.discard)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _request_focus(self, position: int):
        self.events.emit(
            CanvasEvent(EventType.POINT_FOCUS_REQUESTED, {"index": position})
        )

    def _emit_state(self, event: Optional[CanvasEvent] = None):
        self.events.emit(
            CanvasEvent(EventType.STATE_CHANGED, {"state": self.render_state()})
        )
