"""
Render adapter for the canvas session.

Draws points and areas onto numpy images with OpenCV.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import cv2
import numpy as np

from ..core.canvas import CanvasEvent, CanvasSession, EventType
from ..core.canvas.coordinates import ViewTransform, logical_to_canvas
from ..core.canvas.session import RenderState
from ..core.canvas.state import Area, Point

POINT_COLOR = (230, 40, 40)
UNLABELED_POINT_COLOR = (160, 160, 160)
OUTLINE_COLOR = (255, 255, 255)


@dataclass
class RenderOptions:
    """How to draw one frame."""

    selected_area_index: int = -1
    is_area_mode: bool = False
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    point_size: float = 6
    selected_vertex_size: float = 6
    unselected_vertex_size: float = 4
    fill_alpha: float = 0.3
    colormap: str = "tab20"

    @property
    def transform(self) -> ViewTransform:
        return ViewTransform(self.scale, self.offset_x, self.offset_y)


def area_colors(count: int, colormap: str = "tab20") -> List[tuple]:
    """
    One RGB color per area index.

    Args:
        count: Number of areas
        colormap: Matplotlib colormap name

    Returns:
        List of (r, g, b) tuples with values in 0-255
    """
    import matplotlib.pyplot as plt

    cmap = plt.get_cmap(colormap)
    colors = []
    for idx in range(count):
        color = np.array(cmap(idx % cmap.N)[:3]) * 255
        colors.append(tuple(int(c) for c in color))
    return colors


def _to_pixels(coords, transform: ViewTransform) -> np.ndarray:
    pixels = [logical_to_canvas(x, y, transform) for x, y in coords]
    return np.round(np.array(pixels, dtype=np.float64)).astype(np.int32)


def draw_overlay(
    image: np.ndarray,
    points: Sequence[Point],
    areas: Sequence[Area],
    options: Optional[RenderOptions] = None,
) -> np.ndarray:
    """
    Draw areas and points onto a copy of a canvas-sized RGB image.

    Areas are filled translucently, outlined, and get a handle on every
    vertex; the selected area is outlined thicker with larger handles.
    Points are drawn on top with their labels.

    Args:
        image: RGB image in canvas buffer pixels
        points: Points in logical coordinates
        areas: Areas in logical coordinates
        options: Render options

    Returns:
        New image with the overlay
    """
    if options is None:
        options = RenderOptions()
    transform = options.transform
    vis = image.copy()

    colors = area_colors(len(areas), options.colormap)

    # Fills first so outlines and markers stay opaque
    fill = vis.copy()
    for area, color in zip(areas, colors):
        if area.vertex_count >= 3:
            polygon = _to_pixels([(v.x, v.y) for v in area.vertices], transform)
            cv2.fillPoly(fill, [polygon], color)
    vis = cv2.addWeighted(fill, options.fill_alpha, vis, 1 - options.fill_alpha, 0)

    for idx, (area, color) in enumerate(zip(areas, colors)):
        if not area.vertices:
            continue
        selected = idx == options.selected_area_index
        polygon = _to_pixels([(v.x, v.y) for v in area.vertices], transform)
        if len(polygon) >= 2:
            cv2.polylines(
                vis, [polygon], len(polygon) >= 3, color, 3 if selected else 1
            )
        radius = options.selected_vertex_size if selected else options.unselected_vertex_size
        for x, y in polygon:
            cv2.circle(vis, (int(x), int(y)), int(radius), color, -1)
            if selected:
                cv2.circle(vis, (int(x), int(y)), int(radius) + 1, OUTLINE_COLOR, 1)

    if points:
        pixels = _to_pixels([(p.x, p.y) for p in points], transform)
        for point, (x, y) in zip(points, pixels):
            color = POINT_COLOR if point.is_labeled else UNLABELED_POINT_COLOR
            cv2.circle(vis, (int(x), int(y)), int(options.point_size), color, -1)
            cv2.circle(
                vis, (int(x), int(y)), int(options.point_size) + 1, OUTLINE_COLOR, 1
            )
            if point.is_labeled:
                cv2.putText(
                    vis,
                    point.label,
                    (int(x + options.point_size + 2), int(y - options.point_size)),
                    cv2.FONT_HERSHEY_SIMPLEX,
                    0.5,
                    color,
                    1,
                    cv2.LINE_AA,
                )

    return vis


def apply_view(image: np.ndarray, canvas_size, transform: ViewTransform) -> np.ndarray:
    """
    Fit an image to the canvas buffer and apply zoom and pan.

    Args:
        image: Source RGB image
        canvas_size: (width, height) of the canvas buffer
        transform: Current view transform

    Returns:
        Canvas-sized image
    """
    width, height = int(canvas_size[0]), int(canvas_size[1])
    fitted = cv2.resize(image, (width, height), interpolation=cv2.INTER_LINEAR)
    matrix = np.float32(
        [
            [transform.scale, 0, transform.offset_x],
            [0, transform.scale, transform.offset_y],
        ]
    )
    return cv2.warpAffine(fitted, matrix, (width, height))


class RenderAdapter:
    """
    Adapter connecting a CanvasSession to a drawing surface.

    Forwards every state change to ``draw_callback`` as
    ``(points, areas, options)`` and renders frames on request.
    """

    def __init__(
        self,
        session: CanvasSession,
        draw_callback: Optional[Callable] = None,
        point_size: float = 6,
        selected_vertex_size: float = 6,
        unselected_vertex_size: float = 4,
        fill_alpha: float = 0.3,
    ):
        """
        Initialize adapter.

        Args:
            session: Canvas session to follow
            draw_callback: Called with ``(points, areas, options)``
            point_size: Point marker radius
            selected_vertex_size: Vertex handle radius of the selected area
            unselected_vertex_size: Vertex handle radius of other areas
            fill_alpha: Area fill opacity
        """
        self.session = session
        self.draw_callback = draw_callback
        self.point_size = point_size
        self.selected_vertex_size = selected_vertex_size
        self.unselected_vertex_size = unselected_vertex_size
        self.fill_alpha = fill_alpha

        self.session.events.on(EventType.STATE_CHANGED, self._on_state_changed)

    def detach(self):
        self.session.events.off(EventType.STATE_CHANGED, self._on_state_changed)

    def options_for(self, state: RenderState) -> RenderOptions:
        return RenderOptions(
            selected_area_index=state.selected_area_index,
            is_area_mode=state.is_area_mode,
            scale=state.scale,
            offset_x=state.offset_x,
            offset_y=state.offset_y,
            point_size=self.point_size,
            selected_vertex_size=self.selected_vertex_size,
            unselected_vertex_size=self.unselected_vertex_size,
            fill_alpha=self.fill_alpha,
        )

    def _on_state_changed(self, event: CanvasEvent):
        if self.draw_callback is None:
            return
        state = event.data["state"]
        self.draw_callback(state.points, state.areas, self.options_for(state))

    def get_visualization(self, image: np.ndarray) -> np.ndarray:
        """
        Render the current frame.

        Args:
            image: Source RGB image at any size

        Returns:
            Canvas-sized RGB frame with the overlay
        """
        state = self.session.render_state()
        options = self.options_for(state)
        viewport = self.session.viewport
        frame = apply_view(
            image, (viewport.canvas_width, viewport.canvas_height), options.transform
        )
        return draw_overlay(frame, state.points, state.areas, options)
