"""
Viewport: zoom and pan state for the canvas.

Zoom and pan are purely a drawing transform. They never change point or
area coordinates; pointer positions are mapped back through
:meth:`Viewport.to_logical` instead.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from .coordinates import (
    CanvasRect,
    ViewTransform,
    canvas_to_logical,
    logical_to_canvas,
    screen_to_logical,
)
from .events import CanvasEvent, EventEmitter, EventType

logger = logging.getLogger(__name__)


class PanDirection(Enum):
    """Which part of the image to bring into view."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


# Offset delta per direction, in multiples of the pan step. Bringing the
# upper part into view moves the content down.
_PAN_DELTAS = {
    PanDirection.UP: (0, 1),
    PanDirection.DOWN: (0, -1),
    PanDirection.LEFT: (1, 0),
    PanDirection.RIGHT: (-1, 0),
}


class Viewport:
    """
    Owns the zoom scale and pan offset.

    The scale is always kept within ``[min_scale, max_scale]``. Panning
    is not bounded.
    """

    def __init__(
        self,
        canvas_width: float,
        canvas_height: float,
        zoom_step: float = 1.25,
        min_scale: float = 1.0,
        max_scale: float = 5.0,
        pan_step: float = 50,
        events: Optional[EventEmitter] = None,
    ):
        """
        Initialize viewport.

        Args:
            canvas_width: Canvas buffer width in pixels
            canvas_height: Canvas buffer height in pixels
            zoom_step: Factor applied per zoom in/out
            min_scale: Smallest allowed scale
            max_scale: Largest allowed scale
            pan_step: Offset change per pan, in pixels
            events: Emitter notified on every change
        """
        if min_scale <= 0:
            raise ValueError(f"min_scale must be positive, got {min_scale}")
        if min_scale > max_scale:
            raise ValueError(
                f"min_scale ({min_scale}) must not exceed max_scale ({max_scale})"
            )
        if zoom_step <= 1:
            raise ValueError(f"zoom_step must be greater than 1, got {zoom_step}")

        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.zoom_step = zoom_step
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.pan_step = pan_step
        self.events = events or EventEmitter()

        self.scale = self._clamp(1.0)
        self.offset_x = 0.0
        self.offset_y = 0.0

    @property
    def transform(self) -> ViewTransform:
        return ViewTransform(self.scale, self.offset_x, self.offset_y)

    @property
    def can_zoom_in(self) -> bool:
        return self.scale < self.max_scale

    @property
    def can_zoom_out(self) -> bool:
        return self.scale > self.min_scale

    def zoom_in(self) -> bool:
        """Zoom in one step around the canvas centre. Returns True if changed."""
        return self.set_scale(self.scale * self.zoom_step)

    def zoom_out(self) -> bool:
        """Zoom out one step around the canvas centre. Returns True if changed."""
        return self.set_scale(self.scale / self.zoom_step)

    def set_scale(self, scale: float) -> bool:
        """
        Set the scale, keeping the canvas centre fixed.

        Args:
            scale: Requested scale; clamped to the allowed range

        Returns:
            True if the scale changed
        """
        new_scale = self._clamp(scale)
        if new_scale == self.scale:
            return False

        cx = self.canvas_width / 2
        cy = self.canvas_height / 2
        ratio = new_scale / self.scale
        self.offset_x = cx - (cx - self.offset_x) * ratio
        self.offset_y = cy - (cy - self.offset_y) * ratio
        self.scale = new_scale

        logger.debug("Zoom changed to %.4f", self.scale)
        self._notify()
        return True

    def pan(self, direction: PanDirection, rect: Optional[CanvasRect] = None):
        """
        Move the view one pan step in ``direction``.

        ``pan_step`` is in screen pixels. With the on-screen ``rect`` of
        the canvas it is converted through the buffer/CSS size ratio;
        without it the canvas is assumed to be shown at its buffer size.
        """
        step_x = step_y = self.pan_step
        if rect is not None:
            step_x *= self.canvas_width / rect.width
            step_y *= self.canvas_height / rect.height
        dx, dy = _PAN_DELTAS[direction]
        self.offset_x += dx * step_x
        self.offset_y += dy * step_y
        self._notify()

    def reset(self):
        """Back to scale 1 (or the nearest allowed scale) with no offset."""
        self.scale = self._clamp(1.0)
        self.offset_x = 0.0
        self.offset_y = 0.0
        self._notify()

    def set_canvas_size(self, width: float, height: float):
        """Record a new buffer size; the zoom centre follows it."""
        self.canvas_width = width
        self.canvas_height = height

    def to_logical(self, x: float, y: float) -> Tuple[float, float]:
        """Canvas buffer coordinates -> logical coordinates."""
        return canvas_to_logical(x, y, self.transform)

    def to_canvas(self, x: float, y: float) -> Tuple[float, float]:
        """Logical coordinates -> canvas buffer coordinates."""
        return logical_to_canvas(x, y, self.transform)

    def screen_to_logical(
        self, screen_x: float, screen_y: float, rect: CanvasRect
    ) -> Tuple[float, float]:
        """Pointer position in page pixels -> logical coordinates."""
        return screen_to_logical(
            screen_x,
            screen_y,
            rect,
            self.canvas_width,
            self.canvas_height,
            self.transform,
        )

    def _clamp(self, scale: float) -> float:
        return max(self.min_scale, min(self.max_scale, scale))

    def _notify(self):
        self.events.emit(
            CanvasEvent(
                EventType.VIEWPORT_CHANGED,
                {
                    "scale": self.scale,
                    "offset_x": self.offset_x,
                    "offset_y": self.offset_y,
                    "can_zoom_in": self.can_zoom_in,
                    "can_zoom_out": self.can_zoom_out,
                },
            )
        )
