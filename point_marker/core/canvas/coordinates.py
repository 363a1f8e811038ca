"""
Coordinate conversions between the canvas frames.

Frames:
    screen          page pixels, where pointer events arrive
    canvas          the drawing buffer's own pixel grid
    logical         canvas with zoom/pan removed; where points and areas live
    image-relative  the loaded image's native pixel grid; used for persistence

These functions have no side effects. They only use arithmetic, so they
accept numpy arrays as well as plain floats.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ViewTransform:
    """Zoom/pan applied when drawing logical coordinates onto the canvas."""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass(frozen=True)
class CanvasRect:
    """On-screen footprint of the canvas element."""

    left: float
    top: float
    width: float
    height: float


def screen_to_canvas(
    screen_x: float,
    screen_y: float,
    rect: CanvasRect,
    buffer_width: float,
    buffer_height: float,
) -> Tuple[float, float]:
    """
    Convert a pointer position to canvas buffer pixels.

    Independent of zoom and pan.

    Args:
        screen_x: Pointer X in page pixels
        screen_y: Pointer Y in page pixels
        rect: Screen rectangle occupied by the canvas element
        buffer_width: Canvas buffer width in pixels
        buffer_height: Canvas buffer height in pixels

    Returns:
        (x, y) in canvas space
    """
    ratio_x = rect.width / buffer_width
    ratio_y = rect.height / buffer_height
    return (screen_x - rect.left) / ratio_x, (screen_y - rect.top) / ratio_y


def canvas_to_logical(
    x: float, y: float, transform: ViewTransform
) -> Tuple[float, float]:
    """Remove zoom/pan: ``logical = (canvas - offset) / scale``."""
    return (
        (x - transform.offset_x) / transform.scale,
        (y - transform.offset_y) / transform.scale,
    )


def logical_to_canvas(
    x: float, y: float, transform: ViewTransform
) -> Tuple[float, float]:
    """Apply zoom/pan: ``canvas = logical * scale + offset``."""
    return (
        x * transform.scale + transform.offset_x,
        y * transform.scale + transform.offset_y,
    )


def screen_to_logical(
    screen_x: float,
    screen_y: float,
    rect: CanvasRect,
    buffer_width: float,
    buffer_height: float,
    transform: ViewTransform,
) -> Tuple[float, float]:
    """
    Full pointer pipeline: screen -> canvas -> logical.

    This is the only conversion pointer handlers should use before hit
    testing, dragging or creating objects.
    """
    cx, cy = screen_to_canvas(screen_x, screen_y, rect, buffer_width, buffer_height)
    return canvas_to_logical(cx, cy, transform)


def canvas_to_image(
    x: float,
    y: float,
    canvas_width: float,
    canvas_height: float,
    image_width: float,
    image_height: float,
) -> Tuple[float, float]:
    """
    Convert canvas coordinates to image-relative coordinates.

    Args:
        x: X in canvas space
        y: Y in canvas space
        canvas_width: Current canvas buffer width
        canvas_height: Current canvas buffer height
        image_width: Native width of the loaded image
        image_height: Native height of the loaded image

    Returns:
        (x, y) in image-relative space
    """
    return (
        x * (image_width / canvas_width),
        y * (image_height / canvas_height),
    )


def image_to_canvas(
    x: float,
    y: float,
    canvas_width: float,
    canvas_height: float,
    image_width: float,
    image_height: float,
) -> Tuple[float, float]:
    """Inverse of :func:`canvas_to_image`."""
    return (
        x * (canvas_width / image_width),
        y * (canvas_height / image_height),
    )
