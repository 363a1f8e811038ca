"""
Core canvas module - UI-agnostic annotation canvas logic.

Points, areas, viewport, hit testing and dragging, usable from any UI
that can forward pointer events and draw what the events describe.
"""

from .events import CanvasEvent, EventEmitter, EventType
from .session import CanvasSession, RenderState
from .state import Area, EditMode, HitResult, ObjectKind, Point, Vertex
from .store import AnnotationStore, LabelUpdate
from .viewport import PanDirection, Viewport

__all__ = [
    "CanvasSession",
    "RenderState",
    "CanvasEvent",
    "EventType",
    "EventEmitter",
    "AnnotationStore",
    "LabelUpdate",
    "Viewport",
    "PanDirection",
    "EditMode",
    "ObjectKind",
    "HitResult",
    "Point",
    "Vertex",
    "Area",
]
