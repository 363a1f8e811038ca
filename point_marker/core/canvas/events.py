"""
Event system for the annotation canvas.

The core never touches display elements. Rendering, label popups and
dialogs subscribe to these events instead.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, DefaultDict, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events emitted by the canvas core."""

    # Point events
    POINTS_CHANGED = "points_changed"
    POINT_COUNT_CHANGED = "point_count_changed"
    POINT_FOCUS_REQUESTED = "point_focus_requested"
    DUPLICATE_LABEL = "duplicate_label"

    # Area events
    AREAS_CHANGED = "areas_changed"
    AREA_LIST_CHANGED = "area_list_changed"
    AREA_SELECTION_CHANGED = "area_selection_changed"
    AREA_INFO_CHANGED = "area_info_changed"
    VERTEX_COUNT_CHANGED = "vertex_count_changed"
    NO_AREA_SELECTED = "no_area_selected"

    # View events
    VIEWPORT_CHANGED = "viewport_changed"
    CANVAS_RESIZED = "canvas_resized"
    MODE_CHANGED = "mode_changed"

    # Remote events
    PROJECT_LOADED = "project_loaded"

    # Everything a renderer needs in one payload
    STATE_CHANGED = "state_changed"


@dataclass
class CanvasEvent:
    """Event that occurs on the canvas."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


Listener = Callable[[CanvasEvent], None]


class EventEmitter:
    """
    Fans canvas events out to listeners.

    Listeners are called synchronously, in subscription order. A listener
    that raises is logged and the remaining listeners still run.
    """

    def __init__(self):
        self._listeners: DefaultDict[EventType, List[Listener]] = defaultdict(list)

    def on(self, event_type: EventType, callback: Listener):
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Listener) -> bool:
        """Unsubscribe; returns False if ``callback`` was not listening."""
        listeners = self._listeners.get(event_type, [])
        if callback not in listeners:
            return False
        listeners.remove(callback)
        return True

    def emit(self, event: CanvasEvent):
        # snapshot: a listener may unsubscribe while it runs
        for callback in list(self._listeners.get(event.event_type, ())):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Listener %r failed on %s", callback, event.event_type.value
                )
