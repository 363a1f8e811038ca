"""
Canvas resize handling.

When the canvas buffer changes size every point and vertex is rescaled
so it stays on the same spot of the image. Layout changes come in
bursts, so requests are debounced and only the last one is applied.
"""

import asyncio
import logging
from typing import Optional, Tuple

from .events import CanvasEvent, EventType
from .store import AnnotationStore
from .viewport import Viewport

logger = logging.getLogger(__name__)


class ResizeHandler:
    """Applies canvas size changes to the store and the viewport."""

    def __init__(
        self,
        store: AnnotationStore,
        viewport: Viewport,
        debounce_seconds: float = 0.1,
    ):
        self.store = store
        self.viewport = viewport
        self.debounce_seconds = debounce_seconds

        self._pending: Optional[asyncio.TimerHandle] = None
        self._pending_size: Optional[Tuple[float, float]] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def handle_resize(self, new_width: float, new_height: float) -> bool:
        """
        Apply a new canvas buffer size immediately.

        Args:
            new_width: New buffer width in pixels
            new_height: New buffer height in pixels

        Returns:
            True if coordinates were rescaled
        """
        old_width = self.viewport.canvas_width
        old_height = self.viewport.canvas_height
        if old_width == new_width and old_height == new_height:
            return False
        if new_width <= 0 or new_height <= 0:
            raise ValueError(f"Invalid canvas size {new_width}x{new_height}")

        self.store.scale_coordinates(new_width / old_width, new_height / old_height)
        self.viewport.set_canvas_size(new_width, new_height)

        logger.debug(
            "Canvas resized from %sx%s to %sx%s",
            old_width,
            old_height,
            new_width,
            new_height,
        )
        self.store.events.emit(
            CanvasEvent(
                EventType.CANVAS_RESIZED,
                {
                    "old_size": (old_width, old_height),
                    "new_size": (new_width, new_height),
                },
            )
        )
        return True

    def request_resize(self, new_width: float, new_height: float):
        """
        Debounced resize.

        Inside a running event loop the resize is applied once
        ``debounce_seconds`` pass without another request. Without a
        loop it is applied immediately.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.handle_resize(new_width, new_height)
            return

        self.cancel_pending()
        self._pending_size = (new_width, new_height)
        self._pending = loop.call_later(self.debounce_seconds, self._fire)

    def flush(self) -> bool:
        """Apply a pending resize now."""
        if self._pending is None:
            return False
        self._pending.cancel()
        return self._fire()

    def cancel_pending(self):
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None
        self._pending_size = None

    def _fire(self) -> bool:
        size = self._pending_size
        self._pending = None
        self._pending_size = None
        if size is None:
            return False
        return self.handle_resize(*size)
