"""
Interfaces module - UI adapters for the canvas core.

Provides adapters that turn canvas session events into drawn frames.
"""

from .render_adapter import RenderAdapter, RenderOptions, draw_overlay

__all__ = ["RenderAdapter", "RenderOptions", "draw_overlay"]
