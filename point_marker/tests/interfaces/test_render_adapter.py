"""Tests for the OpenCV render adapter."""

import numpy as np
import pytest
from unittest.mock import Mock

from point_marker.core.canvas import Area, EditMode, Point, Vertex
from point_marker.interfaces import RenderAdapter, RenderOptions, draw_overlay
from point_marker.interfaces.render_adapter import apply_view, area_colors
from point_marker.core.canvas.coordinates import ViewTransform


@pytest.fixture
def blank():
    return np.zeros((100, 100, 3), dtype=np.uint8)


class TestDrawOverlay:
    def test_point_is_drawn(self, blank):
        vis = draw_overlay(blank, [Point(50, 50, "A")], [])
        assert vis[50, 50].any()
        assert not blank.any()

    def test_area_is_filled(self, blank):
        area = Area("Z", [Vertex(10, 10), Vertex(90, 10), Vertex(90, 90), Vertex(10, 90)])
        vis = draw_overlay(blank, [], [area], RenderOptions(fill_alpha=0.5))
        assert vis[50, 50].any()
        assert not vis[95, 95].any()

    def test_transform_is_applied(self, blank):
        options = RenderOptions(scale=2.0, offset_x=-50, offset_y=-50)
        vis = draw_overlay(blank, [Point(40, 40, "A")], [], options)
        # 40 * 2 - 50 = 30
        assert vis[30, 30].any()
        assert not vis[40, 40].any()

    def test_unfinished_areas(self, blank):
        areas = [Area("empty"), Area("line", [Vertex(10, 10), Vertex(80, 10)])]
        vis = draw_overlay(blank, [], areas, RenderOptions(selected_area_index=1))
        assert vis[10, 50].any()


def test_area_colors_are_distinct():
    colors = area_colors(4)
    assert len(colors) == 4
    assert len(set(colors)) == 4
    assert all(0 <= c <= 255 for color in colors for c in color)


def test_apply_view_returns_canvas_size():
    image = np.full((50, 40, 3), 255, dtype=np.uint8)
    frame = apply_view(image, (80, 60), ViewTransform())
    assert frame.shape == (60, 80, 3)


class TestRenderAdapter:
    def test_callback_receives_render_payload(self, local_session):
        callback = Mock()
        RenderAdapter(local_session, draw_callback=callback, point_size=3)

        local_session.set_mode(EditMode.AREA)
        local_session.add_area("Garden")

        points, areas, options = callback.call_args[0]
        assert areas[0].area_name == "Garden"
        assert options.selected_area_index == 0
        assert options.is_area_mode
        assert options.point_size == 3

    def test_detach(self, local_session):
        callback = Mock()
        adapter = RenderAdapter(local_session, draw_callback=callback)
        adapter.detach()
        local_session.click(10, 10)
        callback.assert_not_called()

    def test_visualization_has_canvas_size(self, local_session):
        local_session.click(100, 100)
        adapter = RenderAdapter(local_session)
        frame = adapter.get_visualization(np.zeros((30, 40, 3), dtype=np.uint8))
        assert frame.shape == (600, 800, 3)
        assert frame[100, 100].any()
