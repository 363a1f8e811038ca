"""Tests for AnnotationStore."""

import pytest

from point_marker.core.canvas import Area, EventType, Vertex


class TestPoints:
    def test_add_and_label(self, store):
        """A labeled point is stored under its formatted label."""
        store.add_point(10, 10)
        update = store.update_point_label(0, "AB01", is_final=True)

        assert update.label == "AB01"
        assert not update.is_duplicate
        assert len(store.points) == 1
        assert store.points[0].label == "AB01"
        assert (store.points[0].x, store.points[0].y) == (10, 10)

    def test_registration_index_is_stable(self, store):
        store.add_point(1, 1, "A")
        store.add_point(2, 2, "B")
        store.add_point(3, 3, "C")
        store.remove_point(0)
        store.add_point(4, 4, "D")
        assert [p.index for p in store.points] == [1, 2, 3]

    def test_typing_keeps_raw_text(self, store):
        store.add_point(0, 0)
        update = store.update_point_label(0, "ab-", is_final=False)
        assert update.label == "ab-"
        assert store.points[0].label == "ab-"

    def test_commit_formats_label(self, store):
        store.add_point(0, 0)
        assert store.update_point_label(0, " ａｂ-12x ", is_final=True).label == "AB12"

    def test_duplicate_is_advisory(self, store, recorder):
        """The second X1 is flagged but still written."""
        recorder.watch(EventType.DUPLICATE_LABEL)
        store.add_point(10, 10)
        store.update_point_label(0, "X1", is_final=True)
        store.add_point(50, 50)
        update = store.update_point_label(1, "x1", is_final=True)

        assert update.is_duplicate
        assert store.points[1].label == "X1"
        assert recorder.count(EventType.DUPLICATE_LABEL) == 1
        assert recorder.last(EventType.DUPLICATE_LABEL).data["index"] == 1
        assert store.duplicate_labels() == ["X1"]

    def test_relabeling_itself_is_not_a_duplicate(self, store):
        store.add_point(0, 0, "Q")
        assert not store.update_point_label(0, "q", is_final=True).is_duplicate

    def test_prune_unlabeled_points(self, store):
        store.add_point(0, 0, "A")
        store.add_point(1, 1)
        store.add_point(2, 2, "B")
        assert store.remove_trailing_unlabeled_points() == 1
        assert store.labels() == ["A", "B"]
        assert store.remove_trailing_unlabeled_points() == 0

    def test_bad_position_raises(self, store):
        with pytest.raises(IndexError):
            store.remove_point(0)
        with pytest.raises(IndexError):
            store.update_point_label(3, "A", is_final=True)

    def test_mutations_are_announced(self, store, recorder):
        recorder.watch(EventType.POINTS_CHANGED, EventType.POINT_COUNT_CHANGED)
        store.add_point(1, 2)
        store.update_point_label(0, "A", is_final=True)
        store.remove_point(0)
        assert recorder.count(EventType.POINTS_CHANGED) == 3
        assert recorder.last(EventType.POINT_COUNT_CHANGED).data["count"] == 0


class TestAreas:
    def test_vertices_in_insertion_order(self, store):
        store.add_area(Area(area_name="A"))
        store.select_area(0)
        for x, y in [(5, 5), (50, 5), (25, 50)]:
            assert store.add_vertex(x, y)

        area = store.areas[0]
        assert area.vertex_count == 3
        assert [(v.x, v.y) for v in area.vertices] == [(5, 5), (50, 5), (25, 50)]

    def test_add_vertex_needs_selection(self, store, recorder):
        recorder.watch(EventType.NO_AREA_SELECTED, EventType.AREAS_CHANGED)
        store.add_area(Area(area_name="A"))
        changes = recorder.count(EventType.AREAS_CHANGED)

        assert store.selected_area_index == -1
        assert not store.add_vertex(5, 5)
        assert store.areas[0].vertices == []
        assert recorder.count(EventType.NO_AREA_SELECTED) == 1
        assert recorder.count(EventType.AREAS_CHANGED) == changes

    def test_single_selection(self, store):
        store.add_area(Area(area_name="A"))
        store.add_area(Area(area_name="B"))
        store.select_area(0)
        store.select_area(1)
        assert [store.is_selected(i) for i in range(2)] == [False, True]
        store.select_area(-1)
        assert store.selected_area is None

    def test_select_out_of_range(self, store):
        with pytest.raises(IndexError):
            store.select_area(0)

    def test_delete_selected_area_clears_selection(self, store):
        store.add_area(Area(area_name="A"))
        store.select_area(0)
        store.delete_area(0)
        assert store.selected_area_index == -1
        assert store.areas == []

    def test_delete_earlier_area_keeps_selection(self, store):
        for name in "ABC":
            store.add_area(Area(area_name=name))
        store.select_area(2)
        store.delete_area(0)
        assert store.selected_area.area_name == "C"
        assert store.selected_area_index == 1

    def test_remove_vertex(self, store):
        store.add_area(Area(area_name="A", vertices=[Vertex(0, 0), Vertex(5, 5)]))
        store.select_area(0)
        assert store.remove_vertex(0)
        assert [(v.x, v.y) for v in store.areas[0].vertices] == [(5, 5)]
        assert not store.remove_vertex(4)

    def test_update_vertex_does_not_reorder(self, store):
        store.add_area(
            Area(area_name="A", vertices=[Vertex(0, 0), Vertex(10, 0), Vertex(10, 10)])
        )
        store.select_area(0)
        store.update_vertex(0, 20, 20)
        assert [(v.x, v.y) for v in store.areas[0].vertices][0] == (20, 20)

    def test_reorder_untangles_bowtie(self, store):
        # square drawn as a bow tie
        store.add_area(
            Area(
                area_name="A",
                vertices=[Vertex(0, 0), Vertex(10, 10), Vertex(10, 0), Vertex(0, 10)],
            )
        )
        store.reorder_vertices(0)
        assert [(v.x, v.y) for v in store.areas[0].vertices] == [
            (0, 0),
            (10, 0),
            (10, 10),
            (0, 10),
        ]

    def test_rename_selected_area(self, store, recorder):
        recorder.watch(EventType.AREA_INFO_CHANGED)
        store.add_area(Area(area_name="A"))
        assert not store.update_area_name("nothing selected")
        store.select_area(0)
        assert store.update_area_name("Garden")
        assert store.areas[0].area_name == "Garden"
        assert recorder.last(EventType.AREA_INFO_CHANGED).data["name"] == "Garden"


class TestScaleCoordinates:
    def test_halving_canvas(self, store):
        store.add_point(400, 300, "P")
        store.scale_coordinates(0.5, 0.5)
        assert (store.points[0].x, store.points[0].y) == (200, 150)

    def test_rounds_half_up(self, store):
        store.add_point(5, 7, "P")
        store.add_area(Area(area_name="A", vertices=[Vertex(3, 1)]))
        store.scale_coordinates(0.5, 0.5)
        assert (store.points[0].x, store.points[0].y) == (3, 4)
        vertex = store.areas[0].vertices[0]
        assert (vertex.x, vertex.y) == (2, 1)

    def test_normalized_position_preserved(self, store):
        store.add_point(200, 450, "P")
        store.scale_coordinates(1024 / 800, 768 / 600)
        point = store.points[0]
        assert point.x / 1024 == pytest.approx(200 / 800, abs=1 / 1024)
        assert point.y / 768 == pytest.approx(450 / 600, abs=1 / 768)


def test_clear(store):
    store.add_point(0, 0, "A")
    store.add_area(Area(area_name="A"))
    store.select_area(0)
    store.clear()
    assert store.points == []
    assert store.areas == []
    assert store.selected_area_index == -1
    store.add_point(0, 0)
    assert store.points[0].index == 0
