"""Tests for InMemoryRemoteStore."""

import asyncio

import pytest

from point_marker.core.sync import InMemoryRemoteStore, RemoteUnavailable
from point_marker.core.sync.remote import AREA_COUNT, POINT_COUNT


@pytest.fixture
def memory():
    return InMemoryRemoteStore()


def test_metadata_lifecycle(memory):
    async def run():
        assert await memory.get_project_metadata("p") is None
        await memory.create_project_metadata("p", "", 640, 480)
        await memory.increment_counter("p", POINT_COUNT, 1)
        await memory.increment_counter("p", POINT_COUNT, 1)
        await memory.increment_counter("p", AREA_COUNT, -1)
        return await memory.get_project_metadata("p")

    meta = asyncio.run(run())
    assert meta.project_name == "Untitled Project"
    assert meta.image_name == "p.png"
    assert (meta.point_count, meta.area_count) == (2, -1)


def test_counter_needs_project(memory):
    with pytest.raises(RemoteUnavailable):
        asyncio.run(memory.increment_counter("missing", POINT_COUNT, 1))


def test_add_point_with_existing_label_returns_its_key(memory):
    async def run():
        first = await memory.add_point("p", "A", 1, 2, 0)
        second = await memory.add_point("p", "A", 5, 6, 1)
        return first, second, await memory.list_points("p")

    first, second, points = asyncio.run(run())
    assert first == second
    assert len(points) == 1
    assert (points[0].x, points[0].y) == (1, 2)


def test_points_listed_by_order(memory):
    async def run():
        await memory.add_point("p", "C", 0, 0, 2)
        await memory.add_point("p", "A", 0, 0, 0)
        await memory.add_point("p", "B", 0, 0, 1)
        return await memory.list_points("p")

    assert [p.label for p in asyncio.run(run())] == ["A", "B", "C"]


def test_update_missing_records(memory):
    with pytest.raises(RemoteUnavailable):
        asyncio.run(memory.update_point("p", "nope", {"x": 1}))
    with pytest.raises(RemoteUnavailable):
        asyncio.run(memory.update_area("p", "nope", {"areaName": "x"}))


def test_area_defaults_and_vertex_count(memory):
    async def run():
        key = await memory.add_area("p", "", [])
        await memory.update_area("p", key, {"vertices": [{"x": 1, "y": 1}, {"x": 2, "y": 2}]})
        return key, memory._load("p").areas[key]

    key, record = asyncio.run(run())
    assert record["areaName"] == "Unnamed Area"
    assert record["vertexCount"] == 2
    assert len(key) == 20


def test_projects_are_isolated(memory):
    async def run():
        await memory.add_point("p", "A", 0, 0, 0)
        return await memory.list_points("q")

    assert asyncio.run(run()) == []
