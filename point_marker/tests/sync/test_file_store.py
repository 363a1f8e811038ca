"""Tests for JsonFileRemoteStore."""

import asyncio
import json

import pytest

from point_marker.core.sync import JsonFileRemoteStore


def test_persists_across_instances(tmp_path):
    async def write():
        store = JsonFileRemoteStore(tmp_path)
        await store.create_project_metadata("photo", "photo", 1600, 1200)
        await store.add_point("photo", "A", 20, 40, 0)
        await store.add_area("photo", "Zone", [{"x": 0, "y": 0}])

    asyncio.run(write())

    async def read():
        store = JsonFileRemoteStore(tmp_path)
        return (
            await store.get_project_metadata("photo"),
            await store.list_points("photo"),
            await store.list_areas("photo"),
        )

    meta, points, areas = asyncio.run(read())
    assert meta.image_width == 1600
    assert [p.label for p in points] == ["A"]
    assert areas[0].name == "Zone"


def test_directory_layout(tmp_path):
    store = JsonFileRemoteStore(tmp_path)
    asyncio.run(store.create_project_metadata("photo", "photo", 10, 10))

    project_dir = tmp_path / "photo"
    assert sorted(p.name for p in project_dir.iterdir()) == [
        "areas.json",
        "points.json",
        "project.json",
    ]
    data = json.loads((project_dir / "project.json").read_text())
    assert data["projectName"] == "photo"
    assert data["pointCount"] == 0
    assert store.list_projects() == ["photo"]


def test_reading_does_not_create_files(tmp_path):
    store = JsonFileRemoteStore(tmp_path)
    assert asyncio.run(store.get_project_metadata("ghost")) is None
    assert not (tmp_path / "ghost").exists()
    assert store.list_projects() == []


def test_corrupt_file_is_unavailable(tmp_path):
    from point_marker.core.sync import RemoteUnavailable

    (tmp_path / "photo").mkdir()
    (tmp_path / "photo" / "points.json").write_text("{not json")
    store = JsonFileRemoteStore(tmp_path)
    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.list_points("photo"))


@pytest.mark.parametrize("project_id", ["", "..", "a/b"])
def test_invalid_project_id(tmp_path, project_id):
    store = JsonFileRemoteStore(tmp_path)
    with pytest.raises(ValueError):
        asyncio.run(store.list_points(project_id))
