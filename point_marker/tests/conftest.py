"""
Test fixtures for point_marker tests.

Provides stores, sessions and remote store doubles.
"""

from collections import defaultdict

import pytest

from point_marker.core.canvas import AnnotationStore, CanvasSession, EventEmitter
from point_marker.core.sync import InMemoryRemoteStore, RemoteUnavailable


class FlakyRemoteStore(InMemoryRemoteStore):
    """In-memory remote store whose operations can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.failing = set()
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if name in self.failing:
            raise RemoteUnavailable(f"{name} is unavailable")

    async def get_project_metadata(self, project_id):
        self._check("get_project_metadata")
        return await super().get_project_metadata(project_id)

    async def create_project_metadata(self, project_id, name, image_width, image_height):
        self._check("create_project_metadata")
        return await super().create_project_metadata(
            project_id, name, image_width, image_height
        )

    async def increment_counter(self, project_id, field, delta):
        self._check("increment_counter")
        return await super().increment_counter(project_id, field, delta)

    async def add_point(self, project_id, label, x, y, order):
        self._check("add_point")
        return await super().add_point(project_id, label, x, y, order)

    async def update_point(self, project_id, remote_key, fields):
        self._check("update_point")
        return await super().update_point(project_id, remote_key, fields)

    async def delete_point(self, project_id, remote_key):
        self._check("delete_point")
        return await super().delete_point(project_id, remote_key)

    async def list_points(self, project_id):
        self._check("list_points")
        return await super().list_points(project_id)

    async def add_area(self, project_id, name, vertices):
        self._check("add_area")
        return await super().add_area(project_id, name, vertices)

    async def update_area(self, project_id, remote_key, fields):
        self._check("update_area")
        return await super().update_area(project_id, remote_key, fields)

    async def delete_area(self, project_id, remote_key):
        self._check("delete_area")
        return await super().delete_area(project_id, remote_key)

    async def list_areas(self, project_id):
        self._check("list_areas")
        return await super().list_areas(project_id)


class EventRecorder:
    """Collects emitted events by type."""

    def __init__(self, emitter):
        self.emitter = emitter
        self.events = defaultdict(list)

    def watch(self, *event_types):
        for event_type in event_types:
            self.emitter.on(event_type, self.events[event_type].append)
        return self

    def count(self, event_type):
        return len(self.events[event_type])

    def last(self, event_type):
        return self.events[event_type][-1]


@pytest.fixture
def events():
    return EventEmitter()


@pytest.fixture
def store(events):
    return AnnotationStore(events)


@pytest.fixture
def recorder(events):
    return EventRecorder(events)


@pytest.fixture
def remote():
    return FlakyRemoteStore()


@pytest.fixture
def session(remote):
    """Session on an 800x600 canvas showing a 1600x1200 image."""
    canvas_session = CanvasSession(800, 600, remote=remote)
    canvas_session.set_image("photo", 1600, 1200)
    return canvas_session


@pytest.fixture
def local_session():
    """Session without remote sync."""
    canvas_session = CanvasSession(800, 600)
    canvas_session.set_image("photo", 800, 600)
    return canvas_session
