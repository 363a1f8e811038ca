"""Tests for the canvas event emitter."""

from unittest.mock import Mock

from point_marker.core.canvas import CanvasEvent, EventEmitter, EventType


class TestEventEmitter:
    def test_listeners_run_in_subscription_order(self):
        calls = []
        emitter = EventEmitter()
        emitter.on(EventType.POINTS_CHANGED, lambda e: calls.append("first"))
        emitter.on(EventType.POINTS_CHANGED, lambda e: calls.append("second"))
        emitter.on(EventType.AREAS_CHANGED, lambda e: calls.append("other"))

        emitter.emit(CanvasEvent(EventType.POINTS_CHANGED))
        assert calls == ["first", "second"]

    def test_failing_listener_does_not_stop_others(self):
        """The error is logged; later listeners still get the event."""
        emitter = EventEmitter()
        listener = Mock()
        emitter.on(EventType.POINTS_CHANGED, Mock(side_effect=RuntimeError("boom")))
        emitter.on(EventType.POINTS_CHANGED, listener)

        emitter.emit(CanvasEvent(EventType.POINTS_CHANGED, {"count": 1}))
        assert listener.call_args[0][0].data == {"count": 1}

    def test_off(self):
        emitter = EventEmitter()
        listener = Mock()
        emitter.on(EventType.MODE_CHANGED, listener)

        assert emitter.off(EventType.MODE_CHANGED, listener)
        assert not emitter.off(EventType.MODE_CHANGED, listener)
        emitter.emit(CanvasEvent(EventType.MODE_CHANGED))
        listener.assert_not_called()

    def test_unsubscribe_while_emitting(self):
        emitter = EventEmitter()
        later = Mock()

        def once(event):
            emitter.off(EventType.MODE_CHANGED, once)

        emitter.on(EventType.MODE_CHANGED, once)
        emitter.on(EventType.MODE_CHANGED, later)

        emitter.emit(CanvasEvent(EventType.MODE_CHANGED))
        emitter.emit(CanvasEvent(EventType.MODE_CHANGED))
        assert later.call_count == 2

    def test_event_data_defaults_to_empty(self):
        assert CanvasEvent(EventType.STATE_CHANGED).data == {}
