"""
Tests for the in-process event bus and the per-user event stream.
"""
import asyncio

import pytest


from app.config import settings
from app.core.event_bus import EventBus, KeyEventStream, event_bus, KEY_UPDATED, PROJECT_UPDATED


class TestEventBus:
    """Tests for subscribe, unsubscribe and dispatch."""

    def test_emit_calls_subscribers_in_order(self):
        bus = EventBus()
        calls = []
        bus.on("changed", lambda *args: calls.append(("first", args)))
        bus.on("changed", lambda *args: calls.append(("second", args)))

        bus.emit("changed", 1, "x")

        assert calls == [("first", (1, "x")), ("second", (1, "x"))]

    def test_emit_without_subscribers_is_noop(self):
        EventBus().emit("nobody-listens", {"a": 1})

    def test_off_removes_callback(self):
        bus = EventBus()
        calls = []

        def callback(payload):
            calls.append(payload)

        bus.on("changed", callback)
        bus.off("changed", callback)
        bus.emit("changed", {})

        assert calls == []
        assert bus.subscriber_count("changed") == 0

    def test_off_unknown_is_noop(self):
        bus = EventBus()
        bus.off("unknown", lambda: None)

        bus.on("changed", print)
        bus.off("changed", lambda: None)

        assert bus.subscriber_count("changed") == 1

    def test_callback_may_unsubscribe_during_dispatch(self):
        """Unsubscribing inside a callback does not skip the next subscriber."""
        bus = EventBus()
        calls = []

        def once(payload):
            calls.append("once")
            bus.off("changed", once)

        bus.on("changed", once)
        bus.on("changed", lambda payload: calls.append("always"))

        bus.emit("changed", {})
        bus.emit("changed", {})

        assert calls == ["once", "always", "always"]


class TestKeyEventStream:
    """Tests for the bus-to-queue bridge used by the SSE endpoint."""

    async def test_receives_own_events(self):
        bus = EventBus()
        with KeyEventStream(user_id=1, bus=bus) as stream:
            bus.emit(KEY_UPDATED, {"user_id": 1, "action": "created", "key_id": 7})

            event = await stream.get(timeout=1)

        assert event == {"event": KEY_UPDATED, "data": {"user_id": 1, "action": "created", "key_id": 7}}

    async def test_ignores_other_users(self):
        bus = EventBus()
        with KeyEventStream(user_id=1, bus=bus) as stream:
            bus.emit(PROJECT_UPDATED, {"user_id": 2, "action": "created", "project_id": 3})

            event = await stream.get(timeout=0.05)

        assert event is None

    async def test_unsubscribes_on_exit(self):
        bus = EventBus()
        with KeyEventStream(user_id=1, bus=bus):
            assert bus.subscriber_count(KEY_UPDATED) == 1
            assert bus.subscriber_count(PROJECT_UPDATED) == 1

        assert bus.subscriber_count(KEY_UPDATED) == 0
        assert bus.subscriber_count(PROJECT_UPDATED) == 0

    async def test_full_queue_drops_events(self):
        bus = EventBus()
        with KeyEventStream(user_id=1, bus=bus, max_size=1) as stream:
            bus.emit(KEY_UPDATED, {"user_id": 1, "key_id": 1})
            bus.emit(KEY_UPDATED, {"user_id": 1, "key_id": 2})

            assert stream.queue.qsize() == 1
            first = await stream.get(timeout=1)

        assert first["data"]["key_id"] == 1

    async def test_get_times_out(self):
        with KeyEventStream(user_id=1, bus=EventBus()) as stream:
            started = asyncio.get_running_loop().time()
            assert await stream.get(timeout=0.01) is None
            assert asyncio.get_running_loop().time() - started < 1


class TestEventFormatting:
    """Tests for the server-sent event wire format."""

    def test_format_event(self):
        from app.api.v1.endpoints.dashboard import _format_event

        line = _format_event({"event": KEY_UPDATED, "data": {"user_id": 1, "key_id": 2}})

        assert line == 'event: key_updated\ndata: {"user_id": 1, "key_id": 2}\n\n'


class FakeRequest:
    """Request stand-in whose connection state is set by the test."""

    def __init__(self):
        self.disconnected = False

    async def is_disconnected(self) -> bool:
        return self.disconnected


class TestEventStreamEndpoint:
    """Tests for the /events stream generator."""

    async def test_streams_only_own_events(self):
        from app.api.v1.endpoints.dashboard import _event_stream

        request = FakeRequest()
        stream = _event_stream(request, user_id=1)

        assert await stream.__anext__() == ": connected\n\n"
        assert event_bus.subscriber_count(KEY_UPDATED) == 1

        event_bus.emit(KEY_UPDATED, {"user_id": 2, "action": "updated", "key_id": 9})
        event_bus.emit(KEY_UPDATED, {"user_id": 1, "action": "updated", "key_id": 3})
        line = await asyncio.wait_for(stream.__anext__(), timeout=1)

        assert line == 'event: key_updated\ndata: {"user_id": 1, "action": "updated", "key_id": 3}\n\n'

        request.disconnected = True
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

        assert event_bus.subscriber_count(KEY_UPDATED) == 0
        assert event_bus.subscriber_count(PROJECT_UPDATED) == 0

    async def test_keep_alive_when_idle(self, monkeypatch):
        from app.api.v1.endpoints.dashboard import _event_stream

        monkeypatch.setattr(settings, "EVENT_STREAM_KEEPALIVE_SECONDS", 0.01)
        stream = _event_stream(FakeRequest(), user_id=1)

        assert await stream.__anext__() == ": connected\n\n"
        assert await asyncio.wait_for(stream.__anext__(), timeout=1) == ": keep-alive\n\n"

        await stream.aclose()

        assert event_bus.subscriber_count(KEY_UPDATED) == 0
