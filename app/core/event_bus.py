"""
In-process publish/subscribe registry for "data changed" notifications.

Services emit events after mutating keys or projects; listeners (the
server-sent event stream, mainly) react to them. Dispatch is synchronous
and happens in the emitting call, in subscription order.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EventCallback = Callable[..., None]

KEY_UPDATED = "key_updated"
PROJECT_UPDATED = "project_updated"


class EventBus:
    """Map of event names to subscriber callbacks."""

    def __init__(self):
        self._events: Dict[str, List[EventCallback]] = {}

    def on(self, event: str, callback: EventCallback) -> None:
        """Subscribe a callback to an event."""
        self._events.setdefault(event, []).append(callback)

    def off(self, event: str, callback: EventCallback) -> None:
        """Unsubscribe a callback. Unknown events or callbacks are ignored."""
        callbacks = self._events.get(event)
        if not callbacks:
            return
        self._events[event] = [cb for cb in callbacks if cb != callback]

    def emit(self, event: str, *args: Any) -> None:
        """Call every subscriber of the event with the given arguments."""
        # Copy so callbacks may unsubscribe while being dispatched
        for callback in list(self._events.get(event, [])):
            callback(*args)

    def subscriber_count(self, event: str) -> int:
        return len(self._events.get(event, []))


# Single instance shared by the whole process
event_bus = EventBus()


class KeyEventStream:
    """
    Per-user bridge from bus callbacks to an asyncio queue.

    Used as a context manager by the SSE endpoint: entering subscribes to
    key and project events, exiting unsubscribes.

    Usage:
        with KeyEventStream(user_id) as stream:
            event = await stream.get(timeout=15)
    """

    EVENTS = (KEY_UPDATED, PROJECT_UPDATED)

    def __init__(self, user_id: int, bus: Optional[EventBus] = None, max_size: int = 100):
        self.user_id = user_id
        self.bus = bus or event_bus
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_size)
        self._callbacks: Dict[str, EventCallback] = {}

    def _make_callback(self, event: str) -> EventCallback:
        def callback(payload: Dict[str, Any]) -> None:
            if payload.get("user_id") != self.user_id:
                return
            try:
                self.queue.put_nowait({"event": event, "data": payload})
            except asyncio.QueueFull:
                logger.warning(f"Event stream queue full for user {self.user_id}, dropping {event}")
        return callback

    def __enter__(self) -> "KeyEventStream":
        for event in self.EVENTS:
            callback = self._make_callback(event)
            self._callbacks[event] = callback
            self.bus.on(event, callback)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        for event, callback in self._callbacks.items():
            self.bus.off(event, callback)
        self._callbacks.clear()

    async def get(self, timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """Next event for this user, or None when the timeout elapses."""
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
