"""
Typed event bus for decoupled communication.

Uses Enums for event types to prevent magic strings. The battle layer never
waits on whoever listens: it resolves an action completely, then publishes
the ordered events so a presentation layer can replay them with its own
timing.

Usage:
    # Define events
    class BattleEvent(Enum):
        HIT_LANDED = auto()
        MISSED = auto()

    # Subscribe
    event_bus.subscribe(BattleEvent.HIT_LANDED, on_hit)

    # Publish
    event_bus.publish(BattleEvent.HIT_LANDED, side="enemy", amount=12)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub between the battle layer and its listeners.

    Handlers run in priority order (highest first). They are held weakly
    by default and dropped once collected. Events a handler publishes are
    queued until the current dispatch finishes, so listeners always see
    the battle's events in the order it produced them.
    """

    def __init__(self):
        # Map of event type -> list of (priority, handler)
        self._handlers: dict[Enum, list[tuple[int, Any]]] = {}
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        handlers = self._handlers.setdefault(event_type, [])

        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        insert_idx = len(handlers)
        for i, (p, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break

        handlers.insert(insert_idx, (priority, handler_ref))

    def subscribe_all(
        self,
        event_types: Iterable[Enum],
        handler: EventHandler,
        priority: int = 0,
        weak: bool = True,
    ) -> None:
        """Subscribe one handler to several event types (e.g. a whole Enum)."""
        for event_type in event_types:
            self.subscribe(event_type, handler, priority=priority, weak=weak)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove a handler from an event type."""
        if event_type not in self._handlers:
            return

        self._handlers[event_type] = [
            (p, h) for p, h in self._handlers[event_type]
            if self._get_handler(h) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """Publish an event built from keyword data."""
        event = Event(type=event_type, data=data)
        self.publish_event(event)
        return event

    def publish_event(self, event: Event) -> None:
        """Publish a pre-created event."""
        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

    def publish_all(self, events: Iterable[Event]) -> None:
        """Publish pre-created events in order."""
        for event in events:
            self.publish_event(event)

    def _dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if handlers:
            self._is_publishing = True
            dead = []
            try:
                for i, (_, handler_ref) in enumerate(handlers):
                    handler = self._get_handler(handler_ref)
                    if handler is None:
                        dead.append(i)
                        continue
                    try:
                        handler(event)
                    except Exception:
                        logger.exception("Error in event handler for %s", event.type)

                for i in reversed(dead):
                    handlers.pop(i)
            finally:
                self._is_publishing = False

        while self._event_queue:
            self._dispatch(self._event_queue.pop(0))

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref


class EventRecorder:
    """
    Event sink that keeps an ordered history.

    Useful for replaying a whole match, or for asserting on what the battle
    layer emitted:

        recorder = EventRecorder()
        recorder.attach(bus, BattleEvent)
        ...
        assert recorder.types() == [BattleEvent.MATCH_STARTED, ...]
    """

    def __init__(self):
        self.events: list[Event] = []

    def __call__(self, event: Event) -> None:
        self.record(event)

    def __len__(self) -> int:
        return len(self.events)

    def record(self, event: Event) -> None:
        """Append an event to the history."""
        self.events.append(event)

    def attach(self, bus: EventBus, event_types: Iterable[Enum]) -> None:
        """Record every event of the given types published on a bus."""
        bus.subscribe_all(event_types, self.record, weak=False)

    def types(self) -> list[Enum]:
        """Event types in the order they were recorded."""
        return [event.type for event in self.events]

    def of_type(self, event_type: Enum) -> list[Event]:
        """All recorded events of one type."""
        return [event for event in self.events if event.type == event_type]

    def clear(self) -> None:
        """Forget recorded events."""
        self.events.clear()
