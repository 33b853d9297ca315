"""
Event system for stage gameplay notifications.

The generator itself never emits events. Doors, rooms and the stage navigator
publish through an EventBus that the caller creates and hands to the grid, so
there is no process-wide state: every stage gets the observers it was given.
"""

import logging
from enum import Enum, auto
from typing import Callable, Any, Dict, List, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class Event(Enum):
    """Event types that can occur while a stage is being played."""

    # Door signals
    DOOR_ENTERED = auto()  # kwargs: door, room, entry_door
    DOOR_BLOCKED = auto()  # kwargs: door

    # Room lifecycle
    ROOM_ENTERED = auto()  # kwargs: room
    ROOM_EXITED = auto()  # kwargs: room
    ENCOUNTER_STARTED = auto()  # kwargs: room, enemy_count
    ROOM_CLEARED = auto()  # kwargs: room

    # Gameplay reports, published by collaborators
    ENEMY_DEFEATED = auto()  # kwargs: position (optional)

    # Navigation
    PLAYER_CHANGED_ROOM = auto()  # kwargs: previous_room, room, entry_direction


@dataclass
class EventData:
    """Container for event data passed to handlers."""

    event: Event
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        if self.kwargs:
            kwargs_str = ", ".join(f"{k}={v}" for k, v in self.kwargs.items())
            return f"EventData({self.event.name}, {kwargs_str})"
        return f"EventData({self.event.name})"


# Event handler signature: takes event data, returns nothing
EventHandler = Callable[[EventData], None]


class EventBus:
    """
    Event bus for publishing and subscribing to stage events.

    Subscribers register handlers for specific event types, and publishers
    emit events that trigger those handlers in subscription order.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Event, List[EventHandler]] = {}
        self._debug: bool = False

    def set_debug(self, debug: bool) -> None:
        """Enable or disable debug mode. In debug mode handler errors re-raise."""
        self._debug = debug

    def subscribe(self, event: Event, handler: EventHandler) -> None:
        """
        Subscribe a handler to an event type.

        Args:
            event: The event type to listen for
            handler: Callable that takes EventData and returns None
        """
        self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: Event, handler: EventHandler) -> None:
        """
        Unsubscribe a handler from an event type.

        Raises:
            ValueError: If handler was not subscribed to this event
        """
        if event not in self._handlers:
            raise ValueError(f"No handlers registered for event {event}")
        if handler not in self._handlers[event]:
            raise ValueError(f"Handler not subscribed to event {event}")
        self._handlers[event].remove(handler)

    def emit(self, event: Event, **kwargs: Any) -> None:
        """
        Emit an event, triggering all subscribed handlers.

        Args:
            event: The event type to emit
            **kwargs: Event-specific data passed to handlers
        """
        event_data = EventData(event=event, kwargs=kwargs)
        logger.debug("Emitting %r", event_data)

        # Copy so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(event_data)
            except Exception:
                # One failing handler shouldn't stop the others
                logger.exception("Handler error for %s", event.name)
                if self._debug:
                    raise

    def clear(self) -> None:
        """Remove all event handlers."""
        self._handlers.clear()

    def handler_count(self, event: Optional[Event] = None) -> int:
        """
        Get the number of handlers registered.

        Args:
            event: If provided, count handlers for this event only.
                   If None, count total handlers across all events.
        """
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())
