"""
Tracks which room the player is in.

The navigator listens for door entry signals on the stage's EventBus and moves
the player from room to room, running the exit and enter hooks on the way.
Camera motion, minimaps and anything else that cares about room changes
subscribe to PLAYER_CHANGED_ROOM instead of talking to the navigator.
"""

import logging
from typing import Optional

from .directions import Direction, GridPosition
from .event_system import Event, EventBus, EventData
from .rooms import Room
from .stage_grid import StageGrid

logger = logging.getLogger(__name__)


class StageNavigator:
    def __init__(self, grid: StageGrid, event_bus: Optional[EventBus] = None) -> None:
        self.grid = grid
        self.event_bus: EventBus = event_bus if event_bus is not None else EventBus()
        self.current_room: Optional[Room] = None

        self.grid.set_event_bus(self.event_bus)
        self.event_bus.subscribe(Event.DOOR_ENTERED, self._on_door_entered)
        self.event_bus.subscribe(Event.ENEMY_DEFEATED, self._on_enemy_defeated)

    def start(self) -> Room:
        """
        Put the player in the start room.

        Raises:
            RuntimeError: If the grid has no start room.
        """
        room = self.grid.start_room
        if room is None:
            raise RuntimeError("Stage has no start room")
        self._move_to(room, None)
        return room

    def detach(self) -> None:
        """Stop listening to the event bus."""
        self.event_bus.unsubscribe(Event.DOOR_ENTERED, self._on_door_entered)
        self.event_bus.unsubscribe(Event.ENEMY_DEFEATED, self._on_enemy_defeated)

    def _on_door_entered(self, data: EventData) -> None:
        room: Room = data.kwargs["room"]
        entry_door = data.kwargs.get("entry_door")
        entry_direction = entry_door.direction if entry_door is not None else None
        self._move_to(room, entry_direction)

    def _on_enemy_defeated(self, data: EventData) -> None:
        position: Optional[GridPosition] = data.kwargs.get("position")
        room = self.grid.get_room(position) if position is not None else self.current_room
        if room is None:
            logger.warning("Enemy defeated outside any known room (%s)", position)
            return
        room.enemy_defeated()

    def _move_to(self, room: Room, entry_direction: Optional[Direction]) -> None:
        previous = self.current_room
        if previous is not None:
            previous.on_player_exit()

        self.current_room = room
        logger.info(
            "Player moved %s -> %s",
            previous.name if previous is not None else "nowhere",
            room.name,
        )
        room.on_player_enter()
        self.event_bus.emit(
            Event.PLAYER_CHANGED_ROOM,
            previous_room=previous,
            room=room,
            entry_direction=entry_direction,
        )
