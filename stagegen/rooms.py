"""Placed room instances and what happens when the player walks into them."""

import logging
from typing import Any, Dict, Iterator, Optional

from .directions import Direction, GridPosition
from .doors import Door
from .event_system import Event, EventBus
from .room_templates import RoomCategory, RoomTemplate

logger = logging.getLogger(__name__)


class Room:
    """
    A room placed on the stage grid.

    The template is shared and read-only. There is exactly one door per
    template socket, keyed by direction. `cleared` belongs to gameplay code;
    the generator only writes `difficulty`.
    """

    def __init__(self, template: RoomTemplate, position: GridPosition) -> None:
        self.template: RoomTemplate = template
        self._position: GridPosition = position
        self.doors: Dict[Direction, Door] = {
            direction: Door(direction, position) for direction in template.socket_directions
        }
        self.cleared: bool = False
        self.difficulty: float = 0.0

        self.entered: bool = False
        self.pending_enemies: int = 0
        self.event_bus: Optional[EventBus] = None

    @property
    def position(self) -> GridPosition:
        return self._position

    @property
    def category(self) -> RoomCategory:
        return self.template.category

    @property
    def name(self) -> str:
        return f"Room_{self.category.name.title()}_{self._position.x}_{self._position.y}"

    def __repr__(self) -> str:
        return f"Room({self.category.name}, {self._position}, '{self.template.name}')"

    def get_door(self, direction: Direction) -> Optional[Door]:
        return self.doors.get(direction)

    def iter_doors(self) -> Iterator[Door]:
        """Doors in canonical direction order."""
        return iter(self.doors.values())

    def set_event_bus(self, bus: Optional[EventBus]) -> None:
        self.event_bus = bus
        for door in self.doors.values():
            door.event_bus = bus

    def _emit(self, event: Event, **kwargs: Any) -> None:
        if self.event_bus:
            self.event_bus.emit(event, **kwargs)

    # Door helpers

    def open_doors(self) -> None:
        for door in self.doors.values():
            door.open()

    def close_doors(self) -> None:
        for door in self.doors.values():
            door.close()

    def lock_doors(self) -> None:
        for door in self.doors.values():
            door.lock()

    def unlock_doors(self) -> None:
        for door in self.doors.values():
            door.unlock()

    # Player hooks

    def on_player_enter(self) -> None:
        """
        React to the player arriving.

        Start, treasure and shop rooms clear immediately. A normal room runs
        its encounter once, on first entry, with its doors locked. A boss room
        closes its doors and restarts its encounter on every entry until it
        has been cleared.
        """
        logger.debug("Player entered %s", self.name)
        self._emit(Event.ROOM_ENTERED, room=self)

        category = self.category
        if category in (RoomCategory.START, RoomCategory.TREASURE, RoomCategory.SHOP):
            self.clear()
        elif category == RoomCategory.NORMAL:
            if self.cleared or self.entered:
                self.entered = True
                return
            self.entered = True
            if self.template.enemy_count > 0:
                # Lock first: encounter handlers may report defeats right away
                self.lock_doors()
                self._start_encounter()
            else:
                self.clear()
        elif category == RoomCategory.BOSS:
            self.entered = True
            if self.cleared:
                return
            self.close_doors()
            if self.template.enemy_count > 0:
                self._start_encounter()
            else:
                self.clear()
        else:
            raise RuntimeError(f"Unhandled room category {category}")

    def on_player_exit(self) -> None:
        logger.debug("Player exited %s", self.name)
        self._emit(Event.ROOM_EXITED, room=self)

    def _start_encounter(self) -> None:
        self.pending_enemies = self.template.enemy_count
        logger.info("%s: encounter with %d enemies", self.name, self.pending_enemies)
        self._emit(Event.ENCOUNTER_STARTED, room=self, enemy_count=self.pending_enemies)

    def enemy_defeated(self) -> None:
        """Count one enemy down. The room clears when none are left."""
        if self.cleared or self.pending_enemies <= 0:
            return
        self.pending_enemies -= 1
        if self.pending_enemies == 0:
            self.clear()

    def clear(self) -> None:
        """Mark the room cleared and open its doors. Only the first call has effect."""
        if self.cleared:
            return
        self.cleared = True
        self.pending_enemies = 0
        self.unlock_doors()
        self.open_doors()
        logger.info("%s cleared", self.name)
        self._emit(Event.ROOM_CLEARED, room=self)
