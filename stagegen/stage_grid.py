"""Sparse storage of placed rooms, keyed by grid position."""

from typing import Dict, List, Optional, Tuple

import numpy as np

from .directions import ALL_DIRECTIONS, Direction, GridPosition
from .doors import Door, DoorConnection
from .event_system import EventBus
from .room_templates import RoomCategory
from .rooms import Room


class StageGrid:
    """
    Rooms of one stage on a width x height grid.

    The grid makes no placement decisions. add_room silently ignores occupied
    and out-of-bounds cells; callers that care check has_room first.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid size must be positive, got {width}x{height}")
        self.width: int = width
        self.height: int = height
        self._rooms: Dict[GridPosition, Room] = {}

        self.start_position: Optional[GridPosition] = None
        self.boss_position: Optional[GridPosition] = None
        self.special_positions: List[GridPosition] = []

        self.event_bus: Optional[EventBus] = None

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def has_room(self, position: GridPosition) -> bool:
        return position in self._rooms

    def get_room(self, position: GridPosition) -> Optional[Room]:
        return self._rooms.get(position)

    def is_valid_position(self, position: GridPosition) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def add_room(self, position: GridPosition, room: Room) -> None:
        """
        Store a room at `position`.

        Ignored if the cell is taken or out of bounds.

        Raises:
            ValueError: If the room was built for a different position.
        """
        if room.position != position:
            raise ValueError(f"{room!r} cannot be stored at {position}")
        if self.has_room(position) or not self.is_valid_position(position):
            return

        self._rooms[position] = room
        room.set_event_bus(self.event_bus)

        if room.category == RoomCategory.START:
            self.start_position = position
        elif room.category == RoomCategory.BOSS:
            self.boss_position = position
        elif room.category != RoomCategory.NORMAL:
            self.special_positions.append(position)

    @property
    def start_room(self) -> Optional[Room]:
        if self.start_position is None:
            return None
        return self.get_room(self.start_position)

    @property
    def boss_room(self) -> Optional[Room]:
        if self.boss_position is None:
            return None
        return self.get_room(self.boss_position)

    def rooms(self) -> List[Tuple[GridPosition, Room]]:
        """All rooms, ordered by x then y."""
        return sorted(self._rooms.items(), key=lambda item: (item[0].x, item[0].y))

    def get_door(self, position: GridPosition, direction: Direction) -> Optional[Door]:
        room = self.get_room(position)
        if room is None:
            return None
        return room.get_door(direction)

    def resolve(self, connection: DoorConnection) -> Optional[Tuple[Room, Door]]:
        """Look up the room and door a connection points at."""
        room = self.get_room(connection.position)
        if room is None:
            return None
        door = room.get_door(connection.direction)
        if door is None:
            return None
        return room, door

    def connected_positions(self, position: GridPosition) -> List[GridPosition]:
        """Positions reachable through connected doors of the room at `position`."""
        room = self.get_room(position)
        if room is None:
            return []
        return [
            position.step(direction)
            for direction in ALL_DIRECTIONS
            if direction in room.doors and room.doors[direction].is_connected
        ]

    def free_neighbors(self, position: GridPosition) -> List[GridPosition]:
        """In-bounds, unoccupied cells next to `position`."""
        neighbors = [position.step(direction) for direction in ALL_DIRECTIONS]
        return [
            neighbor
            for neighbor in neighbors
            if self.is_valid_position(neighbor) and not self.has_room(neighbor)
        ]

    def set_event_bus(self, bus: Optional[EventBus]) -> None:
        """Attach an event bus to the grid and every room and door on it."""
        self.event_bus = bus
        for room in self._rooms.values():
            room.set_event_bus(bus)

    def occupancy(self) -> np.ndarray:
        """
        Category codes as a (height, width) array indexed [y, x].

        0 marks an empty cell; otherwise the value is the RoomCategory.
        """
        cells = np.zeros((self.height, self.width), dtype=int)
        for position, room in self._rooms.items():
            cells[position.y, position.x] = int(room.category)
        return cells
