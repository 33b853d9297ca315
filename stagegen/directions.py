"""Cardinal directions and grid positions for the stage grid."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Tuple


@dataclass(frozen=True)
class GridPosition:
    """A cell on the stage grid. y grows towards the north."""

    x: int
    y: int

    def step(self, direction: "Direction") -> "GridPosition":
        """Returns the neighbouring cell in the given direction."""
        dx, dy = direction.offset()
        return GridPosition(x=self.x + dx, y=self.y + dy)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class Direction(Enum):
    """Cardinal directions for door sockets and room connections."""

    NORTH = auto()
    EAST = auto()
    SOUTH = auto()
    WEST = auto()

    def opposite(self) -> "Direction":
        """Returns the opposite direction."""
        return _OPPOSITES[self]

    def offset(self) -> Tuple[int, int]:
        """Returns the (dx, dy) offset for moving one cell in this direction."""
        return _OFFSETS[self]


_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}

_OFFSETS = {
    Direction.NORTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, -1),
    Direction.WEST: (-1, 0),
}

# Canonical iteration order (declaration order)
ALL_DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)


def opposite(direction: Direction) -> Direction:
    return direction.opposite()


def to_offset(direction: Direction) -> Tuple[int, int]:
    return direction.offset()


def direction_from_to(start: GridPosition, end: GridPosition) -> Direction:
    """
    Returns the cardinal direction that best describes the step from start to end.

    The axis with the larger absolute delta wins. Ties, including start == end,
    go to the vertical axis: NORTH when dy > 0, otherwise SOUTH.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    if abs(dx) > abs(dy):
        return Direction.EAST if dx > 0 else Direction.WEST
    return Direction.NORTH if dy > 0 else Direction.SOUTH
