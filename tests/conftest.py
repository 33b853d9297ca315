"""Shared helpers for building small hand-made stages."""

from typing import Dict, Iterable, Tuple

import pytest

from stagegen.directions import Direction, GridPosition
from stagegen.room_factory import RoomFactory
from stagegen.room_templates import RoomCategory, RoomTemplate
from stagegen.rooms import Room
from stagegen.stage_grid import StageGrid

# (category, directions) or (category, directions, enemies)
RoomSpec = Tuple


def make_room(
    x: int,
    y: int,
    category: RoomCategory = RoomCategory.NORMAL,
    directions: Iterable[Direction] = (),
    enemies: int = 0,
) -> Room:
    template = RoomTemplate.with_sockets(
        f"test_{category.name.lower()}", category, directions, enemies=enemies
    )
    return Room(template, GridPosition(x, y))


def build_grid(
    width: int,
    height: int,
    layout: Dict[Tuple[int, int], RoomSpec],
    connect: bool = True,
) -> StageGrid:
    """Place rooms from {(x, y): (category, directions[, enemies])} and resolve doors."""
    grid = StageGrid(width, height)
    for (x, y), entry in layout.items():
        room = make_room(x, y, *entry)
        grid.add_room(room.position, room)
    if connect:
        RoomFactory.connect_all_rooms(grid)
    return grid


@pytest.fixture
def room_maker():
    return make_room


@pytest.fixture
def grid_builder():
    return build_grid


@pytest.fixture
def corridor() -> StageGrid:
    """Start at (0, 0) joined east to a normal room with a dead-end north door."""
    return build_grid(
        2,
        2,
        {
            (0, 0): (RoomCategory.START, [Direction.EAST]),
            (1, 0): (RoomCategory.NORMAL, [Direction.WEST, Direction.NORTH]),
        },
    )


@pytest.fixture
def small_stage() -> StageGrid:
    """
    A four-room stage:

        .  T  .
        S  o  B

    The normal room has two enemies and the boss one.
    """
    return build_grid(
        3,
        2,
        {
            (0, 0): (RoomCategory.START, [Direction.EAST]),
            (1, 0): (RoomCategory.NORMAL, [Direction.NORTH, Direction.EAST, Direction.WEST], 2),
            (2, 0): (RoomCategory.BOSS, [Direction.WEST], 1),
            (1, 1): (RoomCategory.TREASURE, [Direction.SOUTH]),
        },
    )
