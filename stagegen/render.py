"""
Debug renderings of a generated stage.

Both renderers draw north at the top. They only read the grid.

ASCII legend:
    S = start, o = normal, B = boss, T = treasure, $ = shop, . = empty
    - and | = connected doors, # = locked doors
"""

from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from .directions import Direction, GridPosition
from .doors import Door, DoorState
from .room_templates import RoomCategory
from .stage_grid import StageGrid

Image = np.ndarray

CATEGORY_TO_ASCII: Dict[RoomCategory, str] = {
    RoomCategory.START: "S",
    RoomCategory.NORMAL: "o",
    RoomCategory.BOSS: "B",
    RoomCategory.TREASURE: "T",
    RoomCategory.SHOP: "$",
}
EMPTY_CELL = "."

# BGR, as cv2 expects
CATEGORY_TO_COLOR: Dict[RoomCategory, Tuple[int, int, int]] = {
    RoomCategory.START: (0, 200, 0),
    RoomCategory.NORMAL: (230, 230, 230),
    RoomCategory.BOSS: (0, 0, 220),
    RoomCategory.TREASURE: (0, 215, 255),
    RoomCategory.SHOP: (220, 200, 0),
}
BACKGROUND_COLOR = (32, 32, 32)
CONNECTION_COLOR = (160, 160, 160)
LOCKED_COLOR = (0, 0, 128)


def _connector(door: Optional[Door], open_char: str) -> str:
    if door is None or not door.is_connected:
        return " "
    if door.state == DoorState.LOCKED:
        return "#"
    return open_char


def render_stage_ascii(grid: StageGrid) -> str:
    """Convert a stage grid to an ASCII string, one text row per grid row."""
    lines: List[str] = []
    for y in range(grid.height - 1, -1, -1):
        cells = ""
        below = ""
        for x in range(grid.width):
            position = GridPosition(x, y)
            room = grid.get_room(position)
            cells += CATEGORY_TO_ASCII[room.category] if room is not None else EMPTY_CELL
            below += _connector(grid.get_door(position, Direction.SOUTH), "|")
            if x < grid.width - 1:
                cells += _connector(grid.get_door(position, Direction.EAST), "-")
                below += " "
        lines.append(cells)
        if y > 0:
            lines.append(below.rstrip())
    return "\n".join(lines)


def _cell_center(grid: StageGrid, position: GridPosition, cell_size: int) -> Tuple[int, int]:
    row = grid.height - 1 - position.y
    return (
        position.x * cell_size + cell_size // 2,
        row * cell_size + cell_size // 2,
    )


def render_stage_image(grid: StageGrid, cell_size: int = 48) -> Image:
    """
    Draw the stage as a (height * cell_size, width * cell_size, 3) BGR image.

    Rooms are filled squares coloured by category; connected doors are lines
    between room centres.
    """
    if cell_size < 8:
        raise ValueError(f"cell_size must be at least 8, got {cell_size}")

    image: Image = np.zeros((grid.height * cell_size, grid.width * cell_size, 3), np.uint8)
    image[:, :] = BACKGROUND_COLOR

    # Connections first so rooms draw over the line ends
    for position, room in grid.rooms():
        for direction in (Direction.EAST, Direction.NORTH):
            door = room.get_door(direction)
            if door is None or not door.is_connected:
                continue
            color = LOCKED_COLOR if door.state == DoorState.LOCKED else CONNECTION_COLOR
            cv2.line(
                image,
                _cell_center(grid, position, cell_size),
                _cell_center(grid, position.step(direction), cell_size),
                color,
                max(2, cell_size // 8),
            )

    inset = cell_size // 5
    for position, room in grid.rooms():
        row = grid.height - 1 - position.y
        top_left = (position.x * cell_size + inset, row * cell_size + inset)
        bottom_right = ((position.x + 1) * cell_size - inset, (row + 1) * cell_size - inset)
        cv2.rectangle(image, top_left, bottom_right, CATEGORY_TO_COLOR[room.category], -1)
        if room.cleared:
            cv2.rectangle(image, top_left, bottom_right, (0, 0, 0), 1)

    return image


def save_stage_image(grid: StageGrid, path: str, cell_size: int = 48) -> None:
    """Render the stage and write it to `path` (format from the extension)."""
    image = render_stage_image(grid, cell_size)
    if not cv2.imwrite(path, image):
        raise IOError(f"Could not write image to {path}")
