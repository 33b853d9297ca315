"""
Room templates: authored, read-only descriptions of a room's door sockets.

Templates are written as ASCII art. The generator only cares about which
edges carry a door; the art itself is passed through to renderers.

Characters:
    # = wall
    . = floor
    P = pillar
    x = enemy spawn point
    n = north door (top row)
    s = south door (bottom row)
    w = west door (left column)
    e = east door (right column)

Example room with all four doors and two spawn points:

    #####n#####
    #.........#
    #..x...x..#
    w.........e
    #.........#
    #.........#
    #####s#####

A template may have at most one door per edge, and door characters must sit on
their own edge (not on a corner).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .directions import ALL_DIRECTIONS, Direction


class RoomCategory(IntEnum):
    """
    What a room is for. Values double as cell codes in occupancy arrays,
    where 0 means an empty cell.
    """

    START = 1
    NORMAL = 2
    BOSS = 3
    TREASURE = 4
    SHOP = 5


class TemplateError(ValueError):
    """A room template is malformed. This is an authoring bug."""


DOOR_CHARS: Dict[str, Direction] = {
    "n": Direction.NORTH,
    "e": Direction.EAST,
    "s": Direction.SOUTH,
    "w": Direction.WEST,
}

SPAWN_CHAR = "x"
ALLOWED_CHARS = {"#", ".", "P", SPAWN_CHAR} | set(DOOR_CHARS)


@dataclass(frozen=True)
class DoorSocket:
    """A place on a template where a door can exist."""

    direction: Direction
    # (column, row) inside the template art
    anchor: Tuple[int, int]


@dataclass(frozen=True)
class SpawnPoint:
    """Where external content population may put one enemy."""

    anchor: Tuple[int, int]


@dataclass
class ParseError:
    """Error found while parsing template art."""

    row: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"row {self.row}, column {self.column}: {self.message}"


def _door_on_correct_edge(
    direction: Direction, row: int, column: int, height: int, width: int
) -> bool:
    on_corner = (row in (0, height - 1)) and (column in (0, width - 1))
    if on_corner:
        return False
    if direction == Direction.NORTH:
        return row == 0
    if direction == Direction.SOUTH:
        return row == height - 1
    if direction == Direction.WEST:
        return column == 0
    return column == width - 1


def parse_room_art(
    ascii_art: Tuple[str, ...],
) -> Tuple[List[DoorSocket], List[SpawnPoint], List[ParseError]]:
    """
    Parse template art into door sockets and spawn points.

    Returns (sockets, spawn_points, errors). Sockets are ordered by direction.
    """
    errors: List[ParseError] = []
    sockets: Dict[Direction, DoorSocket] = {}
    spawn_points: List[SpawnPoint] = []

    height = len(ascii_art)
    if height < 3:
        errors.append(ParseError(0, 0, "room art needs at least 3 rows"))
        return [], [], errors

    width = len(ascii_art[0])
    if width < 3:
        errors.append(ParseError(0, 0, "room art needs at least 3 columns"))
        return [], [], errors

    for row, line in enumerate(ascii_art):
        if len(line) != width:
            errors.append(
                ParseError(row, 0, f"expected {width} columns, found {len(line)}")
            )
            continue
        for column, char in enumerate(line):
            if char not in ALLOWED_CHARS:
                errors.append(ParseError(row, column, f"unknown character {char!r}"))
            elif char in DOOR_CHARS:
                direction = DOOR_CHARS[char]
                if not _door_on_correct_edge(direction, row, column, height, width):
                    errors.append(
                        ParseError(row, column, f"{direction.name} door is not on its edge")
                    )
                elif direction in sockets:
                    errors.append(
                        ParseError(row, column, f"second {direction.name} door")
                    )
                else:
                    sockets[direction] = DoorSocket(direction, (column, row))
            elif char == SPAWN_CHAR:
                spawn_points.append(SpawnPoint((column, row)))

    ordered = [sockets[d] for d in ALL_DIRECTIONS if d in sockets]
    return ordered, spawn_points, errors


@dataclass(frozen=True)
class RoomTemplate:
    """
    An immutable room template.

    Door sockets and spawn points are derived from the art once, at
    construction; malformed art raises TemplateError.
    """

    name: str
    category: RoomCategory
    ascii_art: Tuple[str, ...]
    door_sockets: Tuple[DoorSocket, ...] = field(init=False, compare=False)
    spawn_points: Tuple[SpawnPoint, ...] = field(init=False, compare=False)

    def __post_init__(self) -> None:
        art = tuple(self.ascii_art)
        object.__setattr__(self, "ascii_art", art)
        sockets, spawn_points, errors = parse_room_art(art)
        if errors:
            details = "; ".join(str(e) for e in errors)
            raise TemplateError(f"Template '{self.name}' is malformed: {details}")
        object.__setattr__(self, "door_sockets", tuple(sockets))
        object.__setattr__(self, "spawn_points", tuple(spawn_points))

    @property
    def width(self) -> int:
        return len(self.ascii_art[0])

    @property
    def height(self) -> int:
        return len(self.ascii_art)

    @property
    def sockets(self) -> FrozenSet[Direction]:
        return frozenset(socket.direction for socket in self.door_sockets)

    @property
    def socket_directions(self) -> Tuple[Direction, ...]:
        """Socket directions in canonical order."""
        return tuple(socket.direction for socket in self.door_sockets)

    @property
    def enemy_count(self) -> int:
        return len(self.spawn_points)

    def has_socket(self, direction: Direction) -> bool:
        return direction in self.sockets

    def get_socket(self, direction: Direction) -> Optional[DoorSocket]:
        for socket in self.door_sockets:
            if socket.direction == direction:
                return socket
        return None

    @classmethod
    def with_sockets(
        cls,
        name: str,
        category: RoomCategory,
        directions: Iterable[Direction],
        enemies: int = 0,
    ) -> "RoomTemplate":
        """Build a plain rectangular template with doors on the given edges."""
        wanted = set(directions)
        if enemies > len(_PLAIN_SPAWN_SLOTS):
            raise TemplateError(
                f"Template '{name}': at most {len(_PLAIN_SPAWN_SLOTS)} spawn points"
            )

        rows = [list(line) for line in _PLAIN_ROOM]
        for column, row in _PLAIN_SPAWN_SLOTS[:enemies]:
            rows[row][column] = SPAWN_CHAR
        for char, direction in DOOR_CHARS.items():
            if direction in wanted:
                column, row = _PLAIN_DOOR_SLOTS[direction]
                rows[row][column] = char

        return cls(name, category, tuple("".join(row) for row in rows))

    def __str__(self) -> str:
        doors = "".join(d.name[0] for d in self.socket_directions) or "-"
        return f"{self.name} [{self.category.name} {doors}]"


_PLAIN_ROOM = (
    "###########",
    "#.........#",
    "#.........#",
    "#.........#",
    "#.........#",
    "#.........#",
    "###########",
)

_PLAIN_DOOR_SLOTS: Dict[Direction, Tuple[int, int]] = {
    Direction.NORTH: (5, 0),
    Direction.SOUTH: (5, 6),
    Direction.WEST: (0, 3),
    Direction.EAST: (10, 3),
}

_PLAIN_SPAWN_SLOTS: List[Tuple[int, int]] = [
    (5, 3),
    (3, 2),
    (7, 4),
    (7, 2),
    (3, 4),
    (5, 1),
    (5, 5),
]


START_TEMPLATES: List[RoomTemplate] = [
    RoomTemplate(
        "start_chamber",
        RoomCategory.START,
        (
            "#####n#####",
            "#.........#",
            "#.P.....P.#",
            "w.........e",
            "#.P.....P.#",
            "#.........#",
            "#####s#####",
        ),
    ),
]

NORMAL_TEMPLATES: List[RoomTemplate] = [
    RoomTemplate(
        "cross_chamber",
        RoomCategory.NORMAL,
        (
            "#####n#####",
            "#.........#",
            "#..x...x..#",
            "w.........e",
            "#.........#",
            "#.........#",
            "#####s#####",
        ),
    ),
    RoomTemplate(
        "pillared_hall",
        RoomCategory.NORMAL,
        (
            "#####n#####",
            "#.x.....x.#",
            "#..P...P..#",
            "w....x....e",
            "#..P...P..#",
            "#.........#",
            "#####s#####",
        ),
    ),
    RoomTemplate(
        "quiet_crossing",
        RoomCategory.NORMAL,
        (
            "#####n#####",
            "#.........#",
            "#.........#",
            "w.........e",
            "#.........#",
            "#.........#",
            "#####s#####",
        ),
    ),
    RoomTemplate(
        "southern_fork",
        RoomCategory.NORMAL,
        (
            "###########",
            "#.........#",
            "#...x.x...#",
            "w.........e",
            "#.........#",
            "#.........#",
            "#####s#####",
        ),
    ),
    RoomTemplate(
        "western_fork",
        RoomCategory.NORMAL,
        (
            "#####n#####",
            "#.........#",
            "#....x....#",
            "w.........#",
            "#....x....#",
            "#.........#",
            "#####s#####",
        ),
    ),
    RoomTemplate(
        "northern_fork",
        RoomCategory.NORMAL,
        (
            "#####n#####",
            "#.........#",
            "#..x...x..#",
            "w.........e",
            "#.........#",
            "#.........#",
            "###########",
        ),
    ),
    RoomTemplate(
        "eastern_fork",
        RoomCategory.NORMAL,
        (
            "#####n#####",
            "#.........#",
            "#....x....#",
            "#.........e",
            "#....x....#",
            "#.........#",
            "#####s#####",
        ),
    ),
    RoomTemplate(
        "long_gallery_ns",
        RoomCategory.NORMAL,
        (
            "#####n#####",
            "#...#.#...#",
            "#...#x#...#",
            "#...#.#...#",
            "#...#.#...#",
            "#...#.#...#",
            "#####s#####",
        ),
    ),
    RoomTemplate(
        "long_gallery_ew",
        RoomCategory.NORMAL,
        (
            "###########",
            "#.........#",
            "#####x#####",
            "w.........e",
            "###########",
            "#.........#",
            "###########",
        ),
    ),
]

BOSS_TEMPLATES: List[RoomTemplate] = [
    RoomTemplate.with_sockets(
        f"boss_arena_{direction.name.lower()}", RoomCategory.BOSS, [direction], enemies=1
    )
    for direction in ALL_DIRECTIONS
]

TREASURE_TEMPLATES: List[RoomTemplate] = [
    RoomTemplate.with_sockets(
        f"treasure_vault_{direction.name.lower()}", RoomCategory.TREASURE, [direction]
    )
    for direction in ALL_DIRECTIONS
]

SHOP_TEMPLATES: List[RoomTemplate] = [
    RoomTemplate.with_sockets(
        f"shop_{direction.name.lower()}", RoomCategory.SHOP, [direction]
    )
    for direction in ALL_DIRECTIONS
]

TemplateLibrary = Dict[RoomCategory, List[RoomTemplate]]


def default_templates() -> TemplateLibrary:
    """Returns a fresh copy of the built-in template pools, keyed by category."""
    return {
        RoomCategory.START: list(START_TEMPLATES),
        RoomCategory.NORMAL: list(NORMAL_TEMPLATES),
        RoomCategory.BOSS: list(BOSS_TEMPLATES),
        RoomCategory.TREASURE: list(TREASURE_TEMPLATES),
        RoomCategory.SHOP: list(SHOP_TEMPLATES),
    }


def templates_with_socket(
    templates: Iterable[RoomTemplate], direction: Direction
) -> List[RoomTemplate]:
    """Filter templates to the ones with a door on the given edge."""
    return [template for template in templates if template.has_socket(direction)]
