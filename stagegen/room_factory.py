"""
Room creation and door resolution.

The factory builds Room instances from templates and, once every room has
been placed, resolves each door to a connection or a wall. It never writes to
the grid itself; the caller decides whether a created room gets stored.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from .directions import Direction, GridPosition
from .doors import DoorState
from .room_templates import RoomCategory, RoomTemplate, templates_with_socket
from .rooms import Room
from .stage_grid import StageGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementResult:
    """
    Outcome of one attempt to create a room.

    available_outgoing_directions are the placed room's sockets, in canonical
    order, minus the side it was entered from.
    """

    placed_room: Optional[Room]
    available_outgoing_directions: Tuple[Direction, ...] = ()

    @property
    def success(self) -> bool:
        return self.placed_room is not None


FAILED_PLACEMENT = PlacementResult(None, ())


class RoomFactory:
    """Creates rooms from per-category template pools."""

    def __init__(
        self,
        templates: Mapping[RoomCategory, Sequence[RoomTemplate]],
        rng: Optional[random.Random] = None,
    ) -> None:
        self._templates = templates
        self._rng = rng if rng is not None else random.Random()

    def templates_for(self, category: RoomCategory) -> List[RoomTemplate]:
        return list(self._templates.get(category, ()))

    def has_template_with_socket(self, category: RoomCategory, direction: Direction) -> bool:
        return any(template.has_socket(direction) for template in self.templates_for(category))

    def create_room(
        self,
        category: RoomCategory,
        position: GridPosition,
        template: Optional[RoomTemplate] = None,
        required_incoming_direction: Optional[Direction] = None,
    ) -> PlacementResult:
        """
        Create a room of `category` at `position`.

        Args:
            category: Pool to choose from when no template is given
            position: Grid cell the room will occupy
            template: Use this template instead of choosing one
            required_incoming_direction: The side of the new room that faces
                the room it grows from. Chosen templates must have a socket
                there, and it is left out of the available directions.

        Returns:
            A PlacementResult. On failure placed_room is None; nothing raises.
        """
        if template is None:
            candidates = self.templates_for(category)
            if not candidates:
                logger.warning("No %s templates available for %s", category.name, position)
                return FAILED_PLACEMENT
            if required_incoming_direction is not None:
                candidates = templates_with_socket(candidates, required_incoming_direction)
                if not candidates:
                    logger.warning(
                        "No %s template has a %s door for %s",
                        category.name,
                        required_incoming_direction.name,
                        position,
                    )
                    return FAILED_PLACEMENT
            self._rng.shuffle(candidates)
            template = candidates[0]
        elif (
            required_incoming_direction is not None
            and not template.has_socket(required_incoming_direction)
        ):
            logger.warning(
                "Template '%s' has no %s door for %s",
                template.name,
                required_incoming_direction.name,
                position,
            )
            return FAILED_PLACEMENT

        room = Room(template, position)
        available = tuple(
            direction
            for direction in template.socket_directions
            if direction != required_incoming_direction
        )
        logger.debug("Created %r with outgoing %s", room, [d.name for d in available])
        return PlacementResult(room, available)

    @staticmethod
    def connect_all_rooms(grid: StageGrid) -> int:
        """
        Resolve every door on the grid to CLOSED (connected) or WALL.

        A door connects when the neighbouring cell holds a room with a door
        facing back; otherwise it becomes a wall. Running this again on the
        same grid leaves every door in the same state.

        Returns:
            Number of door pairs connected by this call (0 when re-run).
        """
        connected_pairs = 0
        for position, room in grid.rooms():
            for door in room.iter_doors():
                neighbor_position = position.step(door.direction)
                partner = grid.get_door(neighbor_position, door.direction.opposite())

                if (
                    partner is None
                    or partner.state == DoorState.WALL
                    or door.state == DoorState.WALL
                ):
                    if door.state != DoorState.WALL:
                        logger.debug("%r has nothing to connect to; walling it", door)
                    door.resolve_wall()
                    continue

                if door.connection != partner.key:
                    connected_pairs += 1
                door.resolve_connection(partner.key, grid.resolve)
                partner.resolve_connection(door.key, grid.resolve)

        logger.info("Resolved doors on %d rooms, %d new connections", grid.room_count, connected_pairs)
        return connected_pairs
