"""
Door state machine.

Every door starts HIDDEN. The room factory's resolution pass turns it into
either CLOSED (connected to the facing door of the neighbouring room) or WALL
(nothing to connect to). WALL is terminal.

Gameplay then drives connected doors with open/close/lock/unlock. A connected
pair always moves together, so a passage is never open on one side only.

A door never holds its partner object. It stores the partner's grid position
and direction (a DoorConnection) plus a resolver, normally
StageGrid.resolve, that looks the partner up when needed.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional, Tuple, TYPE_CHECKING

from .directions import Direction, GridPosition
from .event_system import Event, EventBus

if TYPE_CHECKING:
    from .rooms import Room

logger = logging.getLogger(__name__)


class DoorState(Enum):
    HIDDEN = auto()
    CLOSED = auto()
    OPEN = auto()
    LOCKED = auto()
    WALL = auto()


@dataclass(frozen=True)
class DoorConnection:
    """Identifies a door by its room's grid position and its direction."""

    position: GridPosition
    direction: Direction


PartnerResolver = Callable[[DoorConnection], Optional[Tuple["Room", "Door"]]]


class Door:
    """A door on one edge of a placed room."""

    def __init__(self, direction: Direction, owner: GridPosition) -> None:
        self.direction: Direction = direction
        self.owner: GridPosition = owner
        self._state: DoorState = DoorState.HIDDEN
        self._connection: Optional[DoorConnection] = None
        self._resolver: Optional[PartnerResolver] = None
        self.event_bus: Optional[EventBus] = None

    @property
    def state(self) -> DoorState:
        return self._state

    @property
    def connection(self) -> Optional[DoorConnection]:
        return self._connection

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def key(self) -> DoorConnection:
        """How other doors refer to this one."""
        return DoorConnection(self.owner, self.direction)

    def __repr__(self) -> str:
        return f"Door({self.direction.name} of {self.owner}, {self._state.name})"

    # Resolution: only the room factory calls these

    def resolve_connection(
        self, connection: DoorConnection, resolver: PartnerResolver
    ) -> None:
        """
        Connect this door to the door identified by `connection`.

        Re-connecting to the same partner re-asserts CLOSED.

        Raises:
            RuntimeError: If the partner isn't the facing door of the
                neighbouring cell, or this door is already a wall.
        """
        expected = DoorConnection(self.owner.step(self.direction), self.direction.opposite())
        if connection != expected:
            raise RuntimeError(
                f"{self!r} cannot connect to {connection}: expected {expected}"
            )
        if self._state == DoorState.WALL:
            raise RuntimeError(f"{self!r} is a wall and cannot be connected")
        self._connection = connection
        self._resolver = resolver
        self._state = DoorState.CLOSED

    def resolve_wall(self) -> None:
        """Turn this door into a wall. Connected doors are never walled."""
        if self._connection is not None:
            raise RuntimeError(f"{self!r} is connected and cannot become a wall")
        self._state = DoorState.WALL

    # Partner lookup

    def partner(self) -> Optional[Tuple["Room", "Door"]]:
        """Returns (connected room, its facing door), or None if unconnected."""
        if self._connection is None or self._resolver is None:
            return None
        return self._resolver(self._connection)

    def _partner_door(self) -> Optional["Door"]:
        found = self.partner()
        return found[1] if found is not None else None

    # Gameplay transitions

    def open(self) -> None:
        """CLOSED -> OPEN, together with the partner. Refused if either side is locked."""
        if self._state != DoorState.CLOSED:
            return
        partner = self._partner_door()
        if partner is not None and partner.state == DoorState.LOCKED:
            logger.debug("%r not opened: partner %r is locked", self, partner)
            return
        self._state = DoorState.OPEN
        if partner is not None and partner.state != DoorState.OPEN:
            partner.open()

    def close(self) -> None:
        """{CLOSED, OPEN, LOCKED} -> CLOSED."""
        if self._state in (DoorState.WALL, DoorState.HIDDEN):
            return
        self._state = DoorState.CLOSED
        partner = self._partner_door()
        if partner is not None and partner.state != DoorState.CLOSED:
            partner.close()

    def lock(self) -> None:
        """{CLOSED, OPEN} -> LOCKED."""
        if self._state not in (DoorState.CLOSED, DoorState.OPEN):
            return
        self._state = DoorState.LOCKED
        partner = self._partner_door()
        if partner is not None and partner.state != DoorState.LOCKED:
            partner.lock()

    def unlock(self) -> None:
        """LOCKED -> CLOSED."""
        if self._state != DoorState.LOCKED:
            return
        self._state = DoorState.CLOSED
        partner = self._partner_door()
        if partner is not None and partner.state == DoorState.LOCKED:
            partner.unlock()

    def player_crossed(self) -> bool:
        """
        Signal that the player stepped into this door.

        Only an open, connected door lets the player through: it emits
        DOOR_ENTERED with the connected room and the door the player arrives
        by, and returns True. A locked door emits DOOR_BLOCKED. Anything else
        is ignored.
        """
        if self._state == DoorState.OPEN and self._connection is not None:
            found = self.partner()
            if found is None:
                logger.warning("%r is connected to a missing door %s", self, self._connection)
                return False
            room, entry_door = found
            self._emit(Event.DOOR_ENTERED, door=self, room=room, entry_door=entry_door)
            return True

        if self._state == DoorState.LOCKED:
            self._emit(Event.DOOR_BLOCKED, door=self)
        return False

    def _emit(self, event: Event, **kwargs: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event, **kwargs)
