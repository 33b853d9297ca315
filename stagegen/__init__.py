"""Procedural stage (room graph) generation."""

from stagegen.directions import (
    ALL_DIRECTIONS,
    Direction,
    GridPosition,
    direction_from_to,
    opposite,
    to_offset,
)
from stagegen.room_templates import (
    DoorSocket,
    RoomCategory,
    RoomTemplate,
    SpawnPoint,
    TemplateError,
    TemplateLibrary,
    default_templates,
)
from stagegen.event_system import Event, EventBus, EventData
from stagegen.doors import Door, DoorConnection, DoorState
from stagegen.rooms import Room
from stagegen.stage_grid import StageGrid
from stagegen.room_factory import PlacementResult, RoomFactory
from stagegen.config import StageConfig
from stagegen.stage_generator import RoomPopulator, StageGenerator, generate_stage
from stagegen.stage_manager import StageNavigator
