"""
Stage Generation Algorithm
==========================

We grow the stage as a chain of rooms on a small grid, then decorate it.

1. Place the start room at the centre cell. If that fails there is no stage.
2. Main path: pick a length in [min, max]. From the last placed room, shuffle
   the doors it still has free and take the first one leading to an in-bounds,
   empty cell that is not already on the path. Place a normal room there that
   has a door facing back. Stop early when no cell or template fits.
3. Boss room: one more step from the end of the main path, using the same
   search, provided the path holds at least one normal room.
4. Branches: every main-path room except the last may sprout a short side
   chain, grown the same way from all of that room's doors.
5. Special rooms: treasure and shop rooms are attached next to normal rooms
   that have a free door onto an empty cell, within an attempt budget.
6. Resolve every door to a connection or a wall, exactly once.

Any placement failure other than the start room only makes the stage
smaller: a shorter path, no boss, fewer branches or special rooms.

Every random draw comes from one random.Random seeded per run, in this order:
start template shuffle, main path length, then per main-path step a
direction shuffle and a template shuffle, the same pair for the boss room,
then per main-path room a branch roll and (if it branches) a branch length
followed by the per-step shuffles, and finally per special-room attempt a
candidate index, a direction shuffle and a template shuffle.
"""

import logging
import math
import random
from typing import List, Optional, Protocol, Sequence, Tuple

from .config import StageConfig
from .directions import Direction, GridPosition
from .room_factory import PlacementResult, RoomFactory
from .room_templates import RoomCategory, TemplateLibrary, default_templates
from .rooms import Room
from .stage_grid import StageGrid

logger = logging.getLogger(__name__)

BOSS_DIFFICULTY = 1.0

SPECIAL_ROOM_DIFFICULTY = {
    RoomCategory.TREASURE: 0.1,
    RoomCategory.SHOP: 0.0,
}


class RoomPopulator(Protocol):
    """Fills a placed room with content. Called once per room, during generation."""

    def populate(self, room: Room) -> None:
        ...


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class StageGenerator:
    """Builds one StageGrid per call to generate_stage()."""

    def __init__(
        self,
        config: Optional[StageConfig] = None,
        templates: Optional[TemplateLibrary] = None,
        populator: Optional[RoomPopulator] = None,
    ) -> None:
        self.config: StageConfig = config if config is not None else StageConfig()
        self.templates: TemplateLibrary = templates if templates is not None else default_templates()
        self.populator: Optional[RoomPopulator] = populator

        # Filled in by generate_stage()
        self.seed: Optional[int] = None
        self.main_path: List[GridPosition] = []

        self._rng: random.Random = random.Random()
        self._grid: StageGrid = StageGrid(*self.config.grid_size)
        self._factory: RoomFactory = RoomFactory(self.templates, self._rng)

    def _initialize(self) -> None:
        self.seed = self.config.resolve_seed()
        logger.info("Generating stage with seed: %d", self.seed)
        self._rng = random.Random(self.seed)
        self._grid = StageGrid(*self.config.grid_size)
        self._factory = RoomFactory(self.templates, self._rng)
        self.main_path = []

    def generate_stage(self) -> StageGrid:
        """
        Generate a stage.

        Returns:
            The finalized grid. It is empty when the start room could not be
            placed; otherwise every door is CLOSED or WALL.
        """
        self._initialize()
        grid = self._grid

        start_position = GridPosition(self.config.width // 2, self.config.height // 2)
        start_result = self._place_room(start_position, RoomCategory.START)
        if not start_result.success:
            logger.error("Failed to place the start room at %s; aborting generation", start_position)
            return grid
        self._populate(start_result.placed_room, 0.0)

        length = self._rng.randint(
            self.config.min_main_path_length, self.config.max_main_path_length
        )
        self.main_path = self._generate_main_path(start_position, length, start_result)
        self._generate_branches(self.main_path)
        self._place_special_rooms()
        RoomFactory.connect_all_rooms(grid)

        logger.info("Stage generation complete with %d rooms", grid.room_count)
        return grid

    # Placement helpers

    def _place_room(
        self,
        position: GridPosition,
        category: RoomCategory,
        required_incoming_direction: Optional[Direction] = None,
    ) -> PlacementResult:
        result = self._factory.create_room(
            category, position, required_incoming_direction=required_incoming_direction
        )
        if result.success:
            self._grid.add_room(position, result.placed_room)
        return result

    def _populate(self, room: Optional[Room], difficulty: float) -> None:
        if room is None:
            return
        room.difficulty = difficulty
        if self.populator is not None:
            self.populator.populate(room)

    def _next_room_position(
        self,
        current: GridPosition,
        exclude: Sequence[GridPosition],
        previous: PlacementResult,
    ) -> Optional[Tuple[GridPosition, Direction]]:
        """
        Pick where to grow next from `current`.

        Returns (cell, side of the new room facing `current`), or None.
        """
        if not previous.success:
            return None

        directions = list(previous.available_outgoing_directions)
        self._rng.shuffle(directions)

        for direction in directions:
            candidate = current.step(direction)
            if (
                self._grid.is_valid_position(candidate)
                and not self._grid.has_room(candidate)
                and candidate not in exclude
            ):
                return candidate, direction.opposite()
        return None

    # Main path and boss

    def _generate_main_path(
        self, start: GridPosition, length: int, start_result: PlacementResult
    ) -> List[GridPosition]:
        path = [start]
        current = start
        previous = start_result
        max_length = max(1, self.config.max_main_path_length)

        for _ in range(length):
            found = self._next_room_position(current, path, previous)
            if found is None:
                logger.warning(
                    "Main path: no free cell after %s; path is %d rooms shorter than planned",
                    current,
                    length - (len(path) - 1),
                )
                break

            next_position, required = found
            result = self._place_room(next_position, RoomCategory.NORMAL, required)
            if not result.success:
                logger.warning(
                    "Main path: no normal room fits %s with a %s door; stopping early",
                    next_position,
                    required.name,
                )
                break

            path.append(next_position)
            current = next_position
            previous = result
            self._populate(result.placed_room, _clamp01(len(path) / max_length))

        if len(path) <= 1:
            logger.warning("Main path has no normal rooms; skipping the boss room")
            return path

        found = self._next_room_position(current, path, previous)
        if found is None:
            logger.warning("No free cell for the boss room next to %s", current)
            return path

        boss_position, required = found
        boss_result = self._place_room(boss_position, RoomCategory.BOSS, required)
        if not boss_result.success:
            logger.warning("Failed to place the boss room at %s", boss_position)
            return path

        path.append(boss_position)
        self._populate(boss_result.placed_room, BOSS_DIFFICULTY)
        logger.info("Boss room placed at %s next to %s", boss_position, current)
        return path

    # Branches

    def _generate_branches(self, main_path: Sequence[GridPosition]) -> None:
        max_length = max(1, self.config.max_main_path_length)

        for index, parent_position in enumerate(main_path[:-1]):
            if self._rng.random() > self.config.branch_probability:
                continue

            parent = self._grid.get_room(parent_position)
            if parent is None:
                logger.warning("Branch parent at %s is missing; skipping branch", parent_position)
                continue

            if index == 0 and parent.category == RoomCategory.START:
                parent_difficulty = 0.0
            else:
                parent_difficulty = _clamp01((index + 1) / max_length)

            # Branches may use doors the main path already consumed; the
            # search skips occupied cells anyway.
            parent_result = PlacementResult(parent, parent.template.socket_directions)
            branch_length = 1 + self._rng.randrange(max(1, self.config.max_main_path_length // 3))
            placed = self._create_branch(
                parent_position, parent_result, branch_length, parent_difficulty
            )
            logger.info(
                "Branch from %s: %d/%d rooms placed", parent_position, placed, branch_length
            )

    def _create_branch(
        self,
        parent_position: GridPosition,
        parent_result: PlacementResult,
        length: int,
        parent_difficulty: float,
    ) -> int:
        branch = [parent_position]
        current = parent_position
        previous = parent_result

        for step in range(length):
            found = self._next_room_position(current, branch, previous)
            if found is None:
                logger.warning(
                    "Branch from %s: no free cell for room %d/%d", parent_position, step + 1, length
                )
                break

            next_position, required = found
            result = self._place_room(next_position, RoomCategory.NORMAL, required)
            if not result.success:
                logger.warning(
                    "Branch from %s: no normal room fits %s; stopping branch",
                    parent_position,
                    next_position,
                )
                break

            difficulty = _clamp01(
                parent_difficulty + (step + 1) * self.config.branch_difficulty_increment
            )
            self._populate(result.placed_room, difficulty)
            branch.append(next_position)
            current = next_position
            previous = result

        return len(branch) - 1

    # Special rooms

    def _place_special_rooms(self) -> None:
        total = self.config.special_rooms_count
        treasure_target = math.ceil(total / 2)
        shop_target = total // 2

        treasure_placed = self._place_special_category(RoomCategory.TREASURE, treasure_target)
        shop_placed = self._place_special_category(RoomCategory.SHOP, shop_target)

        if treasure_placed < treasure_target or shop_placed < shop_target:
            logger.warning(
                "Could not place all special rooms. Treasure: %d/%d, Shop: %d/%d",
                treasure_placed,
                treasure_target,
                shop_placed,
                shop_target,
            )

    def _place_special_category(self, category: RoomCategory, target: int) -> int:
        placed = 0
        attempts = self.config.special_room_attempts

        while placed < target and attempts > 0:
            candidates = self._special_room_candidates()
            if not candidates:
                break

            anchor_position = candidates[self._rng.randrange(len(candidates))]
            anchor = self._grid.get_room(anchor_position)
            anchor_result = PlacementResult(anchor, anchor.template.socket_directions)

            found = self._next_room_position(anchor_position, (), anchor_result)
            if found is not None:
                position, required = found
                result = self._place_room(position, category, required)
                if result.success:
                    placed += 1
                    self._populate(result.placed_room, SPECIAL_ROOM_DIFFICULTY[category])
                else:
                    logger.warning(
                        "Failed to place %s room at %s with a %s door",
                        category.name,
                        position,
                        required.name,
                    )
            attempts -= 1

        return placed

    def _special_room_candidates(self) -> List[GridPosition]:
        """
        Normal rooms with a door onto an empty cell that some treasure or shop
        template could fill.
        """
        candidates: List[GridPosition] = []
        for position, room in self._grid.rooms():
            if room.category != RoomCategory.NORMAL:
                continue
            free = self._grid.free_neighbors(position)
            for direction in room.template.socket_directions:
                if position.step(direction) not in free:
                    continue
                facing = direction.opposite()
                if self._factory.has_template_with_socket(
                    RoomCategory.TREASURE, facing
                ) or self._factory.has_template_with_socket(RoomCategory.SHOP, facing):
                    candidates.append(position)
                    break
        return candidates


def generate_stage(
    config: Optional[StageConfig] = None,
    templates: Optional[TemplateLibrary] = None,
    populator: Optional[RoomPopulator] = None,
) -> StageGrid:
    """Generate a stage with a throwaway StageGenerator."""
    return StageGenerator(config, templates, populator).generate_stage()
