"""Property tests for generated stages."""

import logging
from collections import deque
from typing import List, Set

import pytest

from stagegen.config import StageConfig
from stagegen.directions import Direction, GridPosition
from stagegen.doors import DoorState
from stagegen.room_templates import RoomCategory, default_templates
from stagegen.stage_generator import StageGenerator, generate_stage
from stagegen.stage_grid import StageGrid

SEEDS = list(range(100))


def seeded(seed: int, **overrides) -> StageConfig:
    return StageConfig(seed=seed, use_random_seed=False, **overrides)


def snapshot(grid: StageGrid):
    """Everything that makes two grids equal: rooms, templates and doors."""
    return [
        (
            position,
            room.category,
            room.template.name,
            room.difficulty,
            tuple((d.direction, d.state, d.connection) for d in room.iter_doors()),
        )
        for position, room in grid.rooms()
    ]


def reachable_from(grid: StageGrid, start: GridPosition) -> Set[GridPosition]:
    visited = {start}
    queue = deque([start])
    while queue:
        position = queue.popleft()
        for neighbor in grid.connected_positions(position):
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)
    return visited


def rooms_of(grid: StageGrid, category: RoomCategory) -> List[GridPosition]:
    return [p for p, room in grid.rooms() if room.category == category]


class TestDeterminism:
    """The same seed and config give the same stage."""

    @pytest.mark.parametrize("seed", [0, 1, 42, 1234567])
    def test_same_seed_same_stage(self, seed):
        first = generate_stage(seeded(seed))
        second = generate_stage(seeded(seed))
        assert snapshot(first) == snapshot(second)

    def test_generator_can_be_reused(self):
        generator = StageGenerator(seeded(42))
        first = snapshot(generator.generate_stage())
        path = list(generator.main_path)
        second = snapshot(generator.generate_stage())
        assert first == second
        assert generator.main_path == path

    def test_different_seeds_differ(self):
        stages = {repr(snapshot(generate_stage(seeded(seed)))) for seed in range(10)}
        assert len(stages) > 1

    def test_fixed_seed_is_reported(self):
        generator = StageGenerator(seeded(99))
        generator.generate_stage()
        assert generator.seed == 99

    def test_random_seed_is_reported(self):
        generator = StageGenerator(StageConfig(use_random_seed=True))
        generator.generate_stage()
        assert 0 <= generator.seed < 2**31 - 1


class TestStageProperties:
    """Invariants every generated stage holds."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_no_hidden_doors(self, seed):
        grid = generate_stage(seeded(seed))
        for _, room in grid.rooms():
            for door in room.iter_doors():
                assert door.state in (DoorState.CLOSED, DoorState.WALL)
                assert (door.state == DoorState.WALL) == (door.connection is None)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_occupancy(self, seed):
        grid = generate_stage(seeded(seed))
        for position, room in grid.rooms():
            assert room.position == position
            assert 0 <= position.x < grid.width
            assert 0 <= position.y < grid.height
        assert int((grid.occupancy() > 0).sum()) == grid.room_count

    @pytest.mark.parametrize("seed", SEEDS)
    def test_door_symmetry(self, seed):
        grid = generate_stage(seeded(seed))
        for position, room in grid.rooms():
            for door in room.iter_doors():
                if not door.is_connected:
                    continue
                partner_room, partner = door.partner()
                assert partner.connection == door.key
                assert partner.direction == door.direction.opposite()
                assert partner_room.position == position.step(door.direction)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_single_start_at_most_one_boss(self, seed):
        grid = generate_stage(seeded(seed))
        assert rooms_of(grid, RoomCategory.START) == [GridPosition(4, 4)]
        bosses = rooms_of(grid, RoomCategory.BOSS)
        assert len(bosses) <= 1
        assert grid.boss_position == (bosses[0] if bosses else None)

    @pytest.mark.parametrize("seed", SEEDS[:25])
    def test_every_room_is_reachable(self, seed):
        grid = generate_stage(seeded(seed))
        assert reachable_from(grid, grid.start_position) == {p for p, _ in grid.rooms()}

    @pytest.mark.parametrize("seed", SEEDS[:25])
    def test_main_path_is_a_connected_chain(self, seed):
        generator = StageGenerator(seeded(seed))
        grid = generator.generate_stage()
        path = generator.main_path

        assert path[0] == grid.start_position
        assert len(set(path)) == len(path)
        for previous, current in zip(path, path[1:]):
            assert current in grid.connected_positions(previous)
        if grid.boss_position is not None:
            assert path[-1] == grid.boss_position
            normals = path[1:-1]
        else:
            normals = path[1:]
        assert len(normals) <= 7
        assert all(grid.get_room(p).category == RoomCategory.NORMAL for p in normals)

    @pytest.mark.parametrize("seed", SEEDS[:25])
    def test_special_rooms_hang_off_normal_rooms(self, seed):
        grid = generate_stage(seeded(seed))
        treasure = rooms_of(grid, RoomCategory.TREASURE)
        shops = rooms_of(grid, RoomCategory.SHOP)
        assert len(treasure) <= 1
        assert len(shops) <= 1
        assert sorted(grid.special_positions, key=lambda p: (p.x, p.y)) == sorted(
            treasure + shops, key=lambda p: (p.x, p.y)
        )
        for position in treasure + shops:
            (neighbor,) = grid.connected_positions(position)
            assert grid.get_room(neighbor).category == RoomCategory.NORMAL

    @pytest.mark.parametrize("seed", SEEDS[:25])
    def test_difficulty(self, seed):
        grid = generate_stage(seeded(seed))
        expected = {
            RoomCategory.START: 0.0,
            RoomCategory.BOSS: 1.0,
            RoomCategory.TREASURE: 0.1,
            RoomCategory.SHOP: 0.0,
        }
        for _, room in grid.rooms():
            assert 0.0 <= room.difficulty <= 1.0
            if room.category in expected:
                assert room.difficulty == expected[room.category]
            else:
                assert room.difficulty > 0.0


class TestScenarios:
    """Specific configurations."""

    def test_default_grid_seed_42(self):
        generator = StageGenerator(seeded(42, width=8, height=8, special_rooms_count=2))
        grid = generator.generate_stage()

        assert grid.size == (8, 8)
        assert grid.start_position == GridPosition(4, 4)
        assert len(rooms_of(grid, RoomCategory.START)) == 1
        assert len(rooms_of(grid, RoomCategory.TREASURE) + rooms_of(grid, RoomCategory.SHOP)) <= 2
        for _, room in grid.rooms():
            for door in room.iter_doors():
                assert door.state in (DoorState.CLOSED, DoorState.WALL)

    @pytest.mark.parametrize("seed", SEEDS[:30])
    def test_normal_pool_without_north_doors(self, seed):
        templates = default_templates()
        templates[RoomCategory.NORMAL] = [
            t for t in templates[RoomCategory.NORMAL] if not t.has_socket(Direction.NORTH)
        ]
        generator = StageGenerator(seeded(seed), templates)
        grid = generator.generate_stage()

        assert grid.start_room is not None
        for position in rooms_of(grid, RoomCategory.NORMAL):
            assert not grid.get_room(position).template.has_socket(Direction.NORTH)
        # No room ever sits directly south of its parent on the main path
        for previous, current in zip(generator.main_path, generator.main_path[1:]):
            if grid.get_room(current).category == RoomCategory.NORMAL:
                assert current != previous.step(Direction.SOUTH)

    def test_missing_start_templates_gives_empty_grid(self):
        templates = default_templates()
        del templates[RoomCategory.START]
        generator = StageGenerator(seeded(1), templates)
        grid = generator.generate_stage()

        assert grid.room_count == 0
        assert grid.start_position is None
        assert generator.main_path == []

    def test_zero_length_main_path(self):
        grid = generate_stage(
            seeded(5, min_main_path_length=0, max_main_path_length=0, special_rooms_count=2)
        )
        assert grid.room_count == 1
        assert grid.boss_position is None
        assert all(d.state == DoorState.WALL for d in grid.start_room.iter_doors())

    def test_one_cell_grid(self):
        grid = generate_stage(seeded(3, width=1, height=1))
        assert grid.room_count == 1
        assert grid.start_position == GridPosition(0, 0)
        assert all(d.state == DoorState.WALL for d in grid.start_room.iter_doors())

    @pytest.mark.parametrize("seed", SEEDS[:20])
    def test_no_branches(self, seed):
        generator = StageGenerator(seeded(seed, branch_probability=0.0, special_rooms_count=0))
        grid = generator.generate_stage()
        assert {p for p, _ in grid.rooms()} == set(generator.main_path)

    @pytest.mark.parametrize("seed", SEEDS[:20])
    def test_no_special_rooms(self, seed):
        grid = generate_stage(seeded(seed, special_rooms_count=0))
        assert grid.special_positions == []

    @pytest.mark.parametrize("seed", SEEDS[:20])
    def test_odd_special_room_split(self, seed):
        grid = generate_stage(seeded(seed, special_rooms_count=3))
        assert len(rooms_of(grid, RoomCategory.TREASURE)) <= 2
        assert len(rooms_of(grid, RoomCategory.SHOP)) <= 1

    def test_populator_sees_every_room_once(self):
        seen = []

        class Recorder:
            def populate(self, room):
                seen.append((room.position, room.difficulty))

        generator = StageGenerator(seeded(8), populator=Recorder())
        grid = generator.generate_stage()

        assert len(seen) == grid.room_count
        assert {p for p, _ in seen} == {p for p, _ in grid.rooms()}
        assert dict(seen) == {p: room.difficulty for p, room in grid.rooms()}

    def test_non_square_grid(self):
        config = seeded(5, width=5, height=3)
        grid = generate_stage(config)
        assert grid.size == config.grid_size == (5, 3)
        assert grid.start_position == GridPosition(2, 1)
        assert grid.occupancy().shape == (3, 5)

    @pytest.mark.parametrize("seed", SEEDS[:10])
    def test_every_branch_reports_its_size(self, seed, caplog):
        caplog.set_level(logging.INFO, logger="stagegen.stage_generator")
        generator = StageGenerator(seeded(seed, branch_probability=1.0))
        generator.generate_stage()

        branches = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Branch from")]
        branches = [m for m in branches if "rooms placed" in m]
        assert len(branches) == len(generator.main_path) - 1
