import random
from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple


@dataclass
class StageConfig:
    """Settings for one stage generation run."""

    width: int = 8
    height: int = 8
    min_main_path_length: int = 3
    max_main_path_length: int = 7
    special_rooms_count: int = 2
    branch_probability: float = 0.5
    seed: int = 0
    use_random_seed: bool = True
    special_room_attempts: int = 20
    branch_difficulty_increment: float = 0.1

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Grid size must be positive, got {self.width}x{self.height}")
        if self.min_main_path_length < 0:
            raise ValueError("min_main_path_length must not be negative")
        if self.max_main_path_length < self.min_main_path_length:
            raise ValueError(
                f"max_main_path_length ({self.max_main_path_length}) is below "
                f"min_main_path_length ({self.min_main_path_length})"
            )
        if self.special_rooms_count < 0:
            raise ValueError("special_rooms_count must not be negative")
        if not 0.0 <= self.branch_probability <= 1.0:
            raise ValueError(f"branch_probability must be in [0, 1], got {self.branch_probability}")
        if self.special_room_attempts < 0:
            raise ValueError("special_room_attempts must not be negative")

    @property
    def grid_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def resolve_seed(self) -> int:
        """The seed to use for a run: a fresh one when use_random_seed is set."""
        if self.use_random_seed:
            return random.randrange(0, 2**31 - 1)
        return self.seed

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StageConfig":
        """
        Build a config from a mapping, e.g. parsed JSON.

        Raises:
            ValueError: On unknown keys or out-of-range values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown stage config keys: {', '.join(sorted(unknown))}")
        return cls(**dict(data))


__all__ = ["StageConfig"]
