#!/usr/bin/env python3
"""
Render a generated stage as ASCII art for debugging.

Usage:
    python tools/render_stage_ascii.py [--width N] [--height N] [--seed S] [--config stage.json]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import stagegen
sys.path.insert(0, str(Path(__file__).parent.parent))

from stagegen.config import StageConfig
from stagegen.render import render_stage_ascii
from stagegen.stage_generator import StageGenerator


def build_config(args: argparse.Namespace) -> StageConfig:
    """Config file first, then command-line overrides."""
    settings = {}
    if args.config:
        with open(args.config) as f:
            settings.update(json.load(f))
    if args.width is not None:
        settings["width"] = args.width
    if args.height is not None:
        settings["height"] = args.height
    if args.seed is not None:
        settings["seed"] = args.seed
        settings["use_random_seed"] = False
    return StageConfig.from_dict(settings)


def add_stage_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--width", type=int, help="Grid width in rooms")
    parser.add_argument("--height", type=int, help="Grid height in rooms")
    parser.add_argument("--seed", "-s", type=int, help="Random seed for reproducible generation")
    parser.add_argument("--config", "-c", type=str, help="JSON file with StageConfig fields")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show generation log")


def main():
    parser = argparse.ArgumentParser(description="Render a stage as ASCII art")
    add_stage_arguments(parser)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    generator = StageGenerator(build_config(args))
    grid = generator.generate_stage()

    print(render_stage_ascii(grid))

    print(f"\n--- Debug Info ---")
    print(f"Seed: {generator.seed}")
    print(f"Grid size: {grid.width}x{grid.height}")
    print(f"Rooms generated: {grid.room_count}")
    print(f"Main path: {' -> '.join(str(p) for p in generator.main_path)}")
    print(f"Boss room: {grid.boss_position if grid.boss_position is not None else 'none'}")
    for position, room in grid.rooms():
        print(f"  {position}: {room.template} difficulty={room.difficulty:.2f}")


if __name__ == "__main__":
    main()
