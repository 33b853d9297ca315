#!/usr/bin/env python3
"""
Render a generated stage to an image file for visual inspection.

Useful for:
- Checking how templates shape the room graph
- Debugging stage generation

Usage:
    python tools/render_stage_image.py                    # Default 8x8 grid, random seed
    python tools/render_stage_image.py --seed 42          # Reproducible stage
    python tools/render_stage_image.py --output my.png    # Custom output path
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from render_stage_ascii import add_stage_arguments, build_config
from stagegen.render import save_stage_image
from stagegen.stage_generator import StageGenerator


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render a stage to an image file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    add_stage_arguments(parser)
    parser.add_argument(
        "--output", "-o",
        type=str,
        default="stage_render.png",
        help="Output image path (default: stage_render.png)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=48,
        help="Pixels per grid cell (default: 48)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    generator = StageGenerator(build_config(args))
    print("Generating stage...")
    grid = generator.generate_stage()
    print(f"Seed: {generator.seed}, {grid.room_count} rooms on a {grid.width}x{grid.height} grid")

    output_path = Path(args.output)
    save_stage_image(grid, str(output_path), args.cell_size)
    print(f"Saved to: {output_path.absolute()}")


if __name__ == "__main__":
    main()
