#!/usr/bin/env python3
"""Demo: generate a world, print it as text, then walk a unit across it.

Prints:
  1. The generation report (budgets and warnings)
  2. An ASCII terrain map (north up)
  3. A turn-by-turn path between two random dry cells
  4. How many cells the unit can see from its start and end points

Usage:
    python scripts/demo_world.py                          # default world
    python scripts/demo_world.py --width 60 --seed 7      # customise
"""

from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from hexworld import (
    GeneratorConfig,
    find_path,
    generate_world,
    increase_visibility,
)
from hexworld.cli import render_ascii

VIEW_RANGE = 3


def main() -> None:
    parser = argparse.ArgumentParser(description="World generation and pathfinding demo")
    parser.add_argument("--width", type=int, default=40, help="Cells east-west (default: 40)")
    parser.add_argument("--height", type=int, default=30, help="Cells north-south (default: 30)")
    parser.add_argument("--seed", type=int, default=None, help="World seed (default: random)")
    parser.add_argument("--land", type=int, default=50, help="Land percentage (default: 50)")
    parser.add_argument("--speed", type=int, default=24, help="Unit speed per turn (default: 24)")
    args = parser.parse_args()

    config = GeneratorConfig(land_percentage=args.land)
    print(f"Generating {args.width}x{args.height} world …")
    result = generate_world(args.width, args.height, seed=args.seed, config=config)
    grid = result.grid
    report = result.report
    print(f"  seed {result.seed}, {report.land_cells} land cells, "
          f"{sum(1 for c in grid if c.has_river)} river cells")
    for warning in report.warnings:
        print(f"  • {warning}")
    print()
    print(render_ascii(grid))
    print()

    dry = [c for c in grid if not c.is_underwater]
    if len(dry) < 2:
        print("Not enough land for a walk")
        return

    rng = random.Random(result.seed)
    origin, destination = rng.sample(dry, 2)
    print(f"Walking {origin.coordinates} → {destination.coordinates} at speed {args.speed} …")
    path = find_path(grid, origin, destination, args.speed)
    if path is None:
        print("  no path (different landmasses?)")
    else:
        for cell, turn in zip(path.cells, path.turns):
            print(f"  turn {turn}: {cell.coordinates}")
        print(f"  cost {path.cost}, arrives in turn {path.turns[-1]}")

    for label, cell in (("start", origin), ("end", destination)):
        seen = increase_visibility(grid, cell, VIEW_RANGE)
        print(f"Visible from {label}: {len(seen)} cells")
    explored = sum(1 for c in grid if c.is_explored)
    print(f"Explored: {explored} of {grid.cell_count} cells")
    print("Done ✓")


if __name__ == "__main__":
    main()
