"""hexworld command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from .config import GeneratorConfig, HemisphereMode
from .coordinates import HexDirection
from .errors import HexWorldError
from .generator import generate_world
from .grid import HexGrid
from .io import load_json, save_json, validate_map_payload
from .search import find_path

TERRAIN_GLYPHS = {0: ".", 1: '"', 2: ",", 3: "^", 4: "*"}


def configure_logging(verbose: bool = False) -> None:
    """Route structlog output to stderr through the console renderer."""
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="hexworld CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Generate a world and save it as JSON")
    generate.add_argument("--width", type=int, default=40)
    generate.add_argument("--height", type=int, default=30)
    generate.add_argument("--wrap", action="store_true", help="Wrap east-west")
    generate.add_argument("--seed", type=int)
    generate.add_argument("--config", dest="config_path", help="JSON file of generator parameters")
    generate.add_argument("--land", type=int, dest="land_percentage")
    generate.add_argument("--water-level", type=int, dest="water_level")
    generate.add_argument("--erosion", type=int, dest="erosion_percentage")
    generate.add_argument("--rivers", type=int, dest="river_percentage")
    generate.add_argument("--regions", type=int, dest="region_count")
    generate.add_argument(
        "--hemisphere",
        choices=[m.value for m in HemisphereMode],
    )
    generate.add_argument(
        "--wind",
        choices=[d.name for d in HexDirection],
        dest="wind_direction",
    )
    generate.add_argument("--out", dest="output_path")
    generate.add_argument("--ascii", action="store_true", help="Print a terrain map")

    path = sub.add_parser("path", help="Find a path on a saved map")
    path.add_argument("--in", dest="input_path", required=True)
    path.add_argument("--from", dest="origin", type=int, nargs=2, metavar=("X", "Z"), required=True)
    path.add_argument("--to", dest="destination", type=int, nargs=2, metavar=("X", "Z"), required=True)
    path.add_argument("--speed", type=int, default=24)

    validate = sub.add_parser("validate", help="Validate a saved map")
    validate.add_argument("--in", dest="input_path", required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.command == "generate":
            _cmd_generate(args)
        elif args.command == "path":
            _cmd_path(args)
        elif args.command == "validate":
            _cmd_validate(args)
    except HexWorldError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(2)


def _config_from_args(args) -> GeneratorConfig:
    params = {}
    if args.config_path:
        try:
            loaded = json.loads(Path(args.config_path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            print(f"Cannot read config {args.config_path}: {exc}")
            raise SystemExit(1)
        if not isinstance(loaded, dict):
            print(f"Config {args.config_path} must hold a JSON object")
            raise SystemExit(1)
        params.update(loaded)
    for name in (
        "land_percentage",
        "water_level",
        "erosion_percentage",
        "river_percentage",
        "region_count",
        "hemisphere",
        "wind_direction",
    ):
        value = getattr(args, name)
        if value is not None:
            params[name] = value
    return GeneratorConfig.from_dict(params)


def _cmd_generate(args) -> None:
    config = _config_from_args(args)
    result = generate_world(args.width, args.height, args.wrap, args.seed, config)
    grid = result.grid
    report = result.report

    if args.output_path:
        save_json(grid, args.output_path)
        print(f"Saved {args.output_path}")
    print(f"seed: {result.seed}")
    print(f"size: {grid.cell_count_x}x{grid.cell_count_z}{' (wrapping)' if grid.wrapping else ''}")
    print(f"land cells: {report.land_cells} (budget {report.land_budget})")
    river_cells = sum(1 for c in grid if c.has_river)
    print(f"river cells: {river_cells} (budget {report.river_budget})")
    for warning in report.warnings:
        print(f"warning: {warning}")
    if args.ascii:
        print(render_ascii(grid))


def _cell_or_fail(grid: HexGrid, x: int, z: int, name: str):
    cell = grid.get_cell_offset(x, z)
    if cell is None:
        print(f"{name} ({x}, {z}) is outside the {grid.cell_count_x}x{grid.cell_count_z} map")
        raise SystemExit(1)
    return cell


def _cmd_path(args) -> None:
    grid = load_json(args.input_path)
    origin = _cell_or_fail(grid, *args.origin, "origin")
    destination = _cell_or_fail(grid, *args.destination, "destination")
    path = find_path(grid, origin, destination, args.speed)
    if path is None:
        print("No path")
        raise SystemExit(1)
    for cell, distance, turn in zip(path.cells, path.distances, path.turns):
        x, z = cell.coordinates.to_offset()
        print(f"({x}, {z}) distance={distance} turn={turn}")
    print(f"cost: {path.cost} turns: {path.turns[-1]}")


def _cmd_validate(args) -> None:
    try:
        payload = json.loads(Path(args.input_path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"Not valid JSON: {exc}")
        raise SystemExit(1)
    errors = validate_map_payload(payload)
    if errors:
        for error in errors:
            print(error)
        raise SystemExit(1)
    load_json(args.input_path)
    print("OK")


def render_ascii(grid: HexGrid) -> str:
    """Top-down text map: ``~`` water, ``=`` river, terrain glyphs otherwise.

    Odd rows are indented by one character, as in the hex offset layout.
    Row 0 is printed last so that north is up.
    """
    lines = []
    for z in reversed(range(grid.cell_count_z)):
        row = []
        for x in range(grid.cell_count_x):
            cell = grid.get_cell_offset(x, z)
            if cell.is_underwater:
                row.append("~")
            elif cell.has_river:
                row.append("=")
            else:
                row.append(TERRAIN_GLYPHS.get(cell.terrain_type_index, "?"))
        lines.append((" " if z % 2 else "") + " ".join(row))
    return "\n".join(lines)
