"""Logical save / restore of grids as JSON-serialisable dicts.

Restoring never trusts the payload blindly: a fresh grid is built and
every field is re-applied through the same mutators used for live
editing.  Scalars go first so that the river and road pass sees final
elevations; rivers or roads that break the invariants are dropped
rather than restored.

Functions
---------
- :func:`grid_to_dict` / :func:`grid_from_dict` — payload conversion
- :func:`validate_map_payload` — structural check, list of errors
- :func:`save_json` / :func:`load_json` — file helpers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import structlog

from .coordinates import HexDirection
from .errors import ConfigurationError, MapFormatError
from .grid import HexGrid

logger = structlog.get_logger()

PathLike = Union[str, Path]

FORMAT_VERSION = 1

_CELL_INT_FIELDS = ("elevation", "water_level", "terrain", "urban", "farm", "plant")


def _cell_to_dict(cell) -> Dict[str, Any]:
    return {
        "elevation": cell.elevation,
        "water_level": cell.water_level,
        "terrain": cell.terrain_type_index,
        "urban": cell.urban_level,
        "farm": cell.farm_level,
        "plant": cell.plant_level,
        "walled": cell.walled,
        "roads": list(cell.roads),
        "incoming_river": None if cell.incoming_river is None else int(cell.incoming_river),
        "outgoing_river": None if cell.outgoing_river is None else int(cell.outgoing_river),
        "explored": cell.is_explored,
        "color": None if cell.color is None else list(cell.color),
    }


def grid_to_dict(grid: HexGrid) -> Dict[str, Any]:
    """Serialise every persistent field of *grid*."""
    return {
        "version": FORMAT_VERSION,
        "width": grid.cell_count_x,
        "height": grid.cell_count_z,
        "wrapping": grid.wrapping,
        "elevation_range": list(grid.elevation_range),
        "cells": [_cell_to_dict(c) for c in grid],
    }


def validate_map_payload(payload: Any) -> List[str]:
    """Validate the structure of a saved map payload.

    Returns a list of error messages (empty = valid).  Value ranges are
    checked later by the cell mutators during :func:`grid_from_dict`.
    """
    if not isinstance(payload, dict):
        return ["Payload must be a JSON object"]
    errors: List[str] = []

    for key in ("version", "width", "height", "wrapping", "elevation_range", "cells"):
        if key not in payload:
            errors.append(f"Missing top-level key: {key}")
    if errors:
        return errors

    if payload["version"] != FORMAT_VERSION:
        errors.append(f"Unsupported version: {payload['version']!r}")
    width, height = payload["width"], payload["height"]
    if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
        errors.append("'width' and 'height' must be positive integers")
    if not isinstance(payload["wrapping"], bool):
        errors.append("'wrapping' must be a boolean")
    elevation_range = payload["elevation_range"]
    if (
        not isinstance(elevation_range, list)
        or len(elevation_range) != 2
        or not all(isinstance(v, int) for v in elevation_range)
    ):
        errors.append("'elevation_range' must be [min, max]")

    cells = payload["cells"]
    if not isinstance(cells, list):
        errors.append("'cells' must be a list")
        return errors
    if not errors and len(cells) != width * height:
        errors.append(f"cell count mismatch: expected {width * height}, got {len(cells)}")

    for i, cell in enumerate(cells):
        if not isinstance(cell, dict):
            errors.append(f"Cell {i}: must be an object")
            continue
        for key in _CELL_INT_FIELDS:
            if not isinstance(cell.get(key), int) or isinstance(cell.get(key), bool):
                errors.append(f"Cell {i}: '{key}' must be an integer")
        for key in ("walled", "explored"):
            if not isinstance(cell.get(key), bool):
                errors.append(f"Cell {i}: '{key}' must be a boolean")
        roads = cell.get("roads")
        if not isinstance(roads, list) or len(roads) != 6 or not all(isinstance(r, bool) for r in roads):
            errors.append(f"Cell {i}: 'roads' must be 6 booleans")
        for key in ("incoming_river", "outgoing_river"):
            value = cell.get(key)
            if value is not None and (not isinstance(value, int) or not 0 <= value < 6):
                errors.append(f"Cell {i}: '{key}' must be null or a direction 0-5")
        color = cell.get("color")
        if color is not None and (
            not isinstance(color, list)
            or len(color) != 3
            or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in color)
        ):
            errors.append(f"Cell {i}: 'color' must be null or [r, g, b]")
    return errors


def grid_from_dict(payload: Dict[str, Any]) -> HexGrid:
    """Rebuild a grid from :func:`grid_to_dict` output.

    Raises
    ------
    MapFormatError
        If the payload is malformed or holds out-of-range values.
    """
    errors = validate_map_payload(payload)
    if errors:
        raise MapFormatError("; ".join(errors[:5]))

    try:
        grid = HexGrid(
            payload["width"],
            payload["height"],
            payload["wrapping"],
            elevation_range=tuple(payload["elevation_range"]),
        )
    except ConfigurationError as exc:
        raise MapFormatError(str(exc)) from exc

    records = payload["cells"]
    try:
        for cell, data in zip(grid, records):
            cell.elevation = data["elevation"]
            cell.water_level = data["water_level"]
            cell.terrain_type_index = data["terrain"]
            cell.urban_level = data["urban"]
            cell.farm_level = data["farm"]
            cell.plant_level = data["plant"]
            cell.walled = data["walled"]
            cell.is_explored = data["explored"]
            if data["color"] is not None:
                cell.color = tuple(data["color"])
    except ValueError as exc:
        raise MapFormatError(f"Cell {cell.index}: {exc}") from exc

    dropped_rivers = dropped_roads = 0
    for cell, data in zip(grid, records):
        outgoing = data["outgoing_river"]
        if outgoing is not None:
            cell.set_outgoing_river(HexDirection(outgoing))
            if cell.outgoing_river != outgoing:
                dropped_rivers += 1
        for d in HexDirection:
            if data["roads"][d] and not cell.has_road_through_edge(d):
                if not cell.add_road(d):
                    dropped_roads += 1

    if dropped_rivers or dropped_roads:
        logger.warning(
            "Dropped invalid features while loading map",
            rivers=dropped_rivers,
            roads=dropped_roads,
        )
    return grid


def save_json(grid: HexGrid, path: PathLike) -> None:
    Path(path).write_text(json.dumps(grid_to_dict(grid)), encoding="utf-8")


def load_json(path: PathLike) -> HexGrid:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MapFormatError(f"{path}: not valid JSON ({exc})") from exc
    return grid_from_dict(data)
