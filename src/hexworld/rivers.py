"""River carving over generated terrain.

River sources are drawn from a weighted pool that favours wet
highlands; each river then walks downhill (or level) cell by cell,
preferring downhill steps and gentle turns, until it reaches water,
joins another river or runs out of legal directions.  Dead ends
surrounded by higher ground become lakes, and depressions along the
course may randomly flood into extra lakes.

All edits go through the :class:`~hexworld.cell.HexCell` mutators, so
river validity and road clearing are enforced exactly as for manual
editing.
"""

from __future__ import annotations

import random
from typing import List, Sequence, Tuple

import structlog

from .cell import HexCell
from .config import GeneratorConfig
from .coordinates import HexDirection
from .grid import HexGrid

logger = structlog.get_logger()

DOWNHILL_WEIGHT = 3


def river_origin_weight(cell: HexCell, moisture: float, config: GeneratorConfig) -> float:
    """Source weight of *cell*: moisture scaled by height above water."""
    water_level = config.water_level
    return moisture * (cell.elevation - water_level) / (config.elevation_maximum - water_level)


def river_origins(
    grid: HexGrid, moisture: Sequence[float], config: GeneratorConfig
) -> List[HexCell]:
    """Weighted candidate pool; a cell appears once per threshold it clears."""
    origins: List[HexCell] = []
    for cell in grid:
        if cell.is_underwater:
            continue
        weight = river_origin_weight(cell, float(moisture[cell.index]), config)
        if weight > 0.75:
            origins.append(cell)
            origins.append(cell)
        if weight > 0.5:
            origins.append(cell)
        if weight > 0.25:
            origins.append(cell)
    return origins


def is_valid_origin(cell: HexCell) -> bool:
    """A source must be dry and riverless, with no river or water next to it."""
    if cell.has_river:
        return False
    return not any(n.has_river or n.is_underwater for _, n in cell.neighbors())


def create_river(origin: HexCell, rng: random.Random, config: GeneratorConfig) -> int:
    """Carve one river starting at *origin*.

    Returns
    -------
    int
        Number of cells the river occupies; 0 when no step was possible.
    """
    length = 1
    cell = origin
    direction = HexDirection.NE
    while not cell.is_underwater:
        min_neighbor_elevation = None
        flow_directions: List[HexDirection] = []
        for d, neighbor in cell.neighbors():
            if min_neighbor_elevation is None or neighbor.elevation < min_neighbor_elevation:
                min_neighbor_elevation = neighbor.elevation
            if neighbor is origin or neighbor.has_incoming_river:
                continue
            delta = neighbor.elevation - cell.elevation
            if delta > 0:
                continue
            if delta < 0:
                flow_directions.extend([d] * DOWNHILL_WEIGHT)
            if length == 1 or (d != direction.next2() and d != direction.previous2()):
                flow_directions.append(d)
            if neighbor.has_outgoing_river:
                cell.set_outgoing_river(d)
                return length
            flow_directions.append(d)

        if not flow_directions:
            if length == 1:
                return 0
            if min_neighbor_elevation is not None and min_neighbor_elevation >= cell.elevation:
                cell.water_level = min_neighbor_elevation
                if min_neighbor_elevation == cell.elevation:
                    cell.elevation = min_neighbor_elevation - 1
            break

        direction = flow_directions[rng.randrange(len(flow_directions))]
        cell.set_outgoing_river(direction)
        length += 1

        if (
            min_neighbor_elevation is not None
            and min_neighbor_elevation >= cell.elevation
            and rng.random() < config.extra_lake_probability
        ):
            cell.water_level = cell.elevation
            cell.elevation -= 1

        cell = cell.get_neighbor(direction)
    return length


def create_rivers(
    grid: HexGrid,
    rng: random.Random,
    moisture: Sequence[float],
    land_cells: int,
    config: GeneratorConfig,
) -> Tuple[int, int]:
    """Spend the river budget on rivers from randomly drawn sources.

    Returns
    -------
    (initial_budget, remaining_budget)
        The remaining budget is positive only when the source pool ran
        dry first; a warning is logged in that case.
    """
    origins = river_origins(grid, moisture, config)
    initial = round(land_cells * config.river_percentage * 0.01)
    budget = initial

    while budget > 0 and origins:
        index = rng.randrange(len(origins))
        origin = origins[index]
        origins[index] = origins[-1]
        origins.pop()
        if is_valid_origin(origin):
            budget -= create_river(origin, rng, config)

    if budget > 0:
        logger.warning("Failed to use up river budget", remaining=budget, initial=initial)
    return initial, max(budget, 0)
