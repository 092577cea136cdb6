"""Land sculpting — raising, sinking and eroding terrain.

Land is built by flood-filling *chunks* outward from random seed cells
inside the map regions.  Each chunk changes elevation by one or two
steps; every cell that crosses the water level pays into (or refunds)
a land budget derived from ``land_percentage``.  Erosion then flattens
cliffs by moving single elevation steps downhill.

The flood fills share the grid's search phase counter and a
:class:`~hexworld.priority_queue.CellPriorityQueue`, just like path
search, so they leave stale scratch data that later searches ignore.
Each fill advances the phase by two, like a search does, so cells a
search closed at ``phase + 1`` read as stale to the next fill.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from .cell import HexCell
from .config import GeneratorConfig
from .grid import HexGrid
from .priority_queue import CellPriorityQueue
from .regions import MapRegion

logger = structlog.get_logger()

LAND_ITERATION_LIMIT = 10000
"""Upper bound on raise/sink rounds before giving up on the land budget."""


# ═══════════════════════════════════════════════════════════════════
# Raising and sinking
# ═══════════════════════════════════════════════════════════════════


def _seed_cell(grid: HexGrid, rng: random.Random, region: MapRegion) -> HexCell:
    x = rng.randrange(region.x_min, region.x_max)
    z = rng.randrange(region.z_min, region.z_max)
    return grid.get_cell_offset(x, z)


def _flood_chunk(
    grid: HexGrid,
    rng: random.Random,
    frontier: CellPriorityQueue,
    region: MapRegion,
    chunk_size: int,
    budget: int,
    config: GeneratorConfig,
    sink: bool,
) -> int:
    phase = grid.advance_search_phase(2)
    first = _seed_cell(grid, rng, region)
    first.search_phase = phase
    first.distance = 0
    first.search_heuristic = 0
    frontier.enqueue(first)

    step = 2 if rng.random() < config.high_rise_probability else 1
    water_level = config.water_level
    size = 0
    while size < chunk_size and frontier:
        current = frontier.dequeue()
        original = current.elevation
        if sink:
            new_elevation = original - step
            if new_elevation < config.elevation_minimum:
                continue
            current.elevation = new_elevation
            if original >= water_level and new_elevation < water_level:
                budget += 1
        else:
            new_elevation = original + step
            if new_elevation > config.elevation_maximum:
                continue
            current.elevation = new_elevation
            if original < water_level and new_elevation >= water_level:
                budget -= 1
                if budget == 0:
                    break
        size += 1

        for _, neighbor in current.neighbors():
            if neighbor.search_phase < phase:
                neighbor.search_phase = phase
                neighbor.distance = grid.distance(neighbor, first)
                neighbor.search_heuristic = (
                    1 if rng.random() < config.jitter_probability else 0
                )
                frontier.enqueue(neighbor)

    frontier.clear()
    return budget


def raise_terrain(
    grid: HexGrid,
    rng: random.Random,
    frontier: CellPriorityQueue,
    region: MapRegion,
    chunk_size: int,
    budget: int,
    config: GeneratorConfig,
) -> int:
    """Raise a chunk of up to *chunk_size* cells around a random seed.

    Cells that would exceed ``elevation_maximum`` are skipped.  Every
    cell lifted across the water level costs one unit of *budget*; the
    fill stops as soon as the budget hits zero.

    Returns
    -------
    int
        The remaining budget.
    """
    return _flood_chunk(grid, rng, frontier, region, chunk_size, budget, config, sink=False)


def sink_terrain(
    grid: HexGrid,
    rng: random.Random,
    frontier: CellPriorityQueue,
    region: MapRegion,
    chunk_size: int,
    budget: int,
    config: GeneratorConfig,
) -> int:
    """Mirror of :func:`raise_terrain`; drowned land refunds the budget."""
    return _flood_chunk(grid, rng, frontier, region, chunk_size, budget, config, sink=True)


def create_land(
    grid: HexGrid,
    rng: random.Random,
    regions: Sequence[MapRegion],
    config: GeneratorConfig,
    frontier: Optional[CellPriorityQueue] = None,
) -> Tuple[int, int, int]:
    """Raise and sink chunks until the land budget is spent.

    Returns
    -------
    (initial_budget, remaining_budget, land_cells)
        *land_cells* is the number of cells the budget actually paid for.
    """
    frontier = frontier if frontier is not None else CellPriorityQueue()
    initial = round(grid.cell_count * config.land_percentage * 0.01)
    budget = initial
    if budget == 0:
        return initial, 0, 0

    for _ in range(LAND_ITERATION_LIMIT):
        sink = rng.random() < config.sink_probability
        for region in regions:
            chunk_size = rng.randint(config.chunk_size_min, config.chunk_size_max)
            if sink:
                budget = sink_terrain(grid, rng, frontier, region, chunk_size, budget, config)
            else:
                budget = raise_terrain(grid, rng, frontier, region, chunk_size, budget, config)
                if budget == 0:
                    return initial, 0, initial

    if budget > 0:
        logger.warning(
            "Failed to use up land budget",
            remaining=budget,
            initial=initial,
            iterations=LAND_ITERATION_LIMIT,
        )
    return initial, budget, initial - budget


# ═══════════════════════════════════════════════════════════════════
# Erosion
# ═══════════════════════════════════════════════════════════════════


def is_erodible(cell: HexCell) -> bool:
    """A cell is erodible when some neighbour sits at least two steps lower."""
    erodible_elevation = cell.elevation - 2
    return any(n.elevation <= erodible_elevation for _, n in cell.neighbors())


def get_erosion_target(cell: HexCell, rng: random.Random) -> HexCell:
    """Pick a random neighbour at least two steps below *cell*."""
    erodible_elevation = cell.elevation - 2
    candidates = [n for _, n in cell.neighbors() if n.elevation <= erodible_elevation]
    if not candidates:
        raise ValueError(f"Cell {cell.index} is not erodible")
    return candidates[rng.randrange(len(candidates))]


class _CellSet:
    """Insertion-ordered cell set with O(1) random pick and swap-remove."""

    def __init__(self) -> None:
        self.items: List[HexCell] = []
        self._positions: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, cell: HexCell) -> bool:
        return cell.index in self._positions

    def add(self, cell: HexCell) -> None:
        if cell.index not in self._positions:
            self._positions[cell.index] = len(self.items)
            self.items.append(cell)

    def discard(self, cell: HexCell) -> None:
        position = self._positions.pop(cell.index, None)
        if position is None:
            return
        last = self.items.pop()
        if last is not cell:
            self.items[position] = last
            self._positions[last.index] = position


def erode_land(grid: HexGrid, rng: random.Random, erosion_percentage: int) -> Tuple[int, int]:
    """Move elevation off steep edges until the erodible set shrinks enough.

    Each step lowers a random erodible cell by one and raises one of its
    low neighbours by one.  The erodible set is kept exact incrementally:
    only the two touched cells and their neighbours can change status.

    Returns
    -------
    (initial_erodible, remaining_erodible)
    """
    erodible = _CellSet()
    for cell in grid:
        if is_erodible(cell):
            erodible.add(cell)
    initial = len(erodible)
    target = int(initial * (100 - erosion_percentage) * 0.01)

    while len(erodible) > target:
        cell = erodible.items[rng.randrange(len(erodible))]
        target_cell = get_erosion_target(cell, rng)

        cell.elevation -= 1
        target_cell.elevation += 1

        if not is_erodible(cell):
            erodible.discard(cell)
        for _, neighbor in cell.neighbors():
            if neighbor.elevation == cell.elevation + 2 and neighbor not in erodible:
                erodible.add(neighbor)

        if is_erodible(target_cell):
            erodible.add(target_cell)
        for _, neighbor in target_cell.neighbors():
            if (
                neighbor is not cell
                and neighbor.elevation == target_cell.elevation + 1
                and not is_erodible(neighbor)
            ):
                erodible.discard(neighbor)

    return initial, len(erodible)
