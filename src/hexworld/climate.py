"""Water-cycle simulation that produces per-cell moisture.

Each cycle every cell evaporates moisture into clouds (water cells
evaporate at full strength), precipitates part of its clouds back,
sheds clouds above an elevation-dependent ceiling as rain, blows its
clouds to all six neighbours (extra weight downwind) and lets moisture
run off to lower neighbours and seep into level ones.

State is double-buffered in numpy arrays indexed like ``grid.cells``;
neighbour transfers are scattered with ``np.add.at`` so a cycle is a
handful of vectorised passes rather than a Python loop per cell.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import GeneratorConfig
from .grid import HexGrid

CLIMATE_CYCLES = 40


@dataclass
class ClimateState:
    """Cloud and moisture buffers, one float per cell, both in ``[0, 1]``."""

    clouds: np.ndarray
    moisture: np.ndarray

    @classmethod
    def initial(cls, cell_count: int, starting_moisture: float) -> "ClimateState":
        return cls(
            clouds=np.zeros(cell_count, dtype=np.float64),
            moisture=np.full(cell_count, starting_moisture, dtype=np.float64),
        )


def neighbor_table(grid: HexGrid) -> np.ndarray:
    """``(cell_count, 6)`` array of neighbour indices, ``-1`` where absent."""
    table = np.full((grid.cell_count, 6), -1, dtype=np.int64)
    for cell in grid:
        for d, neighbor in cell.neighbors():
            table[cell.index, d] = neighbor.index
    return table


def evolve_climate(
    state: ClimateState,
    neighbors: np.ndarray,
    view_elevation: np.ndarray,
    underwater: np.ndarray,
    config: GeneratorConfig,
) -> ClimateState:
    """Run one simulation cycle and return the next buffer."""
    clouds = state.clouds.copy()
    moisture = state.moisture.copy()

    evaporation = np.where(underwater, config.evaporation_factor, moisture * config.evaporation_factor)
    moisture = np.where(underwater, 1.0, moisture - evaporation)
    clouds += evaporation

    precipitation = clouds * config.precipitation_factor
    clouds -= precipitation
    moisture += precipitation

    cloud_maximum = 1.0 - view_elevation / (config.elevation_maximum + 1.0)
    excess = np.maximum(clouds - cloud_maximum, 0.0)
    moisture += excess
    clouds -= excess

    dispersal = clouds * (1.0 / (5.0 + config.wind_strength))
    runoff = moisture * config.runoff_factor * (1.0 / 6.0)
    seepage = moisture * config.seepage_factor * (1.0 / 6.0)

    next_clouds = np.zeros_like(clouds)
    next_moisture = np.zeros_like(moisture)
    outflow = np.zeros_like(moisture)
    main_direction = int(config.wind_direction.opposite())

    for d in range(6):
        targets = neighbors[:, d]
        present = targets >= 0
        sources = np.nonzero(present)[0]
        destinations = targets[present]

        weight = config.wind_strength if d == main_direction else 1.0
        np.add.at(next_clouds, destinations, dispersal[sources] * weight)

        delta = view_elevation[destinations] - view_elevation[sources]
        lower = delta < 0
        level = delta == 0
        np.add.at(next_moisture, destinations[lower], runoff[sources[lower]])
        np.add.at(outflow, sources[lower], runoff[sources[lower]])
        np.add.at(next_moisture, destinations[level], seepage[sources[level]])
        np.add.at(outflow, sources[level], seepage[sources[level]])

    next_moisture += moisture - outflow
    return ClimateState(
        clouds=np.clip(next_clouds, 0.0, 1.0),
        moisture=np.clip(next_moisture, 0.0, 1.0),
    )


def create_climate(grid: HexGrid, config: GeneratorConfig, cycles: int = CLIMATE_CYCLES) -> ClimateState:
    """Simulate *cycles* rounds of the water cycle over the current terrain."""
    neighbors = neighbor_table(grid)
    view_elevation = np.array([c.view_elevation for c in grid], dtype=np.float64)
    underwater = np.array([c.is_underwater for c in grid], dtype=bool)

    state = ClimateState.initial(grid.cell_count, config.starting_moisture)
    for _ in range(cycles):
        state = evolve_climate(state, neighbors, view_elevation, underwater, config)
    return state
