"""Temperature and biome classification.

Dry cells look up a ``(terrain, plant)`` pair in a temperature-band by
moisture-band table, with overrides for high ground (rock desert,
snow caps) and river banks (denser plants).  Underwater cells are
classified by depth and by the shape of the nearby shore.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .cell import HexCell, TerrainType
from .config import GeneratorConfig, HemisphereMode
from .grid import HexGrid
from .noise import CHANNELS, NoiseSource

TEMPERATURE_BANDS = (0.1, 0.3, 0.6)
MOISTURE_BANDS = (0.12, 0.28, 0.85)


@dataclass(frozen=True)
class Biome:
    terrain: int
    plant: int


# Rows are temperature bands (cold to hot), columns moisture bands (dry to wet).
BIOMES = (
    Biome(0, 0), Biome(4, 0), Biome(4, 0), Biome(4, 0),
    Biome(0, 0), Biome(2, 0), Biome(2, 1), Biome(2, 2),
    Biome(0, 0), Biome(1, 0), Biome(1, 1), Biome(1, 2),
    Biome(0, 0), Biome(1, 1), Biome(1, 2), Biome(1, 3),
)


def band_index(value: float, bands: Sequence[float]) -> int:
    """Index of the first band *value* falls below (``len(bands)`` if none)."""
    for i, threshold in enumerate(bands):
        if value < threshold:
            return i
    return len(bands)


def determine_temperature(
    cell: HexCell,
    grid: HexGrid,
    config: GeneratorConfig,
    noise: NoiseSource,
    jitter_channel: int,
) -> float:
    """Temperature of *cell* from latitude, altitude and a noise jitter."""
    latitude = cell.coordinates.z / grid.cell_count_z
    if config.hemisphere is HemisphereMode.BOTH:
        latitude *= 2
        if latitude > 1.0:
            latitude = 2.0 - latitude
    elif config.hemisphere is HemisphereMode.NORTH:
        latitude = 1.0 - latitude

    temperature = config.low_temperature + (config.high_temperature - config.low_temperature) * latitude
    water_level = config.water_level
    temperature *= 1.0 - (cell.view_elevation - water_level) / (
        config.elevation_maximum - water_level + 1.0
    )

    x, z = cell.position
    jitter = noise.sample_channel(x * 0.1, z * 0.1, jitter_channel)
    temperature += (jitter * 2.0 - 1.0) * config.temperature_jitter
    return temperature


def classify_land(cell: HexCell, temperature: float, moisture: float, config: GeneratorConfig) -> Biome:
    t = band_index(temperature, TEMPERATURE_BANDS)
    m = band_index(moisture, MOISTURE_BANDS)
    biome = BIOMES[t * 4 + m]
    terrain, plant = biome.terrain, biome.plant

    rock_desert_elevation = config.elevation_maximum - (config.elevation_maximum - config.water_level) // 2
    if terrain == TerrainType.SAND:
        if cell.elevation >= rock_desert_elevation:
            terrain = int(TerrainType.STONE)
    elif cell.elevation == config.elevation_maximum:
        terrain = int(TerrainType.SNOW)

    if terrain == TerrainType.SNOW:
        plant = 0
    elif plant < 3 and cell.has_river:
        plant += 1
    return Biome(terrain, plant)


def classify_underwater(cell: HexCell, temperature: float, config: GeneratorConfig) -> int:
    water_level = config.water_level
    if cell.elevation == water_level - 1:
        cliffs = slopes = 0
        for _, neighbor in cell.neighbors():
            delta = neighbor.elevation - cell.water_level
            if delta == 0:
                slopes += 1
            elif delta > 0:
                cliffs += 1
        if cliffs + slopes > 3:
            terrain = TerrainType.GRASS
        elif cliffs > 0:
            terrain = TerrainType.STONE
        elif slopes > 0:
            terrain = TerrainType.SAND
        else:
            terrain = TerrainType.GRASS
    elif cell.elevation >= water_level:
        terrain = TerrainType.GRASS
    elif cell.elevation < 0:
        terrain = TerrainType.STONE
    else:
        terrain = TerrainType.MUD

    if terrain == TerrainType.GRASS and temperature < TEMPERATURE_BANDS[0]:
        terrain = TerrainType.MUD
    return int(terrain)


def classify_terrain(
    grid: HexGrid,
    rng: random.Random,
    moisture: Sequence[float],
    config: GeneratorConfig,
    noise: NoiseSource,
) -> np.ndarray:
    """Assign terrain types and plant levels to every cell.

    Returns the per-cell temperatures that drove the classification.
    """
    jitter_channel = rng.randrange(CHANNELS)
    temperatures: List[float] = []
    for cell in grid:
        temperature = determine_temperature(cell, grid, config, noise, jitter_channel)
        temperatures.append(temperature)
        if cell.is_underwater:
            cell.terrain_type_index = classify_underwater(cell, temperature, config)
        else:
            biome = classify_land(cell, temperature, float(moisture[cell.index]), config)
            cell.terrain_type_index = biome.terrain
            cell.plant_level = biome.plant
    return np.asarray(temperatures, dtype=np.float64)
