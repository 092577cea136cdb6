"""Tests for biomes.py — temperature and terrain classification."""

from __future__ import annotations

import random

import numpy as np
import pytest

from hexworld.biomes import (
    BIOMES,
    MOISTURE_BANDS,
    TEMPERATURE_BANDS,
    Biome,
    band_index,
    classify_land,
    classify_terrain,
    classify_underwater,
    determine_temperature,
)
from hexworld.cell import TerrainType
from hexworld.config import GeneratorConfig, HemisphereMode
from hexworld.coordinates import HexDirection
from hexworld.grid import HexGrid
from hexworld.noise import NoiseSource


# ── helpers ─────────────────────────────────────────────────────────


def column(height, elevation, water_level=0):
    grid = HexGrid(1, height)
    for cell in grid:
        cell.elevation = elevation
        cell.water_level = water_level
    return grid


def row(elevations, water_level):
    grid = HexGrid(len(elevations), 1)
    for cell, elevation in zip(grid, elevations):
        cell.elevation = elevation
        cell.water_level = water_level
    return grid


# ═══════════════════════════════════════════════════════════════════
# Bands and table
# ═══════════════════════════════════════════════════════════════════


def test_band_index():
    assert band_index(0.05, TEMPERATURE_BANDS) == 0
    assert band_index(0.1, TEMPERATURE_BANDS) == 1
    assert band_index(0.5, TEMPERATURE_BANDS) == 2
    assert band_index(0.9, TEMPERATURE_BANDS) == 3
    assert band_index(0.9, MOISTURE_BANDS) == 3


def test_table_shape():
    assert len(BIOMES) == 16
    assert BIOMES[0] == Biome(0, 0)
    assert BIOMES[15] == Biome(1, 3)


# ═══════════════════════════════════════════════════════════════════
# Temperature
# ═══════════════════════════════════════════════════════════════════


class TestTemperature:
    @pytest.fixture()
    def config(self):
        return GeneratorConfig(temperature_jitter=0.0)

    def temps(self, grid, config):
        noise = NoiseSource(1)
        return [determine_temperature(c, grid, config, noise, 0) for c in grid]

    def test_both_hemispheres_peak_mid_map(self, config):
        grid = column(10, config.water_level)
        temps = self.temps(grid, config)
        assert temps[0] == pytest.approx(0.0)
        assert temps[5] == pytest.approx(1.0)
        assert temps[2] == pytest.approx(temps[8])

    def test_north(self):
        config = GeneratorConfig(temperature_jitter=0.0, hemisphere=HemisphereMode.NORTH)
        temps = self.temps(column(10, config.water_level), config)
        assert temps[0] == pytest.approx(1.0)
        assert temps == sorted(temps, reverse=True)

    def test_south(self):
        config = GeneratorConfig(temperature_jitter=0.0, hemisphere=HemisphereMode.SOUTH)
        temps = self.temps(column(10, config.water_level), config)
        assert temps[0] == pytest.approx(0.0)
        assert temps == sorted(temps)

    def test_altitude_cools(self, config):
        low = column(10, config.water_level)
        high = column(10, config.elevation_maximum)
        assert self.temps(high, config)[5] < self.temps(low, config)[5]

    def test_jitter_is_bounded(self):
        base_config = GeneratorConfig(temperature_jitter=0.0)
        jitter_config = GeneratorConfig(temperature_jitter=0.2)
        grid = column(12, 3)
        noise = NoiseSource(17)
        for cell in grid:
            base = determine_temperature(cell, grid, base_config, noise, 2)
            jittered = determine_temperature(cell, grid, jitter_config, noise, 2)
            assert abs(jittered - base) <= 0.2 + 1e-9


# ═══════════════════════════════════════════════════════════════════
# Land classification
# ═══════════════════════════════════════════════════════════════════


class TestClassifyLand:
    @pytest.fixture()
    def config(self):
        return GeneratorConfig()

    def test_table_lookup(self, config):
        cell = column(1, 3).get_cell(0)
        assert classify_land(cell, 0.9, 0.9, config) == Biome(1, 3)
        assert classify_land(cell, 0.4, 0.5, config) == Biome(1, 1)
        assert classify_land(cell, 0.2, 0.2, config) == Biome(2, 0)

    def test_rock_desert(self, config):
        # elevation_maximum 8, water 3 -> rock desert from 6
        cell = column(1, 6).get_cell(0)
        assert classify_land(cell, 0.9, 0.05, config).terrain == TerrainType.STONE
        cell.elevation = 5
        assert classify_land(cell, 0.9, 0.05, config).terrain == TerrainType.SAND

    def test_snow_cap(self, config):
        cell = column(1, config.elevation_maximum).get_cell(0)
        assert classify_land(cell, 0.4, 0.5, config) == Biome(4, 0)

    def test_river_boosts_plants(self, config):
        grid = row([4, 3], 0)
        source = grid.get_cell(0)
        source.set_outgoing_river(HexDirection.E)
        assert classify_land(source, 0.4, 0.5, config) == Biome(1, 2)
        assert classify_land(source, 0.9, 0.9, config) == Biome(1, 3)


# ═══════════════════════════════════════════════════════════════════
# Underwater classification
# ═══════════════════════════════════════════════════════════════════


class TestClassifyUnderwater:
    @pytest.fixture()
    def config(self):
        return GeneratorConfig(water_level=3)

    def test_gentle_shore_is_sand(self, config):
        grid = row([3, 2, 3], 3)
        assert classify_underwater(grid.get_cell(1), 0.5, config) == TerrainType.SAND

    def test_cliff_shore_is_stone(self, config):
        grid = row([5, 2, 5], 3)
        assert classify_underwater(grid.get_cell(1), 0.5, config) == TerrainType.STONE

    def test_open_shallows_are_grass(self, config):
        grid = row([2, 2, 2], 3)
        assert classify_underwater(grid.get_cell(1), 0.5, config) == TerrainType.GRASS

    def test_cold_shallows_are_mud(self, config):
        grid = row([2, 2, 2], 3)
        assert classify_underwater(grid.get_cell(1), 0.05, config) == TerrainType.MUD

    def test_depths(self, config):
        grid = row([1, -1], 3)
        assert classify_underwater(grid.get_cell(0), 0.5, config) == TerrainType.MUD
        assert classify_underwater(grid.get_cell(1), 0.5, config) == TerrainType.STONE


# ═══════════════════════════════════════════════════════════════════
# classify_terrain
# ═══════════════════════════════════════════════════════════════════


def test_classify_terrain_assigns_every_cell():
    config = GeneratorConfig(water_level=2)
    rng = random.Random(3)
    grid = HexGrid(8, 8)
    for cell in grid:
        cell.water_level = 2
        cell.elevation = rng.randint(0, 8)
    moisture = np.linspace(0.0, 1.0, grid.cell_count)
    temperatures = classify_terrain(grid, random.Random(0), moisture, config, NoiseSource(0))
    assert temperatures.shape == (grid.cell_count,)
    for cell in grid:
        assert 0 <= cell.terrain_type_index <= 4
        if cell.elevation == config.elevation_maximum and not cell.is_underwater:
            assert cell.terrain_type_index in (TerrainType.SNOW, TerrainType.STONE)
