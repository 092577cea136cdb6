"""Tests for ``hexworld.search`` — turn-based paths and visibility."""

from __future__ import annotations

import heapq
import random

import pytest

from hexworld.coordinates import HexDirection
from hexworld.errors import InvalidSearchError
from hexworld.grid import HexGrid
from hexworld.search import (
    decrease_visibility,
    default_is_valid_destination,
    default_move_cost,
    find_path,
    increase_visibility,
    query_visible,
    search_turn,
)


# ── helpers ─────────────────────────────────────────────────────────


def dijkstra_cost(grid, origin, destination):
    """Plain Dijkstra with the default rules, ignoring turns."""
    best = {origin.index: 0}
    heap = [(0, origin.index)]
    while heap:
        cost, index = heapq.heappop(heap)
        if index == destination.index:
            return cost
        if cost > best[index]:
            continue
        cell = grid.get_cell(index)
        for d, neighbor in cell.neighbors():
            if not default_is_valid_destination(neighbor):
                continue
            step = default_move_cost(cell, neighbor, d)
            if step < 0:
                continue
            new_cost = cost + step
            if new_cost < best.get(neighbor.index, float("inf")):
                best[neighbor.index] = new_cost
                heapq.heappush(heap, (new_cost, neighbor.index))
    return None


@pytest.fixture()
def rough_grid():
    """8×8 grid of gentle slopes with random vegetation and a few roads."""
    rng = random.Random(3)
    grid = HexGrid(8, 8)
    for cell in grid:
        cell.elevation = rng.randint(0, 1)
        cell.plant_level = rng.randint(0, 3)
        cell.urban_level = rng.randint(0, 1)
    for cell in grid:
        if rng.random() < 0.15:
            cell.add_road(HexDirection(rng.randrange(6)))
    return grid


# ═══════════════════════════════════════════════════════════════════
# Turns
# ═══════════════════════════════════════════════════════════════════


class TestSearchTurn:
    def test_zero_distance(self):
        assert search_turn(0, 5) == 0

    def test_truncates(self):
        assert search_turn(5, 5) == 0
        assert search_turn(6, 5) == 1
        assert search_turn(10, 5) == 1
        assert search_turn(11, 5) == 2


# ═══════════════════════════════════════════════════════════════════
# Path search
# ═══════════════════════════════════════════════════════════════════


class TestFindPath:
    def test_same_cell(self):
        grid = HexGrid(3, 3)
        cell = grid.get_cell(4)
        path = find_path(grid, cell, cell, 10)
        assert path.cells == [cell]
        assert path.cost == 0

    def test_straight_line_cost(self):
        grid = HexGrid(5, 1)
        path = find_path(grid, grid.get_cell(0), grid.get_cell(4), 100)
        assert [c.index for c in path.cells] == [0, 1, 2, 3, 4]
        assert path.cost == 20

    def test_turn_accounting(self):
        grid = HexGrid(5, 1)
        path = find_path(grid, grid.get_cell(0), grid.get_cell(4), 7)
        assert path.distances == [0, 5, 12, 19, 26]
        assert path.turns == [0, 0, 1, 2, 3]

    def test_matches_dijkstra(self, rough_grid):
        grid = rough_grid
        rng = random.Random(11)
        for _ in range(25):
            a = grid.get_cell(rng.randrange(grid.cell_count))
            b = grid.get_cell(rng.randrange(grid.cell_count))
            path = find_path(grid, a, b, 1000)
            expected = dijkstra_cost(grid, a, b)
            assert path is not None
            assert path.cost == expected

    def test_path_is_connected(self, rough_grid):
        grid = rough_grid
        path = find_path(grid, grid.get_cell(0), grid.get_cell(63), 1000)
        for prev, cell in zip(path.cells, path.cells[1:]):
            assert grid.distance(prev, cell) == 1
        assert path.origin is grid.get_cell(0)
        assert path.destination is grid.get_cell(63)

    def test_cliff_isolated_destination_unreachable(self):
        grid = HexGrid(6, 6)
        target = grid.get_cell_offset(3, 3)
        target.elevation = 2
        assert find_path(grid, grid.get_cell(0), target, 24) is None

    def test_wall_blocks_entry(self):
        grid = HexGrid(6, 6)
        target = grid.get_cell_offset(3, 3)
        target.walled = True
        assert find_path(grid, grid.get_cell(0), target, 24) is None

    def test_road_is_cheap(self):
        grid = HexGrid(3, 1)
        grid.get_cell(0).add_road(HexDirection.E)
        path = find_path(grid, grid.get_cell(0), grid.get_cell(2), 100)
        assert path.distances == [0, 1, 6]

    def test_underwater_and_occupied_destinations_rejected(self):
        grid = HexGrid(4, 4)
        wet = grid.get_cell(5)
        wet.water_level = 1
        assert find_path(grid, grid.get_cell(0), wet, 24) is None
        busy = grid.get_cell(10)
        busy.unit = object()
        assert find_path(grid, grid.get_cell(0), busy, 24) is None

    def test_custom_rules(self):
        grid = HexGrid(6, 6)
        a = grid.get_cell_offset(0, 0)
        b = grid.get_cell_offset(5, 5)
        path = find_path(grid, a, b, 100, lambda c: True, lambda f, t, d: 1)
        assert path.cost == grid.distance(a, b)

    def test_repeated_searches_reuse_scratch(self, rough_grid):
        grid = rough_grid
        a, b = grid.get_cell(2), grid.get_cell(60)
        first = find_path(grid, a, b, 1000)
        second = find_path(grid, a, b, 1000)
        assert first.cost == second.cost

    def test_wrapping_takes_seam(self):
        grid = HexGrid(10, 1, wrapping=True)
        path = find_path(grid, grid.get_cell(0), grid.get_cell(9), 100)
        assert len(path) == 2


class TestFindPathValidation:
    def test_non_positive_speed(self):
        grid = HexGrid(3, 3)
        with pytest.raises(InvalidSearchError):
            find_path(grid, grid.get_cell(0), grid.get_cell(1), 0)
        with pytest.raises(InvalidSearchError):
            find_path(grid, grid.get_cell(0), grid.get_cell(1), True)

    def test_foreign_cell(self):
        grid, other = HexGrid(3, 3), HexGrid(3, 3)
        with pytest.raises(InvalidSearchError):
            find_path(grid, grid.get_cell(0), other.get_cell(1), 5)

    def test_error_is_value_error(self):
        grid = HexGrid(3, 3)
        with pytest.raises(ValueError):
            find_path(grid, grid.get_cell(0), grid.get_cell(1), -3)


# ═══════════════════════════════════════════════════════════════════
# Visibility
# ═══════════════════════════════════════════════════════════════════


class TestVisibility:
    def test_flat_range_is_hex_disc(self):
        grid = HexGrid(7, 7)
        center = grid.get_cell_offset(3, 3)
        visible = query_visible(grid, center, 2)
        expected = {c for c in grid if grid.distance(center, c) <= 2}
        assert visible == expected
        assert len(visible) == 19

    def test_zero_range_sees_origin(self):
        grid = HexGrid(3, 3)
        assert query_visible(grid, grid.get_cell(4), 0) == {grid.get_cell(4)}

    def test_elevated_origin_sees_further(self):
        grid = HexGrid(9, 9)
        center = grid.get_cell_offset(4, 4)
        center.elevation = 2
        visible = query_visible(grid, center, 2)
        assert visible == {c for c in grid if grid.distance(center, c) <= 4}

    def test_tall_neighbour_hidden(self):
        grid = HexGrid(5, 5)
        center = grid.get_cell_offset(2, 2)
        tall = center.get_neighbor(HexDirection.E)
        tall.elevation = 3
        assert tall not in query_visible(grid, center, 2)

    def test_unexplorable_cells_skipped(self):
        grid = HexGrid(5, 5)
        center = grid.get_cell_offset(2, 2)
        hidden = center.get_neighbor(HexDirection.W)
        hidden.explorable = False
        assert hidden not in query_visible(grid, center, 2)

    def test_negative_range(self):
        grid = HexGrid(3, 3)
        with pytest.raises(InvalidSearchError):
            query_visible(grid, grid.get_cell(0), -1)

    def test_counts_compose(self):
        grid = HexGrid(8, 8)
        a = grid.get_cell_offset(2, 3)
        b = grid.get_cell_offset(4, 3)
        seen_a = increase_visibility(grid, a, 2)
        seen_b = increase_visibility(grid, b, 2)
        for cell in grid:
            assert cell.visibility == (cell in seen_a) + (cell in seen_b)
            assert cell.is_explored == (cell in seen_a or cell in seen_b)
        decrease_visibility(grid, a, 2)
        for cell in grid:
            assert cell.visibility == (1 if cell in seen_b else 0)
        decrease_visibility(grid, b, 2)
        assert all(c.visibility == 0 for c in grid)
