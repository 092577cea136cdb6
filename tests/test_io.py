"""Tests for io.py — JSON save / load of grids."""

from __future__ import annotations

import json

import pytest
from structlog.testing import capture_logs

from hexworld.coordinates import HexDirection
from hexworld.errors import MapFormatError
from hexworld.generator import generate_world
from hexworld.grid import HexGrid
from hexworld.io import (
    FORMAT_VERSION,
    grid_from_dict,
    grid_to_dict,
    load_json,
    save_json,
    validate_map_payload,
)


# ── helpers ─────────────────────────────────────────────────────────


def cell_state(grid):
    return [
        (
            c.elevation,
            c.water_level,
            c.terrain_type_index,
            c.urban_level,
            c.farm_level,
            c.plant_level,
            c.walled,
            c.roads,
            c.incoming_river,
            c.outgoing_river,
            c.is_explored,
            c.color,
        )
        for c in grid
    ]


@pytest.fixture()
def decorated_grid():
    grid = HexGrid(5, 4)
    a = grid.get_cell_offset(1, 1)
    b = grid.get_cell_offset(2, 1)
    a.elevation = 2
    b.elevation = 1
    a.set_outgoing_river(HexDirection.E)
    b.add_road(HexDirection.NE)
    a.walled = True
    a.urban_level = 2
    b.farm_level = 1
    b.is_explored = True
    b.color = (0.1, 0.2, 0.3)
    grid.get_cell(0).water_level = 1
    return grid


# ═══════════════════════════════════════════════════════════════════
# Round trip
# ═══════════════════════════════════════════════════════════════════


class TestRoundTrip:
    def test_dict_round_trip(self, decorated_grid):
        restored = grid_from_dict(grid_to_dict(decorated_grid))
        assert restored.cell_count_x == 5
        assert restored.cell_count_z == 4
        assert cell_state(restored) == cell_state(decorated_grid)

    def test_payload_is_json_serialisable(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        assert json.loads(json.dumps(payload)) == payload
        assert payload["version"] == FORMAT_VERSION

    def test_file_round_trip_of_generated_world(self, tmp_path):
        world = generate_world(12, 10, wrapping=True, seed=8).grid
        path = tmp_path / "world.json"
        save_json(world, path)
        restored = load_json(path)
        assert restored.wrapping
        assert restored.elevation_range == world.elevation_range
        assert cell_state(restored) == cell_state(world)


# ═══════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════


class TestValidation:
    def test_valid_payload(self, decorated_grid):
        assert validate_map_payload(grid_to_dict(decorated_grid)) == []

    def test_not_an_object(self):
        assert validate_map_payload([1, 2]) == ["Payload must be a JSON object"]

    def test_missing_keys(self):
        errors = validate_map_payload({"version": 1})
        assert "Missing top-level key: cells" in errors

    def test_bad_version(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["version"] = 99
        assert any("version" in e for e in validate_map_payload(payload))
        with pytest.raises(MapFormatError):
            grid_from_dict(payload)

    def test_cell_count_mismatch(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["cells"].pop()
        assert any("cell count" in e for e in validate_map_payload(payload))

    def test_bad_cell_fields(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["cells"][3]["elevation"] = "high"
        payload["cells"][4]["roads"] = [True]
        payload["cells"][5]["outgoing_river"] = 7
        errors = validate_map_payload(payload)
        assert any("Cell 3" in e and "elevation" in e for e in errors)
        assert any("Cell 4" in e and "roads" in e for e in errors)
        assert any("Cell 5" in e and "outgoing_river" in e for e in errors)

    def test_non_numeric_color(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["cells"][3]["color"] = ["a", "b", "c"]
        payload["cells"][4]["color"] = [True, 0.5, 0.5]
        errors = validate_map_payload(payload)
        assert any("Cell 3" in e and "color" in e for e in errors)
        assert any("Cell 4" in e and "color" in e for e in errors)
        with pytest.raises(MapFormatError, match="color"):
            grid_from_dict(payload)


# ═══════════════════════════════════════════════════════════════════
# Restoring untrusted data
# ═══════════════════════════════════════════════════════════════════


class TestRestore:
    def test_out_of_range_value_raises(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["cells"][2]["urban"] = 5
        with pytest.raises(MapFormatError, match="Cell 2"):
            grid_from_dict(payload)

    def test_elevation_outside_range_raises(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["cells"][0]["elevation"] = 50
        with pytest.raises(MapFormatError):
            grid_from_dict(payload)

    def test_uphill_river_dropped(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        # cell 1 of the flat first row flows east into a raised cell
        payload["cells"][1]["outgoing_river"] = int(HexDirection.E)
        payload["cells"][2]["elevation"] = 3
        with capture_logs() as logs:
            restored = grid_from_dict(payload)
        assert not restored.get_cell(1).has_outgoing_river
        assert any(
            e["event"] == "Dropped invalid features while loading map" and e["rivers"] == 1
            for e in logs
        )

    def test_steep_road_dropped(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["cells"][1]["roads"][int(HexDirection.E)] = True
        payload["cells"][2]["elevation"] = 4
        with capture_logs() as logs:
            restored = grid_from_dict(payload)
        assert not restored.get_cell(1).has_road_through_edge(HexDirection.E)
        assert any(e.get("roads") == 1 for e in logs)

    def test_bad_dimensions_raise_map_format_error(self, decorated_grid):
        payload = grid_to_dict(decorated_grid)
        payload["elevation_range"] = [1, 5]
        with pytest.raises(MapFormatError):
            grid_from_dict(payload)

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MapFormatError, match="not valid JSON"):
            load_json(path)
