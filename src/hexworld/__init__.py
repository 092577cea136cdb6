"""hexworld — procedural hex-map worlds with turn-based search.

Public API is organised into layers:

- **Core** — coordinates, cells, the grid arena, errors
- **Search** — bucket queue, path finding, visibility
- **Generation** — configuration, pipeline stages, the generator
- **Editing & I/O** — brush edits, logical save/restore
"""

# ── Core ────────────────────────────────────────────────────────────
from .coordinates import EdgeType, HexCoordinates, HexDirection, edge_type
from .cell import HexCell, TerrainType
from .grid import HexGrid, create_grid
from .errors import ConfigurationError, HexWorldError, InvalidSearchError, MapFormatError

# ── Search ──────────────────────────────────────────────────────────
from .priority_queue import CellPriorityQueue
from .search import (
    Path,
    default_is_valid_destination,
    default_move_cost,
    decrease_visibility,
    find_path,
    increase_visibility,
    query_visible,
    search_turn,
)

# ── Generation ──────────────────────────────────────────────────────
from .config import GeneratorConfig, HemisphereMode
from .noise import NoiseSource
from .regions import MapRegion, create_regions
from .land import create_land, erode_land, raise_terrain, sink_terrain
from .climate import ClimateState, create_climate
from .rivers import create_river, create_rivers
from .biomes import classify_terrain, determine_temperature
from .pipeline import (
    BiomeStep,
    ClimateStep,
    CustomStep,
    ErosionStep,
    GenerationContext,
    GenerationPipeline,
    GenerationStep,
    LandStep,
    PipelineResult,
    RegionStep,
    RiverStep,
    StepResult,
    default_steps,
)
from .generator import GenerationReport, GenerationResult, MapGenerator, generate_world

# ── Editing & I/O ───────────────────────────────────────────────────
from .editing import CellEdit, OptionalToggle, edit_cells, find_drag_direction
from .io import grid_from_dict, grid_to_dict, load_json, save_json, validate_map_payload

__all__ = [
    # Core
    "EdgeType",
    "HexCoordinates",
    "HexDirection",
    "edge_type",
    "HexCell",
    "TerrainType",
    "HexGrid",
    "create_grid",
    "ConfigurationError",
    "HexWorldError",
    "InvalidSearchError",
    "MapFormatError",
    # Search
    "CellPriorityQueue",
    "Path",
    "default_is_valid_destination",
    "default_move_cost",
    "decrease_visibility",
    "find_path",
    "increase_visibility",
    "query_visible",
    "search_turn",
    # Generation
    "GeneratorConfig",
    "HemisphereMode",
    "NoiseSource",
    "MapRegion",
    "create_regions",
    "create_land",
    "erode_land",
    "raise_terrain",
    "sink_terrain",
    "ClimateState",
    "create_climate",
    "create_river",
    "create_rivers",
    "classify_terrain",
    "determine_temperature",
    "BiomeStep",
    "ClimateStep",
    "CustomStep",
    "ErosionStep",
    "GenerationContext",
    "GenerationPipeline",
    "GenerationStep",
    "LandStep",
    "PipelineResult",
    "RegionStep",
    "RiverStep",
    "StepResult",
    "default_steps",
    "GenerationReport",
    "GenerationResult",
    "MapGenerator",
    "generate_world",
    # Editing & I/O
    "CellEdit",
    "OptionalToggle",
    "edit_cells",
    "find_drag_direction",
    "grid_from_dict",
    "grid_to_dict",
    "load_json",
    "save_json",
    "validate_map_payload",
]
