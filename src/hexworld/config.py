"""Generator configuration.

:class:`GeneratorConfig` gathers every tunable of world generation.
Each field has a documented valid range; out-of-range values raise
:class:`~hexworld.errors.ConfigurationError` on construction, so a bad
configuration never reaches a grid.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Tuple

from .coordinates import HexDirection
from .errors import ConfigurationError


class HemisphereMode(Enum):
    """Which latitudes the map covers (drives the temperature gradient)."""

    BOTH = "both"
    NORTH = "north"
    SOUTH = "south"


# Inclusive (min, max) for every numeric field.
_RANGES: Dict[str, Tuple[float, float]] = {
    "jitter_probability": (0.0, 0.5),
    "chunk_size_min": (20, 200),
    "chunk_size_max": (20, 200),
    "land_percentage": (5, 95),
    "water_level": (1, 5),
    "high_rise_probability": (0.0, 1.0),
    "sink_probability": (0.0, 0.4),
    "elevation_minimum": (-4, 0),
    "elevation_maximum": (6, 10),
    "map_border_x": (0, 10),
    "map_border_z": (0, 10),
    "region_border": (0, 10),
    "region_count": (1, 4),
    "erosion_percentage": (0, 100),
    "evaporation_factor": (0.0, 1.0),
    "precipitation_factor": (0.0, 1.0),
    "runoff_factor": (0.0, 1.0),
    "seepage_factor": (0.0, 1.0),
    "starting_moisture": (0.0, 1.0),
    "wind_strength": (1.0, 10.0),
    "river_percentage": (0, 20),
    "extra_lake_probability": (0.0, 1.0),
    "low_temperature": (0.0, 1.0),
    "high_temperature": (0.0, 1.0),
    "temperature_jitter": (0.0, 1.0),
}

_INT_FIELDS = {
    "chunk_size_min",
    "chunk_size_max",
    "land_percentage",
    "water_level",
    "elevation_minimum",
    "elevation_maximum",
    "map_border_x",
    "map_border_z",
    "region_border",
    "region_count",
    "erosion_percentage",
    "river_percentage",
}


@dataclass(frozen=True)
class GeneratorConfig:
    """All tuneable parameters for world generation.

    Attributes
    ----------
    jitter_probability : float
        Chance that a flood-fill neighbour gets +1 priority, roughening
        coastlines.  ``[0, 0.5]``
    chunk_size_min, chunk_size_max : int
        Bounds of the cell count raised or sunk per chunk.  ``[20, 200]``
    land_percentage : int
        Share of cells that should end above water.  ``[5, 95]``
    water_level : int
        Initial water level of every cell.  ``[1, 5]``
    high_rise_probability : float
        Chance a chunk moves elevation by 2 instead of 1.  ``[0, 1]``
    sink_probability : float
        Chance an iteration sinks instead of raises.  ``[0, 0.4]``
    elevation_minimum, elevation_maximum : int
        Elevation bounds.  ``[-4, 0]`` and ``[6, 10]``
    map_border_x, map_border_z : int
        Cells kept free of land seeds along the map edges.  ``[0, 10]``
    region_border : int
        Gap between regions.  ``[0, 10]``
    region_count : int
        Number of regions.  ``[1, 4]``
    erosion_percentage : int
        Share of erodible cells to erode away.  ``[0, 100]``
    evaporation_factor, precipitation_factor, runoff_factor, seepage_factor : float
        Water-cycle rates.  ``[0, 1]``
    starting_moisture : float
        Initial moisture of every cell.  ``[0, 1]``
    wind_direction : HexDirection
        Direction the wind blows *from*.
    wind_strength : float
        Extra weight of downwind cloud dispersal.  ``[1, 10]``
    river_percentage : int
        River cells as a share of land cells.  ``[0, 20]``
    extra_lake_probability : float
        Chance a river step floods a depression into a lake.  ``[0, 1]``
    low_temperature, high_temperature : float
        Temperature at the pole and the equator.  ``[0, 1]``
    temperature_jitter : float
        Amplitude of noise added to temperature.  ``[0, 1]``
    hemisphere : HemisphereMode
        Latitude coverage of the map.
    """

    jitter_probability: float = 0.25
    chunk_size_min: int = 30
    chunk_size_max: int = 100
    land_percentage: int = 50
    water_level: int = 3
    high_rise_probability: float = 0.25
    sink_probability: float = 0.2
    elevation_minimum: int = -2
    elevation_maximum: int = 8
    map_border_x: int = 5
    map_border_z: int = 5
    region_border: int = 5
    region_count: int = 1
    erosion_percentage: int = 50
    evaporation_factor: float = 0.5
    precipitation_factor: float = 0.25
    runoff_factor: float = 0.25
    seepage_factor: float = 0.125
    starting_moisture: float = 0.1
    wind_direction: HexDirection = HexDirection.NW
    wind_strength: float = 4.0
    river_percentage: int = 10
    extra_lake_probability: float = 0.25
    low_temperature: float = 0.0
    high_temperature: float = 1.0
    temperature_jitter: float = 0.1
    hemisphere: HemisphereMode = HemisphereMode.BOTH

    def __post_init__(self) -> None:
        for name, (lo, hi) in _RANGES.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(
                    f"{name} must be a number, got {type(value).__name__}"
                )
            if name in _INT_FIELDS and not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an int, got {value!r}")
            if not lo <= value <= hi:
                raise ConfigurationError(f"{name} must be in [{lo}, {hi}], got {value}")
        if self.chunk_size_min > self.chunk_size_max:
            raise ConfigurationError(
                f"chunk_size_min ({self.chunk_size_min}) exceeds "
                f"chunk_size_max ({self.chunk_size_max})"
            )
        if self.low_temperature > self.high_temperature:
            raise ConfigurationError(
                f"low_temperature ({self.low_temperature}) exceeds "
                f"high_temperature ({self.high_temperature})"
            )
        if self.water_level > self.elevation_maximum:
            raise ConfigurationError("water_level must not exceed elevation_maximum")
        if not isinstance(self.wind_direction, HexDirection):
            try:
                object.__setattr__(self, "wind_direction", HexDirection(self.wind_direction))
            except ValueError as exc:
                raise ConfigurationError(f"Unknown wind_direction {self.wind_direction!r}") from exc
        if not isinstance(self.hemisphere, HemisphereMode):
            try:
                object.__setattr__(self, "hemisphere", HemisphereMode(self.hemisphere))
            except ValueError as exc:
                raise ConfigurationError(f"Unknown hemisphere {self.hemisphere!r}") from exc

    @property
    def elevation_range(self) -> Tuple[int, int]:
        return self.elevation_minimum, self.elevation_maximum

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["wind_direction"] = self.wind_direction.name
        data["hemisphere"] = self.hemisphere.value
        return data

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GeneratorConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            raise ConfigurationError(f"Unknown generator parameters: {sorted(unknown)}")
        data = dict(payload)
        if isinstance(data.get("wind_direction"), str):
            try:
                data["wind_direction"] = HexDirection[data["wind_direction"]]
            except KeyError as exc:
                raise ConfigurationError(
                    f"Unknown wind_direction {data['wind_direction']!r}"
                ) from exc
        return cls(**data)
