"""Hex cell — one node of the world graph.

A :class:`HexCell` carries the terrain attributes that renderers read
(elevation, water, terrain type, development levels, walls, roads,
rivers) plus per-search scratch fields used by the bucket queue.

Every mutator re-validates the invariants that depend on it and then
asks the owning grid to notify refresh listeners:

- rivers flow only to a neighbour that is not higher, or whose
  elevation equals this cell's water level; edits that break this
  remove the offending river edge at both endpoints
- roads never cross an edge with a river or an elevation difference
  above one; edits that break this remove the road at both endpoints

Neighbours are stored as six optional indices into the grid's cell
arena, so there are no reference cycles between cells.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Tuple, Union

from .coordinates import EdgeType, HexCoordinates, HexDirection, edge_type
from .metrics import MAX_LEVEL

if TYPE_CHECKING:
    from .grid import HexGrid


class TerrainType(IntEnum):
    SAND = 0
    GRASS = 1
    MUD = 2
    STONE = 3
    SNOW = 4


Color = Tuple[float, float, float]


class HexCell:
    """A single hex cell owned by a :class:`~hexworld.grid.HexGrid`.

    Parameters
    ----------
    grid : HexGrid
        Owning grid (resolves neighbour indices, receives notifications).
    index : int
        Row-major offset index into the grid arena.
    coordinates : HexCoordinates
        Cube coordinates of the cell.
    """

    def __init__(self, grid: "HexGrid", index: int, coordinates: HexCoordinates) -> None:
        self._grid = grid
        self.index = index
        self.coordinates = coordinates
        self._neighbors: List[Optional[int]] = [None] * 6

        self._elevation = 0
        self._water_level = 0
        self._terrain_type_index = int(TerrainType.SAND)
        self._urban_level = 0
        self._farm_level = 0
        self._plant_level = 0
        self._walled = False
        self._roads = [False] * 6
        self._incoming_river: Optional[HexDirection] = None
        self._outgoing_river: Optional[HexDirection] = None
        self._color: Optional[Color] = None

        self.explorable = True
        self._explored = False
        self._visibility = 0
        self.unit: Any = None

        # Search scratch; valid only while search_phase matches the grid's.
        self.distance = 0
        self.search_heuristic = 0
        self.search_phase = 0
        self.path_from: Optional[int] = None
        self.next_with_same_priority: Optional[HexCell] = None

    # ── neighbours ──────────────────────────────────────────────────

    @property
    def grid(self) -> "HexGrid":
        return self._grid

    def get_neighbor(self, direction: HexDirection) -> Optional["HexCell"]:
        index = self._neighbors[direction]
        if index is None:
            return None
        return self._grid.get_cell(index)

    def set_neighbor(self, direction: HexDirection, cell: "HexCell") -> None:
        """Link *cell* in *direction* and this cell back in the opposite one."""
        self._neighbors[direction] = cell.index
        cell._neighbors[HexDirection(direction).opposite()] = self.index

    def neighbors(self) -> Iterator[Tuple[HexDirection, "HexCell"]]:
        """Yield ``(direction, neighbour)`` for every existing neighbour."""
        for d in HexDirection:
            neighbor = self.get_neighbor(d)
            if neighbor is not None:
                yield d, neighbor

    def get_edge_type(self, other: Union[HexDirection, "HexCell"]) -> EdgeType:
        if isinstance(other, HexCell):
            return edge_type(self._elevation, other._elevation)
        neighbor = self.get_neighbor(other)
        if neighbor is None:
            raise ValueError(f"Cell {self.index} has no neighbour to the {other.name}")
        return edge_type(self._elevation, neighbor._elevation)

    def get_elevation_difference(self, direction: HexDirection) -> int:
        neighbor = self.get_neighbor(direction)
        if neighbor is None:
            raise ValueError(f"Cell {self.index} has no neighbour to the {direction.name}")
        return abs(self._elevation - neighbor._elevation)

    @property
    def position(self) -> Tuple[float, float]:
        return self.coordinates.to_position()

    # ── elevation and water ─────────────────────────────────────────

    @property
    def elevation(self) -> int:
        return self._elevation

    @elevation.setter
    def elevation(self, value: int) -> None:
        self._grid.check_elevation(value, "elevation")
        if self._elevation == value:
            return
        self._elevation = value
        self._validate_rivers()
        for d in HexDirection:
            if self._roads[d] and self.get_elevation_difference(d) > 1:
                self._set_road(d, False)
        self._refresh()

    @property
    def water_level(self) -> int:
        return self._water_level

    @water_level.setter
    def water_level(self, value: int) -> None:
        self._grid.check_elevation(value, "water_level")
        if self._water_level == value:
            return
        self._water_level = value
        self._validate_rivers()
        self._refresh()

    @property
    def is_underwater(self) -> bool:
        return self._water_level > self._elevation

    @property
    def view_elevation(self) -> int:
        return self._elevation if self._elevation >= self._water_level else self._water_level

    # ── surface attributes ──────────────────────────────────────────

    @property
    def terrain_type_index(self) -> int:
        return self._terrain_type_index

    @terrain_type_index.setter
    def terrain_type_index(self, value: int) -> None:
        value = int(TerrainType(value))  # ValueError if unknown
        if self._terrain_type_index != value:
            self._terrain_type_index = value
            self._refresh_self_only()

    @property
    def color(self) -> Optional[Color]:
        return self._color

    @color.setter
    def color(self, value: Optional[Color]) -> None:
        if self._color == value:
            return
        self._color = value
        self._refresh()

    @property
    def urban_level(self) -> int:
        return self._urban_level

    @urban_level.setter
    def urban_level(self, value: int) -> None:
        _check_level(value, "urban_level")
        if self._urban_level != value:
            self._urban_level = value
            self._refresh_self_only()

    @property
    def farm_level(self) -> int:
        return self._farm_level

    @farm_level.setter
    def farm_level(self, value: int) -> None:
        _check_level(value, "farm_level")
        if self._farm_level != value:
            self._farm_level = value
            self._refresh_self_only()

    @property
    def plant_level(self) -> int:
        return self._plant_level

    @plant_level.setter
    def plant_level(self, value: int) -> None:
        _check_level(value, "plant_level")
        if self._plant_level != value:
            self._plant_level = value
            self._refresh_self_only()

    @property
    def walled(self) -> bool:
        return self._walled

    @walled.setter
    def walled(self, value: bool) -> None:
        if self._walled != value:
            self._walled = bool(value)
            self._refresh()

    # ── rivers ──────────────────────────────────────────────────────

    @property
    def has_incoming_river(self) -> bool:
        return self._incoming_river is not None

    @property
    def has_outgoing_river(self) -> bool:
        return self._outgoing_river is not None

    @property
    def incoming_river(self) -> Optional[HexDirection]:
        return self._incoming_river

    @property
    def outgoing_river(self) -> Optional[HexDirection]:
        return self._outgoing_river

    @property
    def has_river(self) -> bool:
        return self._incoming_river is not None or self._outgoing_river is not None

    @property
    def has_river_begin_or_end(self) -> bool:
        return self.has_incoming_river != self.has_outgoing_river

    def has_river_through_edge(self, direction: HexDirection) -> bool:
        return self._incoming_river == direction or self._outgoing_river == direction

    def is_valid_river_destination(self, neighbor: Optional["HexCell"]) -> bool:
        """Whether a river may flow from this cell into *neighbor*."""
        return neighbor is not None and (
            self._elevation >= neighbor._elevation
            or self._water_level == neighbor._elevation
        )

    def set_outgoing_river(self, direction: HexDirection) -> None:
        """Start a river through *direction*; silently ignored if invalid."""
        direction = HexDirection(direction)
        if self._outgoing_river == direction:
            return
        neighbor = self.get_neighbor(direction)
        if not self.is_valid_river_destination(neighbor):
            return

        self.remove_outgoing_river()
        if self._incoming_river == direction:
            self.remove_incoming_river()
        self._outgoing_river = direction

        neighbor.remove_incoming_river()
        neighbor._incoming_river = direction.opposite()

        self._set_road(direction, False)
        self._refresh_self_only()
        neighbor._refresh_self_only()

    def remove_outgoing_river(self) -> None:
        if self._outgoing_river is None:
            return
        neighbor = self.get_neighbor(self._outgoing_river)
        self._outgoing_river = None
        self._refresh_self_only()
        neighbor._incoming_river = None
        neighbor._refresh_self_only()

    def remove_incoming_river(self) -> None:
        if self._incoming_river is None:
            return
        neighbor = self.get_neighbor(self._incoming_river)
        self._incoming_river = None
        self._refresh_self_only()
        neighbor._outgoing_river = None
        neighbor._refresh_self_only()

    def remove_river(self) -> None:
        self.remove_outgoing_river()
        self.remove_incoming_river()

    def _validate_rivers(self) -> None:
        if self._outgoing_river is not None and not self.is_valid_river_destination(
            self.get_neighbor(self._outgoing_river)
        ):
            self.remove_outgoing_river()
        if self._incoming_river is not None and not self.get_neighbor(
            self._incoming_river
        ).is_valid_river_destination(self):
            self.remove_incoming_river()

    # ── roads ───────────────────────────────────────────────────────

    def has_road_through_edge(self, direction: HexDirection) -> bool:
        return self._roads[direction]

    @property
    def has_roads(self) -> bool:
        return any(self._roads)

    @property
    def roads(self) -> Tuple[bool, ...]:
        return tuple(self._roads)

    def add_road(self, direction: HexDirection) -> bool:
        """Add a road through *direction*; returns whether one was added."""
        direction = HexDirection(direction)
        if (
            not self._roads[direction]
            and not self.has_river_through_edge(direction)
            and self.get_neighbor(direction) is not None
            and self.get_elevation_difference(direction) <= 1
        ):
            self._set_road(direction, True)
            return True
        return False

    def remove_roads(self) -> None:
        for d in HexDirection:
            if self._roads[d]:
                self._set_road(d, False)

    def _set_road(self, direction: HexDirection, state: bool) -> None:
        if self._roads[direction] == state:
            return
        neighbor = self.get_neighbor(direction)
        self._roads[direction] = state
        neighbor._roads[HexDirection(direction).opposite()] = state
        neighbor._refresh_self_only()
        self._refresh_self_only()

    # ── exploration / visibility ────────────────────────────────────

    @property
    def is_explored(self) -> bool:
        return self._explored

    @is_explored.setter
    def is_explored(self, value: bool) -> None:
        if self._explored != value:
            self._explored = bool(value)
            self._grid.notify_visibility(self)

    @property
    def visibility(self) -> int:
        return self._visibility

    @property
    def is_visible(self) -> bool:
        return self._visibility > 0 and self.explorable

    def increase_visibility(self) -> None:
        self._visibility += 1
        if self._visibility == 1:
            self._explored = True
            self._grid.notify_visibility(self)

    def decrease_visibility(self) -> None:
        if self._visibility == 0:
            raise ValueError(f"Cell {self.index} is not visible")
        self._visibility -= 1
        if self._visibility == 0:
            self._grid.notify_visibility(self)

    def reset_visibility(self) -> None:
        if self._visibility > 0:
            self._visibility = 0
            self._grid.notify_visibility(self)

    # ── search scratch ──────────────────────────────────────────────

    @property
    def search_priority(self) -> int:
        return self.distance + self.search_heuristic

    # ── notifications ───────────────────────────────────────────────

    def _refresh(self) -> None:
        self._grid.notify_refresh(self, True)

    def _refresh_self_only(self) -> None:
        self._grid.notify_refresh(self, False)

    def __repr__(self) -> str:
        return (
            f"HexCell(index={self.index}, coordinates={self.coordinates}, "
            f"elevation={self._elevation}, water_level={self._water_level})"
        )


def _check_level(value: int, name: str) -> None:
    if not 0 <= value <= MAX_LEVEL:
        raise ValueError(f"{name} must be in [0, {MAX_LEVEL}], got {value}")
