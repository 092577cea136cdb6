"""Brush editing of cells.

A :class:`CellEdit` describes which attributes a brush stroke changes;
:func:`edit_cells` applies it to every cell within the brush radius.
Edits go through the normal :class:`~hexworld.cell.HexCell` mutators, so
invalid rivers and roads are cleaned up exactly as during generation.

Dragging the brush from one cell to an adjacent one draws rivers and
roads along the drag: the neighbour behind the stroke gets a river or
road pointing into the edited cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .cell import Color, HexCell
from .coordinates import HexCoordinates, HexDirection
from .grid import HexGrid


class OptionalToggle(Enum):
    """Tri-state brush setting: leave alone, force on, force off."""

    IGNORE = "ignore"
    YES = "yes"
    NO = "no"


@dataclass
class CellEdit:
    """Attribute changes of one brush.  ``None`` leaves a field untouched."""

    elevation: Optional[int] = None
    water_level: Optional[int] = None
    terrain_type_index: Optional[int] = None
    urban_level: Optional[int] = None
    farm_level: Optional[int] = None
    plant_level: Optional[int] = None
    color: Optional[Color] = None
    walled: OptionalToggle = OptionalToggle.IGNORE
    river: OptionalToggle = OptionalToggle.IGNORE
    road: OptionalToggle = OptionalToggle.IGNORE

    def apply(self, cell: HexCell, drag_direction: Optional[HexDirection] = None) -> None:
        """Apply this edit to a single *cell*."""
        if self.terrain_type_index is not None:
            cell.terrain_type_index = self.terrain_type_index
        if self.color is not None:
            cell.color = self.color
        if self.elevation is not None:
            cell.elevation = self.elevation
        if self.water_level is not None:
            cell.water_level = self.water_level
        if self.urban_level is not None:
            cell.urban_level = self.urban_level
        if self.farm_level is not None:
            cell.farm_level = self.farm_level
        if self.plant_level is not None:
            cell.plant_level = self.plant_level
        if self.river is OptionalToggle.NO:
            cell.remove_river()
        if self.road is OptionalToggle.NO:
            cell.remove_roads()
        if self.walled is not OptionalToggle.IGNORE:
            cell.walled = self.walled is OptionalToggle.YES

        if drag_direction is not None:
            other = cell.get_neighbor(drag_direction.opposite())
            if other is not None:
                if self.river is OptionalToggle.YES:
                    other.set_outgoing_river(drag_direction)
                if self.road is OptionalToggle.YES:
                    other.add_road(drag_direction)


def brush_cells(grid: HexGrid, center: HexCell, brush_size: int) -> List[HexCell]:
    """Cells within hex distance *brush_size* of *center*, without duplicates."""
    if brush_size < 0:
        raise ValueError(f"brush_size must be >= 0, got {brush_size}")
    cx = center.coordinates.x
    cz = center.coordinates.z
    cells: List[HexCell] = []
    seen = set()
    for z in range(cz - brush_size, cz + brush_size + 1):
        dz = z - cz
        x_lo = cx - brush_size - min(dz, 0)
        x_hi = cx + brush_size - max(dz, 0)
        for x in range(x_lo, x_hi + 1):
            cell = grid.get_cell_at(HexCoordinates(x, z))
            if cell is not None and cell.index not in seen:
                seen.add(cell.index)
                cells.append(cell)
    return cells


def edit_cells(
    grid: HexGrid,
    center: HexCell,
    brush_size: int,
    edit: CellEdit,
    drag_direction: Optional[HexDirection] = None,
) -> List[HexCell]:
    """Apply *edit* to every cell under the brush; returns the edited cells."""
    cells = brush_cells(grid, center, brush_size)
    for cell in cells:
        edit.apply(cell, drag_direction)
    return cells


def find_drag_direction(previous: Optional[HexCell], current: HexCell) -> Optional[HexDirection]:
    """Direction from *previous* to an adjacent *current*, else ``None``."""
    if previous is None or previous is current:
        return None
    for d, neighbor in previous.neighbors():
        if neighbor is current:
            return d
    return None
