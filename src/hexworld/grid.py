"""Hex grid — the arena that owns every :class:`~hexworld.cell.HexCell`.

Cells live in a flat row-major list addressed by offset coordinates
``(column, row)``.  The grid also owns the shared *search phase*
counter: each search (or generation flood fill) advances it, and a
cell's scratch data is only meaningful while its stamp matches, so no
per-search reset pass is needed.

Rendering collaborators subscribe with :meth:`HexGrid.add_refresh_listener`
and :meth:`HexGrid.add_visibility_listener`; the core never draws.
"""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Tuple

from .cell import HexCell
from .coordinates import HexCoordinates, HexDirection
from .errors import ConfigurationError
from .metrics import CHUNK_SIZE_X, CHUNK_SIZE_Z, ELEVATION_MAXIMUM, ELEVATION_MINIMUM

RefreshListener = Callable[[HexCell, bool], None]
"""``(cell, include_neighbors)`` — *cell* (and its neighbours) need redrawing."""

VisibilityListener = Callable[[HexCell], None]
"""``(cell)`` — the cell's visible/explored state changed."""


class HexGrid:
    """Fixed-size rectangular arena of hex cells.

    Parameters
    ----------
    cell_count_x, cell_count_z : int
        Columns and rows.  Must be positive.
    wrapping : bool
        Wrap the world horizontally (east edge joins the west edge).
    elevation_range : tuple of int
        Inclusive ``(minimum, maximum)`` for elevation and water level.

    Use :func:`create_grid` for chunk-size validation.
    """

    def __init__(
        self,
        cell_count_x: int,
        cell_count_z: int,
        wrapping: bool = False,
        *,
        elevation_range: Tuple[int, int] = (ELEVATION_MINIMUM, ELEVATION_MAXIMUM),
    ) -> None:
        if cell_count_x <= 0 or cell_count_z <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {cell_count_x}x{cell_count_z}"
            )
        if wrapping and cell_count_x < 3:
            raise ConfigurationError(
                f"A wrapping grid needs at least 3 columns, got {cell_count_x}"
            )
        lo, hi = elevation_range
        if lo > 0 or hi < 0 or lo > hi:
            raise ConfigurationError(
                f"Elevation range must contain 0, got {elevation_range}"
            )
        self.cell_count_x = cell_count_x
        self.cell_count_z = cell_count_z
        self.wrapping = wrapping
        self.elevation_range = (lo, hi)
        self.search_phase = 0
        self._refresh_listeners: List[RefreshListener] = []
        self._visibility_listeners: List[VisibilityListener] = []
        self.cells: List[HexCell] = []
        self._create_cells()

    # ── construction ────────────────────────────────────────────────

    @property
    def cell_count(self) -> int:
        return self.cell_count_x * self.cell_count_z

    @property
    def wrap_size(self) -> int:
        """World width used for wrap-aware distances (0 when not wrapping)."""
        return self.cell_count_x if self.wrapping else 0

    def _create_cells(self) -> None:
        i = 0
        for z in range(self.cell_count_z):
            for x in range(self.cell_count_x):
                self._create_cell(x, z, i)
                i += 1

    def _create_cell(self, x: int, z: int, i: int) -> None:
        count_x = self.cell_count_x
        cell = HexCell(self, i, HexCoordinates.from_offset(x, z))
        self.cells.append(cell)
        cells = self.cells

        if x > 0:
            cell.set_neighbor(HexDirection.W, cells[i - 1])
            if self.wrapping and x == count_x - 1:
                cell.set_neighbor(HexDirection.E, cells[i - x])
        if z > 0:
            if z % 2 == 0:
                cell.set_neighbor(HexDirection.SE, cells[i - count_x])
                if x > 0:
                    cell.set_neighbor(HexDirection.SW, cells[i - count_x - 1])
                elif self.wrapping:
                    cell.set_neighbor(HexDirection.SW, cells[i - 1])
            else:
                cell.set_neighbor(HexDirection.SW, cells[i - count_x])
                if x < count_x - 1:
                    cell.set_neighbor(HexDirection.SE, cells[i - count_x + 1])
                elif self.wrapping:
                    cell.set_neighbor(HexDirection.SE, cells[i - count_x * 2 + 1])

    # ── lookup ──────────────────────────────────────────────────────

    def get_cell(self, index: int) -> HexCell:
        return self.cells[index]

    def get_cell_offset(self, x: int, z: int) -> Optional[HexCell]:
        """Cell at offset ``(column, row)``, or ``None`` outside the grid."""
        if z < 0 or z >= self.cell_count_z:
            return None
        if self.wrapping:
            x %= self.cell_count_x
        elif x < 0 or x >= self.cell_count_x:
            return None
        return self.cells[x + z * self.cell_count_x]

    def get_cell_at(self, coordinates: HexCoordinates) -> Optional[HexCell]:
        """Cell at cube *coordinates*, or ``None`` outside the grid.

        On a wrapping grid, coordinates one world width past either side
        of the seam are folded back first.
        """
        if self.wrapping:
            coordinates = HexCoordinates.wrapped(coordinates.x, coordinates.z, self.cell_count_x)
        x, z = coordinates.to_offset()
        return self.get_cell_offset(x, z)

    def contains(self, cell: HexCell) -> bool:
        """Whether *cell* belongs to this grid."""
        return (
            cell.grid is self
            and 0 <= cell.index < len(self.cells)
            and self.cells[cell.index] is cell
        )

    def distance(self, a: HexCell, b: HexCell) -> int:
        return a.coordinates.distance_to(b.coordinates, self.wrap_size)

    def __iter__(self) -> Iterator[HexCell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    # ── validation ──────────────────────────────────────────────────

    def check_elevation(self, value: int, name: str = "elevation") -> None:
        lo, hi = self.elevation_range
        if not lo <= value <= hi:
            raise ValueError(f"{name} must be in [{lo}, {hi}], got {value}")

    # ── search phase ────────────────────────────────────────────────

    def advance_search_phase(self, step: int = 1) -> int:
        """Advance the shared phase counter and return the new phase."""
        self.search_phase += step
        return self.search_phase

    def reset_search_phase(self) -> None:
        self.search_phase = 0
        for cell in self.cells:
            cell.search_phase = 0

    # ── visibility ──────────────────────────────────────────────────

    def reset_visibility(self) -> None:
        """Zero every visibility counter (explored flags are kept)."""
        for cell in self.cells:
            cell.reset_visibility()

    # ── listeners ───────────────────────────────────────────────────

    def add_refresh_listener(self, listener: RefreshListener) -> None:
        self._refresh_listeners.append(listener)

    def remove_refresh_listener(self, listener: RefreshListener) -> None:
        self._refresh_listeners.remove(listener)

    def add_visibility_listener(self, listener: VisibilityListener) -> None:
        self._visibility_listeners.append(listener)

    def remove_visibility_listener(self, listener: VisibilityListener) -> None:
        self._visibility_listeners.remove(listener)

    def notify_refresh(self, cell: HexCell, include_neighbors: bool) -> None:
        for listener in self._refresh_listeners:
            listener(cell, include_neighbors)

    def notify_visibility(self, cell: HexCell) -> None:
        for listener in self._visibility_listeners:
            listener(cell)

    def __repr__(self) -> str:
        wrap = ", wrapping" if self.wrapping else ""
        return f"HexGrid({self.cell_count_x}x{self.cell_count_z}{wrap})"


def create_grid(
    width: int,
    height: int,
    wrapping: bool = False,
    *,
    chunk_size_x: int = CHUNK_SIZE_X,
    chunk_size_z: int = CHUNK_SIZE_Z,
    elevation_range: Tuple[int, int] = (ELEVATION_MINIMUM, ELEVATION_MAXIMUM),
) -> HexGrid:
    """Build a new grid of *width* × *height* cells.

    Raises
    ------
    ConfigurationError
        If a dimension is not a positive multiple of its chunk size.
    """
    if chunk_size_x <= 0 or chunk_size_z <= 0:
        raise ConfigurationError(
            f"Chunk sizes must be positive, got {chunk_size_x}x{chunk_size_z}"
        )
    if width <= 0 or width % chunk_size_x != 0:
        raise ConfigurationError(
            f"Unsupported map width {width}: must be a positive multiple of {chunk_size_x}"
        )
    if height <= 0 or height % chunk_size_z != 0:
        raise ConfigurationError(
            f"Unsupported map height {height}: must be a positive multiple of {chunk_size_z}"
        )
    return HexGrid(width, height, wrapping, elevation_range=elevation_range)
