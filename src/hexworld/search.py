"""Turn-based path search and visibility queries over a :class:`HexGrid`.

Both searches share the grid's phase counter and the cells' scratch
fields, and both run on a :class:`CellPriorityQueue`:

- :func:`find_path` — A* with integer move costs and per-turn movement
  budgets; a step that does not fit into what is left of the current
  turn starts fresh at the beginning of the next one.
- :func:`query_visible` — uniform-cost expansion limited by view range,
  elevation and line-of-sight radius.

A cell stamped with the current phase is *open*; a stamp above it is
*closed*; anything lower is stale data from an earlier search.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from .cell import HexCell
from .coordinates import EdgeType, HexDirection
from .errors import InvalidSearchError
from .grid import HexGrid
from .priority_queue import CellPriorityQueue

MoveCost = Callable[[HexCell, HexCell, HexDirection], int]
"""``(from_cell, to_cell, direction) → cost``; negative means impassable."""

DestinationFilter = Callable[[HexCell], bool]


# ═══════════════════════════════════════════════════════════════════
# Actor defaults
# ═══════════════════════════════════════════════════════════════════


def default_move_cost(from_cell: HexCell, to_cell: HexCell, direction: HexDirection) -> int:
    """Movement cost of a land unit stepping from *from_cell* to *to_cell*."""
    if from_cell.has_road_through_edge(direction):
        return 1
    if from_cell.walled != to_cell.walled:
        return -1
    edge = from_cell.get_edge_type(to_cell)
    if edge is EdgeType.CLIFF:
        return -1
    cost = 5 if edge is EdgeType.FLAT else 10
    cost += to_cell.urban_level + to_cell.farm_level + to_cell.plant_level
    return cost


def default_is_valid_destination(cell: HexCell) -> bool:
    """Dry, unoccupied cells can be entered."""
    return not cell.is_underwater and cell.unit is None


# ═══════════════════════════════════════════════════════════════════
# Path search
# ═══════════════════════════════════════════════════════════════════


@dataclass
class Path:
    """Result of a successful :func:`find_path`.

    Attributes
    ----------
    cells : list of HexCell
        Cells from origin to destination inclusive.
    distances : list of int
        Turn-adjusted arrival distance of each cell (0 at the origin).
    speed : int
        Movement points per turn used for the search.
    """

    cells: List[HexCell] = field(default_factory=list)
    distances: List[int] = field(default_factory=list)
    speed: int = 1

    @property
    def cost(self) -> int:
        """Total turn-adjusted distance to the destination."""
        return self.distances[-1] if self.distances else 0

    @property
    def turns(self) -> List[int]:
        """Turn in which each cell is reached (0 = the current turn)."""
        return [search_turn(d, self.speed) for d in self.distances]

    @property
    def origin(self) -> HexCell:
        return self.cells[0]

    @property
    def destination(self) -> HexCell:
        return self.cells[-1]

    def __len__(self) -> int:
        return len(self.cells)


def search_turn(distance: int, speed: int) -> int:
    """Turn index for an arrival *distance* (truncating toward zero)."""
    if distance <= 0:
        return 0
    return (distance - 1) // speed


def find_path(
    grid: HexGrid,
    origin: HexCell,
    destination: HexCell,
    speed: int,
    is_valid_destination: Optional[DestinationFilter] = None,
    move_cost: Optional[MoveCost] = None,
    *,
    queue: Optional[CellPriorityQueue] = None,
) -> Optional[Path]:
    """Cheapest path from *origin* to *destination*, or ``None``.

    Parameters
    ----------
    grid : HexGrid
    origin, destination : HexCell
        Both must belong to *grid*.
    speed : int
        Movement points per turn (> 0).
    is_valid_destination : callable, optional
        Predicate for cells the actor may enter.  Defaults to
        :func:`default_is_valid_destination`.
    move_cost : callable, optional
        Edge cost function.  Defaults to :func:`default_move_cost`.
    queue : CellPriorityQueue, optional
        Reusable queue; a fresh one is used when omitted.

    Raises
    ------
    InvalidSearchError
        If a cell is not part of *grid* or *speed* is not positive.
    """
    _check_cell(grid, origin, "origin")
    _check_cell(grid, destination, "destination")
    if isinstance(speed, bool) or not isinstance(speed, int) or speed <= 0:
        raise InvalidSearchError(f"speed must be a positive int, got {speed!r}")

    if not _search(
        grid,
        origin,
        destination,
        speed,
        is_valid_destination or default_is_valid_destination,
        move_cost or default_move_cost,
        queue if queue is not None else CellPriorityQueue(),
    ):
        return None
    return _build_path(grid, origin, destination, speed)


def _search(
    grid: HexGrid,
    origin: HexCell,
    destination: HexCell,
    speed: int,
    is_valid_destination: DestinationFilter,
    move_cost: MoveCost,
    frontier: CellPriorityQueue,
) -> bool:
    phase = grid.advance_search_phase(2)
    frontier.clear()

    origin.search_phase = phase
    origin.distance = 0
    origin.search_heuristic = 0
    origin.path_from = None
    frontier.enqueue(origin)

    wrap_size = grid.wrap_size
    target = destination.coordinates

    while frontier:
        current = frontier.dequeue()
        current.search_phase += 1
        if current is destination:
            return True

        current_turn = search_turn(current.distance, speed)
        for d, neighbor in current.neighbors():
            if neighbor.search_phase > phase:
                continue
            if not is_valid_destination(neighbor):
                continue
            cost = move_cost(current, neighbor, d)
            if cost < 0:
                continue

            distance = current.distance + cost
            turn = search_turn(distance, speed)
            if turn > current_turn:
                distance = turn * speed + cost

            if neighbor.search_phase < phase:
                neighbor.search_phase = phase
                neighbor.distance = distance
                neighbor.path_from = current.index
                neighbor.search_heuristic = neighbor.coordinates.distance_to(
                    target, wrap_size
                )
                frontier.enqueue(neighbor)
            elif distance < neighbor.distance:
                old_priority = neighbor.search_priority
                neighbor.distance = distance
                neighbor.path_from = current.index
                frontier.change(neighbor, old_priority)
    return False


def _build_path(grid: HexGrid, origin: HexCell, destination: HexCell, speed: int) -> Path:
    cells: List[HexCell] = []
    current = destination
    while current is not origin:
        cells.append(current)
        current = grid.get_cell(current.path_from)
    cells.append(origin)
    cells.reverse()
    return Path(cells=cells, distances=[c.distance for c in cells], speed=speed)


# ═══════════════════════════════════════════════════════════════════
# Visibility
# ═══════════════════════════════════════════════════════════════════


def query_visible(
    grid: HexGrid,
    origin: HexCell,
    view_range: int,
    *,
    queue: Optional[CellPriorityQueue] = None,
) -> Set[HexCell]:
    """Cells an observer standing on *origin* can see.

    The range grows with the origin's view elevation; a neighbour is
    pruned when its own view elevation plus the path length exceeds
    that budget, or when the path is longer than the straight hex
    distance back to the origin.  Only ``explorable`` cells are visited
    beyond the origin.
    """
    _check_cell(grid, origin, "origin")
    if view_range < 0:
        raise InvalidSearchError(f"view_range must be >= 0, got {view_range}")

    frontier = queue if queue is not None else CellPriorityQueue()
    frontier.clear()
    phase = grid.advance_search_phase(2)
    visible: Set[HexCell] = set()

    view_range += origin.view_elevation
    origin.search_phase = phase
    origin.distance = 0
    origin.search_heuristic = 0
    frontier.enqueue(origin)
    from_coordinates = origin.coordinates
    wrap_size = grid.wrap_size

    while frontier:
        current = frontier.dequeue()
        current.search_phase += 1
        visible.add(current)

        for _, neighbor in current.neighbors():
            if neighbor.search_phase > phase or not neighbor.explorable:
                continue
            distance = current.distance + 1
            if (
                distance + neighbor.view_elevation > view_range
                or distance > from_coordinates.distance_to(neighbor.coordinates, wrap_size)
            ):
                continue
            if neighbor.search_phase < phase:
                neighbor.search_phase = phase
                neighbor.distance = distance
                neighbor.search_heuristic = 0
                frontier.enqueue(neighbor)
            elif distance < neighbor.distance:
                old_priority = neighbor.search_priority
                neighbor.distance = distance
                frontier.change(neighbor, old_priority)

    frontier.clear()
    return visible


def increase_visibility(grid: HexGrid, origin: HexCell, view_range: int) -> Set[HexCell]:
    """Add one observer at *origin*; returns the cells it sees."""
    cells = query_visible(grid, origin, view_range)
    for cell in cells:
        cell.increase_visibility()
    return cells


def decrease_visibility(grid: HexGrid, origin: HexCell, view_range: int) -> Set[HexCell]:
    """Remove an observer previously added with :func:`increase_visibility`."""
    cells = query_visible(grid, origin, view_range)
    for cell in cells:
        cell.decrease_visibility()
    return cells


def _check_cell(grid: HexGrid, cell: HexCell, name: str) -> None:
    if not isinstance(cell, HexCell) or not grid.contains(cell):
        raise InvalidSearchError(f"{name} is not a cell of {grid!r}")
