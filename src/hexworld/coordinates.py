"""Cube coordinates, directions and edge classification for hex cells.

Cells are addressed by *offset* coordinates ``(column, row)`` in the grid
arena and by *cube* coordinates ``(x, y, z)`` for distance math.  Only ``x``
and ``z`` are stored; ``y`` is always ``-x - z`` so the cube invariant
``x + y + z == 0`` cannot be broken.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Tuple

from .metrics import INNER_DIAMETER, OUTER_RADIUS


# ═══════════════════════════════════════════════════════════════════
# Directions
# ═══════════════════════════════════════════════════════════════════


class HexDirection(IntEnum):
    """The six edges of a pointy-top hexagon, clockwise from north-east."""

    NE = 0
    E = 1
    SE = 2
    SW = 3
    W = 4
    NW = 5

    def opposite(self) -> "HexDirection":
        return HexDirection((self + 3) % 6)

    def previous(self) -> "HexDirection":
        return HexDirection((self - 1) % 6)

    def next(self) -> "HexDirection":
        return HexDirection((self + 1) % 6)

    def previous2(self) -> "HexDirection":
        return HexDirection((self - 2) % 6)

    def next2(self) -> "HexDirection":
        return HexDirection((self + 2) % 6)


class EdgeType(Enum):
    """Relationship between the elevations of two adjacent cells."""

    FLAT = "flat"
    SLOPE = "slope"
    CLIFF = "cliff"


def edge_type(elevation1: int, elevation2: int) -> EdgeType:
    """Classify the edge between two elevations."""
    if elevation1 == elevation2:
        return EdgeType.FLAT
    delta = elevation2 - elevation1
    if delta == 1 or delta == -1:
        return EdgeType.SLOPE
    return EdgeType.CLIFF


# ═══════════════════════════════════════════════════════════════════
# Coordinates
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class HexCoordinates:
    """Cube coordinates of a hex cell.

    *x* and *z* are stored; :attr:`y` is derived.  Wrap-aware
    construction and distance take an explicit *wrap_size* (the world
    width in cells) instead of consulting global state.
    """

    x: int
    z: int

    @property
    def y(self) -> int:
        return -self.x - self.z

    # ── construction ────────────────────────────────────────────────

    @classmethod
    def from_offset(cls, x: int, z: int) -> "HexCoordinates":
        """Convert offset ``(column, row)`` to cube coordinates."""
        return cls(x - z // 2, z)

    @classmethod
    def wrapped(cls, x: int, z: int, wrap_size: int) -> "HexCoordinates":
        """Build coordinates, folding *x* back into a world *wrap_size* wide."""
        if wrap_size > 0:
            offset_x = x + z // 2
            if offset_x < 0:
                x += wrap_size
            elif offset_x >= wrap_size:
                x -= wrap_size
        return cls(x, z)

    # ── conversions ─────────────────────────────────────────────────

    def to_offset(self) -> Tuple[int, int]:
        return self.x + self.z // 2, self.z

    def to_position(self) -> Tuple[float, float]:
        """Planar centre ``(x, z)`` of the cell in world units."""
        return (
            (self.x + self.z * 0.5) * INNER_DIAMETER,
            self.z * (OUTER_RADIUS * 1.5),
        )

    # ── distance ────────────────────────────────────────────────────

    def distance_to(self, other: "HexCoordinates", wrap_size: int = 0) -> int:
        """Hex distance to *other*.

        With ``wrap_size > 0`` the world wraps horizontally and the
        shortest of the direct and the two wrapped routes is returned.
        """
        xy = _xy_distance(self.x, self.y, other.x, other.z)
        if wrap_size > 0:
            xy = min(
                xy,
                _xy_distance(self.x, self.y, other.x + wrap_size, other.z),
                _xy_distance(self.x, self.y, other.x - wrap_size, other.z),
            )
        return (xy + abs(self.z - other.z)) // 2

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.z})"


def _xy_distance(x: int, y: int, other_x: int, other_z: int) -> int:
    other_y = -other_x - other_z
    return abs(x - other_x) + abs(y - other_y)
