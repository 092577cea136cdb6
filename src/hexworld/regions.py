"""Map regions — rectangular areas where generation may raise land.

Splitting the map into separate regions with a water border between
them encourages several landmasses instead of one blob.  Regions are
soft limits: they bound where land chunks are *seeded*, and flood fills
may still spill across borders.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Tuple

from .grid import HexGrid


@dataclass(frozen=True)
class MapRegion:
    """Offset-coordinate rectangle ``[x_min, x_max) × [z_min, z_max)``."""

    x_min: int
    x_max: int
    z_min: int
    z_max: int

    @property
    def size(self) -> int:
        return max(0, self.x_max - self.x_min) * max(0, self.z_max - self.z_min)

    def __contains__(self, offset: Tuple[int, int]) -> bool:
        x, z = offset
        return self.x_min <= x < self.x_max and self.z_min <= z < self.z_max


def _band(count: int, parts: int, index: int, outer: int, inner: int) -> Tuple[int, int]:
    """Bordered ``[lo, hi)`` for band *index* of *parts* equal bands over *count* cells.

    Falls back to the unbordered band when the borders would leave it
    empty.
    """
    start = count * index // parts
    end = count * (index + 1) // parts
    lo = start + (outer if index == 0 else inner)
    hi = end - (outer if index == parts - 1 else inner)
    if hi <= lo:
        return start, max(end, start + 1)
    return lo, hi


def create_regions(
    grid: HexGrid,
    rng: random.Random,
    *,
    region_count: int = 1,
    map_border_x: int = 5,
    map_border_z: int = 5,
    region_border: int = 5,
) -> List[MapRegion]:
    """Partition *grid* into 1–4 regions.

    - 1: the whole map inside the map border
    - 2: a vertical or horizontal split, chosen by coin flip
    - 3: three vertical bands
    - 4: quadrants

    On a wrapping map the east/west map border is replaced by the region
    border (the seam is just another gap), and dropped entirely when the
    layout has a single column of regions.
    """
    count_x = grid.cell_count_x
    count_z = grid.cell_count_z
    border_x = region_border if grid.wrapping else map_border_x

    if region_count == 2:
        if rng.random() < 0.5:
            z = _band(count_z, 1, 0, map_border_z, region_border)
            return [
                MapRegion(*_band(count_x, 2, 0, border_x, region_border), *z),
                MapRegion(*_band(count_x, 2, 1, border_x, region_border), *z),
            ]
        x = _band(count_x, 1, 0, 0 if grid.wrapping else border_x, region_border)
        return [
            MapRegion(*x, *_band(count_z, 2, 0, map_border_z, region_border)),
            MapRegion(*x, *_band(count_z, 2, 1, map_border_z, region_border)),
        ]
    if region_count == 3:
        z = _band(count_z, 1, 0, map_border_z, region_border)
        return [
            MapRegion(*_band(count_x, 3, i, border_x, region_border), *z)
            for i in range(3)
        ]
    if region_count == 4:
        regions = []
        for zi in range(2):
            z = _band(count_z, 2, zi, map_border_z, region_border)
            for xi in range(2):
                regions.append(MapRegion(*_band(count_x, 2, xi, border_x, region_border), *z))
        return regions

    x = _band(count_x, 1, 0, 0 if grid.wrapping else border_x, region_border)
    z = _band(count_z, 1, 0, map_border_z, region_border)
    return [MapRegion(*x, *z)]
