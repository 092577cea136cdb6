"""Shared hex-map constants.

Geometry values mirror the layout used by rendering collaborators so that
noise sampled at a cell's planar position lines up with what they draw.
"""

from __future__ import annotations

OUTER_RADIUS = 10.0
INNER_RADIUS = OUTER_RADIUS * 0.866025404
INNER_DIAMETER = INNER_RADIUS * 2.0

# Renderers group cells into chunks; the core only checks divisibility.
CHUNK_SIZE_X = 1
CHUNK_SIZE_Z = 1

ELEVATION_MINIMUM = -4
ELEVATION_MAXIMUM = 10

# Planar position → noise space.  Matches sampling a 256px tiled texture
# at ``position * 0.003``.
NOISE_SCALE = 0.003
NOISE_RESOLUTION = 256

MAX_LEVEL = 3
