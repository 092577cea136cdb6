"""Seeded noise source for generation jitter.

Replaces a shared noise texture with an explicit, seeded object so that
world generation stays reproducible: two :class:`NoiseSource` instances
built from the same seed return identical samples, and nothing here
touches module-level state.

Each source exposes four independent *channels* (like the RGBA channels
of a noise texture), each backed by its own ``opensimplex.OpenSimplex``
generator.
"""

from __future__ import annotations

from typing import Tuple

from opensimplex import OpenSimplex

from .metrics import NOISE_RESOLUTION, NOISE_SCALE

CHANNELS = 4


class NoiseSource:
    """Four-channel 2-D noise in ``[0, 1]``.

    Parameters
    ----------
    seed : int
        Base seed; channel *i* uses ``seed + i``.
    scale : float
        Multiplier from world units to noise space.
    """

    def __init__(self, seed: int, scale: float = NOISE_SCALE * NOISE_RESOLUTION) -> None:
        self.seed = seed
        self.scale = scale
        self._channels = [OpenSimplex(seed=seed + i) for i in range(CHANNELS)]

    def sample_channel(self, x: float, z: float, channel: int) -> float:
        """Sample one channel at world position ``(x, z)``."""
        value = self._channels[channel].noise2(x * self.scale, z * self.scale)
        return normalize(value)

    def sample(self, x: float, z: float) -> Tuple[float, float, float, float]:
        """Sample all four channels at world position ``(x, z)``."""
        sx = x * self.scale
        sz = z * self.scale
        a, b, c, d = (normalize(gen.noise2(sx, sz)) for gen in self._channels)
        return a, b, c, d

    def __repr__(self) -> str:
        return f"NoiseSource(seed={self.seed}, scale={self.scale})"


def normalize(
    value: float,
    *,
    src_min: float = -1.0,
    src_max: float = 1.0,
    dst_min: float = 0.0,
    dst_max: float = 1.0,
) -> float:
    """Linearly remap *value* from ``[src_min, src_max]`` to ``[dst_min, dst_max]``.

    Values outside the source range are clamped.
    """
    if src_max == src_min:
        return (dst_min + dst_max) / 2.0
    t = (value - src_min) / (src_max - src_min)
    t = max(0.0, min(1.0, t))
    return dst_min + t * (dst_max - dst_min)
