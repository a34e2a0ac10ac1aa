"""
Lattice hashing shared by the cellular and gradient noise samplers.

All hashes emulate signed 32-bit integer overflow so results are stable
across platforms and match the reference values recorded in the tests.
"""

import math
from typing import Tuple

import numpy as np

X_PRIME = 1619
Y_PRIME = 31337
CUBE_MULTIPLIER = 60493

# 256 unit vectors used to jitter cell centroids, spread by the golden angle
_cell_angles = 2.0 * np.pi * ((np.arange(256) * 0.6180339887498949) % 1.0)
CELL_2D: Tuple[Tuple[float, float], ...] = tuple(
    (float(x), float(y))
    for x, y in np.stack([np.cos(_cell_angles), np.sin(_cell_angles)], axis=1).tolist()
)

GRAD_2D: Tuple[Tuple[float, float], ...] = (
    (-1.0, -1.0), (1.0, -1.0), (-1.0, 1.0), (1.0, 1.0),
    (0.0, -1.0), (-1.0, 0.0), (0.0, 1.0), (1.0, 0.0),
)


def int32(n: int) -> int:
    """Wrap an arbitrary Python int to signed 32-bit."""
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def _mix(seed: int, x: int, y: int) -> int:
    return int32(seed ^ (X_PRIME * x) ^ (Y_PRIME * y))


def val_coord_2d(seed: int, x: int, y: int) -> float:
    """Hash a lattice coordinate to a value in [-1, 1)."""
    n = _mix(seed, x, y)
    return int32(n * n * n * CUBE_MULTIPLIER) / 2147483648.0


def hash_2d(seed: int, x: int, y: int) -> int:
    """Hash a lattice coordinate to a signed 32-bit integer."""
    n = _mix(seed, x, y)
    h = int32(n * n * n * CUBE_MULTIPLIER)
    return int32((h >> 13) ^ h)


def grad_coord_2d(seed: int, x: int, y: int, xd: float, yd: float) -> float:
    """Dot product of a hashed lattice gradient with an offset."""
    gx, gy = GRAD_2D[hash_2d(seed, x, y) & 7]
    return xd * gx + yd * gy


def cell_vector(seed: int, x: int, y: int) -> Tuple[float, float]:
    """Hashed unit jitter vector for a cell index."""
    return CELL_2D[hash_2d(seed, x, y) & 255]


def to_01(value: float) -> float:
    """Map [-1, 1] to [0, 1]."""
    return value * 0.5 + 0.5


def fast_round(f: float) -> int:
    """Round half away from zero."""
    return int(f + 0.5) if f >= 0 else int(f - 0.5)


def fast_floor(f: float) -> int:
    return math.floor(f)
