"""
Seeded 2D gradient (simplex) noise with optional fractal layering.

Used for the low-frequency fields evaluated per cell index: height groups,
cell groupings and the second sloped-side candidate.
"""

from enum import Enum
from typing import Optional

from .noise_hash import fast_floor, grad_coord_2d, to_01

F2 = 1.0 / 2.0
G2 = 1.0 / 4.0


class FractalType(str, Enum):
    """Octave combination modes."""

    FBM = "fbm"
    BILLOW = "billow"
    RIGID_MULTI = "rigid_multi"


class SimplexNoise:
    """
    Gradient noise sampler.

    Without a fractal type a single octave is returned. With one, octaves are
    accumulated with lacunarity-scaled frequency and gain-scaled amplitude.
    Sampling never mutates the sampler, so one instance can be shared across
    threads.
    """

    def __init__(
        self,
        seed: int,
        frequency: float,
        fractal_type: Optional[FractalType] = None,
        octaves: int = 3,
        lacunarity: float = 2.0,
        gain: float = 0.5,
    ):
        """
        Args:
            seed: Noise seed
            frequency: Input coordinate scale
            fractal_type: Octave combination mode, ``None`` for a single octave
            octaves: Number of octaves in fractal modes
            lacunarity: Frequency multiplier per octave
            gain: Amplitude multiplier per octave
        """
        if fractal_type is not None:
            fractal_type = FractalType(fractal_type)
            if octaves < 1:
                raise ValueError(f"octaves must be >= 1, got {octaves}")

        self.seed = seed
        self.frequency = frequency
        self.fractal_type = fractal_type
        self.octaves = octaves
        self.lacunarity = lacunarity
        self.gain = gain
        self.fractal_bounding = self._calculate_fractal_bounding()

    @property
    def fractal(self) -> bool:
        return self.fractal_type is not None

    def _calculate_fractal_bounding(self) -> float:
        amp = self.gain
        amp_fractal = 1.0
        for _ in range(1, self.octaves):
            amp_fractal += amp
            amp *= self.gain
        return 1.0 / amp_fractal

    def get_simplex(self, x: float, y: float, frequency: Optional[float] = None) -> float:
        """
        Sample the noise at (x, y).

        Args:
            x, y: Sample coordinates
            frequency: Overrides the sampler frequency for this call only

        Returns:
            Noise value, nominally in [0, 1] for single-octave sampling
        """
        frequency = self.frequency if frequency is None else frequency
        x *= frequency
        y *= frequency

        if self.fractal_type is None:
            return self.single_simplex(self.seed, x, y)
        if self.fractal_type is FractalType.FBM:
            return self._fractal_fbm(x, y)
        if self.fractal_type is FractalType.BILLOW:
            return self._fractal_billow(x, y)
        return self._fractal_rigid_multi(x, y)

    @staticmethod
    def single_simplex(seed: int, x: float, y: float) -> float:
        """One octave of simplex noise at pre-scaled coordinates."""
        t = (x + y) * F2
        i = fast_floor(x + t)
        j = fast_floor(y + t)

        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        if x0 > y0:
            i1, j1 = 1, 0
        else:
            i1, j1 = 0, 1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1 + F2
        y2 = y0 - 1 + F2

        n0 = n1 = n2 = 0.0

        t = 0.5 - x0 * x0 - y0 * y0
        if t >= 0:
            t *= t
            n0 = t * t * grad_coord_2d(seed, i, j, x0, y0)

        t = 0.5 - x1 * x1 - y1 * y1
        if t >= 0:
            t *= t
            n1 = t * t * grad_coord_2d(seed, i + i1, j + j1, x1, y1)

        t = 0.5 - x2 * x2 - y2 * y2
        if t >= 0:
            t *= t
            n2 = t * t * grad_coord_2d(seed, i + 1, j + 1, x2, y2)

        return to_01(50 * (n0 + n1 + n2))

    def _fractal_fbm(self, x: float, y: float) -> float:
        seed = self.seed
        total = self.single_simplex(seed, x, y)
        amp = 1.0

        for _ in range(1, self.octaves):
            x *= self.lacunarity
            y *= self.lacunarity
            amp *= self.gain
            seed += 1
            total += self.single_simplex(seed, x, y) * amp

        return total * self.fractal_bounding

    def _fractal_billow(self, x: float, y: float) -> float:
        seed = self.seed
        total = abs(self.single_simplex(seed, x, y)) * 2 - 1
        amp = 1.0

        for _ in range(1, self.octaves):
            x *= self.lacunarity
            y *= self.lacunarity
            amp *= self.gain
            seed += 1
            total += (abs(self.single_simplex(seed, x, y)) * 2 - 1) * amp

        return total * self.fractal_bounding

    def _fractal_rigid_multi(self, x: float, y: float) -> float:
        # Not scaled by the fractal bound.
        seed = self.seed
        total = 1 - abs(self.single_simplex(seed, x, y))
        amp = 1.0

        for _ in range(1, self.octaves):
            x *= self.lacunarity
            y *= self.lacunarity
            amp *= self.gain
            seed += 1
            total -= (1 - abs(self.single_simplex(seed, x, y))) * amp

        return total
