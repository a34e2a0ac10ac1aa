"""
Alea PRNG used to derive independent noise seeds from one terrain seed.

Based on Johannes Baagøe's Alea algorithm. Only seed derivation goes
through it: every noise sample itself is a pure hash of its coordinates.
"""

from typing import Iterable, Union

SeedPart = Union[int, str]


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Alea's string mash, stateful across calls for one generator."""

    def __init__(self):
        self.n = 0xEFC8249D

    def __call__(self, data) -> float:
        for char in str(data):
            self.n += ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * 0x100000000  # 2^32
        return _uint32(self.n) * 2.3283064365386963e-10  # 2^-32


class AleaPRNG:
    """Alea generator seeded from one or more seed parts."""

    def __init__(self, seed: Union[SeedPart, Iterable[SeedPart]]):
        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            parts = list(seed)
        else:
            parts = [seed]

        mash = _Mash()
        state = [mash(" "), mash(" "), mash(" ")]

        for part in parts:
            for i in range(3):
                state[i] -= mash(part)
                if state[i] < 0:
                    state[i] += 1

        self.s0, self.s1, self.s2 = state
        self.c = 1

    def random(self) -> float:
        """Next value in [0, 1)."""
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def next_int32(self) -> int:
        """Next signed 32-bit integer."""
        value = _uint32(self.random() * 0x100000000)
        return value - 0x100000000 if value & 0x80000000 else value


def derive_seed(seed: int, label: str) -> int:
    """
    Derive a stable sub-seed for one noise layer.

    Args:
        seed: Terrain seed
        label: Name of the noise layer (e.g. "height", "group")

    Returns:
        Signed 32-bit seed, identical for identical inputs
    """
    return AleaPRNG([seed, label]).next_int32()
