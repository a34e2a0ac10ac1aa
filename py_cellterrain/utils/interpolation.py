"""
Scalar interpolation helpers shared by the noise samplers and height synthesis.
"""


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a to b."""
    return a + t * (b - a)


def unlerp(a: float, b: float, value: float) -> float:
    """Inverse of lerp: where value sits between a and b (not clamped)."""
    return (value - a) / (b - a)


def smoothstep(a: float, b: float, value: float) -> float:
    """Hermite smoothstep of value between edges a and b, clamped to [0, 1]."""
    t = clamp(unlerp(a, b, value), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def interp_quintic(t: float) -> float:
    """Quintic fade curve used by gradient perturbation."""
    return t * t * t * (t * (t * 6 - 15) + 10)
