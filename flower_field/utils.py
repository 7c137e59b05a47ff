"""
Shared math helpers for the flower field.

Interpolation, clamping, input sanitizing and a small deterministic
coherent noise used for per-petal jitter.
"""

import math
import numbers

# ============================================================================
# Interpolation
# ============================================================================


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation between a and b by factor t."""
    return a + (b - a) * t


def clamp(value: float, min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    """Smooth interpolation using cubic Hermite curve."""
    t = clamp((x - edge0) / (edge1 - edge0))
    return t * t * (3.0 - 2.0 * t)


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (no banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp_finite(val, lo: float, hi: float, default: float) -> float:
    """Clamp a numeric value to [lo, hi], replacing non-finite/non-numeric with default."""
    if not isinstance(val, numbers.Real):
        return default
    val = float(val)
    if not math.isfinite(val):
        return default
    return max(lo, min(hi, val))


# ============================================================================
# Noise
# ============================================================================


def lattice_noise(ix: int, iy: int, seed: int = 0) -> float:
    """Hash an integer lattice point to a pseudo-random value in (-1, 1]."""
    n = ix * 73 + iy * 179 + seed * 397
    n = (n << 13) ^ n
    return 1.0 - ((n * (n * n * 15731 + 789221) + 1376312589) & 0x7FFFFFFF) / 1073741824.0


def coherent_noise(x: float, y: float, seed: int = 0) -> float:
    """
    Smooth 2D value noise in [-1, 1].

    Lattice values are blended with a smoothstep fade, so nearby inputs
    give nearby outputs. Same inputs always give the same output.
    """
    x0 = math.floor(x)
    y0 = math.floor(y)
    fx = x - x0
    fy = y - y0
    ix = int(x0)
    iy = int(y0)

    u = smoothstep(0.0, 1.0, fx)
    v = smoothstep(0.0, 1.0, fy)

    n00 = lattice_noise(ix, iy, seed)
    n10 = lattice_noise(ix + 1, iy, seed)
    n01 = lattice_noise(ix, iy + 1, seed)
    n11 = lattice_noise(ix + 1, iy + 1, seed)

    top = lerp(n00, n10, u)
    bottom = lerp(n01, n11, u)
    return clamp(lerp(top, bottom, v), -1.0, 1.0)
