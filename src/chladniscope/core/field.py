"""
Closed-form Chladni plate field.

The nodal lines of a square plate vibrating in modes (m, n) are the
zero set of

    cos(n*pi*x/L) * cos(m*pi*y/L) - cos(m*pi*x/L) * cos(n*pi*y/L)

Swapping m and n negates the value, so magnitudes are always compared
through abs().
"""

import math

import numpy as np


def remap(value, in_lo: float, in_hi: float, out_lo: float, out_hi: float):
    """Linear, unclamped re-range of ``value`` from [in_lo, in_hi] to [out_lo, out_hi]."""
    return out_lo + (out_hi - out_lo) * ((value - in_lo) / (in_hi - in_lo))


def chladni(x: float, y: float, m: int, n: int, scale: float) -> float:
    """Signed field value at field coordinates (x, y)."""
    term1 = math.cos(n * math.pi * x / scale) * math.cos(m * math.pi * y / scale)
    term2 = math.cos(m * math.pi * x / scale) * math.cos(n * math.pi * y / scale)
    return term1 - term2


def field_magnitude(px: float, py: float, m: int, n: int, width: float, height: float) -> float:
    """
    Absolute field value at canvas point (px, py).

    Both canvas axes map onto the same [-L, L] interval with L = width / 3.
    """
    scale = width / 3
    x = remap(px, 0, width, -scale, scale)
    y = remap(py, 0, height, -scale, scale)
    return abs(chladni(x, y, m, n, scale))


def field_grid(m: int, n: int, width: int, height: int) -> np.ndarray:
    """
    Vectorized field magnitude over every pixel centre of a canvas.

    Returns:
        (height, width) float64 array of |field|.
    """
    scale = width / 3
    x = remap(np.arange(width, dtype=np.float64), 0, width, -scale, scale)
    y = remap(np.arange(height, dtype=np.float64), 0, height, -scale, scale)
    xg, yg = np.meshgrid(x, y)

    term1 = np.cos(n * np.pi * xg / scale) * np.cos(m * np.pi * yg / scale)
    term2 = np.cos(m * np.pi * xg / scale) * np.cos(n * np.pi * yg / scale)
    return np.abs(term1 - term2)
