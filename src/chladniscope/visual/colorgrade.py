"""
Post-processing for rendered particle frames.

A particle-coloured halo around the nodal lines and a soft mask of the
target pattern.
"""

from typing import Sequence

import numpy as np
from PIL import Image, ImageFilter


def particle_coverage(
    frame: np.ndarray,
    background: Sequence[float],
    color: Sequence[float],
) -> np.ndarray:
    """
    How far each pixel has moved from the background toward the particle colour.

    Returns:
        (H, W) float32 in [0, 1]; 0 on bare background, 1 on a fresh particle.
    """
    bg = np.asarray(background, dtype=np.float32)
    span = np.asarray(color, dtype=np.float32) - bg
    denom = float(np.dot(span, span))
    if denom == 0.0:
        return np.zeros(frame.shape[:2], dtype=np.float32)
    coverage = (frame.astype(np.float32) - bg) @ span / denom
    return np.clip(coverage, 0.0, 1.0)


def add_glow(
    frame: np.ndarray,
    background: Sequence[float],
    color: Sequence[float],
    intensity: float = 0.3,
    radius: int = 6,
) -> np.ndarray:
    """
    Spread a halo of the particle colour around settled sand.

    Particle coverage is blurred and used to pull the surrounding
    background toward ``color``. Bare background far from any particle
    and pixels already at the particle colour are unchanged.

    Args:
        frame: (H, W, 3) uint8 RGB array.
        background: Canvas background RGB.
        color: Particle RGB.
        intensity: Halo opacity (0-1).
        radius: Blur radius in pixels.

    Returns:
        (H, W, 3) uint8 RGB array with glow applied.
    """
    if intensity <= 0:
        return frame

    coverage = particle_coverage(frame, background, color)
    mask = Image.fromarray((coverage * 255).astype(np.uint8))
    halo = np.asarray(mask.filter(ImageFilter.GaussianBlur(radius=radius)), dtype=np.float32)
    halo = np.clip(halo / 255.0 * intensity, 0.0, 1.0)[:, :, None]

    frame_f = frame.astype(np.float32)
    target = np.asarray(color, dtype=np.float32)
    out = frame_f + (target - frame_f) * halo
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def nodal_guide(magnitude: np.ndarray, tolerance: float = 0.03) -> np.ndarray:
    """
    Soft mask of the nodal lines of a field magnitude grid.

    Returns:
        (H, W) float32 in [0, 1], 1.0 on the lines fading to 0 at 4x tolerance.
    """
    mask = 1.0 - np.clip(magnitude / (tolerance * 4.0), 0.0, 1.0)
    return mask.astype(np.float32)
