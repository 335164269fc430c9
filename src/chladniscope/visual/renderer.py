"""
Particle renderer.

Keeps a persistent float canvas that fades toward the background every
frame, leaving short trails behind moving particles, and stamps one
solid square per particle on top.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from chladniscope.config import ChladniConfig, hex_to_rgb
from chladniscope.core.field import field_grid
from chladniscope.visual.colorgrade import add_glow, nodal_guide


class ParticleRenderer:
    """Draws particle positions onto an (H, W, 3) RGB canvas."""

    def __init__(self, config: Optional[ChladniConfig] = None):
        self.cfg = config or ChladniConfig()
        self.background = np.array(hex_to_rgb(self.cfg.background_color), dtype=np.float32)
        self.color = np.array(hex_to_rgb(self.cfg.particle_color), dtype=np.float32)
        self.fade = self.cfg.trail_alpha / 255.0
        self._offsets = np.arange(self.cfg.particle_size)
        self._guide_key: Optional[Tuple[int, int]] = None
        self._guide: Optional[np.ndarray] = None
        self.reset()

    def reset(self):
        h, w = self.cfg.height, self.cfg.width
        self.canvas = np.empty((h, w, 3), dtype=np.float32)
        self.canvas[:] = self.background

    def _stamp(self, xs: np.ndarray, ys: np.ndarray, color: np.ndarray, size: int):
        """Fill a size x size square centred on each (x, y)."""
        h, w = self.canvas.shape[:2]
        offsets = self._offsets if size == self.cfg.particle_size else np.arange(size)
        x0 = np.floor(xs - size / 2 + 0.5).astype(np.int64)
        y0 = np.floor(ys - size / 2 + 0.5).astype(np.int64)

        cols = x0[:, None] + offsets[None, :]  # (N, s)
        rows = y0[:, None] + offsets[None, :]
        cols = np.broadcast_to(cols[:, None, :], (len(xs), size, size))
        rows = np.broadcast_to(rows[:, :, None], (len(ys), size, size))

        valid = (cols >= 0) & (cols < w) & (rows >= 0) & (rows < h)
        self.canvas[rows[valid], cols[valid]] = color

    def fade_canvas(self):
        """Blend the whole canvas toward the background (trail decay)."""
        self.canvas += (self.background - self.canvas) * self.fade

    def draw_primitive(self, x: float, y: float, size: int, color: Sequence[int]):
        """Draw a single particle square."""
        self._stamp(
            np.array([x], dtype=np.float64),
            np.array([y], dtype=np.float64),
            np.asarray(color, dtype=np.float32),
            int(size),
        )

    def _guide_mask(self, m: int, n: int) -> np.ndarray:
        if self._guide_key != (m, n):
            magnitude = field_grid(m, n, self.cfg.width, self.cfg.height)
            self._guide = nodal_guide(magnitude, self.cfg.tolerance)
            self._guide_key = (m, n)
        return self._guide

    def render(self, positions: np.ndarray, m: int = 1, n: int = 1) -> np.ndarray:
        """
        Draw one frame.

        Args:
            positions: (N, 2) array of particle (x, y) positions.
            m, n: Current modes, used only for the optional nodal guide.

        Returns:
            (H, W, 3) uint8 RGB numpy array.
        """
        cfg = self.cfg
        self.fade_canvas()
        if len(positions):
            self._stamp(positions[:, 0], positions[:, 1], self.color, cfg.particle_size)

        frame = self.canvas
        if cfg.guide_strength > 0:
            mask = self._guide_mask(m, n)[:, :, None] * cfg.guide_strength
            frame = frame + (self.color - frame) * mask
        frame = np.clip(frame, 0, 255).astype(np.uint8)

        if cfg.glow_enabled:
            frame = add_glow(
                frame,
                self.background,
                self.color,
                intensity=cfg.glow_intensity,
                radius=cfg.glow_radius,
            )
        return frame
