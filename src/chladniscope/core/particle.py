"""
Particle state and semi-implicit Euler motion on a toroidal canvas.
"""

import math
from dataclasses import dataclass

import numpy as np


@dataclass
class Particle:
    """A single grain of sand on the plate."""
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    ax: float = 0.0
    ay: float = 0.0
    settled: bool = False

    def copy(self) -> "Particle":
        return Particle(self.x, self.y, self.vx, self.vy, self.ax, self.ay, self.settled)

    def apply_force(self, fx: float, fy: float):
        self.ax += fx
        self.ay += fy

    def damp(self, factor: float):
        self.vx *= factor
        self.vy *= factor

    def update(self, width: float, height: float, max_speed: float = 2.5):
        """
        Integrate one step: v += a, |v| <= max_speed, p += v, a = 0.

        Positions leaving the canvas reappear on the opposite edge.
        """
        self.vx += self.ax
        self.vy += self.ay

        speed = math.hypot(self.vx, self.vy)
        if speed > max_speed:
            self.vx = self.vx / speed * max_speed
            self.vy = self.vy / speed * max_speed

        self.x += self.vx
        self.y += self.vy
        self.ax = 0.0
        self.ay = 0.0

        # Wrap around canvas
        if self.x < 0:
            self.x = width
        if self.x > width:
            self.x = 0.0
        if self.y < 0:
            self.y = height
        if self.y > height:
            self.y = 0.0


def random_unit(rng: np.random.Generator) -> tuple[float, float]:
    """Unit vector with a uniformly random heading."""
    angle = rng.uniform(0, 2 * math.pi)
    return math.cos(angle), math.sin(angle)


def spawn_particles(count: int, width: float, height: float, rng: np.random.Generator) -> list[Particle]:
    """Uniformly scattered particles at rest."""
    xs = rng.uniform(0, width, count)
    ys = rng.uniform(0, height, count)
    return [Particle(float(x), float(y)) for x, y in zip(xs, ys)]
