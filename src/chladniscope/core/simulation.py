"""
Population driver: runs the behavior policy for every particle once per
tick and tallies how many sit on nodal lines.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from chladniscope.config import ChladniConfig
from chladniscope.core.behavior import Behavior, behave
from chladniscope.core.context import SimulationContext
from chladniscope.core.particle import Particle, spawn_particles


@dataclass(frozen=True)
class Tallies:
    """Per-tick aggregate counts."""
    settled: int
    moving: int

    @property
    def total(self) -> int:
        return self.settled + self.moving


class Simulation:
    """
    Owns the fixed particle population.

    Particles are created once at random positions and only ever
    replaced by their successor state.
    """

    def __init__(
        self,
        config: Optional[ChladniConfig] = None,
        context: Optional[SimulationContext] = None,
        seed: Optional[int] = None,
    ):
        self.cfg = config or ChladniConfig()
        self.context = context or SimulationContext(
            scatter_duration=self.cfg.scatter_duration,
            mode_min=self.cfg.mode_min,
            mode_max=self.cfg.mode_max,
        )
        self.rng = np.random.default_rng(seed)
        self.particles: List[Particle] = spawn_particles(
            self.cfg.num_particles, self.cfg.width, self.cfg.height, self.rng
        )
        self.tallies = Tallies(settled=0, moving=len(self.particles))
        self.behavior_counts: Dict[Behavior, int] = {}
        self.ticks = 0

    @property
    def total(self) -> int:
        return len(self.particles)

    def tick(self, now: float) -> Tallies:
        """Advance every particle one step and recount."""
        counts: Counter = Counter()
        settled = 0
        particles = self.particles
        for i, particle in enumerate(particles):
            nxt, tag = behave(particle, self.context, now, self.rng, self.cfg)
            particles[i] = nxt
            counts[tag] += 1
            if nxt.settled:
                settled += 1

        self.ticks += 1
        self.behavior_counts = dict(counts)
        self.tallies = Tallies(settled=settled, moving=len(particles) - settled)
        return self.tallies

    def positions(self) -> np.ndarray:
        """(N, 2) float array of particle positions."""
        if not self.particles:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([(p.x, p.y) for p in self.particles], dtype=np.float64)
