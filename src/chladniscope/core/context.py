"""
Process-wide simulation parameters shared by every particle in a tick.

Control input writes here between ticks; the behavior policy and the
sonification mapper only read.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SimulationContext:
    """Mode numbers, scatter window and the pattern-forming flag."""
    m: int = 1
    n: int = 1
    pattern_should_form: bool = True
    scatter_start: Optional[float] = None
    scatter_duration: float = 0.5
    mode_min: int = 1
    mode_max: int = 15

    def set_modes(self, m: int, n: int):
        """Select a new target pattern. Re-enables pattern forming."""
        for name, value in (("m", m), ("n", n)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not self.mode_min <= value <= self.mode_max:
                raise ValueError(
                    f"{name} must be in [{self.mode_min}, {self.mode_max}], got {value}"
                )
        self.m = m
        self.n = n
        self.pattern_should_form = True

    def clamp_mode(self, value: int) -> int:
        return max(self.mode_min, min(self.mode_max, int(value)))

    def trigger_scatter(self, now: float, hold: bool = False):
        """
        Reset to the (1, 1) base pattern and open the scatter window at ``now``.

        With ``hold`` the pattern-forming flag is cleared as well, so
        particles drift freely once the window closes until new modes
        are chosen.
        """
        self.m = 1
        self.n = 1
        self.scatter_start = now
        if hold:
            self.pattern_should_form = False

    def is_scattering(self, now: float) -> bool:
        if self.scatter_start is None:
            return False
        return now < self.scatter_start + self.scatter_duration
