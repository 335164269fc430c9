"""Core simulation modules."""

from chladniscope.core.behavior import Behavior, behave
from chladniscope.core.context import SimulationContext
from chladniscope.core.field import chladni, field_magnitude
from chladniscope.core.particle import Particle
from chladniscope.core.simulation import Simulation, Tallies

__all__ = [
    "Behavior",
    "behave",
    "SimulationContext",
    "chladni",
    "field_magnitude",
    "Particle",
    "Simulation",
    "Tallies",
]
