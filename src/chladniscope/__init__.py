"""Self-organizing Chladni particle patterns with a generative soundscape."""

from chladniscope.config import ChladniConfig
from chladniscope.core.simulation import Simulation
from chladniscope.session import ChladniSession
from chladniscope.sound.mapper import SonificationMapper
from chladniscope.sound.synth import SoundEngine
from chladniscope.visual.renderer import ParticleRenderer

__version__ = "0.1.0"
__all__ = [
    "ChladniConfig",
    "Simulation",
    "ChladniSession",
    "SonificationMapper",
    "SoundEngine",
    "ParticleRenderer",
]
