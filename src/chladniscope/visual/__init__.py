"""Rendering of the particle field."""

from chladniscope.visual.renderer import ParticleRenderer

__all__ = ["ParticleRenderer"]
