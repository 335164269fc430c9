"""Sonification of the particle population."""

from chladniscope.sound.mapper import AudioParams, SonificationMapper, Voice
from chladniscope.sound.synth import SoundEngine

__all__ = ["AudioParams", "SonificationMapper", "Voice", "SoundEngine"]
