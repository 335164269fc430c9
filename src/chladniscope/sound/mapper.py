"""
Sonification mapping.

Turns the per-tick tallies and the current mode pair into control
values for the sound engine:

- chaos noise: louder and brighter the more particles are moving
- settle chord: four sine voices whose pitch follows the pattern
  complexity (m + n) and whose volume rises as particles settle

The only state is a frame counter driving the detune wobble.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from chladniscope.core.field import remap
from chladniscope.core.simulation import Tallies

# Root, fifth, octave, tenth
DEFAULT_INTERVALS = (1.0, 1.5, 2.0, 2.5)

NOISE_AMP_RANGE = (0.0, 0.05)
CUTOFF_RANGE = (100.0, 800.0)
SETTLE_AMP_RANGE = (0.0, 0.4)
COMPLEXITY_RANGE = (2.0, 40.0)
FREQ_RANGE = (50.0, 600.0)

DETUNE_RATE = 0.01
DETUNE_DEPTH = 1.5
HARMONIC_ATTENUATION = 1.5


@dataclass(frozen=True)
class Voice:
    freq: float
    amp: float


@dataclass(frozen=True)
class AudioParams:
    """Target values for one tick of the sound engine."""
    noise_amp: float
    filter_cutoff: float
    voices: Tuple[Voice, ...]


def base_frequency(m: int, n: int) -> float:
    """Low modes give low pitch; (15, 15) lands at 600 Hz."""
    complexity = (m * 1.2) + (n * 1.2)
    return remap(complexity, *COMPLEXITY_RANGE, *FREQ_RANGE)


def detune(frame: int, voice_index: int) -> float:
    """Slow bounded wobble for every voice but the root."""
    if voice_index == 0:
        return 0.0
    return math.sin(frame * DETUNE_RATE + voice_index) * DETUNE_DEPTH


class SonificationMapper:
    """Maps aggregate simulation state to continuous audio parameters."""

    def __init__(self, total: int, intervals: Sequence[float] = DEFAULT_INTERVALS):
        self.total = total
        self.intervals = tuple(intervals)
        self.frame_count = 0

    def _fraction_map(self, count: int, lo: float, hi: float) -> float:
        if self.total <= 0:
            return lo
        return remap(count, 0, self.total, lo, hi)

    def map(self, tallies: Tallies, m: int, n: int) -> AudioParams:
        """Compute this tick's parameters and advance the frame counter."""
        self.frame_count += 1

        # Noise represents chaos/movement
        noise_amp = self._fraction_map(tallies.moving, *NOISE_AMP_RANGE)
        cutoff = self._fraction_map(tallies.moving, *CUTOFF_RANGE)

        # Chord volume rises as particles settle
        base = base_frequency(m, n)
        overall = self._fraction_map(tallies.settled, *SETTLE_AMP_RANGE)
        lo, hi = SETTLE_AMP_RANGE

        voices = []
        for i, interval in enumerate(self.intervals):
            freq = base * interval + detune(self.frame_count, i)
            amp = overall / (1.0 if i == 0 else HARMONIC_ATTENUATION)
            voices.append(Voice(freq=freq, amp=min(max(amp, lo), hi)))

        return AudioParams(noise_amp=noise_amp, filter_cutoff=cutoff, voices=tuple(voices))
