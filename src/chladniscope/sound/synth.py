"""
Block-based sound engine for the simulation soundscape.

Signal chain:
    white noise -> resonant low-pass  --+
    4 sine voices ----------------------+--> reverb (dry/wet) -> clip

Every control value glides toward its target, and all filter and
oscillator state is carried across blocks so consecutive blocks join
without clicks.
"""

import math
from typing import List, Optional, Sequence

import numpy as np
from scipy.signal import lfilter

from chladniscope.config import ChladniConfig
from chladniscope.sound.mapper import AudioParams

# Freeverb comb/allpass tunings at 44.1 kHz
COMB_DELAYS = (1557, 1617, 1491, 1422)
ALLPASS_DELAYS = (225, 556)
ALLPASS_GAIN = 0.5


class Glide:
    """
    Linear ramp toward a target over a fixed time.

    Setting a new target restarts the ramp from the current value. A
    glide time of zero still ramps across one block.
    """

    def __init__(self, value: float, seconds: float, sample_rate: int):
        self.value = float(value)
        self.target = float(value)
        self.glide_samples = max(int(round(seconds * sample_rate)), 0)
        self._remaining = 0

    def set(self, target: float):
        self.target = float(target)
        self._remaining = self.glide_samples

    def ramp(self, n: int) -> np.ndarray:
        if n <= 0:
            return np.zeros(0, dtype=np.float64)

        if self._remaining <= 0:
            out = np.linspace(self.value, self.target, n + 1)[1:]
        else:
            k = min(n, self._remaining)
            step = (self.target - self.value) / self._remaining
            out = np.full(n, self.target, dtype=np.float64)
            out[:k] = self.value + step * np.arange(1, k + 1)
            self._remaining -= k

        self.value = float(out[-1])
        return out


def lowpass_coefficients(cutoff: float, q: float, sample_rate: int):
    """RBJ cookbook biquad low-pass, normalised so a[0] == 1."""
    cutoff = min(max(cutoff, 10.0), sample_rate * 0.45)
    w0 = 2 * math.pi * cutoff / sample_rate
    alpha = math.sin(w0) / (2 * q)
    cos_w0 = math.cos(w0)

    a0 = 1 + alpha
    b = np.array([(1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2]) / a0
    a = np.array([1.0, -2 * cos_w0 / a0, (1 - alpha) / a0])
    return b, a


class SchroederReverb:
    """Parallel feedback combs into series all-passes, state kept across blocks."""

    def __init__(self, decay_seconds: float, wet: float, sample_rate: int):
        self.wet = wet
        ratio = sample_rate / 44100
        self._combs = []
        for delay in COMB_DELAYS:
            d = max(int(delay * ratio), 1)
            g = 10 ** (-3 * d / (decay_seconds * sample_rate))
            a = np.zeros(d + 1)
            a[0] = 1.0
            a[-1] = -g
            self._combs.append([np.array([1.0]), a, np.zeros(d)])

        self._allpasses = []
        for delay in ALLPASS_DELAYS:
            d = max(int(delay * ratio), 1)
            b = np.zeros(d + 1)
            b[0] = -ALLPASS_GAIN
            b[-1] = 1.0
            a = np.zeros(d + 1)
            a[0] = 1.0
            a[-1] = -ALLPASS_GAIN
            self._allpasses.append([b, a, np.zeros(d)])

    def reset(self):
        for stage in self._combs + self._allpasses:
            stage[2] = np.zeros_like(stage[2])

    def process(self, x: np.ndarray) -> np.ndarray:
        wet = np.zeros_like(x)
        for stage in self._combs:
            b, a, zi = stage
            y, stage[2] = lfilter(b, a, x, zi=zi)
            wet += y
        wet /= len(self._combs)

        for stage in self._allpasses:
            b, a, zi = stage
            wet, stage[2] = lfilter(b, a, wet, zi=zi)

        return x * (1.0 - self.wet) + wet * self.wet


class SoundEngine:
    """
    Renders mono float32 audio blocks from AudioParams.

    ``apply`` sets glide targets, ``render`` produces the next samples.
    """

    def __init__(
        self,
        config: Optional[ChladniConfig] = None,
        num_voices: int = 4,
        seed: Optional[int] = None,
    ):
        self.cfg = config or ChladniConfig()
        self.sample_rate = self.cfg.sample_rate
        self.num_voices = num_voices
        self.rng = np.random.default_rng(seed)
        self.reverb = SchroederReverb(self.cfg.reverb_seconds, self.cfg.reverb_wet, self.sample_rate)
        self.reset()

    def reset(self):
        sr = self.sample_rate
        cfg = self.cfg
        self.noise_amp = Glide(0.0, cfg.noise_glide, sr)
        self.cutoff = Glide(100.0, cfg.cutoff_glide, sr)
        self.voice_freqs: List[Glide] = [Glide(0.0, cfg.voice_glide, sr) for _ in range(self.num_voices)]
        self.voice_amps: List[Glide] = [Glide(0.0, cfg.voice_glide, sr) for _ in range(self.num_voices)]
        self._phases = np.zeros(self.num_voices, dtype=np.float64)
        self._filter_zi = np.zeros(2, dtype=np.float64)
        self._first_block = True
        self.reverb.reset()

    def apply(self, params: AudioParams):
        """Request a slide to the given parameters."""
        self.noise_amp.set(params.noise_amp)
        self.cutoff.set(params.filter_cutoff)
        for i, voice in enumerate(params.voices[: self.num_voices]):
            if self._first_block:
                # Oscillators start at their pitch rather than sweeping up from 0 Hz
                self.voice_freqs[i].value = voice.freq
            self.voice_freqs[i].set(voice.freq)
            self.voice_amps[i].set(voice.amp)
        self._first_block = False

    def _render_voices(self, n: int) -> np.ndarray:
        out = np.zeros(n, dtype=np.float64)
        for i in range(self.num_voices):
            freqs = self.voice_freqs[i].ramp(n)
            amps = self.voice_amps[i].ramp(n)
            phase = self._phases[i] + 2 * np.pi * np.cumsum(freqs) / self.sample_rate
            out += np.sin(phase) * amps
            self._phases[i] = phase[-1] % (2 * np.pi)
        return out

    def _render_noise(self, n: int) -> np.ndarray:
        amps = self.noise_amp.ramp(n)
        cutoffs = self.cutoff.ramp(n)
        noise = self.rng.uniform(-1.0, 1.0, n) * amps
        b, a = lowpass_coefficients(float(cutoffs.mean()), self.cfg.filter_q, self.sample_rate)
        filtered, self._filter_zi = lfilter(b, a, noise, zi=self._filter_zi)
        return filtered

    def render(self, n: int) -> np.ndarray:
        """Next ``n`` samples as float32 in [-1, 1]."""
        if n <= 0:
            return np.zeros(0, dtype=np.float32)
        dry = self._render_noise(n) + self._render_voices(n)
        out = self.reverb.process(dry)
        return np.clip(out, -1.0, 1.0).astype(np.float32)


def to_int16(samples: Sequence[float]) -> np.ndarray:
    """Float samples in [-1, 1] to 16-bit PCM."""
    arr = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    return (arr * 32767).astype(np.int16)
