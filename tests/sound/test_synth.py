"""Tests for the block sound engine."""

import numpy as np
import pytest

from chladniscope.config import ChladniConfig
from chladniscope.sound.mapper import AudioParams, Voice
from chladniscope.sound.synth import (
    Glide,
    SchroederReverb,
    SoundEngine,
    lowpass_coefficients,
    to_int16,
)

SR = 8000


def _params(noise=0.05, cutoff=800.0, freq=110.0, amp=0.4):
    voices = tuple(Voice(freq=freq * k, amp=amp / (1 if i == 0 else 1.5))
                   for i, k in enumerate((1, 1.5, 2, 2.5)))
    return AudioParams(noise_amp=noise, filter_cutoff=cutoff, voices=voices)


@pytest.fixture
def engine():
    return SoundEngine(ChladniConfig(sample_rate=SR), seed=0)


class TestGlide:
    def test_reaches_target_after_glide_time(self):
        g = Glide(0.0, seconds=0.1, sample_rate=1000)  # 100 samples
        g.set(1.0)
        ramp = g.ramp(150)
        assert ramp[49] == pytest.approx(0.5)
        assert ramp[99] == pytest.approx(1.0)
        assert np.all(ramp[100:] == 1.0)
        assert g.value == 1.0

    def test_monotonic(self):
        g = Glide(0.0, seconds=0.05, sample_rate=1000)
        g.set(2.0)
        ramp = np.concatenate([g.ramp(20), g.ramp(20), g.ramp(20)])
        assert np.all(np.diff(ramp) >= 0)

    def test_zero_glide_ramps_over_one_block(self):
        g = Glide(0.0, seconds=0.0, sample_rate=1000)
        g.set(1.0)
        ramp = g.ramp(4)
        np.testing.assert_allclose(ramp, [0.25, 0.5, 0.75, 1.0])

    def test_retarget_starts_from_current_value(self):
        g = Glide(0.0, seconds=0.1, sample_rate=1000)
        g.set(1.0)
        g.ramp(50)
        g.set(0.0)
        ramp = g.ramp(1)
        assert ramp[0] < 0.5

    def test_empty_block(self):
        g = Glide(1.0, seconds=0.1, sample_rate=1000)
        assert len(g.ramp(0)) == 0


class TestLowpass:
    @pytest.mark.parametrize("cutoff", [100.0, 450.0, 800.0])
    def test_unity_dc_gain(self, cutoff):
        b, a = lowpass_coefficients(cutoff, 1.5, SR)
        assert b.sum() / a.sum() == pytest.approx(1.0)

    def test_nyquist_blocked(self):
        b, a = lowpass_coefficients(500.0, 1.5, SR)
        # z = -1
        gain = (b[0] - b[1] + b[2]) / (a[0] - a[1] + a[2])
        assert abs(gain) < 1e-9


class TestReverb:
    def test_tail_outlasts_impulse(self):
        reverb = SchroederReverb(decay_seconds=2.0, wet=1.0, sample_rate=SR)
        impulse = np.zeros(SR // 4)
        impulse[0] = 1.0
        reverb.process(impulse)
        tail = reverb.process(np.zeros(SR // 4))
        assert np.abs(tail).max() > 0

    def test_dry_passthrough(self):
        reverb = SchroederReverb(decay_seconds=2.0, wet=0.0, sample_rate=SR)
        x = np.linspace(-1, 1, 100)
        np.testing.assert_allclose(reverb.process(x), x)


class TestSoundEngine:
    def test_silent_until_driven(self, engine):
        out = engine.render(500)
        assert out.dtype == np.float32
        assert len(out) == 500
        assert np.all(out == 0.0)

    def test_driven_output_bounded(self, engine):
        engine.apply(_params())
        blocks = [engine.render(267) for _ in range(20)]
        out = np.concatenate(blocks)
        assert np.all(np.isfinite(out))
        assert out.min() >= -1.0 and out.max() <= 1.0
        assert np.abs(out).max() > 0.01

    def test_blocks_join_smoothly(self, engine):
        engine.apply(_params(noise=0.0))
        engine.render(SR // 2)  # let the glides settle
        a = engine.render(200)
        b = engine.render(200)
        step_inside = np.abs(np.diff(a)).max()
        step_across = abs(float(b[0]) - float(a[-1]))
        assert step_across <= step_inside * 1.5 + 1e-6

    def test_fade_out(self, engine):
        engine.apply(_params())
        engine.render(SR)
        engine.apply(_params(noise=0.0, amp=0.0))
        for _ in range(30):
            engine.render(SR // 2)  # let the reverb tail die away
        tail = engine.render(200)
        assert np.abs(tail).max() < 0.05

    def test_reset_clears_state(self, engine):
        engine.apply(_params())
        engine.render(1000)
        engine.reset()
        assert np.all(engine.render(300) == 0.0)

    def test_zero_samples(self, engine):
        assert len(engine.render(0)) == 0


def test_to_int16():
    pcm = to_int16([0.0, 1.0, -1.0, 2.0])
    assert pcm.dtype == np.int16
    assert list(pcm) == [0, 32767, -32767, 32767]
