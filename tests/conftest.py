"""Pytest configuration and shared fixtures."""

import shutil

import numpy as np
import pytest

from chladniscope.config import ChladniConfig
from chladniscope.core.context import SimulationContext


@pytest.fixture
def small_config() -> ChladniConfig:
    """A canvas and population small enough for fast ticks."""
    return ChladniConfig(
        width=120,
        height=150,
        fps=30,
        num_particles=60,
        particle_size=3,
        sample_rate=8000,
    )


@pytest.fixture
def context() -> SimulationContext:
    return SimulationContext()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def require_ffmpeg():
    if shutil.which("ffmpeg") is None:
        pytest.skip("ffmpeg not installed")
