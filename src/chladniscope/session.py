"""
Session orchestrator.

Ties the simulation, sonification, sound engine, renderer and recorder
into one tick. Every front end (offline CLI, live window) drives a
session; nothing else touches the simulation context directly.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

import numpy as np

from chladniscope.config import ChladniConfig
from chladniscope.core.simulation import Simulation, Tallies
from chladniscope.io.recorder import DEFAULT_FILENAME, Recorder
from chladniscope.sound.mapper import AudioParams, SonificationMapper
from chladniscope.sound.synth import SoundEngine
from chladniscope.visual.renderer import ParticleRenderer


@dataclass
class FrameResult:
    """Everything one tick produced."""
    index: int
    time: float
    frame: np.ndarray
    audio: np.ndarray
    tallies: Tallies
    params: AudioParams


@dataclass(frozen=True)
class ControlEvent:
    """A scripted control input applied at ``time`` seconds."""
    time: float
    action: str  # "modes" or "scatter"
    m: int = 1
    n: int = 1
    hold: bool = False


class ChladniSession:
    """One running simulation with its soundscape."""

    def __init__(
        self,
        config: Optional[ChladniConfig] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
        quality: str = "medium",
    ):
        self.cfg = config or ChladniConfig()
        self.clock = clock or time.monotonic
        self.simulation = Simulation(self.cfg, seed=seed)
        self.mapper = SonificationMapper(self.simulation.total)
        self.engine = SoundEngine(self.cfg, seed=seed)
        self.renderer = ParticleRenderer(self.cfg)
        self.recorder = Recorder(self.cfg, quality=quality)
        self.frame_index = 0
        self._sample_debt = 0.0

    @property
    def context(self):
        return self.simulation.context

    def set_modes(self, m: int, n: int):
        self.context.set_modes(m, n)

    def scatter(self, hold: bool = False, now: Optional[float] = None):
        self.context.trigger_scatter(self.clock() if now is None else now, hold=hold)

    def apply_event(self, event: ControlEvent):
        if event.action == "modes":
            self.set_modes(event.m, event.n)
        elif event.action == "scatter":
            self.scatter(hold=event.hold, now=event.time)
        else:
            raise ValueError(f"Unknown control action: {event.action!r}")

    def _next_block_size(self) -> int:
        # Carry the fractional remainder so audio tracks video exactly
        self._sample_debt += self.cfg.samples_per_frame
        n = int(self._sample_debt)
        self._sample_debt -= n
        return n

    def step(self, now: Optional[float] = None, samples: Optional[int] = None) -> FrameResult:
        """
        Run one full tick: simulate, sonify, synthesize, draw, record.

        Args:
            now: Tick time in seconds; defaults to the session clock.
            samples: Audio block length; defaults to one frame's worth.
        """
        now = self.clock() if now is None else now
        ctx = self.context

        tallies = self.simulation.tick(now)
        params = self.mapper.map(tallies, ctx.m, ctx.n)
        self.engine.apply(params)
        audio = self.engine.render(self._next_block_size() if samples is None else samples)
        frame = self.renderer.render(self.simulation.positions(), ctx.m, ctx.n)

        if self.recorder.is_recording:
            self.recorder.write(frame, audio)

        result = FrameResult(
            index=self.frame_index,
            time=now,
            frame=frame,
            audio=audio,
            tallies=tallies,
            params=params,
        )
        self.frame_index += 1
        return result

    def run(
        self,
        n_frames: int,
        events: Iterable[ControlEvent] = (),
        progress_callback: Callable[[int, int], None] = None,
    ) -> Iterator[FrameResult]:
        """
        Drive ``n_frames`` ticks on a deterministic frame clock.

        Events fire at the first frame whose time reaches them.
        """
        pending = sorted(events, key=lambda e: e.time)
        fps = self.cfg.fps
        for i in range(n_frames):
            now = i / fps
            while pending and pending[0].time <= now:
                self.apply_event(pending.pop(0))
            yield self.step(now)
            if progress_callback:
                progress_callback(i + 1, n_frames)

    def start_recording(self, output_path=DEFAULT_FILENAME):
        self.recorder.start(output_path)

    def stop_recording(self) -> Path:
        return self.recorder.stop()
