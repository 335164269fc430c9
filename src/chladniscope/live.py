"""
Interactive pygame window for the Chladni simulation.

Keys:
    LEFT / RIGHT   m - / +
    DOWN / UP      n - / +
    S              scatter (shift+S: scatter and drift until modes change)
    R              start / stop recording
    ESC            quit
"""

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import numpy as np
import pygame

from chladniscope.config import PROFILES, ChladniConfig, load_config
from chladniscope.session import ChladniSession
from chladniscope.sound.synth import to_int16

HUD_COLOR = (230, 230, 220)
REC_COLOR = (220, 60, 60)


class LiveApp:
    """Runs a session in real time with keyboard control and live audio."""

    def __init__(
        self,
        config: ChladniConfig,
        scale: float = 1.0,
        mute: bool = False,
        seed: Optional[int] = None,
        output_dir: Path = Path("."),
    ):
        self.cfg = config
        self.scale = scale
        self.mute = mute
        self.output_dir = Path(output_dir)
        self.session = ChladniSession(config, seed=seed)
        self.channel = None
        self.mixer_channels = 1
        self.font = None
        self.running = False
        self._last_tick: Optional[float] = None

    def _init_display(self):
        if not self.mute:
            pygame.mixer.pre_init(frequency=self.cfg.sample_rate, size=-16, channels=1, buffer=1024)
        pygame.init()
        size = (int(self.cfg.width * self.scale), int(self.cfg.height * self.scale))
        self.screen = pygame.display.set_mode(size)
        pygame.display.set_caption("Chladniscope")
        self.font = pygame.font.SysFont("monospace", 14)
        if not self.mute:
            init = pygame.mixer.get_init()
            if init is None:
                print("Audio unavailable, running muted", file=sys.stderr)
                self.mute = True
            else:
                self.mixer_channels = init[2]
                self.channel = pygame.mixer.Channel(0)

    def _queue_audio(self, block: np.ndarray):
        if self.mute or self.channel is None or not len(block):
            return
        pcm = to_int16(block)
        if self.mixer_channels > 1:
            pcm = np.ascontiguousarray(np.repeat(pcm[:, None], self.mixer_channels, axis=1))
        sound = pygame.sndarray.make_sound(pcm)
        if not self.channel.get_busy():
            self.channel.play(sound)
        elif self.channel.get_queue() is None:
            self.channel.queue(sound)

    def toggle_recording(self):
        session = self.session
        if session.recorder.is_recording:
            path = session.stop_recording()
            print(f"Saved recording: {path}")
        else:
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = self.output_dir / f"chladni_ethereal_{stamp}.mp4"
            session.start_recording(path)
            print(f"Recording to {path}")

    def change_mode(self, dm: int = 0, dn: int = 0):
        ctx = self.session.context
        self.session.set_modes(ctx.clamp_mode(ctx.m + dm), ctx.clamp_mode(ctx.n + dn))

    def handle_key(self, event):
        key = event.key
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_LEFT:
            self.change_mode(dm=-1)
        elif key == pygame.K_RIGHT:
            self.change_mode(dm=1)
        elif key == pygame.K_DOWN:
            self.change_mode(dn=-1)
        elif key == pygame.K_UP:
            self.change_mode(dn=1)
        elif key == pygame.K_s:
            self.session.scatter(hold=bool(event.mod & pygame.KMOD_SHIFT))
        elif key == pygame.K_r:
            try:
                self.toggle_recording()
            except RuntimeError as e:
                # Keep the window alive; the recording is lost either way
                print(f"Error: {e}", file=sys.stderr)

    def _block_size(self, now: float) -> Optional[int]:
        """Real-time audio length since the last tick, or None for one nominal frame."""
        last, self._last_tick = self._last_tick, now
        if last is None or self.session.recorder.is_recording:
            return None
        # Bound the block so a stall does not queue seconds of audio
        elapsed = min(max(now - last, 0.0), 4.0 / self.cfg.fps)
        return int(elapsed * self.cfg.sample_rate)

    def _draw(self, frame: np.ndarray, tallies):
        surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
        if self.scale != 1.0:
            surface = pygame.transform.smoothscale(surface, self.screen.get_size())
        self.screen.blit(surface, (0, 0))

        ctx = self.session.context
        hud = f"m={ctx.m:2d} n={ctx.n:2d}  settled {tallies.settled:5d}  moving {tallies.moving:5d}"
        self.screen.blit(self.font.render(hud, True, HUD_COLOR), (8, 8))
        if self.session.recorder.is_recording:
            self.screen.blit(self.font.render("REC", True, REC_COLOR), (8, 26))
        pygame.display.flip()

    def run(self):
        self._init_display()
        clock = pygame.time.Clock()
        self.running = True
        try:
            while self.running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                    elif event.type == pygame.KEYDOWN:
                        self.handle_key(event)

                now = self.session.clock()
                result = self.session.step(now, samples=self._block_size(now))
                self._queue_audio(result.audio)
                self._draw(result.frame, result.tallies)
                clock.tick(self.cfg.fps)
        finally:
            if self.session.recorder.is_recording:
                path = self.session.stop_recording()
                print(f"Saved recording: {path}")
            pygame.quit()


def main(argv: List[str] = None):
    parser = argparse.ArgumentParser(
        prog="chladniscope-live",
        description="Interactive Chladni particle simulation with live soundscape",
    )
    parser.add_argument(
        "-p", "--profile", type=str, default="low",
        choices=["low", "medium", "high"],
        help="Canvas profile (default: low)",
    )
    parser.add_argument("--particles", type=int, default=None, help="Particle count (overrides profile)")
    parser.add_argument("--scale", type=float, default=1.0, help="Window scale factor (default: 1.0)")
    parser.add_argument("--mute", action="store_true", help="Disable live audio")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--config", type=Path, default=None, help="JSON file of config overrides")
    parser.add_argument(
        "--output-dir", type=Path, default=Path("."),
        help="Directory for recordings (default: current directory)",
    )
    args = parser.parse_args(argv)

    p_cfg = PROFILES[args.profile]
    try:
        config = ChladniConfig.from_dict({
            "width": p_cfg["width"],
            "height": p_cfg["height"],
            "fps": p_cfg["fps"],
            "num_particles": args.particles if args.particles is not None else p_cfg["num_particles"],
            "particle_size": p_cfg["particle_size"],
        })
        if args.config is not None:
            config = load_config(args.config, base=config)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.scale <= 0:
        print("Error: --scale must be positive", file=sys.stderr)
        sys.exit(1)

    app = LiveApp(config, scale=args.scale, mute=args.mute, seed=args.seed, output_dir=args.output_dir)
    t0 = time.time()
    try:
        app.run()
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Ran {app.session.frame_index} frames in {time.time() - t0:.1f}s")


if __name__ == "__main__":
    main()
