"""
CLI entry point for offline Chladni renders.

Usage:
    chladniscope [options]

Runs the simulation on a deterministic frame clock, applies a scripted
timeline of control events and writes an MP4 with the synthesized
soundtrack.

Events:
    --event 4:m=3,n=5        switch to modes (3, 5) at t=4s
    --event 10:scatter       scatter at t=10s
    --event 10:scatter:hold  scatter and let particles drift afterwards
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List

from chladniscope.config import PROFILES, ChladniConfig, load_config
from chladniscope.io.encoder import ensure_ffmpeg
from chladniscope.io.recorder import DEFAULT_FILENAME
from chladniscope.session import ChladniSession, ControlEvent


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def parse_event(
    text: str,
    mode_min: int = ChladniConfig.mode_min,
    mode_max: int = ChladniConfig.mode_max,
) -> ControlEvent:
    """
    Parse ``T:m=M,n=N``, ``T:scatter`` or ``T:scatter:hold``.

    Raises:
        ValueError: On any malformed event string or a mode outside
            [mode_min, mode_max].
    """
    parts = text.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid event {text!r}: expected TIME:ACTION")

    try:
        at = float(parts[0])
    except ValueError:
        raise ValueError(f"Invalid event time in {text!r}") from None
    if at < 0:
        raise ValueError(f"Event time must be >= 0 in {text!r}")

    action = parts[1].strip().lower()
    if action == "scatter":
        if len(parts) == 2:
            return ControlEvent(time=at, action="scatter")
        if len(parts) == 3 and parts[2].strip().lower() == "hold":
            return ControlEvent(time=at, action="scatter", hold=True)
        raise ValueError(f"Invalid scatter event {text!r}")

    if len(parts) != 2:
        raise ValueError(f"Invalid event {text!r}")

    modes = {}
    for item in action.split(","):
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or key not in ("m", "n") or key in modes:
            raise ValueError(f"Invalid mode event {text!r}: expected m=M,n=N")
        try:
            modes[key] = int(value)
        except ValueError:
            raise ValueError(f"Invalid mode value in {text!r}") from None
    if set(modes) != {"m", "n"}:
        raise ValueError(f"Mode event {text!r} needs both m and n")
    for key in ("m", "n"):
        if not mode_min <= modes[key] <= mode_max:
            raise ValueError(
                f"{key} must be in [{mode_min}, {mode_max}] in {text!r}, got {modes[key]}"
            )
    return ControlEvent(time=at, action="modes", m=modes["m"], n=modes["n"])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chladniscope",
        description="Self-organizing Chladni particle video with generative soundtrack",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path(DEFAULT_FILENAME),
        help=f"Output MP4 path (default: {DEFAULT_FILENAME})",
    )

    # Resolution & Profile
    parser.add_argument(
        "-p", "--profile", type=str, default="medium",
        choices=["low", "medium", "high"],
        help="Target profile (low: 540x675 30fps, medium: 1080x1350 60fps, high: 2160x2700 60fps)",
    )
    parser.add_argument("--width", type=int, default=None, help="Canvas width (overrides profile)")
    parser.add_argument("--height", type=int, default=None, help="Canvas height (overrides profile)")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (overrides profile)")
    parser.add_argument("--particles", type=int, default=None, help="Particle count (overrides profile)")
    parser.add_argument("--config", type=Path, default=None, help="JSON file of config overrides")

    # Timeline
    parser.add_argument(
        "-d", "--duration", type=float, default=20.0,
        help="Length of the render in seconds (default: 20)",
    )
    parser.add_argument("-m", type=int, default=1, help="Starting m mode (1-15, default: 1)")
    parser.add_argument("-n", type=int, default=1, help="Starting n mode (1-15, default: 1)")
    parser.add_argument(
        "-e", "--event", action="append", default=[], metavar="EVENT",
        help="Control event, e.g. 4:m=3,n=5 or 10:scatter (repeatable)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")

    # Post-processing
    parser.add_argument("--glow", action="store_true", help="Enable glow")
    parser.add_argument(
        "--guide", type=float, default=None,
        help="Overlay strength of the target nodal lines [0.0-1.0]",
    )

    # Quality
    parser.add_argument(
        "-q", "--quality", type=str, default=None,
        choices=["high", "medium", "fast"],
        help="Encoding quality (defaults to profile quality)",
    )
    return parser


def build_config(args) -> ChladniConfig:
    p_cfg = PROFILES[args.profile]
    overrides = {
        "width": args.width or p_cfg["width"],
        "height": args.height or p_cfg["height"],
        "fps": args.fps or p_cfg["fps"],
        "num_particles": args.particles if args.particles is not None else p_cfg["num_particles"],
        "particle_size": p_cfg["particle_size"],
    }
    config = ChladniConfig.from_dict(overrides)
    if args.config is not None:
        config = load_config(args.config, base=config)
    if args.glow:
        config.glow_enabled = True
    if args.guide is not None:
        config.guide_strength = min(max(args.guide, 0.0), 1.0)
    return config


def main(argv: List[str] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        events = [parse_event(e, config.mode_min, config.mode_max) for e in args.event]
        ensure_ffmpeg()
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    quality = args.quality or PROFILES[args.profile]["quality"]
    total_frames = max(int(args.duration * config.fps), 1)

    session = ChladniSession(config, seed=args.seed, quality=quality)
    try:
        session.set_modes(args.m, args.n)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Rendering {total_frames} frames at {config.width}x{config.height} @ {config.fps}fps")
    print(f"  Particles: {config.num_particles}")
    print(f"  Modes: m={args.m}, n={args.n}  Events: {len(events)}")

    t0 = time.time()
    try:
        session.start_recording(args.output)
        last = None
        for result in session.run(total_frames, events, progress_callback=_progress_bar):
            last = result
        output = session.stop_recording()
    except (ValueError, RuntimeError) as e:
        # No partial file at the output path
        session.recorder.abort()
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

    elapsed = time.time() - t0
    file_size_mb = output.stat().st_size / 1024 / 1024

    print(f"\nDone! {file_size_mb:.1f} MB")
    if last is not None:
        print(f"  Final tallies: {last.tallies.settled} settled, {last.tallies.moving} moving")
    print(f"  Render+encode took {elapsed:.1f}s ({total_frames / max(elapsed, 0.01):.1f} fps)")
    print(f"  Output: {output}")


if __name__ == "__main__":
    main()
