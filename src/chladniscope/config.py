"""
Configuration for the Chladni particle simulation and its soundscape.

One dataclass carries the canvas, the particle physics constants,
the audio engine settings and the post-processing switches. Profiles
mirror the render presets of the other CLIs.
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union


@dataclass
class ChladniConfig:
    """Universal configuration for simulation, sound and rendering."""
    width: int = 1080
    height: int = 1350
    fps: int = 60

    # Population
    num_particles: int = 9000
    particle_size: int = 5
    background_color: str = "#3f332d"
    particle_color: str = "#97dbd9"
    trail_alpha: int = 160  # 0xA0 over the background each frame

    # Particle physics
    max_speed: float = 2.5
    max_force: float = 0.4
    tolerance: float = 0.03
    check_distance: float = 2.0
    scatter_impulse: float = 0.8
    escape_impulse: float = 0.01
    scatter_damping: float = 0.9
    settle_damping: float = 0.8
    descend_damping: float = 0.98

    # Control
    scatter_duration: float = 0.5  # seconds
    mode_min: int = 1
    mode_max: int = 15

    # Audio engine
    sample_rate: int = 44100
    noise_glide: float = 0.2
    voice_glide: float = 0.15
    cutoff_glide: float = 0.0
    filter_q: float = 1.5
    reverb_seconds: float = 6.0
    reverb_wet: float = 0.6

    # Post-processing
    glow_enabled: bool = False
    glow_intensity: float = 0.3
    glow_radius: int = 6
    guide_strength: float = 0.0  # faint overlay of the target nodal lines

    @property
    def field_scale(self) -> float:
        """Scale constant L of the standing-wave field."""
        return self.width / 3

    @property
    def samples_per_frame(self) -> float:
        return self.sample_rate / self.fps

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: "ChladniConfig" = None) -> "ChladniConfig":
        """Build a config from a dict of overrides, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        values = {f.name: getattr(base or cls(), f.name) for f in fields(cls)}
        values.update(data)
        return cls(**values)


def load_config(path: Union[str, Path], base: ChladniConfig = None) -> ChladniConfig:
    """Read JSON overrides from ``path`` on top of ``base``."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return ChladniConfig.from_dict(data, base=base)


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """'#97dbd9' -> (151, 219, 217)."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #rrggbb colour, got {color!r}")
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


# Map profile to defaults
PROFILES = {
    "low": {"width": 540, "height": 675, "fps": 30, "num_particles": 2250, "particle_size": 3, "quality": "fast"},
    "medium": {"width": 1080, "height": 1350, "fps": 60, "num_particles": 9000, "particle_size": 5, "quality": "medium"},
    "high": {"width": 2160, "height": 2700, "fps": 60, "num_particles": 36000, "particle_size": 9, "quality": "high"},
}
