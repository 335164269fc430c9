"""
Per-particle behavior policy.

Each tick a particle is in exactly one of:
- scattering: the global scatter window is open, random kicks, field ignored
- drifting: pattern forming is switched off, coast on residual velocity
- settled: sitting on a nodal line, heavy damping
- descending: steering toward lower field magnitude

The state is re-derived every tick from position, velocity and the
shared context; nothing but the particle itself carries over.
"""

from enum import Enum
from typing import Optional, Tuple

import numpy as np

from chladniscope.config import ChladniConfig
from chladniscope.core.context import SimulationContext
from chladniscope.core.field import field_magnitude
from chladniscope.core.particle import Particle, random_unit


class Behavior(str, Enum):
    SCATTERING = "scattering"
    DRIFTING = "drifting"
    SETTLED = "settled"
    DESCENDING = "descending"


def steering_vote(value: float, right: float, left: float, down: float, up: float) -> Tuple[int, int]:
    """
    Four-way neighbor vote, one unit per neighbor.

    Each axis neighbor pulls toward itself when it is lower than the
    current magnitude and pushes away when it is higher. Ties abstain.
    """
    sx = 0
    sy = 0
    if right < value:
        sx += 1
    elif right > value:
        sx -= 1
    if left < value:
        sx -= 1
    elif left > value:
        sx += 1
    if down < value:
        sy += 1
    elif down > value:
        sy -= 1
    if up < value:
        sy -= 1
    elif up > value:
        sy += 1
    return sx, sy


def behave(
    particle: Particle,
    context: SimulationContext,
    now: float,
    rng: np.random.Generator,
    config: Optional[ChladniConfig] = None,
) -> Tuple[Particle, Behavior]:
    """
    Advance one particle by one tick.

    Args:
        particle: Current state; left untouched.
        context: Shared modes, scatter window and forming flag.
        now: Current time in seconds on the same clock as the scatter stamp.
        rng: Source for the random kicks.
        config: Physics constants and canvas size.

    Returns:
        (next particle state, behavior applied this tick)
    """
    cfg = config or ChladniConfig()
    p = particle.copy()

    if context.is_scattering(now):
        ux, uy = random_unit(rng)
        p.apply_force(ux * cfg.scatter_impulse, uy * cfg.scatter_impulse)
        p.damp(cfg.scatter_damping)
        p.update(cfg.width, cfg.height, cfg.max_speed)
        p.settled = False
        return p, Behavior.SCATTERING

    if not context.pattern_should_form:
        p.update(cfg.width, cfg.height, cfg.max_speed)
        return p, Behavior.DRIFTING

    m, n = context.m, context.n
    w, h = cfg.width, cfg.height
    value = field_magnitude(p.x, p.y, m, n, w, h)

    if value < cfg.tolerance:
        p.damp(cfg.settle_damping)
        p.ax = 0.0
        p.ay = 0.0
        p.settled = True
        # Residual velocity still moves the particle: keeps the lines alive
        p.update(w, h, cfg.max_speed)
        return p, Behavior.SETTLED

    d = cfg.check_distance
    sx, sy = steering_vote(
        value,
        right=field_magnitude(p.x + d, p.y, m, n, w, h),
        left=field_magnitude(p.x - d, p.y, m, n, w, h),
        down=field_magnitude(p.x, p.y + d, m, n, w, h),
        up=field_magnitude(p.x, p.y - d, m, n, w, h),
    )

    if sx or sy:
        norm = (sx * sx + sy * sy) ** 0.5
        p.apply_force(sx / norm * cfg.max_force, sy / norm * cfg.max_force)
    else:
        # Plateau or saddle: nudge off it
        ux, uy = random_unit(rng)
        p.apply_force(ux * cfg.escape_impulse, uy * cfg.escape_impulse)

    p.damp(cfg.descend_damping)
    p.settled = False
    p.update(w, h, cfg.max_speed)
    return p, Behavior.DESCENDING
