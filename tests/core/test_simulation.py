"""Tests for the population driver."""

import numpy as np

from chladniscope.config import ChladniConfig
from chladniscope.core.behavior import Behavior
from chladniscope.core.simulation import Simulation, Tallies


def test_population_fixed(small_config):
    sim = Simulation(small_config, seed=1)
    assert sim.total == small_config.num_particles
    for i in range(5):
        sim.tick(i / 30)
    assert sim.total == small_config.num_particles


def test_tallies_sum_to_total(small_config):
    sim = Simulation(small_config, seed=2)
    sim.context.set_modes(3, 5)
    for i in range(20):
        tallies = sim.tick(i / 30)
        assert tallies.settled + tallies.moving == sim.total
        assert tallies.settled == sum(p.settled for p in sim.particles)


def test_tallies_total_property():
    assert Tallies(settled=3, moving=4).total == 7


def test_base_pattern_settles_everything(small_config):
    # (1, 1) has an identically zero field
    sim = Simulation(small_config, seed=3)
    tallies = sim.tick(0.0)
    assert tallies.settled == sim.total
    assert sim.behavior_counts == {Behavior.SETTLED: sim.total}


def test_scatter_scenario(small_config):
    sim = Simulation(small_config, seed=4)
    sim.tick(0.0)
    assert sim.tallies.settled == sim.total

    sim.context.set_modes(4, 2)
    sim.context.trigger_scatter(1.0)
    assert (sim.context.m, sim.context.n) == (1, 1)

    # Unsettled within one tick
    tallies = sim.tick(1.0)
    assert tallies.settled == 0
    assert sim.behavior_counts == {Behavior.SCATTERING: sim.total}

    # Held for the whole window
    sim.tick(1.49)
    assert sim.behavior_counts == {Behavior.SCATTERING: sim.total}

    # Then back to the field rules, no forced impulse
    tallies = sim.tick(1.5)
    assert Behavior.SCATTERING not in sim.behavior_counts
    assert tallies.settled == sim.total


def test_seed_reproducible(small_config):
    a = Simulation(small_config, seed=7)
    b = Simulation(small_config, seed=7)
    a.context.set_modes(2, 3)
    b.context.set_modes(2, 3)
    for i in range(5):
        a.tick(i / 30)
        b.tick(i / 30)
    np.testing.assert_array_equal(a.positions(), b.positions())


def test_positions_within_canvas(small_config):
    sim = Simulation(small_config, seed=5)
    sim.context.trigger_scatter(0.0)
    for i in range(10):
        sim.tick(i * 0.01)
    pos = sim.positions()
    assert pos.shape == (small_config.num_particles, 2)
    assert pos[:, 0].min() >= 0 and pos[:, 0].max() <= small_config.width
    assert pos[:, 1].min() >= 0 and pos[:, 1].max() <= small_config.height


def test_particles_move_toward_nodes():
    # Full-size canvas so the nodal bands are several pixels wide
    config = ChladniConfig(num_particles=40)
    sim = Simulation(config, seed=6)
    sim.context.set_modes(1, 2)
    first = sim.tick(0.0).settled
    for i in range(1, 300):
        last = sim.tick(i / 60).settled
    assert last > first


def test_empty_population(small_config):
    small_config.num_particles = 0
    sim = Simulation(small_config, seed=0)
    tallies = sim.tick(0.0)
    assert tallies == Tallies(settled=0, moving=0)
    assert sim.positions().shape == (0, 2)
