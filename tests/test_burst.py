"""Tests for burst generation."""
import math

import numpy as np
import pytest

from fireworks_engine.config import SimConfig
from fireworks_engine.simulation import generate_burst


def make_burst(config=None, radius=30.0, seed=0, size=3):
    config = config or SimConfig()
    rng = np.random.RandomState(seed)
    return generate_burst((100.0, 200.0), "#ff0000", size, radius, config, rng)


def test_burst_has_fixed_count():
    config = SimConfig(burst_count=30)
    assert len(make_burst(config, seed=1)) == 30
    assert len(make_burst(config, seed=2)) == 30


def test_burst_particles_start_opaque_and_inherit_color():
    for particle in make_burst():
        assert particle.opacity == 1.0
        assert particle.color == "#ff0000"


def test_burst_samples_stay_in_ranges():
    config = SimConfig()
    for particle in make_burst(config):
        assert 0.0 <= particle.angle < 2 * math.pi
        assert config.speed_min <= particle.speed < config.speed_max
        assert config.size_min <= particle.size < config.size_max
        assert config.gravity_min <= particle.gravity < config.gravity_max


def test_burst_fills_explosion_radius():
    for particle in make_burst(radius=30.0):
        offset = math.hypot(particle.x - 100.0, particle.y - 200.0)
        assert offset <= 30.0 + 1e-9


def test_zero_radius_bursts_from_single_point():
    for particle in make_burst(radius=0.0):
        assert particle.x == pytest.approx(100.0)
        assert particle.y == pytest.approx(200.0)


def test_velocity_follows_angle_and_speed():
    for particle in make_burst():
        assert particle.vx == pytest.approx(math.cos(particle.angle) * particle.speed)
        assert particle.vy == pytest.approx(math.sin(particle.angle) * particle.speed)


def test_directions_are_randomized_per_particle():
    angles = {round(p.angle, 6) for p in make_burst()}
    assert len(angles) > 1


def test_two_calls_return_independent_bursts():
    config = SimConfig()
    rng = np.random.RandomState(3)
    first = generate_burst((0.0, 0.0), "#ffffff", 3, 10.0, config, rng)
    second = generate_burst((0.0, 0.0), "#ffffff", 3, 10.0, config, rng)
    assert first is not second
    assert [p.angle for p in first] != [p.angle for p in second]


def test_particle_size_scales_with_firework_size():
    small = make_burst(size=3, seed=5)
    large = make_burst(size=6, seed=5)
    for a, b in zip(small, large):
        assert b.size == pytest.approx(a.size * 2)
