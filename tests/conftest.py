"""Shared pytest configuration and fixtures."""

import logging
import logging.handlers

import pytest

from particle import Bounds, ParticleSystem


@pytest.fixture
def bounds() -> Bounds:
    """A 200x200 world centered on the origin."""
    return Bounds(-100.0, 100.0, -100.0, 100.0)


@pytest.fixture
def sim_params() -> dict:
    """Simulation parameters matching the default config, with a fixed seed."""
    return {
        "seed": 1234,
        "particle_count": 500,
        "speed_bound": 5.0,
        "gravity": [0.0, -0.1],
        "spawn_mode": "single",
        "burst_max": 40,
        "color_reactive": False,
        "max_color_distance": 200.0,
        "default_color": [0.0, 0.0, 0.0, 1.0],
        "cull_enabled": True,
    }


@pytest.fixture
def empty_system(sim_params, bounds) -> ParticleSystem:
    """A particle system with no particles."""
    return ParticleSystem({**sim_params, "particle_count": 0}, bounds)


@pytest.fixture
def restore_root_logger():
    """Remove the handlers installed by setup_logging once the test is done."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
