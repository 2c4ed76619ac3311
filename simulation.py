# simulation.py
"""
Handles the per-frame orchestration of the particle system.

This module defines the Simulation class, which is responsible for
advancing the particle system by one frame: spawning new particles while
the trigger is held, applying gravity and integrating every particle, and
culling the ones that have left the world bounds.
"""
import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from particle import Bounds, ParticleSystem
from constants import (
    DEFAULT_GRAVITY, DEFAULT_SPAWN_MODE, DEFAULT_BURST_MAX, SPAWN_MODES
)

# --- Data Contracts ---
#
# class FrameInput:
#   - bounds: Bounds of the visible world this frame.
#   - trigger_active: bool, True while the spawn button is held.
#   - trigger_position: (x, y) world coordinates to spawn at.
#   - reference_point: (x, y) or None, drives the heat colors.
#
# class SpawnPolicy:
#   - __init__(self, mode: str, burst_max: int, rng: np.random.Generator)
#     - Raises ValueError for an unknown mode or burst_max < 2.
#   - count(self, trigger_active: bool) -> int
#     - "single": 1 while active, "burst": uniform in [1, burst_max) while
#       active, 0 when inactive.
#
# class Simulation:
#   - __init__(self, particles: ParticleSystem, params: Dict[str, Any]):
#     - Inputs:
#       - particles: An initialized ParticleSystem object.
#       - params: Dictionary of simulation parameters from config.json.
#         - "gravity": [x, y]
#         - "spawn_mode": "single" | "burst"
#         - "burst_max": int
#         - "color_reactive": bool
#         - "cull_enabled": bool
#     - Outputs: None
#     - Side Effects: Stores references to particles and parameters.
#
#   - step(self, frame: FrameInput) -> None:
#     - Side Effects: spawn -> step -> cull on the internal ParticleSystem,
#       strictly in that order.
#     - Invariants: Particle count only grows through spawning.


@dataclass
class FrameInput:
    """Everything the core consumes from its collaborators for one frame."""
    bounds: Bounds
    trigger_active: bool = False
    trigger_position: Tuple[float, float] = (0.0, 0.0)
    reference_point: Optional[Tuple[float, float]] = None


class SpawnPolicy:
    """
    Decides how many particles a frame spawns.
    """
    def __init__(self, mode: str, burst_max: int, rng: np.random.Generator):
        if mode not in SPAWN_MODES:
            msg = (
                f"Configuration error: unknown spawn_mode '{mode}'. "
                f"Expected one of {', '.join(SPAWN_MODES)}."
            )
            logging.critical(msg)
            raise ValueError(msg)
        if mode == "burst" and burst_max < 2:
            msg = f"Configuration error: burst_max must be at least 2, got {burst_max}."
            logging.critical(msg)
            raise ValueError(msg)

        self.mode = mode
        self.burst_max = burst_max
        self.rng = rng

    def count(self, trigger_active: bool) -> int:
        if not trigger_active:
            return 0
        if self.mode == "burst":
            return int(self.rng.integers(1, self.burst_max))
        return 1


class Simulation:
    """
    Runs the spawn -> step -> cull pipeline once per frame.
    """
    def __init__(self, particles: ParticleSystem, params: Dict[str, Any]):
        """
        Initializes the simulation environment.

        Args:
            particles (ParticleSystem): The particle system to simulate.
            params (Dict[str, Any]): Simulation parameters from config.
        """
        self.particles = particles
        self.gravity = np.array(params.get('gravity', DEFAULT_GRAVITY), dtype=np.float64)
        self.color_reactive = bool(params.get('color_reactive', False))
        self.cull_enabled = bool(params.get('cull_enabled', True))

        # The policy shares the particle system's generator so a single seed
        # reproduces the whole run.
        self.spawn_policy = SpawnPolicy(
            params.get('spawn_mode', DEFAULT_SPAWN_MODE),
            int(params.get('burst_max', DEFAULT_BURST_MAX)),
            particles.rng
        )

        if self.gravity.shape != (2,):
            msg = f"Configuration error: gravity must be a 2D vector, got shape {self.gravity.shape}."
            logging.critical(msg)
            raise ValueError(msg)

        self.frame_count = 0
        self.total_spawned = 0
        self.total_culled = 0

        logging.info("Simulation logic initialized and configuration validated.")
        logging.info(
            f"Gravity ({self.gravity[0]:.2f}, {self.gravity[1]:.2f}), "
            f"spawn mode '{self.spawn_policy.mode}', "
            f"color reactive: {self.color_reactive}, culling: {self.cull_enabled}."
        )

    def step(self, frame: FrameInput):
        """
        Executes one frame of the simulation.
        """
        # 1. Spawn new particles while the trigger is held
        spawn_count = self.spawn_policy.count(frame.trigger_active)
        if spawn_count:
            self.particles.spawn(frame.trigger_position, spawn_count)
            self.total_spawned += spawn_count

        # 2. Apply gravity, integrate and recolor (parallel, returns when all are done)
        reference_point = frame.reference_point if self.color_reactive else None
        self.particles.step(self.gravity, reference_point)

        # 3. Remove particles that have left the world
        if self.cull_enabled:
            removed = self.particles.cull(frame.bounds)
            self.total_culled += removed
            if removed:
                logging.debug(f"Frame {self.frame_count}: culled {removed} particles.")

        self.frame_count += 1
