# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the Particle class, a single point mass with its own
kinematic and visual state, and the ParticleSystem class, which stores the
whole collection in efficient NumPy arrays and advances it every frame with
a Numba-parallel kernel.
"""
import logging
import numpy as np
from numba import jit, prange, set_num_threads
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple
from constants import (
    DEFAULT_PARTICLE_COUNT, DEFAULT_SPEED_BOUND, DEFAULT_PARTICLE_COLOR,
    DEFAULT_MAX_COLOR_DISTANCE
)

# --- Data Contracts ---
#
# class Bounds(NamedTuple):
#   - Fields: left, right, bottom, top (float), world coordinates, y up.
#   - contains(x, y) -> bool: inclusive rectangle test.
#   - contains_points(points) -> np.ndarray[bool]: the same test for an
#     (N, 2) array of positions.
#
# class Particle:
#   - __init__(self, position, rng=None, speed_bound=..., color=..., velocity=None)
#     - Invariants: acceleration is the zero vector outside of the
#       apply_force -> update window of a single frame.
#   - apply_force(force) -> None: acceleration += force.
#   - update() -> None: velocity += acceleration; position += velocity;
#     acceleration = 0. The order is fixed.
#   - update_color(reference_point, max_distance) -> None: yellow (near) to
#     red (far) heat gradient keyed on distance to reference_point.
#
# class ParticleSystem:
#   - __init__(self, params: Dict[str, Any], bounds: Bounds):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "seed": int or None
#         - "particle_count": int
#         - "speed_bound": float
#         - "max_color_distance": float
#         - "default_color": [r, g, b, a]
#         - "num_threads": int (optional)
#       - bounds: Bounds, the rectangle the initial batch is sampled from.
#     - Outputs: None
#     - Side Effects: Initializes internal NumPy arrays for particle state.
#     - Invariants:
#       - self.positions, self.velocities and self.accelerations are NumPy
#         arrays of shape (N, 2) of dtype float64.
#       - self.colors is a NumPy array of shape (N, 4) of dtype float64.
#       - All four arrays always have the same N.
#
#   - step(self, force, reference_point=None) -> None:
#     - Side Effects: Applies force, integrates and (optionally) recolors
#       every particle. Returns only once every particle has been updated.
#
#   - cull(self, bounds) -> int:
#     - Outputs: Number of particles removed.
#     - Invariants: Particles exactly on the boundary are kept.


class Bounds(NamedTuple):
    """An axis-aligned rectangle in world coordinates (y points up)."""
    left: float
    right: float
    bottom: float
    top: float

    @classmethod
    def centered(cls, width: float, height: float) -> "Bounds":
        """Bounds of a width x height window whose center is the world origin."""
        half_width = width / 2.0
        half_height = height / 2.0
        return cls(-half_width, half_width, -half_height, half_height)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.bottom <= y <= self.top

    def contains_points(self, points: np.ndarray) -> np.ndarray:
        """Vectorized `contains` for an (N, 2) array. NaN positions are outside."""
        x = points[:, 0]
        y = points[:, 1]
        return (x >= self.left) & (x <= self.right) & (y >= self.bottom) & (y <= self.top)


def random_velocities(rng: np.random.Generator, count: int, speed_bound: float) -> np.ndarray:
    """Draws `count` velocities, each axis uniform in [-speed_bound, speed_bound)."""
    return rng.uniform(low=-speed_bound, high=speed_bound, size=(count, 2))


@jit(nopython=True)
def heat_green(distance, max_distance):
    """
    Green channel of the heat gradient.

    1.0 at the reference point, falling linearly to 0.0 at max_distance and
    staying there beyond it. Red is always 1.0 and blue 0.0, so the result
    reads as yellow (close) to red (far).
    """
    t = distance / max_distance
    if t < 0.0:
        t = 0.0
    elif t > 1.0:
        t = 1.0
    return 1.0 - t


@jit(nopython=True, parallel=True)
def _step_numba(positions, velocities, accelerations, colors, force,
                reference_point, use_reference, max_distance):
    """
    Numba-jitted, data-parallel frame update.

    Each iteration touches only row i of the state arrays, so the loop is
    split across threads with prange. The function returns after every
    iteration has finished, which is the barrier the cull phase relies on.
    """
    particle_count = positions.shape[0]
    for i in prange(particle_count):
        for axis in range(2):
            accelerations[i, axis] += force[axis]
            velocities[i, axis] += accelerations[i, axis]
            positions[i, axis] += velocities[i, axis]
            accelerations[i, axis] = 0.0

        if use_reference:
            dx = positions[i, 0] - reference_point[0]
            dy = positions[i, 1] - reference_point[1]
            colors[i, 0] = 1.0
            colors[i, 1] = heat_green(np.sqrt(dx * dx + dy * dy), max_distance)
            colors[i, 2] = 0.0
            colors[i, 3] = 1.0


class Particle:
    """
    A single point mass.

    Used directly for one-off particles and returned as a detached copy by
    ParticleSystem when a caller asks for individual particles.
    """
    def __init__(
        self,
        position: Sequence[float],
        rng: Optional[np.random.Generator] = None,
        speed_bound: float = DEFAULT_SPEED_BOUND,
        color: Sequence[float] = DEFAULT_PARTICLE_COLOR,
        velocity: Optional[Sequence[float]] = None,
    ):
        """
        Creates a particle at `position`.

        Args:
            position: World coordinates (x, y).
            rng: Source of randomness for the initial velocity.
            speed_bound: Each velocity component is drawn from [-speed_bound, speed_bound).
            color: Initial RGBA color in [0, 1].
            velocity: Explicit initial velocity. Skips the random draw.
        """
        self.position = np.array(position, dtype=np.float64)
        if velocity is None:
            if rng is None:
                rng = np.random.default_rng()
            self.velocity = random_velocities(rng, 1, speed_bound)[0]
        else:
            self.velocity = np.array(velocity, dtype=np.float64)
        self.acceleration = np.zeros(2, dtype=np.float64)
        self.color = np.array(color, dtype=np.float64)

    def apply_force(self, force: Sequence[float]) -> None:
        self.acceleration += np.asarray(force, dtype=np.float64)

    def update(self) -> None:
        """Advances one frame (semi-implicit Euler, dt = 1)."""
        self.velocity += self.acceleration
        self.position += self.velocity
        self.acceleration = np.zeros(2, dtype=np.float64)

    def update_color(
        self,
        reference_point: Sequence[float],
        max_distance: float = DEFAULT_MAX_COLOR_DISTANCE,
    ) -> None:
        offset = self.position - np.asarray(reference_point, dtype=np.float64)
        distance = float(np.sqrt(offset[0] ** 2 + offset[1] ** 2))
        self.color = np.array([1.0, heat_green(distance, max_distance), 0.0, 1.0])

    def __repr__(self):
        return (
            f"Particle(position=({self.position[0]:.2f}, {self.position[1]:.2f}), "
            f"velocity=({self.velocity[0]:.2f}, {self.velocity[1]:.2f}))"
        )


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, params: Dict[str, Any], bounds: Bounds):
        """
        Initializes the particle system.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
            bounds (Bounds): The area the initial particles are scattered over.
        """
        self.seed = params.get('seed')
        self.speed_bound = float(params.get('speed_bound', DEFAULT_SPEED_BOUND))
        self.max_color_distance = float(params.get('max_color_distance', DEFAULT_MAX_COLOR_DISTANCE))
        self.default_color = np.array(params.get('default_color', DEFAULT_PARTICLE_COLOR), dtype=np.float64)

        if self.default_color.shape != (4,):
            msg = (
                f"Configuration error: default_color must have 4 components (RGBA), "
                f"got shape {self.default_color.shape}."
            )
            logging.critical(msg)
            raise ValueError(msg)
        if self.max_color_distance <= 0:
            msg = f"Configuration error: max_color_distance must be positive, got {self.max_color_distance}."
            logging.critical(msg)
            raise ValueError(msg)

        num_threads = params.get('num_threads')
        if num_threads:
            set_num_threads(int(num_threads))
            logging.info(f"Parallel update limited to {num_threads} threads.")

        # All randomness comes from a single seeded generator.
        self.rng = np.random.default_rng(self.seed)

        self.initialize(bounds, int(params.get('particle_count', DEFAULT_PARTICLE_COUNT)))

        logging.info(
            f"ParticleSystem initialized with {self.particle_count} particles "
            f"(speed bound {self.speed_bound:.2f})."
        )

    def initialize(self, bounds: Bounds, count: int) -> None:
        """Replaces the collection with `count` particles scattered uniformly inside `bounds`."""
        self.positions = self.rng.uniform(
            low=[bounds.left, bounds.bottom],
            high=[bounds.right, bounds.top],
            size=(count, 2)
        )
        self.velocities = random_velocities(self.rng, count, self.speed_bound)
        self.accelerations = np.zeros((count, 2), dtype=np.float64)
        self.colors = np.tile(self.default_color, (count, 1))

        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Velocities shape: {self.velocities.shape}, "
            f"Colors shape: {self.colors.shape}"
        )

    @property
    def particle_count(self) -> int:
        return self.positions.shape[0]

    def __len__(self):
        return self.particle_count

    def spawn(self, position: Sequence[float], count: int) -> None:
        """
        Appends `count` particles at `position`.

        They share the starting point but each gets its own random velocity.
        """
        if count <= 0:
            return
        origin = np.asarray(position, dtype=np.float64)
        self.positions = np.vstack((self.positions, np.tile(origin, (count, 1))))
        self.velocities = np.vstack((self.velocities, random_velocities(self.rng, count, self.speed_bound)))
        self.accelerations = np.vstack((self.accelerations, np.zeros((count, 2), dtype=np.float64)))
        self.colors = np.vstack((self.colors, np.tile(self.default_color, (count, 1))))
        logging.debug(f"Spawned {count} particles at ({origin[0]:.1f}, {origin[1]:.1f}).")

    def apply_force(self, force: Sequence[float]) -> None:
        """Accumulates `force` on every particle until the next step."""
        self.accelerations += np.asarray(force, dtype=np.float64)

    def step(self, force: Sequence[float], reference_point: Optional[Sequence[float]] = None) -> None:
        """
        Applies `force`, integrates and, when a reference point is given,
        recolors every particle.
        """
        use_reference = reference_point is not None
        reference = np.asarray(reference_point if use_reference else (0.0, 0.0), dtype=np.float64)
        _step_numba(
            self.positions, self.velocities, self.accelerations, self.colors,
            np.asarray(force, dtype=np.float64), reference, use_reference,
            self.max_color_distance
        )

    def cull(self, bounds: Bounds) -> int:
        """
        Removes every particle outside `bounds`.

        Returns:
            int: The number of particles removed.
        """
        inside = bounds.contains_points(self.positions)
        removed = int(inside.size - np.count_nonzero(inside))
        if removed:
            self.positions = self.positions[inside]
            self.velocities = self.velocities[inside]
            self.accelerations = self.accelerations[inside]
            self.colors = self.colors[inside]
        return removed

    def snapshot(self) -> Tuple[np.ndarray, np.ndarray]:
        """Copies of (positions, colors) for the renderer."""
        return self.positions.copy(), self.colors.copy()

    def particle(self, index: int) -> Particle:
        """A detached copy of one particle."""
        copy = Particle(
            self.positions[index],
            color=self.colors[index],
            velocity=self.velocities[index]
        )
        copy.acceleration = self.accelerations[index].copy()
        return copy

    @property
    def particles(self) -> List[Particle]:
        return [self.particle(i) for i in range(self.particle_count)]
