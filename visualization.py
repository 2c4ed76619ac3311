# visualization.py
"""
Handles the window, pointer input and drawing of the particles using Pygame.

The physics core works in a world whose origin is the center of the window
with y pointing up. Pygame puts the origin at the top-left corner with y
pointing down, so every position crossing this module is converted.
"""
import logging
import pygame
import numpy as np
from particle import Bounds, ParticleSystem
from simulation import FrameInput
from constants import (
    BACKGROUND_COLOR, DEFAULT_PARTICLE_RADIUS, DEFAULT_SPAWN_BUTTON, FPS,
    FULLSCREEN, WINDOW_HEIGHT, WINDOW_TITLE, WINDOW_WIDTH
)
from typing import Any, Dict, Optional, Sequence, Tuple


# --- Data Contracts ---
#
# world_to_screen(points: np.ndarray, width: int, height: int) -> np.ndarray
#   - (N, 2) world positions -> (N, 2) pixel positions.
#
# screen_to_world(pos: Sequence[float], width: int, height: int) -> Tuple[float, float]
#   - One pixel position -> world position.
#
# class Visualizer:
#   - __init__(self, vis_params: Optional[Dict[str, Any]] = None):
#     - Side Effects: Initializes Pygame and creates a display surface.
#   - poll(self) -> Optional[FrameInput]:
#     - Outputs: The input for this frame, or None if the user has quit.
#   - draw(self, particles: ParticleSystem) -> None:
#     - Side Effects: Renders every particle as a filled circle and waits
#       for the next frame tick.

def world_to_screen(points: np.ndarray, width: int, height: int) -> np.ndarray:
    screen = np.empty_like(points)
    screen[:, 0] = points[:, 0] + width / 2.0
    screen[:, 1] = height / 2.0 - points[:, 1]
    return screen

def screen_to_world(pos: Sequence[float], width: int, height: int) -> Tuple[float, float]:
    return (pos[0] - width / 2.0, height / 2.0 - pos[1])


class Visualizer:
    """
    Owns the Pygame window and turns pointer state into frame input.
    """
    def __init__(self, vis_params: Optional[Dict[str, Any]] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params if vis_params is not None else {}
        pygame.init()

        if vis_params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width = vis_params.get('width', WINDOW_WIDTH)
            height = vis_params.get('height', WINDOW_HEIGHT)
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        self._set_size(width, height)

        pygame.display.set_caption(vis_params.get('title', WINDOW_TITLE))
        self.clock = pygame.time.Clock()
        self.fps = vis_params.get('fps', FPS)
        self.background_color = pygame.Color(*vis_params.get('background_color', BACKGROUND_COLOR))
        self.particle_radius = float(vis_params.get('particle_radius', DEFAULT_PARTICLE_RADIUS))
        # pygame.mouse.get_pressed() is zero-indexed, button numbers are not.
        self.spawn_button_index = int(vis_params.get('spawn_button', DEFAULT_SPAWN_BUTTON)) - 1

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _set_size(self, width: int, height: int):
        self.width = width
        self.height = height
        self.bounds = Bounds.centered(width, height)

    def poll(self) -> Optional[FrameInput]:
        """
        Handles window events and samples the pointer.

        Returns:
            FrameInput for this frame, or None if the application should exit.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return None

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return None

            if event.type == pygame.VIDEORESIZE:
                self._set_size(event.w, event.h)
                logging.info(f"Window resized to {event.w}x{event.h}.")

        pointer = screen_to_world(pygame.mouse.get_pos(), self.width, self.height)
        buttons = pygame.mouse.get_pressed(num_buttons=3)
        return FrameInput(
            bounds=self.bounds,
            trigger_active=bool(buttons[self.spawn_button_index]),
            trigger_position=pointer,
            reference_point=pointer
        )

    def draw(self, particles: ParticleSystem):
        """Draws all particles and waits for the next frame."""
        positions, colors = particles.snapshot()
        screen_positions = world_to_screen(positions, self.width, self.height).tolist()
        rgba = np.clip(colors * 255.0, 0, 255).astype(np.int32).tolist()

        self.screen.fill(self.background_color)
        # Circles smaller than a pixel would not be drawn at all.
        if self.particle_radius < 1.0:
            for (x, y), color in zip(screen_positions, rgba):
                self.screen.set_at((int(x), int(y)), color)
        else:
            for pos, color in zip(screen_positions, rgba):
                pygame.draw.circle(self.screen, color, pos, self.particle_radius)

        pygame.display.flip()
        self.clock.tick(self.fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
