# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They provide the fallbacks used whenever a key is missing from the
configuration file, plus a few rendering properties that are not part of
the experimental configuration.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (WINDOW_WIDTH x WINDOW_HEIGHT).
FULLSCREEN = False
WINDOW_WIDTH = 1024
WINDOW_HEIGHT = 768
WINDOW_TITLE = "Falling Particles"
FPS = 60
BACKGROUND_COLOR = (255, 255, 255) # White
DEFAULT_PARTICLE_RADIUS = 1.0
# Mouse button that spawns particles while held (1 = left, 3 = right).
DEFAULT_SPAWN_BUTTON = 1

# --- Physics Defaults ---
DEFAULT_PARTICLE_COUNT = 500
# Velocity components are drawn uniformly from [-SPEED_BOUND, SPEED_BOUND).
DEFAULT_SPEED_BOUND = 5.0
# Constant downward pull applied to every particle each frame.
DEFAULT_GRAVITY = (0.0, -0.1)

# --- Spawning ---
# "single" spawns one particle per frame while the trigger is held,
# "burst" spawns a random count in [1, DEFAULT_BURST_MAX).
DEFAULT_SPAWN_MODE = "single"
DEFAULT_BURST_MAX = 40
SPAWN_MODES = ("single", "burst")

# --- Color ---
# RGBA in [0, 1]. Used for every particle unless color reactivity is on.
DEFAULT_PARTICLE_COLOR = (0.0, 0.0, 0.0, 1.0) # Black
# Distance from the pointer at which the heat gradient is fully red.
DEFAULT_MAX_COLOR_DISTANCE = 200.0

# --- Run Control ---
DEFAULT_LOG_THROTTLE_STEPS = 100
