# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's planet configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC PLANET.
Instead, pass a configuration dictionary to the generation worker.
================================================================================
"""

import logging

# --- Planet Shape & Detail ---
DEFAULT_SHAPE = "sphere"
SUPPORTED_SHAPES = ("sphere",)

# The subdivision depth. Face count grows as 20 * 4^depth, so it is clamped.
DEFAULT_DETAIL = 5
MAX_DETAIL = 5

# Vertex jitter relative to the mean face solid angle.
DEFAULT_SCATTER = 1.2

# --- Noise Generation ---
DEFAULT_SEED = 1337
# Offsets keep the secondary noise fields (gain, warp, scatter) decorrelated
# from the field they modulate while staying deterministic from one seed.
GAIN_SEED_OFFSET = 7919
SEA_SEED_OFFSET = 15485
SCATTER_SEED_OFFSET = 104729
VEGETATION_SEED_OFFSET = 32452843

# Domain-warp samples are taken at these per-axis coordinate offsets.
WARP_AXIS_OFFSETS = (
    (17.3, -41.9, 8.1),
    (-63.2, 29.7, 55.4),
    (91.6, 12.8, -37.5),
)

# Fallback values for a NoiseConfig that omits them.
NOISE_OCTAVES = 1
NOISE_LACUNARITY = 2.0
NOISE_GAIN = 0.5
NOISE_WARP = 0.0
NOISE_SCALE = 1.0
NOISE_POWER = 1.0
NOISE_MIN = -1.0
NOISE_MAX = 1.0

# The terrain envelope assumed when a biome has no terrain noise at all.
TERRAIN_MIN = -0.05
TERRAIN_MAX = 0.05

# --- Scatter (per-vertex jitter) ---
SCATTER_NOISE_SCALE = 100.0
SCATTER_NOISE_WARP = 0.25
# Each axis of the scatter vector samples the same field at a shuffled,
# offset coordinate so the three components do not move in lockstep.
SCATTER_AXIS_OFFSETS = (
    (0.0, 0.0, 0.0),
    (100.0, -100.0, 100.0),
    (-200.0, 200.0, -200.0),
)

# --- Ocean Morph Targets ---
# The sea field is resampled at a shifted position to produce the alternate
# wave pose the renderer blends toward.
OCEAN_MORPH_PHASE = (0.37, -0.21, 0.53)

# --- Coloring ---
COLOR_BRIGHTNESS_BOOST = 1.2
STEEPNESS_MIN_BRIGHTNESS = 0.7
DEPTH_MIN_BRIGHTNESS = 0.7
TINT_BLEND = 0.2
GROUND_COLOR_BLEND = 1.0 / 3.0
GROUND_FALLOFF_POWER = 0.5
# Returned by an empty gradient so a missing palette is visible, not fatal.
FALLBACK_COLOR = 0xFF00CC

# --- Spatial Index ---
OCTREE_CAPACITY = 4
OCTREE_MAX_DEPTH = 16
# Vegetation lives on the unit sphere, ground raises push it slightly out.
VEGETATION_BOUNDS_SIZE = 2.0

# --- Worker & Logging ---
DEFAULT_LOG_LEVEL = logging.WARNING
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# --- Day/Night Cycle ---
DAY_DURATION_SECONDS = 30 * 60.0
SUNRISE_START = 0.2
SUNRISE_END = 0.3
SUNSET_START = 0.7
SUNSET_END = 0.8
# The clock labels the time "Sunrise" only once the sky has started to brighten.
SUNRISE_LABEL_START = 0.25
MAX_BRIGHTNESS = 1.0
MIN_BRIGHTNESS = 0.25
ATMOSPHERE_STOPS = [
    [0.0, 0x1A1A2E],   # Night
    [0.25, 0x4A4A8A],  # Dawn
    [0.5, 0x87CEEB],   # Day
    [0.75, 0x4A4A8A],  # Dusk
    [1.0, 0x1A1A2E],   # Night
]
NIGHT_TINT = 0x000033
NIGHT_TINT_BLEND = 0.5
