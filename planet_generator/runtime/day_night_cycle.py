# planet_generator/runtime/day_night_cycle.py

"""
================================================================================
DAY/NIGHT CYCLE
================================================================================
This module provides a class to manage the planet's day/night cycle: the
atmosphere color, the sun and moon visibility, the ambient brightness, and
time-of-day recoloring of vertex colors from a retained BiomeField.

Data Contract:
---------------
- Inputs (on initialization):
    - clock (DayClock): An instance of the DayClock.
    - biome (BiomeField, optional): The field a planet was generated from.
    - config (dict): Optional overrides for the lighting defaults.
- Public Methods:
    - update(): Recalculates the lighting from the clock's current time.
    - recolor(positions): Per-vertex colors under the current lighting.
- Public Properties:
    - current_brightness (float), atmosphere_color (Color),
      sun_visibility / moon_visibility (float in [0, 1]).
- Side Effects: None. The BiomeField is only read.
- Invariants: The output is a deterministic function of the clock's time.
================================================================================
"""
from typing import TYPE_CHECKING

import numpy as np

from .. import config as DEFAULTS
from ..color_gradient import Color, ColorGradient

# Use a forward reference for the type hint to avoid circular imports.
if TYPE_CHECKING:
    from ..biome import BiomeField
    from .clock import DayClock


def _lerp_float(val1: float, val2: float, t: float) -> float:
    """Linearly interpolates between two float values."""
    t = np.clip(t, 0.0, 1.0)
    return val1 * (1 - t) + val2 * t


class DayNightCycle:
    """
    Manages the lighting of the planet based on the time of day.
    """
    def __init__(self, clock: 'DayClock', biome: 'BiomeField' = None, config: dict = None):
        self.clock = clock
        self.biome = biome
        config = config or {}

        # --- 1. Load Lighting Configuration ---
        self.sunrise_start = config.get('sunrise_start', DEFAULTS.SUNRISE_START)
        self.sunrise_end = config.get('sunrise_end', DEFAULTS.SUNRISE_END)
        self.sunset_start = config.get('sunset_start', DEFAULTS.SUNSET_START)
        self.sunset_end = config.get('sunset_end', DEFAULTS.SUNSET_END)
        self.max_brightness = config.get('max_brightness', DEFAULTS.MAX_BRIGHTNESS)
        self.min_brightness = config.get('min_brightness', DEFAULTS.MIN_BRIGHTNESS)
        self.night_tint = Color.parse(config.get('night_tint', DEFAULTS.NIGHT_TINT))
        self.night_tint_blend = config.get('night_tint_blend', DEFAULTS.NIGHT_TINT_BLEND)
        self.atmosphere_gradient = ColorGradient(config.get('atmosphere_stops', DEFAULTS.ATMOSPHERE_STOPS))

        # --- 2. Public State Variables ---
        self.current_brightness = self.min_brightness
        self.atmosphere_color = self.atmosphere_gradient.get(0.0)
        self.sun_visibility = 0.0
        self.moon_visibility = 1.0

        # Perform an initial update to set the starting state correctly.
        self.update()

    def _sun_visibility(self, t: float) -> float:
        """0 at night, ramps in over sunrise, 1 all day, ramps out over sunset."""
        if t < self.sunrise_start or t >= self.sunset_end:
            return 0.0
        if t < self.sunrise_end:
            return (t - self.sunrise_start) / (self.sunrise_end - self.sunrise_start)
        if t < self.sunset_start:
            return 1.0
        return 1.0 - (t - self.sunset_start) / (self.sunset_end - self.sunset_start)

    def update(self):
        """
        Recalculates the lighting based on a 5-stage cycle:
        Night -> Sunrise -> Full Day -> Sunset -> Night
        """
        t = self.clock.time_of_day

        self.sun_visibility = self._sun_visibility(t)
        # The moon is up exactly when the sun is not.
        self.moon_visibility = 1.0 - self.sun_visibility
        self.current_brightness = _lerp_float(self.min_brightness, self.max_brightness, self.sun_visibility)
        self.atmosphere_color = self.atmosphere_gradient.get(t)

    def recolor(self, positions, base_colors=None) -> np.ndarray:
        """
        Returns (N, 3) float32 colors for the given vertex positions under the
        current lighting. Without base_colors the retained BiomeField supplies
        the daylight colors. Neither input is modified.
        """
        if base_colors is not None:
            colors = np.array(base_colors, dtype=np.float64).reshape(-1, 3)
        elif self.biome is not None:
            colors = self.biome.surface_color(positions)
        else:
            raise ValueError("recolor() needs base_colors when no biome is attached.")

        darkness = 1.0 - self.sun_visibility
        lit = colors * self.current_brightness
        lit += (np.asarray(self.night_tint) - lit) * (darkness * self.night_tint_blend)
        return np.clip(lit, 0.0, 1.0).astype(np.float32)
