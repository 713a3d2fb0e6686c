# planet_generator/runtime/clock.py

"""
================================================================================
DAY CLOCK
================================================================================
This module provides a self-contained, data-only class for tracking the
planet's time of day. It knows nothing about lighting; the DayNightCycle
reads it.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Optional 'day_duration_seconds', 'time_scale' and
      'time_of_day' overrides of the internal defaults.
- Public Methods:
    - update(real_delta_time): Advances the clock.
    - set_time_of_day(value): Jumps to a fraction of the day.
    - set_speed(new_scale): Changes the speed of time.
    - get_time_string(): Returns "HH:MM (Phase)".
- Public Properties:
    - time_of_day (float in [0, 1), 0 = midnight, 0.5 = noon), hour, minute.
- Side Effects: None.
- Invariants: time_of_day always stays in [0, 1).
================================================================================
"""

import datetime

from .. import config as DEFAULTS

SECONDS_PER_DAY = 24 * 60 * 60


class DayClock:
    """Tracks the fraction of the current day."""

    def __init__(self, config: dict = None):
        config = config or {}
        self.day_duration = float(config.get('day_duration_seconds', DEFAULTS.DAY_DURATION_SECONDS))
        if self.day_duration <= 0:
            raise ValueError(f"day_duration_seconds must be positive, got {self.day_duration}")
        self.time_scale = max(0.0, float(config.get('time_scale', 1.0)))
        self.time_of_day = 0.0
        self.set_time_of_day(config.get('time_of_day', 0.5))

    @classmethod
    def from_local_time(cls, now: datetime.datetime = None, config: dict = None) -> 'DayClock':
        """A clock synchronized to the wall clock (or the given datetime)."""
        now = now or datetime.datetime.now()
        clock = cls(config)
        clock.set_time_of_day((now.hour * 3600 + now.minute * 60 + now.second) / SECONDS_PER_DAY)
        return clock

    def update(self, real_delta_time: float):
        """
        Advances the clock by a given amount of real-world time.

        Args:
            real_delta_time (float): The time elapsed in the real world, in seconds.
        """
        if self.time_scale <= 0:
            return # Time is paused, do nothing.
        self.set_time_of_day(self.time_of_day + real_delta_time * self.time_scale / self.day_duration)

    def set_time_of_day(self, value: float):
        self.time_of_day = float(value) % 1.0

    def set_speed(self, new_scale: float):
        """0 = paused, 1 = one day per day_duration, > 1 = fast-forward."""
        self.time_scale = max(0.0, new_scale)

    @property
    def seconds_into_day(self) -> int:
        # Rounded so 06:30 stays 06:30 despite float error in the fraction.
        return int(round(self.time_of_day * SECONDS_PER_DAY)) % SECONDS_PER_DAY

    @property
    def hour(self) -> int:
        return self.seconds_into_day // 3600

    @property
    def minute(self) -> int:
        return self.seconds_into_day % 3600 // 60

    @property
    def phase(self) -> str:
        t = self.time_of_day
        if t < DEFAULTS.SUNRISE_LABEL_START:
            return "Night"
        if t < DEFAULTS.SUNRISE_END:
            return "Sunrise"
        if t < DEFAULTS.SUNSET_START:
            return "Day"
        if t < DEFAULTS.SUNSET_END:
            return "Sunset"
        return "Night"

    def get_time_string(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d} ({self.phase})"
