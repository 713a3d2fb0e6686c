# planet_generator/runtime/__init__.py

# This file makes the 'runtime' directory a Python package.
# We can also use it to define the public API of the package.

from .clock import DayClock
from .day_night_cycle import DayNightCycle

__all__ = ["DayClock", "DayNightCycle"]
