# planet_generator/errors.py

"""
================================================================================
ERRORS
================================================================================
The single exception type raised for malformed input. The generation worker
catches it (like any other exception) and reports it as an 'error' response.
================================================================================
"""


class PlanetConfigError(ValueError):
    """Raised when a planet, biome, noise, gradient or vegetation config is malformed."""
