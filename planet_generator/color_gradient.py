# planet_generator/color_gradient.py

"""
================================================================================
COLOR GRADIENTS
================================================================================
This module contains the color type and the piecewise color gradient used for
terrain, sea and atmosphere coloring. A gradient stop holds either a concrete
color or a nested gradient, which turns the gradient into a 2D/3D color field
indexed by the extra coordinates passed to get().

It is designed to be a pure utility with no rendering dependencies, so the
worker, the runtime recolor and the bake preview all share it.

Data Contract:
---------------
- Inputs:
    - Stops as [position, value, easing?] lists, GradientStop instances or
      {'position', 'value', 'easing'} mappings. Values are hex ints, color
      strings, (r, g, b) float sequences, {r, g, b} mappings, nested gradient
      configs or ColorGradient instances.
- Outputs:
    - Color tuples with float channels in [0, 1].
- Side Effects: None. get() never mutates a stored color.
- Invariants: Stops are always sorted by position. An empty gradient returns
  the fallback color instead of raising.
================================================================================
"""

import colorsys
from bisect import bisect_left
from dataclasses import dataclass
from numbers import Real
from typing import Callable, NamedTuple, Optional, Union

import numpy as np
from PIL import ImageColor

from . import config as DEFAULTS
from .errors import PlanetConfigError


class Color(NamedTuple):
    """An RGB color with float channels, nominally in [0, 1]."""
    r: float
    g: float
    b: float

    @classmethod
    def from_hex(cls, value: int) -> 'Color':
        if not 0 <= value <= 0xFFFFFF:
            raise PlanetConfigError(f"Hex color out of range: {value!r}")
        return cls(((value >> 16) & 0xFF) / 255.0, ((value >> 8) & 0xFF) / 255.0, (value & 0xFF) / 255.0)

    @classmethod
    def parse(cls, value) -> 'Color':
        """Converts any supported color notation into a Color."""
        if isinstance(value, Color):
            return value
        if isinstance(value, bool):
            raise PlanetConfigError(f"Not a color: {value!r}")
        if isinstance(value, int):
            return cls.from_hex(value)
        if isinstance(value, str):
            try:
                rgb = ImageColor.getrgb(value)
            except ValueError as e:
                raise PlanetConfigError(f"Unknown color string {value!r}: {e}") from e
            return cls(rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0)
        if isinstance(value, dict) and {'r', 'g', 'b'} <= value.keys():
            return cls(float(value['r']), float(value['g']), float(value['b']))
        if isinstance(value, (list, tuple, np.ndarray)) and len(value) == 3 \
                and all(isinstance(c, Real) and not isinstance(c, bool) for c in value):
            return cls(float(value[0]), float(value[1]), float(value[2]))
        raise PlanetConfigError(f"Not a color: {value!r}")

    def lerp(self, other: 'Color', t: float) -> 'Color':
        return Color(
            self.r + (other.r - self.r) * t,
            self.g + (other.g - self.g) * t,
            self.b + (other.b - self.b) * t,
        )

    def lerp_hsl(self, other: 'Color', t: float) -> 'Color':
        """Interpolates hue, saturation and lightness independently."""
        h1, l1, s1 = colorsys.rgb_to_hls(*self)
        h2, l2, s2 = colorsys.rgb_to_hls(*other)
        h = h1 + (h2 - h1) * t
        l = l1 + (l2 - l1) * t
        s = s1 + (s2 - s1) * t
        return Color(*colorsys.hls_to_rgb(h, l, s))

    def scaled(self, factor: float) -> 'Color':
        return Color(self.r * factor, self.g * factor, self.b * factor)

    def clamped(self, maximum: float = 1.0) -> 'Color':
        return Color(min(maximum, self.r), min(maximum, self.g), min(maximum, self.b))

    def to_hex(self) -> int:
        channels = [int(round(max(0.0, min(1.0, c)) * 255)) for c in self]
        return (channels[0] << 16) | (channels[1] << 8) | channels[2]


FALLBACK_COLOR = Color.from_hex(DEFAULTS.FALLBACK_COLOR)


def _smoothstep(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)

def _ease_in_out(t: float) -> float:
    return 4.0 * t * t * t if t < 0.5 else 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0

EASINGS = {
    'linear': lambda t: t,
    'smoothstep': _smoothstep,
    'ease_in': lambda t: t * t,
    'ease_out': lambda t: 1.0 - (1.0 - t) * (1.0 - t),
    'ease_in_out': _ease_in_out,
}

Easing = Callable[[float], float]


def resolve_easing(easing) -> Optional[Easing]:
    """Accepts None, a callable, or the name of a built-in easing."""
    if easing is None or callable(easing):
        return easing
    if isinstance(easing, str) and easing in EASINGS:
        return EASINGS[easing]
    raise PlanetConfigError(f"Unknown easing {easing!r}; expected one of {sorted(EASINGS)}")


@dataclass(frozen=True)
class GradientStop:
    position: float
    value: Union[Color, 'ColorGradient']
    easing: Optional[Easing] = None


class ColorGradient:
    """
    A sorted list of color stops. Stop values are either a Color or a nested
    ColorGradient; which one is decided when the stop is added.
    """
    def __init__(self, options=None):
        if options is None:
            options = {}
        if isinstance(options, (list, tuple)):
            options = {'stops': options}
        if not isinstance(options, dict):
            raise PlanetConfigError(f"Gradient config must be a list or mapping, got {type(options).__name__}")

        self.stops: list[GradientStop] = []
        self.hsl = bool(options.get('hsl', False))
        self.easing = resolve_easing(options.get('easing'))

        if 'between' in options:
            self.add_between(
                options['between'],
                options.get('min', -1.0),
                options.get('max', 1.0)
            )
        if 'stops' in options:
            self.add_stops(options['stops'])

    @classmethod
    def between(cls, values, minimum: float = -1.0, maximum: float = 1.0) -> 'ColorGradient':
        return cls({'between': values, 'min': minimum, 'max': maximum})

    def __len__(self) -> int:
        return len(self.stops)

    def add_stops(self, stops):
        for stop in stops:
            self.add_stop(stop)

    def add_between(self, values, minimum: float = -1.0, maximum: float = 1.0):
        """Spreads the given values evenly over [minimum, maximum]."""
        if len(values) == 0:
            raise PlanetConfigError("Gradient 'between' needs at least one color")
        if len(values) == 1:
            self.add_stop([minimum, values[0]])
            return
        step = (maximum - minimum) / (len(values) - 1)
        for i, value in enumerate(values):
            self.add_stop([minimum + i * step, value])

    @staticmethod
    def _is_nested_config(value) -> bool:
        if isinstance(value, dict):
            return 'stops' in value or 'between' in value
        # A list whose entries are themselves lists is a stop list, not an RGB triple.
        return isinstance(value, (list, tuple)) and len(value) > 0 \
            and all(isinstance(entry, (list, tuple, GradientStop)) for entry in value)

    def add_stop(self, stop):
        if isinstance(stop, GradientStop):
            position, raw_value, easing = stop.position, stop.value, stop.easing
        elif isinstance(stop, dict):
            if 'position' not in stop or 'value' not in stop:
                raise PlanetConfigError(f"Gradient stop mapping needs 'position' and 'value': {stop!r}")
            position, raw_value, easing = stop['position'], stop['value'], stop.get('easing')
        elif isinstance(stop, (list, tuple)) and len(stop) in (2, 3):
            position, raw_value = stop[0], stop[1]
            easing = stop[2] if len(stop) == 3 else None
        else:
            raise PlanetConfigError(f"Malformed gradient stop: {stop!r}")

        if isinstance(position, bool) or not isinstance(position, Real):
            raise PlanetConfigError(f"Gradient stop position must be a number, got {position!r}")

        if isinstance(raw_value, ColorGradient):
            value = raw_value
        elif self._is_nested_config(raw_value):
            value = ColorGradient(raw_value)
        else:
            value = Color.parse(raw_value)

        index = bisect_left([s.position for s in self.stops], position)
        self.stops.insert(index, GradientStop(float(position), value, resolve_easing(easing)))

    def dimensions(self) -> int:
        nested = [s.value.dimensions() for s in self.stops if isinstance(s.value, ColorGradient)]
        return max(nested, default=0) + 1

    def color_at_index(self, i: int, *extra) -> Optional[Color]:
        if i < 0 or i >= len(self.stops):
            return None
        value = self.stops[i].value
        if isinstance(value, ColorGradient):
            return value.get(*extra) if extra else value.get()
        return value

    def mix(self, i: int, j: int, amount: float, *extra) -> Optional[Color]:
        if i < 0 or i >= len(self.stops) or j < 0 or j >= len(self.stops):
            return None

        amount = min(max(0.0, amount), 1.0)

        first = self.color_at_index(i, *extra)
        if i == j:
            return first

        easing = self.stops[j].easing
        if easing is not None:
            amount = easing(amount)
        if self.easing is not None:
            amount = self.easing(amount)

        second = self.color_at_index(j, *extra)
        if self.hsl:
            return first.lerp_hsl(second, amount)
        return first.lerp(second, amount)

    def get(self, x: float = 0.0, *extra) -> Color:
        """Looks up the color at x; extra coordinates index nested gradients."""
        if not self.stops:
            return FALLBACK_COLOR

        if x <= self.stops[0].position or len(self.stops) == 1:
            return self.mix(0, 0, 0.0, *extra)

        for i in range(len(self.stops) - 1):
            s1 = self.stops[i].position
            s2 = self.stops[i + 1].position
            if s1 <= x <= s2:
                if s2 == s1:
                    return self.mix(i + 1, i + 1, 0.0, *extra)
                return self.mix(i, i + 1, (x - s1) / (s2 - s1), *extra)

        last = len(self.stops) - 1
        return self.mix(last, last, 0.0, *extra)

    def get_array(self, xs, *extra) -> np.ndarray:
        """Vectorized get() over a 1D array; returns an (N, 3) float array."""
        xs = np.asarray(xs, dtype=np.float64).ravel()
        extra_arrays = [np.broadcast_to(np.asarray(e, dtype=np.float64), xs.shape) for e in extra]
        out = np.empty((len(xs), 3), dtype=np.float64)
        for n, x in enumerate(xs):
            out[n] = self.get(float(x), *(float(e[n]) for e in extra_arrays))
        return out
