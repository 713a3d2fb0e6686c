# planet_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides seeded 3D Perlin noise and a configurable fractal sampler
built on top of it. The kernel is a pure, stateless function; the sampler only
holds its configuration and permutation tables.

Data Contract:
---------------
- Inputs:
    - p: A pre-shuffled NumPy permutation table (int array, 512 entries).
    - x, y, z: Flat NumPy float arrays of coordinates.
    - gains: Per-point amplitude falloff between octaves.
    - octaves, lacunarity: Standard noise parameters.
- Outputs:
    - perlin_noise_3d: A NumPy array of noise values (approximately [-1, 1]).
    - FractalNoise.get: Values inside the configured [min, max] envelope.
- Side Effects: None.
- Invariants: Given the same seed and configuration, output is deterministic.
================================================================================
"""

from dataclasses import dataclass
from numbers import Real
from typing import Union

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .errors import PlanetConfigError

# The 12 edge-midpoint gradient directions of a cube.
_GRADIENT_VECTORS = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y, z):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 12]
    return g[0] * x + g[1] * y + g[2] * z

@njit
def perlin_noise_3d(p, x, y, z, gains, octaves=1, lacunarity=2.0):
    """
    Generate fractal 3D Perlin noise using a pre-computed permutation table.
    Each point carries its own gain so the octave falloff can itself vary
    across the surface. The sum is divided by the total amplitude, keeping
    the result near [-1, 1] regardless of the octave count.
    """
    count = x.shape[0]
    total_noise = np.zeros(count)

    for i in range(count):
        noise_val = 0.0
        amplitude = 1.0
        amplitude_sum = 0.0
        frequency = 1.0
        gain = gains[i]

        for _ in range(octaves):
            x_sample = x[i] * frequency
            y_sample = y[i] * frequency
            z_sample = z[i] * frequency

            xi = int(np.floor(x_sample))
            yi = int(np.floor(y_sample))
            zi = int(np.floor(z_sample))

            xf = x_sample - xi
            yf = y_sample - yi
            zf = z_sample - zi

            u = _fade(xf)
            v = _fade(yf)
            w = _fade(zf)

            px = xi % 256
            py = yi % 256
            pz = zi % 256

            # The table is doubled, so every index below stays under 512.
            a = p[px] + py
            aa = p[a] + pz
            ab = p[a + 1] + pz
            b = p[px + 1] + py
            ba = p[b] + pz
            bb = p[b + 1] + pz

            g000 = _gradient(p[aa], xf, yf, zf)
            g100 = _gradient(p[ba], xf - 1, yf, zf)
            g010 = _gradient(p[ab], xf, yf - 1, zf)
            g110 = _gradient(p[bb], xf - 1, yf - 1, zf)
            g001 = _gradient(p[aa + 1], xf, yf, zf - 1)
            g101 = _gradient(p[ba + 1], xf - 1, yf, zf - 1)
            g011 = _gradient(p[ab + 1], xf, yf - 1, zf - 1)
            g111 = _gradient(p[bb + 1], xf - 1, yf - 1, zf - 1)

            y1 = _lerp(_lerp(g000, g100, u), _lerp(g010, g110, u), v)
            y2 = _lerp(_lerp(g001, g101, u), _lerp(g011, g111, u), v)
            octave_noise = _lerp(y1, y2, w)

            noise_val += octave_noise * amplitude
            amplitude_sum += amplitude
            amplitude *= gain
            frequency *= lacunarity

        if amplitude_sum > 0:
            total_noise[i] = noise_val / amplitude_sum

    return total_noise

def create_permutation_table(seed: int) -> np.ndarray:
    """Builds the doubled 512-entry permutation table for a seed."""
    p = np.arange(256, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.stack([p, p]).flatten()


def _read_number(options: dict, key: str, default, positive: bool = False) -> float:
    value = options.get(key, default)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise PlanetConfigError(f"Noise option '{key}' must be a number, got {value!r}")
    if positive and value <= 0:
        raise PlanetConfigError(f"Noise option '{key}' must be positive, got {value!r}")
    return float(value)


@dataclass
class NoiseConfig:
    """Parameters of one fractal noise field."""
    seed: int = DEFAULTS.DEFAULT_SEED
    octaves: int = DEFAULTS.NOISE_OCTAVES
    lacunarity: float = DEFAULTS.NOISE_LACUNARITY
    gain: Union[float, 'NoiseConfig'] = DEFAULTS.NOISE_GAIN
    warp: float = DEFAULTS.NOISE_WARP
    scale: float = DEFAULTS.NOISE_SCALE
    power: float = DEFAULTS.NOISE_POWER
    min: float = DEFAULTS.NOISE_MIN
    max: float = DEFAULTS.NOISE_MAX

    @classmethod
    def from_dict(cls, options, seed: int = None) -> 'NoiseConfig':
        """
        Parses a plain configuration mapping. A 'gain' given as a mapping
        becomes a nested noise field whose own envelope is the gain range.
        """
        if isinstance(options, NoiseConfig):
            return options
        if not isinstance(options, dict):
            raise PlanetConfigError(f"Noise config must be a mapping, got {type(options).__name__}")

        base_seed = options.get('seed', DEFAULTS.DEFAULT_SEED if seed is None else seed)
        if isinstance(base_seed, bool) or not isinstance(base_seed, int):
            raise PlanetConfigError(f"Noise option 'seed' must be an integer, got {base_seed!r}")

        octaves = options.get('octaves', DEFAULTS.NOISE_OCTAVES)
        if isinstance(octaves, bool) or not isinstance(octaves, int) or octaves < 1:
            raise PlanetConfigError(f"Noise option 'octaves' must be a positive integer, got {octaves!r}")

        gain = options.get('gain', DEFAULTS.NOISE_GAIN)
        if isinstance(gain, dict):
            gain_options = {'min': DEFAULTS.NOISE_GAIN, 'max': DEFAULTS.NOISE_GAIN, **gain}
            gain = cls.from_dict(gain_options, seed=base_seed + DEFAULTS.GAIN_SEED_OFFSET)
        else:
            gain = _read_number(options, 'gain', DEFAULTS.NOISE_GAIN)

        noise_config = cls(
            seed=base_seed,
            octaves=octaves,
            lacunarity=_read_number(options, 'lacunarity', DEFAULTS.NOISE_LACUNARITY, positive=True),
            gain=gain,
            warp=_read_number(options, 'warp', DEFAULTS.NOISE_WARP),
            scale=_read_number(options, 'scale', DEFAULTS.NOISE_SCALE, positive=True),
            power=_read_number(options, 'power', DEFAULTS.NOISE_POWER, positive=True),
            min=_read_number(options, 'min', DEFAULTS.NOISE_MIN),
            max=_read_number(options, 'max', DEFAULTS.NOISE_MAX),
        )
        if noise_config.min > noise_config.max:
            raise PlanetConfigError(
                f"Noise envelope is inverted: min={noise_config.min} > max={noise_config.max}"
            )
        return noise_config


class FractalNoise:
    """
    Samples a domain-warped fractal noise field and remaps it into the
    configured [min, max] envelope.
    """
    def __init__(self, config: NoiseConfig):
        self.config = config
        self.min = config.min
        self.max = config.max
        self._p = create_permutation_table(config.seed)
        self._gain_noise = FractalNoise(config.gain) if isinstance(config.gain, NoiseConfig) else None

    def _sample(self, points: np.ndarray, gains: np.ndarray) -> np.ndarray:
        return perlin_noise_3d(
            self._p,
            np.ascontiguousarray(points[:, 0]),
            np.ascontiguousarray(points[:, 1]),
            np.ascontiguousarray(points[:, 2]),
            gains,
            octaves=self.config.octaves,
            lacunarity=self.config.lacunarity
        )

    def get(self, positions):
        """
        Evaluates the field at one 3-vector (returns a float) or at an array
        of shape (..., 3) (returns an array of shape (...)).
        """
        points = np.asarray(positions, dtype=np.float64)
        single = points.ndim == 1
        flat = points.reshape(-1, 3)

        if self._gain_noise is not None:
            gains = np.ascontiguousarray(self._gain_noise.get(flat), dtype=np.float64)
        else:
            gains = np.full(len(flat), float(self.config.gain))

        scaled = flat * self.config.scale

        # Domain warp: displace the lookup by three decorrelated samples.
        if self.config.warp != 0.0:
            warp = np.empty_like(scaled)
            for axis, offset in enumerate(DEFAULTS.WARP_AXIS_OFFSETS):
                warp[:, axis] = self._sample(scaled + np.asarray(offset), gains)
            scaled = scaled + warp * self.config.warp

        raw = self._sample(scaled, gains)

        normalized = np.clip((raw + 1.0) / 2.0, 0.0, 1.0)
        if self.config.power != 1.0:
            normalized = np.power(normalized, self.config.power)

        values = np.clip(self.min + normalized * (self.max - self.min), self.min, self.max)
        if single:
            return float(values[0])
        return values.reshape(points.shape[:-1])
