# planet_generator/biome.py

"""
================================================================================
BIOME FIELD
================================================================================
This module turns a biome configuration into the functions the mesh assembler
samples: terrain and sea height, land and sea color, and the ground effects
(mounds, clearings) that placed vegetation leaves on nearby faces.

Data Contract:
---------------
- Inputs (on initialization):
    - config (BiomeConfig or dict): Noise, gradient, tint and vegetation rules.
      A dict may name a 'preset' whose keys act as defaults.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - Heights inside the configured noise envelopes.
    - Color tuples / (N, 3) float arrays, channels nominally in [0, 1].
- Side Effects: add_vegetation() writes to the owned SpatialIndex. Nothing
  else mutates the field, so a caller may keep it after generation and use
  surface_color() for recoloring.
- Invariants: Given the same seed and configuration, output is deterministic.
================================================================================
"""

import logging
import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Optional

import numpy as np

from . import config as DEFAULTS
from . import presets
from .color_gradient import Color, ColorGradient
from .errors import PlanetConfigError
from .noise import FractalNoise, NoiseConfig
from .octree import SpatialIndex


def _optional_number(options: dict, *keys) -> Optional[float]:
    """Reads the first present key as a float; None if none is set."""
    for key in keys:
        value = options.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, Real):
            raise PlanetConfigError(f"Vegetation option '{key}' must be a number, got {value!r}")
        return float(value)
    return None


@dataclass(frozen=True)
class GroundEffect:
    """How a plant reshapes the faces around it."""
    radius: float
    raise_height: float = 0.0
    color: Optional[Color] = None

    @classmethod
    def from_dict(cls, options: dict) -> 'GroundEffect':
        if not isinstance(options, dict):
            raise PlanetConfigError(f"Ground effect must be a mapping, got {options!r}")
        radius = _optional_number(options, 'radius') or 0.0
        if radius < 0:
            raise PlanetConfigError(f"Ground effect radius must not be negative, got {radius}")
        color = options.get('color')
        return cls(
            radius=radius,
            raise_height=_optional_number(options, 'raise') or 0.0,
            color=Color.parse(color) if color is not None else None,
        )


@dataclass(frozen=True)
class VegetationItem:
    """One vegetation species and the bands it may spawn in."""
    name: str
    density: float = 1.0
    minimum_height: Optional[float] = None
    maximum_height: Optional[float] = None
    minimum_steepness: Optional[float] = None
    maximum_steepness: Optional[float] = None
    ground: Optional[GroundEffect] = None
    # Material palette for the render layer; carried through untouched.
    colors: dict = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_dict(cls, options: dict) -> 'VegetationItem':
        if not isinstance(options, dict):
            raise PlanetConfigError(f"Vegetation item must be a mapping, got {options!r}")
        name = options.get('name')
        if not isinstance(name, str) or not name:
            raise PlanetConfigError(f"Vegetation item needs a non-empty 'name': {options!r}")

        density = _optional_number(options, 'density')
        if density is None:
            density = 1.0
        if density < 0:
            raise PlanetConfigError(f"Vegetation '{name}' density must not be negative, got {density}")

        ground = options.get('ground')
        return cls(
            name=name,
            density=density,
            minimum_height=_optional_number(options, 'minimum_height'),
            maximum_height=_optional_number(options, 'maximum_height'),
            minimum_steepness=_optional_number(options, 'minimum_steepness', 'minimum_slope'),
            maximum_steepness=_optional_number(options, 'maximum_steepness', 'maximum_slope'),
            ground=GroundEffect.from_dict(ground) if ground is not None else None,
            colors=dict(options.get('colors', {})),
        )

    def accepts(self, normalized_height: float, steepness: float) -> bool:
        """True if the face lies inside every band this item sets."""
        if self.minimum_height is not None and normalized_height < self.minimum_height:
            return False
        if self.maximum_height is not None and normalized_height > self.maximum_height:
            return False
        if self.minimum_steepness is not None and steepness < self.minimum_steepness:
            return False
        if self.maximum_steepness is not None and steepness > self.maximum_steepness:
            return False
        return True


@dataclass
class BiomeConfig:
    noise: Optional[NoiseConfig] = None
    sea_noise: Optional[NoiseConfig] = None
    colors: ColorGradient = field(default_factory=ColorGradient)
    sea_colors: ColorGradient = field(default_factory=ColorGradient)
    tint_color: Optional[Color] = None
    vegetation: list = field(default_factory=list)
    preset: Optional[str] = None

    @classmethod
    def from_dict(cls, options, seed: int = DEFAULTS.DEFAULT_SEED) -> 'BiomeConfig':
        """
        Parses a biome mapping. If it names a 'preset', the preset supplies
        every top-level key the mapping leaves out.
        """
        if isinstance(options, BiomeConfig):
            return options
        if options is None:
            options = {}
        if not isinstance(options, dict):
            raise PlanetConfigError(f"Biome config must be a mapping, got {type(options).__name__}")

        preset_name = options.get('preset')
        if preset_name is not None:
            try:
                options = {**presets.get_biome_preset(preset_name), **options}
            except KeyError as e:
                raise PlanetConfigError(str(e)) from e

        noise_config = None
        if options.get('noise') is not None:
            noise_config = NoiseConfig.from_dict(options['noise'], seed=seed)

        sea_noise_config = None
        if options.get('sea_noise') is not None:
            sea_noise_config = NoiseConfig.from_dict(options['sea_noise'], seed=seed + DEFAULTS.SEA_SEED_OFFSET)

        vegetation = options.get('vegetation') or {}
        items = vegetation.get('items', []) if isinstance(vegetation, dict) else vegetation
        if not isinstance(items, (list, tuple)):
            raise PlanetConfigError(f"Vegetation items must be a list, got {items!r}")

        tint = options.get('tint_color')
        return cls(
            noise=noise_config,
            sea_noise=sea_noise_config,
            colors=ColorGradient(options.get('colors') or []),
            sea_colors=ColorGradient(options.get('sea_colors') or []),
            tint_color=Color.parse(tint) if tint is not None else None,
            vegetation=[VegetationItem.from_dict(item) for item in items],
            preset=preset_name,
        )


class BiomeField:
    """
    Position -> height/color for land and sea, plus a vegetation index used
    to apply ground effects around placed plants.
    """
    def __init__(self, config=None, logger: logging.Logger = None, seed: int = DEFAULTS.DEFAULT_SEED):
        self.logger = logger or logging.getLogger(__name__)
        self.config = BiomeConfig.from_dict(config, seed=seed)

        self.noise = FractalNoise(self.config.noise) if self.config.noise else None
        self.sea_noise = FractalNoise(self.config.sea_noise) if self.config.sea_noise else None

        self.min = self.config.noise.min if self.config.noise else DEFAULTS.TERRAIN_MIN
        self.max = self.config.noise.max if self.config.noise else DEFAULTS.TERRAIN_MAX

        self.vegetation_index = SpatialIndex(size=DEFAULTS.VEGETATION_BOUNDS_SIZE)

        self.logger.debug(
            f"BiomeField ready (preset={self.config.preset}, envelope=[{self.min}, {self.max}], "
            f"{len(self.config.vegetation)} vegetation item(s))."
        )

    @property
    def vegetation_items(self) -> list:
        return self.config.vegetation

    # --- Heights ---

    def height(self, positions):
        """Terrain displacement at one 3-vector or an (..., 3) array; 0 if unconfigured."""
        if self.noise is not None:
            return self.noise.get(positions)
        points = np.asarray(positions, dtype=np.float64)
        return 0.0 if points.ndim == 1 else np.zeros(points.shape[:-1])

    def sea_height(self, positions):
        if self.sea_noise is not None:
            return self.sea_noise.get(positions)
        points = np.asarray(positions, dtype=np.float64)
        return 0.0 if points.ndim == 1 else np.zeros(points.shape[:-1])

    def normalized_height(self, heights):
        """Maps the terrain envelope [min, max] onto [-1, 1]."""
        span = self.max - self.min
        values = np.asarray(heights, dtype=np.float64)
        result = np.zeros_like(values) if span <= 0 else 2.0 * (values - self.min) / span - 1.0
        return float(result) if values.ndim == 0 else result

    # --- Colors ---

    def color_array(self, normalized_heights, steepness) -> np.ndarray:
        """Vectorized land color for per-face heights and steepness angles."""
        colors = self.config.colors.get_array(normalized_heights)
        steepness = np.asarray(steepness, dtype=np.float64).ravel()

        # Linear darkening: flat faces keep full brightness, vertical ones drop to the floor.
        steep_factor = np.maximum(0.0, 1.0 - steepness / (math.pi / 2))
        floor = DEFAULTS.STEEPNESS_MIN_BRIGHTNESS
        colors *= (floor + (1.0 - floor) * steep_factor)[:, None]

        if self.config.tint_color is not None:
            tint = np.asarray(self.config.tint_color)
            colors += (tint - colors) * DEFAULTS.TINT_BLEND
        return colors

    def sea_color_array(self, normalized_heights) -> np.ndarray:
        colors = self.config.sea_colors.get_array(normalized_heights)
        depth = np.asarray(normalized_heights, dtype=np.float64).ravel()

        # Deeper water (lower terrain underneath) is darker.
        depth_factor = np.clip(1.0 + depth, 0.0, 1.0)
        floor = DEFAULTS.DEPTH_MIN_BRIGHTNESS
        colors *= (floor + (1.0 - floor) * depth_factor)[:, None]
        return colors

    def color(self, position, normalized_height: float, steepness: float) -> Color:
        return Color(*self.color_array([normalized_height], [steepness])[0])

    def sea_color(self, position, normalized_height: float) -> Color:
        return Color(*self.sea_color_array([normalized_height])[0])

    def surface_color(self, positions) -> np.ndarray:
        """
        Boosted land color at the terrain height under each position, assuming
        flat ground. Read-only; used for time-of-day recoloring.
        """
        points = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        lengths = np.linalg.norm(points, axis=1, keepdims=True)
        directions = np.divide(points, lengths, out=np.zeros_like(points), where=lengths > 0)
        normalized = self.normalized_height(self.height(directions))
        colors = self.color_array(normalized, np.zeros(len(points)))
        return np.clip(colors * DEFAULTS.COLOR_BRIGHTNESS_BOOST, 0.0, 1.0)

    # --- Vegetation ---

    def add_vegetation(self, item: VegetationItem, position) -> bool:
        inserted = self.vegetation_index.insert(position, item)
        if not inserted:
            self.logger.warning(f"Vegetation '{item.name}' at {tuple(position)} is outside the index bounds.")
        return inserted

    def vegetation_near(self, position, radius: float) -> list:
        return self.vegetation_index.query_radius(position, radius)

    def max_vegetation_radius(self) -> float:
        """Largest ground-effect radius over all configured items."""
        return max((item.ground.radius for item in self.config.vegetation if item.ground), default=0.0)

    def face_vegetation_effect(self, vertices, base_color, face_size: float):
        """
        Computes the ground raise for each of a face's three vertices and the
        face color after blending toward nearby plants' ground colors.

        Returns:
            tuple: (np.ndarray of 3 raises, Color)
        """
        vertices = np.asarray(vertices, dtype=np.float64)
        color = Color.parse(tuple(float(c) for c in base_color))
        raises = np.zeros(3)

        window = self.max_vegetation_radius() + 2.0 * face_size
        if window <= 0 or len(self.vegetation_index) == 0:
            return raises, color

        for j in range(3):
            for plant in self.vegetation_near(vertices[j], window):
                ground = plant.data.ground if plant.data is not None else None
                if ground is None or ground.radius <= 0:
                    continue

                distance = float(np.linalg.norm(vertices[j] - np.asarray(plant.position)))
                if distance >= ground.radius:
                    continue

                amount = max(0.0, 1.0 - distance / ground.radius) ** DEFAULTS.GROUND_FALLOFF_POWER
                raises[j] += ground.raise_height * amount
                if ground.color is not None:
                    color = color.lerp(ground.color, amount * DEFAULTS.GROUND_COLOR_BLEND)

        return raises, color
