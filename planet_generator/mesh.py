# planet_generator/mesh.py

"""
================================================================================
MESH ASSEMBLER
================================================================================
This module contains the MeshAssembler class, which runs the whole planet
pipeline: subdivide, scatter, displace land and sea, shade each face, place
vegetation, apply ground effects and pack the render buffers.

Data Contract:
---------------
- Inputs (on initialization):
    - config (PlanetConfig or dict): Shape, detail, scatter, seed, biome.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from assemble()):
    - GeometryBuffers: flat float32 arrays with 9 floats per face for land
      and ocean positions/colors/normals and the ocean morph target, plus
      the vegetation map.
- Side Effects: Logs messages using the provided logger. Fills the
  BiomeField's vegetation index.
- Invariants: Given the same configuration, every buffer is bit-identical
  across runs. Vertices are never shared between faces, so every face is
  displaced and shaded on its own (faceted look).
================================================================================
"""

import logging
import math
import time
from dataclasses import dataclass, field
from numbers import Real

import numpy as np

from . import config as DEFAULTS
from .biome import BiomeConfig, BiomeField
from .errors import PlanetConfigError
from .icosphere import IcosphereBuilder, clamp_detail
from .noise import FractalNoise, NoiseConfig
from .vegetation import VegetationPlacer, face_solid_angles

# Coordinate order each scatter axis samples the field at.
_SCATTER_SWIZZLES = ((0, 1, 2), (1, 2, 0), (2, 0, 1))


def resolve_log_level(level) -> int:
    """Accepts a logging level int or its name ('DEBUG', 'info', ...)."""
    if level is None:
        return DEFAULTS.DEFAULT_LOG_LEVEL
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            return resolved
    raise PlanetConfigError(f"Unknown log level {level!r}")


@dataclass
class PlanetConfig:
    shape: str = DEFAULTS.DEFAULT_SHAPE
    detail: int = DEFAULTS.DEFAULT_DETAIL
    scatter: float = DEFAULTS.DEFAULT_SCATTER
    seed: int = DEFAULTS.DEFAULT_SEED
    biome: BiomeConfig = field(default_factory=BiomeConfig)
    log_level: int = DEFAULTS.DEFAULT_LOG_LEVEL
    # Render-layer options; carried through to the output untouched.
    atmosphere: dict = field(default_factory=dict)
    material: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, options) -> 'PlanetConfig':
        if isinstance(options, PlanetConfig):
            return options
        if options is None:
            options = {}
        if not isinstance(options, dict):
            raise PlanetConfigError(f"Planet config must be a mapping, got {type(options).__name__}")

        shape = options.get('shape', DEFAULTS.DEFAULT_SHAPE)
        if shape not in DEFAULTS.SUPPORTED_SHAPES:
            raise PlanetConfigError(
                f"Unsupported planet shape {shape!r}; expected one of {list(DEFAULTS.SUPPORTED_SHAPES)}"
            )

        detail = options.get('detail', DEFAULTS.DEFAULT_DETAIL)
        if isinstance(detail, bool) or not isinstance(detail, Real):
            raise PlanetConfigError(f"Planet 'detail' must be a number, got {detail!r}")

        scatter = options.get('scatter', DEFAULTS.DEFAULT_SCATTER)
        if isinstance(scatter, bool) or not isinstance(scatter, Real) or scatter < 0:
            raise PlanetConfigError(f"Planet 'scatter' must be a non-negative number, got {scatter!r}")

        seed = options.get('seed', DEFAULTS.DEFAULT_SEED)
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise PlanetConfigError(f"Planet 'seed' must be an integer, got {seed!r}")

        return cls(
            shape=shape,
            detail=clamp_detail(detail),
            scatter=float(scatter),
            seed=seed,
            biome=BiomeConfig.from_dict(options.get('biome'), seed=seed),
            log_level=resolve_log_level(options.get('log_level')),
            atmosphere=dict(options.get('atmosphere') or {}),
            material=dict(options.get('material') or {}),
        )


@dataclass
class GeometryBuffers:
    positions: np.ndarray
    colors: np.ndarray
    normals: np.ndarray
    ocean_positions: np.ndarray
    ocean_colors: np.ndarray
    ocean_normals: np.ndarray
    ocean_morph_positions: np.ndarray
    ocean_morph_normals: np.ndarray
    vegetation: dict
    face_count: int

    def to_message(self) -> dict:
        """The 'data' payload of a geometry response."""
        return {
            'positions': self.positions,
            'colors': self.colors,
            'normals': self.normals,
            'oceanPositions': self.ocean_positions,
            'oceanColors': self.ocean_colors,
            'oceanNormals': self.ocean_normals,
            'oceanMorphPositions': self.ocean_morph_positions,
            'oceanMorphNormals': self.ocean_morph_normals,
            'vegetation': self.vegetation,
        }

    @classmethod
    def from_message(cls, data: dict) -> 'GeometryBuffers':
        return cls(
            positions=data['positions'],
            colors=data['colors'],
            normals=data['normals'],
            ocean_positions=data['oceanPositions'],
            ocean_colors=data['oceanColors'],
            ocean_normals=data['oceanNormals'],
            ocean_morph_positions=data['oceanMorphPositions'],
            ocean_morph_normals=data['oceanMorphNormals'],
            vegetation=data['vegetation'],
            face_count=len(data['positions']) // 9,
        )


def calculate_normals(faces: np.ndarray) -> np.ndarray:
    """
    Flat normal of each (3, 3) face, flipped to point away from the origin.
    Degenerate faces get a zero vector.
    """
    a, b, c = faces[:, 0], faces[:, 1], faces[:, 2]
    normals = np.cross(b - a, c - a)
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    normals = np.divide(normals, lengths, out=np.zeros_like(normals), where=lengths > 0)

    centroids = faces.mean(axis=1)
    inward = np.einsum('ij,ij->i', normals, centroids) < 0
    normals[inward] *= -1.0
    return normals


def calculate_steepness(normals: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Angle between each face normal and the outward radial: 0 flat, pi/2 vertical."""
    centroids = faces.mean(axis=1)
    lengths = np.linalg.norm(centroids, axis=1, keepdims=True)
    radial = np.divide(centroids, lengths, out=np.zeros_like(centroids), where=lengths > 0)
    alignment = np.abs(np.einsum('ij,ij->i', normals, radial))
    return np.arccos(np.clip(alignment, 0.0, 1.0))


def _normalize_rows(vectors: np.ndarray) -> np.ndarray:
    lengths = np.linalg.norm(vectors, axis=-1, keepdims=True)
    return np.divide(vectors, lengths, out=np.zeros_like(vectors), where=lengths > 0)


def _per_vertex(face_values: np.ndarray) -> np.ndarray:
    """Repeats one (F, 3) value per face for each of its three vertices, flattened."""
    return np.repeat(face_values, 3, axis=0).astype(np.float32).ravel()


class MeshAssembler:
    """
    Builds the planet's land and ocean geometry from a PlanetConfig.
    The BiomeField stays available afterwards for read-only recoloring.
    """
    def __init__(self, config, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger(__name__)
        self.config = PlanetConfig.from_dict(config)
        self.biome = BiomeField(self.config.biome, logger=self.logger, seed=self.config.seed)

    def _scatter(self, vertices: np.ndarray, face_size: float) -> np.ndarray:
        """
        Jitters (N, 3) unit vertices with a warped noise vector and projects
        them back onto the unit sphere.
        """
        amount = self.config.scatter * face_size
        if amount <= 0:
            return vertices.copy()

        scatter_noise = FractalNoise(NoiseConfig(
            seed=self.config.seed + DEFAULTS.SCATTER_SEED_OFFSET,
            scale=DEFAULTS.SCATTER_NOISE_SCALE,
            warp=DEFAULTS.SCATTER_NOISE_WARP,
            min=-amount / 2.0,
            max=amount / 2.0,
        ))

        offsets = np.empty_like(vertices)
        for axis, (swizzle, shift) in enumerate(zip(_SCATTER_SWIZZLES, DEFAULTS.SCATTER_AXIS_OFFSETS)):
            offsets[:, axis] = scatter_noise.get(vertices[:, list(swizzle)] + np.asarray(shift))
        return _normalize_rows(vertices + offsets)

    def _apply_ground_effects(self, base: np.ndarray, land: np.ndarray,
                              face_colors: np.ndarray, face_size: float) -> np.ndarray:
        """
        Raises land vertices around plants with a ground effect and tints
        their faces. Returns the indices of the faces that changed.
        """
        touched = []
        for f in range(len(base)):
            raises, color = self.biome.face_vegetation_effect(base[f], face_colors[f], face_size)
            changed = False
            if raises.any():
                land[f] += base[f] * raises[:, None]
                changed = True
            if tuple(color) != tuple(face_colors[f]):
                face_colors[f] = color
                changed = True
            if changed:
                touched.append(f)
        return np.asarray(touched, dtype=np.int64)

    def assemble(self) -> GeometryBuffers:
        start_time = time.perf_counter()
        cfg = self.config

        # --- 1. Raw Icosphere ---
        raw = IcosphereBuilder().build(cfg.detail)
        face_count = len(raw)
        face_size = 4.0 * math.pi / face_count
        self.logger.info(f"Assembling planet: detail={cfg.detail}, {face_count} faces, seed={cfg.seed}")

        # --- 2. Scatter ---
        base = self._scatter(raw.reshape(-1, 3), face_size)

        # --- 3. Land & Ocean Displacement ---
        # Both shells are measured from the same scattered base so they stay aligned.
        heights = self.biome.height(base)
        land = base * (heights + 1.0)[:, None]
        ocean = base * (self.biome.sea_height(base) + 1.0)[:, None]
        morph_heights = self.biome.sea_height(base + np.asarray(DEFAULTS.OCEAN_MORPH_PHASE))
        ocean_morph = base * (morph_heights + 1.0)[:, None]

        base = base.reshape(face_count, 3, 3)
        land = land.reshape(face_count, 3, 3)
        ocean = ocean.reshape(face_count, 3, 3)
        ocean_morph = ocean_morph.reshape(face_count, 3, 3)
        self.logger.debug("Displacement complete.")

        # --- 4. Flat Shading ---
        normals = calculate_normals(land)
        steepness = calculate_steepness(normals, land)
        normalized = self.biome.normalized_height(heights).reshape(face_count, 3).mean(axis=1)

        boost = DEFAULTS.COLOR_BRIGHTNESS_BOOST
        face_colors = np.clip(self.biome.color_array(normalized, steepness) * boost, 0.0, 1.0)
        ocean_colors = np.clip(self.biome.sea_color_array(normalized) * boost, 0.0, 1.0)

        # --- 5. Vegetation ---
        placer = VegetationPlacer(self.biome, seed=cfg.seed + DEFAULTS.VEGETATION_SEED_OFFSET, logger=self.logger)
        vegetation = placer.place(base, normalized, steepness, solid_angles=face_solid_angles(raw))
        total_plants = sum(len(points) for points in vegetation.values())
        self.logger.info(f"Placed {total_plants} vegetation instance(s) across {len(vegetation)} species.")

        # --- 6. Ground Effects ---
        if self.biome.max_vegetation_radius() > 0 and total_plants > 0:
            touched = self._apply_ground_effects(base, land, face_colors, face_size)
            if len(touched):
                normals[touched] = calculate_normals(land[touched])
                face_colors = np.clip(face_colors, 0.0, 1.0)
            self.logger.debug(f"Ground effects changed {len(touched)} face(s).")

        buffers = GeometryBuffers(
            positions=land.astype(np.float32).ravel(),
            colors=_per_vertex(face_colors),
            normals=_per_vertex(normals),
            ocean_positions=ocean.astype(np.float32).ravel(),
            ocean_colors=_per_vertex(ocean_colors),
            ocean_normals=_per_vertex(calculate_normals(ocean)),
            ocean_morph_positions=ocean_morph.astype(np.float32).ravel(),
            ocean_morph_normals=_per_vertex(calculate_normals(ocean_morph)),
            vegetation=vegetation,
            face_count=face_count,
        )

        elapsed = time.perf_counter() - start_time
        self.logger.info(f"Planet assembled in {elapsed:.2f} seconds.")
        return buffers


def generate_geometry(config, logger: logging.Logger = None):
    """
    Runs the full pipeline for one configuration.

    Returns:
        tuple: (GeometryBuffers, BiomeField). The biome may be kept for
        recoloring; it is not touched again by the generator.
    """
    assembler = MeshAssembler(config, logger=logger)
    return assembler.assemble(), assembler.biome
