# planet_generator/__init__.py

from .biome import BiomeConfig, BiomeField, VegetationItem
from .color_gradient import Color, ColorGradient
from .errors import PlanetConfigError
from .icosphere import IcosphereBuilder
from .mesh import GeometryBuffers, MeshAssembler, PlanetConfig, generate_geometry
from .octree import SpatialIndex
from .worker import GenerationWorker, handle_message

__all__ = [
    "BiomeConfig", "BiomeField", "VegetationItem",
    "Color", "ColorGradient",
    "PlanetConfigError",
    "IcosphereBuilder",
    "GeometryBuffers", "MeshAssembler", "PlanetConfig", "generate_geometry",
    "SpatialIndex",
    "GenerationWorker", "handle_message",
]
