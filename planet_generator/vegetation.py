# planet_generator/vegetation.py

"""
================================================================================
VEGETATION PLACEMENT
================================================================================
Chooses spawn points for every vegetation species. Each (face, species) pair
gets one independent Bernoulli trial whose probability is the face's solid
angle times the species density, so density is a rate per steradian. A trial
that lands outside the species' height or steepness band is a miss; it is
never retried.

Data Contract:
---------------
- Inputs:
    - biome (BiomeField): Supplies the items and records accepted points.
    - unit_faces: (F, 3, 3) face vertices on the unit sphere.
    - normalized_heights, steepness: (F,) per-face values.
- Outputs:
    - dict[str, list[tuple]]: species name -> spawn points, in face order.
- Side Effects: Every accepted point is inserted into the biome's index.
- Invariants: Given the same seed, placement is deterministic.
================================================================================
"""

import logging

import numpy as np

from .biome import BiomeField


def face_solid_angles(faces) -> np.ndarray:
    """
    Solid angle subtended at the origin by each triangle of unit vectors
    (Van Oosterom and Strackee). Over a closed sphere mesh they sum to 4*pi.
    """
    a, b, c = faces[:, 0], faces[:, 1], faces[:, 2]
    triple = np.abs(np.einsum('ij,ij->i', a, np.cross(b, c)))
    denominator = (1.0
                   + np.einsum('ij,ij->i', a, b)
                   + np.einsum('ij,ij->i', b, c)
                   + np.einsum('ij,ij->i', c, a))
    return 2.0 * np.arctan2(triple, denominator)


class VegetationPlacer:
    def __init__(self, biome: BiomeField, seed: int, logger: logging.Logger = None):
        self.biome = biome
        self.logger = logger or logging.getLogger(__name__)
        self.rng = np.random.default_rng(seed)

    def place(self, unit_faces, normalized_heights, steepness, solid_angles=None) -> dict:
        unit_faces = np.asarray(unit_faces, dtype=np.float64)
        normalized_heights = np.asarray(normalized_heights, dtype=np.float64)
        steepness = np.asarray(steepness, dtype=np.float64)
        if solid_angles is None:
            solid_angles = face_solid_angles(unit_faces)

        # Spawn points sit on the face's first vertex, projected to the sphere.
        anchors = unit_faces[:, 0]
        anchors = anchors / np.linalg.norm(anchors, axis=1, keepdims=True)

        placed = {}
        for item in self.biome.vegetation_items:
            spawned = self.rng.random(len(unit_faces)) < solid_angles * item.density
            points = placed.setdefault(item.name, [])

            for face in np.flatnonzero(spawned):
                if not item.accepts(normalized_heights[face], steepness[face]):
                    continue
                position = tuple(float(c) for c in anchors[face])
                points.append(position)
                self.biome.add_vegetation(item, position)

            self.logger.debug(
                f"Vegetation '{item.name}': {int(spawned.sum())} trial hit(s), {len(points)} placed."
            )
        return placed
