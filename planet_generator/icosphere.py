# planet_generator/icosphere.py

"""
================================================================================
ICOSPHERE BUILDER
================================================================================
Builds the raw planet surface: a regular icosahedron recursively subdivided
and projected onto the unit sphere.

Data Contract:
---------------
- Inputs:
    - depth (int): Subdivision passes, clamped to [0, MAX_DETAIL].
- Outputs:
    - A float64 array of shape (20 * 4^depth, 3, 3): three vertex positions
      per face. Vertices are repeated per face; there is no index buffer.
- Side Effects: None.
- Invariants: Every vertex has unit length. Faces that share an edge share
  the bit-identical midpoint vertex.
================================================================================
"""

import math

import numpy as np

from . import config as DEFAULTS

_PHI = (1.0 + math.sqrt(5.0)) / 2.0

_ICOSAHEDRON_VERTICES = [
    (0, 1, _PHI), (0, -1, _PHI), (0, 1, -_PHI), (0, -1, -_PHI),
    (1, _PHI, 0), (-1, _PHI, 0), (1, -_PHI, 0), (-1, -_PHI, 0),
    (_PHI, 0, 1), (-_PHI, 0, 1), (_PHI, 0, -1), (-_PHI, 0, -1),
]

_ICOSAHEDRON_FACES = [
    # Top cap
    (0, 8, 4), (0, 4, 5), (0, 5, 9), (0, 9, 1), (0, 1, 8),
    # Upper band
    (1, 9, 7), (1, 7, 6), (1, 6, 8),
    # Lower band
    (2, 3, 11), (2, 11, 5), (2, 5, 4), (2, 4, 10),
    (3, 2, 10), (3, 10, 6), (3, 6, 7), (3, 7, 11),
    # Bottom cap
    (4, 8, 10), (5, 11, 9), (6, 10, 8), (7, 9, 11),
]


def _normalize(v: tuple) -> tuple:
    length = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    return (v[0] / length, v[1] / length, v[2] / length)


def clamp_detail(depth) -> int:
    return max(0, min(int(depth), DEFAULTS.MAX_DETAIL))


def face_count(depth) -> int:
    return 20 * 4 ** clamp_detail(depth)


class IcosphereBuilder:
    """Subdivides an icosahedron into a unit-sphere face list."""

    def __init__(self):
        self.vertices: list[tuple] = []
        self.faces: list[tuple] = []
        self._midpoints: dict[tuple, int] = {}

    def _midpoint(self, a: int, b: int) -> int:
        key = (a, b) if a < b else (b, a)
        index = self._midpoints.get(key)
        if index is None:
            va, vb = self.vertices[a], self.vertices[b]
            self.vertices.append(_normalize((
                (va[0] + vb[0]) / 2.0,
                (va[1] + vb[1]) / 2.0,
                (va[2] + vb[2]) / 2.0
            )))
            index = len(self.vertices) - 1
            self._midpoints[key] = index
        return index

    def build(self, depth) -> np.ndarray:
        depth = clamp_detail(depth)
        self.vertices = [_normalize(v) for v in _ICOSAHEDRON_VERTICES]
        self.faces = list(_ICOSAHEDRON_FACES)
        self._midpoints = {}

        for _ in range(depth):
            subdivided = []
            for a, b, c in self.faces:
                ab = self._midpoint(a, b)
                bc = self._midpoint(b, c)
                ca = self._midpoint(c, a)
                subdivided.extend((
                    (a, ab, ca),
                    (ab, b, bc),
                    (ca, bc, c),
                    (ab, bc, ca),
                ))
            self.faces = subdivided

        vertices = np.asarray(self.vertices, dtype=np.float64)
        return vertices[np.asarray(self.faces, dtype=np.int64)]
