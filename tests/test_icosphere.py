import math

import numpy as np
import pytest

from planet_generator.icosphere import IcosphereBuilder, clamp_detail, face_count
from planet_generator.vegetation import face_solid_angles


class TestIcosphereBuilder:
    @pytest.mark.parametrize("depth", [0, 1, 2, 3])
    def test_face_count(self, depth):
        faces = IcosphereBuilder().build(depth)
        assert faces.shape == (20 * 4 ** depth, 3, 3)
        assert face_count(depth) == 20 * 4 ** depth

    @pytest.mark.parametrize("depth", [0, 2, 4])
    def test_vertices_are_unit_length(self, depth):
        faces = IcosphereBuilder().build(depth)
        lengths = np.linalg.norm(faces.reshape(-1, 3), axis=1)
        np.testing.assert_allclose(lengths, 1.0, atol=1e-12)

    def test_depth_is_clamped(self):
        assert clamp_detail(50) == 5
        assert clamp_detail(-3) == 0
        assert IcosphereBuilder().build(-3).shape[0] == 20

    def test_shared_edges_reuse_midpoints(self):
        # A closed icosphere at depth d has 10 * 4^d + 2 distinct vertices;
        # any seam drift would add near-duplicates.
        faces = IcosphereBuilder().build(3)
        unique = np.unique(faces.reshape(-1, 3), axis=0)
        assert len(unique) == 10 * 4 ** 3 + 2

    def test_faces_cover_the_sphere(self):
        faces = IcosphereBuilder().build(2)
        assert face_solid_angles(faces).sum() == pytest.approx(4 * math.pi, rel=1e-9)

    def test_builder_can_be_reused(self):
        builder = IcosphereBuilder()
        first = builder.build(2)
        builder.build(1)
        np.testing.assert_array_equal(builder.build(2), first)
