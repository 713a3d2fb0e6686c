import math

import numpy as np
import pytest

from planet_generator.biome import BiomeField
from planet_generator.icosphere import IcosphereBuilder
from planet_generator.vegetation import VegetationPlacer, face_solid_angles


@pytest.fixture
def faces():
    return IcosphereBuilder().build(2)


def _biome(logger, **item):
    return BiomeField({'vegetation': {'items': [{'name': 'Tree', **item}]}}, logger=logger)


class TestSolidAngles:
    def test_sum_to_full_sphere(self, faces):
        angles = face_solid_angles(faces)
        assert angles.shape == (len(faces),)
        assert np.all(angles > 0)
        assert angles.sum() == pytest.approx(4 * math.pi)


class TestVegetationPlacer:
    def test_minimum_height_band(self, faces, logger):
        # The density makes every trial succeed, so only the band decides.
        biome = _biome(logger, density=1e6, minimum_height=0.5)
        heights = np.linspace(-1.0, 1.0, len(faces))
        placed = VegetationPlacer(biome, seed=1, logger=logger).place(faces, heights, np.zeros(len(faces)))

        assert len(placed['Tree']) == int(np.count_nonzero(heights >= 0.5))
        assert len(biome.vegetation_index) == len(placed['Tree'])

    @pytest.mark.parametrize("seed", range(20))
    def test_band_never_violated_at_normal_density(self, faces, logger, seed):
        biome = _biome(logger, density=20.0, minimum_height=0.5)
        heights = np.where(np.arange(len(faces)) % 2 == 0, 0.9, 0.1)
        placed = VegetationPlacer(biome, seed=seed, logger=logger).place(faces, heights, np.zeros(len(faces)))

        anchors = faces[:, 0] / np.linalg.norm(faces[:, 0], axis=1, keepdims=True)
        high_anchors = {tuple(float(c) for c in v) for v in anchors[heights >= 0.5]}
        assert placed['Tree']
        for point in placed['Tree']:
            assert point in high_anchors

    def test_steepness_band(self, faces, logger):
        biome = _biome(logger, density=1e6, maximum_steepness=0.3)
        steepness = np.where(np.arange(len(faces)) < 100, 0.1, 1.0)
        placed = VegetationPlacer(biome, seed=3, logger=logger).place(faces, np.zeros(len(faces)), steepness)
        assert len(placed['Tree']) == 100

    def test_zero_density_places_nothing(self, faces, logger):
        biome = _biome(logger, density=0.0)
        placed = VegetationPlacer(biome, seed=3, logger=logger).place(faces, np.zeros(len(faces)), np.zeros(len(faces)))
        assert placed == {'Tree': []}

    def test_points_lie_on_unit_sphere(self, faces, logger):
        biome = _biome(logger, density=50.0)
        placed = VegetationPlacer(biome, seed=5, logger=logger).place(faces, np.zeros(len(faces)), np.zeros(len(faces)))
        assert placed['Tree']
        np.testing.assert_allclose(np.linalg.norm(placed['Tree'], axis=1), 1.0)

    def test_same_seed_same_placement(self, faces, logger):
        heights = np.zeros(len(faces))
        first = VegetationPlacer(_biome(logger, density=5.0), seed=9).place(faces, heights, heights)
        second = VegetationPlacer(_biome(logger, density=5.0), seed=9).place(faces, heights, heights)
        assert first == second

    def test_density_is_a_rate_per_steradian(self, logger):
        faces = IcosphereBuilder().build(3)
        heights = np.zeros(len(faces))
        counts = [
            len(VegetationPlacer(_biome(logger, density=10.0), seed=s).place(faces, heights, heights)['Tree'])
            for s in range(10)
        ]
        # Expected 10 * 4*pi ~ 125.7 per run; the mean of ten runs sits well inside +-15%.
        assert np.mean(counts) == pytest.approx(40 * math.pi, rel=0.15)
