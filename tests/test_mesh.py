import copy

import numpy as np
import pytest

from planet_generator.errors import PlanetConfigError
from planet_generator.icosphere import IcosphereBuilder
from planet_generator.mesh import (
    GeometryBuffers, MeshAssembler, PlanetConfig, calculate_normals, calculate_steepness, generate_geometry,
)

BUFFER_FIELDS = [
    'positions', 'colors', 'normals',
    'ocean_positions', 'ocean_colors', 'ocean_normals',
    'ocean_morph_positions', 'ocean_morph_normals',
]


@pytest.fixture
def geometry(small_planet_config, logger):
    buffers, _ = generate_geometry(small_planet_config, logger=logger)
    return buffers


class TestPlanetConfig:
    def test_defaults(self):
        config = PlanetConfig.from_dict({})
        assert (config.shape, config.detail, config.scatter) == ('sphere', 5, 1.2)

    def test_detail_is_clamped(self):
        assert PlanetConfig.from_dict({'detail': 50}).detail == 5
        assert PlanetConfig.from_dict({'detail': -1}).detail == 0

    @pytest.mark.parametrize("options", [
        {'shape': 'plane'},
        {'detail': 'high'},
        {'scatter': -1},
        {'seed': 1.5},
        {'log_level': 'LOUD'},
        {'biome': {'noise': {'octaves': 0}}},
    ])
    def test_invalid_configs(self, options):
        with pytest.raises(PlanetConfigError):
            PlanetConfig.from_dict(options)

    def test_log_level_by_name(self):
        assert PlanetConfig.from_dict({'log_level': 'debug'}).log_level == 10


class TestNormals:
    def test_normals_point_outward(self):
        faces = IcosphereBuilder().build(1)
        normals = calculate_normals(faces)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)
        assert np.all(np.einsum('ij,ij->i', normals, faces.mean(axis=1)) > 0)

    def test_reversed_winding_still_points_outward(self):
        faces = IcosphereBuilder().build(1)[:, ::-1]
        assert np.all(np.einsum('ij,ij->i', calculate_normals(faces), faces.mean(axis=1)) > 0)

    def test_degenerate_face_gets_zero_normal(self):
        faces = np.array([[[1.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 0.0, 0.0]]])
        np.testing.assert_array_equal(calculate_normals(faces), [[0.0, 0.0, 0.0]])

    def test_steepness_of_sphere_faces_is_small(self):
        faces = IcosphereBuilder().build(3)
        steepness = calculate_steepness(calculate_normals(faces), faces)
        assert steepness.max() < 0.05


class TestMeshAssembler:
    def test_depth_two_buffer_sizes(self, geometry):
        assert geometry.face_count == 320
        for name in BUFFER_FIELDS:
            buffer = getattr(geometry, name)
            assert buffer.dtype == np.float32
            assert buffer.shape == (320 * 9,)

    def test_vegetation_is_placed(self, geometry):
        assert list(geometry.vegetation) == ['Tree']
        assert len(geometry.vegetation['Tree']) > 0

    def test_land_radius_inside_height_envelope(self, geometry):
        radii = np.linalg.norm(geometry.positions.reshape(-1, 3), axis=1)
        assert radii.min() >= 0.95 - 1e-6
        assert radii.max() <= 1.05 + 1e-6

    def test_ocean_radius_inside_sea_envelope(self, geometry):
        for name in ('ocean_positions', 'ocean_morph_positions'):
            radii = np.linalg.norm(getattr(geometry, name).reshape(-1, 3), axis=1)
            assert radii.min() >= 0.995 - 1e-6
            assert radii.max() <= 1.005 + 1e-6

    def test_ocean_morph_differs_from_rest_pose(self, geometry):
        assert not np.array_equal(geometry.ocean_positions, geometry.ocean_morph_positions)

    def test_colors_are_clamped(self, geometry):
        for name in ('colors', 'ocean_colors'):
            colors = getattr(geometry, name)
            assert colors.min() >= 0.0
            assert colors.max() <= 1.0

    def test_faces_are_flat_shaded(self, geometry):
        colors = geometry.colors.reshape(-1, 3, 3)
        normals = geometry.normals.reshape(-1, 3, 3)
        np.testing.assert_array_equal(colors[:, 0], colors[:, 1])
        np.testing.assert_array_equal(normals[:, 0], normals[:, 2])

    def test_normals_point_outward(self, geometry):
        faces = geometry.positions.reshape(-1, 3, 3)
        normals = geometry.normals.reshape(-1, 3, 3)[:, 0]
        assert np.all(np.einsum('ij,ij->i', normals, faces.mean(axis=1)) > 0)

    def test_deterministic(self, small_planet_config, geometry, logger):
        again, _ = generate_geometry(copy.deepcopy(small_planet_config), logger=logger)
        for name in BUFFER_FIELDS:
            np.testing.assert_array_equal(getattr(geometry, name), getattr(again, name))
        assert geometry.vegetation == again.vegetation

    def test_seed_changes_the_planet(self, small_planet_config, geometry, logger):
        other = dict(small_planet_config, seed=8)
        buffers, _ = generate_geometry(other, logger=logger)
        assert not np.array_equal(geometry.positions, buffers.positions)

    def test_zero_scatter_keeps_icosphere_directions(self, small_planet_config, logger):
        config = dict(small_planet_config, scatter=0)
        buffers, _ = generate_geometry(config, logger=logger)
        positions = buffers.positions.reshape(-1, 3).astype(np.float64)
        directions = positions / np.linalg.norm(positions, axis=1, keepdims=True)
        np.testing.assert_allclose(directions, IcosphereBuilder().build(2).reshape(-1, 3), atol=1e-6)

    def test_ground_effects_only_raise_land(self, small_planet_config, logger):
        flat = copy.deepcopy(small_planet_config)
        flat['biome']['vegetation'] = {'items': [{'name': 'Palm', 'density': 5.0}]}
        mounded = copy.deepcopy(flat)
        mounded['biome']['vegetation']['items'][0]['ground'] = {'radius': 0.2, 'raise': 0.02, 'color': 0x00FF00}

        plain, _ = generate_geometry(flat, logger=logger)
        raised, _ = generate_geometry(mounded, logger=logger)

        assert plain.vegetation == raised.vegetation
        plain_radii = np.linalg.norm(plain.positions.reshape(-1, 3), axis=1)
        raised_radii = np.linalg.norm(raised.positions.reshape(-1, 3), axis=1)
        assert np.all(raised_radii >= plain_radii)
        assert np.any(raised_radii > plain_radii)
        assert not np.array_equal(plain.colors, raised.colors)
        # The ocean shell is untouched by vegetation.
        np.testing.assert_array_equal(plain.ocean_positions, raised.ocean_positions)

    def test_biome_is_kept_for_recoloring(self, small_planet_config, logger):
        assembler = MeshAssembler(small_planet_config, logger=logger)
        buffers = assembler.assemble()
        assert len(assembler.biome.vegetation_index) == len(buffers.vegetation['Tree'])

    def test_message_round_trip(self, geometry):
        message = geometry.to_message()
        assert set(message) == {
            'positions', 'colors', 'normals', 'oceanPositions', 'oceanColors', 'oceanNormals',
            'oceanMorphPositions', 'oceanMorphNormals', 'vegetation',
        }
        rebuilt = GeometryBuffers.from_message(message)
        assert rebuilt.face_count == geometry.face_count
        np.testing.assert_array_equal(rebuilt.normals, geometry.normals)
