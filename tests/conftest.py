import logging

import pytest


@pytest.fixture
def logger():
    """A logger for components under test."""
    return logging.getLogger("planet_generator.tests")


@pytest.fixture
def small_planet_config():
    """A quick depth-2 planet with terrain, sea and one unbanded species."""
    return {
        'shape': 'sphere',
        'detail': 2,
        'scatter': 1.2,
        'seed': 7,
        'biome': {
            'noise': {
                'min': -0.05,
                'max': 0.05,
                'octaves': 3,
                'gain': {'min': 0.2, 'max': 0.7, 'scale': 2},
                'warp': 0.2,
            },
            'sea_noise': {'min': -0.005, 'max': 0.005, 'scale': 5},
            'colors': [[-1, 0x224411], [0, 0x88AA44], [1, 0xFFFFFF]],
            'sea_colors': [[-1, 0x000066], [0, 0x0000AA]],
            'vegetation': {'items': [{'name': 'Tree', 'density': 1.0}]},
        },
    }
