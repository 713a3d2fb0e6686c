# planet_generator/presets.py

"""
Named biome and planet configurations. A biome config may reference one of
these by 'preset'; its own keys then override the preset's.
"""

import copy

_TERRAIN_GAIN = {'min': 0.1, 'max': 0.8, 'scale': 2}

BEACH_BIOME = {
    'noise': {
        'min': -0.05,
        'max': 0.05,
        'octaves': 4,
        'lacunarity': 2.0,
        'gain': _TERRAIN_GAIN,
        'warp': 0.3,
        'scale': 1,
        'power': 1.5,
    },
    'colors': [
        [-0.5, 0x994400],
        [0.0, 0xCCAA00],
        [0.4, 0xCC7700],
        [1.0, 0x002222],
    ],
    'sea_colors': [
        [-1, 0x000066],
        [-0.55, 0x0000AA],
        [-0.1, 0x00F2E5],
    ],
    'sea_noise': {
        'min': -0.008,
        'max': 0.008,
        'scale': 6,
    },
    'vegetation': {
        'items': [
            {
                'name': 'Rock',
                'density': 50,
                'minimum_height': 0.1,
                'colors': {'Gray': {'array': [0x775544]}},
            },
            {
                'name': 'PalmTree',
                'density': 50,
                'minimum_height': 0.1,
                'colors': {
                    'Brown': {'array': [0x8B4513, 0x5B3105]},
                    'Green': {'array': [0x22851E, 0x22A51E]},
                    'DarkGreen': {'array': [0x006400]},
                },
                'ground': {
                    'color': 0x229900,
                    'radius': 0.1,
                    'raise': 0.01,
                },
            },
        ],
    },
}

FOREST_BIOME = {
    'noise': {
        'min': -0.05,
        'max': 0.05,
        'octaves': 4,
        'lacunarity': 2.0,
        'gain': _TERRAIN_GAIN,
        'warp': 0.3,
        'scale': 1,
        'power': 0.8,
    },
    'tint_color': 0x113322,
    'colors': [
        [-0.5, 0x332200],
        [0.0, 0x115512],
        [0.4, 0x224411],
        [1.0, 0x006622],
    ],
    'sea_colors': [
        [-1, 0x000066],
        [-0.52, 0x0000AA],
        [-0.1, 0x0042A5],
    ],
    'sea_noise': {
        'min': -0.005,
        'max': 0.005,
        'scale': 5,
    },
    'vegetation': {
        'items': [
            {
                'name': 'Rock',
                'density': 5,
                'minimum_height': 0.1,
                'colors': {'Gray': {'array': [0x888888, 0x616161, 0x414141]}},
            },
            {'name': 'CommonTree', 'density': 5, 'minimum_height': 0.0},
            {'name': 'Bush', 'density': 5, 'minimum_height': 0.0},
            {'name': 'PineTree', 'density': 5},
            {'name': 'TreeStump', 'density': 1},
            {'name': 'TreeStump_Moss', 'density': 1},
            {'name': 'Willow', 'density': 5},
            {'name': 'WoodLog', 'density': 1},
        ],
    },
}

SNOW_FOREST_BIOME = {
    'noise': {
        'min': -0.05,
        'max': 0.05,
        'octaves': 4,
        'lacunarity': 2.0,
        'gain': _TERRAIN_GAIN,
        'warp': 0.3,
        'scale': 1,
        'power': 0.8,
    },
    'tint_color': 0x119922,
    'colors': [
        [-0.5, 0xFF99FF],
        [0.0, 0xFFFFFF],
        [0.4, 0xEEFFFF],
        [1.0, 0xFFFFFF],
    ],
    'sea_colors': [
        [-1, 0x8899CC],
        [-0.52, 0xAACCFF],
        [-0.1, 0xAACCFF],
    ],
    'sea_noise': {
        'min': 0.0,
        'max': 0.001,
        'scale': 5,
    },
    'vegetation': {
        'items': [
            {
                'name': 'Rock_Snow',
                'density': 5,
                'minimum_height': 0.1,
                'colors': {'Gray': {'array': [0x888888, 0x616161, 0x414141]}},
            },
            {'name': 'CommonTree_Snow', 'density': 5, 'minimum_height': 0.0},
            {'name': 'Bush_Snow', 'density': 5, 'minimum_height': 0.0},
            {'name': 'PineTree_Snow', 'density': 5},
            {'name': 'TreeStump_Snow', 'density': 1},
            {'name': 'Willow_Snow', 'density': 5},
            {'name': 'WoodLog_Snow', 'density': 1},
        ],
    },
}

DESERT_BIOME = {
    'noise': {
        'min': -0.03,
        'max': 0.03,
        'octaves': 4,
        'lacunarity': 2.0,
        'gain': {'min': 0.1, 'max': 0.6, 'scale': 1.5},
        'warp': 0.4,
        'scale': 0.8,
        'power': 1.2,
    },
    'tint_color': 0xCC8844,
    'colors': [
        [-0.5, 0xCC8833],
        [0.0, 0xDDAA44],
        [0.4, 0xEECC66],
        [1.0, 0xFFDDAA],
    ],
    'sea_colors': [
        [-1, 0x000044],
        [-0.52, 0x000088],
        [-0.1, 0x0066AA],
    ],
    'sea_noise': {
        'min': -0.002,
        'max': 0.002,
        'scale': 4,
    },
    'vegetation': {
        'items': [
            {
                'name': 'Rock',
                'density': 3,
                'minimum_height': 0.1,
                'colors': {'Gray': {'array': [0xCC8844, 0xAA7733, 0x886622]}},
            },
            {
                'name': 'Cactus',
                'density': 2,
                'minimum_height': 0.0,
                'colors': {'Green': {'array': [0x116611, 0x227722]}},
            },
            {
                'name': 'CactusFlowers',
                'density': 1,
                'minimum_height': 0.0,
                'colors': {
                    'Green': {'array': [0x116611, 0x227722]},
                    'Pink': {'array': [0xFF88AA, 0xFF99BB]},
                },
            },
        ],
    },
}

BIOME_PRESETS = {
    'beach': BEACH_BIOME,
    'forest': FOREST_BIOME,
    'snow_forest': SNOW_FOREST_BIOME,
    'desert': DESERT_BIOME,
}

PLANET_PRESETS = {
    'beach': {
        'biome': {'preset': 'beach'},
        'detail': 5,
        'scatter': 1.2,
        'atmosphere': {'enabled': True, 'color': {'r': 0.1, 'g': 0.3, 'b': 0.6}, 'height': 0.1},
        'shape': 'sphere',
    },
    'forest': {
        'biome': {'preset': 'forest'},
        'detail': 5,
        'scatter': 1.1,
        'atmosphere': {'enabled': True, 'color': {'r': 0.2, 'g': 0.4, 'b': 0.1}, 'height': 0.08},
        'shape': 'sphere',
    },
    'snow_forest': {
        'biome': {'preset': 'snow_forest'},
        'detail': 5,
        'scatter': 1.3,
        'atmosphere': {'enabled': True, 'color': {'r': 0.4, 'g': 0.6, 'b': 0.8}, 'height': 0.12},
        'shape': 'sphere',
    },
    'desert': {
        'biome': {'preset': 'desert'},
        'detail': 5,
        'scatter': 0.8,
        'atmosphere': {'enabled': True, 'color': {'r': 0.6, 'g': 0.4, 'b': 0.2}, 'height': 0.15},
        'shape': 'sphere',
    },
}


def get_biome_preset(name: str) -> dict:
    if name not in BIOME_PRESETS:
        raise KeyError(f"Unknown biome preset '{name}'. Available: {sorted(BIOME_PRESETS)}")
    return copy.deepcopy(BIOME_PRESETS[name])


def get_planet_preset(name: str) -> dict:
    if name not in PLANET_PRESETS:
        raise KeyError(f"Unknown planet preset '{name}'. Available: {sorted(PLANET_PRESETS)}")
    return copy.deepcopy(PLANET_PRESETS[name])
