# bake_planet.py

"""
================================================================================
OFFLINE PLANET BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a planet once and saving
its geometry buffers, vegetation spawn points and a preview image ("baking"),
so a viewer can load them instead of regenerating at startup.

Usage:
    python bake_planet.py --config path/to/planet.json
    python bake_planet.py --preset forest --output baked_planets
    python bake_planet.py --all-presets
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import multiprocessing
import numpy as np
from PIL import Image
from tqdm import tqdm

# Add project root to Python path to allow importing from planet_generator
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from planet_generator import config as DEFAULTS
from planet_generator import presets
from planet_generator.mesh import GeometryBuffers
from planet_generator.worker import CREATE_GEOMETRY, GEOMETRY, GenerationWorker, handle_message

PREVIEW_WIDTH = 512
PREVIEW_HEIGHT = 256


def render_preview(buffers: GeometryBuffers, width: int = PREVIEW_WIDTH, height: int = PREVIEW_HEIGHT) -> Image.Image:
    """
    Splats each land face's color at its centroid's longitude/latitude into
    an equirectangular image. Empty pixels take the nearest filled pixel in
    their row so the preview has no holes.
    """
    positions = buffers.positions.reshape(-1, 3, 3).astype(np.float64)
    colors = buffers.colors.reshape(-1, 3, 3)[:, 0, :]
    centroids = positions.mean(axis=1)
    radii = np.linalg.norm(centroids, axis=1)

    longitude = np.arctan2(centroids[:, 2], centroids[:, 0])
    latitude = np.arcsin(np.clip(centroids[:, 1] / radii, -1.0, 1.0))
    px = ((longitude + np.pi) / (2 * np.pi) * (width - 1)).round().astype(int)
    py = ((np.pi / 2 - latitude) / np.pi * (height - 1)).round().astype(int)

    image = np.zeros((height, width, 3), dtype=np.float32)
    filled = np.zeros((height, width), dtype=bool)
    image[py, px] = colors
    filled[py, px] = True

    for row in range(height):
        columns = np.flatnonzero(filled[row])
        if len(columns) == 0:
            continue
        nearest = columns[np.abs(np.arange(width)[:, None] - columns[None, :]).argmin(axis=1)]
        image[row] = image[row, nearest]

    return Image.fromarray((np.clip(image, 0.0, 1.0) * 255).astype(np.uint8), 'RGB')


def save_bake(name: str, planet_config: dict, data: dict, output_dir: str) -> str:
    """Writes one generated planet to output_dir/name. Returns the directory."""
    planet_dir = os.path.join(output_dir, name)
    os.makedirs(planet_dir, exist_ok=True)

    buffers = GeometryBuffers.from_message(data)
    np.savez_compressed(
        os.path.join(planet_dir, "geometry.npz"),
        positions=buffers.positions,
        colors=buffers.colors,
        normals=buffers.normals,
        ocean_positions=buffers.ocean_positions,
        ocean_colors=buffers.ocean_colors,
        ocean_normals=buffers.ocean_normals,
        ocean_morph_positions=buffers.ocean_morph_positions,
        ocean_morph_normals=buffers.ocean_morph_normals,
    )
    with open(os.path.join(planet_dir, "vegetation.json"), 'w') as f:
        json.dump({species: [list(p) for p in points] for species, points in buffers.vegetation.items()}, f)
    with open(os.path.join(planet_dir, "generation_config.json"), 'w') as f:
        json.dump(planet_config, f, indent=2)
    render_preview(buffers).save(os.path.join(planet_dir, "preview.png"), 'PNG')
    return planet_dir


def _bake_preset(args: tuple) -> tuple:
    """Pool task: generate one preset in this process and save it."""
    name, output_dir = args
    planet_config = presets.get_planet_preset(name)
    response = handle_message({'type': CREATE_GEOMETRY, 'data': planet_config, 'requestId': name})
    if response['type'] != GEOMETRY:
        return name, None, response['error']
    return name, save_bake(name, planet_config, response['data'], output_dir), None


def bake_all_presets(output_dir: str, logger: logging.Logger) -> int:
    names = sorted(presets.PLANET_PRESETS)
    num_workers = max(1, min(len(names), multiprocessing.cpu_count() - 1))
    logger.info(f"Baking {len(names)} presets with {num_workers} worker processes.")

    failures = 0
    tasks = [(name, output_dir) for name in names]
    with multiprocessing.Pool(processes=num_workers) as pool:
        for name, planet_dir, error in tqdm(pool.imap_unordered(_bake_preset, tasks), total=len(tasks), desc="Baking Planets"):
            if error is not None:
                failures += 1
                logger.error(f"Preset '{name}' failed: {error}")
            else:
                logger.info(f"Preset '{name}' saved to: {planet_dir}")
    return failures


def bake_planet(name: str, planet_config: dict, output_dir: str, logger: logging.Logger) -> bool:
    logger.info(f"Generating planet '{name}'...")
    with GenerationWorker(logger=logger) as worker:
        worker.post_message({'type': CREATE_GEOMETRY, 'data': planet_config})
        response = worker.wait()

    if response is None or response['type'] != GEOMETRY:
        logger.critical(f"Generation failed: {response['error'] if response else 'no response'}")
        return False

    planet_dir = save_bake(name, planet_config, response['data'], output_dir)
    logger.info(f"Baked planet saved to: {planet_dir}")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Offline Planet Baker for the low-poly planet generator.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", type=str, help="Path to a JSON planet configuration.")
    source.add_argument("--preset", type=str, choices=sorted(presets.PLANET_PRESETS), help="Name of a built-in planet preset.")
    source.add_argument("--all-presets", action="store_true", help="Bake every built-in preset in parallel.")
    parser.add_argument("--output", type=str, default="baked_planets", help="Directory the bakes are written to.")
    args = parser.parse_args(argv)

    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format=DEFAULTS.LOG_FORMAT,
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")
    start_time = time.perf_counter()

    if args.all_presets:
        failures = bake_all_presets(args.output, logger)
        logger.info(f"Baking complete! Total time: {time.perf_counter() - start_time:.2f} seconds.")
        return 1 if failures else 0

    # 2. --- Load Configuration ---
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        try:
            with open(args.config, 'r') as f:
                planet_config = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return 1
        name = os.path.splitext(os.path.basename(args.config))[0]
    else:
        planet_config = presets.get_planet_preset(args.preset)
        name = args.preset

    ok = bake_planet(name, planet_config, args.output, logger)
    logger.info(f"Baking complete! Total time: {time.perf_counter() - start_time:.2f} seconds.")
    return 0 if ok else 1


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
