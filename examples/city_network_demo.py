#!/usr/bin/env python3
"""
Simple demo script showing settlement and road network generation.
"""

import numpy as np

from py_citynet.config import CityGenerationOptions, settings
from py_citynet.core import BiomeType, CityNetworkGenerator, TerrainGrid
from py_citynet.utils.log_config import configure_logging


def build_terrain(width, height):
    """Rolling grassland with a sea in the south and a meandering river."""
    ys, xs = np.mgrid[0:height, 0:width]
    heights = 0.55 + 0.1 * np.sin(xs / 23.0) * np.cos(ys / 31.0)
    heights -= np.clip((ys - height * 0.8) / (height * 0.2), 0, 1) * 0.4

    biomes = np.full((height, width), int(BiomeType.GRASSLAND), dtype=np.uint8)
    biomes[heights > 0.62] = int(BiomeType.FOREST)
    biomes[heights < 0.3] = int(BiomeType.OCEAN)

    river = np.zeros((height, width), dtype=np.float32)
    for y in range(height):
        x = int(width / 2 + 12 * np.sin(y / 15.0))
        river[y, x] = 1.0

    return TerrainGrid(heights=heights, biomes=biomes, river_mask=river)


def main():
    """Demonstrate city network generation."""
    configure_logging(settings)

    print("Py-CityNet Generation Demo")
    print("=" * 40)

    width, height = 256, 192
    terrain = build_terrain(width, height)
    print(f"\nTerrain: {width}x{height}, {int(terrain.water.sum())} water cells")

    generator = CityNetworkGenerator(CityGenerationOptions(city_count=8, min_city_distance=40))
    network = generator.generate(terrain, seed=20240601)

    print(f"\nSettlements ({len(network.settlements)}):")
    print("-" * 30)
    for settlement in network.settlements:
        walls = "walled" if settlement.has_walls else "open"
        print(
            f"  {settlement.id:2d} {settlement.name:<22} {settlement.size.display_name:<8}"
            f" at {tuple(settlement.center)}: {len(settlement.blocks)} blocks, {walls}"
        )

    print(f"\nRoads ({len(network.roads)}):")
    print("-" * 30)
    for road in network.roads:
        flags = []
        if road.has_bridge:
            flags.append("bridge")
        if road.redundant:
            flags.append("redundant")
        print(
            f"  {road.from_settlement_id:2d} -> {road.to_settlement_id:2d}:"
            f" {len(road.path)} cells {' '.join(flags)}"
        )

    near_road = np.count_nonzero(network.road_distance <= 8)
    print(f"\nCells within 8 of a road: {near_road}")
    print(f"Footprint cells: {np.count_nonzero(network.city_mask)}")


if __name__ == "__main__":
    main()
