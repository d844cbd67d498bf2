"""
Biome categories consumed from the terrain classifier.

This module implements:
- The biome enumeration shared with the upstream classifier
- Water / land classification
- Road movement cost per biome
- Settlement site score modifiers per biome
"""

from enum import IntEnum
from typing import Dict

import numpy as np


class BiomeType(IntEnum):
    """Biome types produced by the terrain classifier."""

    DEEP_OCEAN = 0
    OCEAN = 1
    SHALLOW_WATER = 2
    BEACH = 3
    DESERT = 4
    SAVANNA = 5
    GRASSLAND = 6
    FOREST = 7
    RAINFOREST = 8
    TAIGA = 9
    TUNDRA = 10
    SNOW = 11
    MOUNTAIN = 12
    SNOWY_MOUNTAIN = 13
    MARSH = 14
    RIVER = 15
    LAKE = 16


# Biome names for display
BIOME_NAMES = {
    BiomeType.DEEP_OCEAN: "Deep Ocean",
    BiomeType.OCEAN: "Ocean",
    BiomeType.SHALLOW_WATER: "Shallow Water",
    BiomeType.BEACH: "Beach",
    BiomeType.DESERT: "Desert",
    BiomeType.SAVANNA: "Savanna",
    BiomeType.GRASSLAND: "Grassland",
    BiomeType.FOREST: "Forest",
    BiomeType.RAINFOREST: "Rainforest",
    BiomeType.TAIGA: "Taiga",
    BiomeType.TUNDRA: "Tundra",
    BiomeType.SNOW: "Snow",
    BiomeType.MOUNTAIN: "Mountain",
    BiomeType.SNOWY_MOUNTAIN: "Snowy Mountain",
    BiomeType.MARSH: "Marsh",
    BiomeType.RIVER: "River",
    BiomeType.LAKE: "Lake",
}

WATER_BIOMES = frozenset(
    {
        BiomeType.DEEP_OCEAN,
        BiomeType.OCEAN,
        BiomeType.SHALLOW_WATER,
        BiomeType.RIVER,
        BiomeType.LAKE,
    }
)


class TerrainCost:
    """Base movement costs for road building."""

    DEEP_WATER = 10000.0
    SHALLOW_WATER = 500.0
    RIVER = 300.0
    MOUNTAIN = 80.0
    HIGH_HILL = 40.0
    HILL = 15.0
    FOREST = 8.0
    MARSH = 25.0
    DESERT = 4.0
    SNOW = 12.0
    PLAIN = 1.0
    BEACH = 2.0


def is_water_biome(biome: int) -> bool:
    """Check if a biome id denotes open water."""
    return biome in WATER_BIOMES


def get_biome_movement_cost(biome_type: BiomeType) -> float:
    """
    Get road movement cost for a biome type on land.

    Returns:
        Movement cost (higher = harder to traverse)
    """
    movement_cost_map = {
        BiomeType.DEEP_OCEAN: TerrainCost.DEEP_WATER,
        BiomeType.OCEAN: TerrainCost.DEEP_WATER,
        BiomeType.SHALLOW_WATER: TerrainCost.SHALLOW_WATER,
        BiomeType.LAKE: TerrainCost.SHALLOW_WATER,
        BiomeType.RIVER: TerrainCost.SHALLOW_WATER,
        BiomeType.BEACH: TerrainCost.BEACH,
        BiomeType.GRASSLAND: TerrainCost.PLAIN,
        BiomeType.FOREST: TerrainCost.FOREST,
        BiomeType.RAINFOREST: TerrainCost.FOREST * 1.5,
        BiomeType.DESERT: TerrainCost.DESERT,
        BiomeType.SAVANNA: TerrainCost.PLAIN * 1.5,
        BiomeType.TAIGA: TerrainCost.FOREST * 1.2,
        BiomeType.TUNDRA: TerrainCost.SNOW * 0.7,
        BiomeType.SNOW: TerrainCost.SNOW,
        BiomeType.MOUNTAIN: TerrainCost.MOUNTAIN,
        BiomeType.SNOWY_MOUNTAIN: TerrainCost.MOUNTAIN * 1.5,
        BiomeType.MARSH: TerrainCost.MARSH,
    }

    return movement_cost_map.get(biome_type, TerrainCost.PLAIN)


def get_biome_site_modifier(biome_type: BiomeType) -> float:
    """
    Get the settlement site score adjustment for a biome.

    Returns:
        Additive score modifier (positive = attractive)
    """
    site_modifier_map = {
        BiomeType.GRASSLAND: 0.15,
        BiomeType.FOREST: 0.15,
        BiomeType.SAVANNA: 0.1,
        BiomeType.BEACH: 0.08,
        BiomeType.TUNDRA: -0.1,
        BiomeType.TAIGA: -0.1,
        BiomeType.DESERT: -0.12,
        BiomeType.MOUNTAIN: -0.5,
        BiomeType.SNOWY_MOUNTAIN: -0.5,
    }

    return site_modifier_map.get(biome_type, 0.0)


def build_lookup(table: Dict[BiomeType, float], default: float) -> np.ndarray:
    """Dense array indexed by biome id, for vectorized lookups."""
    lookup = np.full(len(BiomeType), default, dtype=np.float32)
    for biome, value in table.items():
        lookup[int(biome)] = value
    return lookup


def movement_cost_lookup() -> np.ndarray:
    return build_lookup(
        {biome: get_biome_movement_cost(biome) for biome in BiomeType},
        TerrainCost.PLAIN,
    )
