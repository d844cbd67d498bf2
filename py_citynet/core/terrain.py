"""
Terrain input consumed by the settlement and road generators.

The heightmap, biome classification and water masks come from upstream
generation stages; this module only validates and queries them.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .biomes import WATER_BIOMES, BiomeType

# Mask values above this count as water
MASK_THRESHOLD = 0.5


@dataclass
class TerrainGrid:
    """Per-cell terrain layers, all shaped (height, width)."""

    heights: np.ndarray  # normalized 0-1
    biomes: np.ndarray  # BiomeType ids
    river_mask: Optional[np.ndarray] = None  # river strength 0-1
    lake_mask: Optional[np.ndarray] = None  # lake strength 0-1
    sea_level: float = 0.3

    river: np.ndarray = field(init=False, repr=False)
    lake: np.ndarray = field(init=False, repr=False)
    below_sea: np.ndarray = field(init=False, repr=False)
    water: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.heights = np.asarray(self.heights, dtype=np.float32)
        if self.heights.ndim != 2:
            raise ValueError("Heights must be a 2D array indexed [y, x]")

        shape = self.heights.shape
        self.biomes = np.asarray(self.biomes, dtype=np.uint8)
        if self.river_mask is None:
            self.river_mask = np.zeros(shape, dtype=np.float32)
        if self.lake_mask is None:
            self.lake_mask = np.zeros(shape, dtype=np.float32)
        self.river_mask = np.asarray(self.river_mask, dtype=np.float32)
        self.lake_mask = np.asarray(self.lake_mask, dtype=np.float32)

        for name in ("biomes", "river_mask", "lake_mask"):
            if getattr(self, name).shape != shape:
                raise ValueError(
                    f"{name} shape {getattr(self, name).shape} does not match heights {shape}"
                )
        if not 0.0 <= self.sea_level <= 1.0:
            raise ValueError("Sea level must lie in [0, 1]")
        if self.biomes.size and int(self.biomes.max()) >= len(BiomeType):
            raise ValueError("Biome ids must be valid BiomeType values")

        self.river = self.river_mask > MASK_THRESHOLD
        self.lake = self.lake_mask > MASK_THRESHOLD
        self.below_sea = self.heights < self.sea_level
        self.water = self.below_sea | self.river | self.lake

    @property
    def width(self) -> int:
        return self.heights.shape[1]

    @property
    def height(self) -> int:
        return self.heights.shape[0]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_water(self, x: int, y: int) -> bool:
        """Below sea level, river or lake. Cells off the grid count as water."""
        if not self.in_bounds(x, y):
            return True
        return bool(self.water[y, x])

    def is_river_or_lake(self, x: int, y: int) -> bool:
        return bool(self.river[y, x] or self.lake[y, x])

    def water_biome_mask(self) -> np.ndarray:
        """Cells whose biome classification is a water biome."""
        return np.isin(self.biomes, [int(b) for b in WATER_BIOMES])

    @classmethod
    def flat(
        cls,
        width: int,
        height: int,
        elevation: float = 0.5,
        biome: BiomeType = BiomeType.GRASSLAND,
        sea_level: float = 0.3,
    ) -> "TerrainGrid":
        """Uniform terrain, handy as a starting point for scenarios."""
        return cls(
            heights=np.full((height, width), elevation, dtype=np.float32),
            biomes=np.full((height, width), int(biome), dtype=np.uint8),
            sea_level=sea_level,
        )
