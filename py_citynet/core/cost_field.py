"""
Terrain movement cost field for road planning.

Cost per cell is the biome's base cost, raised by elevation above two
thresholds and by local slope. Water overrides everything with a fixed cost.
The existing-road discount is applied by the planner, never baked in here.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import structlog

from .biomes import TerrainCost, movement_cost_lookup
from .terrain import TerrainGrid

logger = structlog.get_logger()


@dataclass
class CostFieldOptions:
    """Elevation and slope cost shaping."""

    high_elevation: float = 0.7  # steep penalty above this
    mid_elevation: float = 0.55  # mild penalty above this
    high_penalty: float = TerrainCost.HIGH_HILL * 3
    mid_penalty: float = TerrainCost.HILL
    slope_weight: float = 20.0
    deep_water_depth: float = 0.15  # depth below sea level counted as deep


def calculate_slope(heights: np.ndarray) -> np.ndarray:
    """Maximum absolute height difference to the 4 neighbours of each cell."""
    padded = np.pad(heights, 1, mode="edge")
    center = padded[1:-1, 1:-1]
    slope = np.zeros_like(heights)
    for shifted in (
        padded[:-2, 1:-1],
        padded[2:, 1:-1],
        padded[1:-1, :-2],
        padded[1:-1, 2:],
    ):
        np.maximum(slope, np.abs(center - shifted), out=slope)
    return slope


def build_cost_field(
    terrain: TerrainGrid, options: Optional[CostFieldOptions] = None
) -> np.ndarray:
    """
    Convert terrain into a float32 movement cost grid.

    Args:
        terrain: Terrain layers
        options: Elevation and slope shaping parameters

    Returns:
        Array (height, width) of non-negative costs
    """
    options = options or CostFieldOptions()
    heights = terrain.heights

    cost = movement_cost_lookup()[terrain.biomes]

    high = heights > options.high_elevation
    mid = ~high & (heights > options.mid_elevation)
    cost = cost + np.where(high, (heights - options.high_elevation) * options.high_penalty, 0.0)
    cost = cost + np.where(mid, (heights - options.mid_elevation) * options.mid_penalty, 0.0)
    cost = cost + calculate_slope(heights) * options.slope_weight

    # Water overrides, lowest priority first
    depth = terrain.sea_level - heights
    cost = np.where(
        terrain.below_sea,
        np.where(depth > options.deep_water_depth, TerrainCost.DEEP_WATER, TerrainCost.SHALLOW_WATER),
        cost,
    )
    cost = np.where(terrain.lake, TerrainCost.SHALLOW_WATER, cost)
    cost = np.where(terrain.river, TerrainCost.RIVER, cost)

    cost = np.maximum(cost, 0.0).astype(np.float32)

    logger.info(
        "Cost field built",
        width=terrain.width,
        height=terrain.height,
        water_cells=int(terrain.water.sum()),
        mean_cost=float(cost.mean()) if cost.size else 0.0,
    )
    return cost
