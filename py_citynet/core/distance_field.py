"""
Multi-source breadth-first distance transforms over the terrain grid.

Distances are 4-connected hop counts to the nearest seed cell. Expansion
stops at `max_distance`; cells beyond it keep the value max_distance + 1.
"""

from collections import deque
from typing import Callable

import numpy as np
import structlog

from ..utils.grid import NEIGHBORS_4
from .terrain import TerrainGrid

logger = structlog.get_logger()


def distance_field_from_mask(seeds: np.ndarray, max_distance: int) -> np.ndarray:
    """
    Calculate a saturating BFS distance field from a boolean seed mask.

    Args:
        seeds: Boolean array (height, width), True on seed cells
        max_distance: Largest distance written; unreached cells get max_distance + 1

    Returns:
        int32 array of hop distances
    """
    if max_distance < 0:
        raise ValueError("max_distance must be non-negative")

    height, width = seeds.shape
    distances = np.full((height, width), max_distance + 1, dtype=np.int32)

    queue = deque()
    for y, x in np.argwhere(seeds):
        distances[y, x] = 0
        queue.append((int(x), int(y)))

    while queue:
        x, y = queue.popleft()
        current = distances[y, x]
        if current >= max_distance:
            continue

        for dx, dy in NEIGHBORS_4:
            nx = x + dx
            ny = y + dy
            if 0 <= nx < width and 0 <= ny < height and distances[ny, nx] > current + 1:
                distances[ny, nx] = current + 1
                queue.append((nx, ny))

    return distances


def compute_distance_field(
    width: int,
    height: int,
    is_seed: Callable[[int, int], bool],
    max_distance: int,
) -> np.ndarray:
    """Distance field seeded by a coordinate predicate."""
    seeds = np.zeros((height, width), dtype=bool)
    for y in range(height):
        for x in range(width):
            seeds[y, x] = bool(is_seed(x, y))
    return distance_field_from_mask(seeds, max_distance)


def river_distance_field(terrain: TerrainGrid, max_distance: int = 25) -> np.ndarray:
    """Hop distance to the nearest river cell."""
    field = distance_field_from_mask(terrain.river, max_distance)
    logger.debug(
        "River distance field computed",
        seeds=int(terrain.river.sum()),
        max_distance=max_distance,
    )
    return field


def coast_distance_field(terrain: TerrainGrid, max_distance: int = 30) -> np.ndarray:
    """Hop distance to the nearest cell below sea level."""
    field = distance_field_from_mask(terrain.below_sea, max_distance)
    logger.debug(
        "Coast distance field computed",
        seeds=int(terrain.below_sea.sum()),
        max_distance=max_distance,
    )
    return field
