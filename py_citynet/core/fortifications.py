"""
Settlement wall and gate synthesis.

The wall ring is derived morphologically from the settlement footprint:
take the land cells touching the footprint, dilate them, keep the outer
shell, then carve a gate at each cardinal extreme.
"""

from typing import List, Optional, Set, Tuple

import numpy as np
import structlog
from scipy.ndimage import binary_dilation

from ..config.options import LayoutOptions
from ..utils.seeded_random import SeededRandom
from .settlements import Settlement
from .terrain import TerrainGrid

logger = structlog.get_logger()

Coord = Tuple[int, int]

EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


def _sorted_tiles(tiles: Set[Coord]) -> List[Coord]:
    return sorted(tiles, key=lambda t: (t[1], t[0]))


class FortificationGenerator:
    """Builds wall rings for settlements on a terrain grid."""

    def __init__(self, terrain: TerrainGrid, options: Optional[LayoutOptions] = None):
        self.terrain = terrain
        self.options = options or LayoutOptions()

    def roll_walls(self, settlement: Settlement, rng: SeededRandom) -> bool:
        """Fortify with the settlement tier's wall probability."""
        if rng.random() < settlement.size.wall_probability:
            return self.fortify(settlement)
        return False

    def _local_window(self, occupied: Set[Coord], margin: int):
        xs = [x for x, _ in occupied]
        ys = [y for _, y in occupied]
        x0 = min(xs) - margin
        y0 = min(ys) - margin
        width = max(xs) + margin - x0 + 1
        height = max(ys) + margin - y0 + 1

        occ = np.zeros((height, width), dtype=bool)
        for x, y in occupied:
            occ[y - y0, x - x0] = True

        # Cells outside the grid behave as water
        water = np.ones((height, width), dtype=bool)
        gx0, gy0 = max(x0, 0), max(y0, 0)
        gx1 = min(x0 + width, self.terrain.width)
        gy1 = min(y0 + height, self.terrain.height)
        if gx0 < gx1 and gy0 < gy1:
            water[gy0 - y0:gy1 - y0, gx0 - x0:gx1 - x0] = self.terrain.water[gy0:gy1, gx0:gx1]

        return (x0, y0), occ, water

    def wall_ring(self, occupied: Set[Coord]) -> Set[Coord]:
        """Outer shell of the dilated footprint boundary, excluding water."""
        if not occupied:
            return set()
        reach = self.options.wall_padding // 2
        (x0, y0), occ, water = self._local_window(occupied, reach + 2)

        boundary = binary_dilation(occ, structure=EIGHT_CONNECTED) & ~occ & ~water

        if reach > 0:
            structure = np.ones((2 * reach + 1, 2 * reach + 1), dtype=bool)
            candidates = binary_dilation(boundary, structure=structure)
        else:
            candidates = boundary.copy()
        candidates &= ~occ & ~water

        open_cells = ~(candidates | occ)
        outer = candidates & binary_dilation(open_cells, structure=EIGHT_CONNECTED)

        ys, xs = np.nonzero(outer)
        return {(int(x) + x0, int(y) + y0) for x, y in zip(xs, ys)}

    def carve_gates(
        self, walls: Set[Coord], occupied: Set[Coord], center: Coord
    ) -> Tuple[Set[Coord], Set[Coord]]:
        """
        Open a gate at the north, south, east and west extremes of the wall.

        Among equally extreme tiles the one closest to the settlement center
        along the wall wins, then the lower coordinate.
        """
        if not walls:
            return walls, set()

        cx, cy = center
        extremes = [
            (min(walls, key=lambda t: (t[1], abs(t[0] - cx), t[0])), (1, 0)),
            (min(walls, key=lambda t: (-t[1], abs(t[0] - cx), t[0])), (1, 0)),
            (min(walls, key=lambda t: (-t[0], abs(t[1] - cy), t[1])), (0, 1)),
            (min(walls, key=lambda t: (t[0], abs(t[1] - cy), t[1])), (0, 1)),
        ]

        half = self.options.gate_width // 2
        remaining = set(walls)
        gates = set()
        for (gx, gy), (px, py) in extremes:
            for offset in range(-half, half + 1):
                tile = (gx + px * offset, gy + py * offset)
                remaining.discard(tile)
                if tile in occupied or self.terrain.is_water(*tile):
                    continue
                gates.add(tile)

        return remaining, gates

    def fortify(self, settlement: Settlement) -> bool:
        """
        Compute walls and gates for a settlement in place.

        Returns:
            True if the settlement ended up with a non-empty wall ring
        """
        occupied = settlement.all_occupied_tiles()
        if not occupied or len(occupied) < self.options.min_wall_tiles:
            logger.debug(
                "Settlement too small for walls",
                settlement_id=settlement.id,
                occupied=len(occupied),
            )
            settlement.has_walls = False
            settlement.wall_tiles = []
            settlement.gate_tiles = []
            return False

        walls, gates = self.carve_gates(
            self.wall_ring(occupied), occupied, tuple(settlement.center)
        )

        settlement.has_walls = bool(walls)
        settlement.wall_tiles = _sorted_tiles(walls) if walls else []
        settlement.gate_tiles = _sorted_tiles(gates) if walls else []

        logger.debug(
            "Fortified settlement",
            settlement_id=settlement.id,
            walls=len(settlement.wall_tiles),
            gates=len(settlement.gate_tiles),
        )
        return settlement.has_walls
