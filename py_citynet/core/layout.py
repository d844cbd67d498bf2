"""
Organic building layout growth.

A settlement starts from a central civic block. Each further block is grown
off a randomly chosen placed block in a random cardinal direction, separated
by a street, and kept only if it stays inside the settlement's influence
radius and passes placement validation. Blocks reserve a street buffer around
every tile so neighbours never touch.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

import numpy as np
import structlog

from ..config.options import LayoutOptions
from ..utils.grid import chebyshev_square
from .buildings import (
    RECTANGLE,
    BuildingFootprint,
    BuildingType,
    Corner,
    Direction,
    LShape,
    PlusShape,
    TShape,
    UShape,
    ZShape,
    footprint_tiles,
)
from ..utils.seeded_random import SeededRandom
from .settlements import CitySize
from .terrain import TerrainGrid

logger = structlog.get_logger()

Coord = Tuple[int, int]

GROWTH_DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))
CORNERS = list(Corner)
DIRECTIONS = list(Direction)


@dataclass
class LayoutState:
    """In-progress layout: placed blocks and every reserved tile."""

    blocks: List[BuildingFootprint] = field(default_factory=list)
    occupied: Set[Coord] = field(default_factory=set)
    attempts: int = 0


class SettlementBuilder:
    """Grows building layouts on a terrain grid."""

    def __init__(self, terrain: TerrainGrid, options: Optional[LayoutOptions] = None):
        self.terrain = terrain
        self.options = options or LayoutOptions()
        self.street_buffer = chebyshev_square(self.options.street_width)

        self.buildable = ~(
            terrain.water | (terrain.heights > self.options.max_build_elevation)
        )
        margin = self.options.border_margin
        if margin:
            self.buildable[:margin, :] = False
            self.buildable[-margin:, :] = False
            self.buildable[:, :margin] = False
            self.buildable[:, -margin:] = False

    def is_buildable(self, x: int, y: int) -> bool:
        """Inside the border margin, dry and below the elevation cap."""
        if not self.terrain.in_bounds(x, y):
            return False
        return bool(self.buildable[y, x])

    def can_place(self, state: LayoutState, origin: Coord, size: Coord, shape=RECTANGLE) -> bool:
        """Placement validation against terrain and already reserved tiles."""
        tiles = footprint_tiles(origin, size, shape)
        if not tiles:
            return False

        for tile in tiles:
            if not self.is_buildable(*tile):
                return False
            if tile in state.occupied:
                return False

        return True

    def reserved_tiles(self, block: BuildingFootprint) -> Set[Coord]:
        """A block's tiles plus the street buffer around them."""
        return {
            (x + dx, y + dy)
            for x, y in block.occupied_tiles()
            for dx, dy in self.street_buffer
        }

    def site_reserve(self, center: Coord) -> Set[Coord]:
        """Tiles kept free for the civic block of a settlement not yet grown."""
        radius = self.options.central_extent[1] // 2 + self.options.street_width
        return {(center[0] + dx, center[1] + dy) for dx, dy in chebyshev_square(radius)}

    def place(self, state: LayoutState, block: BuildingFootprint) -> None:
        """Add a block and reserve its tiles plus the street buffer around them."""
        state.blocks.append(block)
        state.occupied.update(self.reserved_tiles(block))

    def random_building_type(self, distance_ratio: float, rng: SeededRandom) -> BuildingType:
        """Weighted use category; civic and trade near the center, industry outside."""
        roll = rng.random()

        if distance_ratio < 0.3:
            if roll < 0.08:
                return BuildingType.CIVIC
            if roll < 0.25:
                return BuildingType.COMMERCIAL
            if roll < 0.45:
                return BuildingType.MARKET
            return BuildingType.RESIDENTIAL

        if distance_ratio < 0.65:
            if roll < 0.12:
                return BuildingType.COMMERCIAL
            if roll < 0.22:
                return BuildingType.INDUSTRIAL
            return BuildingType.RESIDENTIAL

        if roll < 0.15:
            return BuildingType.INDUSTRIAL
        if roll < 0.22:
            return BuildingType.MILITARY
        return BuildingType.RESIDENTIAL

    def random_block_shape(self, size: Coord, rng: SeededRandom):
        """Weighted shape roll. Blocks narrower than 4 are always rectangles."""
        if size[0] < 4 or size[1] < 4:
            return RECTANGLE

        roll = rng.random()
        if roll < 0.45:
            return RECTANGLE
        if roll < 0.65:
            return LShape(cut_corner=rng.choice(CORNERS))
        if roll < 0.78:
            return TShape(orientation=rng.choice(DIRECTIONS))
        if roll < 0.88:
            return UShape(open_side=rng.choice(DIRECTIONS))
        if roll < 0.95:
            return PlusShape()
        return ZShape(flipped=rng.random() < 0.5)

    def adjacent_origin(
        self,
        source: BuildingFootprint,
        direction: Coord,
        size: Coord,
        rng: SeededRandom,
    ) -> Coord:
        """Origin of a block placed one street away from `source`."""
        street = self.options.street_width
        sx, sy = source.origin
        sw, sh = source.size
        width, height = size
        dx, dy = direction

        if dx > 0:
            return (sx + sw + street, sy + rng.randint(-1, 1))
        if dx < 0:
            return (sx - width - street, sy + rng.randint(-1, 1))
        if dy > 0:
            return (sx + rng.randint(-1, 1), sy + sh + street)
        return (sx + rng.randint(-1, 1), sy - height - street)

    def build_layout(
        self,
        center: Coord,
        city_size: CitySize,
        rng: SeededRandom,
        claimed: Optional[Set[Coord]] = None,
    ) -> LayoutState:
        """
        Grow a layout around `center`.

        Args:
            center: Settlement center cell
            city_size: Tier controlling block count and radius
            rng: Settlement's own generator
            claimed: Tiles already taken by other settlements

        Returns:
            Final layout state (blocks may number fewer than the target)
        """
        opts = self.options
        state = LayoutState(occupied=set(claimed) if claimed else set())
        base_radius = int(city_size.base_radius)
        target = rng.randint(*city_size.building_range)

        central_size = (rng.randint(*opts.central_extent), rng.randint(*opts.central_extent))
        central_origin = (
            center[0] - central_size[0] // 2,
            center[1] - central_size[1] // 2,
        )
        if self.can_place(state, central_origin, central_size):
            self.place(
                state,
                BuildingFootprint(
                    origin=central_origin,
                    size=central_size,
                    shape=RECTANGLE,
                    building_type=BuildingType.CIVIC,
                ),
            )

        max_attempts = target * opts.attempts_per_block
        low, high = opts.block_extent

        while len(state.blocks) < target and state.attempts < max_attempts:
            state.attempts += 1

            if not state.blocks:
                break

            source = state.blocks[rng.randint(0, len(state.blocks) - 1)]
            direction = GROWTH_DIRECTIONS[rng.randint(0, 3)]
            size = (rng.randint(low, high), rng.randint(low, high))
            origin = self.adjacent_origin(source, direction, size, rng)

            dx = origin[0] + size[0] // 2 - center[0]
            dy = origin[1] + size[1] // 2 - center[1]
            dist_sq = dx * dx + dy * dy
            if dist_sq > base_radius * base_radius:
                continue

            building_type = self.random_building_type(math.sqrt(dist_sq) / base_radius, rng)
            shape = self.random_block_shape(size, rng)

            if self.can_place(state, origin, size, shape):
                self.place(
                    state,
                    BuildingFootprint(
                        origin=origin, size=size, shape=shape, building_type=building_type
                    ),
                )

        logger.debug(
            "Settlement layout grown",
            center=center,
            size=city_size.display_name,
            target=target,
            placed=len(state.blocks),
            attempts=state.attempts,
        )
        return state

    def occupancy_mask(self, state: LayoutState) -> np.ndarray:
        """Boolean grid of block tiles (street buffers excluded)."""
        mask = np.zeros((self.terrain.height, self.terrain.width), dtype=bool)
        for block in state.blocks:
            for x, y in block.occupied_tiles():
                mask[y, x] = True
        return mask
