"""
City network generation service.

Runs the full settlement and road pipeline over a terrain grid:
distance fields -> sites -> layouts -> walls -> cost field -> roads -> masks.
"""

import heapq
from typing import List, Optional, Set, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..config import settings
from ..config.options import CityGenerationOptions, LayoutOptions, RoadOptions
from ..utils.grid import NEIGHBORS_8
from ..utils.random import SITE_STREAM, derive_random, settlement_random
from .cost_field import build_cost_field
from .distance_field import coast_distance_field, river_distance_field
from .fortifications import FortificationGenerator
from .layout import SettlementBuilder
from .name_generator import NameGenerator
from .road_network import NetworkComposer, Road
from .settlements import Settlement
from .site_selection import SiteSelector
from .terrain import TerrainGrid

logger = structlog.get_logger()

Coord = Tuple[int, int]

ROAD_DISTANCE_FAR = 1000.0
ROAD_DISTANCE_REACH = 8.0
DIAGONAL_STEP = 1.414


class CityNetwork(BaseModel):
    """Settlements, roads and the rasters derived from them."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    width: int = Field(description="Grid width")
    height: int = Field(description="Grid height")
    settlements: List[Settlement] = Field(default_factory=list)
    roads: List[Road] = Field(default_factory=list)

    city_mask: Optional[np.ndarray] = Field(
        default=None, exclude=True, description="Settlement index + 1 on footprint cells"
    )
    wall_mask: Optional[np.ndarray] = Field(
        default=None, exclude=True, description="1 on wall cells, 2 on gate cells"
    )
    road_distance: Optional[np.ndarray] = Field(
        default=None, exclude=True, description="Distance to the nearest road outside settlements"
    )

    def model_post_init(self, __context) -> None:
        if self.city_mask is None:
            self.city_mask = np.zeros((self.height, self.width), dtype=np.uint8)
        if self.wall_mask is None:
            self.wall_mask = np.zeros((self.height, self.width), dtype=np.uint8)
        if self.road_distance is None:
            self.road_distance = np.full(
                (self.height, self.width), ROAD_DISTANCE_FAR, dtype=np.float32
            )

    def _in_grid(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def update_masks(self) -> None:
        """Rebuild city, wall and road distance rasters from the records."""
        city_mask = np.zeros((self.height, self.width), dtype=np.uint8)
        wall_mask = np.zeros((self.height, self.width), dtype=np.uint8)

        for index, settlement in enumerate(self.settlements):
            label = min(index + 1, 255)
            for block in settlement.blocks:
                for x, y in block.occupied_tiles():
                    if self._in_grid(x, y):
                        city_mask[y, x] = label
            for x, y in settlement.wall_tiles:
                if self._in_grid(x, y):
                    wall_mask[y, x] = 1

        # Gates open any wall laid over them, including a neighbour's
        for settlement in self.settlements:
            for x, y in settlement.gate_tiles:
                if self._in_grid(x, y):
                    wall_mask[y, x] = 2

        self.city_mask = city_mask
        self.wall_mask = wall_mask
        self.road_distance = self._road_distance(city_mask)

        logger.debug(
            "Network masks updated",
            city_cells=int(np.count_nonzero(city_mask)),
            wall_cells=int(np.count_nonzero(wall_mask)),
        )

    def _road_distance(self, city_mask: np.ndarray) -> np.ndarray:
        """Chamfer distance from road cells outside settlements, never through them."""
        best = np.full((self.height, self.width), ROAD_DISTANCE_FAR, dtype=np.float64)
        heap = []

        for road in self.roads:
            for x, y in road.path:
                if self._in_grid(x, y) and city_mask[y, x] == 0 and best[y, x] > 0:
                    best[y, x] = 0.0
                    heap.append((0.0, y, x))
        heapq.heapify(heap)

        while heap:
            dist, y, x = heapq.heappop(heap)
            if dist > best[y, x] or dist > ROAD_DISTANCE_REACH:
                continue
            for dx, dy in NEIGHBORS_8:
                nx, ny = x + dx, y + dy
                if not self._in_grid(nx, ny) or city_mask[ny, nx] != 0:
                    continue
                step = DIAGONAL_STEP if dx and dy else 1.0
                candidate = dist + step
                if candidate < best[ny, nx]:
                    best[ny, nx] = candidate
                    heapq.heappush(heap, (candidate, ny, nx))

        return best.astype(np.float32)


class CityNetworkGenerator:
    """Generates settlements and roads for a terrain grid."""

    def __init__(
        self,
        options: Optional[CityGenerationOptions] = None,
        layout_options: Optional[LayoutOptions] = None,
        road_options: Optional[RoadOptions] = None,
    ):
        self.options = options or CityGenerationOptions()
        self.layout_options = layout_options or LayoutOptions()
        self.road_options = road_options or RoadOptions()

    def build_settlements(self, terrain: TerrainGrid, seed: int) -> List[Settlement]:
        """
        Select sites, then grow and fortify a settlement on each one.

        Settlements never share footprint tiles: each layout grows around the
        tiles and street buffers of earlier settlements, and leaves room for
        the civic block of later ones.
        """
        river_distance = river_distance_field(terrain, self.options.river_distance_max)
        coast_distance = coast_distance_field(terrain, self.options.coast_distance_max)

        selector = SiteSelector(terrain, self.options, river_distance, coast_distance)
        sites = selector.select_sites()

        site_rng = derive_random(seed, SITE_STREAM)
        names = NameGenerator(site_rng)
        builder = SettlementBuilder(terrain, self.layout_options)
        fortifier = FortificationGenerator(terrain, self.layout_options)

        # Sites not grown yet keep room for their civic block
        reserves = [builder.site_reserve((site.x, site.y)) for site in sites]
        claimed: Set[Coord] = set()

        settlements = []
        for index, site in enumerate(sites):
            size = selector.determine_city_size(index, site_rng)
            name = names.generate_settlement_name()

            blocked = set(claimed)
            for reserve in reserves[index + 1:]:
                blocked.update(reserve)

            rng = settlement_random(seed, index)
            state = builder.build_layout((site.x, site.y), size, rng, blocked)
            for block in state.blocks:
                claimed.update(builder.reserved_tiles(block))

            settlement = Settlement(
                id=index,
                name=name,
                center=(site.x, site.y),
                size=size,
                blocks=state.blocks,
            )
            fortifier.roll_walls(settlement, rng)
            settlements.append(settlement)

            logger.info(
                "Settlement generated",
                settlement_id=index,
                name=name,
                size=size.display_name,
                center=settlement.center,
                blocks=len(settlement.blocks),
                has_walls=settlement.has_walls,
            )

        return settlements

    def generate(self, terrain: TerrainGrid, seed: Optional[int] = None) -> CityNetwork:
        """
        Generate the full city network.

        Args:
            terrain: Terrain layers
            seed: 64-bit seed (defaults to the configured default seed)

        Returns:
            CityNetwork with records and derived masks
        """
        if seed is None:
            seed = settings.default_seed

        network = CityNetwork(width=terrain.width, height=terrain.height)
        if not self.options.enabled or self.options.city_count == 0:
            logger.info("City generation disabled", enabled=self.options.enabled)
            return network

        logger.info(
            "Generating city network",
            seed=seed,
            width=terrain.width,
            height=terrain.height,
            city_count=self.options.city_count,
        )

        settlements = self.build_settlements(terrain, seed)
        cost_field = build_cost_field(terrain)
        roads = NetworkComposer(terrain, cost_field, self.road_options).compose(settlements)

        network.settlements = settlements
        network.roads = roads
        network.update_masks()

        logger.info(
            "City network generated",
            settlements=len(settlements),
            roads=len(roads),
        )
        return network
