"""
Settlement site selection.

Process:
1. Sample a coarse grid of land cells below the elevation cap
2. Score each cell (flatness, river and coast proximity, elevation, biome)
3. Accept candidates greedily in descending score order, enforcing spacing
4. Assign size tiers (the best site becomes a capital when enough are requested)
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import structlog
from sklearn.neighbors import KDTree

from ..config.options import CityGenerationOptions
from .biomes import BiomeType, get_biome_site_modifier, is_water_biome
from .distance_field import coast_distance_field, river_distance_field
from ..utils.seeded_random import SeededRandom
from .settlements import CitySize
from .terrain import TerrainGrid

logger = structlog.get_logger()

# Score components
BASE_SCORE = 0.5
FLATNESS_WEIGHT = 0.3
FLATNESS_SCALE = 2.5
FLATNESS_PROBE = ((0, -2), (0, 2), (-2, 0), (2, 0))
RIVER_WEIGHT = 0.4
COAST_WEIGHT = 0.35
MOUNTAIN_THRESHOLD = 0.6
MOUNTAIN_SCALE = 2.5


@dataclass
class SiteCandidate:
    """A scored grid cell."""

    x: int
    y: int
    score: float


class SiteSelector:
    """Scores grid cells and picks well-spaced settlement sites."""

    def __init__(
        self,
        terrain: TerrainGrid,
        options: Optional[CityGenerationOptions] = None,
        river_distance: Optional[np.ndarray] = None,
        coast_distance: Optional[np.ndarray] = None,
    ) -> None:
        """
        Initialize the selector.

        Args:
            terrain: Terrain layers
            options: Scoring and spacing parameters
            river_distance: Precomputed river distance field
            coast_distance: Precomputed coast distance field
        """
        self.terrain = terrain
        self.options = options or CityGenerationOptions()

        self.river_distance = (
            river_distance
            if river_distance is not None
            else river_distance_field(terrain, self.options.river_distance_max)
        )
        self.coast_distance = (
            coast_distance
            if coast_distance is not None
            else coast_distance_field(terrain, self.options.coast_distance_max)
        )

    def grid_step(self) -> int:
        return max(8, min(self.terrain.width, self.terrain.height) // 64)

    def calculate_flatness(self, x: int, y: int) -> float:
        """1.0 for perfectly flat surroundings, falling to 0 with relief."""
        heights = self.terrain.heights
        center = float(heights[y, x])
        total_diff = 0.0

        for dx, dy in FLATNESS_PROBE:
            nx = x + dx
            ny = y + dy
            if self.terrain.in_bounds(nx, ny):
                total_diff += abs(float(heights[ny, nx]) - center)

        return max(0.0, 1.0 - total_diff * FLATNESS_SCALE)

    def has_dry_clearance(self, x: int, y: int) -> bool:
        """Whether the square around (x, y) is inside the grid and free of sea and lakes."""
        c = self.options.site_clearance
        terrain = self.terrain
        if x - c < 0 or y - c < 0 or x + c >= terrain.width or y + c >= terrain.height:
            return False
        window = (slice(y - c, y + c + 1), slice(x - c, x + c + 1))
        return not (terrain.below_sea[window].any() or terrain.lake[window].any())

    def is_candidate_cell(self, x: int, y: int) -> bool:
        """Land, not river or lake, below the elevation cap, with room to build."""
        terrain = self.terrain
        if terrain.is_water(x, y) or is_water_biome(int(terrain.biomes[y, x])):
            return False
        if float(terrain.heights[y, x]) > self.options.max_site_elevation:
            return False
        return self.has_dry_clearance(x, y)

    def score_cell(self, x: int, y: int) -> float:
        """Suitability of a cell as a settlement center."""
        opts = self.options
        h = float(self.terrain.heights[y, x])

        score = BASE_SCORE + self.calculate_flatness(x, y) * FLATNESS_WEIGHT

        river_low, river_high = opts.river_band
        river_dist = int(self.river_distance[y, x])
        if river_low <= river_dist < river_high:
            score += (1.0 - river_dist / river_high) * opts.prefer_rivers * RIVER_WEIGHT

        coast_low, coast_high = opts.coast_band
        coast_dist = int(self.coast_distance[y, x])
        if coast_low <= coast_dist < coast_high:
            score += (1.0 - coast_dist / coast_high) * opts.prefer_coast * COAST_WEIGHT

        if h > MOUNTAIN_THRESHOLD:
            score -= (h - MOUNTAIN_THRESHOLD) * opts.avoid_mountains * MOUNTAIN_SCALE

        score += get_biome_site_modifier(BiomeType(int(self.terrain.biomes[y, x])))
        return score

    def find_candidates(self) -> List[SiteCandidate]:
        """All sampled cells scoring above the threshold, best first."""
        step = self.grid_step()
        width, height = self.terrain.width, self.terrain.height
        candidates = []

        for y in range(step, height - step, step):
            for x in range(step, width - step, step):
                if not self.is_candidate_cell(x, y):
                    continue
                score = self.score_cell(x, y)
                if score > self.options.min_site_score:
                    candidates.append(SiteCandidate(x, y, score))

        # Stable sort keeps row-major order among equal scores
        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates

    def select_sites(self) -> List[SiteCandidate]:
        """
        Accept candidates greedily while respecting the minimum spacing.

        Returns:
            Accepted sites in acceptance order (may be fewer than requested)
        """
        count = self.options.city_count
        min_dist_sq = self.options.min_city_distance ** 2
        candidates = self.find_candidates()

        sites: List[SiteCandidate] = []
        placed_positions = []
        tree = None

        for candidate in candidates:
            if len(sites) >= count:
                break

            if tree is not None:
                _, indices = tree.query([[candidate.x, candidate.y]], k=1)
                nx, ny = placed_positions[int(indices[0][0])]
                dx = candidate.x - nx
                dy = candidate.y - ny
                if dx * dx + dy * dy < min_dist_sq:
                    continue

            sites.append(candidate)
            placed_positions.append([candidate.x, candidate.y])
            tree = KDTree(np.array(placed_positions))

        if len(sites) < count:
            logger.warning(
                "Fewer settlement sites than requested",
                requested=count,
                selected=len(sites),
                candidates=len(candidates),
            )
        logger.info("Selected settlement sites", count=len(sites))
        return sites

    def determine_city_size(self, index: int, rng: SeededRandom) -> CitySize:
        """
        Pick the size tier for the index-th accepted site.

        The first site is a capital whenever at least three settlements were
        requested; the rest roll against the cumulative tier ratios.
        """
        if index == 0 and self.options.city_count >= 3:
            return CitySize.CAPITAL

        opts = self.options
        roll = rng.random()
        cum_village = opts.village_ratio
        cum_town = cum_village + opts.town_ratio
        cum_city = cum_town + opts.city_ratio

        if roll < cum_village:
            return CitySize.VILLAGE
        if roll < cum_town:
            return CitySize.TOWN
        if roll < cum_city:
            return CitySize.CITY
        return CitySize.CAPITAL
