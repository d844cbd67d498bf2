"""Tests for settlement site selection."""

import numpy as np
import pytest

from py_citynet.config.options import CityGenerationOptions
from py_citynet.core.biomes import BiomeType
from py_citynet.core.settlements import CitySize
from py_citynet.core.site_selection import SiteSelector
from py_citynet.core.terrain import TerrainGrid
from py_citynet.utils.seeded_random import SeededRandom


def river_terrain(size=64, river_x=32):
    """Flat grassland at height 0.5 with one river column."""
    river = np.zeros((size, size), dtype=np.float32)
    river[:, river_x] = 1.0
    return TerrainGrid(
        heights=np.full((size, size), 0.5, dtype=np.float32),
        biomes=np.full((size, size), int(BiomeType.GRASSLAND), dtype=np.uint8),
        river_mask=river,
        sea_level=0.3,
    )


def island_terrain(size=32):
    """Open sea with a single 5x5 island in the middle."""
    heights = np.full((size, size), 0.1, dtype=np.float32)
    biomes = np.full((size, size), int(BiomeType.OCEAN), dtype=np.uint8)
    heights[14:19, 14:19] = 0.5
    biomes[14:19, 14:19] = int(BiomeType.GRASSLAND)
    return TerrainGrid(heights=heights, biomes=biomes, sea_level=0.3)


class FixedRandom:
    """Returns scripted values from random()."""

    def __init__(self, values):
        self.values = list(values)
        self.call_count = 0

    def random(self):
        self.call_count += 1
        return self.values.pop(0)


class TestScoring:
    """Test cell scoring."""

    @pytest.fixture
    def selector(self):
        return SiteSelector(river_terrain())

    def test_grid_step(self, selector):
        assert selector.grid_step() == 8
        big = SiteSelector(TerrainGrid.flat(1024, 1024))
        assert big.grid_step() == 16

    def test_flat_cells_are_fully_flat(self, selector):
        assert selector.calculate_flatness(20, 20) == 1.0

    def test_relief_reduces_flatness(self):
        terrain = TerrainGrid.flat(16, 16)
        heights = terrain.heights.copy()
        heights[8, 10] = 0.7
        rough = SiteSelector(TerrainGrid(heights=heights, biomes=terrain.biomes))
        assert rough.calculate_flatness(8, 8) == pytest.approx(1.0 - 0.2 * 2.5, rel=1e-4)

    def test_river_band_bonus(self, selector):
        expected = 0.5 + 0.3 + (1.0 - 8 / 18) * 0.7 * 0.4 + 0.15
        assert selector.score_cell(24, 8) == pytest.approx(expected)

    def test_too_close_to_river_gets_no_bonus(self, selector):
        assert selector.score_cell(31, 8) == pytest.approx(0.5 + 0.3 + 0.15)

    def test_out_of_band_gets_no_bonus(self, selector):
        assert selector.score_cell(8, 8) == pytest.approx(0.5 + 0.3 + 0.15)

    def test_coast_band_bonus(self):
        heights = np.full((40, 40), 0.5, dtype=np.float32)
        heights[:, :5] = 0.1
        terrain = TerrainGrid(heights=heights, biomes=np.full((40, 40), 6, dtype=np.uint8))
        selector = SiteSelector(terrain)

        # Coast distance 10 from the last sea column
        expected = 0.5 + 0.3 + (1.0 - 10 / 25) * 0.5 * 0.35 + 0.15
        assert selector.score_cell(14, 20) == pytest.approx(expected)

    def test_mountain_penalty(self):
        selector = SiteSelector(TerrainGrid.flat(32, 32, elevation=0.7))
        expected = 0.5 + 0.3 - 0.1 * 0.8 * 2.5 + 0.15
        assert selector.score_cell(16, 16) == pytest.approx(expected, rel=1e-4)

    def test_biome_modifier(self):
        desert = SiteSelector(TerrainGrid.flat(32, 32, biome=BiomeType.DESERT))
        assert desert.score_cell(16, 16) == pytest.approx(0.5 + 0.3 - 0.12)


class TestCandidates:
    """Test candidate filtering."""

    def test_river_cells_excluded(self):
        selector = SiteSelector(river_terrain())
        assert not selector.is_candidate_cell(32, 16)
        assert selector.is_candidate_cell(24, 16)

    def test_high_cells_excluded(self):
        selector = SiteSelector(TerrainGrid.flat(32, 32, elevation=0.8))
        assert not selector.is_candidate_cell(16, 16)
        assert selector.find_candidates() == []

    def test_water_biome_excluded(self):
        terrain = TerrainGrid.flat(32, 32, biome=BiomeType.LAKE)
        assert not SiteSelector(terrain).is_candidate_cell(16, 16)

    def test_clearance_near_edge(self):
        selector = SiteSelector(TerrainGrid.flat(32, 32))
        assert not selector.has_dry_clearance(2, 16)
        assert selector.has_dry_clearance(4, 16)

    def test_candidates_sorted_best_first(self):
        candidates = SiteSelector(river_terrain()).find_candidates()
        scores = [c.score for c in candidates]
        assert scores == sorted(scores, reverse=True)
        assert (candidates[0].x, candidates[0].y) == (24, 8)
        assert (candidates[1].x, candidates[1].y) == (40, 8)
        assert all(c.x != 32 for c in candidates)


class TestSelectSites:
    """Test greedy spaced selection."""

    def test_two_sites_across_river(self):
        options = CityGenerationOptions(city_count=2, min_city_distance=10)
        sites = SiteSelector(river_terrain(), options).select_sites()

        assert [(s.x, s.y) for s in sites] == [(24, 8), (40, 8)]
        assert (sites[0].x < 32) != (sites[1].x < 32)

    def test_spacing_respected(self):
        options = CityGenerationOptions(city_count=6, min_city_distance=20)
        sites = SiteSelector(river_terrain(), options).select_sites()

        assert len(sites) > 1
        for i, a in enumerate(sites):
            for b in sites[i + 1:]:
                assert (a.x - b.x) ** 2 + (a.y - b.y) ** 2 >= 20 ** 2

    def test_starvation_returns_fewer(self):
        """The default spacing only fits one site on a small map."""
        sites = SiteSelector(river_terrain()).select_sites()
        assert len(sites) == 1

    def test_island_too_small(self):
        options = CityGenerationOptions(city_count=3)
        assert SiteSelector(island_terrain(), options).select_sites() == []

    def test_zero_requested(self):
        options = CityGenerationOptions(city_count=0)
        assert SiteSelector(river_terrain(), options).select_sites() == []


class TestCitySize:
    """Test size tier assignment."""

    def test_first_site_is_capital(self):
        selector = SiteSelector(river_terrain(), CityGenerationOptions(city_count=3))
        rng = FixedRandom([])
        assert selector.determine_city_size(0, rng) == CitySize.CAPITAL
        assert rng.call_count == 0

    def test_no_forced_capital_for_small_requests(self):
        options = CityGenerationOptions(city_count=2)
        selector = SiteSelector(river_terrain(), options)
        assert selector.determine_city_size(0, FixedRandom([0.0])) == CitySize.VILLAGE

    @pytest.mark.parametrize(
        "roll,expected",
        [
            (0.0, CitySize.VILLAGE),
            (0.39, CitySize.VILLAGE),
            (0.4, CitySize.TOWN),
            (0.69, CitySize.TOWN),
            (0.75, CitySize.CITY),
            (0.95, CitySize.CAPITAL),
        ],
    )
    def test_cumulative_ratios(self, roll, expected):
        selector = SiteSelector(river_terrain(), CityGenerationOptions(city_count=5))
        assert selector.determine_city_size(1, FixedRandom([roll])) == expected

    def test_seeded_sizes_are_valid(self):
        selector = SiteSelector(river_terrain(), CityGenerationOptions(city_count=5))
        rng = SeededRandom(3)
        sizes = [selector.determine_city_size(i, rng) for i in range(20)]
        assert sizes[0] == CitySize.CAPITAL
        assert all(isinstance(size, CitySize) for size in sizes)
