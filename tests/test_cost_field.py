"""Tests for the terrain movement cost field."""

import numpy as np
import pytest

from py_citynet.core.biomes import BiomeType, TerrainCost
from py_citynet.core.cost_field import CostFieldOptions, build_cost_field, calculate_slope
from py_citynet.core.terrain import TerrainGrid


def make_terrain(heights, biome=BiomeType.GRASSLAND, river=None, lake=None, sea_level=0.3):
    heights = np.asarray(heights, dtype=np.float32)
    return TerrainGrid(
        heights=heights,
        biomes=np.full(heights.shape, int(biome), dtype=np.uint8),
        river_mask=river,
        lake_mask=lake,
        sea_level=sea_level,
    )


class TestSlope:
    """Test slope calculation."""

    def test_flat_has_no_slope(self):
        slope = calculate_slope(np.full((4, 4), 0.5, dtype=np.float32))
        assert np.all(slope == 0)

    def test_peak(self):
        heights = np.zeros((3, 3), dtype=np.float32)
        heights[1, 1] = 0.2
        slope = calculate_slope(heights)

        assert slope[1, 1] == pytest.approx(0.2)
        assert slope[0, 1] == pytest.approx(0.2)
        assert slope[0, 0] == 0.0


class TestCostField:
    """Test cost field construction."""

    def test_flat_grassland(self):
        cost = build_cost_field(TerrainGrid.flat(8, 8))
        assert cost.dtype == np.float32
        assert cost.shape == (8, 8)
        assert np.all(cost == TerrainCost.PLAIN)

    def test_biome_costs(self):
        forest = build_cost_field(make_terrain(np.full((3, 3), 0.5), BiomeType.FOREST))
        mountain = build_cost_field(make_terrain(np.full((3, 3), 0.5), BiomeType.MOUNTAIN))
        assert forest[1, 1] == TerrainCost.FOREST
        assert mountain[1, 1] == TerrainCost.MOUNTAIN
        assert mountain[1, 1] > forest[1, 1] > TerrainCost.PLAIN

    def test_high_elevation_penalty(self):
        cost = build_cost_field(make_terrain(np.full((3, 3), 0.8)))
        assert cost[1, 1] == pytest.approx(1.0 + 0.1 * 120, rel=1e-4)

    def test_mid_elevation_penalty(self):
        cost = build_cost_field(make_terrain(np.full((3, 3), 0.6)))
        assert cost[1, 1] == pytest.approx(1.0 + 0.05 * 15, rel=1e-4)

    def test_slope_penalty(self):
        heights = np.full((3, 3), 0.4, dtype=np.float32)
        heights[1, 1] = 0.5
        cost = build_cost_field(make_terrain(heights))
        assert cost[1, 1] == pytest.approx(1.0 + 0.1 * 20, rel=1e-4)

    def test_custom_slope_weight(self):
        heights = np.full((3, 3), 0.4, dtype=np.float32)
        heights[1, 1] = 0.5
        cost = build_cost_field(make_terrain(heights), CostFieldOptions(slope_weight=0.0))
        assert cost[1, 1] == pytest.approx(1.0)

    def test_river_cost(self):
        river = np.zeros((5, 5), dtype=np.float32)
        river[:, 2] = 1.0
        cost = build_cost_field(make_terrain(np.full((5, 5), 0.5), river=river))
        assert np.all(cost[:, 2] == TerrainCost.RIVER)
        assert np.all(cost[:, 0] == TerrainCost.PLAIN)

    def test_weak_river_mask_ignored(self):
        river = np.full((3, 3), 0.4, dtype=np.float32)
        cost = build_cost_field(make_terrain(np.full((3, 3), 0.5), river=river))
        assert np.all(cost == TerrainCost.PLAIN)

    def test_lake_cost(self):
        lake = np.zeros((3, 3), dtype=np.float32)
        lake[1, 1] = 1.0
        cost = build_cost_field(make_terrain(np.full((3, 3), 0.5), lake=lake))
        assert cost[1, 1] == TerrainCost.SHALLOW_WATER

    def test_sea_depth(self):
        """Deep sea blocks, shallow sea is merely expensive."""
        heights = np.full((3, 6), 0.5, dtype=np.float32)
        heights[:, :2] = 0.1
        heights[:, 2:4] = 0.2
        cost = build_cost_field(make_terrain(heights, BiomeType.OCEAN))

        assert np.all(cost[:, :2] == TerrainCost.DEEP_WATER)
        assert np.all(cost[:, 2:4] == TerrainCost.SHALLOW_WATER)

    def test_never_negative(self):
        heights = np.random.default_rng(0).random((16, 16)).astype(np.float32)
        cost = build_cost_field(make_terrain(heights))
        assert cost.min() >= 0.0
