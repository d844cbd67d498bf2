"""Tests for road network composition and path post-processing."""

import numpy as np
import pytest

from py_citynet.config.options import RoadOptions
from py_citynet.core.biomes import BiomeType, TerrainCost
from py_citynet.core.cost_field import build_cost_field
from py_citynet.core.road_network import (
    NetworkComposer,
    Road,
    find_additional_connections,
    minimum_spanning_tree,
    path_crosses_water,
    sample_terrain_cost,
    smooth_path,
    straighten_bridges,
)
from py_citynet.core.settlements import CitySize, Settlement
from py_citynet.core.terrain import TerrainGrid


def is_connected(n, edges):
    parent = list(range(n))

    def find(i):
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for a, b in edges:
        parent[find(a)] = find(b)
    return len({find(i) for i in range(n)}) == 1


def river_terrain(width=64, height=64, river_x=32):
    river = np.zeros((height, width), dtype=np.float32)
    river[:, river_x] = 1.0
    return TerrainGrid(
        heights=np.full((height, width), 0.5, dtype=np.float32),
        biomes=np.full((height, width), int(BiomeType.GRASSLAND), dtype=np.uint8),
        river_mask=river,
    )


class TestSampling:
    """Test straight-line cost sampling."""

    def test_flat(self):
        cost = np.ones((20, 20), dtype=np.float32)
        assert sample_terrain_cost(cost, (0, 0), (15, 10)) == pytest.approx(1.0)

    def test_same_point(self):
        cost = np.full((5, 5), 50.0, dtype=np.float32)
        assert sample_terrain_cost(cost, (2, 2), (2, 2)) == 1.0

    def test_samples_are_capped(self):
        cost = np.full((10, 10), TerrainCost.DEEP_WATER, dtype=np.float32)
        assert sample_terrain_cost(cost, (0, 0), (9, 9), cap=200.0) == pytest.approx(200.0)

    def test_sample_count_limited(self):
        cost = np.ones((1, 100), dtype=np.float32)
        cost[0, 1] = 31.0
        # 30 samples over 90 steps skip x=1 entirely
        assert sample_terrain_cost(cost, (0, 0), (90, 0)) == pytest.approx(1.0)
        # 4 samples over 4 steps hit x=1 once
        assert sample_terrain_cost(cost, (0, 0), (4, 0)) == pytest.approx((3 + 31) / 4)


class TestSpanningTree:
    """Test Prim's algorithm."""

    def test_known_tree(self):
        weights = np.array(
            [
                [np.inf, 1, 4, 5],
                [1, np.inf, 2, 6],
                [4, 2, np.inf, 3],
                [5, 6, 3, np.inf],
            ],
            dtype=float,
        )
        assert minimum_spanning_tree(weights) == [(0, 1), (1, 2), (2, 3)]

    @pytest.mark.parametrize("n", [2, 3, 8, 15])
    def test_n_minus_one_edges(self, n):
        rng = np.random.default_rng(n)
        upper = rng.random((n, n)) * 100
        weights = np.triu(upper, 1) + np.triu(upper, 1).T
        np.fill_diagonal(weights, np.inf)

        edges = minimum_spanning_tree(weights)
        assert len(edges) == n - 1
        assert is_connected(n, edges)

    def test_single_node(self):
        assert minimum_spanning_tree(np.full((1, 1), np.inf)) == []


class TestRedundancy:
    """Test redundancy edge selection."""

    def test_leaf_cities_get_second_link(self):
        centers = [(0, 0), (10, 0), (20, 0), (30, 0), (40, 0)]
        sizes = [CitySize.CITY, CitySize.VILLAGE, CitySize.CITY, CitySize.TOWN, CitySize.CAPITAL]
        edges = [(0, 1), (1, 2), (2, 3), (3, 4)]

        assert find_additional_connections(centers, sizes, edges) == [(0, 2), (4, 2)]

    def test_small_settlements_ignored(self):
        centers = [(0, 0), (10, 0), (20, 0)]
        sizes = [CitySize.TOWN, CitySize.VILLAGE, CitySize.TOWN]
        assert find_additional_connections(centers, sizes, [(0, 1), (1, 2)]) == []

    def test_pairs_not_repeated(self):
        centers = [(0, 0), (50, 0), (10, 0)]
        sizes = [CitySize.CITY, CitySize.VILLAGE, CitySize.CITY]
        edges = [(0, 1), (1, 2)]
        assert find_additional_connections(centers, sizes, edges) == [(0, 2)]


class TestPostProcessing:
    """Test bridge straightening and smoothing."""

    def test_straighten_bridge(self):
        cost = np.ones((10, 10), dtype=np.float32)
        cost[:, 5] = TerrainCost.RIVER
        path = [(3, 3), (4, 3), (5, 3), (5, 4), (5, 5), (6, 5), (7, 5)]

        assert straighten_bridges(path, cost) == [(3, 3), (4, 3), (5, 4), (6, 5), (7, 5)]

    def test_straighten_without_water(self):
        cost = np.ones((10, 10), dtype=np.float32)
        path = [(0, 0), (1, 0), (2, 1)]
        assert straighten_bridges(path, cost) == path

    def test_smooth_staircase(self):
        cost = np.ones((10, 10), dtype=np.float32)
        path = [(0, 0), (1, 0), (1, 1), (2, 1), (2, 2), (3, 2), (3, 3)]
        assert smooth_path(path, cost) == [(0, 0), (1, 1), (2, 2), (3, 3)]

    def test_smoothing_window(self):
        cost = np.ones((1, 30), dtype=np.float32)
        path = [(x, 0) for x in range(30)]
        assert smooth_path(path, cost, window=3) == path

    def test_smoothing_keeps_endpoints_and_crossing(self):
        cost = np.ones((20, 20), dtype=np.float32)
        cost[:, 10] = TerrainCost.RIVER
        path = [(x, 8) for x in range(2, 19)]
        smoothed = smooth_path(path, cost)

        assert smoothed[0] == (2, 8)
        assert smoothed[-1] == (18, 8)
        assert any(x == 10 for x, _ in smoothed)

    def test_short_paths_untouched(self):
        cost = np.ones((4, 4), dtype=np.float32)
        assert smooth_path([(0, 0), (1, 1)], cost) == [(0, 0), (1, 1)]

    def test_path_crosses_water(self):
        terrain = river_terrain(16, 16, river_x=8)
        assert path_crosses_water([(7, 3), (8, 3), (9, 3)], terrain)
        assert not path_crosses_water([(1, 1), (2, 2)], terrain)


class TestNetworkComposer:
    """Test full network composition."""

    def settlements(self, centers, size=CitySize.VILLAGE):
        return [Settlement(id=i, center=c, size=size) for i, c in enumerate(centers)]

    def test_spanning_roads(self):
        terrain = TerrainGrid.flat(64, 64)
        composer = NetworkComposer(terrain, build_cost_field(terrain))
        settlements = self.settlements([(10, 10), (50, 10), (10, 50), (50, 50)])

        roads = composer.compose(settlements)

        assert len(roads) == 3
        assert [road.id for road in roads] == [0, 1, 2]
        assert not any(road.redundant for road in roads)
        by_id = {s.id: s for s in settlements}
        for road in roads:
            assert road.path[0] == by_id[road.from_settlement_id].center
            assert road.path[-1] == by_id[road.to_settlement_id].center
        assert is_connected(4, [(r.from_settlement_id, r.to_settlement_id) for r in roads])

    def test_redundancy_roads(self):
        terrain = TerrainGrid.flat(64, 64)
        composer = NetworkComposer(terrain, build_cost_field(terrain))
        settlements = self.settlements(
            [(10, 10), (50, 10), (10, 50), (50, 50), (30, 30)], size=CitySize.CITY
        )

        roads = composer.compose(settlements)

        spanning = [r for r in roads if not r.redundant]
        extra = [r for r in roads if r.redundant]
        assert len(spanning) == 4
        assert len(extra) == 4
        pairs = [frozenset((r.from_settlement_id, r.to_settlement_id)) for r in roads]
        assert len(pairs) == len(set(pairs))
        assert is_connected(5, [(r.from_settlement_id, r.to_settlement_id) for r in roads])

    def test_redundancy_needs_five_settlements(self):
        terrain = TerrainGrid.flat(64, 64)
        composer = NetworkComposer(terrain, build_cost_field(terrain))
        settlements = self.settlements(
            [(10, 10), (50, 10), (10, 50), (50, 50)], size=CitySize.CAPITAL
        )
        assert not any(road.redundant for road in composer.compose(settlements))

    def test_bridge_flag(self):
        terrain = river_terrain()
        composer = NetworkComposer(terrain, build_cost_field(terrain))
        roads = composer.compose(self.settlements([(24, 8), (40, 8)]))

        assert len(roads) == 1
        assert roads[0].has_bridge
        assert any(terrain.river[y, x] for x, y in roads[0].path)

    def test_no_bridge_on_dry_route(self):
        terrain = river_terrain()
        composer = NetworkComposer(terrain, build_cost_field(terrain))
        roads = composer.compose(self.settlements([(8, 8), (24, 40)]))
        assert not roads[0].has_bridge

    def test_failed_route_omitted(self):
        terrain = TerrainGrid.flat(40, 20)
        cost = build_cost_field(terrain)
        cost[:, 20] = TerrainCost.DEEP_WATER
        composer = NetworkComposer(terrain, cost)

        roads = composer.compose(self.settlements([(5, 10), (35, 10)]))
        assert roads == []

    def test_single_settlement(self):
        terrain = TerrainGrid.flat(16, 16)
        composer = NetworkComposer(terrain, build_cost_field(terrain))
        assert composer.compose(self.settlements([(8, 8)])) == []

    def test_weight_matrix(self):
        terrain = TerrainGrid.flat(64, 64)
        composer = NetworkComposer(terrain, build_cost_field(terrain), RoadOptions())
        weights = composer.build_weight_matrix([(0, 0), (30, 40)])

        assert weights[0, 1] == pytest.approx(50.0)
        assert weights[1, 0] == weights[0, 1]
        assert np.isinf(weights[0, 0])

    def test_road_record(self):
        road = Road(id=3, from_settlement_id=1, to_settlement_id=2, path=[(0, 0), (1, 1)])
        assert not road.has_bridge
        assert not road.redundant
