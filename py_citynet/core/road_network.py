"""
Road network composition.

Settlements are joined by a minimum spanning tree over estimated route
costs, optionally reinforced with redundancy edges for major settlements.
Each edge is routed with the RoutePlanner and the resulting path is
post-processed: water runs are straightened into bridges and the rest is
smoothed by lookahead shortcuts.
"""

from typing import List, Optional, Sequence, Set, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field
from sklearn.neighbors import KDTree

from ..config.options import RoadOptions
from ..utils.grid import bresenham_line
from .pathfinding import RoutePlanner
from .settlements import CitySize, Settlement
from .terrain import TerrainGrid

logger = structlog.get_logger()

Coord = Tuple[int, int]
Edge = Tuple[int, int]


class Road(BaseModel):
    """Data structure for a road between two settlements."""

    id: int = Field(description="Unique road identifier")
    from_settlement_id: int = Field(description="Source settlement id")
    to_settlement_id: int = Field(description="Destination settlement id")
    path: List[Coord] = Field(
        default_factory=list, description="Cells from source center to destination center"
    )
    has_bridge: bool = Field(default=False, description="Crosses a river or lake cell")
    redundant: bool = Field(default=False, description="Added beyond the spanning tree")


def sample_terrain_cost(
    cost_field: np.ndarray,
    start: Coord,
    end: Coord,
    samples: int = 30,
    cap: float = 200.0,
) -> float:
    """Mean capped cost of evenly spaced cells on the straight line start -> end."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    steps = max(abs(dx), abs(dy))
    if steps == 0:
        return 1.0

    count = min(steps, samples)
    total = 0.0
    for i in range(count):
        t = i / count
        x = start[0] + int(dx * t)
        y = start[1] + int(dy * t)
        total += min(float(cost_field[y, x]), cap)
    return total / count


def minimum_spanning_tree(weights: np.ndarray) -> List[Edge]:
    """
    Prim's algorithm from node 0 over a dense symmetric weight matrix.

    Returns:
        (parent, child) edges in the order nodes joined the tree
    """
    n = weights.shape[0]
    if n < 2:
        return []

    in_tree = np.zeros(n, dtype=bool)
    best = np.full(n, np.inf)
    parent = np.full(n, -1, dtype=int)
    best[0] = 0.0

    edges = []
    for _ in range(n):
        node = -1
        node_weight = np.inf
        for j in range(n):
            if not in_tree[j] and best[j] < node_weight:
                node_weight = best[j]
                node = j
        if node < 0:
            break

        in_tree[node] = True
        if parent[node] >= 0:
            edges.append((int(parent[node]), node))

        for j in range(n):
            if not in_tree[j] and weights[node, j] < best[j]:
                best[j] = weights[node, j]
                parent[j] = node

    return edges


def find_additional_connections(
    centers: Sequence[Coord],
    sizes: Sequence[CitySize],
    edges: Sequence[Edge],
    min_size: CitySize = CitySize.CITY,
) -> List[Edge]:
    """
    Redundancy edges: every settlement of at least `min_size` with fewer than
    two tree connections is linked to its nearest settlement not already
    paired with it.
    """
    n = len(centers)
    if n < 2:
        return []

    paired = {frozenset(edge) for edge in edges}
    degree = [0] * n
    for a, b in edges:
        degree[a] += 1
        degree[b] += 1

    tree = KDTree(np.asarray(centers, dtype=float))
    additional = []
    for i in range(n):
        if sizes[i] < min_size or degree[i] >= 2:
            continue

        dist, idx = tree.query(np.asarray([centers[i]], dtype=float), k=n)
        ranked = sorted(zip(dist[0].tolist(), idx[0].tolist()))
        for _, j in ranked:
            if j == i or frozenset((i, j)) in paired:
                continue
            additional.append((i, int(j)))
            paired.add(frozenset((i, j)))
            break

    return additional


def straighten_bridges(
    path: List[Coord], cost_field: np.ndarray, water_threshold: float = 200.0
) -> List[Coord]:
    """Replace each run of water cells with a straight line across it."""
    if len(path) <= 2:
        return path

    def is_water(cell: Coord) -> bool:
        return float(cost_field[cell[1], cell[0]]) >= water_threshold

    result: List[Coord] = []

    def append(cell: Coord) -> None:
        if not result or result[-1] != cell:
            result.append(cell)

    last = len(path) - 1
    i = 0
    while i <= last:
        if not is_water(path[i]):
            append(path[i])
            i += 1
            continue

        end = i
        while end < last and is_water(path[end + 1]):
            end += 1

        bridge_start = path[max(0, i - 1)]
        bridge_end = path[min(last, end + 1)]
        for cell in bresenham_line(bridge_start, bridge_end):
            append(cell)
        i = end + 2

    return result


def can_shortcut(
    start: Coord, end: Coord, cost_field: np.ndarray, max_cost: float = 100.0
) -> bool:
    return all(float(cost_field[y, x]) <= max_cost for x, y in bresenham_line(start, end))


def smooth_path(
    path: List[Coord],
    cost_field: np.ndarray,
    window: int = 9,
    max_cost: float = 100.0,
    water_threshold: float = 200.0,
) -> List[Coord]:
    """
    Straighten bridges, then greedily shortcut up to `window` cells ahead
    wherever the straight line stays on cheap terrain.
    """
    if len(path) <= 2:
        return path

    bridged = straighten_bridges(path, cost_field, water_threshold)

    smoothed = [bridged[0]]
    i = 0
    while i < len(bridged) - 1:
        farthest = i + 1
        for j in range(i + 2, min(i + window + 1, len(bridged))):
            if can_shortcut(bridged[i], bridged[j], cost_field, max_cost):
                farthest = j
        smoothed.extend(bresenham_line(bridged[i], bridged[farthest])[1:])
        i = farthest

    return smoothed


def path_crosses_water(path: Sequence[Coord], terrain: TerrainGrid) -> bool:
    """True if any cell lies on the river or lake mask."""
    return any(terrain.is_river_or_lake(x, y) for x, y in path)


class NetworkComposer:
    """Connects settlements with routed, post-processed roads."""

    def __init__(
        self,
        terrain: TerrainGrid,
        cost_field: np.ndarray,
        options: Optional[RoadOptions] = None,
        planner: Optional[RoutePlanner] = None,
    ):
        self.terrain = terrain
        self.cost_field = cost_field
        self.options = options or RoadOptions()
        self.planner = planner or RoutePlanner(cost_field, self.options)

    def build_weight_matrix(self, centers: Sequence[Coord]) -> np.ndarray:
        """Symmetric matrix of Euclidean distance times sampled terrain cost."""
        n = len(centers)
        weights = np.full((n, n), np.inf)
        for i in range(n):
            for j in range(i + 1, n):
                dx = centers[i][0] - centers[j][0]
                dy = centers[i][1] - centers[j][1]
                direct = float(np.hypot(dx, dy))
                sampled = sample_terrain_cost(
                    self.cost_field,
                    centers[i],
                    centers[j],
                    self.options.cost_samples,
                    self.options.sample_cost_cap,
                )
                weights[i, j] = weights[j, i] = direct * sampled
        return weights

    def add_road_tiles(self, road_tiles: Set[Coord], path: Sequence[Coord], buffer: int) -> None:
        height, width = self.cost_field.shape
        for x, y in path:
            for dy in range(-buffer, buffer + 1):
                for dx in range(-buffer, buffer + 1):
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        road_tiles.add((nx, ny))

    def build_road(
        self,
        road_id: int,
        source: Settlement,
        target: Settlement,
        road_tiles: Set[Coord],
        redundant: bool = False,
    ) -> Optional[Road]:
        path = self.planner.find_route(source.center, target.center, road_tiles)
        if path is None:
            logger.warning(
                "Road omitted",
                from_settlement=source.id,
                to_settlement=target.id,
                redundant=redundant,
            )
            return None

        opts = self.options
        path = smooth_path(
            path,
            self.cost_field,
            opts.smoothing_window,
            opts.smoothing_max_cost,
            opts.water_cost_threshold,
        )
        return Road(
            id=road_id,
            from_settlement_id=source.id,
            to_settlement_id=target.id,
            path=path,
            has_bridge=path_crosses_water(path, self.terrain),
            redundant=redundant,
        )

    def compose(self, settlements: Sequence[Settlement]) -> List[Road]:
        """
        Build the road network.

        Args:
            settlements: Settlements in selection order

        Returns:
            Roads for every edge that could be routed, spanning tree first
        """
        if len(settlements) < 2:
            return []

        centers = [tuple(s.center) for s in settlements]
        edges = minimum_spanning_tree(self.build_weight_matrix(centers))
        logger.info("Spanning tree built", settlements=len(settlements), edges=len(edges))

        roads: List[Road] = []
        road_tiles: Set[Coord] = set()

        for a, b in edges:
            road = self.build_road(len(roads), settlements[a], settlements[b], road_tiles)
            if road is not None:
                roads.append(road)
                self.add_road_tiles(road_tiles, road.path, self.options.road_buffer)

        if len(settlements) >= self.options.redundancy_min_settlements:
            extra = find_additional_connections(
                centers, [s.size for s in settlements], edges
            )
            logger.info("Redundancy edges selected", count=len(extra))
            for a, b in extra:
                road = self.build_road(
                    len(roads), settlements[a], settlements[b], road_tiles, redundant=True
                )
                if road is not None:
                    roads.append(road)
                    self.add_road_tiles(road_tiles, road.path, 0)

        logger.info(
            "Road network composed",
            roads=len(roads),
            bridges=sum(1 for r in roads if r.has_bridge),
        )
        return roads
