"""
Route planning over a terrain cost field.

Routes are found by an escalation pipeline of strategies sharing the same
cost field and existing-road discount:

1. ``AStarSearch`` - bounded A* with a slightly inadmissible heuristic
2. ``HierarchicalSearch`` - A* chained through relocated waypoints, with a
   greedy stepping fallback per segment

A route is accepted only if it starts at the start cell and ends exactly at
the goal cell.
"""

import heapq
import math
from typing import AbstractSet, Dict, List, Optional, Set, Tuple

import numpy as np
import structlog

from ..config.options import RoadOptions, WaterCrossingPolicy
from ..utils.grid import NEIGHBORS_8, euclidean, sign

logger = structlog.get_logger()

Coord = Tuple[int, int]


class RouteStrategy:
    """One way of attempting a route. Returns a path or None."""

    name = "strategy"

    def __init__(self, cost_field: np.ndarray, options: Optional[RoadOptions] = None):
        self.cost_field = cost_field
        self.options = options or RoadOptions()
        self.height, self.width = cost_field.shape

    def in_bounds(self, cell: Coord) -> bool:
        return 0 <= cell[0] < self.width and 0 <= cell[1] < self.height

    def cell_cost(self, cell: Coord) -> float:
        return float(self.cost_field[cell[1], cell[0]])

    def attempt(
        self, start: Coord, goal: Coord, road_tiles: AbstractSet[Coord]
    ) -> Optional[List[Coord]]:
        raise NotImplementedError


class AStarSearch(RouteStrategy):
    """8-connected A* with an existing-road discount and an iteration budget."""

    name = "astar"

    def heuristic(self, cell: Coord, goal: Coord) -> float:
        return euclidean(cell, goal) * self.options.heuristic_weight

    def search(
        self,
        start: Coord,
        goal: Coord,
        road_tiles: AbstractSet[Coord],
        max_iterations: Optional[int] = None,
    ) -> Optional[List[Coord]]:
        """
        Find a path from start to goal.

        Args:
            start: Start cell
            goal: Goal cell
            road_tiles: Cells discounted as existing road
            max_iterations: Budget on heap pops (defaults to the configured budget)

        Returns:
            Path from start to goal inclusive, or None if the budget ran out
            or the goal is unreachable
        """
        if start == goal:
            return [start]

        opts = self.options
        budget = max_iterations if max_iterations is not None else opts.max_iterations
        cost = self.cost_field

        counter = 0
        open_heap = [(self.heuristic(start, goal), counter, start)]
        g_score: Dict[Coord, float] = {start: 0.0}
        came_from: Dict[Coord, Coord] = {}
        closed: Set[Coord] = set()
        iterations = 0

        while open_heap:
            iterations += 1
            if iterations > budget:
                logger.debug("A* budget exhausted", start=start, goal=goal, budget=budget)
                return None

            _, _, current = heapq.heappop(open_heap)

            if current == goal:
                path = [current]
                while current in came_from:
                    current = came_from[current]
                    path.append(current)
                path.reverse()
                return path

            if current in closed:
                continue
            closed.add(current)

            cx, cy = current
            base = g_score[current]
            for dx, dy in NEIGHBORS_8:
                nx, ny = cx + dx, cy + dy
                if not (0 <= nx < self.width and 0 <= ny < self.height):
                    continue
                neighbor = (nx, ny)
                if neighbor in closed:
                    continue

                raw = float(cost[ny, nx])
                if raw >= opts.blocking_cost:
                    continue

                step = raw * opts.diagonal_factor if dx and dy else raw
                if neighbor in road_tiles:
                    step *= opts.existing_road_multiplier

                tentative = base + step
                if tentative < g_score.get(neighbor, math.inf):
                    g_score[neighbor] = tentative
                    came_from[neighbor] = current
                    counter += 1
                    heapq.heappush(
                        open_heap,
                        (tentative + self.heuristic(neighbor, goal), counter, neighbor),
                    )

        return None

    def attempt(self, start, goal, road_tiles):
        return self.search(start, goal, road_tiles)


class GreedyStepper(RouteStrategy):
    """
    Direct stepping toward the goal, choosing the cheapest of a few
    goal-biased offsets each step.

    Always returns a path (possibly stopping short of the goal).
    """

    name = "greedy"

    def walk(self, start: Coord, goal: Coord) -> List[Coord]:
        opts = self.options
        reject_water = opts.greedy_water_policy == WaterCrossingPolicy.REJECT
        step_cap = self.width + self.height

        path = [start]
        current = start
        while current != goal and len(path) <= step_cap:
            sx = sign(goal[0] - current[0])
            sy = sign(goal[1] - current[1])

            best = None
            best_cost = math.inf
            for ox, oy in ((sx, sy), (sx, 0), (0, sy), (sx, -sy), (-sx, sy)):
                if ox == 0 and oy == 0:
                    continue
                candidate = (current[0] + ox, current[1] + oy)
                if not self.in_bounds(candidate):
                    continue
                candidate_cost = self.cell_cost(candidate)
                if reject_water and candidate_cost >= opts.blocking_cost:
                    continue
                if candidate_cost < best_cost:
                    best = candidate
                    best_cost = candidate_cost

            if best is None:
                break
            path.append(best)
            current = best

        return path

    def attempt(self, start, goal, road_tiles):
        return self.walk(start, goal)


class HierarchicalSearch(RouteStrategy):
    """A* chained through waypoints placed along the straight line."""

    name = "hierarchical"

    def __init__(
        self,
        cost_field: np.ndarray,
        options: Optional[RoadOptions] = None,
        astar: Optional[AStarSearch] = None,
        greedy: Optional[GreedyStepper] = None,
    ):
        super().__init__(cost_field, options)
        self.astar = astar or AStarSearch(cost_field, self.options)
        self.greedy = greedy or GreedyStepper(cost_field, self.options)

    def relocate(self, cell: Coord) -> Coord:
        """Cheapest cell within the search radius (first found wins ties)."""
        radius = self.options.waypoint_search_radius
        best = cell
        best_cost = self.cell_cost(cell) if self.in_bounds(cell) else math.inf

        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                candidate = (cell[0] + dx, cell[1] + dy)
                if not self.in_bounds(candidate):
                    continue
                candidate_cost = self.cell_cost(candidate)
                if candidate_cost < best_cost:
                    best = candidate
                    best_cost = candidate_cost
        return best

    def waypoints(self, start: Coord, goal: Coord) -> List[Coord]:
        dx = goal[0] - start[0]
        dy = goal[1] - start[1]
        count = max(2, max(abs(dx), abs(dy)) // self.options.waypoint_spacing)

        points = []
        for i in range(1, count):
            point = (start[0] + int(dx * i / count), start[1] + int(dy * i / count))
            points.append(self.relocate(point))
        return points

    def attempt(self, start, goal, road_tiles):
        targets = self.waypoints(start, goal) + [goal]
        local_roads = set(road_tiles)

        path: List[Coord] = [start]
        current = start
        for target in targets:
            if target == current:
                continue
            manhattan = abs(target[0] - current[0]) + abs(target[1] - current[1])
            budget = max(self.options.min_segment_iterations, manhattan * manhattan)

            segment = self.astar.search(current, target, local_roads, budget)
            if segment is None:
                segment = self.greedy.walk(current, target)
                logger.warning(
                    "Greedy fallback for segment",
                    start=current,
                    target=target,
                    reached=segment[-1] == target,
                )

            path.extend(segment[1:])
            local_roads.update(segment)
            current = segment[-1]

        if path[-1] != goal:
            return None
        return path


class RoutePlanner:
    """Finds routes between settlements by escalating through strategies."""

    def __init__(self, cost_field: np.ndarray, options: Optional[RoadOptions] = None):
        self.cost_field = cost_field
        self.options = options or RoadOptions()
        self.astar = AStarSearch(cost_field, self.options)
        self.greedy = GreedyStepper(cost_field, self.options)
        self.hierarchical = HierarchicalSearch(
            cost_field, self.options, astar=self.astar, greedy=self.greedy
        )

    def strategies_for(self, start: Coord, goal: Coord) -> List[RouteStrategy]:
        """Long pairs go straight to waypoints; short pairs try plain A* first."""
        if euclidean(start, goal) > self.options.hierarchical_threshold:
            return [self.hierarchical]
        return [self.astar, self.hierarchical]

    def find_route(
        self,
        start: Coord,
        goal: Coord,
        road_tiles: Optional[AbstractSet[Coord]] = None,
    ) -> Optional[List[Coord]]:
        """
        Route from start to goal.

        Args:
            start: Start cell (x, y)
            goal: Goal cell (x, y)
            road_tiles: Cells of already built roads, discounted during search

        Returns:
            Path from start to goal inclusive, or None if every strategy failed

        Raises:
            ValueError: If either endpoint lies outside the grid
        """
        height, width = self.cost_field.shape
        for label, cell in (("start", start), ("goal", goal)):
            if not (0 <= cell[0] < width and 0 <= cell[1] < height):
                raise ValueError(f"Route {label} {cell} lies outside the {width}x{height} grid")

        start = (int(start[0]), int(start[1]))
        goal = (int(goal[0]), int(goal[1]))
        road_tiles = road_tiles if road_tiles is not None else frozenset()

        for strategy in self.strategies_for(start, goal):
            path = strategy.attempt(start, goal, road_tiles)
            if path and path[0] == start and path[-1] == goal:
                logger.debug(
                    "Route found",
                    start=start,
                    goal=goal,
                    strategy=strategy.name,
                    length=len(path),
                )
                return path

        logger.warning("No route found", start=start, goal=goal)
        return None
