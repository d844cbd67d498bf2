"""
Core settlement and road generation functionality.
"""

from .terrain import TerrainGrid
from .biomes import BiomeType
from .distance_field import compute_distance_field, river_distance_field, coast_distance_field
from .cost_field import build_cost_field, CostFieldOptions
from .buildings import BuildingFootprint, BuildingType, footprint_tiles
from .settlements import CitySize, Settlement
from .site_selection import SiteSelector, SiteCandidate
from .layout import SettlementBuilder, LayoutState
from .fortifications import FortificationGenerator
from .pathfinding import RoutePlanner, AStarSearch, HierarchicalSearch, GreedyStepper
from .road_network import NetworkComposer, Road
from .city_network import CityNetwork, CityNetworkGenerator
from ..utils.seeded_random import SeededRandom

__all__ = ['TerrainGrid', 'BiomeType', 'compute_distance_field', 'river_distance_field',
           'coast_distance_field', 'build_cost_field', 'CostFieldOptions',
           'BuildingFootprint', 'BuildingType', 'footprint_tiles', 'CitySize', 'Settlement',
           'SiteSelector', 'SiteCandidate', 'SettlementBuilder', 'LayoutState',
           'FortificationGenerator', 'RoutePlanner', 'AStarSearch', 'HierarchicalSearch',
           'GreedyStepper', 'NetworkComposer', 'Road', 'CityNetwork', 'CityNetworkGenerator',
           'SeededRandom']
