"""
Option bundles for settlement placement, layout growth and road planning.

Defaults reproduce the reference tuning. All option models are frozen so a
generator can hold one without worrying about callers mutating it mid-run.
"""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WaterCrossingPolicy(str, Enum):
    """What to do when greedy fallback stepping has to cross blocking water."""

    BRIDGE = "bridge"  # keep the segment; the road is flagged by its masks
    REJECT = "reject"  # refuse blocking cells; the segment may fail


class CityGenerationOptions(BaseModel):
    """Settlement site selection parameters."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Generate settlements at all")
    city_count: int = Field(default=5, ge=0, description="Target number of settlements")
    min_city_distance: float = Field(
        default=60.0, ge=0, description="Minimum distance between settlement centers"
    )

    # Size tier ratios, rolled cumulatively in this order
    village_ratio: float = Field(default=0.4, ge=0, description="Share of villages")
    town_ratio: float = Field(default=0.3, ge=0, description="Share of towns")
    city_ratio: float = Field(default=0.2, ge=0, description="Share of cities")
    capital_ratio: float = Field(
        default=0.1, ge=0, description="Share of capitals; rolls past the other tiers land here"
    )

    # Scoring weights
    prefer_rivers: float = Field(default=0.7, description="Weight of river proximity")
    prefer_coast: float = Field(default=0.5, description="Weight of coast proximity")
    avoid_mountains: float = Field(
        default=0.8, description="Weight of the high elevation penalty"
    )

    # Scoring thresholds
    max_site_elevation: float = Field(
        default=0.72, description="Cells above this height are never candidates"
    )
    min_site_score: float = Field(
        default=0.35, description="Candidates must score above this"
    )
    river_distance_max: int = Field(
        default=25, ge=1, description="River distance field saturation"
    )
    coast_distance_max: int = Field(
        default=30, ge=1, description="Coast distance field saturation"
    )
    river_band: Tuple[int, int] = Field(
        default=(2, 18), description="River distances [low, high) earning a bonus"
    )
    coast_band: Tuple[int, int] = Field(
        default=(5, 25), description="Coast distances [low, high) earning a bonus"
    )
    site_clearance: int = Field(
        default=4,
        ge=0,
        description="Half-size of the dry square a site needs for its civic block and streets",
    )

    @model_validator(mode="after")
    def _check_ratios(self):
        total = self.village_ratio + self.town_ratio + self.city_ratio + self.capital_ratio
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Size tier ratios must sum to 1, got {total:g}")
        return self


class LayoutOptions(BaseModel):
    """Building layout and fortification parameters."""

    model_config = ConfigDict(frozen=True)

    street_width: int = Field(default=2, ge=1, description="Street ring around blocks")
    border_margin: int = Field(
        default=2, ge=0, description="Blocks keep this many cells from the grid edge"
    )
    central_extent: Tuple[int, int] = Field(
        default=(4, 6), description="Inclusive size range of the civic block"
    )
    block_extent: Tuple[int, int] = Field(
        default=(3, 5), description="Inclusive size range of other blocks"
    )
    max_build_elevation: float = Field(
        default=0.72, description="Blocks may not cover cells above this height"
    )
    attempts_per_block: int = Field(
        default=8, ge=1, description="Placement attempts allowed per target block"
    )
    wall_padding: int = Field(
        default=2, ge=0, description="Wall candidates reach wall_padding // 2 cells past the boundary"
    )
    min_wall_tiles: int = Field(
        default=10, ge=0, description="Settlements with fewer occupied tiles get no walls"
    )
    gate_width: int = Field(
        default=3, ge=1, description="Gate width in tiles, odd so the gate centers on its tile"
    )

    @model_validator(mode="after")
    def _check_ranges(self):
        for name in ("central_extent", "block_extent"):
            low, high = getattr(self, name)
            if low < 1 or high < low:
                raise ValueError(f"{name} must be a non-empty positive range")
        if self.gate_width % 2 == 0:
            raise ValueError("gate_width must be odd")
        return self


class RoadOptions(BaseModel):
    """Cost field, route search and network composition parameters."""

    model_config = ConfigDict(frozen=True)

    # A* search
    existing_road_multiplier: float = Field(
        default=0.3, gt=0, description="Cost multiplier on cells already used by roads"
    )
    blocking_cost: float = Field(
        default=5000.0, description="Cells at or above this cost are never entered"
    )
    max_iterations: int = Field(default=150000, ge=1, description="A* iteration budget")
    heuristic_weight: float = Field(
        default=0.9, gt=0, description="Scale on the Euclidean heuristic"
    )
    diagonal_factor: float = Field(default=1.414, description="Diagonal move multiplier")

    # Hierarchical search
    hierarchical_threshold: float = Field(
        default=200.0, description="Straight-line distance that triggers waypoints"
    )
    waypoint_spacing: int = Field(default=100, ge=1, description="Cells per waypoint")
    waypoint_search_radius: int = Field(
        default=15, ge=0, description="Radius searched for a cheaper waypoint"
    )
    min_segment_iterations: int = Field(
        default=10000, ge=1, description="Lower bound on each segment's budget"
    )
    greedy_water_policy: WaterCrossingPolicy = Field(
        default=WaterCrossingPolicy.BRIDGE,
        description="Greedy fallback behaviour on blocking water",
    )

    # Post-processing
    water_cost_threshold: float = Field(
        default=200.0, description="Path cells at or above this cost count as water"
    )
    smoothing_window: int = Field(
        default=9, ge=1, description="Maximum cells skipped by lookahead smoothing"
    )
    smoothing_max_cost: float = Field(
        default=100.0, description="Shortcuts may not cross cells above this cost"
    )

    # Network composition
    cost_samples: int = Field(default=30, ge=1, description="Samples per MST edge")
    sample_cost_cap: float = Field(default=200.0, description="Cap on each sample")
    redundancy_min_settlements: int = Field(
        default=5, ge=0, description="Redundancy edges need at least this many settlements"
    )
    road_buffer: int = Field(
        default=1, ge=0, description="Discount buffer around spanning-tree roads"
    )
