"""
Settlement records and size tiers.
"""

from enum import IntEnum
from typing import List, Set, Tuple

from pydantic import BaseModel, Field

from .buildings import BuildingFootprint

Coord = Tuple[int, int]


class CitySize(IntEnum):
    """Settlement rank. Ordering matters: higher ranks compare greater."""

    VILLAGE = 0
    TOWN = 1
    CITY = 2
    CAPITAL = 3

    @property
    def building_range(self) -> Tuple[int, int]:
        """Inclusive (min, max) number of building blocks."""
        return {
            CitySize.VILLAGE: (3, 5),
            CitySize.TOWN: (8, 15),
            CitySize.CITY: (20, 40),
            CitySize.CAPITAL: (50, 100),
        }[self]

    @property
    def base_radius(self) -> float:
        """Influence radius limiting block placement."""
        return {
            CitySize.VILLAGE: 8.0,
            CitySize.TOWN: 15.0,
            CitySize.CITY: 25.0,
            CitySize.CAPITAL: 40.0,
        }[self]

    @property
    def wall_probability(self) -> float:
        return {
            CitySize.VILLAGE: 0.1,
            CitySize.TOWN: 0.3,
            CitySize.CITY: 0.6,
            CitySize.CAPITAL: 0.85,
        }[self]

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


class Settlement(BaseModel):
    """Data structure for a settlement."""

    id: int = Field(description="Unique settlement identifier")
    name: str = Field(default="", description="Settlement name")
    center: Coord = Field(description="Center cell (x, y)")
    size: CitySize = Field(default=CitySize.VILLAGE, description="Size tier")
    blocks: List[BuildingFootprint] = Field(
        default_factory=list, description="Building blocks in placement order"
    )
    has_walls: bool = Field(default=False, description="Has a wall ring")
    wall_tiles: List[Coord] = Field(
        default_factory=list, description="Wall cells, sorted (y, x)"
    )
    gate_tiles: List[Coord] = Field(
        default_factory=list, description="Gate cells carved out of the wall"
    )

    def all_occupied_tiles(self) -> Set[Coord]:
        tiles = set()
        for block in self.blocks:
            tiles.update(block.occupied_tiles())
        return tiles
