"""
Configuration for city network generation.
"""

from .config import Settings, settings
from .options import (
    CityGenerationOptions,
    LayoutOptions,
    RoadOptions,
    WaterCrossingPolicy,
)

__all__ = [
    "Settings",
    "settings",
    "CityGenerationOptions",
    "LayoutOptions",
    "RoadOptions",
    "WaterCrossingPolicy",
]
