"""
Settlement name generation.

Names are compounds of an optional prefix, a root and an optional suffix,
all drawn from the caller's generator so names are reproducible per seed.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..utils.seeded_random import SeededRandom


class NameBase(BaseModel):
    """Word lists and usage rates for one naming style."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Name of the name base")
    prefixes: List[str] = Field(description="Words placed before the root")
    roots: List[str] = Field(description="Core name fragments")
    suffixes: List[str] = Field(description="Words appended after the root")
    prefix_rate: float = Field(default=0.35, description="Chance of a prefix")
    suffix_rate: float = Field(default=0.25, description="Chance of a suffix")


DEFAULT_NAME_BASE = NameBase(
    name="Generic",
    prefixes=[
        "North", "South", "East", "West", "New", "Old", "Port", "Fort",
        "Mount", "Lake", "River", "King's", "Queen's", "Saint", "High",
        "Low", "Great", "Upper", "Lower",
    ],
    roots=[
        "haven", "ford", "bridge", "ton", "ville", "burg", "dale", "field",
        "gate", "hill", "wood", "stone", "creek", "bay", "cliff", "vale",
        "brook", "marsh", "grove", "peak", "hollow", "spring", "meadow", "crest",
    ],
    suffixes=[
        "", " City", " Town", " Keep", " Hold", " Landing",
        " Crossing", " Falls", " Springs", " Harbor",
    ],
)


class NameGenerator:
    """Compound settlement name generator."""

    def __init__(self, prng: SeededRandom, name_base: Optional[NameBase] = None):
        self.prng = prng
        self.name_base = name_base or DEFAULT_NAME_BASE

    def generate_settlement_name(self) -> str:
        base = self.name_base
        use_prefix = self.prng.random() < base.prefix_rate
        use_suffix = self.prng.random() < base.suffix_rate

        name = ""
        if use_prefix:
            name += self.prng.choice(base.prefixes) + " "

        root = self.prng.choice(base.roots)
        name += root[:1].upper() + root[1:]

        if use_suffix:
            name += self.prng.choice(base.suffixes)

        return name
