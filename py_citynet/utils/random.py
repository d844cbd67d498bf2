"""
Seed derivation utilities.

Sub-systems never share a generator. Each one receives a SeededRandom built
from a seed derived from the top-level seed and a fixed stream offset, so the
values a stage draws do not depend on how many values another stage drew.
"""

from .seeded_random import MASK64, SeededRandom

# Stream offsets under the top-level seed
SITE_STREAM = 0
ROAD_STREAM = 1
LAYOUT_STREAM = 2


def derive_seed(base_seed: int, offset: int) -> int:
    """
    Derive an independent 64-bit seed for a sub-stream.

    Args:
        base_seed: Parent seed
        offset: Stream index under the parent

    Returns:
        Mixed 64-bit seed
    """
    h = (int(base_seed) + int(offset) * 0x9E3779B97F4A7C15) & MASK64
    h = ((h ^ (h >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
    h = ((h ^ (h >> 27)) * 0x94D049BB133111EB) & MASK64
    return h ^ (h >> 31)


def derive_random(base_seed: int, offset: int) -> SeededRandom:
    """Build a generator for the given sub-stream."""
    return SeededRandom(derive_seed(base_seed, offset))


def settlement_random(seed: int, settlement_index: int) -> SeededRandom:
    """Generator for one settlement's layout and fortification decisions."""
    return derive_random(derive_seed(seed, LAYOUT_STREAM), settlement_index)
