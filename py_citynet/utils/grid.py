"""
Integer grid helpers shared by the settlement and road modules.

Coordinates are (x, y) tuples; arrays are indexed [y, x].
"""

from typing import List, Tuple

Coord = Tuple[int, int]

NEIGHBORS_4 = ((0, 1), (0, -1), (1, 0), (-1, 0))

# Orthogonal moves first, then diagonals
NEIGHBORS_8 = (
    (0, -1),
    (0, 1),
    (-1, 0),
    (1, 0),
    (-1, -1),
    (1, -1),
    (-1, 1),
    (1, 1),
)


def sign(value: int) -> int:
    """Integer sign: -1, 0 or 1."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def in_bounds(x: int, y: int, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def chebyshev_square(radius: int) -> List[Coord]:
    """Offsets within Chebyshev distance `radius` of the origin, origin included."""
    return [
        (dx, dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
    ]


def bresenham_line(start: Coord, end: Coord) -> List[Coord]:
    """
    Integer line from start to end, both inclusive.

    Consecutive cells are 8-connected neighbours.
    """
    x0, y0 = start
    x1, y1 = end

    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    line = []
    while True:
        line.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy

    return line


def euclidean(a: Coord, b: Coord) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return (dx * dx + dy * dy) ** 0.5
