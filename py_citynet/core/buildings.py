"""
Building footprints and their shape variants.

A footprint is an origin, an integer extent and a shape. The occupied tile
set is a pure function of those three values; shapes only carry the
parameter they need (cut corner, arm orientation, open side, flip).
"""

from enum import Enum, IntEnum
from typing import Annotated, List, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

Coord = Tuple[int, int]


class BuildingType(IntEnum):
    """Use category of a building block."""

    RESIDENTIAL = 0
    COMMERCIAL = 1
    INDUSTRIAL = 2
    CIVIC = 3
    MILITARY = 4
    MARKET = 5


class Corner(str, Enum):
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class RectangleShape(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["rectangle"] = "rectangle"


class LShape(BaseModel):
    """Rectangle with one quarter-sized corner removed."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["l"] = "l"
    cut_corner: Corner


class TShape(BaseModel):
    """Bar along one side with a stem; `orientation` is the side the bar sits on."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["t"] = "t"
    orientation: Direction


class UShape(BaseModel):
    """Courtyard block open towards `open_side`."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["u"] = "u"
    open_side: Direction


class PlusShape(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["plus"] = "plus"


class ZShape(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["z"] = "z"
    flipped: bool = False


BlockShape = Annotated[
    Union[RectangleShape, LShape, TShape, UShape, PlusShape, ZShape],
    Field(discriminator="kind"),
]

RECTANGLE = RectangleShape()


def _includes(shape, x: int, y: int, w: int, h: int) -> bool:
    """Whether local cell (x, y) of a w x h block belongs to the shape."""
    if isinstance(shape, RectangleShape):
        return True

    if isinstance(shape, LShape):
        cut_w = w // 2
        cut_h = h // 2
        corner = shape.cut_corner
        if corner == Corner.TOP_LEFT:
            in_cut = x < cut_w and y < cut_h
        elif corner == Corner.TOP_RIGHT:
            in_cut = x >= w - cut_w and y < cut_h
        elif corner == Corner.BOTTOM_LEFT:
            in_cut = x < cut_w and y >= h - cut_h
        else:
            in_cut = x >= w - cut_w and y >= h - cut_h
        return not in_cut

    if isinstance(shape, TShape):
        arm_w = w // 3
        arm_h = h // 3
        stem_x = arm_w <= x < w - arm_w
        stem_y = arm_h <= y < h - arm_h
        orientation = shape.orientation
        if orientation == Direction.UP:
            return y >= arm_h or stem_x
        if orientation == Direction.DOWN:
            return y < h - arm_h or stem_x
        if orientation == Direction.LEFT:
            return x >= arm_w or stem_y
        return x < w - arm_w or stem_y

    if isinstance(shape, UShape):
        wall_w = max(1, w // 3)
        wall_h = max(1, h // 3)
        side_x = x < wall_w or x >= w - wall_w
        side_y = y < wall_h or y >= h - wall_h
        open_side = shape.open_side
        if open_side == Direction.UP:
            return y >= wall_h or side_x
        if open_side == Direction.DOWN:
            return y < h - wall_h or side_x
        if open_side == Direction.LEFT:
            return x >= wall_w or side_y
        return x < w - wall_w or side_y

    if isinstance(shape, PlusShape):
        arm_w = w // 3
        arm_h = h // 3
        return arm_h <= y < h - arm_h or arm_w <= x < w - arm_w

    if isinstance(shape, ZShape):
        step_w = w // 2
        step_h = h // 2
        spine = step_w - 1 <= x <= step_w
        if shape.flipped:
            return (y < step_h and x >= step_w) or (y >= step_h and x < step_w) or spine
        return (y < step_h and x < step_w) or (y >= step_h and x >= step_w) or spine

    raise TypeError(f"Unknown block shape: {shape!r}")


def footprint_tiles(origin: Coord, size: Coord, shape=RECTANGLE) -> List[Coord]:
    """
    Tiles covered by a block, in row-major order.

    Args:
        origin: Top-left corner (x, y)
        size: (width, height) extent
        shape: Shape variant

    Returns:
        List of absolute (x, y) tiles
    """
    ox, oy = origin
    w, h = size
    return [
        (ox + x, oy + y)
        for y in range(h)
        for x in range(w)
        if _includes(shape, x, y, w, h)
    ]


class BuildingFootprint(BaseModel):
    """One building block inside a settlement."""

    model_config = ConfigDict(frozen=True)

    origin: Coord = Field(description="Top-left corner (x, y)")
    size: Coord = Field(description="Extent (width, height)")
    shape: BlockShape = Field(default=RECTANGLE, description="Footprint shape variant")
    building_type: BuildingType = Field(
        default=BuildingType.RESIDENTIAL, description="Use category"
    )

    def occupied_tiles(self) -> List[Coord]:
        return footprint_tiles(self.origin, self.size, self.shape)
