"""Value objects for the cut optimizer domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_COLOR = "#3B82F6"
MAX_QUANTITY = 1000


class SortMethod(str, Enum):
    """Ordering applied to pieces before packing."""

    AREA_DESC = "area-desc"
    MAX_SIDE_DESC = "max-side-desc"
    WIDTH_DESC = "width-desc"
    HEIGHT_DESC = "height-desc"


class PackingAlgorithm(str, Enum):
    """Placement algorithm used to lay pieces out on sheets."""

    SHELF = "shelf"
    GUILLOTINE = "guillotine"


@dataclass(frozen=True)
class Piece:
    """A rectangular piece to be cut from a sheet.

    Dimensions are whole millimeters. Color is presentation only and never
    influences packing.

    Attributes:
        id: Identifier, unique within one optimization request.
        width: Piece width in millimeters.
        height: Piece height in millimeters.
        quantity: Number of identical pieces this record stands for.
        color: Hex color string (#RGB or #RRGGBB).
    """

    id: str
    width: int
    height: int
    quantity: int = 1
    color: str = DEFAULT_COLOR

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Piece dimensions must be positive")
        if self.quantity < 1:
            raise ValueError("Quantity must be at least 1")

    @property
    def area(self) -> int:
        """Area of a single piece in square millimeters."""
        return self.width * self.height

    @property
    def total_area(self) -> int:
        """Area of all pieces of this record in square millimeters."""
        return self.area * self.quantity
