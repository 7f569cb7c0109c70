"""Aggregate utilization metrics for packed sheets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


class SheetLike(Protocol):
    """Anything that exposes sheet dimensions and used area."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    @property
    def used_area(self) -> int: ...


@dataclass(frozen=True)
class Statistics:
    """Utilization summary for a list of sheets.

    Attributes:
        total_sheets: Number of sheets.
        total_area: Combined sheet area in square millimeters.
        used_area: Combined area covered by placed pieces.
        waste_area: total_area - used_area.
        efficiency: used_area / total_area * 100, or 0 with no sheets.
        total_pieces: Number of placed pieces, when the sheets carry them.
    """

    total_sheets: int = 0
    total_area: int = 0
    used_area: int = 0
    waste_area: int = 0
    efficiency: float = 0.0
    total_pieces: int = 0


def calculate_statistics(sheets: Sequence[SheetLike]) -> Statistics:
    """Derive utilization statistics from a list of sheets.

    Pure function: identical input always gives identical output.

    Args:
        sheets: Packed sheets (or stored sheet summaries).

    Returns:
        Statistics for the sheets. Efficiency is 0 when there is no area.
    """
    total_area = sum(sheet.width * sheet.height for sheet in sheets)
    used_area = sum(sheet.used_area for sheet in sheets)
    total_pieces = sum(len(getattr(sheet, "pieces", ())) for sheet in sheets)

    efficiency = (used_area / total_area) * 100 if total_area else 0.0

    return Statistics(
        total_sheets=len(sheets),
        total_area=total_area,
        used_area=used_area,
        waste_area=total_area - used_area,
        efficiency=efficiency,
        total_pieces=total_pieces,
    )
