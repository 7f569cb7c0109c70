"""Bin packing data models and algorithms for sheet cut optimization.

This module provides data structures for representing sheet layouts,
piece placements and packing results, together with the shelf and
guillotine packers that produce them.

All result dataclasses are frozen (immutable). Working state lives in the
packer call and is discarded on return.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Sequence

from cutoptimizer.domain.value_objects import PackingAlgorithm, Piece, SortMethod

logger = logging.getLogger(__name__)

REASON_NO_SPACE = "could not be placed on any sheet"

_SORT_KEYS: dict[SortMethod, Callable[[Piece], int]] = {
    SortMethod.AREA_DESC: lambda p: p.width * p.height,
    SortMethod.MAX_SIDE_DESC: lambda p: max(p.width, p.height),
    SortMethod.WIDTH_DESC: lambda p: p.width,
    SortMethod.HEIGHT_DESC: lambda p: p.height,
}


@dataclass(frozen=True)
class SheetConfig:
    """Dimensions of the stock sheet, in millimeters.

    The default is a common 2440x1220 board.
    """

    width: int = 2440
    height: int = 1220

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError("Sheet width must be positive")
        if self.height <= 0:
            raise ValueError("Sheet height must be positive")

    @property
    def area(self) -> int:
        """Sheet area in square millimeters."""
        return self.width * self.height


@dataclass(frozen=True)
class PackingConfig:
    """Configuration for a packing run.

    Attributes:
        sheet_size: Sheet dimensions, constant for every sheet in the run.
        allow_rotation: Whether pieces may be turned 90 degrees to fit.
        sort_by: Ordering applied to pieces before placement.
        algorithm: Placement algorithm.
    """

    sheet_size: SheetConfig = field(default_factory=SheetConfig)
    allow_rotation: bool = True
    sort_by: SortMethod = SortMethod.AREA_DESC
    algorithm: PackingAlgorithm = PackingAlgorithm.SHELF


@dataclass(frozen=True)
class PlacedPiece:
    """A piece placed at a specific position on a sheet.

    Coordinates are sheet-local with the origin at the top-left corner.

    Attributes:
        piece: The unit piece being placed.
        x: Horizontal position from the left edge in millimeters.
        y: Vertical position from the top edge in millimeters.
        rotated: True if the piece is turned 90 degrees.
    """

    piece: Piece
    x: int
    y: int
    rotated: bool = False

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError("Position coordinates must be non-negative")

    @property
    def placed_width(self) -> int:
        """Width of piece as placed (accounts for rotation)."""
        return self.piece.height if self.rotated else self.piece.width

    @property
    def placed_height(self) -> int:
        """Height of piece as placed (accounts for rotation)."""
        return self.piece.width if self.rotated else self.piece.height

    @property
    def right_edge(self) -> int:
        """X coordinate of piece right edge."""
        return self.x + self.placed_width

    @property
    def bottom_edge(self) -> int:
        """Y coordinate of piece bottom edge."""
        return self.y + self.placed_height

    @property
    def area(self) -> int:
        return self.placed_width * self.placed_height

    def overlaps(self, other: PlacedPiece) -> bool:
        """Check whether two placements share any interior area."""
        return (
            self.x < other.right_edge
            and other.x < self.right_edge
            and self.y < other.bottom_edge
            and other.y < self.bottom_edge
        )


@dataclass(frozen=True)
class Sheet:
    """A stock sheet and the pieces placed on it.

    Attributes:
        sheet_index: Zero-based index of this sheet in the result.
        width: Sheet width in millimeters.
        height: Sheet height in millimeters.
        pieces: Placed pieces in placement order.
    """

    sheet_index: int
    width: int
    height: int
    pieces: tuple[PlacedPiece, ...] = ()

    def __post_init__(self) -> None:
        if self.sheet_index < 0:
            raise ValueError("Sheet index must be non-negative")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Sheet dimensions must be positive")

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def used_area(self) -> int:
        """Total area covered by placed pieces in square millimeters."""
        return sum(p.placed_width * p.placed_height for p in self.pieces)

    @property
    def waste_area(self) -> int:
        return self.area - self.used_area

    @property
    def efficiency(self) -> float:
        """Percentage of the sheet covered by pieces."""
        return (self.used_area / self.area) * 100

    @property
    def piece_count(self) -> int:
        """Number of pieces placed on this sheet."""
        return len(self.pieces)


@dataclass(frozen=True)
class UnplacedPiece:
    """A piece that could not be placed, with the reason why."""

    piece: Piece
    reason: str


@dataclass(frozen=True)
class OptimizationResult:
    """Complete result of a packing run.

    Attributes:
        sheets: Sheets in creation order.
        unplaced_pieces: Pieces that could not be placed, in sorted order.
    """

    sheets: tuple[Sheet, ...] = ()
    unplaced_pieces: tuple[UnplacedPiece, ...] = ()

    @property
    def total_sheets(self) -> int:
        return len(self.sheets)

    @property
    def total_pieces_placed(self) -> int:
        """Total number of pieces placed across all sheets."""
        return sum(sheet.piece_count for sheet in self.sheets)


def oversize_reason(piece: Piece, sheet: SheetConfig, allow_rotation: bool) -> str:
    """Describe why a piece can never fit on a sheet."""
    orientation = (
        "in either orientation" if allow_rotation else "(rotation disabled)"
    )
    return (
        f"piece dimensions exceed sheet size: {piece.width}x{piece.height}mm "
        f"does not fit on a {sheet.width}x{sheet.height}mm sheet {orientation}"
    )


# (position in sorted order, piece)
_Pending = tuple[int, Piece]


class BinPacker(ABC):
    """Shared driver for sheet packers.

    Sorts the pieces, sets aside pieces that exceed the sheet, then fills one
    sheet at a time until every piece is placed or a fresh sheet receives no
    placement at all. That stall rule is what guarantees termination.

    Subclasses implement :meth:`_fill_sheet` for a single sheet.
    """

    def __init__(self, config: PackingConfig) -> None:
        """Initialize the packer with configuration.

        Args:
            config: Packing configuration specifying sheet size, rotation
                and ordering.
        """
        self.config = config

    def pack(self, pieces: Sequence[Piece]) -> OptimizationResult:
        """Pack unit pieces onto as many sheets as needed.

        Args:
            pieces: Pieces to pack. Each must already have quantity 1.

        Returns:
            OptimizationResult with the sheets and any unplaced pieces.

        Raises:
            ValueError: If a piece has not been expanded to quantity 1.
        """
        if not pieces:
            return OptimizationResult()

        for piece in pieces:
            if piece.quantity != 1:
                raise ValueError(
                    f"Piece '{piece.id}' has quantity {piece.quantity}; "
                    "expand pieces before packing"
                )

        sheet_size = self.config.sheet_size
        ordered = self._sort_pieces(pieces)

        pending: list[_Pending] = []
        unplaced: list[tuple[int, UnplacedPiece]] = []
        for position, piece in enumerate(ordered):
            if self._fits_empty_sheet(piece):
                pending.append((position, piece))
            else:
                reason = oversize_reason(piece, sheet_size, self.config.allow_rotation)
                logger.debug("Piece '%s' rejected: %s", piece.id, reason)
                unplaced.append((position, UnplacedPiece(piece=piece, reason=reason)))

        logger.debug(
            "Packing %d pieces onto %dx%d sheets",
            len(pending),
            sheet_size.width,
            sheet_size.height,
        )

        sheets: list[Sheet] = []
        while pending:
            placements, remaining = self._fill_sheet(pending)
            if not placements:
                logger.warning(
                    "Sheet %d received no pieces; %d pieces left unplaced",
                    len(sheets) + 1,
                    len(remaining),
                )
                break

            sheet = Sheet(
                sheet_index=len(sheets),
                width=sheet_size.width,
                height=sheet_size.height,
                pieces=tuple(placements),
            )
            sheets.append(sheet)
            logger.debug(
                "Sheet %d: %d pieces, %.1f%% efficiency",
                sheet.sheet_index,
                sheet.piece_count,
                sheet.efficiency,
            )
            pending = remaining

        for position, piece in pending:
            unplaced.append((position, UnplacedPiece(piece=piece, reason=REASON_NO_SPACE)))
        unplaced.sort(key=lambda item: item[0])

        if unplaced:
            logger.warning("%d pieces could not be placed", len(unplaced))

        return OptimizationResult(
            sheets=tuple(sheets),
            unplaced_pieces=tuple(item for _, item in unplaced),
        )

    def _sort_pieces(self, pieces: Sequence[Piece]) -> list[Piece]:
        """Sort pieces descending by the configured key.

        Python's sort is stable with reverse=True, so ties keep input order.
        """
        return sorted(pieces, key=_SORT_KEYS[self.config.sort_by], reverse=True)

    def _fits_empty_sheet(self, piece: Piece) -> bool:
        sheet = self.config.sheet_size
        return self._fit_orientation(piece, sheet.width, sheet.height) is not None

    def _fit_orientation(
        self,
        piece: Piece,
        available_width: int,
        available_height: int,
    ) -> bool | None:
        """Find an orientation in which the piece fits the given space.

        Returns:
            False if it fits unrotated, True if it only fits rotated,
            None if it does not fit at all.
        """
        if piece.width <= available_width and piece.height <= available_height:
            return False
        if (
            self.config.allow_rotation
            and piece.height <= available_width
            and piece.width <= available_height
        ):
            return True
        return None

    @abstractmethod
    def _fill_sheet(
        self, pending: list[_Pending]
    ) -> tuple[list[PlacedPiece], list[_Pending]]:
        """Place as many pending pieces as possible onto one fresh sheet.

        Returns:
            Tuple of (placements in placement order, pieces still pending).
        """


class ShelfBinPacker(BinPacker):
    """Greedy shelf packer.

    Pieces are placed left to right along a row from a single cursor. When
    the current piece fits in neither orientation, a new row starts below
    the tallest piece of the row and the same piece is retried. A piece that
    does not fit at the start of an empty row waits for the next sheet.

    This is a largest-first heuristic. It always yields a valid,
    non-overlapping layout but not necessarily the fewest sheets.
    """

    def _fill_sheet(
        self, pending: list[_Pending]
    ) -> tuple[list[PlacedPiece], list[_Pending]]:
        sheet_width = self.config.sheet_size.width
        sheet_height = self.config.sheet_size.height

        remaining = list(pending)
        placements: list[PlacedPiece] = []
        current_x = 0
        current_y = 0
        row_height = 0

        i = 0
        while i < len(remaining):
            _, piece = remaining[i]
            rotated = self._fit_orientation(
                piece, sheet_width - current_x, sheet_height - current_y
            )

            if rotated is not None:
                placement = PlacedPiece(piece=piece, x=current_x, y=current_y, rotated=rotated)
                placements.append(placement)
                current_x += placement.placed_width
                row_height = max(row_height, placement.placed_height)
                del remaining[i]
                if rotated:
                    logger.debug(
                        "Piece '%s' placed rotated at (%d, %d)",
                        piece.id,
                        placement.x,
                        placement.y,
                    )
            elif current_x > 0:
                # Start a new row and retry the same piece
                current_y += row_height
                current_x = 0
                row_height = 0
            else:
                i += 1

            if current_y >= sheet_height:
                break

        return placements, remaining


@dataclass
class _FreeRect:
    """Internal free rectangle for the guillotine packer."""

    x: int
    y: int
    width: int
    height: int


class GuillotineBinPacker(BinPacker):
    """First-fit guillotine packer.

    Keeps a list of free rectangles per sheet. Each piece goes into the
    first free rectangle it fits, and the rectangle is split into a right
    remainder (as tall as the piece) and a bottom remainder (full width).
    All cuts run edge to edge within their rectangle, which suits panel saws.
    """

    def _fill_sheet(
        self, pending: list[_Pending]
    ) -> tuple[list[PlacedPiece], list[_Pending]]:
        sheet = self.config.sheet_size
        free_rects = [_FreeRect(x=0, y=0, width=sheet.width, height=sheet.height)]
        placements: list[PlacedPiece] = []
        remaining: list[_Pending] = []

        for item in pending:
            _, piece = item
            placement = self._place_in_free_rects(piece, free_rects)
            if placement is None:
                remaining.append(item)
            else:
                placements.append(placement)

        return placements, remaining

    def _place_in_free_rects(
        self, piece: Piece, free_rects: list[_FreeRect]
    ) -> PlacedPiece | None:
        for index, rect in enumerate(free_rects):
            rotated = self._fit_orientation(piece, rect.width, rect.height)
            if rotated is None:
                continue

            placement = PlacedPiece(piece=piece, x=rect.x, y=rect.y, rotated=rotated)
            del free_rects[index]

            placed_w = placement.placed_width
            placed_h = placement.placed_height
            if rect.width > placed_w:
                free_rects.append(
                    _FreeRect(
                        x=rect.x + placed_w,
                        y=rect.y,
                        width=rect.width - placed_w,
                        height=placed_h,
                    )
                )
            if rect.height > placed_h:
                free_rects.append(
                    _FreeRect(
                        x=rect.x,
                        y=rect.y + placed_h,
                        width=rect.width,
                        height=rect.height - placed_h,
                    )
                )
            return placement

        return None


def create_packer(config: PackingConfig) -> BinPacker:
    """Build the packer selected by the configuration."""
    if config.algorithm == PackingAlgorithm.GUILLOTINE:
        return GuillotineBinPacker(config)
    return ShelfBinPacker(config)


def pack(
    pieces: Sequence[Piece],
    sheet_width: int,
    sheet_height: int,
    allow_rotation: bool = True,
) -> OptimizationResult:
    """Pack unit pieces onto sheets with the shelf algorithm.

    Args:
        pieces: Pieces with quantity 1 (see ``expand_pieces``).
        sheet_width: Sheet width in millimeters, must be positive.
        sheet_height: Sheet height in millimeters, must be positive.
        allow_rotation: Whether pieces may be turned 90 degrees.

    Returns:
        OptimizationResult with sheets and unplaced pieces.

    Raises:
        ValueError: If the sheet size is not positive or a piece has
            quantity other than 1.
    """
    config = PackingConfig(
        sheet_size=SheetConfig(width=sheet_width, height=sheet_height),
        allow_rotation=allow_rotation,
    )
    return ShelfBinPacker(config).pack(pieces)
