"""Data Transfer Objects for the application layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cutoptimizer.domain import (
    DroppedRecord,
    PackingAlgorithm,
    SortMethod,
    Statistics,
)
from cutoptimizer.infrastructure.bin_packing import (
    OptimizationResult,
    PackingConfig,
    Sheet,
    SheetConfig,
    UnplacedPiece,
)

MIN_SHEET_SIZE = 100
MAX_SHEET_SIZE = 10000


@dataclass
class OptimizationInput:
    """Input DTO for an optimization request.

    Pieces are raw records; they are sanitized by the command, not here.
    """

    sheet_width: int
    sheet_height: int
    pieces: list[Any] = field(default_factory=list)
    allow_rotation: bool = True
    sort_by: str = SortMethod.AREA_DESC.value
    algorithm: str = PackingAlgorithm.SHELF.value

    def validate(self) -> list[str]:
        """Validate input and return list of error messages."""
        errors: list[str] = []
        if self.sheet_width <= 0:
            errors.append("Sheet width must be positive")
        if self.sheet_height <= 0:
            errors.append("Sheet height must be positive")
        if not errors:
            if self.sheet_width < MIN_SHEET_SIZE or self.sheet_height < MIN_SHEET_SIZE:
                errors.append(
                    f"Minimum sheet size is {MIN_SHEET_SIZE}x{MIN_SHEET_SIZE}mm"
                )
            if self.sheet_width > MAX_SHEET_SIZE or self.sheet_height > MAX_SHEET_SIZE:
                errors.append(
                    f"Maximum sheet size is {MAX_SHEET_SIZE}x{MAX_SHEET_SIZE}mm"
                )
        valid_sorts = [m.value for m in SortMethod]
        if self.sort_by not in valid_sorts:
            errors.append(f"Sort method must be one of: {', '.join(valid_sorts)}")
        valid_algorithms = [a.value for a in PackingAlgorithm]
        if self.algorithm not in valid_algorithms:
            errors.append(f"Algorithm must be one of: {', '.join(valid_algorithms)}")
        return errors

    def to_packing_config(self) -> PackingConfig:
        """Convert to PackingConfig."""
        return PackingConfig(
            sheet_size=SheetConfig(width=self.sheet_width, height=self.sheet_height),
            allow_rotation=self.allow_rotation,
            sort_by=SortMethod(self.sort_by),
            algorithm=PackingAlgorithm(self.algorithm),
        )


@dataclass
class OptimizationOutput:
    """Output DTO containing the optimization results.

    Attributes:
        config: Packing configuration the run used.
        result: Sheets and unplaced pieces from the packer.
        statistics: Utilization statistics for the sheets.
        dropped: Raw records the sanitizer excluded.
    """

    config: PackingConfig
    result: OptimizationResult
    statistics: Statistics
    dropped: tuple[DroppedRecord, ...] = ()

    @property
    def sheets(self) -> tuple[Sheet, ...]:
        return self.result.sheets

    @property
    def unplaced_pieces(self) -> tuple[UnplacedPiece, ...]:
        return self.result.unplaced_pieces

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)

    @property
    def has_warnings(self) -> bool:
        """Whether any piece was dropped or left unplaced."""
        return bool(self.dropped or self.result.unplaced_pieces)
