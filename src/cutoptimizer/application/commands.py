"""Application commands (use cases) for cut optimization."""

from __future__ import annotations

import logging

from cutoptimizer.domain import PieceSanitizer, calculate_statistics, expand_pieces
from cutoptimizer.infrastructure.bin_packing import create_packer

from .dtos import OptimizationInput, OptimizationOutput

logger = logging.getLogger(__name__)


class OptimizationInputError(ValueError):
    """Raised when an optimization request violates its preconditions."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Invalid optimization input: {errors}")


class EmptyPieceListError(OptimizationInputError):
    """Raised when optimization is requested without any pieces."""

    def __init__(self) -> None:
        super().__init__(["Add at least one piece to optimize"])


class OptimizeCommand:
    """Command to sanitize, pack and summarize a batch of pieces."""

    def __init__(self, sanitizer: PieceSanitizer | None = None) -> None:
        self.sanitizer = sanitizer or PieceSanitizer()

    def execute(self, optimization_input: OptimizationInput) -> OptimizationOutput:
        """Execute the optimization command.

        Malformed piece records are dropped and reported, and pieces that do
        not fit are returned as unplaced, so neither raises. A batch whose
        records were all dropped gives an empty, valid output.

        Args:
            optimization_input: Sheet size, options and raw piece records.

        Returns:
            OptimizationOutput with sheets, unplaced pieces, statistics and
            the dropped records.

        Raises:
            OptimizationInputError: If the sheet size or options are invalid.
            EmptyPieceListError: If no piece records were supplied.
        """
        errors = optimization_input.validate()
        if errors:
            raise OptimizationInputError(errors)
        if not optimization_input.pieces:
            raise EmptyPieceListError()

        config = optimization_input.to_packing_config()
        sanitized = self.sanitizer.sanitize(optimization_input.pieces)
        expanded = expand_pieces(sanitized.pieces)

        result = create_packer(config).pack(expanded)
        statistics = calculate_statistics(result.sheets)

        logger.info(
            "Optimized %d pieces onto %d sheets (%.1f%% efficiency, %d unplaced, %d dropped)",
            len(expanded),
            statistics.total_sheets,
            statistics.efficiency,
            len(result.unplaced_pieces),
            sanitized.dropped_count,
        )

        return OptimizationOutput(
            config=config,
            result=result,
            statistics=statistics,
            dropped=sanitized.dropped,
        )
