"""Conversion from job file models to application DTOs."""

from cutoptimizer.application.config.schema import OptimizationJobConfig
from cutoptimizer.application.dtos import OptimizationInput


def config_to_input(config: OptimizationJobConfig) -> OptimizationInput:
    """Build an OptimizationInput from a validated job file."""
    return OptimizationInput(
        sheet_width=config.sheet.width,
        sheet_height=config.sheet.height,
        pieces=list(config.pieces),
        allow_rotation=config.options.allow_rotation,
        sort_by=config.options.sort_by.value,
        algorithm=config.options.algorithm.value,
    )
