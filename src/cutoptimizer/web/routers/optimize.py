"""Optimization endpoints."""

from fastapi import APIRouter

from cutoptimizer.application import OptimizationInput, OptimizationOutput
from cutoptimizer.domain import calculate_statistics
from cutoptimizer.infrastructure import serialize_statistics
from cutoptimizer.infrastructure.formatters import JsonExporter
from cutoptimizer.web.dependencies import OptimizeCommandDep
from cutoptimizer.web.schemas.requests import OptimizeRequest, StatisticsRequest
from cutoptimizer.web.schemas.responses import (
    OptimizationResponseSchema,
    StatisticsSchema,
)

router = APIRouter(prefix="/optimize", tags=["optimize"])


def output_to_schema(output: OptimizationOutput) -> OptimizationResponseSchema:
    """Convert OptimizationOutput to response schema."""
    return OptimizationResponseSchema.model_validate(JsonExporter().to_dict(output))


@router.post("", response_model=OptimizationResponseSchema)
def optimize(
    request: OptimizeRequest,
    command: OptimizeCommandDep,
) -> OptimizationResponseSchema:
    """Pack a batch of raw piece records onto sheets.

    Invalid records are skipped and counted in ``dropped_count``. Pieces
    that cannot be placed are returned with a reason.
    """
    output = command.execute(
        OptimizationInput(
            sheet_width=request.sheet_width,
            sheet_height=request.sheet_height,
            pieces=request.pieces,
            allow_rotation=request.allow_rotation,
            sort_by=request.sort_by.value,
            algorithm=request.algorithm.value,
        )
    )
    return output_to_schema(output)


@router.post("/statistics", response_model=StatisticsSchema)
def statistics(request: StatisticsRequest) -> StatisticsSchema:
    """Compute utilization statistics for a list of sheet summaries."""
    stats = calculate_statistics(request.sheets)
    return StatisticsSchema.model_validate(serialize_statistics(stats))
