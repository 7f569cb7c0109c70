"""Pydantic schemas for the REST API."""

from cutoptimizer.web.schemas.requests import (
    OptimizeRequest,
    PackingOptionsSchema,
    ProjectCreateRequest,
    ProjectDuplicateRequest,
    ProjectUpdateRequest,
    SheetSummaryInputSchema,
    StatisticsRequest,
)
from cutoptimizer.web.schemas.responses import (
    ErrorResponseSchema,
    OptimizationResponseSchema,
    PlacedPieceSchema,
    ProjectListSchema,
    ProjectOptimizationSchema,
    ProjectSchema,
    ProjectStatsSchema,
    SheetSchema,
    StatisticsSchema,
    UnplacedPieceSchema,
)

__all__ = [
    # Requests
    "OptimizeRequest",
    "PackingOptionsSchema",
    "ProjectCreateRequest",
    "ProjectDuplicateRequest",
    "ProjectUpdateRequest",
    "SheetSummaryInputSchema",
    "StatisticsRequest",
    # Responses
    "ErrorResponseSchema",
    "OptimizationResponseSchema",
    "PlacedPieceSchema",
    "ProjectListSchema",
    "ProjectOptimizationSchema",
    "ProjectSchema",
    "ProjectStatsSchema",
    "SheetSchema",
    "StatisticsSchema",
    "UnplacedPieceSchema",
]
