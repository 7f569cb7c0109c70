"""Pydantic response schemas for the REST API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PlacedPieceSchema(BaseModel):
    """A piece placed on a sheet.

    `width` and `height` are the piece's own size; `placed_width` and
    `placed_height` are its footprint after any rotation.
    """

    id: str = Field(..., description="Unit piece id")
    width: int = Field(..., description="Piece width in mm")
    height: int = Field(..., description="Piece height in mm")
    quantity: int = Field(default=1, description="Always 1 for a unit piece")
    color: str = Field(..., description="Hex color")
    x: int = Field(..., description="Left edge in mm")
    y: int = Field(..., description="Top edge in mm")
    placed_width: int = Field(..., description="Width on the sheet in mm")
    placed_height: int = Field(..., description="Height on the sheet in mm")
    rotated: bool = Field(..., description="Whether the piece is turned 90 degrees")


class SheetSchema(BaseModel):
    """A packed sheet."""

    sheet_index: int = Field(..., description="Zero-based sheet index")
    width: int = Field(..., description="Sheet width in mm")
    height: int = Field(..., description="Sheet height in mm")
    used_area: int = Field(..., description="Area covered by pieces in mm2")
    efficiency: float = Field(..., description="Used area as a percentage")
    pieces: list[PlacedPieceSchema] = Field(default_factory=list)


class UnplacedPieceSchema(BaseModel):
    """A piece that could not be placed."""

    id: str
    width: int
    height: int
    quantity: int = 1
    color: str
    reason: str = Field(..., description="Why the piece was not placed")


class StatisticsSchema(BaseModel):
    """Utilization statistics."""

    total_sheets: int
    total_area: int
    used_area: int
    waste_area: int
    efficiency: float
    total_pieces: int


class OptimizationResponseSchema(BaseModel):
    """Response for an optimization run."""

    sheets: list[SheetSchema] = Field(default_factory=list)
    unplaced_pieces: list[UnplacedPieceSchema] = Field(default_factory=list)
    statistics: StatisticsSchema
    dropped_count: int = Field(
        default=0, description="Number of piece records skipped as invalid"
    )


class ProjectSchema(BaseModel):
    """A stored project."""

    id: str
    name: str
    description: str
    sheet_width: int
    sheet_height: int
    pieces: list[Any]
    sheets: list[dict[str, Any]]
    user_id: str
    created_at: datetime
    updated_at: datetime
    is_deleted: bool


class ProjectListSchema(BaseModel):
    """A list of projects."""

    projects: list[ProjectSchema] = Field(default_factory=list)
    count: int = 0


class ProjectStatsSchema(BaseModel):
    """Aggregate figures over a user's projects."""

    total_projects: int
    total_sheets: int
    total_pieces: int
    total_area: int
    average_efficiency: float


class ProjectOptimizationSchema(BaseModel):
    """Response for optimizing a stored project."""

    project: ProjectSchema
    result: OptimizationResponseSchema


class ErrorResponseSchema(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    error_type: str = Field(..., description="Error type identifier")
    details: list[dict[str, Any]] | dict[str, Any] | None = Field(
        default=None, description="Additional error details"
    )
