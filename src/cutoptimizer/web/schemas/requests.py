"""Pydantic request schemas for the REST API."""

from typing import Any

from pydantic import BaseModel, Field

from cutoptimizer.domain import PackingAlgorithm, SortMethod


class PackingOptionsSchema(BaseModel):
    """Options shared by every optimization request."""

    allow_rotation: bool = Field(
        default=True, description="Allow pieces to be rotated 90 degrees"
    )
    sort_by: SortMethod = Field(
        default=SortMethod.AREA_DESC, description="Ordering applied before packing"
    )
    algorithm: PackingAlgorithm = Field(
        default=PackingAlgorithm.SHELF, description="Placement algorithm"
    )


class OptimizeRequest(PackingOptionsSchema):
    """Request for optimizing a batch of pieces.

    Sheet size limits are checked by the optimize command so that range
    errors share the API error format.
    """

    sheet_width: int = Field(default=2440, description="Sheet width in mm")
    sheet_height: int = Field(default=1220, description="Sheet height in mm")
    pieces: list[Any] = Field(
        default_factory=list,
        description="Raw piece records with id, width, height, quantity and color",
    )


class SheetSummaryInputSchema(BaseModel):
    """A sheet reduced to what statistics need."""

    width: int = Field(..., gt=0, description="Sheet width in mm")
    height: int = Field(..., gt=0, description="Sheet height in mm")
    used_area: int = Field(..., ge=0, description="Area covered by pieces in mm2")


class StatisticsRequest(BaseModel):
    """Request for computing statistics over sheet summaries."""

    sheets: list[SheetSummaryInputSchema] = Field(default_factory=list)


class ProjectCreateRequest(BaseModel):
    """Request for creating a project."""

    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Project notes")
    sheet_width: int = Field(default=2440, description="Sheet width in mm")
    sheet_height: int = Field(default=1220, description="Sheet height in mm")
    pieces: list[Any] = Field(default_factory=list, description="Raw piece records")


class ProjectUpdateRequest(BaseModel):
    """Partial project update. Only fields that are sent are applied."""

    name: str | None = None
    description: str | None = None
    sheet_width: int | None = None
    sheet_height: int | None = None
    pieces: list[Any] | None = None


class ProjectDuplicateRequest(BaseModel):
    """Request for duplicating a project."""

    name: str = Field(default="", description="Name of the copy")
