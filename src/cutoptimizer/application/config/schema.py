"""Pydantic models for optimization job files.

A job file describes one optimization run: the sheet size, packing options
and the raw piece records. Piece records are not validated
here; the sanitizer repairs or drops each one on its own.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cutoptimizer.domain.value_objects import PackingAlgorithm, SortMethod

# Version 1.0: Initial job file schema
SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0"})


class SheetSizeConfigSchema(BaseModel):
    """Sheet dimensions in millimeters (100 to 10000 per side)."""

    model_config = ConfigDict(extra="forbid")

    width: int = Field(default=2440, ge=100, le=10000, description="Sheet width in mm")
    height: int = Field(default=1220, ge=100, le=10000, description="Sheet height in mm")


class OptimizationOptionsSchema(BaseModel):
    """Packing options."""

    model_config = ConfigDict(extra="forbid")

    allow_rotation: bool = Field(
        default=True, description="Allow pieces to be rotated 90 degrees"
    )
    sort_by: SortMethod = Field(
        default=SortMethod.AREA_DESC, description="Ordering applied before packing"
    )
    algorithm: PackingAlgorithm = Field(
        default=PackingAlgorithm.SHELF, description="Placement algorithm"
    )


class OptimizationJobConfig(BaseModel):
    """Root model of an optimization job file.

    Attributes:
        schema_version: Job file schema version.
        name: Optional project name, used for output file naming.
        sheet: Sheet dimensions.
        options: Packing options.
        pieces: Raw piece records.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default="1.0")
    name: str | None = Field(default=None, max_length=200)
    sheet: SheetSizeConfigSchema = Field(default_factory=SheetSizeConfigSchema)
    options: OptimizationOptionsSchema = Field(default_factory=OptimizationOptionsSchema)
    pieces: list[Any] = Field(default_factory=list)

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        if v not in SUPPORTED_VERSIONS:
            supported = ", ".join(sorted(SUPPORTED_VERSIONS))
            raise ValueError(
                f"Unsupported schema version '{v}'. Supported versions: {supported}"
            )
        return v
