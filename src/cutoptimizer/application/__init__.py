"""Application layer - use cases and orchestration."""

from .commands import EmptyPieceListError, OptimizationInputError, OptimizeCommand
from .dtos import OptimizationInput, OptimizationOutput
from .projects import (
    InMemoryProjectStore,
    JsonFileProjectStore,
    Project,
    ProjectError,
    ProjectNotFoundError,
    ProjectPermissionError,
    ProjectService,
    ProjectStats,
    ProjectStore,
    ProjectValidationError,
)

__all__ = [
    "EmptyPieceListError",
    "InMemoryProjectStore",
    "JsonFileProjectStore",
    "OptimizationInput",
    "OptimizationInputError",
    "OptimizationOutput",
    "OptimizeCommand",
    "Project",
    "ProjectError",
    "ProjectNotFoundError",
    "ProjectPermissionError",
    "ProjectService",
    "ProjectStats",
    "ProjectStore",
    "ProjectValidationError",
]
