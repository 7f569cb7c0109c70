"""FastAPI dependency injection for optimizer services."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Header

from cutoptimizer.application import (
    InMemoryProjectStore,
    JsonFileProjectStore,
    OptimizeCommand,
    ProjectService,
    ProjectStore,
)
from cutoptimizer.web.exceptions import UnauthorizedError

DATA_DIR_ENV = "CUTOPTIMIZER_DATA_DIR"


@lru_cache(maxsize=1)
def get_project_service() -> ProjectService:
    """Get cached ProjectService instance.

    Projects are kept in memory unless ``CUTOPTIMIZER_DATA_DIR`` names a
    directory for JSON files.
    """
    data_dir = os.environ.get(DATA_DIR_ENV)
    store: ProjectStore
    if data_dir:
        store = JsonFileProjectStore(Path(data_dir))
    else:
        store = InMemoryProjectStore()
    return ProjectService(store)


def get_optimize_command() -> OptimizeCommand:
    """Dependency for OptimizeCommand."""
    return OptimizeCommand()


def get_user_id(
    x_user_id: Annotated[str | None, Header(description="Id of the calling user")] = None,
) -> str:
    """Read the caller's user id from the ``X-User-Id`` header."""
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError("X-User-Id header is required")
    return x_user_id.strip()


# Type aliases for cleaner endpoint signatures
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
OptimizeCommandDep = Annotated[OptimizeCommand, Depends(get_optimize_command)]
UserIdDep = Annotated[str, Depends(get_user_id)]
