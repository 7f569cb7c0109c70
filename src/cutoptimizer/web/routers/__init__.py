"""API routers for the REST API."""

from cutoptimizer.web.routers.optimize import router as optimize_router
from cutoptimizer.web.routers.projects import router as projects_router

__all__ = [
    "optimize_router",
    "projects_router",
]
