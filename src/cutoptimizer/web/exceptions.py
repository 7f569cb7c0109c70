"""Exception handlers for the REST API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cutoptimizer.application import (
    EmptyPieceListError,
    OptimizationInputError,
    ProjectNotFoundError,
    ProjectPermissionError,
    ProjectValidationError,
)


class UnauthorizedError(Exception):
    """Raised when a request does not identify its user."""


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers with the FastAPI app."""

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={
                "error": str(exc),
                "error_type": "unauthorized",
                "details": None,
            },
        )

    @app.exception_handler(EmptyPieceListError)
    async def empty_pieces_handler(
        request: Request, exc: EmptyPieceListError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": "No pieces to optimize",
                "error_type": "empty_pieces",
                "details": [{"message": e} for e in exc.errors],
            },
        )

    @app.exception_handler(OptimizationInputError)
    async def optimization_input_handler(
        request: Request, exc: OptimizationInputError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": "Invalid optimization input",
                "error_type": "optimization_input",
                "details": [{"message": e} for e in exc.errors],
            },
        )

    @app.exception_handler(ProjectNotFoundError)
    async def project_not_found_handler(
        request: Request, exc: ProjectNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "error": str(exc),
                "error_type": "not_found",
                "details": {"project_id": exc.project_id},
            },
        )

    @app.exception_handler(ProjectPermissionError)
    async def project_permission_handler(
        request: Request, exc: ProjectPermissionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=403,
            content={
                "error": str(exc),
                "error_type": "forbidden",
                "details": {"project_id": exc.project_id},
            },
        )

    @app.exception_handler(ProjectValidationError)
    async def project_validation_handler(
        request: Request, exc: ProjectValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": str(exc),
                "error_type": "project_validation",
                "details": None,
            },
        )
