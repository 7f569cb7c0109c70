"""Project storage endpoints.

Every route is scoped to the user named in the ``X-User-Id`` header.
"""

from fastapi import APIRouter, Response

from cutoptimizer.application import Project
from cutoptimizer.web.dependencies import ProjectServiceDep, UserIdDep
from cutoptimizer.web.routers.optimize import output_to_schema
from cutoptimizer.web.schemas.requests import (
    PackingOptionsSchema,
    ProjectCreateRequest,
    ProjectDuplicateRequest,
    ProjectUpdateRequest,
)
from cutoptimizer.web.schemas.responses import (
    ProjectListSchema,
    ProjectOptimizationSchema,
    ProjectSchema,
    ProjectStatsSchema,
)

router = APIRouter(prefix="/projects", tags=["projects"])


def _project_to_schema(project: Project) -> ProjectSchema:
    return ProjectSchema.model_validate(project.to_dict())


def _list_schema(projects: list[Project]) -> ProjectListSchema:
    return ProjectListSchema(
        projects=[_project_to_schema(p) for p in projects],
        count=len(projects),
    )


@router.get("", response_model=ProjectListSchema)
def list_projects(service: ProjectServiceDep, user_id: UserIdDep) -> ProjectListSchema:
    """List active projects, most recently updated first."""
    return _list_schema(service.get_user_projects(user_id))


@router.post("", response_model=ProjectSchema, status_code=201)
def create_project(
    request: ProjectCreateRequest,
    service: ProjectServiceDep,
    user_id: UserIdDep,
) -> ProjectSchema:
    project = service.create_project(request.model_dump(), user_id)
    return _project_to_schema(project)


@router.get("/search", response_model=ProjectListSchema)
def search_projects(
    service: ProjectServiceDep,
    user_id: UserIdDep,
    q: str = "",
) -> ProjectListSchema:
    """Search projects by name or id, case-insensitively."""
    return _list_schema(service.search_projects(user_id, q))


@router.get("/stats", response_model=ProjectStatsSchema)
def project_stats(service: ProjectServiceDep, user_id: UserIdDep) -> ProjectStatsSchema:
    stats = service.get_project_stats(user_id)
    return ProjectStatsSchema(
        total_projects=stats.total_projects,
        total_sheets=stats.total_sheets,
        total_pieces=stats.total_pieces,
        total_area=stats.total_area,
        average_efficiency=stats.average_efficiency,
    )


@router.get("/{project_id}", response_model=ProjectSchema)
def get_project(
    project_id: str,
    service: ProjectServiceDep,
    user_id: UserIdDep,
) -> ProjectSchema:
    return _project_to_schema(service.get_project(project_id, user_id))


@router.patch("/{project_id}", response_model=ProjectSchema)
def update_project(
    project_id: str,
    request: ProjectUpdateRequest,
    service: ProjectServiceDep,
    user_id: UserIdDep,
) -> ProjectSchema:
    """Apply the fields present in the request body."""
    updates = request.model_dump(exclude_unset=True)
    return _project_to_schema(service.update_project(project_id, updates, user_id))


@router.delete("/{project_id}", status_code=204)
def delete_project(
    project_id: str,
    service: ProjectServiceDep,
    user_id: UserIdDep,
) -> Response:
    service.delete_project(project_id, user_id)
    return Response(status_code=204)


@router.post("/{project_id}/duplicate", response_model=ProjectSchema, status_code=201)
def duplicate_project(
    project_id: str,
    service: ProjectServiceDep,
    user_id: UserIdDep,
    request: ProjectDuplicateRequest | None = None,
) -> ProjectSchema:
    """Copy a project without its sheets."""
    new_name = request.name if request is not None else ""
    return _project_to_schema(service.duplicate_project(project_id, user_id, new_name))


@router.post("/{project_id}/optimize", response_model=ProjectOptimizationSchema)
def optimize_project(
    project_id: str,
    service: ProjectServiceDep,
    user_id: UserIdDep,
    options: PackingOptionsSchema | None = None,
) -> ProjectOptimizationSchema:
    """Optimize a stored project and save its sheets."""
    options = options or PackingOptionsSchema()
    project, output = service.optimize_project(
        project_id,
        user_id,
        allow_rotation=options.allow_rotation,
        sort_by=options.sort_by.value,
        algorithm=options.algorithm.value,
    )
    return ProjectOptimizationSchema(
        project=_project_to_schema(project),
        result=output_to_schema(output),
    )
