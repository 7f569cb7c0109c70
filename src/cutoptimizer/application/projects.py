"""Project storage and the project service.

A project bundles a sheet size, the raw piece records a user entered and the
serialized sheets of the last optimization. Projects belong to one user and
are soft-deleted.

Storage goes through the :class:`ProjectStore` protocol. Two stores ship
here: an in-memory store used by tests and the default API, and a JSON file
store that writes one file per project.
"""

from __future__ import annotations

import copy
import json
import logging
import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

from cutoptimizer.domain import calculate_statistics
from cutoptimizer.infrastructure.bin_packing import Sheet
from cutoptimizer.infrastructure.serialization import deserialize_sheet, serialize_sheet

from .commands import OptimizeCommand
from .dtos import MAX_SHEET_SIZE, MIN_SHEET_SIZE, OptimizationInput, OptimizationOutput

logger = logging.getLogger(__name__)

DEFAULT_SHEET_WIDTH = 2440
DEFAULT_SHEET_HEIGHT = 1220

EDITABLE_FIELDS = frozenset(
    {"name", "description", "sheet_width", "sheet_height", "pieces", "sheets"}
)

_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


class ProjectError(Exception):
    """Base class for project storage errors."""


class ProjectNotFoundError(ProjectError):
    """Raised when a project does not exist or has been deleted."""

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class ProjectPermissionError(ProjectError):
    """Raised when a user accesses a project owned by someone else."""

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Not allowed to access project: {project_id}")


class ProjectValidationError(ProjectError):
    """Raised when project data is invalid."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Project:
    """A stored optimization project.

    Attributes:
        id: Project identifier.
        name: Display name, never blank.
        user_id: Owner of the project.
        description: Free-form notes.
        sheet_width: Sheet width in millimeters.
        sheet_height: Sheet height in millimeters.
        pieces: Raw piece records as entered.
        sheets: Serialized sheets of the last optimization.
        created_at: Creation time (UTC).
        updated_at: Last modification time (UTC).
        is_deleted: Soft delete flag.
    """

    id: str
    name: str
    user_id: str
    description: str = ""
    sheet_width: int = DEFAULT_SHEET_WIDTH
    sheet_height: int = DEFAULT_SHEET_HEIGHT
    pieces: list[Any] = field(default_factory=list)
    sheets: list[dict[str, Any]] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    is_deleted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sheet_width": self.sheet_width,
            "sheet_height": self.sheet_height,
            "pieces": self.pieces,
            "sheets": self.sheets,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "is_deleted": self.is_deleted,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Project:
        return cls(
            id=data["id"],
            name=data["name"],
            user_id=data["user_id"],
            description=data.get("description", ""),
            sheet_width=data.get("sheet_width", DEFAULT_SHEET_WIDTH),
            sheet_height=data.get("sheet_height", DEFAULT_SHEET_HEIGHT),
            pieces=list(data.get("pieces", [])),
            sheets=list(data.get("sheets", [])),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            is_deleted=bool(data.get("is_deleted", False)),
        )


@dataclass(frozen=True)
class ProjectStats:
    """Aggregate figures over a user's active projects.

    ``total_pieces`` counts piece records, not expanded units.
    ``average_efficiency`` is the mean, over projects that have sheets, of
    each project's mean sheet efficiency.
    """

    total_projects: int = 0
    total_sheets: int = 0
    total_pieces: int = 0
    total_area: int = 0
    average_efficiency: float = 0.0


class ProjectStore(Protocol):
    """Persistence boundary for projects."""

    def get(self, project_id: str) -> Project | None:
        """Return the project with this id, including deleted ones."""
        ...

    def save(self, project: Project) -> None:
        """Insert or replace a project."""
        ...

    def list_for_user(self, user_id: str) -> list[Project]:
        """Return every project owned by a user, including deleted ones."""
        ...


class InMemoryProjectStore:
    """Dictionary-backed store. Projects are copied on the way in and out."""

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}

    def get(self, project_id: str) -> Project | None:
        project = self._projects.get(project_id)
        return copy.deepcopy(project) if project is not None else None

    def save(self, project: Project) -> None:
        self._projects[project.id] = copy.deepcopy(project)

    def list_for_user(self, user_id: str) -> list[Project]:
        return [
            copy.deepcopy(p) for p in self._projects.values() if p.user_id == user_id
        ]


class JsonFileProjectStore:
    """Stores each project as ``<directory>/<user_id>/<project_id>.json``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _check_segment(self, value: str, what: str) -> str:
        if not _SAFE_SEGMENT.match(value):
            raise ProjectValidationError(f"Invalid {what}: {value!r}")
        return value

    def _path_for(self, project: Project) -> Path:
        user_dir = self.directory / self._check_segment(project.user_id, "user id")
        return user_dir / f"{self._check_segment(project.id, 'project id')}.json"

    def _read(self, path: Path) -> Project:
        return Project.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def get(self, project_id: str) -> Project | None:
        self._check_segment(project_id, "project id")
        for path in self.directory.glob(f"*/{project_id}.json"):
            return self._read(path)
        return None

    def save(self, project: Project) -> None:
        path = self._path_for(project)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(project.to_dict(), indent=2), encoding="utf-8")

    def list_for_user(self, user_id: str) -> list[Project]:
        user_dir = self.directory / self._check_segment(user_id, "user id")
        if not user_dir.is_dir():
            return []
        return [self._read(path) for path in sorted(user_dir.glob("*.json"))]


class ProjectService:
    """Use cases for a user's optimization projects."""

    def __init__(
        self,
        store: ProjectStore,
        command: OptimizeCommand | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.command = command or OptimizeCommand()
        self._clock = clock

    def _require_user(self, user_id: str) -> None:
        if not user_id or not user_id.strip():
            raise ProjectValidationError("A user id is required")

    def _validate_fields(self, data: Mapping[str, Any]) -> None:
        unknown = set(data) - EDITABLE_FIELDS
        if unknown:
            raise ProjectValidationError(
                f"Unknown project fields: {', '.join(sorted(unknown))}"
            )

        if "name" in data:
            name = data["name"]
            if not isinstance(name, str) or not name.strip():
                raise ProjectValidationError("Project name must not be blank")

        if "description" in data and not isinstance(data["description"], str):
            raise ProjectValidationError("description must be a string")

        for key in ("sheet_width", "sheet_height"):
            if key not in data:
                continue
            value = data[key]
            if (
                isinstance(value, bool)
                or not isinstance(value, int)
                or not MIN_SHEET_SIZE <= value <= MAX_SHEET_SIZE
            ):
                raise ProjectValidationError(
                    f"{key} must be a whole number between "
                    f"{MIN_SHEET_SIZE} and {MAX_SHEET_SIZE}"
                )

        for key in ("pieces", "sheets"):
            if key in data and not isinstance(data[key], list):
                raise ProjectValidationError(f"{key} must be a list")

        for index, sheet in enumerate(data.get("sheets", [])):
            try:
                deserialize_sheet(sheet)
            except ValueError as e:
                raise ProjectValidationError(f"sheets[{index}]: {e}") from e

    def create_project(self, data: Mapping[str, Any], user_id: str) -> Project:
        """Create a project owned by ``user_id``.

        Raises:
            ProjectValidationError: If the user id or name is missing, or
                the data has unknown or invalid fields.
        """
        self._require_user(user_id)
        if "name" not in data:
            raise ProjectValidationError("Project name must not be blank")
        self._validate_fields(data)

        now = self._clock()
        project = Project(
            id=uuid.uuid4().hex,
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **copy.deepcopy(dict(data)),
        )
        project.name = project.name.strip()
        self.store.save(project)
        logger.info("Created project %s for user %s", project.id, user_id)
        return project

    def get_user_projects(self, user_id: str) -> list[Project]:
        """Active projects of a user, most recently updated first."""
        self._require_user(user_id)
        projects = [p for p in self.store.list_for_user(user_id) if not p.is_deleted]
        projects.sort(key=lambda p: p.updated_at, reverse=True)
        return projects

    def get_project(self, project_id: str, user_id: str) -> Project:
        """Fetch one active project.

        Raises:
            ProjectNotFoundError: If the project is missing or deleted.
            ProjectPermissionError: If another user owns it.
        """
        self._require_user(user_id)
        project = self.store.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        if project.user_id != user_id:
            raise ProjectPermissionError(project_id)
        if project.is_deleted:
            raise ProjectNotFoundError(project_id)
        return project

    def update_project(
        self, project_id: str, updates: Mapping[str, Any], user_id: str
    ) -> Project:
        """Apply field updates and refresh ``updated_at``."""
        project = self.get_project(project_id, user_id)
        self._validate_fields(updates)

        changes = copy.deepcopy(dict(updates))
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        updated = replace(project, **changes, updated_at=self._clock())
        self.store.save(updated)
        logger.info("Updated project %s", project_id)
        return updated

    def delete_project(self, project_id: str, user_id: str) -> None:
        """Soft-delete a project."""
        project = self.get_project(project_id, user_id)
        self.store.save(replace(project, is_deleted=True, updated_at=self._clock()))
        logger.info("Deleted project %s", project_id)

    def duplicate_project(
        self, project_id: str, user_id: str, new_name: str = ""
    ) -> Project:
        """Copy a project without its optimization results.

        The copy is named ``"<name> (Copy)"`` unless ``new_name`` is given.
        """
        original = self.get_project(project_id, user_id)
        data = {
            "name": new_name or f"{original.name} (Copy)",
            "description": original.description,
            "sheet_width": original.sheet_width,
            "sheet_height": original.sheet_height,
            "pieces": original.pieces,
            "sheets": [],
        }
        return self.create_project(data, user_id)

    def search_projects(self, user_id: str, term: str) -> list[Project]:
        """Case-insensitive substring search on project name or id."""
        projects = self.get_user_projects(user_id)
        if not term:
            return projects
        needle = term.lower()
        return [
            p for p in projects if needle in p.name.lower() or needle in p.id.lower()
        ]

    def _stored_sheets(self, project: Project) -> list[Sheet]:
        try:
            return [deserialize_sheet(data) for data in project.sheets]
        except ValueError as e:
            raise ProjectValidationError(
                f"Project {project.id} has invalid stored sheets: {e}"
            ) from e

    def get_project_stats(self, user_id: str) -> ProjectStats:
        """Aggregate figures over the user's active projects.

        Stored sheets are rebuilt so areas and efficiencies come from the
        placed pieces, not from the rounded values saved alongside them.
        """
        projects = self.get_user_projects(user_id)

        total_area = 0
        per_project: list[float] = []
        for project in projects:
            if not project.sheets:
                continue
            sheets = self._stored_sheets(project)
            total_area += calculate_statistics(sheets).used_area
            per_project.append(sum(s.efficiency for s in sheets) / len(sheets))

        average_efficiency = sum(per_project) / len(per_project) if per_project else 0.0

        return ProjectStats(
            total_projects=len(projects),
            total_sheets=sum(len(p.sheets) for p in projects),
            total_pieces=sum(len(p.pieces) for p in projects),
            total_area=total_area,
            average_efficiency=average_efficiency,
        )

    def optimize_project(
        self,
        project_id: str,
        user_id: str,
        allow_rotation: bool = True,
        sort_by: str = "area-desc",
        algorithm: str = "shelf",
    ) -> tuple[Project, OptimizationOutput]:
        """Optimize a stored project and save the resulting sheets.

        Raises:
            ProjectNotFoundError: If the project is missing or deleted.
            ProjectPermissionError: If another user owns it.
            OptimizationInputError: If the project cannot be optimized.
        """
        project = self.get_project(project_id, user_id)
        output = self.command.execute(
            OptimizationInput(
                sheet_width=project.sheet_width,
                sheet_height=project.sheet_height,
                pieces=project.pieces,
                allow_rotation=allow_rotation,
                sort_by=sort_by,
                algorithm=algorithm,
            )
        )
        updated = replace(
            project,
            sheets=[serialize_sheet(sheet) for sheet in output.sheets],
            updated_at=self._clock(),
        )
        self.store.save(updated)
        return updated, output
