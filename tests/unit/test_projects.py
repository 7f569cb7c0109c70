"""Tests for project storage and the project service."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from cutoptimizer.application import (
    EmptyPieceListError,
    InMemoryProjectStore,
    JsonFileProjectStore,
    Project,
    ProjectNotFoundError,
    ProjectPermissionError,
    ProjectService,
    ProjectValidationError,
)
from cutoptimizer.domain import Piece
from cutoptimizer.infrastructure import PlacedPiece, Sheet, serialize_sheet


def ticking_clock(start: datetime | None = None) -> Callable[[], datetime]:
    """Clock that advances one second per call."""
    current = [start or datetime(2024, 1, 1, tzinfo=timezone.utc)]

    def tick() -> datetime:
        current[0] += timedelta(seconds=1)
        return current[0]

    return tick


def stored_sheet(
    index: int, width: int, height: int, piece_size: tuple[int, int]
) -> dict[str, Any]:
    """A serialized sheet holding a single piece at the origin."""
    piece = Piece(id=f"p{index}_0", width=piece_size[0], height=piece_size[1])
    sheet = Sheet(
        sheet_index=index,
        width=width,
        height=height,
        pieces=(PlacedPiece(piece=piece, x=0, y=0),),
    )
    return serialize_sheet(sheet)


@pytest.fixture
def service() -> ProjectService:
    return ProjectService(InMemoryProjectStore(), clock=ticking_clock())


@pytest.fixture
def project_data() -> dict[str, Any]:
    return {
        "name": "Kitchen",
        "description": "Base cabinets",
        "sheet_width": 2440,
        "sheet_height": 1220,
        "pieces": [
            {"id": "side", "width": 720, "height": 560, "quantity": 2},
            {"id": "shelf", "width": 600, "height": 300, "quantity": 3},
        ],
    }


class TestCreateProject:
    """Tests for ProjectService.create_project."""

    def test_creates_project(
        self, service: ProjectService, project_data: dict[str, Any]
    ) -> None:
        project = service.create_project(project_data, "alice")

        assert project.id
        assert project.name == "Kitchen"
        assert project.user_id == "alice"
        assert project.sheets == []
        assert project.is_deleted is False
        assert project.created_at == project.updated_at

    def test_requires_user(
        self, service: ProjectService, project_data: dict[str, Any]
    ) -> None:
        with pytest.raises(ProjectValidationError, match="user id is required"):
            service.create_project(project_data, "")

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_requires_name(self, service: ProjectService, name: Any) -> None:
        with pytest.raises(ProjectValidationError, match="name must not be blank"):
            service.create_project({"name": name}, "alice")

    def test_missing_name(self, service: ProjectService) -> None:
        with pytest.raises(ProjectValidationError):
            service.create_project({"description": "no name"}, "alice")

    def test_strips_name(self, service: ProjectService) -> None:
        assert service.create_project({"name": "  Desk "}, "alice").name == "Desk"

    def test_rejects_unknown_fields(self, service: ProjectService) -> None:
        with pytest.raises(ProjectValidationError, match="Unknown project fields: owner"):
            service.create_project({"name": "x", "owner": "bob"}, "alice")

    @pytest.mark.parametrize("width", [50, 20000, "2440", True])
    def test_rejects_bad_sheet_size(self, service: ProjectService, width: Any) -> None:
        with pytest.raises(ProjectValidationError, match="sheet_width"):
            service.create_project({"name": "x", "sheet_width": width}, "alice")

    def test_defaults(self, service: ProjectService) -> None:
        project = service.create_project({"name": "x"}, "alice")

        assert (project.sheet_width, project.sheet_height) == (2440, 1220)
        assert project.pieces == []
        assert project.description == ""


class TestReadProjects:
    """Tests for listing and fetching projects."""

    def test_newest_first(self, service: ProjectService) -> None:
        first = service.create_project({"name": "First"}, "alice")
        second = service.create_project({"name": "Second"}, "alice")
        service.update_project(first.id, {"description": "touched"}, "alice")

        names = [p.name for p in service.get_user_projects("alice")]
        assert names == ["First", "Second"]
        assert second.id in {p.id for p in service.get_user_projects("alice")}

    def test_scoped_to_user(self, service: ProjectService) -> None:
        service.create_project({"name": "Mine"}, "alice")
        service.create_project({"name": "Theirs"}, "bob")

        assert [p.name for p in service.get_user_projects("alice")] == ["Mine"]

    def test_get_project(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Desk"}, "alice")
        assert service.get_project(created.id, "alice") == created

    def test_get_missing(self, service: ProjectService) -> None:
        with pytest.raises(ProjectNotFoundError, match="Project not found: nope"):
            service.get_project("nope", "alice")

    def test_get_other_users_project(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Desk"}, "alice")

        with pytest.raises(ProjectPermissionError):
            service.get_project(created.id, "bob")

    def test_store_returns_copies(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Desk", "pieces": []}, "alice")
        fetched = service.get_project(created.id, "alice")
        fetched.pieces.append({"width": 1, "height": 1})

        assert service.get_project(created.id, "alice").pieces == []


class TestUpdateAndDelete:
    """Tests for update, delete and duplicate."""

    def test_update_refreshes_timestamp(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Desk"}, "alice")

        updated = service.update_project(created.id, {"name": "Standing desk"}, "alice")

        assert updated.name == "Standing desk"
        assert updated.updated_at > created.updated_at
        assert updated.created_at == created.created_at
        assert service.get_project(created.id, "alice").name == "Standing desk"

    def test_update_validates(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Desk"}, "alice")

        with pytest.raises(ProjectValidationError):
            service.update_project(created.id, {"name": " "}, "alice")
        with pytest.raises(ProjectValidationError):
            service.update_project(created.id, {"is_deleted": True}, "alice")

    def test_update_other_users_project(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Desk"}, "alice")

        with pytest.raises(ProjectPermissionError):
            service.update_project(created.id, {"name": "Mine now"}, "bob")

    def test_soft_delete(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Desk"}, "alice")

        service.delete_project(created.id, "alice")

        assert service.get_user_projects("alice") == []
        with pytest.raises(ProjectNotFoundError):
            service.get_project(created.id, "alice")
        assert service.store.get(created.id).is_deleted is True

    def test_duplicate(
        self, service: ProjectService, project_data: dict[str, Any]
    ) -> None:
        original = service.create_project(project_data, "alice")
        service.optimize_project(original.id, "alice")

        copy = service.duplicate_project(original.id, "alice")

        assert copy.id != original.id
        assert copy.name == "Kitchen (Copy)"
        assert copy.pieces == project_data["pieces"]
        assert copy.sheets == []
        assert service.get_project(original.id, "alice").sheets

    def test_duplicate_with_name(self, service: ProjectService) -> None:
        original = service.create_project({"name": "Desk"}, "alice")
        assert service.duplicate_project(original.id, "alice", "Desk v2").name == "Desk v2"


class TestSearchAndStats:
    """Tests for search_projects and get_project_stats."""

    def test_search_by_name(self, service: ProjectService) -> None:
        service.create_project({"name": "Kitchen"}, "alice")
        service.create_project({"name": "Garage shelves"}, "alice")

        assert [p.name for p in service.search_projects("alice", "KITCH")] == ["Kitchen"]

    def test_search_by_id(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Kitchen"}, "alice")
        service.create_project({"name": "Garage"}, "alice")

        assert service.search_projects("alice", created.id[:12]) == [created]

    def test_empty_term_lists_all(self, service: ProjectService) -> None:
        service.create_project({"name": "A"}, "alice")
        service.create_project({"name": "B"}, "alice")

        assert len(service.search_projects("alice", "")) == 2

    def test_stats_without_projects(self, service: ProjectService) -> None:
        stats = service.get_project_stats("alice")

        assert stats.total_projects == 0
        assert stats.average_efficiency == 0.0

    def test_stats(self, service: ProjectService) -> None:
        service.create_project(
            {
                "name": "A",
                "pieces": [{"width": 1, "height": 1}, {"width": 2, "height": 2}],
                "sheets": [
                    stored_sheet(0, 1000, 1000, (500, 200)),
                    stored_sheet(1, 1000, 1000, (500, 600)),
                ],
            },
            "alice",
        )
        service.create_project(
            {"name": "B", "sheets": [stored_sheet(0, 100, 100, (100, 90))]}, "alice"
        )
        service.create_project({"name": "C", "pieces": [{"width": 3, "height": 3}]}, "alice")

        stats = service.get_project_stats("alice")

        assert stats.total_projects == 3
        assert stats.total_sheets == 3
        assert stats.total_pieces == 3
        assert stats.total_area == 409000
        # mean of per-project means: (20 + 90) / 2
        assert stats.average_efficiency == pytest.approx(55.0)

    def test_stats_use_unrounded_efficiency(self, service: ProjectService) -> None:
        # 1/3 of the sheet, stored as 33.33
        service.create_project(
            {"name": "Third", "sheets": [stored_sheet(0, 300, 100, (100, 100))]}, "alice"
        )

        stats = service.get_project_stats("alice")

        assert stats.average_efficiency == pytest.approx(100 / 3)

    @pytest.mark.parametrize(
        "sheet",
        [
            "not a sheet",
            {"used_area": 100, "efficiency": 50.0},
            {"sheet_index": 0, "width": 100, "height": 100, "pieces": [None]},
        ],
    )
    def test_rejects_malformed_sheets(self, service: ProjectService, sheet: Any) -> None:
        with pytest.raises(ProjectValidationError, match=r"sheets\[0\]"):
            service.create_project({"name": "Bad", "sheets": [sheet]}, "alice")

    def test_stats_report_corrupt_stored_sheets(self, tmp_path: Path) -> None:
        store = JsonFileProjectStore(tmp_path)
        service = ProjectService(store, clock=ticking_clock())
        created = service.create_project({"name": "Desk"}, "alice")
        store.save(replace(created, sheets=[{"width": 10}]))

        with pytest.raises(ProjectValidationError, match="invalid stored sheets"):
            service.get_project_stats("alice")

    def test_stats_exclude_deleted(self, service: ProjectService) -> None:
        created = service.create_project({"name": "A"}, "alice")
        service.delete_project(created.id, "alice")

        assert service.get_project_stats("alice").total_projects == 0


class TestOptimizeProject:
    """Tests for ProjectService.optimize_project."""

    def test_stores_sheets(
        self, service: ProjectService, project_data: dict[str, Any]
    ) -> None:
        created = service.create_project(project_data, "alice")

        project, output = service.optimize_project(created.id, "alice")

        assert len(project.sheets) == output.statistics.total_sheets
        assert project.sheets[0]["sheet_index"] == 0
        assert sum(len(s["pieces"]) for s in project.sheets) == 5
        assert service.get_project(created.id, "alice").sheets == project.sheets

    def test_stats_follow_optimization(
        self, service: ProjectService, project_data: dict[str, Any]
    ) -> None:
        created = service.create_project(project_data, "alice")
        _, output = service.optimize_project(created.id, "alice")

        stats = service.get_project_stats("alice")

        assert stats.total_area == output.statistics.used_area

    def test_empty_project(self, service: ProjectService) -> None:
        created = service.create_project({"name": "Empty"}, "alice")

        with pytest.raises(EmptyPieceListError):
            service.optimize_project(created.id, "alice")


class TestJsonFileProjectStore:
    """Tests for JsonFileProjectStore."""

    def test_round_trip_through_files(self, tmp_path: Path) -> None:
        service = ProjectService(JsonFileProjectStore(tmp_path), clock=ticking_clock())
        created = service.create_project(
            {"name": "Desk", "pieces": [{"width": 100, "height": 50}]}, "alice"
        )

        assert (tmp_path / "alice" / f"{created.id}.json").is_file()

        reopened = ProjectService(JsonFileProjectStore(tmp_path))
        assert reopened.get_project(created.id, "alice") == created
        assert [p.id for p in reopened.get_user_projects("alice")] == [created.id]

    def test_missing_project(self, tmp_path: Path) -> None:
        assert JsonFileProjectStore(tmp_path).get("abc") is None

    def test_unknown_user_has_no_projects(self, tmp_path: Path) -> None:
        assert JsonFileProjectStore(tmp_path).list_for_user("nobody") == []

    @pytest.mark.parametrize("user_id", ["../escape", "a/b", ".hidden"])
    def test_rejects_unsafe_user_ids(self, tmp_path: Path, user_id: str) -> None:
        store = JsonFileProjectStore(tmp_path)
        project = Project(id="p1", name="x", user_id=user_id)

        with pytest.raises(ProjectValidationError, match="Invalid user id"):
            store.save(project)


class TestProjectSerialization:
    """Tests for Project.to_dict and Project.from_dict."""

    def test_round_trip(self) -> None:
        project = Project(
            id="p1",
            name="Desk",
            user_id="alice",
            pieces=[{"width": 1, "height": 2}],
            sheets=[{"used_area": 2}],
        )

        assert Project.from_dict(project.to_dict()) == project

    def test_timestamps_are_iso_strings(self) -> None:
        data = Project(id="p1", name="Desk", user_id="alice").to_dict()

        assert isinstance(data["created_at"], str)
        assert datetime.fromisoformat(data["created_at"]).tzinfo is not None
