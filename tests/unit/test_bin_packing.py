"""Tests for bin packing data models and the shelf and guillotine packers.

Tests cover:
- Data model validation and properties
- Shelf packing scenarios and row advancement
- Oversized pieces and unplaced reasons
- Layout invariants (no overlap, containment, conservation)
- Sorting strategies and the guillotine packer

The shelf packer is a greedy heuristic. These tests assert that layouts are
valid, not that they use the fewest possible sheets.
"""

from __future__ import annotations

import logging
import random

import pytest

from cutoptimizer.domain import PackingAlgorithm, Piece, SortMethod, expand_pieces
from cutoptimizer.infrastructure.bin_packing import (
    REASON_NO_SPACE,
    BinPacker,
    GuillotineBinPacker,
    OptimizationResult,
    PackingConfig,
    PlacedPiece,
    Sheet,
    SheetConfig,
    ShelfBinPacker,
    create_packer,
    pack,
)


# =============================================================================
# Helpers
# =============================================================================


def units(width: int, height: int, quantity: int = 1, piece_id: str = "p") -> list[Piece]:
    """Expanded unit pieces for one record."""
    return expand_pieces(
        [Piece(id=piece_id, width=width, height=height, quantity=quantity)]
    )


def assert_valid_layout(result: OptimizationResult, input_count: int) -> None:
    """Check containment, non-overlap and conservation for a result."""
    placed_ids: list[str] = []
    for sheet in result.sheets:
        for placement in sheet.pieces:
            assert placement.x >= 0 and placement.y >= 0
            assert placement.right_edge <= sheet.width
            assert placement.bottom_edge <= sheet.height
            placed_ids.append(placement.piece.id)

        for i, first in enumerate(sheet.pieces):
            for second in sheet.pieces[i + 1 :]:
                assert not first.overlaps(second), (first, second)

        assert 0 <= sheet.efficiency <= 100

    unplaced_ids = [u.piece.id for u in result.unplaced_pieces]
    assert len(placed_ids) + len(unplaced_ids) == input_count
    assert len(set(placed_ids + unplaced_ids)) == input_count


def make_packer(
    width: int,
    height: int,
    allow_rotation: bool = True,
    sort_by: SortMethod = SortMethod.AREA_DESC,
    algorithm: PackingAlgorithm = PackingAlgorithm.SHELF,
) -> BinPacker:
    return create_packer(
        PackingConfig(
            sheet_size=SheetConfig(width=width, height=height),
            allow_rotation=allow_rotation,
            sort_by=sort_by,
            algorithm=algorithm,
        )
    )


# =============================================================================
# Data models
# =============================================================================


class TestSheetConfig:
    """Tests for SheetConfig."""

    def test_defaults(self) -> None:
        config = SheetConfig()
        assert (config.width, config.height) == (2440, 1220)
        assert config.area == 2440 * 1220

    def test_non_positive_width(self) -> None:
        with pytest.raises(ValueError, match="Sheet width must be positive"):
            SheetConfig(width=0, height=100)

    def test_non_positive_height(self) -> None:
        with pytest.raises(ValueError, match="Sheet height must be positive"):
            SheetConfig(width=100, height=-1)


class TestPlacedPiece:
    """Tests for PlacedPiece."""

    def test_unrotated_dimensions(self, unit_piece: Piece) -> None:
        placed = PlacedPiece(piece=unit_piece, x=10, y=20)

        assert (placed.placed_width, placed.placed_height) == (500, 300)
        assert (placed.right_edge, placed.bottom_edge) == (510, 320)
        assert placed.area == 150000

    def test_rotated_dimensions(self, unit_piece: Piece) -> None:
        placed = PlacedPiece(piece=unit_piece, x=0, y=0, rotated=True)
        assert (placed.placed_width, placed.placed_height) == (300, 500)

    def test_negative_position(self, unit_piece: Piece) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            PlacedPiece(piece=unit_piece, x=-1, y=0)

    def test_touching_pieces_do_not_overlap(self, unit_piece: Piece) -> None:
        first = PlacedPiece(piece=unit_piece, x=0, y=0)
        second = PlacedPiece(piece=unit_piece, x=500, y=0)
        assert not first.overlaps(second)

    def test_overlap(self, unit_piece: Piece) -> None:
        first = PlacedPiece(piece=unit_piece, x=0, y=0)
        second = PlacedPiece(piece=unit_piece, x=499, y=299)
        assert first.overlaps(second)


class TestSheet:
    """Tests for Sheet."""

    def test_empty_sheet(self) -> None:
        sheet = Sheet(sheet_index=0, width=100, height=200)

        assert sheet.used_area == 0
        assert sheet.waste_area == 20000
        assert sheet.efficiency == 0
        assert sheet.piece_count == 0

    def test_used_area(self) -> None:
        piece = Piece(id="a", width=50, height=100)
        sheet = Sheet(
            sheet_index=0,
            width=100,
            height=200,
            pieces=(PlacedPiece(piece=piece, x=0, y=0),),
        )

        assert sheet.used_area == 5000
        assert sheet.efficiency == pytest.approx(25.0)

    def test_invalid_sheet(self) -> None:
        with pytest.raises(ValueError):
            Sheet(sheet_index=-1, width=100, height=100)
        with pytest.raises(ValueError):
            Sheet(sheet_index=0, width=0, height=100)


# =============================================================================
# Shelf packing
# =============================================================================


class TestShelfScenarios:
    """Reference scenarios for the shelf packer."""

    def test_single_piece(self) -> None:
        result = pack(units(700, 700), 1000, 1000)

        assert result.total_sheets == 1
        placement = result.sheets[0].pieces[0]
        assert (placement.x, placement.y, placement.rotated) == (0, 0, False)
        assert result.sheets[0].efficiency == pytest.approx(49.0)
        assert result.unplaced_pieces == ()

    def test_two_by_two_grid(self) -> None:
        result = pack(units(50, 50, quantity=4), 100, 100)

        assert result.total_sheets == 1
        positions = [(p.x, p.y) for p in result.sheets[0].pieces]
        assert positions == [(0, 0), (50, 0), (0, 50), (50, 50)]
        assert result.sheets[0].efficiency == pytest.approx(100.0)

    def test_oversized_without_rotation(self) -> None:
        result = pack(units(150, 50), 100, 100, allow_rotation=False)

        assert result.sheets == ()
        assert len(result.unplaced_pieces) == 1
        reason = result.unplaced_pieces[0].reason
        assert "does not fit" in reason
        assert "rotation disabled" in reason

    def test_oversized_in_both_orientations(self) -> None:
        result = pack(units(150, 50), 100, 100, allow_rotation=True)

        assert result.sheets == ()
        reason = result.unplaced_pieces[0].reason
        assert reason.startswith("piece dimensions exceed sheet size")
        assert "either orientation" in reason

    def test_empty_input(self) -> None:
        result = pack([], 1000, 1000)

        assert result.sheets == ()
        assert result.unplaced_pieces == ()


class TestShelfPacking:
    """Tests for ShelfBinPacker behavior."""

    def test_rotates_when_only_rotated_fits(self) -> None:
        result = pack(units(150, 80), 100, 200)

        placement = result.sheets[0].pieces[0]
        assert placement.rotated
        assert (placement.placed_width, placement.placed_height) == (80, 150)

    def test_no_rotation_when_disabled(self) -> None:
        # 90x40 only fits beside the 60x60 piece when rotated
        pieces = units(60, 60, piece_id="square") + units(90, 40, piece_id="flat")
        result = pack(pieces, 100, 100, allow_rotation=False)

        assert result.total_sheets == 1
        positions = {p.piece.id: (p.x, p.y, p.rotated) for p in result.sheets[0].pieces}
        assert positions == {"square_0": (0, 0, False), "flat_0": (0, 60, False)}

    def test_rotation_used_to_fill_row(self) -> None:
        pieces = units(60, 60, piece_id="square") + units(90, 40, piece_id="flat")
        result = pack(pieces, 100, 100, allow_rotation=True)

        placement = result.sheets[0].pieces[1]
        assert placement.piece.id == "flat_0"
        assert (placement.x, placement.y, placement.rotated) == (60, 0, True)

    def test_new_row_starts_below_tallest_piece(self) -> None:
        pieces = units(60, 40, piece_id="big") + units(30, 20, piece_id="small", quantity=2)
        result = pack(pieces, 100, 100)

        positions = {p.piece.id: (p.x, p.y) for p in result.sheets[0].pieces}
        assert positions["big_0"] == (0, 0)
        assert positions["small_0"] == (60, 0)
        # Row is 40 tall, so the next row starts at y=40
        assert positions["small_1"] == (0, 40)

    def test_overflow_to_new_sheet(self) -> None:
        result = pack(units(60, 60, quantity=3), 100, 100, allow_rotation=False)

        assert result.total_sheets == 3
        assert [s.sheet_index for s in result.sheets] == [0, 1, 2]
        assert result.unplaced_pieces == ()

    def test_piece_too_large_for_remaining_space_waits(self) -> None:
        """A piece that does not fit anywhere on a partly filled sheet moves on."""
        pieces = units(80, 80, piece_id="a") + units(70, 70, piece_id="b")
        result = pack(pieces, 100, 100)

        assert result.total_sheets == 2
        assert result.sheets[1].pieces[0].piece.id == "b_0"
        assert (result.sheets[1].pieces[0].x, result.sheets[1].pieces[0].y) == (0, 0)

    def test_smaller_piece_fills_gap_after_skip(self) -> None:
        """Pieces later in the order can still use the current sheet."""
        pieces = units(100, 60, piece_id="a") + units(100, 50, piece_id="b") + units(
            100, 40, piece_id="c"
        )
        result = pack(pieces, 100, 100, allow_rotation=False)

        first_sheet_ids = [p.piece.id for p in result.sheets[0].pieces]
        assert first_sheet_ids == ["a_0", "c_0"]
        assert result.total_sheets == 2

    def test_sorted_largest_area_first(self) -> None:
        pieces = units(10, 10, piece_id="small") + units(50, 50, piece_id="big")
        result = pack(pieces, 100, 100)

        assert [p.piece.id for p in result.sheets[0].pieces] == ["big_0", "small_0"]

    def test_stable_order_for_equal_area(self) -> None:
        pieces = units(20, 10, piece_id="a") + units(10, 20, piece_id="b")
        result = pack(pieces, 100, 100)

        assert [p.piece.id for p in result.sheets[0].pieces] == ["a_0", "b_0"]

    def test_unplaced_kept_in_sorted_order(self) -> None:
        pieces = units(500, 10, piece_id="long") + units(300, 300, piece_id="square")
        result = pack(pieces, 100, 100, allow_rotation=False)

        assert [u.piece.id for u in result.unplaced_pieces] == ["square_0", "long_0"]

    def test_rejects_unexpanded_pieces(self) -> None:
        with pytest.raises(ValueError, match="expand pieces before packing"):
            pack([Piece(id="a", width=10, height=10, quantity=2)], 100, 100)

    def test_invalid_sheet_size(self) -> None:
        with pytest.raises(ValueError, match="Sheet width must be positive"):
            pack(units(10, 10), 0, 100)

    def test_mixed_batch_layout_is_valid(self) -> None:
        pieces = (
            units(720, 560, quantity=4, piece_id="side")
            + units(600, 300, quantity=6, piece_id="shelf")
            + units(1200, 800, quantity=2, piece_id="back")
            + units(3000, 100, piece_id="too-long")
        )
        result = pack(pieces, 2440, 1220)

        assert_valid_layout(result, len(pieces))
        assert [u.piece.id for u in result.unplaced_pieces] == ["too-long_0"]

    def test_random_batches_are_valid(self) -> None:
        rng = random.Random(1234)
        for _ in range(25):
            pieces: list[Piece] = []
            for n in range(rng.randint(1, 30)):
                pieces.extend(
                    units(rng.randint(1, 1200), rng.randint(1, 1200), piece_id=f"r{n}")
                )
            result = pack(pieces, 1000, 800, allow_rotation=rng.random() < 0.5)
            assert_valid_layout(result, len(pieces))

    def test_is_deterministic(self) -> None:
        pieces = units(300, 200, quantity=7) + units(450, 120, quantity=5, piece_id="q")

        assert pack(pieces, 1000, 1000) == pack(pieces, 1000, 1000)

    def test_unplaced_pieces_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="cutoptimizer.infrastructure.bin_packing"):
            pack(units(200, 200), 100, 100)

        assert "could not be placed" in caplog.text


class TestStallRule:
    """Tests for termination when a fresh sheet takes no pieces."""

    def test_stall_marks_remaining_unplaced(self) -> None:
        class NeverPlaces(ShelfBinPacker):
            def _fill_sheet(self, pending):
                return [], list(pending)

        packer = NeverPlaces(PackingConfig(sheet_size=SheetConfig(width=100, height=100)))
        result = packer.pack(units(10, 10, quantity=3))

        assert result.sheets == ()
        assert len(result.unplaced_pieces) == 3
        assert all(u.reason == REASON_NO_SPACE for u in result.unplaced_pieces)


# =============================================================================
# Sorting strategies
# =============================================================================


class TestSortMethods:
    """Tests for the configurable piece ordering."""

    @pytest.fixture
    def pieces(self) -> list[Piece]:
        # area: wide=800, tall=900, square=1600
        return (
            units(80, 10, piece_id="wide")
            + units(10, 90, piece_id="tall")
            + units(40, 40, piece_id="square")
        )

    @pytest.mark.parametrize(
        "sort_by,expected",
        [
            (SortMethod.AREA_DESC, ["square_0", "tall_0", "wide_0"]),
            (SortMethod.MAX_SIDE_DESC, ["tall_0", "wide_0", "square_0"]),
            (SortMethod.WIDTH_DESC, ["wide_0", "square_0", "tall_0"]),
            (SortMethod.HEIGHT_DESC, ["tall_0", "square_0", "wide_0"]),
        ],
    )
    def test_order(self, pieces: list[Piece], sort_by: SortMethod, expected: list[str]) -> None:
        packer = make_packer(1000, 1000, sort_by=sort_by)
        assert [p.id for p in packer._sort_pieces(pieces)] == expected


# =============================================================================
# Guillotine packing
# =============================================================================


class TestGuillotinePacking:
    """Tests for GuillotineBinPacker."""

    def test_create_packer_selects_algorithm(self) -> None:
        assert isinstance(make_packer(100, 100), ShelfBinPacker)
        assert isinstance(
            make_packer(100, 100, algorithm=PackingAlgorithm.GUILLOTINE),
            GuillotineBinPacker,
        )

    def test_two_by_two_grid(self) -> None:
        packer = make_packer(100, 100, algorithm=PackingAlgorithm.GUILLOTINE)
        result = packer.pack(units(50, 50, quantity=4))

        assert result.total_sheets == 1
        assert sorted((p.x, p.y) for p in result.sheets[0].pieces) == [
            (0, 0),
            (0, 50),
            (50, 0),
            (50, 50),
        ]

    def test_fills_gap_beside_tall_piece(self) -> None:
        packer = make_packer(
            100, 100, allow_rotation=False, algorithm=PackingAlgorithm.GUILLOTINE
        )
        pieces = units(60, 100, piece_id="tall") + units(40, 50, quantity=2, piece_id="s")
        result = packer.pack(pieces)

        assert result.total_sheets == 1
        positions = {p.piece.id: (p.x, p.y) for p in result.sheets[0].pieces}
        assert positions == {"tall_0": (0, 0), "s_0": (60, 0), "s_1": (60, 50)}

    def test_oversized_reason_matches_shelf(self) -> None:
        packer = make_packer(100, 100, algorithm=PackingAlgorithm.GUILLOTINE)
        result = packer.pack(units(150, 50))

        assert result.unplaced_pieces[0].reason.startswith(
            "piece dimensions exceed sheet size"
        )

    def test_random_batches_are_valid(self) -> None:
        rng = random.Random(99)
        packer = make_packer(1000, 800, algorithm=PackingAlgorithm.GUILLOTINE)
        for _ in range(25):
            pieces: list[Piece] = []
            for n in range(rng.randint(1, 30)):
                pieces.extend(
                    units(rng.randint(1, 1200), rng.randint(1, 1200), piece_id=f"g{n}")
                )
            assert_valid_layout(packer.pack(pieces), len(pieces))
