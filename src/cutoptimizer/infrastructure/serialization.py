"""Conversion of packing results to and from JSON-safe dictionaries.

The same shapes are used by the JSON exporter, the REST API and project
storage. Stored project sheets are rebuilt into :class:`Sheet` objects with
:func:`deserialize_sheet`.
"""

from __future__ import annotations

from typing import Any, Mapping

from cutoptimizer.domain import Piece, Statistics
from cutoptimizer.infrastructure.bin_packing import PlacedPiece, Sheet, UnplacedPiece


def serialize_placed_piece(placed: PlacedPiece) -> dict[str, Any]:
    """Serialize a placement.

    ``width`` and ``height`` are the piece's own dimensions; the footprint
    on the sheet is ``placed_width`` x ``placed_height``.
    """
    piece = placed.piece
    return {
        "id": piece.id,
        "width": piece.width,
        "height": piece.height,
        "quantity": piece.quantity,
        "color": piece.color,
        "x": placed.x,
        "y": placed.y,
        "placed_width": placed.placed_width,
        "placed_height": placed.placed_height,
        "rotated": placed.rotated,
    }


def serialize_sheet(sheet: Sheet) -> dict[str, Any]:
    return {
        "sheet_index": sheet.sheet_index,
        "width": sheet.width,
        "height": sheet.height,
        "used_area": sheet.used_area,
        "efficiency": round(sheet.efficiency, 2),
        "pieces": [serialize_placed_piece(p) for p in sheet.pieces],
    }


def _deserialize_placed_piece(item: Mapping[str, Any]) -> PlacedPiece:
    piece = Piece(
        id=str(item["id"]),
        width=item["width"],
        height=item["height"],
        quantity=item.get("quantity", 1),
        color=item["color"],
    )
    placed = PlacedPiece(piece=piece, x=item["x"], y=item["y"], rotated=bool(item["rotated"]))
    if "placed_width" in item and (
        placed.placed_width != item["placed_width"]
        or placed.placed_height != item["placed_height"]
    ):
        raise ValueError(f"Placed size of piece '{piece.id}' does not match its rotation")
    return placed


def deserialize_sheet(data: Mapping[str, Any]) -> Sheet:
    """Rebuild a Sheet from :func:`serialize_sheet` output.

    Derived fields (``used_area``, ``efficiency``) are recomputed from the
    pieces rather than read back.

    Raises:
        ValueError: If the data does not describe a valid sheet.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Sheet data must be an object, got {type(data).__name__}")
    try:
        items = data["pieces"]
        if not isinstance(items, list) or not all(isinstance(i, Mapping) for i in items):
            raise ValueError("Sheet pieces must be a list of objects")
        return Sheet(
            sheet_index=data["sheet_index"],
            width=data["width"],
            height=data["height"],
            pieces=tuple(_deserialize_placed_piece(item) for item in items),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed sheet data: {e!r}") from e


def serialize_unplaced(unplaced: UnplacedPiece) -> dict[str, Any]:
    piece = unplaced.piece
    return {
        "id": piece.id,
        "width": piece.width,
        "height": piece.height,
        "quantity": piece.quantity,
        "color": piece.color,
        "reason": unplaced.reason,
    }


def serialize_statistics(statistics: Statistics) -> dict[str, Any]:
    return {
        "total_sheets": statistics.total_sheets,
        "total_area": statistics.total_area,
        "used_area": statistics.used_area,
        "waste_area": statistics.waste_area,
        "efficiency": round(statistics.efficiency, 2),
        "total_pieces": statistics.total_pieces,
    }


