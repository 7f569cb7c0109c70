"""Sanitization of raw piece records into canonical pieces.

Raw records come from forms, JSON job files or stored projects and may carry
strings, floats, missing keys or broken colors. The sanitizer turns every
usable record into a :class:`Piece` and drops the rest without failing the
batch. Every drop is recorded with a reason and logged.

Color problems never cause a drop; they are repaired or replaced with
:data:`DEFAULT_COLOR`.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Iterable, Sequence

from cutoptimizer.domain.value_objects import DEFAULT_COLOR, MAX_QUANTITY, Piece

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


@dataclass(frozen=True)
class DroppedRecord:
    """A raw record excluded from the sanitized batch.

    Attributes:
        index: Position of the record in the raw input.
        record: The raw record as received.
        reason: Human-readable explanation for the drop.
    """

    index: int
    record: Any
    reason: str


@dataclass(frozen=True)
class SanitizeResult:
    """Outcome of sanitizing a batch of raw piece records.

    Attributes:
        pieces: Canonical pieces, in input order.
        dropped: Records that were excluded, in input order.
    """

    pieces: tuple[Piece, ...]
    dropped: tuple[DroppedRecord, ...] = ()

    @property
    def dropped_count(self) -> int:
        """Number of records excluded from the batch."""
        return len(self.dropped)


def parse_int(value: Any) -> int | None:
    """Parse a value as an integer the way a form field would be read.

    Integers pass through, finite floats are truncated and strings use their
    leading run of digits (``"12.7mm"`` gives 12). Anything else, including
    booleans, is not numeric.

    Returns:
        The parsed integer, or None if the value is not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def normalize_color(value: Any) -> str:
    """Repair a color value into a valid hex color string.

    Only strings starting with ``#`` are considered colors. Six hex digits are
    kept, five get a trailing ``0`` and three are expanded by doubling each
    digit. Everything else falls back to :data:`DEFAULT_COLOR`.

    Examples:
        >>> normalize_color("#abc")
        '#aabbcc'
        >>> normalize_color("#12345")
        '#123450'
        >>> normalize_color("not-a-color")
        '#3B82F6'
    """
    if not isinstance(value, str):
        return DEFAULT_COLOR

    value = value.strip()
    if not value.startswith("#"):
        return DEFAULT_COLOR

    digits = value[1:]
    if not _HEX_DIGITS.fullmatch(digits):
        return DEFAULT_COLOR

    if len(digits) == 6:
        return f"#{digits}"
    if len(digits) == 5:
        return f"#{digits}0"
    if len(digits) == 3:
        return "#" + "".join(ch * 2 for ch in digits)
    return DEFAULT_COLOR


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PieceSanitizer:
    """Converts raw piece records into canonical pieces.

    Attributes:
        max_quantity: Largest quantity accepted for a single record.
    """

    def __init__(self, max_quantity: int = MAX_QUANTITY) -> None:
        self.max_quantity = max_quantity

    def sanitize(self, records: Iterable[Any]) -> SanitizeResult:
        """Sanitize a batch of raw records.

        Args:
            records: Raw records, each expected to be a mapping with
                ``id``, ``width``, ``height``, ``quantity`` and ``color``.

        Returns:
            SanitizeResult with the canonical pieces and the dropped records.
        """
        pieces: list[Piece] = []
        dropped: list[DroppedRecord] = []
        seen_ids: set[str] = set()

        for index, record in enumerate(records):
            piece, reason = self._sanitize_record(index, record)
            if piece is None:
                logger.warning("Dropping piece record %d: %s", index, reason)
                dropped.append(DroppedRecord(index=index, record=record, reason=reason))
            else:
                pieces.append(self._with_unique_id(piece, index, seen_ids))

        if dropped:
            logger.info(
                "Sanitized %d piece records, dropped %d",
                len(pieces) + len(dropped),
                len(dropped),
            )

        return SanitizeResult(pieces=tuple(pieces), dropped=tuple(dropped))

    def _with_unique_id(self, piece: Piece, index: int, seen_ids: set[str]) -> Piece:
        """Rename a piece whose id was already used earlier in the batch.

        The record number is appended (``"a"`` at record 3 becomes ``"a-3"``),
        counting up until the id is free.
        """
        candidate = piece.id
        suffix = index + 1
        while candidate in seen_ids:
            candidate = f"{piece.id}-{suffix}"
            suffix += 1
        seen_ids.add(candidate)

        if candidate == piece.id:
            return piece
        logger.info(
            "Piece record %d reuses id %r, renamed to %r", index, piece.id, candidate
        )
        return replace(piece, id=candidate)

    def _sanitize_record(self, index: int, record: Any) -> tuple[Piece | None, str]:
        if not isinstance(record, Mapping):
            return None, "record is not a mapping"

        width = parse_int(record.get("width"))
        height = parse_int(record.get("height"))
        if width is None or width <= 0:
            return None, f"invalid width {record.get('width')!r}"
        if height is None or height <= 0:
            return None, f"invalid height {record.get('height')!r}"

        raw_quantity = record.get("quantity")
        if _is_missing(raw_quantity):
            quantity: int | None = 1
        else:
            quantity = parse_int(raw_quantity)
        if quantity is None or quantity <= 0 or quantity > self.max_quantity:
            return None, (
                f"invalid quantity {raw_quantity!r} "
                f"(must be between 1 and {self.max_quantity})"
            )

        raw_id = record.get("id")
        piece_id = f"piece-{index + 1}" if _is_missing(raw_id) else str(raw_id)

        piece = Piece(
            id=piece_id,
            width=width,
            height=height,
            quantity=quantity,
            color=normalize_color(record.get("color")),
        )
        return piece, ""


def sanitize(records: Iterable[Any]) -> tuple[list[Piece], int]:
    """Sanitize raw records and return the pieces with the dropped count."""
    result = PieceSanitizer().sanitize(records)
    return list(result.pieces), result.dropped_count


def expand_pieces(pieces: Sequence[Piece]) -> list[Piece]:
    """Expand pieces with quantity N into N unit pieces.

    Each unit piece gets the id ``"<id>_<i>"`` with a zero-based index, even
    when the quantity is 1, so ids stay unique across the expanded batch.

    Args:
        pieces: Canonical pieces, possibly with quantity > 1.

    Returns:
        List of pieces, each with quantity 1.
    """
    expanded: list[Piece] = []
    for piece in pieces:
        for i in range(piece.quantity):
            expanded.append(
                Piece(
                    id=f"{piece.id}_{i}",
                    width=piece.width,
                    height=piece.height,
                    quantity=1,
                    color=piece.color,
                )
            )
    return expanded
