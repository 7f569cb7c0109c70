"""Domain layer - pieces, sanitization and statistics."""

from .sanitizer import (
    DroppedRecord,
    PieceSanitizer,
    SanitizeResult,
    expand_pieces,
    normalize_color,
    parse_int,
    sanitize,
)
from .statistics import Statistics, calculate_statistics
from .value_objects import (
    DEFAULT_COLOR,
    MAX_QUANTITY,
    PackingAlgorithm,
    Piece,
    SortMethod,
)

__all__ = [
    "DEFAULT_COLOR",
    "MAX_QUANTITY",
    "DroppedRecord",
    "PackingAlgorithm",
    "Piece",
    "PieceSanitizer",
    "SanitizeResult",
    "SortMethod",
    "Statistics",
    "calculate_statistics",
    "expand_pieces",
    "normalize_color",
    "parse_int",
    "sanitize",
]
