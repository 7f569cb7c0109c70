"""Infrastructure layer - packing algorithms, rendering and serialization.

Formatters depend on application DTOs and are imported from
``cutoptimizer.infrastructure.formatters`` directly.
"""

from .bin_packing import (
    REASON_NO_SPACE,
    BinPacker,
    GuillotineBinPacker,
    OptimizationResult,
    PackingConfig,
    PlacedPiece,
    Sheet,
    SheetConfig,
    ShelfBinPacker,
    UnplacedPiece,
    create_packer,
    pack,
)
from .cut_diagram_renderer import CutDiagramRenderer
from .serialization import (
    deserialize_sheet,
    serialize_placed_piece,
    serialize_sheet,
    serialize_statistics,
    serialize_unplaced,
)

__all__ = [
    # Bin packing
    "REASON_NO_SPACE",
    "BinPacker",
    "GuillotineBinPacker",
    "OptimizationResult",
    "PackingConfig",
    "PlacedPiece",
    "Sheet",
    "SheetConfig",
    "ShelfBinPacker",
    "UnplacedPiece",
    "create_packer",
    "pack",
    # Cut diagram rendering
    "CutDiagramRenderer",
    # Serialization
    "deserialize_sheet",
    "serialize_placed_piece",
    "serialize_sheet",
    "serialize_statistics",
    "serialize_unplaced",
]
