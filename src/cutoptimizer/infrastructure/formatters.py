"""Output formatters and exporters for optimization results."""

from __future__ import annotations

import json
from typing import Any

from cutoptimizer.application.dtos import OptimizationOutput
from cutoptimizer.infrastructure.serialization import (
    serialize_sheet,
    serialize_statistics,
    serialize_unplaced,
)


class JsonExporter:
    """Exports optimization results as JSON."""

    def to_dict(self, output: OptimizationOutput) -> dict[str, Any]:
        """Convert an optimization output into JSON-safe primitives."""
        config = output.config
        return {
            "sheet": {
                "width": config.sheet_size.width,
                "height": config.sheet_size.height,
            },
            "options": {
                "allow_rotation": config.allow_rotation,
                "sort_by": config.sort_by.value,
                "algorithm": config.algorithm.value,
            },
            "sheets": [serialize_sheet(s) for s in output.sheets],
            "unplaced_pieces": [serialize_unplaced(u) for u in output.unplaced_pieces],
            "statistics": serialize_statistics(output.statistics),
            "dropped_count": output.dropped_count,
        }

    def export(self, output: OptimizationOutput) -> str:
        """Export optimization output as JSON string."""
        return json.dumps(self.to_dict(output), indent=2)


class ResultReportFormatter:
    """Formats a plain-text optimization report.

    The report has a statistics block, one line per sheet and a warnings
    section for unplaced pieces and dropped records.
    """

    def format(self, output: OptimizationOutput) -> str:
        stats = output.statistics
        sheet_size = output.config.sheet_size
        lines = [
            "CUT OPTIMIZATION REPORT",
            "=" * 70,
            f"Sheet size:      {sheet_size.width} x {sheet_size.height} mm",
            f"Sheets used:     {stats.total_sheets}",
            f"Pieces placed:   {stats.total_pieces}",
            f"Total area:      {stats.total_area} mm2",
            f"Used area:       {stats.used_area} mm2",
            f"Waste area:      {stats.waste_area} mm2",
            f"Efficiency:      {stats.efficiency:.1f}%",
            "",
        ]

        if output.sheets:
            lines.append(f"{'Sheet':<8} {'Pieces':<8} {'Used (mm2)':<14} {'Efficiency'}")
            lines.append("-" * 70)
            for sheet in output.sheets:
                lines.append(
                    f"{sheet.sheet_index + 1:<8} {sheet.piece_count:<8} "
                    f"{sheet.used_area:<14} {sheet.efficiency:.1f}%"
                )
            lines.append("-" * 70)
        else:
            lines.append("No sheets used.")

        if output.unplaced_pieces:
            lines.append("")
            lines.append(f"WARNING: {len(output.unplaced_pieces)} piece(s) could not be placed")
            for unplaced in output.unplaced_pieces:
                piece = unplaced.piece
                lines.append(
                    f"  - {piece.id} ({piece.width} x {piece.height} mm): {unplaced.reason}"
                )

        if output.dropped:
            lines.append("")
            lines.append(f"WARNING: {output.dropped_count} invalid piece record(s) skipped")
            for dropped in output.dropped:
                lines.append(f"  - record {dropped.index}: {dropped.reason}")

        return "\n".join(lines)
