"""Cut diagram rendering for packed sheets.

This module provides SVG and ASCII rendering of sheet layouts showing piece
placements, dimensions, rotation indicators, and waste areas. Pieces are
filled with their own color.
"""

from __future__ import annotations

from html import escape

from cutoptimizer.infrastructure.bin_packing import (
    OptimizationResult,
    PlacedPiece,
    Sheet,
)


class CutDiagramRenderer:
    """Renders cut diagrams in SVG and ASCII format.

    Attributes:
        scale: Pixels per millimeter for SVG rendering (default 0.25).
        piece_stroke: Stroke color for piece outlines.
        waste_fill: Fill color for waste areas.
        text_color: Color for labels and dimensions.
        show_dimensions: Whether to show piece dimensions in labels.
        show_labels: Whether to show piece ids.
    """

    header_height = 30
    sheet_spacing = 20

    def __init__(
        self,
        scale: float = 0.25,
        piece_stroke: str = "#000000",
        waste_fill: str = "#D3D3D3",
        text_color: str = "#000000",
        show_dimensions: bool = True,
        show_labels: bool = True,
    ) -> None:
        self.scale = scale
        self.piece_stroke = piece_stroke
        self.waste_fill = waste_fill
        self.text_color = text_color
        self.show_dimensions = show_dimensions
        self.show_labels = show_labels

    def _panel_height(self, sheet: Sheet) -> float:
        return sheet.height * self.scale + self.header_height

    def render_svg(self, sheet: Sheet, total_sheets: int = 1) -> str:
        """Generate SVG cut diagram for a single sheet.

        Args:
            sheet: Sheet with placed pieces.
            total_sheets: Total number of sheets (for header display).

        Returns:
            SVG string representation of the layout.
        """
        svg_width = sheet.width * self.scale
        svg_height = self._panel_height(sheet)

        parts = [
            f'<svg width="{svg_width}" height="{svg_height}" '
            f'xmlns="http://www.w3.org/2000/svg">',
            f'  <rect x="0" y="0" width="{svg_width}" height="{svg_height}" '
            f'fill="white"/>',
        ]
        parts.extend(self._sheet_elements(sheet, total_sheets))
        parts.append("</svg>")
        return "\n".join(parts)

    def render_all_svg(self, result: OptimizationResult) -> list[str]:
        """Generate SVG cut diagrams for all sheets, one string per sheet."""
        total_sheets = len(result.sheets)
        return [self.render_svg(sheet, total_sheets) for sheet in result.sheets]

    def render_combined_svg(self, result: OptimizationResult) -> str:
        """Generate single SVG with all sheets stacked vertically."""
        if not result.sheets:
            return (
                '<svg width="100" height="50" xmlns="http://www.w3.org/2000/svg">'
                '<text x="10" y="30">No sheets to display</text></svg>'
            )

        svg_width = max(sheet.width for sheet in result.sheets) * self.scale
        svg_height = sum(
            self._panel_height(sheet) + self.sheet_spacing for sheet in result.sheets
        )

        parts = [
            f'<svg width="{svg_width}" height="{svg_height}" '
            f'xmlns="http://www.w3.org/2000/svg">',
            f'  <rect x="0" y="0" width="{svg_width}" height="{svg_height}" '
            f'fill="white"/>',
        ]

        total_sheets = len(result.sheets)
        y_offset = 0.0
        for sheet in result.sheets:
            parts.append(f'  <g transform="translate(0, {y_offset})">')
            parts.extend(
                f"  {line}" for line in self._sheet_elements(sheet, total_sheets)
            )
            parts.append("  </g>")
            y_offset += self._panel_height(sheet) + self.sheet_spacing

        parts.append("</svg>")
        return "\n".join(parts)

    def _sheet_elements(self, sheet: Sheet, total_sheets: int) -> list[str]:
        """SVG elements for one sheet panel: header, outline, waste, pieces."""
        svg_width = sheet.width * self.scale
        header_text = (
            f"Sheet {sheet.sheet_index + 1} of {total_sheets} - "
            f"{sheet.width} x {sheet.height} mm - {sheet.efficiency:.1f}% used"
        )

        elements = [
            f'  <rect x="0" y="0" width="{svg_width}" height="{self.header_height}" '
            f'fill="#E0E0E0"/>',
            f'  <text x="10" y="{self.header_height - 8}" '
            f'font-family="Arial, sans-serif" font-size="14" '
            f'fill="{self.text_color}">{header_text}</text>',
            f'  <rect x="0" y="{self.header_height}" '
            f'width="{svg_width}" height="{sheet.height * self.scale}" '
            f'fill="#f5deb3" stroke="{self.piece_stroke}" stroke-width="2"/>',
        ]
        # Waste strips go under the pieces
        elements.extend(self._render_waste_areas(sheet))
        for placement in sheet.pieces:
            elements.extend(self._render_piece(placement))
        return elements

    def _render_piece(self, placement: PlacedPiece) -> list[str]:
        """SVG rect plus optional id and dimension labels for one placement."""
        x = placement.x * self.scale
        y = self.header_height + placement.y * self.scale
        w = placement.placed_width * self.scale
        h = placement.placed_height * self.scale

        piece = placement.piece
        rect = (
            f'<rect x="{x}" y="{y}" width="{w}" height="{h}" '
            f'fill="{piece.color}" stroke="{self.piece_stroke}"/>'
        )

        font_size = min(12, min(w, h) / 6)
        if font_size < 6:
            return [f"  {rect}"]

        dims = f"{piece.width} x {piece.height}"
        if placement.rotated:
            dims += " (R)"
        text_x = x + w / 2
        text_y = y + h / 2

        lines = ["  <g>", f"    {rect}"]
        if self.show_labels:
            lines.append(
                f'    <text x="{text_x}" y="{text_y - font_size / 2}" '
                f'text-anchor="middle" font-family="Arial, sans-serif" '
                f'font-size="{font_size}" fill="{self.text_color}">{escape(piece.id)}</text>'
            )
        if self.show_dimensions:
            dims_y = text_y + font_size / 2 + 2 if self.show_labels else text_y
            lines.append(
                f'    <text x="{text_x}" y="{dims_y}" '
                f'text-anchor="middle" font-family="Arial, sans-serif" '
                f'font-size="{font_size * 0.8}" fill="{self.text_color}">{dims}</text>'
            )
        lines.append("  </g>")
        return lines

    def _render_waste_areas(self, sheet: Sheet) -> list[str]:
        """Gray strips below and to the right of the placed pieces.

        Gaps between pieces are not drawn.
        """
        if not sheet.pieces:
            return []

        strips: list[str] = []
        top = self.header_height
        max_y = max(p.bottom_edge for p in sheet.pieces)
        max_x = max(p.right_edge for p in sheet.pieces)

        if sheet.height > max_y:
            strips.append(
                f'  <rect x="0" y="{top + max_y * self.scale}" '
                f'width="{sheet.width * self.scale}" '
                f'height="{(sheet.height - max_y) * self.scale}" '
                f'fill="{self.waste_fill}" stroke="none"/>'
            )
        if sheet.width > max_x:
            strips.append(
                f'  <rect x="{max_x * self.scale}" y="{top}" '
                f'width="{(sheet.width - max_x) * self.scale}" '
                f'height="{max_y * self.scale}" '
                f'fill="{self.waste_fill}" stroke="none"/>'
            )
        return strips

    def render_ascii(self, sheet: Sheet, width: int = 80, total_sheets: int = 1) -> str:
        """Generate ASCII cut diagram for a single sheet.

        Args:
            sheet: Sheet with placed pieces.
            width: Terminal width in characters (default 80).
            total_sheets: Total number of sheets (for header display).

        Returns:
            ASCII string representation of the layout.
        """
        usable_width = width - 2
        scale_x = usable_width / sheet.width

        aspect_ratio = sheet.height / sheet.width
        # Terminal cells are about twice as tall as wide
        grid_height = int(usable_width * aspect_ratio * 0.5)
        grid_height = max(grid_height, 10)

        scale_y = grid_height / sheet.height

        grid = [[" " for _ in range(usable_width)] for _ in range(grid_height)]

        for placement in sheet.pieces:
            self._draw_piece_ascii(grid, placement, scale_x, scale_y)

        lines: list[str] = [
            f"Sheet {sheet.sheet_index + 1} of {total_sheets} - "
            f"{sheet.width} x {sheet.height} mm - {sheet.efficiency:.1f}% used",
            "+" + "-" * usable_width + "+",
        ]
        for row in grid:
            lines.append("|" + "".join(row) + "|")
        lines.append("+" + "-" * usable_width + "+")

        return "\n".join(lines)

    def _draw_piece_ascii(
        self,
        grid: list[list[str]],
        placement: PlacedPiece,
        scale_x: float,
        scale_y: float,
    ) -> None:
        """Draw a single piece outline, id and dimensions onto the grid."""
        x1 = int(placement.x * scale_x)
        y1 = int(placement.y * scale_y)
        x2 = int(placement.right_edge * scale_x)
        y2 = int(placement.bottom_edge * scale_y)

        grid_height = len(grid)
        grid_width = len(grid[0]) if grid else 0
        x1 = max(0, min(x1, grid_width - 1))
        x2 = max(0, min(x2, grid_width - 1))
        y1 = max(0, min(y1, grid_height - 1))
        y2 = max(0, min(y2, grid_height - 1))

        for x in range(x1, x2 + 1):
            grid[y1][x] = "-"
            grid[y2][x] = "-"
        for y in range(y1, y2 + 1):
            grid[y][x1] = "|"
            grid[y][x2] = "|"
        for cx, cy in ((x1, y1), (x2, y1), (x1, y2), (x2, y2)):
            grid[cy][cx] = "+"

        piece = placement.piece
        dims = f"{piece.width}x{piece.height}"
        if placement.rotated:
            dims += "R"

        for row, text in ((y1 + 1, piece.id), (y1 + 2, dims)):
            if row >= y2:
                break
            text = text[: max(0, x2 - x1 - 1)]
            for i, char in enumerate(text):
                grid[row][x1 + 1 + i] = char

    def render_all_ascii(self, result: OptimizationResult, width: int = 80) -> str:
        """Generate ASCII cut diagrams for all sheets with a summary line."""
        if not result.sheets:
            return "No sheets to display."

        total_sheets = len(result.sheets)
        parts: list[str] = []

        for sheet in result.sheets:
            parts.append(self.render_ascii(sheet, width, total_sheets))
            parts.append("")

        total_area = sum(sheet.area for sheet in result.sheets)
        used_area = sum(sheet.used_area for sheet in result.sheets)
        parts.append("=" * width)
        parts.append(
            f"SUMMARY: {total_sheets} sheet{'s' if total_sheets != 1 else ''}, "
            f"{used_area / total_area * 100:.1f}% used"
        )

        return "\n".join(parts)

    def render_waste_summary(self, result: OptimizationResult) -> str:
        """Generate text summary of waste and sheet usage."""
        total_area = sum(sheet.area for sheet in result.sheets)
        waste_area = sum(sheet.waste_area for sheet in result.sheets)
        waste_pct = waste_area / total_area * 100 if total_area else 0.0

        lines: list[str] = [
            "CUT OPTIMIZATION SUMMARY",
            "=" * 40,
            f"Total Sheets: {result.total_sheets}",
            f"Total Waste: {waste_pct:.1f}% ({waste_area} mm2)",
            "",
            "Per-Sheet Details:",
        ]

        for sheet in result.sheets:
            lines.append(
                f"  Sheet {sheet.sheet_index + 1}: "
                f"{sheet.piece_count} piece{'s' if sheet.piece_count != 1 else ''}, "
                f"{100 - sheet.efficiency:.1f}% waste"
            )

        if result.unplaced_pieces:
            lines.append("")
            lines.append(f"Unplaced Pieces: {len(result.unplaced_pieces)}")
            for unplaced in result.unplaced_pieces:
                piece = unplaced.piece
                lines.append(f"  {piece.id} ({piece.width} x {piece.height} mm)")

        return "\n".join(lines)
