#!/usr/bin/env python3
"""
ASCII map renderer for point density grids.
Draws one density glyph per grid cell inside a labelled border, followed by a legend.
"""

import logging
from typing import List, Sequence

from .bounds import Bounds
from .density import build_legend, density_char
from .grid import DensityGrid

logger = logging.getLogger(__name__)

# Map boundary characters
MAP_BORDERS = {
    'horizontal': '-',
    'vertical': '|',
    'corner': '+',
}

# Narrowest left margin, wide enough for unlabelled rows
MIN_MARGIN = 9

EMPTY_MAP_NOTICE = "(Map is empty or no points fell within the fixed bounds)"


class MapRenderer:
    """Renders a DensityGrid as a bordered text map."""

    def __init__(self, density_chars: Sequence[str]):
        """Initialize renderer with a glyph alphabet.

        Args:
            density_chars: Glyphs by density tier. Index 0 is drawn for empty
                cells; later entries stand for increasingly dense cells.
        """
        if len(density_chars) < 2:
            raise ValueError("density_chars must contain at least 2 characters")
        self.density_chars = density_chars

    def render_map(self, grid: DensityGrid, bounds: Bounds) -> str:
        """Render the grid with latitude/longitude labels taken from ``bounds``."""
        max_count = grid.max_count()
        logger.info("Max points per cell: %d", max_count)
        if max_count == 0 and bounds.point_count == 0:
            return EMPTY_MAP_NOTICE
        return self._build_output(grid, bounds, max_count)

    def _build_output(self, grid: DensityGrid, bounds: Bounds, max_count: int) -> str:
        """Build the final output string with borders and labels."""
        west_label = f"{bounds.min_lon:.3f} W "
        east_label = f" {bounds.max_lon:.3f} E"
        margin = max(MIN_MARGIN, len(west_label))
        indent = " " * margin
        label_indent = " " * (margin - 3)
        middle = grid.height // 2

        border = (indent + MAP_BORDERS['corner'] + MAP_BORDERS['horizontal'] * grid.width
                  + MAP_BORDERS['corner'])

        lines = [""]
        lines.append(f"{label_indent}{bounds.max_lat:.4f} N")
        lines.append(border)

        for y, counts in enumerate(grid.rows()):
            row = "".join(density_char(count, max_count, self.density_chars) for count in counts)
            if y == middle:
                lines.append(west_label.rjust(margin) + MAP_BORDERS['vertical'] + row
                             + MAP_BORDERS['vertical'] + east_label)
            else:
                lines.append(indent + MAP_BORDERS['vertical'] + row + MAP_BORDERS['vertical'])

        lines.append(border)
        lines.append(f"{label_indent}{bounds.min_lat:.4f} S")
        lines.append(self._build_legend(max_count))
        return "\n".join(lines)

    def _build_legend(self, max_count: int) -> str:
        entries: List[str] = build_legend(max_count, self.density_chars)
        return "Legend (Points per cell): " + "  ".join(entries)


def render_map(grid: DensityGrid, bounds: Bounds, density_chars: Sequence[str]) -> str:
    """Convenience function to render a map."""
    renderer = MapRenderer(density_chars)
    return renderer.render_map(grid, bounds)
