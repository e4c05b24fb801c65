"""
Tile Layout Model
=================

Grid geometry for the tile compositor.

Cell coordinates are kept as floats so the layout matches the geometric
formulas exactly; the integer raster and cell boxes are derived from them.
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class TileLayout:
    """
    Grid layout for one composite.

    Attributes:
        columns: Number of cells per row
        rows: Number of rows (ceil(shot_count / columns))
        frame_width: Width of one cell
        frame_height: Height of one cell
        canvas_width: Total canvas width
        canvas_height: rows * frame_height + (rows - 1) * gap
        gap: Spacing between cells
    """

    columns: int
    rows: int
    frame_width: float
    frame_height: float
    canvas_width: float
    canvas_height: float
    gap: float

    @property
    def pixel_width(self) -> int:
        """Raster width in whole pixels."""
        return max(1, math.floor(self.canvas_width))

    @property
    def pixel_height(self) -> int:
        """Raster height in whole pixels."""
        return max(1, math.floor(self.canvas_height))

    def cell_origin(self, index: int) -> Tuple[float, float]:
        """Top-left corner of cell ``index`` in row-major order."""
        col = index % self.columns
        row = index // self.columns
        return (
            col * (self.frame_width + self.gap),
            row * (self.frame_height + self.gap),
        )

    def cell_box(self, index: int) -> Tuple[int, int, int, int]:
        """
        Integer pixel box (x0, y0, x1, y1) of cell ``index``.

        The box is clipped to the raster and always at least 1px wide and tall.
        """
        x, y = self.cell_origin(index)
        x0 = min(int(round(x)), self.pixel_width - 1)
        y0 = min(int(round(y)), self.pixel_height - 1)
        x1 = min(max(int(round(x + self.frame_width)), x0 + 1), self.pixel_width)
        y1 = min(max(int(round(y + self.frame_height)), y0 + 1), self.pixel_height)
        return x0, y0, x1, y1

    def to_dict(self) -> dict:
        return {
            "columns": self.columns,
            "rows": self.rows,
            "frame_width": round(self.frame_width, 3),
            "frame_height": round(self.frame_height, 3),
            "canvas_width": self.pixel_width,
            "canvas_height": self.pixel_height,
        }
