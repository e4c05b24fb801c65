"""
Tile Layout
===========

Grid geometry for composite images.

Formulas:
    frame_width   = (canvas_width - (columns - 1) * gap) / columns
    frame_height  = frame_width / aspect_ratio
    rows          = ceil(shot_count / columns)
    canvas_height = rows * frame_height + (rows - 1) * gap

aspect_ratio comes from the video metadata, or 16:9 without it.
"""

import math
from typing import Optional

from framescript.models.frame import DEFAULT_ASPECT_RATIO, VideoMetadata
from framescript.models.layout import TileLayout


def compute_layout(
    shot_count: int,
    columns: int,
    metadata: Optional[VideoMetadata] = None,
    canvas_width: float = 3000.0,
    gap: float = 10.0,
) -> TileLayout:
    """
    Compute the grid layout for ``shot_count`` cells.

    Args:
        shot_count: Number of cells (>= 1)
        columns: Cells per row (>= 1)
        metadata: Source metadata for the aspect ratio
        canvas_width: Total canvas width
        gap: Spacing between cells

    Returns:
        TileLayout

    Raises:
        ValueError: If the inputs cannot produce a positive layout
    """
    if shot_count < 1:
        raise ValueError("shot_count must be >= 1")
    if columns < 1:
        raise ValueError("columns must be >= 1")
    if gap < 0:
        raise ValueError("gap must be non-negative")

    frame_width = (canvas_width - (columns - 1) * gap) / columns
    if frame_width <= 0:
        raise ValueError(
            f"{columns} columns with gap {gap} do not fit in width {canvas_width}"
        )

    aspect_ratio = metadata.aspect_ratio if metadata is not None else DEFAULT_ASPECT_RATIO
    frame_height = frame_width / aspect_ratio
    rows = math.ceil(shot_count / columns)
    canvas_height = rows * frame_height + (rows - 1) * gap

    return TileLayout(
        columns=columns,
        rows=rows,
        frame_width=frame_width,
        frame_height=frame_height,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        gap=gap,
    )
