"""
Data Models
===========

Data models shared across framescript.

Models:
    Frames:
        - Frame: One rasterized, JPEG-encoded still
        - VideoMetadata: Native size, duration and frame rate of a source

    Palette:
        - PaletteEntry: Quantized colour with its frequency

    Layout:
        - TileLayout: Grid geometry of a composite image

    Shots (external contract):
        - ShotReference: Shot number + thumbnail index
        - ShotData: Full shot row from the analysis model
"""

from framescript.models.frame import Frame, VideoMetadata
from framescript.models.palette import PaletteEntry
from framescript.models.layout import TileLayout
from framescript.models.shots import ShotData, ShotReference

__all__ = [
    # Frames
    "Frame",
    "VideoMetadata",
    # Palette
    "PaletteEntry",
    # Layout
    "TileLayout",
    # Shots
    "ShotReference",
    "ShotData",
]
