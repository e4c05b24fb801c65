"""
Composite Module
================

Grid rendering of shot thumbnails for display and export.
"""

from framescript.composite.layout import compute_layout
from framescript.composite.compositor import CompositeImage, TileCompositor, resolve_frame_index

__all__ = ["compute_layout", "CompositeImage", "TileCompositor", "resolve_frame_index"]
