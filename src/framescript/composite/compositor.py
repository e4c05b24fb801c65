"""
Tile Compositor
===============

Renders the shot list as one large grid image ("color script").

Per Shot:
    - Resolve the thumbnail frame (see resolve_frame_index)
    - Scale it to fill its cell (non-uniform, no letterboxing)
    - Optionally stamp "#<shot number>" in the cell's top-left corner

Concurrency:
    Frame decode + resize is fanned out to a thread pool. Drawing starts
    only after every load has finished (join) and writes one disjoint
    cell at a time. Cells whose frame fails to decode are skipped and
    stay background-filled.

Thumbnail Fallback Policy:
    A missing or out-of-range thumbnail index draws frame 0 instead.
    One bad index from the analysis model must not cost the whole
    preview; every substitution is logged and reported on the result.
"""

import base64
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from framescript.composite.layout import compute_layout
from framescript.errors import EmptyInputError, ImageDecodeError
from framescript.imaging.codec import decode_image, encode_jpeg
from framescript.imaging.color import hex_to_bgr
from framescript.models.frame import Frame, VideoMetadata
from framescript.models.layout import TileLayout
from framescript.models.shots import ShotReference


logger = logging.getLogger(__name__)


def resolve_frame_index(thumbnail_index: Optional[int], frame_count: int) -> int:
    """
    Frame index to draw for a shot.

    Returns ``thumbnail_index`` when it lies in [0, frame_count), else 0.
    """
    if thumbnail_index is None or not 0 <= thumbnail_index < frame_count:
        return 0
    return thumbnail_index


@dataclass(frozen=True)
class CompositeImage:
    """
    Finished composite.

    Attributes:
        image: BGR raster (pixel_height, pixel_width, 3)
        layout: Grid geometry used
        fallback_cells: Cells drawn with frame 0 because of a bad index
        skipped_cells: Cells left empty because their frame failed to decode
    """

    image: np.ndarray
    layout: TileLayout
    fallback_cells: Tuple[int, ...] = ()
    skipped_cells: Tuple[int, ...] = ()

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    def to_jpeg(self, quality: int = 90) -> bytes:
        """Encode for export/download."""
        return encode_jpeg(self.image, quality)

    def to_base64(self, quality: int = 90) -> str:
        return base64.b64encode(self.to_jpeg(quality)).decode("ascii")


class TileCompositor:
    """
    Draws shot thumbnails into a fixed-width grid.

    Example:
        compositor = TileCompositor()
        result = compositor.composite(shots, frames, metadata, columns=4)
        Path("color_script.jpg").write_bytes(result.to_jpeg())
    """

    def __init__(
        self,
        canvas_width: float = 3000.0,
        gap: float = 10.0,
        background_color: str = "#111827",
        label_font_scale: float = 0.45,
        label_opacity: float = 1.0,
        max_workers: int = 4,
    ) -> None:
        """
        Initialize the compositor.

        Args:
            canvas_width: Total canvas width
            gap: Spacing between cells
            background_color: Hex fill for gaps and skipped cells
            label_font_scale: OpenCV font scale of shot labels
            label_opacity: Opacity of the label box in (0, 1]
            max_workers: Thread pool size for frame loads
        """
        if canvas_width <= 0:
            raise ValueError("canvas_width must be positive")
        if not 0 < label_opacity <= 1:
            raise ValueError("label_opacity must be in (0, 1]")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self.canvas_width = canvas_width
        self.gap = gap
        self.background_bgr = hex_to_bgr(background_color)
        self.label_font_scale = label_font_scale
        self.label_opacity = label_opacity
        self.max_workers = max_workers

        logger.info(
            f"TileCompositor initialized: width={canvas_width}, gap={gap}, "
            f"background={background_color}"
        )

    def layout(
        self,
        shot_count: int,
        columns: int,
        metadata: Optional[VideoMetadata] = None,
    ) -> TileLayout:
        return compute_layout(shot_count, columns, metadata, self.canvas_width, self.gap)

    def composite(
        self,
        shot_refs: Sequence[ShotReference],
        frames: Sequence[Frame],
        metadata: Optional[VideoMetadata],
        columns: int,
        show_labels: bool = True,
    ) -> CompositeImage:
        """
        Render the grid.

        Args:
            shot_refs: Shots in display order (cell i = shot_refs[i])
            frames: Sampled frames the thumbnail indices refer to
            metadata: Source metadata for the aspect ratio (None -> 16:9)
            columns: Cells per row
            show_labels: Draw "#<shot number>" labels

        Returns:
            CompositeImage

        Raises:
            EmptyInputError: If shot_refs or frames is empty
            ValueError: If columns < 1
        """
        if not shot_refs or not frames:
            raise EmptyInputError(
                f"Composite needs shots and frames (got {len(shot_refs)} shots, "
                f"{len(frames)} frames)"
            )

        layout = self.layout(len(shot_refs), columns, metadata)
        canvas = np.empty((layout.pixel_height, layout.pixel_width, 3), dtype=np.uint8)
        canvas[:] = self.background_bgr

        fallback_cells: List[int] = []
        frame_indices: List[int] = []
        for cell, shot in enumerate(shot_refs):
            index = resolve_frame_index(shot.thumbnail_index, len(frames))
            if index != shot.thumbnail_index:
                fallback_cells.append(cell)
                logger.warning(
                    f"Shot #{shot.shot_number}: thumbnail index {shot.thumbnail_index} "
                    f"outside [0, {len(frames)}), using frame 0"
                )
            frame_indices.append(index)

        boxes = [layout.cell_box(cell) for cell in range(len(shot_refs))]

        def load(cell: int) -> Optional[np.ndarray]:
            x0, y0, x1, y1 = boxes[cell]
            frame = frames[frame_indices[cell]]
            try:
                image = decode_image(frame.pixels)
            except ImageDecodeError as e:
                logger.warning(f"Skipping cell {cell}: {e}")
                return None
            return cv2.resize(image, (x1 - x0, y1 - y0), interpolation=cv2.INTER_AREA)

        workers = min(self.max_workers, len(shot_refs))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="composite") as pool:
            tiles = list(pool.map(load, range(len(shot_refs))))

        skipped_cells: List[int] = []
        for cell, tile in enumerate(tiles):
            if tile is None:
                skipped_cells.append(cell)
                continue
            x0, y0, x1, y1 = boxes[cell]
            canvas[y0:y1, x0:x1] = tile
            if show_labels:
                self._draw_label(canvas, boxes[cell], f"#{shot_refs[cell].shot_number}")

        logger.info(
            f"Composite rendered: {len(shot_refs)} shots, {layout.columns}x{layout.rows} grid, "
            f"{layout.pixel_width}x{layout.pixel_height}px, "
            f"fallbacks={len(fallback_cells)}, skipped={len(skipped_cells)}"
        )

        return CompositeImage(
            image=canvas,
            layout=layout,
            fallback_cells=tuple(fallback_cells),
            skipped_cells=tuple(skipped_cells),
        )

    def _draw_label(
        self,
        canvas: np.ndarray,
        box: Tuple[int, int, int, int],
        text: str,
    ) -> None:
        """Stamp ``text`` on a filled box at the cell's top-left corner."""
        x0, y0, x1, y1 = box
        font = cv2.FONT_HERSHEY_SIMPLEX
        (text_w, text_h), baseline = cv2.getTextSize(text, font, self.label_font_scale, 1)

        label_x1 = min(x1, x0 + max(40, text_w + 10))
        label_y1 = min(y1, y0 + max(20, text_h + baseline + 6))

        if self.label_opacity >= 1.0:
            canvas[y0:label_y1, x0:label_x1] = (0, 0, 0)
        else:
            region = canvas[y0:label_y1, x0:label_x1]
            black = np.zeros_like(region)
            canvas[y0:label_y1, x0:label_x1] = cv2.addWeighted(
                black, self.label_opacity, region, 1 - self.label_opacity, 0
            )

        cv2.putText(
            canvas,
            text,
            (x0 + 5, min(label_y1 - baseline - 2, y0 + 15)),
            font,
            self.label_font_scale,
            (255, 255, 255),
            1,
            cv2.LINE_AA,
        )
