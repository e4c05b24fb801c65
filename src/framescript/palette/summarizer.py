"""
Color Summarizer
================

Extracts a small set of representative colours (the "color script")
from a sampled frame list.

Algorithm:
    1. Analyse every ceil(n / 10)-th frame (at most ~10 frames)
    2. Per frame: decode, resize to 50x50, quantize channels to the
       nearest multiple of 32 and count each quantized colour
    3. Merge per-frame histograms and sort by descending frequency
    4. Greedily keep colours at Euclidean RGB distance >= 60 from every
       colour already kept, up to max_colors

Per-frame work runs in a thread pool. Every task returns its own
histogram; nothing is shared between tasks.

Degradation:
    Frames that fail to decode are skipped with a warning; the palette
    is cosmetic and never fails the caller.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

import cv2
import numpy as np

from framescript.errors import ImageDecodeError
from framescript.imaging.codec import decode_image
from framescript.models.frame import Frame
from framescript.models.palette import PaletteEntry
from framescript.palette.histogram import ColorHistogram


logger = logging.getLogger(__name__)


def color_distance(a: Sequence[int], b: Sequence[int]) -> float:
    """Euclidean distance between two RGB triples."""
    return math.sqrt(sum((int(x) - int(y)) ** 2 for x, y in zip(a, b)))


class ColorSummarizer:
    """
    Dominant colour extraction over a frame list.

    Attributes:
        max_sampled_frames: Upper bound on analysed frames
        raster_size: Side of the square raster each frame is reduced to
        quantization_step: Channel quantization step
        min_distance: Minimum RGB distance between returned colours
        max_workers: Thread pool size for per-frame work

    Example:
        summarizer = ColorSummarizer()
        palette = summarizer.summarize(frames, max_colors=7)
        # ['#202020', '#e0c0a0', ...]
    """

    def __init__(
        self,
        max_sampled_frames: int = 10,
        raster_size: int = 50,
        quantization_step: int = 32,
        min_distance: float = 60.0,
        max_workers: int = 4,
    ) -> None:
        if max_sampled_frames < 1:
            raise ValueError("max_sampled_frames must be >= 1")
        if raster_size < 1:
            raise ValueError("raster_size must be >= 1")
        if quantization_step < 1:
            raise ValueError("quantization_step must be >= 1")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self.max_sampled_frames = max_sampled_frames
        self.raster_size = raster_size
        self.quantization_step = quantization_step
        self.min_distance = min_distance
        self.max_workers = max_workers

        logger.info(
            f"ColorSummarizer initialized: frames<={max_sampled_frames}, "
            f"raster={raster_size}x{raster_size}, step={quantization_step}, "
            f"min_distance={min_distance}"
        )

    def select_frames(self, frames: Sequence[Frame]) -> List[Frame]:
        """Every ceil(n / max_sampled_frames)-th frame, starting at 0."""
        if not frames:
            return []
        step = max(1, math.ceil(len(frames) / self.max_sampled_frames))
        return list(frames[::step])

    def frame_histogram(self, frame: Frame) -> ColorHistogram:
        """
        Quantized colour counts of one frame.

        Returns an empty histogram when the frame cannot be decoded.
        """
        try:
            bgr = decode_image(frame.pixels)
        except ImageDecodeError as e:
            logger.warning(f"Skipping frame at {frame.timestamp:.2f}s in palette: {e}")
            return ColorHistogram()

        small = cv2.resize(
            bgr,
            (self.raster_size, self.raster_size),
            interpolation=cv2.INTER_AREA,
        )
        rgb = cv2.cvtColor(small, cv2.COLOR_BGR2RGB)
        return ColorHistogram.from_image(rgb, self.quantization_step)

    def histogram(self, frames: Sequence[Frame]) -> ColorHistogram:
        """Merged histogram over the selected frames."""
        sampled = self.select_frames(frames)
        merged = ColorHistogram()
        if not sampled:
            return merged

        workers = min(self.max_workers, len(sampled))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="palette") as pool:
            # map() yields in submission order, so ties merge deterministically
            for frame_hist in pool.map(self.frame_histogram, sampled):
                merged = merged.merge(frame_hist)

        logger.debug(
            f"Palette histogram: {len(sampled)} frames, {len(merged)} distinct colours"
        )
        return merged

    def summarize_entries(self, frames: Sequence[Frame], max_colors: int = 7) -> List[PaletteEntry]:
        """
        Representative colours with their frequencies.

        Args:
            frames: Sampled frames (may be empty)
            max_colors: Maximum number of entries

        Returns:
            Entries ordered by descending frequency
        """
        if max_colors < 1 or not frames:
            return []

        selected: List[PaletteEntry] = []
        for color, count in self.histogram(frames).ranked():
            if len(selected) >= max_colors:
                break
            if any(color_distance(color, entry.rgb) < self.min_distance for entry in selected):
                continue
            selected.append(PaletteEntry.from_quantized(color, count))

        return selected

    def summarize(self, frames: Sequence[Frame], max_colors: int = 7) -> List[str]:
        """
        Representative colours as hex strings, most frequent first.

        Returns an empty list for empty input.
        """
        return [entry.color_hex for entry in self.summarize_entries(frames, max_colors)]
