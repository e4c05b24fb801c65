"""
Color Histogram
===============

Quantized colour counting.

Each frame produces its own ColorHistogram; histograms are then merged.
Counting is commutative, so merge order only affects how frequency ties
are ordered, and merges happen in a fixed order to keep that stable.

Quantization:
    Each channel is rounded to the nearest multiple of the step
    (half rounds up). With step=32 a channel has 9 possible values,
    0, 32, ..., 256; 256 is kept as-is so every component stays a
    multiple of the step, and only hex rendering clamps it to 255.
"""

from typing import Dict, Iterator, List, Tuple

import numpy as np


Color = Tuple[int, int, int]


def quantize_channels(rgb: np.ndarray, step: int = 32) -> np.ndarray:
    """
    Round every channel to the nearest multiple of ``step``.

    Args:
        rgb: Image or pixel array with channels in the last axis
        step: Quantization step (> 0)

    Returns:
        int32 array of the same shape
    """
    if step <= 0:
        raise ValueError("step must be positive")
    values = rgb.astype(np.float64)
    return (np.floor(values / step + 0.5) * step).astype(np.int32)


class ColorHistogram:
    """
    Frequency count per quantized RGB triple.

    Iteration order is first-insertion order, which ``ranked`` uses to
    break frequency ties.
    """

    def __init__(self) -> None:
        self._counts: Dict[Color, int] = {}

    def add(self, color: Color, count: int = 1) -> None:
        key = (int(color[0]), int(color[1]), int(color[2]))
        self._counts[key] = self._counts.get(key, 0) + int(count)

    def merge(self, other: "ColorHistogram") -> "ColorHistogram":
        """Return a new histogram with the counts of both."""
        merged = ColorHistogram()
        for source in (self, other):
            for color, count in source.items():
                merged.add(color, count)
        return merged

    def items(self) -> Iterator[Tuple[Color, int]]:
        return iter(self._counts.items())

    def ranked(self) -> List[Tuple[Color, int]]:
        """Colours by descending frequency; ties keep insertion order."""
        return sorted(self._counts.items(), key=lambda item: -item[1])

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, color: Color) -> bool:
        return tuple(color) in self._counts

    def __getitem__(self, color: Color) -> int:
        return self._counts.get(tuple(color), 0)

    @classmethod
    def from_image(cls, rgb: np.ndarray, step: int = 32) -> "ColorHistogram":
        """
        Count quantized colours of an RGB image.

        Colours are inserted in order of their first pixel (row-major scan).
        """
        pixels = quantize_channels(rgb, step).reshape(-1, 3)
        histogram = cls()
        if pixels.size == 0:
            return histogram

        colors, first_index, counts = np.unique(
            pixels, axis=0, return_index=True, return_counts=True
        )
        for i in np.argsort(first_index, kind="stable"):
            histogram.add(tuple(colors[i]), int(counts[i]))
        return histogram
