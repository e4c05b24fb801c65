"""
Palette Module
==============

Quantized-histogram colour summarization of sampled frames.
"""

from framescript.palette.histogram import ColorHistogram, quantize_channels
from framescript.palette.summarizer import ColorSummarizer, color_distance

__all__ = ["ColorHistogram", "quantize_channels", "ColorSummarizer", "color_distance"]
