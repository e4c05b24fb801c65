"""
framescript
===========

Frame sampling and visual summaries for AI-assisted shot breakdowns.

A video is sampled into a bounded list of small frames for an external
multimodal model; the model's shot list is then turned back into visual
summaries locally.

Components:
    - video: Decode sessions, rasterization and adaptive sampling
    - palette: Dominant colour extraction (quantized histograms)
    - composite: Grid composites of shot thumbnails ("color script")
    - analysis: Payload preparation and shot list statistics
    - imaging: JPEG codec, colour conversions, poster crops

Example:
    from framescript.video import sample_video
    from framescript.palette import ColorSummarizer

    frames, metadata = sample_video("clip.mp4")
    print(ColorSummarizer().summarize(frames, max_colors=7))
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
