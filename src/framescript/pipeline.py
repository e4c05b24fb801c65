"""
Pipeline Wiring
===============

Builds the pipeline components from Settings.

Components do not read configuration themselves; the service and the
scripts construct them here so every entry point wires the same values.
"""

import logging
from dataclasses import dataclass

from framescript.composite import TileCompositor
from framescript.config import Settings
from framescript.palette import ColorSummarizer
from framescript.video import FrameSampler, IntervalTiers


logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    """Sampler, summarizer and compositor configured from one Settings."""

    sampler: FrameSampler
    summarizer: ColorSummarizer
    compositor: TileCompositor

    @classmethod
    def from_settings(cls, settings: Settings) -> "Pipeline":
        sampling = settings.sampling
        tiers = IntervalTiers(
            dense_max_duration=sampling.dense_max_duration,
            dense_interval=sampling.dense_interval,
            medium_max_duration=sampling.medium_max_duration,
            medium_interval=sampling.medium_interval,
            sparse_interval=sampling.sparse_interval,
        )
        sampler = FrameSampler(
            max_duration_seconds=sampling.max_duration_seconds,
            target_width=sampling.target_width,
            tiers=tiers,
            jpeg_quality=sampling.jpeg_quality,
        )

        palette = settings.palette
        summarizer = ColorSummarizer(
            max_sampled_frames=palette.max_sampled_frames,
            raster_size=palette.raster_size,
            quantization_step=palette.quantization_step,
            min_distance=palette.min_distance,
            max_workers=palette.max_workers,
        )

        composite = settings.composite
        compositor = TileCompositor(
            canvas_width=composite.canvas_width,
            gap=composite.gap,
            background_color=composite.background_color,
            label_font_scale=composite.label_font_scale,
            label_opacity=composite.label_opacity,
            max_workers=composite.max_workers,
        )

        logger.info("Pipeline components created")
        return cls(sampler=sampler, summarizer=summarizer, compositor=compositor)
