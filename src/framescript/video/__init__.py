"""
Video Module
============

Decode sessions, single-frame rasterization and adaptive sampling.

    - VideoSource / OpenCVVideoSource: seekable decode context
    - FrameRasterizer: timestamp -> encoded Frame
    - FrameSampler: whole timeline -> bounded, ordered frame list

Example:
    from framescript.video import FrameSampler, open_video

    sampler = FrameSampler()
    with open_video("clip.mp4") as source:
        frames, metadata = sampler.sample(source)
"""

from framescript.video.source import OpenCVVideoSource, VideoSource, open_video
from framescript.video.rasterizer import FrameRasterizer, capture_high_res, capture_shot_frame
from framescript.video.sampler import (
    FrameSampler,
    IntervalTiers,
    SamplingPlan,
    plan_sampling,
    sample_video,
)


__all__ = [
    "VideoSource",
    "OpenCVVideoSource",
    "open_video",
    "FrameRasterizer",
    "capture_high_res",
    "capture_shot_frame",
    "FrameSampler",
    "IntervalTiers",
    "SamplingPlan",
    "plan_sampling",
    "sample_video",
]
