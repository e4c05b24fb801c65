"""
Frame Sampler
=============

Adaptive temporal sampling of a video into a bounded, ordered frame list.

Sampling Policy:
    1. Read native size and duration from the source
    2. Reject videos longer than the duration ceiling (default 120s)
       before any capture
    3. Choose one interval for the whole run by duration tier:
           duration <= 30s  -> 0.1s
           duration <= 60s  -> 0.2s
           otherwise        -> 0.4s
       Short clips get dense sampling so sub-second micro-cuts are not
       missed; longer clips trade resolution for a bounded frame count.
    4. Rasterize at a fixed width (default 256px)
    5. Capture at n * interval for n = 0 .. floor(duration / interval)

Failure Semantics:
    All-or-nothing. A failed capture raises DecodeError and a cancelled
    run raises SamplingCancelledError; the partial frame list is dropped.

Control Flow:
    A plain sequential loop. Each capture blocks until its seek completes,
    so the next seek always starts from a settled decode context.
    Cancellation is checked before every seek.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import cv2

from framescript.errors import DecodeError, DurationExceededError, SamplingCancelledError
from framescript.models.frame import Frame, VideoMetadata
from framescript.video.rasterizer import FrameRasterizer
from framescript.video.source import VideoInput, VideoSource, open_video


logger = logging.getLogger(__name__)


ProgressCallback = Callable[[int, int], None]

# Guards floor(duration / interval) against binary float error (45 / 0.2)
_STEP_EPSILON = 1e-9


@dataclass(frozen=True, slots=True)
class IntervalTiers:
    """
    Duration thresholds and the sampling interval used in each tier.

    Attributes:
        dense_max_duration: Upper bound (inclusive) of the dense tier
        dense_interval: Interval for clips up to dense_max_duration
        medium_max_duration: Upper bound (inclusive) of the medium tier
        medium_interval: Interval for clips up to medium_max_duration
        sparse_interval: Interval for everything longer
    """

    dense_max_duration: float = 30.0
    dense_interval: float = 0.1
    medium_max_duration: float = 60.0
    medium_interval: float = 0.2
    sparse_interval: float = 0.4

    def __post_init__(self) -> None:
        for name in ("dense_interval", "medium_interval", "sparse_interval"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.medium_max_duration < self.dense_max_duration:
            raise ValueError("medium_max_duration must be >= dense_max_duration")

    def interval_for(self, duration_seconds: float) -> float:
        if duration_seconds <= self.dense_max_duration:
            return self.dense_interval
        if duration_seconds <= self.medium_max_duration:
            return self.medium_interval
        return self.sparse_interval


@dataclass(frozen=True, slots=True)
class SamplingPlan:
    """
    Sampling schedule derived from a duration.

    Pure function of the duration and tiers; recomputed for every run.

    Attributes:
        duration_seconds: Video duration
        interval_seconds: Time between consecutive captures (> 0)
        estimated_total: floor(duration / interval), reported to progress callbacks
        frame_count: Number of captures (estimated_total + 1, counting t=0)
    """

    duration_seconds: float
    interval_seconds: float
    estimated_total: int
    frame_count: int

    def timestamp_at(self, step: int) -> float:
        """Capture time of ``step``, rounded to suppress accumulated float error."""
        return round(step * self.interval_seconds, 6)

    def timestamps(self) -> List[float]:
        return [self.timestamp_at(n) for n in range(self.frame_count)]


def plan_sampling(duration_seconds: float, tiers: Optional[IntervalTiers] = None) -> SamplingPlan:
    """
    Compute the sampling plan for a video duration.

    Args:
        duration_seconds: Video duration (>= 0)
        tiers: Interval tiers; defaults to 30s/0.1, 60s/0.2, else 0.4

    Returns:
        SamplingPlan
    """
    if duration_seconds < 0 or not math.isfinite(duration_seconds):
        raise ValueError(f"Invalid duration: {duration_seconds}")

    tiers = tiers or IntervalTiers()
    interval = tiers.interval_for(duration_seconds)
    steps = math.floor(duration_seconds / interval + _STEP_EPSILON)

    return SamplingPlan(
        duration_seconds=duration_seconds,
        interval_seconds=interval,
        estimated_total=steps,
        frame_count=steps + 1,
    )


class FrameSampler:
    """
    Builds the low-resolution frame list sent to the analysis model.

    Attributes:
        max_duration_seconds: Hard duration ceiling
        target_width: Width of every sampled frame
        tiers: Interval tiers
        rasterizer: Rasterizer used for each capture

    Example:
        sampler = FrameSampler()
        with open_video("clip.mp4") as source:
            frames, metadata = sampler.sample(
                source,
                on_progress=lambda done, total: print(done, total),
            )
    """

    def __init__(
        self,
        max_duration_seconds: float = 120.0,
        target_width: int = 256,
        tiers: Optional[IntervalTiers] = None,
        jpeg_quality: int = 40,
        log_every_n_frames: int = 50,
    ) -> None:
        """
        Initialize the sampler.

        Args:
            max_duration_seconds: Videos longer than this are rejected
            target_width: Rasterization width in pixels
            tiers: Duration tiers -> sampling interval
            jpeg_quality: JPEG quality of sampled frames
            log_every_n_frames: Log progress every N captures
        """
        if max_duration_seconds <= 0:
            raise ValueError("max_duration_seconds must be positive")
        if target_width < 1:
            raise ValueError("target_width must be >= 1")

        self.max_duration_seconds = max_duration_seconds
        self.target_width = target_width
        self.tiers = tiers or IntervalTiers()
        self.rasterizer = FrameRasterizer(jpeg_quality=jpeg_quality)
        self.log_every_n_frames = log_every_n_frames

        logger.info(
            f"FrameSampler initialized: max_duration={max_duration_seconds}s, "
            f"width={target_width}px, quality={jpeg_quality}"
        )

    def plan(self, duration_seconds: float) -> SamplingPlan:
        return plan_sampling(duration_seconds, self.tiers)

    def sample(
        self,
        source: VideoSource,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[List[Frame], VideoMetadata]:
        """
        Sample the whole timeline of an open source.

        Args:
            source: Open video source, exclusively owned for the run
            on_progress: Called as on_progress(frames_so_far, estimated_total)
                after every capture
            cancel_event: Checked before every seek; when set the run stops

        Returns:
            (frames ordered by timestamp, metadata)

        Raises:
            DurationExceededError: Video longer than the ceiling
            DecodeError: Any capture failed
            SamplingCancelledError: cancel_event was set
        """
        metadata = source.metadata
        duration = metadata.duration_seconds

        if duration > self.max_duration_seconds:
            logger.warning(
                f"Rejecting video: duration {duration:.2f}s > {self.max_duration_seconds}s"
            )
            raise DurationExceededError(duration, self.max_duration_seconds)

        plan = self.plan(duration)
        logger.info(
            f"Sampling {duration:.2f}s at {plan.interval_seconds}s intervals "
            f"(~{plan.frame_count} frames, {metadata.native_width}x{metadata.native_height})"
        )

        start_time = time.time()
        frames: List[Frame] = []

        for step in range(plan.frame_count):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Sampling cancelled after {len(frames)} frames")
                raise SamplingCancelledError(
                    f"Sampling cancelled after {len(frames)} of {plan.frame_count} frames"
                )

            timestamp = plan.timestamp_at(step)
            try:
                frame = self.rasterizer.capture(source, timestamp, self.target_width)
            except cv2.error as e:
                raise DecodeError(f"Decoder error at {timestamp:.3f}s: {e}") from e

            frames.append(frame)

            if on_progress is not None:
                on_progress(len(frames), plan.estimated_total)

            if len(frames) % self.log_every_n_frames == 0:
                logger.debug(f"Sampled {len(frames)}/{plan.frame_count} frames")

        elapsed = time.time() - start_time
        logger.info(f"Sampled {len(frames)} frames in {elapsed:.2f}s")
        return frames, metadata


def sample_video(
    video: VideoInput,
    sampler: Optional[FrameSampler] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    suffix: str = ".mp4",
) -> Tuple[List[Frame], VideoMetadata]:
    """
    Open a dedicated decode session and sample it.

    Args:
        video: Video file path or bytes
        sampler: Sampler to use; a default FrameSampler when None
        on_progress: Progress callback
        cancel_event: Cooperative cancellation flag
        suffix: Suffix for spooling in-memory bytes

    Returns:
        (frames, metadata)
    """
    sampler = sampler or FrameSampler()
    with open_video(video, suffix=suffix) as source:
        return sampler.sample(source, on_progress=on_progress, cancel_event=cancel_event)
