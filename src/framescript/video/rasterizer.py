"""
Frame Rasterizer
================

Turns one position of a video into an encoded still Frame.

Two uses:
    - Bulk sampling: proportional downscale to a fixed width with low
      JPEG quality to keep the analysis payload small
    - Single high-resolution capture: native size, high JPEG quality,
      in its own decode session

Design Rules:
    - No shared state; decode buffers live only for the duration of a call
    - Every failure surfaces as DecodeError
"""

import logging
from typing import Optional

import cv2

from framescript.analysis.timecode import parse_timecode
from framescript.errors import DecodeError, ImageEncodeError
from framescript.imaging.codec import encode_jpeg, resize_to_width
from framescript.models.frame import Frame
from framescript.models.shots import ShotData
from framescript.video.source import VideoInput, VideoSource, open_video


logger = logging.getLogger(__name__)


class FrameRasterizer:
    """
    Capture frames from an open VideoSource.

    Attributes:
        jpeg_quality: JPEG quality used to encode captured frames

    Example:
        rasterizer = FrameRasterizer(jpeg_quality=40)
        with open_video("clip.mp4") as source:
            frame = rasterizer.capture(source, 2.0, target_width=256)
    """

    def __init__(self, jpeg_quality: int = 40) -> None:
        if not 1 <= jpeg_quality <= 100:
            raise ValueError("jpeg_quality must be in [1, 100]")
        self.jpeg_quality = jpeg_quality

    def capture(
        self,
        source: VideoSource,
        timestamp: float,
        target_width: Optional[int] = None,
    ) -> Frame:
        """
        Capture the frame shown at ``timestamp``.

        Args:
            source: Open video source (exclusively owned by the caller)
            timestamp: Position in seconds
            target_width: Output width; None keeps native resolution

        Returns:
            Frame with JPEG-encoded pixels

        Raises:
            DecodeError: If seeking, decoding or encoding fails
        """
        if timestamp < 0:
            raise DecodeError(f"Cannot seek to negative timestamp {timestamp}")

        image = source.read_frame(timestamp)

        try:
            if target_width is not None:
                image = resize_to_width(image, target_width)
            pixels = encode_jpeg(image, self.jpeg_quality)
        except (cv2.error, ImageEncodeError) as e:
            raise DecodeError(f"Failed to rasterize frame at {timestamp:.3f}s: {e}") from e

        height, width = image.shape[:2]
        return Frame(timestamp=timestamp, pixels=pixels, width=width, height=height)


def capture_high_res(
    video: VideoInput,
    timestamp: float,
    jpeg_quality: int = 95,
) -> bytes:
    """
    Capture one frame at native resolution in a dedicated decode session.

    Args:
        video: Video file path or bytes
        timestamp: Position in seconds
        jpeg_quality: JPEG quality of the result

    Returns:
        JPEG bytes at the video's native size

    Raises:
        DecodeError: If the video cannot be opened or decoded, or
            ``timestamp`` lies past the end of the video
    """
    rasterizer = FrameRasterizer(jpeg_quality=jpeg_quality)
    with open_video(video) as source:
        frame = rasterizer.capture(source, timestamp)

    logger.info(
        f"Captured high-res frame at {timestamp:.2f}s ({frame.width}x{frame.height})"
    )
    return frame.pixels


def capture_shot_frame(
    video: VideoInput,
    shot: ShotData,
    offset_seconds: float = 0.1,
    jpeg_quality: int = 95,
) -> bytes:
    """
    Capture the opening frame of a shot at native resolution.

    The capture lands ``offset_seconds`` after the shot's start time so a
    frame blended across the cut is not picked.

    Raises:
        ValueError: If the shot's start time is not a valid timecode
        DecodeError: If the capture fails
    """
    timestamp = parse_timecode(shot.start_time) + offset_seconds
    return capture_high_res(video, timestamp, jpeg_quality=jpeg_quality)
