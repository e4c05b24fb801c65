"""
Frame Data Model
=================

Frame and video metadata representations shared by every pipeline stage.

Design Rules:
    - Frames are immutable once the rasterizer produces them
    - Pixels are kept encoded (JPEG bytes); stages decode on demand
    - VideoMetadata is captured once per sampling run and only read afterwards
"""

import base64
from dataclasses import dataclass


DEFAULT_ASPECT_RATIO = 16 / 9


@dataclass(frozen=True, slots=True)
class Frame:
    """
    One rasterized still image from a video.

    Attributes:
        timestamp: Position in the video in seconds
        pixels: JPEG-encoded image bytes
        width: Encoded image width in pixels
        height: Encoded image height in pixels
    """

    timestamp: float
    pixels: bytes
    width: int
    height: int

    def to_base64(self) -> str:
        """Encode pixels as base64 text for JSON payloads."""
        return base64.b64encode(self.pixels).decode("ascii")

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image bytes."""
        return (
            f"Frame(timestamp={self.timestamp:.3f}, "
            f"size={self.width}x{self.height}, "
            f"bytes={len(self.pixels)})"
        )


@dataclass(frozen=True, slots=True)
class VideoMetadata:
    """
    Basic properties of a decodable video source.

    Attributes:
        native_width: Width of the decoded video track in pixels
        native_height: Height of the decoded video track in pixels
        duration_seconds: Total duration in seconds
        fps: Declared frame rate
        frame_count: Number of decodable frames
    """

    native_width: int
    native_height: int
    duration_seconds: float
    fps: float = 0.0
    frame_count: int = 0

    @property
    def aspect_ratio(self) -> float:
        """Width / height, falling back to 16:9 for degenerate sizes."""
        if self.native_width <= 0 or self.native_height <= 0:
            return DEFAULT_ASPECT_RATIO
        return self.native_width / self.native_height

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "width": self.native_width,
            "height": self.native_height,
            "duration": round(self.duration_seconds, 3),
            "fps": round(self.fps, 3),
            "frame_count": self.frame_count,
        }
