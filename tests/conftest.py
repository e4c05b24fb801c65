"""
Test Configuration
==================

Pytest fixtures and test configuration for framescript.
"""

from typing import Callable, List, Optional, Tuple

import cv2
import numpy as np
import pytest

from framescript.errors import DecodeError
from framescript.models.frame import Frame, VideoMetadata


# RGB colours far from quantization bucket edges (multiples of 32)
RED = (224, 32, 32)
GREEN = (32, 192, 64)
BLUE = (32, 64, 224)
YELLOW = (224, 224, 32)

# Colours of the tiny test video, one per 5 frames (RGB)
TINY_VIDEO_COLORS = [RED, GREEN, BLUE, (224, 224, 224)]
TINY_VIDEO_FPS = 10.0
TINY_VIDEO_SIZE = (64, 48)


def solid_bgr(rgb: Tuple[int, int, int], width: int, height: int) -> np.ndarray:
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:] = (rgb[2], rgb[1], rgb[0])
    return image


class FakeVideoSource:
    """
    Deterministic in-memory VideoSource.

    Frames are solid colours that change with the timestamp, so tests can
    run long durations without a real decoder.
    """

    def __init__(
        self,
        duration: float,
        width: int = 320,
        height: int = 180,
        fail_at: Optional[float] = None,
    ) -> None:
        self._metadata = VideoMetadata(
            native_width=width,
            native_height=height,
            duration_seconds=duration,
            fps=30.0,
            frame_count=int(duration * 30),
        )
        self.fail_at = fail_at
        self.reads: List[float] = []

    @property
    def metadata(self) -> VideoMetadata:
        return self._metadata

    def read_frame(self, timestamp: float) -> np.ndarray:
        if self.fail_at is not None and timestamp >= self.fail_at:
            raise DecodeError(f"Synthetic failure at {timestamp}")
        self.reads.append(timestamp)
        level = int(timestamp * 10) % 200
        return solid_bgr((level, 64, 255 - level), self._metadata.native_width, self._metadata.native_height)


@pytest.fixture
def fake_source() -> Callable[..., FakeVideoSource]:
    """Factory for FakeVideoSource instances."""
    return FakeVideoSource


@pytest.fixture
def make_frame() -> Callable[..., Frame]:
    """Factory for solid-colour JPEG frames."""

    def _make(
        rgb: Tuple[int, int, int],
        timestamp: float = 0.0,
        width: int = 64,
        height: int = 36,
    ) -> Frame:
        image = solid_bgr(rgb, width, height)
        ok, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), 95])
        assert ok
        return Frame(timestamp=timestamp, pixels=buffer.tobytes(), width=width, height=height)

    return _make


def write_test_video(path, colors: List[Tuple[int, int, int]], fps: float, size: Tuple[int, int]):
    """
    Write one solid-colour MJPG frame per entry of ``colors``.

    Skips the calling test when the OpenCV build cannot write/read it.
    """
    width, height = size
    writer = cv2.VideoWriter(
        str(path), cv2.VideoWriter_fourcc(*"MJPG"), fps, (width, height)
    )
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write MJPG AVI")

    for rgb in colors:
        writer.write(solid_bgr(rgb, width, height))
    writer.release()

    cap = cv2.VideoCapture(str(path))
    readable = cap.isOpened() and int(cap.get(cv2.CAP_PROP_FRAME_COUNT)) == len(colors)
    cap.release()
    if not readable:
        pytest.skip("OpenCV build cannot read back MJPG AVI")

    return path


@pytest.fixture(scope="session")
def tiny_video_path(tmp_path_factory):
    """
    2 second, 10 fps, 64x48 MJPG AVI.

    Frames 0-4 red, 5-9 green, 10-14 blue, 15-19 light grey.
    """
    colors = [TINY_VIDEO_COLORS[index // 5] for index in range(20)]
    path = tmp_path_factory.mktemp("video") / "tiny.avi"
    return write_test_video(path, colors, TINY_VIDEO_FPS, TINY_VIDEO_SIZE)


@pytest.fixture(scope="session")
def long_video_path(tmp_path_factory):
    """
    30 second, 10 fps, 32x24 MJPG AVI sampled into 301 frames.

    Frames 0-199 black, 200-299 white.
    """
    colors = [(0, 0, 0)] * 200 + [(255, 255, 255)] * 100
    path = tmp_path_factory.mktemp("video") / "long.avi"
    return write_test_video(path, colors, TINY_VIDEO_FPS, (32, 24))


def mean_rgb(bgr: np.ndarray) -> np.ndarray:
    """Mean colour of a BGR image region, as RGB."""
    return bgr.reshape(-1, 3).mean(axis=0)[::-1]
