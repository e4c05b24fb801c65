"""
Video Source
============

Decode sessions over seekable video files.

A VideoSource owns exactly one decode context. Seeking and reading are
the only blocking steps of the pipeline: ``read_frame`` returns only
after the seek has completed and the frame at that position is decoded.

Design Rules:
    - One source per logical operation; never share a source between a
      sampling run and an independent capture
    - Seeks are frame-accurate by frame index, clamped to the last frame;
      positions more than one frame past the end raise DecodeError
    - Sources are released deterministically via context managers
"""

import logging
import math
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol, Union

import cv2
import numpy as np

from framescript.errors import DecodeError
from framescript.models.frame import VideoMetadata


logger = logging.getLogger(__name__)


VideoInput = Union[str, Path, bytes]

# Tolerance when converting timestamps to frame indices
_SEEK_EPSILON = 1e-6


class VideoSource(Protocol):
    """
    Protocol for decodable, seekable video sources.

    Implemented by:
        - OpenCVVideoSource (files decoded through cv2.VideoCapture)
        - test doubles that synthesize frames
    """

    @property
    def metadata(self) -> VideoMetadata:
        """Native size and duration of the video track."""
        ...

    def read_frame(self, timestamp: float) -> np.ndarray:
        """
        Seek to ``timestamp`` and decode the frame shown there.

        Args:
            timestamp: Position in seconds

        Returns:
            BGR image (H, W, 3), dtype=uint8

        Raises:
            DecodeError: If the seek or decode fails
        """
        ...


class OpenCVVideoSource:
    """
    VideoSource backed by OpenCV's VideoCapture.

    Example:
        with OpenCVVideoSource("clip.mp4") as source:
            print(source.metadata.duration_seconds)
            frame = source.read_frame(1.5)
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """
        Open a video file.

        Raises:
            DecodeError: If the file cannot be opened or has no video track
        """
        self.path = Path(path)
        self._capture: Optional[cv2.VideoCapture] = cv2.VideoCapture(str(self.path))

        if not self._capture.isOpened():
            self._capture.release()
            self._capture = None
            raise DecodeError(f"Failed to open video '{self.path.name}'")

        try:
            self._metadata = self._read_metadata()
        except DecodeError:
            self.close()
            raise

        logger.debug(f"Opened video '{self.path.name}': {self._metadata.to_dict()}")

    def _read_metadata(self) -> VideoMetadata:
        cap = self._capture
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = float(cap.get(cv2.CAP_PROP_FPS))
        frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))

        if width <= 0 or height <= 0:
            raise DecodeError(f"No decodable video track in '{self.path.name}'")
        if fps <= 0 or not math.isfinite(fps) or frame_count <= 0:
            raise DecodeError(
                f"Cannot determine duration of '{self.path.name}' "
                f"(fps={fps}, frames={frame_count})"
            )

        return VideoMetadata(
            native_width=width,
            native_height=height,
            duration_seconds=frame_count / fps,
            fps=fps,
            frame_count=frame_count,
        )

    @property
    def metadata(self) -> VideoMetadata:
        return self._metadata

    def frame_index_at(self, timestamp: float) -> int:
        """
        Index of the frame displayed at ``timestamp``, clamped to the track.

        A timestamp equal to the duration maps to the last frame.
        """
        index = math.floor(max(0.0, timestamp) * self._metadata.fps + _SEEK_EPSILON)
        return min(index, self._metadata.frame_count - 1)

    def read_frame(self, timestamp: float) -> np.ndarray:
        if self._capture is None:
            raise DecodeError(f"Video '{self.path.name}' is closed")

        # One frame of slack past the end, then the position does not exist
        limit = self._metadata.duration_seconds + 1 / self._metadata.fps
        if timestamp > limit:
            raise DecodeError(
                f"Cannot seek '{self.path.name}' to {timestamp:.3f}s "
                f"(duration {self._metadata.duration_seconds:.3f}s)"
            )

        index = self.frame_index_at(timestamp)
        if not self._capture.set(cv2.CAP_PROP_POS_FRAMES, index):
            raise DecodeError(
                f"Failed to seek '{self.path.name}' to {timestamp:.3f}s (frame {index})"
            )

        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise DecodeError(
                f"Failed to decode '{self.path.name}' at {timestamp:.3f}s (frame {index})"
            )
        return frame

    def close(self) -> None:
        """Release the decode context. Safe to call more than once."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def __enter__(self) -> "OpenCVVideoSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@contextmanager
def open_video(video: VideoInput, suffix: str = ".mp4") -> Iterator[OpenCVVideoSource]:
    """
    Open one decode session for a file path or in-memory video bytes.

    In-memory bytes are spooled to a temporary file (OpenCV decodes from
    paths) which is removed when the session ends.

    Args:
        video: Path to a video file, or the encoded video bytes
        suffix: File suffix used for spooled bytes (helps container probing)

    Yields:
        An open OpenCVVideoSource

    Raises:
        DecodeError: If the video cannot be opened
    """
    if isinstance(video, (str, Path)):
        with OpenCVVideoSource(video) as source:
            yield source
        return

    if not video:
        raise DecodeError("Video data is empty")

    fd, tmp_name = tempfile.mkstemp(suffix=suffix, prefix="framescript_")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(video)
        with OpenCVVideoSource(tmp_name) as source:
            yield source
    finally:
        try:
            os.unlink(tmp_name)
        except OSError as e:
            logger.warning(f"Could not remove spooled video {tmp_name}: {e}")
