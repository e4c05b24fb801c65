"""
Error Taxonomy
==============

Exceptions raised by the framescript pipeline.

Every error carries a stable ``error_code`` so callers (HTTP layer, CLI)
can map it to a specific remedy instead of a generic failure message.

Propagation:
    - Sampler and Rasterizer errors abort the whole operation
    - Color Summarizer and Tile Compositor degrade instead of raising,
      except for EmptyInputError which signals a programming error
"""


class FramescriptError(Exception):
    """Base exception for framescript."""

    error_code: str = "FRAMESCRIPT_ERROR"


class DurationExceededError(FramescriptError):
    """Raised when a video is longer than the sampling ceiling."""

    error_code = "VIDEO_TOO_LONG"

    def __init__(self, duration_seconds: float, max_duration_seconds: float) -> None:
        self.duration_seconds = duration_seconds
        self.max_duration_seconds = max_duration_seconds
        super().__init__(
            f"Video is {duration_seconds:.1f}s long but the limit is "
            f"{max_duration_seconds:.0f}s. Trim the video and try again."
        )


class DecodeError(FramescriptError):
    """Raised when a video source cannot be opened, seeked or decoded."""

    error_code = "DECODE_FAILED"

    def __init__(self, message: str) -> None:
        super().__init__(
            f"{message}. Re-encode the video (e.g. H.264 MP4) and try again."
        )


class EmptyInputError(FramescriptError):
    """Raised when the compositor is called without shots or frames."""

    error_code = "EMPTY_INPUT"


class SamplingCancelledError(FramescriptError):
    """Raised when a sampling run is cancelled between seeks."""

    error_code = "SAMPLING_CANCELLED"


class ImageDecodeError(FramescriptError):
    """Raised when encoded still-image bytes cannot be decoded."""

    error_code = "IMAGE_DECODE_FAILED"


class ImageEncodeError(FramescriptError):
    """Raised when an image cannot be encoded."""

    error_code = "IMAGE_ENCODE_FAILED"
