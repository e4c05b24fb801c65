"""
Poster Reference Crop
=====================

Centre crop of a frame to a vertical aspect ratio.

Posters are vertical while most footage is landscape, so the reference
frame handed to the poster generator is cropped to 9:16 first. The crop
keeps the full height when the source is wider than the target ratio and
the full width otherwise.
"""

import logging
from typing import Tuple

from framescript.imaging.codec import decode_image, encode_jpeg


logger = logging.getLogger(__name__)


VERTICAL_RATIO = 9 / 16


def center_crop_box(
    width: int,
    height: int,
    ratio: float = VERTICAL_RATIO,
) -> Tuple[int, int, int, int]:
    """
    Compute the centred crop box for ``ratio`` (width / height).

    Args:
        width: Source width in pixels
        height: Source height in pixels
        ratio: Target width / height

    Returns:
        (x0, y0, crop_width, crop_height) in whole pixels
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid source size: {width}x{height}")
    if ratio <= 0:
        raise ValueError("ratio must be positive")

    crop_h = float(height)
    crop_w = height * ratio

    # Source already taller than the target ratio
    if crop_w > width:
        crop_w = float(width)
        crop_h = width / ratio

    crop_w_px = max(1, min(width, int(round(crop_w))))
    crop_h_px = max(1, min(height, int(round(crop_h))))
    x0 = (width - crop_w_px) // 2
    y0 = (height - crop_h_px) // 2
    return x0, y0, crop_w_px, crop_h_px


def crop_to_vertical(
    image_bytes: bytes,
    ratio: float = VERTICAL_RATIO,
    jpeg_quality: int = 90,
) -> bytes:
    """
    Centre-crop encoded image bytes to ``ratio`` and re-encode as JPEG.

    Raises:
        ImageDecodeError: If the input cannot be decoded
    """
    image = decode_image(image_bytes)
    height, width = image.shape[:2]
    x0, y0, crop_w, crop_h = center_crop_box(width, height, ratio)

    logger.debug(
        f"Cropping {width}x{height} to {crop_w}x{crop_h} at ({x0}, {y0})"
    )
    cropped = image[y0:y0 + crop_h, x0:x0 + crop_w]
    return encode_jpeg(cropped, jpeg_quality)
