"""
Image Codec
===========

Dedicated module for encoding and decoding still images with OpenCV.

Design Rules:
    - This is the ONLY place in the codebase that calls imdecode/imencode
    - Validates shape and dtype
    - Fails fast on corrupt data with ImageDecodeError
    - Works in OpenCV's BGR channel order; callers convert when they need RGB
"""

import logging

import cv2
import numpy as np

from framescript.errors import ImageDecodeError, ImageEncodeError


logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (JPEG/PNG) to a BGR numpy array.

    Args:
        data: Encoded image bytes

    Returns:
        BGR image as np.ndarray (H, W, 3), dtype=uint8

    Raises:
        ImageDecodeError: If decoding fails or the image is invalid
    """
    if not data:
        raise ImageDecodeError("Cannot decode empty image data")

    nparr = np.frombuffer(data, np.uint8)
    bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if bgr is None:
        raise ImageDecodeError("cv2.imdecode returned None")

    if bgr.ndim != 3 or bgr.shape[2] != 3:
        raise ImageDecodeError(f"Invalid image shape: {bgr.shape}")

    if bgr.dtype != np.uint8:
        raise ImageDecodeError(f"Invalid dtype: {bgr.dtype}")

    return bgr


def encode_jpeg(image: np.ndarray, quality: int) -> bytes:
    """
    Encode a BGR image as JPEG.

    Args:
        image: BGR image (H, W, 3), dtype=uint8
        quality: JPEG quality in [1, 100]

    Returns:
        JPEG bytes

    Raises:
        ImageEncodeError: If OpenCV refuses to encode the image
    """
    if not 1 <= quality <= 100:
        raise ValueError("quality must be in [1, 100]")

    ok, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise ImageEncodeError(f"Failed to encode JPEG of shape {image.shape}")
    return buffer.tobytes()


def resize_to_width(image: np.ndarray, target_width: int) -> np.ndarray:
    """
    Scale an image to ``target_width`` preserving aspect ratio.

    Height is ``round(target_width * height / width)``, at least 1px.
    """
    if target_width < 1:
        raise ValueError("target_width must be >= 1")

    height, width = image.shape[:2]
    target_height = max(1, int(round(target_width * height / width)))
    if (target_width, target_height) == (width, height):
        return image

    interpolation = cv2.INTER_AREA if target_width < width else cv2.INTER_LINEAR
    return cv2.resize(image, (target_width, target_height), interpolation=interpolation)
