"""
Imaging Module
==============

Still-image helpers: JPEG codec, colour conversions and cropping.
"""

from framescript.imaging.codec import decode_image, encode_jpeg, resize_to_width
from framescript.imaging.color import hex_to_bgr, hex_to_rgb, rgb_to_hex
from framescript.imaging.crop import VERTICAL_RATIO, center_crop_box, crop_to_vertical

__all__ = [
    "decode_image",
    "encode_jpeg",
    "resize_to_width",
    "rgb_to_hex",
    "hex_to_rgb",
    "hex_to_bgr",
    "center_crop_box",
    "crop_to_vertical",
    "VERTICAL_RATIO",
]
