"""Hex/RGB/BGR colour conversions."""

from typing import Tuple


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format an RGB triple as ``#rrggbb``, clamping channels to [0, 255]."""
    r, g, b = (max(0, min(255, int(c))) for c in (r, g, b))
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """
    Parse ``#rrggbb`` or ``#rgb`` into an RGB triple.

    Raises:
        ValueError: If the string is not a hex colour
    """
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid hex colour: {value!r}")
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError as e:
        raise ValueError(f"Invalid hex colour: {value!r}") from e


def hex_to_bgr(value: str) -> Tuple[int, int, int]:
    """Parse a hex colour into OpenCV's BGR channel order."""
    r, g, b = hex_to_rgb(value)
    return (b, g, r)
