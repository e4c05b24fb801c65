"""
Palette Models
==============

Representative colour entries produced by the color summarizer.
"""

from dataclasses import dataclass

from framescript.imaging.color import rgb_to_hex


@dataclass(frozen=True, slots=True)
class PaletteEntry:
    """
    One quantized colour and how often it occurred.

    r, g and b are multiples of the quantization step and may reach 256
    for channels that round up past 255; ``color_hex`` is clamped.
    """

    color_hex: str
    frequency: int
    r: int
    g: int
    b: int

    @classmethod
    def from_quantized(cls, rgb: tuple, frequency: int) -> "PaletteEntry":
        r, g, b = (int(c) for c in rgb)
        return cls(color_hex=rgb_to_hex(r, g, b), frequency=frequency, r=r, g=g, b=b)

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)
