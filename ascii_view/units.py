"""
Unit conversion helpers.

CSS pixel values to character cells, and the colour math used to
detect text that is styled to be unreadable.
"""

import re
from typing import Optional, Tuple

# Approximate character cell of a 14px monospace font
CELL_WIDTH = 8.4
LINE_HEIGHT = 19.6

_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")
_RGB = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)(?:\s*,\s*([\d.]+))?")


def px(value) -> float:
    """Parse a CSS length like '12.5px' into a float (0 when unparsable)."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER.match(str(value))
    return float(match.group(1)) if match else 0.0


def to_columns(pixels: float, cell_width: float = CELL_WIDTH) -> int:
    """Pixels to character columns."""
    return max(0, int(round(pixels / cell_width)))


def to_rows(pixels: float, line_height: float = LINE_HEIGHT) -> int:
    """Pixels to text rows."""
    return max(0, int(round(pixels / line_height)))


def parse_rgb(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Parse 'rgb(r, g, b)' / 'rgba(...)'. Transparent colours give None."""
    if not value or value == "transparent":
        return None
    match = _RGB.search(value)
    if not match:
        return None
    alpha = match.group(4)
    if alpha is not None and float(alpha) == 0:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def relative_luminance(r: int, g: int, b: int) -> float:
    """sRGB relative luminance (WCAG definition)."""
    def channel(c: int) -> float:
        c = c / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def contrast_ratio(fg: Tuple[int, int, int], bg: Tuple[int, int, int]) -> float:
    l1 = relative_luminance(*fg)
    l2 = relative_luminance(*bg)
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)
