"""
Raster-to-glyph conversion.

Converts image pixels into rows of ASCII characters sized to the
cell box an image occupied on the page:
- Brightness ramp character sets
- Transparent pixels rendered as spaces
- Aspect ratio correction when no target size is known
"""

from typing import List, Optional, Tuple
import numpy as np
from PIL import Image


class CharacterSets:
    """Predefined brightness ramps (dark to light)."""

    STANDARD = " .:-=+*#%@"

    DETAILED = " .'`^\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$"

    BLOCKS = " ░▒▓█"

    MINIMAL = " .-+*#"

    @classmethod
    def by_name(cls, name: str) -> str:
        """Look up a ramp by name ('standard', 'blocks', ...)."""
        ramp = getattr(cls, name.upper(), None)
        if not isinstance(ramp, str):
            raise ValueError(f"Unknown character set: {name}")
        return ramp


class ASCIIConverter:
    """
    Converts images to ASCII art rows.

    Maps pixel luminance onto a character ramp after optional
    brightness/contrast adjustment.
    """

    # Monospace characters are roughly twice as tall as wide
    ASPECT_RATIO_CORRECTION = 0.5

    # Alpha below this renders as blank
    ALPHA_CUTOFF = 128

    def __init__(
        self,
        charset: str = CharacterSets.STANDARD,
        invert: bool = False,
        brightness: float = 1.0,
        contrast: float = 1.0,
        max_width: int = 140,
        max_height: int = 150
    ):
        """
        Initialize the converter.

        Args:
            charset: Character ramp, darkest first
            invert: Invert brightness mapping
            brightness: Brightness adjustment (0.5 = darker, 2.0 = brighter)
            contrast: Contrast adjustment (0.5 = lower, 2.0 = higher)
            max_width: Widest art in characters
            max_height: Tallest art in rows
        """
        if len(charset) < 2:
            raise ValueError("Character set needs at least two characters")
        self.charset = charset
        self.invert = invert
        self.brightness = brightness
        self.contrast = contrast
        self.max_width = max_width
        self.max_height = max_height

    def _adjust_image(self, img: np.ndarray) -> np.ndarray:
        """Apply contrast (around the midpoint) and brightness."""
        adjusted = (img.astype(np.float32) - 127.5) * self.contrast + 127.5
        adjusted = adjusted * self.brightness
        return np.clip(adjusted, 0, 255)

    def target_size(
        self,
        natural_size: Tuple[int, int],
        art_size: Tuple[int, int] = (0, 0)
    ) -> Tuple[int, int]:
        """
        Output size in characters.

        Uses the cell box the image occupied when known, otherwise scales
        the natural size to a readable width with aspect correction.
        Height is capped at max_height, shrinking width to match.
        """
        nat_w, nat_h = natural_size
        art_w, art_h = art_size

        if art_w > 0 and art_h > 0:
            out_w = min(art_w, self.max_width)
            out_h = art_h
        else:
            out_w = min(max(20, round(nat_w / 6)), self.max_width)
            out_h = round((nat_h / nat_w) * out_w * self.ASPECT_RATIO_CORRECTION)

        out_w = max(1, out_w)
        out_h = max(1, out_h)

        if out_h > self.max_height:
            scale = self.max_height / out_h
            out_h = self.max_height
            out_w = max(1, round(out_w * scale))

        return out_w, out_h

    def to_lines(
        self,
        image: Image.Image,
        art_size: Tuple[int, int] = (0, 0)
    ) -> Optional[List[str]]:
        """
        Convert a PIL Image to ASCII rows.

        Args:
            image: Source image (any mode)
            art_size: (columns, rows) the image occupied on the page

        Returns:
            List of equal-length row strings, or None for degenerate images
        """
        nat_w, nat_h = image.size
        if nat_w < 1 or nat_h < 1:
            return None

        out_w, out_h = self.target_size((nat_w, nat_h), art_size)
        rgba = np.array(
            image.convert("RGBA").resize((out_w, out_h), Image.Resampling.LANCZOS)
        )

        rgb = rgba[:, :, :3].astype(np.float32)
        lum = rgb[:, :, 0] * 0.299 + rgb[:, :, 1] * 0.587 + rgb[:, :, 2] * 0.114
        # back to 8-bit levels so pure white lands on the last glyph
        lum = np.rint(self._adjust_image(lum))
        if self.invert:
            lum = 255 - lum

        ramp = np.array(list(self.charset))
        index = np.floor(lum / 255 * (len(self.charset) - 1)).astype(int)
        chars = ramp[np.clip(index, 0, len(self.charset) - 1)]
        chars[rgba[:, :, 3] < self.ALPHA_CUTOFF] = " "

        return ["".join(row) for row in chars]

    def convert(self, image: Image.Image, width: Optional[int] = None) -> str:
        """Convert a PIL Image to a single ASCII art string."""
        art_size = (0, 0)
        if width:
            w, h = image.size
            art_size = (width, max(1, round(h / w * width * self.ASPECT_RATIO_CORRECTION)))
        return "\n".join(self.to_lines(image, art_size) or [])
