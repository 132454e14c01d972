"""
Intermediate and output data model.

Blocks are the semantic, pre-wrap units the tree walker produces.
Lines are the fixed-width rows the compositor emits for a viewer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .styled import StyledNode


@dataclass(frozen=True)
class Link:
    """A half-open [start, end) character span pointing at href."""
    start: int
    end: int
    href: str

    def shifted(self, offset: int) -> "Link":
        return Link(self.start + offset, self.end + offset, self.href)

    def clipped(self, lower: int, upper: int) -> Optional["Link"]:
        """Intersect with [lower, upper); None when nothing is left."""
        start = max(self.start, lower)
        end = min(self.end, upper)
        if end <= start:
            return None
        return Link(start, end, self.href)


def shift_links(links: List[Link], offset: int) -> List[Link]:
    return [link.shifted(offset) for link in links] if offset else list(links)


def clip_links(links: List[Link], length: int) -> List[Link]:
    """Drop or trim links so every span lies within a text of `length` chars."""
    clipped = (link.clipped(0, length) for link in links)
    return [link for link in clipped if link is not None]


# Blocks

@dataclass
class Block:
    indent: int = 0


@dataclass
class BlankBlock(Block):
    pass


@dataclass
class TextBlock(Block):
    text: str = ""
    links: List[Link] = field(default_factory=list)
    wrap_width: int = 80
    align: str = "left"
    text_indent: int = 0


@dataclass
class HeadingBlock(Block):
    level: int = 1
    text: str = ""
    links: List[Link] = field(default_factory=list)
    wrap_width: int = 80
    align: str = "left"


@dataclass
class ImageBlock(Block):
    src: str = ""
    alt: str = ""
    width_px: float = 0.0
    height_px: float = 0.0
    natural_width: int = 0
    natural_height: int = 0
    art_width: int = 1
    art_height: int = 1
    element: Optional[StyledNode] = field(default=None, repr=False)
    ascii_lines: Optional[List[str]] = None  # attached by the raster sampler


@dataclass
class VideoBlock(Block):
    element: Optional[StyledNode] = field(default=None, repr=False)
    width_px: float = 0.0
    height_px: float = 0.0


@dataclass
class CodeBlock(Block):
    lines: List[str] = field(default_factory=list)


@dataclass
class SeparatorBlock(Block):
    text: str = ""


@dataclass
class TableBorderBlock(Block):
    text: str = ""


@dataclass
class TableRowBlock(Block):
    text: str = ""
    links: List[Link] = field(default_factory=list)


# Lines

class LineKind(Enum):
    TEXT = "text"
    HEADING = "heading"
    ASCII_ART = "ascii_art"
    VIDEO_PLACEHOLDER = "video_placeholder"
    SEPARATOR = "separator"
    CODE = "code"
    BLANK = "blank"


@dataclass(frozen=True)
class Line:
    """One row of the output grid."""
    kind: LineKind
    text: str = ""
    links: tuple = ()
    level: Optional[int] = None
    target: Optional[StyledNode] = field(default=None, repr=False, compare=False)

    @property
    def is_blank(self) -> bool:
        return self.kind is LineKind.BLANK


BLANK_LINE = Line(LineKind.BLANK)
