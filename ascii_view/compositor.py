"""
Block-to-line compositor.

Turns the normalised Block sequence into fixed-width Lines: greedy
word wrap, first-line and hanging indents, alignment, and link
offsets remapped from block text onto each produced line.
"""

import re
from typing import List, Optional, Tuple

from .blocks import (
    BLANK_LINE, BlankBlock, Block, CodeBlock, HeadingBlock, ImageBlock, Line, LineKind,
    Link, SeparatorBlock, TableBorderBlock, TableRowBlock, TextBlock, VideoBlock,
    shift_links,
)
from .normalize import collapse_blanks

LIST_MARKER = re.compile(r"^([●○■\-*] |\d+\.\s)")

CODE_FENCE = "```"
VIDEO_LABEL = "[VIDEO - press Enter to play]"


def pad(n: int) -> str:
    return " " * n if n > 0 else ""


def align_offset(length: int, align: str, width: int) -> int:
    """Left padding that places `length` chars within `width` columns."""
    gap = max(0, width - length)
    if align == "center":
        return gap // 2
    if align == "right":
        return gap
    return 0


def wrap_spans(text: str, width: int, first_extra: int = 0,
               hang: int = 0) -> List[Tuple[int, int]]:
    """
    Greedy wrap of `text` into [start, end) spans.

    Breaks at the last space at or before the width boundary (the space
    itself is dropped); hard-breaks at the boundary when the line holds
    no space, so unbreakable tokens are force-split.
    """
    spans = []
    pos = 0
    first = True
    while pos < len(text):
        extra = first_extra if first else hang
        line_width = max(1, width - extra)
        end = pos + line_width
        if end >= len(text):
            spans.append((pos, len(text)))
            break
        space = text.rfind(" ", pos, end + 1)
        if space > pos:
            spans.append((pos, space))
            pos = space + 1
        else:
            spans.append((pos, end))
            pos = end
        first = False
    return spans


class Compositor:
    """Compiles Blocks into display Lines."""

    def __init__(self, display_width: int = 80):
        self.display_width = display_width

    def compose(self, blocks: List[Block]) -> List[Line]:
        lines: List[Line] = []
        for block in blocks:
            if isinstance(block, BlankBlock):
                if lines and not lines[-1].is_blank:
                    lines.append(BLANK_LINE)
            else:
                lines.extend(self.compose_block(block))
        return collapse_blanks(lines)

    def compose_block(self, block: Block) -> List[Line]:
        if isinstance(block, HeadingBlock):
            return self._wrap(block.text, block.links, block.indent, block.wrap_width,
                              block.align, 0, LineKind.HEADING, block.level)
        if isinstance(block, TextBlock):
            return self._wrap(block.text, block.links, block.indent, block.wrap_width,
                              block.align, block.text_indent, LineKind.TEXT)
        if isinstance(block, ImageBlock):
            return self._image(block)
        if isinstance(block, VideoBlock):
            return [Line(LineKind.VIDEO_PLACEHOLDER, pad(block.indent) + VIDEO_LABEL,
                         target=block.element)]
        if isinstance(block, CodeBlock):
            ind = pad(block.indent)
            fence = Line(LineKind.SEPARATOR, ind + CODE_FENCE)
            return [fence] + [Line(LineKind.CODE, ind + line) for line in block.lines] + [fence]
        if isinstance(block, (SeparatorBlock, TableBorderBlock)):
            indent = self._fit_indent(block.indent, block.text)
            return [Line(LineKind.SEPARATOR, pad(indent) + block.text)]
        if isinstance(block, TableRowBlock):
            indent = self._fit_indent(block.indent, block.text)
            return [Line(LineKind.TEXT, pad(indent) + block.text,
                         tuple(shift_links(block.links, indent)))]
        return []

    def _fit_indent(self, indent: int, text: str) -> int:
        """Shrink an indent so fixed-width content stays on the grid."""
        return max(0, min(indent, self.display_width - len(text)))

    def _wrap(self, text: str, links: List[Link], indent: int, width: int,
              align: str, text_indent: int, kind: LineKind,
              level: Optional[int] = None) -> List[Line]:
        width = max(1, width)
        if len(text) <= width and not text_indent:
            shift = indent + align_offset(len(text), align, width)
            return [Line(kind, pad(shift) + text,
                         tuple(shift_links(links, shift)), level)]

        match = LIST_MARKER.match(text)
        hang = min(len(match.group(1)), width - 1) if match else 0
        first_extra = min(text_indent, max(0, width - 1))

        out = []
        for i, (start, end) in enumerate(wrap_spans(text, width, first_extra, hang)):
            prefix = first_extra if i == 0 else hang
            piece = pad(prefix) + text[start:end]
            shift = indent + align_offset(len(piece), align, width)
            line_links = []
            for link in links:
                part = link.clipped(start, end)
                if part is not None:
                    line_links.append(part.shifted(prefix + shift - start))
            out.append(Line(kind, pad(shift) + piece, tuple(line_links), level))
        return out

    def _image(self, block: ImageBlock) -> List[Line]:
        ind = pad(block.indent)
        if block.ascii_lines:
            lines = [Line(LineKind.ASCII_ART, ind + row) for row in block.ascii_lines]
            if block.alt:
                lines.append(Line(LineKind.TEXT, ind + f"  [{block.alt}]"))
            return lines
        label = f"[IMAGE: {block.alt}]" if block.alt else "[IMAGE]"
        return [Line(LineKind.TEXT, ind + label)]


def compose(blocks: List[Block], display_width: int = 80) -> List[Line]:
    """Convenience wrapper around Compositor.compose()."""
    return Compositor(display_width).compose(blocks)
