"""
Formatting-context stack.

Every block-level element pushes a frame tracking the content width
available to it, its left indent, text alignment and first-line
text indent. Frames are strictly nested: a frame is discarded when
the walker leaves the element that pushed it.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List

from .config import RenderConfig
from .styled import StyledNode
from .units import px, to_columns

ALIGNMENTS = {
    "left": "left",
    "start": "left",
    "justify": "left",
    "center": "center",
    "-webkit-center": "center",
    "right": "right",
    "end": "right",
}


@dataclass
class FormattingContext:
    """Layout parameters in effect for a subtree, in character columns."""
    width: int
    indent: int = 0
    align: str = "left"
    text_indent: int = 0
    first_line: bool = True


def normalize_align(value: str, inherited: str) -> str:
    """Map a CSS text-align value onto left/center/right, inheriting when unset."""
    if not value:
        return inherited
    return ALIGNMENTS.get(value.strip().lower(), inherited)


class ContextStack:
    """
    LIFO stack of formatting contexts.

    The base frame spans the whole viewport and is never popped.
    """

    def __init__(self, config: RenderConfig):
        self.config = config
        base_width = max(
            config.display_width,
            to_columns(config.viewport_width_px, config.cell_width_px),
        )
        self._frames: List[FormattingContext] = [FormattingContext(width=base_width)]

    @property
    def current(self) -> FormattingContext:
        return self._frames[-1]

    @property
    def depth(self) -> int:
        return len(self._frames)

    def _col(self, value: str) -> int:
        return to_columns(px(value), self.config.cell_width_px)

    def push(self, node: StyledNode) -> FormattingContext:
        """Push the frame for a block-level element, derived from its parent frame."""
        parent = self.current
        style = node.style
        if style is None:
            frame = FormattingContext(parent.width, parent.indent, parent.align, parent.text_indent)
            self._frames.append(frame)
            return frame

        pl = self._col(style.padding_left)
        pr = self._col(style.padding_right)
        ml = self._col(style.margin_left)
        box_width = to_columns(node.box.width, self.config.cell_width_px) if node.box else 0

        if box_width > 0:
            width = max(1, box_width - pl - pr)
        else:
            width = max(1, parent.width - ml - pl)

        text_indent = self._col(style.text_indent) if style.text_indent else parent.text_indent

        frame = FormattingContext(
            width=width,
            indent=parent.indent + ml + pl,
            align=normalize_align(style.text_align, parent.align),
            text_indent=text_indent,
        )
        self._frames.append(frame)
        return frame

    def pop(self) -> FormattingContext:
        """Pop the innermost frame and return it. The base frame stays."""
        if len(self._frames) > 1:
            return self._frames.pop()
        return self._frames[0]

    @contextmanager
    def entered(self, node: StyledNode) -> Iterator[FormattingContext]:
        """Context manager pairing push() and pop() around a subtree."""
        frame = self.push(node)
        try:
            yield frame
        finally:
            self.pop()
