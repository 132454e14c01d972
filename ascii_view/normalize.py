"""
Block sequence post-processing.

Collapses blank runs and corrects indentation once the whole
document has been walked, so incidental CSS centering and deep
nesting do not eat the display width.
"""

from typing import List, Sequence, TypeVar

from .blocks import BlankBlock, Block, Line

T = TypeVar("T")


def _is_blank(item) -> bool:
    if isinstance(item, Line):
        return item.is_blank
    return isinstance(item, BlankBlock)


def collapse_blanks(items: Sequence[T]) -> List[T]:
    """Drop adjacent blanks and trim blanks from both ends. Idempotent."""
    out: List[T] = []
    for item in items:
        if _is_blank(item) and (not out or _is_blank(out[-1])):
            continue
        out.append(item)
    while out and _is_blank(out[-1]):
        out.pop()
    return out


def normalize_indents(blocks: List[Block], display_width: int = 80,
                      max_indent_ratio: float = 0.25) -> List[Block]:
    """
    Three-pass indent correction, in place.

    1. Subtract the minimum indent of non-blank blocks (removes
       `margin: 0 auto` style centering).
    2. If the deepest indent exceeds max_indent_ratio of the display
       width, scale every indent down proportionally.
    3. Clamp wrap widths so indent + text fits the display width.
       Must run after scaling.
    """
    content = [b for b in blocks if not isinstance(b, BlankBlock)]
    if not content:
        return blocks

    min_indent = min(b.indent for b in content)
    if min_indent > 0:
        for b in content:
            b.indent = max(0, b.indent - min_indent)

    cap = int(display_width * max_indent_ratio)
    max_indent = max(b.indent for b in content)
    if max_indent > cap:
        scale = cap / max_indent
        for b in content:
            if b.indent > 0:
                b.indent = int(round(b.indent * scale))

    for b in content:
        if hasattr(b, "wrap_width"):
            b.wrap_width = min(b.wrap_width, max(1, display_width - b.indent))

    return blocks
