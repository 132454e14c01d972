"""
Tree walker.

Depth-first traversal of a styled node tree producing the ordered
Block sequence. Inline content accumulates in a run buffer that is
flushed into a TextBlock at every block boundary; block-level
elements push a formatting context for their subtree.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .blocks import (
    BlankBlock, Block, CodeBlock, HeadingBlock, ImageBlock, Link, SeparatorBlock,
    TextBlock, VideoBlock, clip_links, shift_links,
)
from .config import RenderConfig
from .context import ContextStack
from .normalize import collapse_blanks, normalize_indents
from .style import SKIP_TAGS, NodeKind, classify, heading_level, node_kind
from .styled import ComputedStyle, StyledNode
from .table import collect_rows, column_widths, table_blocks
from .units import px, to_columns, to_rows

logger = logging.getLogger(__name__)

_CONTROL_WS = re.compile(r"[\r\n\t]+")
_SPACES = re.compile(r" {2,}")
_WORD_START = re.compile(r"\b\w")

LIST_MARKERS = {
    "disc": "● ",
    "circle": "○ ",
    "square": "■ ",
    "none": "",
}
DEFAULT_MARKER = "- "

MAX_RULE_WIDTH = 80
MIN_DESCRIPTION_INDENT = 4
BLANK_MARGIN_PX = 20
MAX_MARGIN_BLANKS = 3


@dataclass
class InlineRun:
    """The current run of inline text and the link spans inside it."""
    text: str = ""
    links: List[Link] = field(default_factory=list)

    def append(self, text: str):
        self.text += text

    def take(self) -> Tuple[str, List[Link]]:
        """Return the right-trimmed text with its links, and reset the run."""
        text = self.text.rstrip()
        links = clip_links(self.links, len(text))
        self.text = ""
        self.links = []
        return text, links

    def add_link(self, start: int, href: str):
        """Link the text from `start` to the end of the run, leading spaces excluded."""
        end = len(self.text)
        while start < end and self.text[start] == " ":
            start += 1
        if end > start:
            self.links.append(Link(start, end, href))


@dataclass
class OpenAnchor:
    """An anchor whose children are still being walked."""
    href: str
    start: int = 0


@dataclass
class ListContext:
    ordered: bool
    counter: int = 0


def apply_text_transform(text: str, transform: str) -> str:
    if transform == "uppercase":
        return text.upper()
    if transform == "lowercase":
        return text.lower()
    if transform == "capitalize":
        return _WORD_START.sub(lambda m: m.group(0).upper(), text)
    return text


def collapse_with_links(text: str, links: List[Link]) -> Tuple[str, List[Link]]:
    """Collapse whitespace runs to single spaces, moving link offsets along."""
    chars: List[str] = []
    offsets: List[int] = []
    for ch in text:
        offsets.append(len(chars))
        if not ch.isspace():
            chars.append(ch)
        elif not chars or chars[-1] != " ":
            chars.append(" ")
    offsets.append(len(chars))

    collapsed = "".join(chars)
    moved = []
    for link in links:
        start, end = offsets[link.start], offsets[link.end]
        while start < end and collapsed[start] == " ":
            start += 1
        if end > start:
            moved.append(Link(start, end, link.href))
    return collapsed, moved


def strip_with_links(text: str, links: List[Link]) -> Tuple[str, List[Link]]:
    """Strip surrounding whitespace, keeping link offsets valid."""
    lead = len(text) - len(text.lstrip())
    stripped = text.strip()
    return stripped, clip_links(shift_links(links, -lead), len(stripped))


class TreeWalker:
    """
    Walks a styled tree once and produces its Block sequence.

    A walker is single-use: create a new one for every render.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()
        self.contexts = ContextStack(self.config)
        self.run = InlineRun()
        self.lists: List[ListContext] = []
        self.anchors: List[OpenAnchor] = []
        self.quote_depth = 0
        self.pre_depth = 0
        self._blocks: List[Block] = []

    def walk(self, root: StyledNode) -> List[Block]:
        """Walk `root` and return the collapsed, indent-normalised blocks."""
        self._walk(root)
        self._flush()
        blocks = collapse_blanks(self._blocks)
        return normalize_indents(
            blocks, self.config.display_width, self.config.max_indent_ratio
        )

    def _col(self, pixels: float) -> int:
        return to_columns(pixels, self.config.cell_width_px)

    def _row(self, pixels: float) -> int:
        return to_rows(pixels, self.config.line_height_px)

    def _walk(self, node: StyledNode):
        if node.is_text:
            self._text(node)
            return

        cls = classify(node, self.config)
        if not cls.visible:
            return
        if cls.transparent:
            self._children(node)
            return

        kind = node_kind(node)
        if not cls.is_block:
            self._dispatch(node, kind, cls.is_preformatted)
            return

        style = node.style
        self._flush()
        self._margin_blanks(style, "top")
        with self.contexts.entered(node):
            self._dispatch(node, kind, cls.is_preformatted)
            self._flush()
        self._margin_blanks(style, "bottom")

    def _children(self, node: StyledNode):
        for child in node.children:
            self._walk(child)

    def _dispatch(self, node: StyledNode, kind: NodeKind, pre: bool):
        if kind is NodeKind.BREAK:
            self._flush()
        elif kind is NodeKind.RULE:
            ctx = self.contexts.current
            self._blocks.append(SeparatorBlock(
                indent=ctx.indent, text="─" * min(ctx.width, MAX_RULE_WIDTH)))
        elif kind is NodeKind.VIDEO:
            self._video(node)
        elif kind is NodeKind.IMAGE:
            self._image(node)
        elif kind is NodeKind.TABLE:
            self._table(node)
        elif kind is NodeKind.HEADING:
            self._heading(node)
        elif kind is NodeKind.LIST:
            self.lists.append(ListContext(ordered=node.tag == "OL"))
            self._children(node)
            self.lists.pop()
        elif kind is NodeKind.LIST_ITEM:
            self._list_item(node)
        elif kind is NodeKind.DEF_LIST:
            self._children(node)
        elif kind is NodeKind.DEF_TERM:
            self._definition(node, extra_indent=0)
        elif kind is NodeKind.DEF_DESC:
            style = node.style
            extra = max(MIN_DESCRIPTION_INDENT, self._col(px(style.margin_left) + px(style.padding_left)))
            self._definition(node, extra_indent=extra)
        elif kind is NodeKind.PRE:
            self._pre(node)
        elif kind is NodeKind.CODE and not node.has_ancestor("PRE"):
            self.run.append(node.text_content())
        elif kind is NodeKind.BLOCKQUOTE:
            self.quote_depth += 1
            self._children(node)
            self._flush()
            self.quote_depth -= 1
        elif kind is NodeKind.DETAILS:
            self._details(node)
        elif kind is NodeKind.SUMMARY:
            pass  # rendered by its <details>
        elif kind in (NodeKind.INPUT, NodeKind.BUTTON, NodeKind.SELECT, NodeKind.TEXTAREA):
            self._form_control(node, kind)
        elif kind is NodeKind.LINK:
            self._link(node)
        else:
            if pre:
                self.pre_depth += 1
            self._children(node)
            if pre:
                self.pre_depth -= 1

    def _text(self, node: StyledNode):
        text = node.text
        if self.pre_depth > 0:
            self.run.append(text)
            return

        text = _SPACES.sub(" ", _CONTROL_WS.sub(" ", text))

        style = node.parent.style if node.parent is not None else None
        if style is not None:
            text = apply_text_transform(text, style.text_transform)
            letter_spacing = px(style.letter_spacing)
            if letter_spacing >= self.config.cell_width_px * 0.8:
                text = " ".join(text)
            word_spacing = px(style.word_spacing)
            if word_spacing >= self.config.cell_width_px * 2:
                text = text.replace(" ", " " * int(round(word_spacing / self.config.cell_width_px)))

        if text.startswith(" ") and (not self.run.text or self.run.text.endswith(" ")):
            text = text.lstrip(" ")
        if text:
            self.run.append(text)

    def _inline_text(self, node: StyledNode) -> Tuple[str, List[Link]]:
        """
        Collect the full inline text of a subtree in one string, with
        anchors recorded as links. Used for headings, terms and cells.
        """
        parts: List[str] = []
        links: List[Link] = []
        length = [0]

        def add(text: str):
            parts.append(text)
            length[0] += len(text)

        def visit(n: StyledNode):
            if n.is_text:
                text = n.text
                if n.parent is not None and n.parent.style is not None:
                    text = apply_text_transform(text, n.parent.style.text_transform)
                add(text)
                return
            if n.tag in SKIP_TAGS or n.style is None:
                return
            if n.style.display == "none" or n.style.visibility == "hidden":
                return
            if n.tag == "BR":
                add(" ")
                return
            if n.tag == "IMG":
                if n.attrs.get("alt"):
                    add(f"[{n.attrs['alt']}]")
                return
            start = length[0]
            for child in n.children:
                visit(child)
            if n.tag == "A" and n.attrs.get("href") and length[0] > start:
                links.append(Link(start, length[0], n.attrs["href"]))

        for child in node.children:
            visit(child)
        return strip_with_links(*collapse_with_links("".join(parts), links))

    def _flush(self):
        # anchors still open carry on into the next run
        for anchor in self.anchors:
            self.run.add_link(anchor.start, anchor.href)
            anchor.start = 0
        text, links = self.run.take()
        if not text:
            return

        if self.quote_depth > 0:
            prefix = "> " * self.quote_depth
            text = prefix + text
            links = shift_links(links, len(prefix))

        ctx = self.contexts.current
        self._blocks.append(TextBlock(
            indent=ctx.indent,
            text=text,
            links=links,
            wrap_width=ctx.width,
            align=ctx.align,
            text_indent=ctx.text_indent if ctx.first_line else 0,
        ))
        ctx.first_line = False

    def _blank(self):
        if not self._blocks or not isinstance(self._blocks[-1], BlankBlock):
            self._blocks.append(BlankBlock())

    def _margin_blanks(self, style: ComputedStyle, side: str):
        """Blank rows standing in for vertical margin + padding."""
        space = px(getattr(style, f"margin_{side}")) + px(getattr(style, f"padding_{side}"))
        count = min(MAX_MARGIN_BLANKS, int(space // BLANK_MARGIN_PX))
        if count == 0 and space > 8:
            count = 1
        for _ in range(count):
            self._blank()

    def _heading(self, node: StyledNode):
        self._flush()
        level = heading_level(node)
        text, links = self._inline_text(node)
        links = self._enclosing_links(text, links)
        prefix = "#" * level + " "
        ctx = self.contexts.current
        self._blocks.append(HeadingBlock(
            indent=ctx.indent,
            level=level,
            text=prefix + text,
            links=shift_links(links, len(prefix)),
            wrap_width=ctx.width,
            align=ctx.align,
        ))

    def _list_item(self, node: StyledNode):
        current = self.lists[-1] if self.lists else None
        if current is not None and current.ordered:
            current.counter += 1
            marker = f"{current.counter}. "
        else:
            list_style = node.style.list_style_type if node.style else ""
            marker = LIST_MARKERS.get(list_style, DEFAULT_MARKER)
        self._flush()
        self.run.append(marker)
        self._children(node)

    def _definition(self, node: StyledNode, extra_indent: int):
        self._flush()
        text, links = self._inline_text(node)
        if not text:
            return
        links = self._enclosing_links(text, links)
        ctx = self.contexts.current
        self._blocks.append(TextBlock(
            indent=ctx.indent + extra_indent,
            text=text,
            links=links,
            wrap_width=max(1, ctx.width - extra_indent),
            align=ctx.align,
        ))

    def _pre(self, node: StyledNode):
        self._flush()
        raw = node.text_content()
        if not raw.strip():
            return
        lines = raw.split("\n")
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        self._blocks.append(CodeBlock(indent=self.contexts.current.indent, lines=lines))

    def _details(self, node: StyledNode):
        summary = next((c for c in node.children if c.tag == "SUMMARY"), None)
        is_open = "open" in node.attrs
        if summary is not None:
            ctx = self.contexts.current
            marker = "▼ " if is_open else "▶ "
            self._flush()
            self._blocks.append(TextBlock(
                indent=ctx.indent,
                text=marker + " ".join(summary.text_content().split()),
                wrap_width=ctx.width,
                align=ctx.align,
            ))
        if is_open:
            for child in node.children:
                if child is not summary:
                    self._walk(child)

    def _form_control(self, node: StyledNode, kind: NodeKind):
        attrs = node.attrs
        if kind is NodeKind.INPUT:
            input_type = attrs.get("type", "text")
            if input_type != "hidden":
                self.run.append(f"[{attrs.get('value') or attrs.get('placeholder') or input_type}]")
        elif kind is NodeKind.BUTTON:
            self.run.append(f"[{node.text_content().strip()}]")
        elif kind is NodeKind.SELECT:
            options = [n for n in node.depth_first() if n.tag == "OPTION"]
            chosen = next((o for o in options if "selected" in o.attrs), options[0] if options else None)
            label = chosen.text_content().strip() if chosen is not None else ""
            self.run.append(f"[{label or 'select'}]")
        else:
            value = attrs.get("value") or attrs.get("placeholder") or node.text_content()
            if value.strip():
                self._flush()
                self._blocks.append(CodeBlock(
                    indent=self.contexts.current.indent, lines=value.split("\n")))

    def _link(self, node: StyledNode):
        anchor = OpenAnchor(node.attrs["href"], len(self.run.text))
        self.anchors.append(anchor)
        self._children(node)
        self.anchors.pop()
        self.run.add_link(anchor.start, anchor.href)

    def _enclosing_links(self, text: str, links: List[Link]) -> List[Link]:
        """Text extracted whole inside an open anchor links to that anchor."""
        if self.anchors and text and not links:
            return [Link(0, len(text), self.anchors[-1].href)]
        return links

    def _image(self, node: StyledNode):
        attrs = node.attrs
        src = attrs.get("src") or attrs.get("data-src") or ""
        box = node.box
        width = box.width if box else 0.0
        height = box.height if box else 0.0
        min_size = self.config.image_min_size_px
        if 0 < width < min_size and 0 < height < min_size:
            logger.debug("Skipping %gx%g tracking image %s", width, height, src[:60])
            return
        if not src:
            return

        # images always start their own block, even inline ones
        self._flush()
        self._blocks.append(ImageBlock(
            indent=self.contexts.current.indent,
            src=src,
            alt=attrs.get("alt", ""),
            width_px=width,
            height_px=height,
            natural_width=int(px(attrs.get("naturalWidth"))),
            natural_height=int(px(attrs.get("naturalHeight"))),
            art_width=max(1, self._col(width)),
            art_height=max(1, self._row(height)),
            element=node,
        ))

    def _video(self, node: StyledNode):
        box = node.box
        if box is None or box.width <= 0 or box.height <= 0:
            return
        self._flush()
        self._blocks.append(VideoBlock(
            indent=self.contexts.current.indent,
            element=node,
            width_px=box.width,
            height_px=box.height,
        ))

    def _table(self, node: StyledNode):
        rows = collect_rows(node, self._inline_text, self.config.cell_width_px)
        if not rows:
            logger.debug("Table without rows, walking <%s> children as content", node.tag.lower())
            self._children(node)
            return

        self._flush()
        ctx = self.contexts.current
        available = min(ctx.width, self.config.display_width)
        widths = column_widths(rows, available)
        self._blocks.extend(table_blocks(rows, widths, ctx.indent))
