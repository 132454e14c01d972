"""
Style classification.

Decides, from an element's computed style, whether it contributes
anything to the text grid, whether it is block-level or inline, and
which structural category the walker dispatches it to.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import RenderConfig
from .styled import ComputedStyle, StyledNode
from .units import contrast_ratio, parse_rgb, px

logger = logging.getLogger(__name__)

SKIP_TAGS = frozenset({
    "SCRIPT", "STYLE", "NOSCRIPT", "TEMPLATE", "HEAD", "META", "LINK",
    "SVG", "IFRAME", "OBJECT", "EMBED",
})

INLINE_DISPLAYS = frozenset({
    "inline", "inline-block", "inline-flex", "inline-grid", "inline-table",
    "contents", "ruby", "ruby-text", "",
})

PRE_WHITESPACE = frozenset({"pre", "pre-wrap", "pre-line"})


class NodeKind(Enum):
    """Structural categories the tree walker dispatches on."""
    BREAK = "break"
    RULE = "rule"
    VIDEO = "video"
    IMAGE = "image"
    TABLE = "table"
    HEADING = "heading"
    LIST = "list"
    LIST_ITEM = "list_item"
    DEF_LIST = "def_list"
    DEF_TERM = "def_term"
    DEF_DESC = "def_desc"
    PRE = "pre"
    CODE = "code"
    BLOCKQUOTE = "blockquote"
    DETAILS = "details"
    SUMMARY = "summary"
    INPUT = "input"
    BUTTON = "button"
    SELECT = "select"
    TEXTAREA = "textarea"
    LINK = "link"
    GENERIC = "generic"


@dataclass(frozen=True)
class Classification:
    """How an element participates in layout."""
    visible: bool
    transparent: bool = False  # display: contents - no box, children still walked
    is_block: bool = False
    is_preformatted: bool = False


HIDDEN = Classification(visible=False)


def is_low_contrast(style: ComputedStyle, threshold: float) -> bool:
    """True when text colour is (nearly) indistinguishable from its background."""
    fg = parse_rgb(style.color)
    bg = parse_rgb(style.background_color)
    if fg is None or bg is None:
        return False
    return contrast_ratio(fg, bg) < threshold


def classify(node: StyledNode, config: Optional[RenderConfig] = None) -> Classification:
    """Classify an element node. Text nodes are always visible."""
    if node.is_text:
        return Classification(visible=True)
    if node.tag in SKIP_TAGS or "hidden" in node.attrs:
        return HIDDEN

    style = node.style
    if style is None:
        logger.debug("No computed style for <%s>, skipping subtree", node.tag.lower())
        return HIDDEN

    threshold = config.contrast_threshold if config else RenderConfig.contrast_threshold
    display = style.display.strip()

    if display == "none":
        return HIDDEN
    if style.visibility in ("hidden", "collapse"):
        return HIDDEN
    if style.opacity.strip() and px(style.opacity) == 0:
        return HIDDEN
    if node.box is not None and node.box.is_empty and style.overflow != "visible":
        return HIDDEN
    if is_low_contrast(style, threshold):
        return HIDDEN
    if display == "contents":
        return Classification(visible=True, transparent=True)

    return Classification(
        visible=True,
        is_block=display not in INLINE_DISPLAYS,
        is_preformatted=style.white_space in PRE_WHITESPACE,
    )


_TAG_KINDS = {
    "BR": NodeKind.BREAK,
    "HR": NodeKind.RULE,
    "VIDEO": NodeKind.VIDEO,
    "IMG": NodeKind.IMAGE,
    "TABLE": NodeKind.TABLE,
    "UL": NodeKind.LIST,
    "OL": NodeKind.LIST,
    "LI": NodeKind.LIST_ITEM,
    "DL": NodeKind.DEF_LIST,
    "DT": NodeKind.DEF_TERM,
    "DD": NodeKind.DEF_DESC,
    "PRE": NodeKind.PRE,
    "CODE": NodeKind.CODE,
    "BLOCKQUOTE": NodeKind.BLOCKQUOTE,
    "DETAILS": NodeKind.DETAILS,
    "SUMMARY": NodeKind.SUMMARY,
    "INPUT": NodeKind.INPUT,
    "BUTTON": NodeKind.BUTTON,
    "SELECT": NodeKind.SELECT,
    "TEXTAREA": NodeKind.TEXTAREA,
}


def node_kind(node: StyledNode) -> NodeKind:
    """Determine the dispatch category from tag, attributes and display."""
    tag = node.tag
    display = node.style.display if node.style else ""

    if tag in ("H1", "H2", "H3", "H4", "H5", "H6"):
        return NodeKind.HEADING
    if tag == "A":
        return NodeKind.LINK if node.attrs.get("href") else NodeKind.GENERIC
    if display in ("table", "inline-table") and tag not in _TAG_KINDS:
        return NodeKind.TABLE
    if display == "list-item" and tag not in _TAG_KINDS:
        return NodeKind.LIST_ITEM

    return _TAG_KINDS.get(tag, NodeKind.GENERIC)


def heading_level(node: StyledNode) -> int:
    return int(node.tag[1])
