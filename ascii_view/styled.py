"""
Styled node tree.

The read-only input of the layout compiler: a rendered document's
element tree with each element's computed style and measured box,
as captured from a browser (see browser.py) or loaded from JSON.
"""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, List, Optional

TEXT_TAG = "#text"

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class Box:
    """Measured rendered size in CSS pixels."""
    width: float = 0.0
    height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 and self.height <= 0


@dataclass
class ComputedStyle:
    """
    The subset of an element's computed style the layout compiler reads.

    Values are CSS computed-value strings. An empty text_align or
    text_indent means the element does not set it.
    """
    display: str = "inline"
    visibility: str = "visible"
    opacity: str = "1"
    overflow: str = "visible"
    white_space: str = "normal"
    text_align: str = ""
    text_transform: str = "none"
    text_indent: str = ""
    letter_spacing: str = "normal"
    word_spacing: str = "0px"
    list_style_type: str = "disc"
    color: str = ""
    background_color: str = ""
    margin_top: str = "0px"
    margin_right: str = "0px"
    margin_bottom: str = "0px"
    margin_left: str = "0px"
    padding_top: str = "0px"
    padding_right: str = "0px"
    padding_bottom: str = "0px"
    padding_left: str = "0px"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComputedStyle":
        """Build from a dict keyed by camelCase (CSSOM) or snake_case names."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _CAMEL.sub("_", key).lower().replace("-", "_")
            if name in known and value is not None:
                values[name] = str(value)
        return cls(**values)


@dataclass
class StyledNode:
    """
    An element or text node of the rendered document.

    `style` is None when the host could not compute it; such nodes are
    treated as invisible.
    """
    tag: str
    text: str = ""
    style: Optional[ComputedStyle] = None
    box: Optional[Box] = None
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["StyledNode"] = field(default_factory=list)
    parent: Optional["StyledNode"] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        self.tag = self.tag.upper() if self.tag != TEXT_TAG else self.tag
        for child in self.children:
            child.parent = self

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT_TAG

    def add_child(self, child: "StyledNode") -> "StyledNode":
        child.parent = self
        self.children.append(child)
        return child

    def depth_first(self) -> Iterator["StyledNode"]:
        """Traverse depth-first, yielding self then descendants."""
        yield self
        for child in self.children:
            yield from child.depth_first()

    def text_content(self) -> str:
        """Concatenated text of all descendant text nodes (DOM textContent)."""
        if self.is_text:
            return self.text
        return "".join(child.text_content() for child in self.children)

    def has_ancestor(self, tag: str) -> bool:
        node = self.parent
        while node is not None:
            if node.tag == tag:
                return True
            node = node.parent
        return False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StyledNode":
        """
        Build a tree from its JSON form.

        Elements: {"tag", "style", "box", "attrs", "children"}.
        Text nodes: {"text"} (optionally with "tag": "#text").
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a node object, got {type(data).__name__}")

        tag = data.get("tag") or TEXT_TAG
        if tag == TEXT_TAG:
            return cls(tag=TEXT_TAG, text=str(data.get("text", "")))

        style = data.get("style")
        box = data.get("box") or data.get("rect")
        return cls(
            tag=str(tag),
            style=ComputedStyle.from_dict(style) if isinstance(style, dict) else None,
            box=Box(float(box.get("width", 0)), float(box.get("height", 0))) if box else None,
            # boolean attributes (open, hidden, selected) are present or absent
            attrs={
                str(k): "" if v is True else str(v)
                for k, v in (data.get("attrs") or {}).items()
                if v is not None and v is not False
            },
            children=[cls.from_dict(child) for child in data.get("children", [])],
        )
