"""Small builders for styled trees used across the tests."""

from ascii_view.styled import Box, ComputedStyle, StyledNode


def _kids(children):
    return [StyledNode("#text", text=c) if isinstance(c, str) else c for c in children]


def el(tag, *children, display="block", width=None, height=None, attrs=None, **style):
    """A block element; strings become text nodes."""
    box = Box(width, height if height is not None else 20) if width is not None else None
    return StyledNode(
        tag,
        style=ComputedStyle(display=display, **style),
        box=box,
        attrs=attrs or {},
        children=_kids(children),
    )


def inline(tag, *children, **kwargs):
    return el(tag, *children, display="inline", **kwargs)


def link(href, *children, **kwargs):
    return inline("A", *children, attrs={"href": href}, **kwargs)


def body(*children, **kwargs):
    return el("BODY", *children, **kwargs)
