from ascii_view.config import RenderConfig
from ascii_view.context import ContextStack, normalize_align
from ascii_view.styled import StyledNode

from helpers import el


def test_base_frame_spans_viewport():
    stack = ContextStack(RenderConfig())
    # 1024px viewport / 8.4px cells
    assert stack.current.width == 122
    assert stack.current.indent == 0

    narrow = ContextStack(RenderConfig(viewport_width_px=400))
    assert narrow.current.width == 80


def test_push_uses_box_then_parent_width():
    stack = ContextStack(RenderConfig())
    outer = el("DIV", width=420, padding_left="16.8px", padding_right="16.8px")
    inner = el("DIV", margin_left="42px")

    frame = stack.push(outer)
    assert frame.width == 46
    assert frame.indent == 2

    frame = stack.push(inner)
    assert frame.width == 41
    assert frame.indent == 7
    assert stack.depth == 3


def test_border_widths_do_not_change_the_frame():
    stack = ContextStack(RenderConfig())
    bordered = StyledNode.from_dict({
        "tag": "DIV",
        "style": {"display": "block", "borderLeftWidth": "8.4px", "borderRightWidth": "8.4px"},
        "box": {"width": 420, "height": 20},
    })
    frame = stack.push(bordered)
    assert (frame.width, frame.indent) == (50, 0)

    frame = stack.push(el("DIV", padding_left="8.4px"))
    assert (frame.width, frame.indent) == (49, 1)


def test_alignment_and_text_indent_inherit():
    stack = ContextStack(RenderConfig())
    stack.push(el("DIV", text_align="center", text_indent="25.2px"))
    child = stack.push(el("P"))
    assert child.align == "center"
    assert child.text_indent == 3

    right = stack.push(el("P", text_align="end"))
    assert right.align == "right"


def test_pop_never_removes_base():
    stack = ContextStack(RenderConfig())
    base = stack.current
    assert stack.pop() is base
    assert stack.depth == 1


def test_entered_restores_depth():
    stack = ContextStack(RenderConfig())
    with stack.entered(el("DIV", margin_left="84px")) as frame:
        assert frame.indent == 10
        assert stack.depth == 2
    assert stack.depth == 1


def test_normalize_align():
    assert normalize_align("", "center") == "center"
    assert normalize_align("justify", "right") == "left"
    assert normalize_align("-webkit-center", "left") == "center"
    assert normalize_align("bogus", "right") == "right"
