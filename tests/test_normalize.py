from ascii_view.blocks import BLANK_LINE, BlankBlock, Line, LineKind, TextBlock
from ascii_view.normalize import collapse_blanks, normalize_indents


def test_collapse_blanks_blocks():
    a, b = TextBlock(text="a"), TextBlock(text="b")
    items = [BlankBlock(), a, BlankBlock(), BlankBlock(), b, BlankBlock()]
    collapsed = collapse_blanks(items)
    assert collapsed == [a, BlankBlock(), b]
    assert collapse_blanks(collapsed) == collapsed


def test_collapse_blanks_lines():
    text = Line(LineKind.TEXT, "x")
    assert collapse_blanks([BLANK_LINE, text, BLANK_LINE, BLANK_LINE]) == [text]
    assert collapse_blanks([BLANK_LINE, BLANK_LINE]) == []


def test_common_indent_removed():
    blocks = [TextBlock(indent=10, text="a"), BlankBlock(), TextBlock(indent=14, text="b")]
    normalize_indents(blocks)
    assert [b.indent for b in blocks] == [0, 0, 4]


def test_deep_indents_scaled_to_cap():
    blocks = [
        TextBlock(indent=0, text="a", wrap_width=120),
        TextBlock(indent=10, text="b", wrap_width=120),
        TextBlock(indent=40, text="c", wrap_width=120),
    ]
    normalize_indents(blocks, display_width=80, max_indent_ratio=0.25)
    assert [b.indent for b in blocks] == [0, 5, 20]
    assert [b.wrap_width for b in blocks] == [80, 75, 60]


def test_wrap_width_clamped_to_display():
    blocks = [TextBlock(indent=0, text="a", wrap_width=5), TextBlock(indent=2, text="b", wrap_width=5)]
    normalize_indents(blocks, display_width=4, max_indent_ratio=0.5)
    assert [b.wrap_width for b in blocks] == [4, 2]


def test_all_blank_input_untouched():
    blocks = [BlankBlock()]
    assert normalize_indents(blocks) == blocks
