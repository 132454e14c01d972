import random

import pytest

from ascii_view.blocks import (
    BlankBlock, CodeBlock, HeadingBlock, ImageBlock, LineKind, Link, SeparatorBlock,
    TableRowBlock, TextBlock, VideoBlock,
)
from ascii_view.compositor import Compositor, align_offset, compose, wrap_spans
from ascii_view.config import RenderConfig
from ascii_view.walker import TreeWalker

from helpers import body, el, link


def test_wrap_spans_breaks_at_spaces():
    assert wrap_spans("aaaa bbbb", 4) == [(0, 4), (5, 9)]


def test_wrap_spans_force_splits_long_tokens():
    assert wrap_spans("x" * 25, 10) == [(0, 10), (10, 20), (20, 25)]


def test_align_offset():
    assert align_offset(2, "left", 10) == 0
    assert align_offset(2, "center", 10) == 4
    assert align_offset(2, "right", 10) == 8
    assert align_offset(12, "right", 10) == 0


def test_paragraph_wraps_at_measured_width():
    text = " ".join(["abcdefghi"] * 20)
    tree = body(el("P", text, width=336))
    lines = compose(TreeWalker().walk(tree))
    assert len(lines) == 5
    assert all(line.text == " ".join(["abcdefghi"] * 4) for line in lines)


def test_link_split_across_hard_break():
    tree = body(el("P", "abcdefgh", link("https://a.test", "click"), width=84))
    lines = compose(TreeWalker().walk(tree))
    assert [line.text for line in lines] == ["abcdefghcl", "ick"]
    assert lines[0].links == (Link(8, 10, "https://a.test"),)
    assert lines[1].links == (Link(0, 3, "https://a.test"),)


def test_alignment_shifts_text_and_links():
    block = TextBlock(text="hi", links=[Link(0, 2, "/h")], wrap_width=10, align="center", indent=3)
    (line,) = Compositor().compose_block(block)
    assert line.text == "       hi"
    assert line.links == (Link(7, 9, "/h"),)

    block.align = "right"
    (line,) = Compositor().compose_block(block)
    assert line.text == " " * 11 + "hi"


def test_first_line_indent():
    block = TextBlock(text="alpha beta gamma", wrap_width=10, text_indent=2)
    lines = Compositor().compose_block(block)
    assert [line.text for line in lines] == ["  alpha", "beta gamma"]


def test_list_marker_hangs():
    block = TextBlock(text="● one two three four", wrap_width=10)
    lines = Compositor().compose_block(block)
    assert [line.text for line in lines] == ["● one two", "  three", "  four"]


def test_wrapped_link_offsets_follow_indent():
    block = TextBlock(text="1. read the manual", links=[Link(8, 18, "/m")], wrap_width=10, indent=4)
    lines = Compositor().compose_block(block)
    assert [line.text for line in lines] == ["    1. read", "       the", "       manual"]
    assert [line.links for line in lines] == [(), (Link(7, 10, "/m"),), (Link(7, 13, "/m"),)]


def test_heading_lines_carry_level():
    (line,) = Compositor().compose_block(HeadingBlock(level=2, text="## Title"))
    assert line.kind is LineKind.HEADING
    assert line.level == 2


def test_code_block_fenced():
    lines = Compositor().compose_block(CodeBlock(indent=2, lines=["x = 1"]))
    assert [line.text for line in lines] == ["  ```", "  x = 1", "  ```"]
    assert [line.kind for line in lines] == [LineKind.SEPARATOR, LineKind.CODE, LineKind.SEPARATOR]


def test_image_art_and_placeholder():
    art = ImageBlock(src="a.png", alt="logo", ascii_lines=["@@", "##"])
    lines = Compositor().compose_block(art)
    assert [line.text for line in lines] == ["@@", "##", "  [logo]"]
    assert lines[0].kind is LineKind.ASCII_ART

    (line,) = Compositor().compose_block(ImageBlock(src="a.png", alt="logo"))
    assert line.text == "[IMAGE: logo]"
    (line,) = Compositor().compose_block(ImageBlock(src="a.png"))
    assert line.text == "[IMAGE]"


def test_video_placeholder_targets_element():
    target = el("VIDEO", width=320, height=180)
    (line,) = Compositor().compose_block(VideoBlock(element=target))
    assert line.kind is LineKind.VIDEO_PLACEHOLDER
    assert line.target is target


def test_fixed_width_content_indent_shrinks():
    (line,) = Compositor(80).compose_block(SeparatorBlock(indent=10, text="─" * 78))
    assert line.text == "  " + "─" * 78

    row = TableRowBlock(indent=5, text="| a |", links=[Link(2, 3, "/a")])
    (line,) = Compositor(80).compose_block(row)
    assert line.text == "     | a |"
    assert line.links == (Link(7, 8, "/a"),)


def test_compose_collapses_blanks():
    blocks = [BlankBlock(), TextBlock(text="a"), BlankBlock(), BlankBlock(), TextBlock(text="b"), BlankBlock()]
    lines = compose(blocks)
    assert [line.kind for line in lines] == [LineKind.TEXT, LineKind.BLANK, LineKind.TEXT]


WORDS = ["a", "to", "the", "quick", "brown", "supercalifragilistic", "x" * 45, "layout"]


def _random_tree(rng):
    paragraphs = []
    for _ in range(rng.randint(1, 6)):
        words = [rng.choice(WORDS) for _ in range(rng.randint(1, 40))]
        cut = rng.randint(0, len(words))
        content = [" ".join(words[:cut]) + " ", link("/x", " ".join(words[cut:]) or "x")]
        paragraphs.append(el(
            rng.choice(["P", "LI", "BLOCKQUOTE"]),
            *content,
            display="block",
            margin_left=f"{rng.randint(0, 120)}px",
            padding_left=f"{rng.randint(0, 60)}px",
            text_align=rng.choice(["", "left", "center", "right"]),
            text_indent=rng.choice(["", "0px", "16.8px", "84px"]),
        ))
    return body(el("DIV", *paragraphs, padding_left=f"{rng.randint(0, 200)}px"))


@pytest.mark.parametrize("seed", range(25))
@pytest.mark.parametrize("width", [20, 33, 80, 132])
def test_lines_fit_width_and_links_stay_in_bounds(seed, width):
    rng = random.Random(seed)
    config = RenderConfig(display_width=width)
    blocks = TreeWalker(config).walk(_random_tree(rng))
    assert all(b.indent <= width // 4 for b in blocks)

    lines = compose(blocks, width)
    assert lines
    for line in lines:
        assert len(line.text) <= width
        for span in line.links:
            assert 0 <= span.start < span.end <= len(line.text)
