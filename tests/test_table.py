from ascii_view.blocks import Link, TableBorderBlock, TableRowBlock, TextBlock
from ascii_view.compositor import compose
from ascii_view.config import RenderConfig
from ascii_view.table import (
    TableCell, TableRow, border_overhead, column_widths, find_rows, render_row, table_blocks,
)
from ascii_view.walker import TreeWalker

from helpers import body, el, link


def row(*cells, header=False):
    return TableRow([TableCell(c, is_header=header) for c in cells], is_header=header)


def table(*rows, **kwargs):
    return el("TABLE", *rows, display="table", **kwargs)


def tr(*cells):
    return el("TR", *cells, display="table-row")


def td(*children, tag="TD"):
    return el(tag, *children, display="table-cell")


def test_find_rows_through_sections():
    head = tr(td("h", tag="TH"))
    first = tr(td("1"))
    second = tr(td("2"))
    node = table(el("THEAD", head), el("TBODY", first), second)
    assert find_rows(node) == [head, first, second]


def test_find_rows_for_css_tables():
    inner = tr(td("x"))
    node = el("DIV", el("DIV", inner), display="table")
    assert find_rows(node) == [inner]


def test_column_widths_fit_without_scaling():
    widths = column_widths([row("Name", "Qty", header=True), row("apple", "3")], available=80)
    assert widths == [5, 3]


def test_measured_width_adds_bounded_slack():
    cells = [TableCell("ab", measured=30), TableCell("cd", measured=3)]
    assert column_widths([TableRow(cells)], available=80) == [6, 3]


def test_narrow_table_scales_to_available_width():
    rows = [row("a" * 30, "b" * 30)]
    widths = column_widths(rows, available=40)
    assert widths == [16, 16]
    (border, *_) = table_blocks(rows, widths, indent=0)
    assert len(border.text) == sum(widths) + border_overhead(2)
    assert len(border.text) <= 40


def test_narrow_context_table_stays_within_width():
    rows = [row("a" * 30, "b" * 30)]
    widths = column_widths(rows, available=24)
    assert widths == [8, 8]
    assert all(len(b.text) <= 24 for b in table_blocks(rows, widths, indent=0))


def test_wide_first_column_scaled_proportionally():
    rows = [row("c" * 60, "short"), row("x", "y"), row("z", "w")]
    widths = column_widths(rows, available=40)
    assert widths == [30, 2]
    blocks = table_blocks(rows, widths, indent=0)
    assert all(len(b.text) == sum(widths) + border_overhead(2) for b in blocks)
    assert all(len(b.text) <= 40 for b in blocks)


def test_render_row_pads_truncates_and_moves_links():
    cell = TableCell("see docs", links=[Link(4, 8, "/docs")])
    text, links = render_row(TableRow([cell, TableCell("x")]), [6, 3])
    assert text == "| see do | x   |"
    assert links == [Link(6, 8, "/docs")]
    assert text[6:8] == "do"


def test_table_blocks_borders():
    rows = [row("A", "B", header=True), row("1", "2")]
    blocks = table_blocks(rows, [1, 1], indent=2)
    assert [b.text for b in blocks] == [
        "+---+---+",
        "| A | B |",
        "+===+===+",
        "| 1 | 2 |",
        "+---+---+",
    ]
    assert all(b.indent == 2 for b in blocks)


def test_header_only_table_has_no_closing_border():
    blocks = table_blocks([row("A", header=True)], [1], indent=0)
    assert [type(b) for b in blocks] == [TableBorderBlock, TableRowBlock, TableBorderBlock]
    assert blocks[-1].text == "+===+"


def test_walked_table_with_link_cells():
    tree = body(table(
        el("THEAD", tr(td("Name", tag="TH"), td("Site", tag="TH"))),
        el("TBODY", tr(td("Ada"), td(link("https://ada.test", "home")))),
        width=336,
    ))
    blocks = TreeWalker(RenderConfig()).walk(tree)
    lines = compose(blocks)
    assert [line.text for line in lines] == [
        "+------+------+",
        "| Name | Site |",
        "+======+======+",
        "| Ada  | home |",
        "+------+------+",
    ]
    (span,) = lines[3].links
    assert lines[3].text[span.start:span.end] == "home"
    assert span.href == "https://ada.test"


def test_table_without_rows_walks_content():
    tree = body(table(el("CAPTION", "just a caption")))
    blocks = TreeWalker(RenderConfig()).walk(tree)
    assert [b.text for b in blocks if isinstance(b, TextBlock)] == ["just a caption"]
