"""
Table layout.

Collects a table's rows and cells, sizes the columns to fit the
available width and renders bordered rows:

    +-------+-----+
    | Name  | Qty |
    +=======+=====+
    | apple | 3   |
    +-------+-----+
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

from .blocks import Block, Link, TableBorderBlock, TableRowBlock
from .styled import StyledNode

logger = logging.getLogger(__name__)

ROW_GROUPS = ("THEAD", "TBODY", "TFOOT")


@dataclass
class TableCell:
    text: str
    links: List[Link] = field(default_factory=list)
    is_header: bool = False
    measured: int = 0  # rendered width in columns


@dataclass
class TableRow:
    cells: List[TableCell]
    is_header: bool = False


def _display(node: StyledNode) -> str:
    return node.style.display if node.style else ""


def _is_row(node: StyledNode) -> bool:
    return node.tag == "TR" or _display(node) == "table-row"


def _is_cell(node: StyledNode) -> bool:
    return node.tag in ("TD", "TH") or _display(node) == "table-cell"


def _in_header_group(row: StyledNode) -> bool:
    parent = row.parent
    return parent is not None and (parent.tag == "THEAD" or _display(parent) == "table-header-group")


def find_rows(table: StyledNode) -> List[StyledNode]:
    """Row elements in document order (HTMLTableElement.rows for <table>)."""
    if table.tag == "TABLE":
        rows = []
        for child in table.children:
            if child.tag in ROW_GROUPS:
                rows.extend(c for c in child.children if _is_row(c))
            elif _is_row(child):
                rows.append(child)
        return rows
    return [n for n in table.depth_first() if n is not table and _is_row(n)]


def collect_rows(
    table: StyledNode,
    extract: Callable[[StyledNode], Tuple[str, List[Link]]],
    cell_width_px: float,
) -> List[TableRow]:
    """
    Read cell text and links for every row. Rows without cells are dropped.

    A row is a header row when it sits in a header group or all its
    cells are header cells.
    """
    rows = []
    for tr in find_rows(table):
        in_header = _in_header_group(tr)
        cells = []
        for td in tr.children:
            if not _is_cell(td):
                continue
            text, links = extract(td)
            measured = int(round(td.box.width / cell_width_px)) if td.box else 0
            cells.append(TableCell(
                text=text,
                links=links,
                is_header=td.tag == "TH" or in_header,
                measured=max(0, measured),
            ))
        if not cells:
            continue
        rows.append(TableRow(cells, is_header=in_header or all(c.is_header for c in cells)))
    return rows


def border_overhead(columns: int) -> int:
    """Characters taken by '|' separators and one space of padding each side."""
    return columns + 1 + columns * 2


def column_widths(rows: List[TableRow], available: int) -> List[int]:
    """
    Per-column content widths, scaled down to fit `available` columns
    (borders included).
    """
    count = max(len(row.cells) for row in rows)
    widths = [0] * count
    for row in rows:
        for i, cell in enumerate(row.cells):
            n = len(cell.text)
            widths[i] = max(widths[i], n, min(cell.measured, n + 4))

    room = max(count, available - border_overhead(count))
    total = sum(widths)
    if total > room:
        scale = room / total
        widths = [max(1, int(w * scale)) for w in widths]
    return widths


def _border(widths: List[int], char: str) -> str:
    return "+" + "+".join(char * (w + 2) for w in widths) + "+"


def render_row(row: TableRow, widths: List[int]) -> Tuple[str, List[Link]]:
    """Compose '| a | b |' with cell links moved to their row offsets."""
    line = "|"
    links = []
    for i, width in enumerate(widths):
        cell = row.cells[i] if i < len(row.cells) else TableCell("")
        shown = cell.text[:width]
        cell_start = len(line) + 1
        line += " " + shown.ljust(width) + " |"
        for link in cell.links:
            part = link.clipped(0, len(shown))
            if part is not None:
                links.append(part.shifted(cell_start))
    return line, links


def table_blocks(rows: List[TableRow], widths: List[int], indent: int) -> List[Block]:
    """Border, row and header-separator blocks for a laid-out table."""
    border = _border(widths, "-")
    header_border = _border(widths, "=")

    blocks: List[Block] = [TableBorderBlock(indent=indent, text=border)]
    for row in rows:
        text, links = render_row(row, widths)
        blocks.append(TableRowBlock(indent=indent, text=text, links=links))
        if row.is_header:
            blocks.append(TableBorderBlock(indent=indent, text=header_border))
    if not rows[-1].is_header:
        blocks.append(TableBorderBlock(indent=indent, text=border))
    return blocks
