"""
Terminal display module for rendered pages.

Handles terminal output of Lines (plain or ANSI-coloured), file
export to text and HTML, and a minimal scrolling pager.
"""

import html
import os
import re
import sys
from typing import List, Optional, Sequence, Tuple

from .blocks import Line, LineKind

# Catppuccin Mocha-inspired palette
COLORS = {
    "text": "#cdd6f4",
    "heading": "#f38ba8",
    "link": "#89b4fa",
    "gutter": "#585b70",
    "separator": "#45475a",
    "code": "#a6e3a1",
    "art": "#a6adc8",
    "video": "#f38ba8",
    "cursor": "#f5e0dc",
}

KIND_COLORS = {
    LineKind.TEXT: "text",
    LineKind.HEADING: "heading",
    LineKind.ASCII_ART: "art",
    LineKind.VIDEO_PLACEHOLDER: "video",
    LineKind.SEPARATOR: "separator",
    LineKind.CODE: "code",
}

ANSI_PATTERN = re.compile(r"\033\[[0-9;]*m")


def _hex_to_ansi(hex_color: str) -> str:
    """Convert #rrggbb to a 24-bit foreground escape code."""
    r, g, b = (int(hex_color[i:i + 2], 16) for i in (1, 3, 5))
    return f"\033[38;2;{r};{g};{b}m"


class Display:
    """
    Terminal output for rendered Lines.

    Colours each line by kind and underlines link spans when color
    is enabled.
    """

    RESET_STYLE = "\033[0m"
    UNDERLINE = "\033[4m"
    CLEAR_SCREEN = "\033[2J"
    CURSOR_HOME = "\033[H"

    def __init__(self, color: bool = False, gutter: bool = False, output_stream=None):
        """
        Initialize display.

        Args:
            color: Emit ANSI colours
            gutter: Prefix each line with its 1-based row number
            output_stream: Output stream (defaults to stdout)
        """
        self.color = color
        self.gutter = gutter
        self.output = output_stream or sys.stdout

    def format_line(self, line: Line, row: Optional[int] = None) -> str:
        text = line.text
        if self.color and not line.is_blank:
            base = _hex_to_ansi(COLORS[KIND_COLORS[line.kind]])
            link = _hex_to_ansi(COLORS["link"]) + self.UNDERLINE
            parts = []
            pos = 0
            for span in sorted(line.links, key=lambda s: s.start):
                if span.start < pos:
                    continue
                parts.append(base + text[pos:span.start])
                parts.append(link + text[span.start:span.end] + self.RESET_STYLE)
                pos = span.end
            parts.append(base + text[pos:] + self.RESET_STYLE)
            text = "".join(parts)

        if self.gutter and row is not None:
            number = f"{row:>4} "
            if self.color:
                number = _hex_to_ansi(COLORS["gutter"]) + number + self.RESET_STYLE
            text = number + text
        return text

    def format(self, lines: Sequence[Line]) -> str:
        return "\n".join(self.format_line(line, i + 1) for i, line in enumerate(lines))

    def render(self, lines: Sequence[Line]):
        """Write all lines to the output stream."""
        self.output.write(self.format(lines) + "\n")
        self.output.flush()

    @staticmethod
    def get_terminal_size() -> Tuple[int, int]:
        """Get terminal dimensions (columns, rows)."""
        try:
            size = os.get_terminal_size()
            return (size.columns, size.lines)
        except OSError:
            return (80, 24)  # Default fallback

    @staticmethod
    def supports_color() -> bool:
        """Check if stdout is a colour-capable terminal."""
        if not sys.stdout.isatty():
            return False
        term = os.environ.get("TERM", "")
        return term not in ("dumb", "")


class OutputFile:
    """
    Save rendered Lines to files.

    Supports plain text and HTML (with clickable links).
    """

    @staticmethod
    def save_text(lines: Sequence[Line], filepath: str):
        content = "\n".join(ANSI_PATTERN.sub("", line.text) for line in lines)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(content + "\n")

    @staticmethod
    def line_to_html(line: Line) -> str:
        """One line as escaped HTML with <a> elements over link spans."""
        text = line.text
        out = []
        pos = 0
        for span in sorted(line.links, key=lambda s: s.start):
            if span.start < pos:
                continue
            out.append(html.escape(text[pos:span.start]))
            out.append(
                f'<a href="{html.escape(span.href, quote=True)}">'
                f'{html.escape(text[span.start:span.end])}</a>'
            )
            pos = span.end
        out.append(html.escape(text[pos:]))
        return f'<span class="{line.kind.value}">{"".join(out)}</span>'

    @staticmethod
    def save_html(
        lines: Sequence[Line],
        filepath: str,
        title: str = "ascii-view",
        background: str = "#1e1e2e",
        font_size: int = 14
    ):
        """
        Save Lines as a monospace HTML page.

        Args:
            lines: Rendered lines
            filepath: Output file path
            title: HTML page title
            background: Background color
            font_size: Font size in pixels
        """
        body = "\n".join(OutputFile.line_to_html(line) for line in lines)
        styles = "\n".join(
            f"        .{kind.value} {{ color: {COLORS[name]}; }}"
            for kind, name in KIND_COLORS.items()
        )

        page = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{html.escape(title)}</title>
    <style>
        body {{
            background-color: {background};
            font-family: 'Courier New', Consolas, monospace;
            font-size: {font_size}px;
            white-space: pre;
            margin: 20px;
        }}
        a {{ color: {COLORS["link"]}; }}
{styles}
    </style>
</head>
<body>
{body}
</body>
</html>"""

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(page)


class Viewport:
    """
    Scroll window and cursor over a Line sequence.

    The cursor column always rests on a character of its line; an
    empty line counts as a single cell.
    """

    def __init__(self, lines: Sequence[Line], height: int = 24):
        self.lines = list(lines)
        self.height = max(1, height)
        self.top = 0
        self.row = 0
        self.col = 0

    def _last_col(self, row: int) -> int:
        if not self.lines:
            return 0
        return max(0, len(self.lines[row].text) - 1)

    def _clamp(self):
        self.row = min(max(0, self.row), max(0, len(self.lines) - 1))
        self.col = min(max(0, self.col), self._last_col(self.row))
        if self.row < self.top:
            self.top = self.row
        elif self.row >= self.top + self.height:
            self.top = self.row - self.height + 1

    def move(self, rows: int = 0, cols: int = 0):
        self.row += rows
        self.col += cols
        self._clamp()

    def line_start(self):
        self.col = 0

    def line_end(self):
        self.col = self._last_col(self.row)

    def go_to(self, row: int):
        self.row = row
        self._clamp()

    def visible(self) -> List[Tuple[int, Line]]:
        """(row index, line) pairs inside the window."""
        end = min(len(self.lines), self.top + self.height)
        return [(i, self.lines[i]) for i in range(self.top, end)]

    def link_at_cursor(self) -> Optional[str]:
        if not self.lines:
            return None
        for span in self.lines[self.row].links:
            if span.start <= self.col < span.end:
                return span.href
        return None


class Pager:
    """
    Interactive read-only pager.

    Uses blessed for keyboard input: j/k and arrows scroll, h/l move
    the cursor, 0/$ jump within the line, g/G to the top/bottom,
    space/b page, q quits.
    """

    def __init__(self, lines: Sequence[Line], color: bool = True):
        self.lines = list(lines)
        self.display = Display(color=color, gutter=True)

    def run(self) -> int:
        try:
            from blessed import Terminal
        except ImportError:
            raise ImportError("blessed is required for the pager. Install with: pip install blessed")

        term = Terminal()
        view = Viewport(self.lines, height=term.height - 1)

        with term.fullscreen(), term.cbreak():
            while True:
                self._draw(term, view)
                key = term.inkey()
                name = key.name or ""
                char = str(key)

                if char in ("q", "\x1b"):
                    break
                elif char == "j" or name == "KEY_DOWN":
                    view.move(rows=1)
                elif char == "k" or name == "KEY_UP":
                    view.move(rows=-1)
                elif char == "h" or name == "KEY_LEFT":
                    view.move(cols=-1)
                elif char == "l" or name == "KEY_RIGHT":
                    view.move(cols=1)
                elif char == "0":
                    view.line_start()
                elif char == "$":
                    view.line_end()
                elif char == "g":
                    view.go_to(0)
                elif char == "G":
                    view.go_to(len(self.lines) - 1)
                elif char == " " or name == "KEY_PGDOWN":
                    view.move(rows=view.height)
                elif char == "b" or name == "KEY_PGUP":
                    view.move(rows=-view.height)
        return 0

    def _draw(self, term, view: Viewport):
        out = [self.display.CURSOR_HOME + self.display.CLEAR_SCREEN]
        for i, line in view.visible():
            text = self.display.format_line(line, i + 1)
            out.append(term.move_xy(0, i - view.top) + text)
        href = view.link_at_cursor() or ""
        status = f" {view.row + 1}:{view.col + 1}  {href}"[:term.width - 1]
        out.append(term.move_xy(0, view.height) + term.reverse(status.ljust(term.width - 1)))
        # terminal cursor sits right of the 5-column gutter
        out.append(term.move_xy(view.col + 5, view.row - view.top))
        print("".join(out), end="", flush=True)
