#!/usr/bin/env python3
"""
Command-line interface for ascii-view.

Renders a web page (through a headless browser) or a serialised
styled tree (JSON) onto a fixed-width character grid:
- Plain or coloured terminal output
- Text / HTML export
- Read-only pager
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .blocks import Line
from .config import RenderConfig, load_config
from .display import Display, OutputFile, Pager
from .pipeline import DocumentRenderer, RenderError
from .sampler import ImageSampler
from .styled import StyledNode


class ASCIIViewApp:
    """
    Main application class.

    Resolves the input source, renders it, and routes the lines to
    the chosen output.
    """

    def __init__(self, config: RenderConfig, images: bool = True):
        """
        Initialize the application.

        Args:
            config: Layout settings
            images: Convert images to ASCII art
        """
        self.config = config
        self.images = images

    def render_source(self, source: str) -> List[Line]:
        """Render a URL, a JSON tree file, or '-' for a JSON tree on stdin."""
        if source.startswith(("http://", "https://")):
            from .browser import BrowserRenderer
            return BrowserRenderer(config=self.config, images=self.images).render_url(source)

        if source == "-":
            data = json.load(sys.stdin)
        else:
            with open(source, encoding="utf-8") as f:
                data = json.load(f)

        root = StyledNode.from_dict(data.get("root", data) if isinstance(data, dict) else data)
        config = self.config
        if isinstance(data, dict) and data.get("viewportWidth"):
            config = config.with_overrides(viewport_width_px=int(data["viewportWidth"]))
        sampler = ImageSampler(config) if self.images else None
        return DocumentRenderer(config, sampler).render(root)

    def run(
        self,
        source: str,
        output_path: Optional[str] = None,
        html: bool = False,
        color: bool = False,
        gutter: bool = False,
        pager: bool = False
    ) -> int:
        """
        Render `source` and write the result.

        Returns:
            Exit code (0 for success)
        """
        try:
            lines = self.render_source(source)
        except (OSError, ValueError, ImportError, RenderError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if output_path:
            if html:
                OutputFile.save_html(lines, output_path, title=source)
            else:
                OutputFile.save_text(lines, output_path)
            print(f"Saved to: {output_path}")
        elif pager:
            return Pager(lines, color=color).run()
        else:
            Display(color=color, gutter=gutter).render(lines)

        return 0


def configure_logging(verbosity: int):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog="ascii-view",
        description="ascii-view - Render web pages as navigable text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ascii-view https://example.com          Render a live page
  ascii-view page.json                    Render a captured styled tree
  ascii-view https://example.com -p       Open in the pager
  ascii-view page.json -o out.html --html Save as HTML with links
  ascii-view page.json -w 100 --no-images 100 columns, image placeholders
"""
    )

    parser.add_argument(
        "source",
        help="URL, styled-tree JSON file, or '-' for JSON on stdin"
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        help="Output file path"
    )
    parser.add_argument(
        "--html",
        action="store_true",
        help="Save as HTML (keeps links clickable)"
    )
    parser.add_argument(
        "-p", "--pager",
        action="store_true",
        help="Open the result in the interactive pager"
    )

    # Layout options
    parser.add_argument(
        "-w", "--width",
        type=int,
        help="Display width in columns (default: 80)"
    )
    parser.add_argument(
        "--no-images",
        action="store_false",
        dest="images",
        help="Show image placeholders instead of ASCII art"
    )
    parser.add_argument(
        "-s", "--charset",
        choices=["standard", "detailed", "blocks", "minimal"],
        help="Character set for image art"
    )

    # Display options
    parser.add_argument(
        "-c", "--color",
        action="store_true",
        help="Enable colored output"
    )
    parser.add_argument(
        "-n", "--line-numbers",
        action="store_true",
        help="Show a line-number gutter"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress (-vv for debug)"
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config().with_overrides(display_width=args.width, charset=args.charset)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    app = ASCIIViewApp(config, images=args.images)
    return app.run(
        args.source,
        output_path=args.output,
        html=args.html,
        color=args.color and Display.supports_color(),
        gutter=args.line_numbers,
        pager=args.pager
    )


if __name__ == "__main__":
    sys.exit(main())
