"""
ascii-view - Render web pages as fixed-width, navigable text

Compiles a rendered document (a tree of styled nodes captured from a
browser) into a character grid with support for:
- Paragraph word wrap with alignment and hanging indents
- Headings, lists, definition lists, blockquotes, code blocks
- Bordered tables sized to the display width
- Clickable link spans remapped onto wrapped lines
- Images as ASCII art (or [IMAGE] placeholders)
- Live pages through a headless browser
"""

__version__ = "0.3.0"

from .blocks import (
    Block,
    BlankBlock,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    Line,
    LineKind,
    Link,
    SeparatorBlock,
    TableBorderBlock,
    TableRowBlock,
    TextBlock,
    VideoBlock,
)
from .compositor import Compositor, compose
from .config import RenderConfig, load_config
from .converter import ASCIIConverter, CharacterSets
from .display import Display, OutputFile, Pager, Viewport
from .pipeline import DocumentRenderer, RenderError, render_tree
from .sampler import ImageSampler
from .styled import Box, ComputedStyle, StyledNode
from .walker import TreeWalker
from .browser import BrowserRenderer, render_url

__all__ = [
    # Input
    "StyledNode",
    "ComputedStyle",
    "Box",
    # Model
    "Block",
    "BlankBlock",
    "TextBlock",
    "HeadingBlock",
    "ImageBlock",
    "VideoBlock",
    "CodeBlock",
    "SeparatorBlock",
    "TableBorderBlock",
    "TableRowBlock",
    "Line",
    "LineKind",
    "Link",
    # Pipeline
    "RenderConfig",
    "load_config",
    "TreeWalker",
    "Compositor",
    "compose",
    "DocumentRenderer",
    "RenderError",
    "render_tree",
    # Images
    "ASCIIConverter",
    "CharacterSets",
    "ImageSampler",
    # Output
    "Display",
    "OutputFile",
    "Pager",
    "Viewport",
    # Browser
    "BrowserRenderer",
    "render_url",
]
