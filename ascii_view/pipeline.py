"""
Render pipeline.

One activation: walk the styled tree into Blocks, fall back to
direct video detection, sample images, compose Lines. Every call
starts from fresh state.
"""

import logging
from typing import List, Optional

from .blocks import Block, Line, VideoBlock
from .compositor import Compositor
from .config import RenderConfig
from .sampler import ImageSampler
from .style import classify
from .styled import StyledNode
from .walker import TreeWalker

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """A render failed as a whole. `str(err)` is the user-facing message."""


def find_video(root: StyledNode, config: Optional[RenderConfig] = None) -> Optional[VideoBlock]:
    """First visible, non-empty <video> anywhere in the tree."""
    for node in root.depth_first():
        if node.tag != "VIDEO" or node.box is None:
            continue
        if node.box.width > 0 and node.box.height > 0 and classify(node, config).visible:
            return VideoBlock(indent=0, element=node,
                              width_px=node.box.width, height_px=node.box.height)
    return None


class DocumentRenderer:
    """
    Compiles a styled document tree into display Lines.

    Args:
        config: Layout settings (defaults to RenderConfig())
        sampler: Image sampler; None renders every image as a placeholder
    """

    def __init__(self, config: Optional[RenderConfig] = None,
                 sampler: Optional[ImageSampler] = None):
        self.config = config or RenderConfig()
        self.sampler = sampler

    def parse(self, root: StyledNode) -> List[Block]:
        """Walk the tree into normalised Blocks."""
        blocks = TreeWalker(self.config).walk(root)
        if not any(isinstance(b, VideoBlock) for b in blocks):
            video = find_video(root, self.config)
            if video is not None:
                logger.debug("No video block from the walk, using direct <video> detection")
                blocks.append(video)
        logger.info("Parsed %d blocks", len(blocks))
        return blocks

    def render(self, root: StyledNode) -> List[Line]:
        """Full activation: parse, sample images, compose."""
        try:
            blocks = self.parse(root)
            if self.sampler is not None:
                self.sampler.sample(blocks)
            lines = Compositor(self.config.display_width).compose(blocks)
        except RecursionError as e:
            raise RenderError("Document is nested too deeply to render") from e
        except Exception as e:
            logger.exception("Render failed")
            raise RenderError(str(e) or type(e).__name__) from e
        logger.info("Composed %d lines", len(lines))
        return lines


def render_tree(root: StyledNode, config: Optional[RenderConfig] = None,
                sampler: Optional[ImageSampler] = None) -> List[Line]:
    """Render a styled tree with a one-off DocumentRenderer."""
    return DocumentRenderer(config, sampler).render(root)
