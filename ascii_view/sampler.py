"""
Image sampling.

Resolves the pixels behind every ImageBlock and attaches ASCII art
rows before composition. Sources are tried in order:
1. data: URLs, decoded in place
2. Bytes relayed by the host (e.g. fetched by the browser, which
   sidesteps cross-origin restrictions)
3. Local files

Any failure just means "no art" and the compositor falls back to an
[IMAGE] placeholder.
"""

import base64
import binascii
import io
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import unquote, urlparse

from PIL import Image, UnidentifiedImageError

from .blocks import Block, ImageBlock
from .config import RenderConfig
from .converter import ASCIIConverter, CharacterSets

logger = logging.getLogger(__name__)

# url -> raw bytes, or None when the host could not fetch it
Fetcher = Callable[[str], Optional[bytes]]


def decode_data_url(url: str) -> Optional[bytes]:
    """Payload of a data: URL, or None when malformed."""
    header, sep, payload = url.partition(",")
    if not sep:
        return None
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError):
            return None
    return unquote(payload).encode("latin-1", errors="replace")


def read_local(src: str) -> Optional[bytes]:
    parsed = urlparse(src)
    if parsed.scheme == "file":
        path = Path(unquote(parsed.path))
    elif parsed.scheme in ("", None) or len(parsed.scheme) == 1:  # bare or Windows drive path
        path = Path(src)
    else:
        return None
    try:
        return path.read_bytes() if path.is_file() else None
    except OSError:
        return None


class ImageSampler:
    """
    Attaches ASCII art to image blocks.

    Images are converted concurrently; results are attached only once
    the whole batch finished, and discarded if the cancel event was set
    in the meantime.
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        fetch: Optional[Fetcher] = None,
        converter: Optional[ASCIIConverter] = None
    ):
        self.config = config or RenderConfig()
        self.fetch = fetch
        self.converter = converter or ASCIIConverter(
            charset=CharacterSets.by_name(self.config.charset),
            max_width=min(self.config.max_art_width, self.config.display_width),
            max_height=self.config.max_art_height,
        )
        self.cancelled = threading.Event()

    def load_bytes(self, src: str) -> Optional[bytes]:
        if src.startswith("data:"):
            return decode_data_url(src)
        if self.fetch is not None:
            data = self.fetch(src)
            if data:
                return data
        return read_local(src)

    def sample_block(self, block: ImageBlock) -> Optional[List[str]]:
        """ASCII rows for one image, or None when the pixels are unavailable."""
        data = self.load_bytes(block.src)
        if not data:
            logger.debug("No pixels for %s", block.src[:80])
            return None
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                natural = image.size
                if natural[0] < self.config.image_min_size_px and natural[1] < self.config.image_min_size_px:
                    return None
                return self.converter.to_lines(image, (block.art_width, block.art_height))
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            logger.debug("Could not decode %s: %s", block.src[:80], e)
            return None

    def sample(self, blocks: List[Block]) -> int:
        """
        Convert every image block in `blocks`, in place.

        Returns the number of images that received art.
        """
        images = [b for b in blocks if isinstance(b, ImageBlock) and b.src]
        if not images:
            return 0

        workers = min(self.config.sampler_workers, len(images))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self.sample_block, images))

        if self.cancelled.is_set():
            logger.info("Sampling cancelled, discarding %d results", len(results))
            return 0

        converted = 0
        for block, lines in zip(images, results):
            if lines:
                block.ascii_lines = lines
                converted += 1
        logger.info("Converted %d of %d images", converted, len(images))
        return converted

    def cancel(self):
        self.cancelled.set()
