"""
Browser host.

Loads a page in a headless browser via Playwright, serialises its
rendered element tree (computed styles and measured boxes) into a
StyledNode tree, and relays image bytes so the sampler can read
cross-origin images the page itself could not.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from .blocks import ImageBlock, Line
from .config import RenderConfig
from .pipeline import DocumentRenderer, RenderError
from .sampler import ImageSampler
from .styled import StyledNode

logger = logging.getLogger(__name__)

# Serialises document.body into the JSON shape StyledNode.from_dict reads
CAPTURE_JS = """
() => {
    const SKIP_TAGS = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE', 'HEAD', 'META', 'LINK']);
    const STYLE_KEYS = [
        'display', 'visibility', 'opacity', 'overflow', 'whiteSpace', 'textAlign',
        'textTransform', 'textIndent', 'letterSpacing', 'wordSpacing', 'listStyleType',
        'color', 'backgroundColor',
        'marginTop', 'marginRight', 'marginBottom', 'marginLeft',
        'paddingTop', 'paddingRight', 'paddingBottom', 'paddingLeft',
    ];

    function attrsOf(el) {
        const a = {};
        if (el.href && typeof el.href === 'string') a.href = el.href;
        if (el.tagName === 'IMG') {
            a.src = el.currentSrc || el.src || '';
            if (el.dataset && el.dataset.src) a['data-src'] = el.dataset.src;
            a.alt = el.alt || '';
            a.naturalWidth = el.naturalWidth;
            a.naturalHeight = el.naturalHeight;
        }
        if ('value' in el && typeof el.value === 'string' && el.tagName !== 'LI') a.value = el.value;
        for (const name of ['placeholder', 'type']) {
            if (el.hasAttribute(name)) a[name] = el.getAttribute(name);
        }
        if (el.tagName === 'DETAILS' && el.open) a.open = true;
        if (el.tagName === 'OPTION' && el.selected) a.selected = true;
        if (el.hidden) a.hidden = true;
        return a;
    }

    function capture(node, depth) {
        if (node.nodeType === Node.TEXT_NODE) return { tag: '#text', text: node.textContent };
        if (node.nodeType !== Node.ELEMENT_NODE || depth > 256) return null;
        if (SKIP_TAGS.has(node.tagName)) return null;

        let style = null;
        try {
            const s = window.getComputedStyle(node);
            style = {};
            for (const k of STYLE_KEYS) style[k] = s[k];
        } catch (e) { /* leave style null */ }

        const r = node.getBoundingClientRect();
        const out = {
            tag: node.tagName,
            style: style,
            box: { width: r.width, height: r.height },
            attrs: attrsOf(node),
            children: [],
        };
        if (style && style.display === 'none') return out;
        for (const child of node.childNodes) {
            const c = capture(child, depth + 1);
            if (c) out.children.push(c);
        }
        return out;
    }

    return {
        viewportWidth: document.documentElement.clientWidth || window.innerWidth || 1024,
        root: capture(document.body, 0),
    };
}
"""


class BrowserRenderer:
    """
    Renders live URLs through a headless browser.

    Args:
        config: Layout settings; viewport width is taken from the page
        headless: Run the browser without a window
        browser_type: Playwright browser ('chromium', 'firefox', 'webkit')
        images: Convert images to ASCII art (placeholders otherwise)
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        headless: bool = True,
        browser_type: str = "chromium",
        images: bool = True
    ):
        self.config = config or RenderConfig()
        self.headless = headless
        self.browser_type = browser_type
        self.images = images

    async def _fetch_images(self, page, sources: List[str]) -> Dict[str, bytes]:
        """Fetch image bytes through the browser context (cookies, no CORS)."""
        from playwright.async_api import Error as PlaywrightError

        async def fetch(src: str) -> Tuple[str, Optional[bytes]]:
            try:
                response = await page.request.get(src, timeout=15000)
                if not response.ok:
                    return src, None
                return src, await response.body()
            except PlaywrightError as e:
                logger.debug("Image fetch failed for %s: %s", src[:80], e)
                return src, None

        results = await asyncio.gather(*(fetch(s) for s in sources))
        return {src: data for src, data in results if data}

    async def capture_async(self, url: str) -> Tuple[StyledNode, RenderConfig, Dict[str, bytes]]:
        """Load `url` and return its styled tree, page-adjusted config and image bytes."""
        try:
            from playwright.async_api import Error as PlaywrightError
            from playwright.async_api import async_playwright
        except ImportError:
            raise ImportError(
                "Playwright required. Install: pip install playwright && playwright install"
            )

        try:
            async with async_playwright() as p:
                browser_launcher = getattr(p, self.browser_type)
                browser = await browser_launcher.launch(headless=self.headless)

                try:
                    page = await browser.new_page()
                    await page.set_viewport_size({"width": self.config.viewport_width_px, "height": 800})
                    await page.goto(url, wait_until="networkidle", timeout=30000)

                    # Wait a bit for dynamic content
                    await page.wait_for_timeout(1000)

                    data = await page.evaluate(CAPTURE_JS)
                    if not data or not data.get("root"):
                        raise ValueError(f"Page has no body: {url}")

                    root = StyledNode.from_dict(data["root"])
                    config = self.config.with_overrides(
                        viewport_width_px=int(data.get("viewportWidth") or 0) or None
                    )

                    image_bytes: Dict[str, bytes] = {}
                    if self.images:
                        blocks = DocumentRenderer(config).parse(root)
                        sources = sorted({
                            b.src for b in blocks
                            if isinstance(b, ImageBlock) and b.src.startswith(("http:", "https:"))
                        })
                        image_bytes = await self._fetch_images(page, sources)
                        logger.info("Fetched %d of %d images", len(image_bytes), len(sources))

                    return root, config, image_bytes

                finally:
                    await browser.close()
        except PlaywrightError as e:
            # timeouts, DNS failures and missing browser executables
            raise RenderError(f"Could not load {url}: {e}") from e

    async def render_url_async(self, url: str) -> List[Line]:
        """Render a URL into display Lines (async)."""
        root, config, image_bytes = await self.capture_async(url)
        sampler = ImageSampler(config, fetch=image_bytes.get) if self.images else None
        return DocumentRenderer(config, sampler).render(root)

    def render_url(self, url: str) -> List[Line]:
        """Render a URL into display Lines (sync)."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.render_url_async(url))

        # already inside an event loop: run on a private one
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as executor:
            future = executor.submit(asyncio.run, self.render_url_async(url))
            return future.result()


def render_url(url: str, config: Optional[RenderConfig] = None, images: bool = True) -> List[Line]:
    """Render a URL as display Lines."""
    return BrowserRenderer(config=config, images=images).render_url(url)
