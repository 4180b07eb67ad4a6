"""Playwright render driver — mounts example markup in a browser and screenshots it."""

from __future__ import annotations

import io
import logging
import math
from typing import Any

from PIL import Image
from playwright.async_api import Browser, ConsoleMessage, Playwright, Request, Response, async_playwright

from snapshotter.errors import RenderFailure
from snapshotter.models.example import Example, Viewport

from .assets import ROOT_ELEMENT_ID, PublicAssetResolver
from .base import DEFAULT_RENDER_TIMEOUT, RenderDriver

logger = logging.getLogger(__name__)

# Mount the markup, wait until every image finished loading or failed, and
# return the sources of images that did not load
_MOUNT_SCRIPT = """
(args) => {
    const root = document.getElementById(args.rootId);
    root.innerHTML = args.markup;
    const images = Array.from(root.querySelectorAll('img'));
    const settled = images
        .filter((img) => !img.complete)
        .map((img) => new Promise((resolve) => {
            img.addEventListener('load', resolve);
            img.addEventListener('error', resolve);
        }));
    return Promise.all(settled).then(() => images
        .filter((img) => img.getAttribute('src') && img.naturalWidth === 0)
        .map((img) => img.currentSrc || img.src));
}
"""

# Union of the root's box and all descendant boxes, in page coordinates
_MEASURE_SCRIPT = """
(rootId) => {
    const root = document.getElementById(rootId);
    const box = root.getBoundingClientRect();
    let left = box.left, top = box.top, right = box.right, bottom = box.bottom;
    for (const el of root.querySelectorAll('*')) {
        const r = el.getBoundingClientRect();
        if (r.width === 0 && r.height === 0) continue;
        left = Math.min(left, r.left);
        top = Math.min(top, r.top);
        right = Math.max(right, r.right);
        bottom = Math.max(bottom, r.bottom);
    }
    return {
        x: left + window.scrollX,
        y: top + window.scrollY,
        width: right - left,
        height: bottom - top,
    };
}
"""


def clip_from_box(box: dict[str, float]) -> dict[str, int]:
    """Round a measured box outwards to whole pixels, at least 1x1."""
    x = max(0, math.floor(box["x"]))
    y = max(0, math.floor(box["y"]))
    right = math.ceil(box["x"] + box["width"])
    bottom = math.ceil(box["y"] + box["height"])
    return {
        "x": x,
        "y": y,
        "width": max(1, right - x),
        "height": max(1, bottom - y),
    }


class PlaywrightDriver(RenderDriver):
    """Renders HTML markup in a real browser.

    Use as an async context manager; the browser is launched once and every
    render gets its own context sized to the viewport.
    """

    def __init__(
        self,
        assets: PublicAssetResolver,
        base_url: str = "http://localhost:4567",
        browser_name: str = "chromium",
        timeout_seconds: float = DEFAULT_RENDER_TIMEOUT,
    ):
        super().__init__(timeout_seconds)
        self.assets = assets
        self.base_url = base_url.rstrip("/")
        self.browser_name = browser_name
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> "PlaywrightDriver":
        self._playwright = await async_playwright().start()
        logger.debug("Launching %s for rendering...", self.browser_name)
        browser_type = getattr(self._playwright, self.browser_name)
        self._browser = await browser_type.launch(headless=True)
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def capture(self, example: Example, viewport: Viewport, value: Any) -> Image.Image:
        if isinstance(value, Image.Image):
            return value
        if self._browser is None:
            raise RuntimeError("PlaywrightDriver used outside 'async with'")

        context = await self._browser.new_context(
            viewport={"width": viewport.width, "height": viewport.height},
        )
        try:
            await context.route(f"{self.base_url}/**", self.assets.handle_route)
            page = await context.new_page()
            asset_errors = self._attach_listeners(page, example.description)

            await page.goto(f"{self.base_url}/", wait_until="load")
            broken = await page.evaluate(_MOUNT_SCRIPT, {"rootId": ROOT_ELEMENT_ID, "markup": value})
            await page.wait_for_load_state("networkidle")
            if example.strict_assets:
                problems = asset_errors + [f"image did not load: {src}" for src in broken or []]
                if problems:
                    raise RenderFailure(example.description, "; ".join(problems))

            box = await page.evaluate(_MEASURE_SCRIPT, ROOT_ELEMENT_ID)
            clip = clip_from_box(box)
            logger.debug("Capturing '%s' @%s clip=%s", example.description, viewport.name, clip)
            png = await page.screenshot(clip=clip, full_page=True, type="png")
        finally:
            await context.close()

        image = Image.open(io.BytesIO(png))
        image.load()
        return image

    @staticmethod
    def _attach_listeners(page, description: str) -> list[str]:
        """Log page activity; returns the list that collects failed asset requests."""
        asset_errors: list[str] = []

        def on_console(msg: ConsoleMessage) -> None:
            logger.debug("[%s] console.%s: %s", description, msg.type, msg.text)

        def on_response(response: Response) -> None:
            if response.status >= 400:
                logger.warning("[%s] %d for %s", description, response.status, response.url)
                asset_errors.append(f"{response.status} for {response.url}")

        def on_request_failed(request: Request) -> None:
            logger.warning("[%s] request failed: %s (%s)",
                           description, request.url, request.failure)
            asset_errors.append(f"request failed: {request.url}")

        page.on("console", on_console)
        page.on("response", on_response)
        page.on("requestfailed", on_request_failed)
        return asset_errors
