"""Playwright render backend.

Mounts documents on headless Chromium. Every surface is its own browser
context and page, so concurrent or back-to-back exports never share a render
target, and closing the context discards the rendering completely.
"""

import logging

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from cosecha.config import BrowserConfig
from cosecha.export.base import BackendNotAvailableError, RenderBackend, RenderSurface

logger = logging.getLogger(__name__)

# Initial viewport height; element captures extend past it as needed
VIEWPORT_HEIGHT = 600

# Resolves after web fonts are loaded and two animation frames have run,
# i.e. once the first full layout/paint cycle after mounting is on screen.
PAINT_COMPLETE_JS = """
() => document.fonts.ready.then(() => new Promise((resolve) => {
    requestAnimationFrame(() => requestAnimationFrame(() => resolve(true)));
}))
"""


class PlaywrightSurface(RenderSurface):
    """A document mounted on its own Chromium page."""

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self._context = context
        self._page = page

    async def wait_until_painted(self) -> None:
        await self._page.wait_for_load_state("load")
        await self._page.evaluate(PAINT_COMPLETE_JS)

    async def capture(self, selector: str) -> bytes:
        return await self._page.locator(selector).screenshot(
            type="png",
            animations="disabled",
        )

    async def close(self) -> None:
        await self._context.close()


class PlaywrightBackend(RenderBackend):
    """Render backend driving headless Chromium through Playwright.

    Usage:
        async with PlaywrightBackend(config.browser) as backend:
            async with backend.mount(html, width=800, scale=2) as surface:
                png = await surface.capture("#document-root")
    """

    def __init__(self, config: BrowserConfig | None = None) -> None:
        super().__init__("playwright")
        self.config = config or BrowserConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def start(self) -> None:
        """Launch Chromium.

        Raises:
            BackendNotAvailableError: If Chromium cannot be launched
        """
        if self._browser is not None:
            return

        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                executable_path=self.config.executable_path,
            )
        except PlaywrightError as e:
            await self._playwright.stop()
            self._playwright = None
            raise BackendNotAvailableError(
                "chromium",
                f"Chromium could not be launched ({e.message}). "
                "Install it with: playwright install chromium",
            ) from e

        logger.debug("Launched Chromium %s", self._browser.version)

    async def stop(self) -> None:
        """Close Chromium and the Playwright driver."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def open_surface(self, html: str, *, width: int, scale: float) -> RenderSurface:
        if self._browser is None:
            raise RuntimeError("Playwright backend is not started")

        context = await self._browser.new_context(
            viewport={"width": width, "height": VIEWPORT_HEIGHT},
            device_scale_factor=scale,
            bypass_csp=True,
        )
        try:
            page = await context.new_page()
            await page.set_content(html, wait_until="domcontentloaded")
        except BaseException:
            await context.close()
            raise

        return PlaywrightSurface(context, page)
