"""Rendering collaborator — opens variant previews in Playwright and screenshots them."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from component_vrt.errors import CaptureError
from component_vrt.models.config import BrowserConfig, CaptureConfig, ViewportConfig

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Anything that can turn a preview URL into PNG bytes at a viewport."""

    async def render_and_capture(self, url: str, viewport: ViewportConfig) -> bytes:
        ...


class PlaywrightRenderer:
    """Owns one Playwright session and browser; every capture gets its own context.

    Use as an async context manager::

        async with PlaywrightRenderer(config.browser, config.capture) as renderer:
            png = await renderer.render_and_capture(url, viewport)
    """

    def __init__(
        self,
        browser_config: BrowserConfig | None = None,
        capture_config: CaptureConfig | None = None,
    ):
        self.browser_config = browser_config or BrowserConfig()
        self.capture_config = capture_config or CaptureConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        if self._browser is not None:
            return
        logger.debug("Launching %s (headless=%s)...",
                     self.browser_config.name, self.browser_config.headless)
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.browser_config.name)
        launch_kwargs: dict = {"headless": self.browser_config.headless}
        if self.browser_config.slow_mo_ms:
            launch_kwargs["slow_mo"] = self.browser_config.slow_mo_ms
        try:
            self._browser = await launcher.launch(**launch_kwargs)
        except PlaywrightError as e:
            await self._playwright.stop()
            self._playwright = None
            raise CaptureError(f"Failed to launch {self.browser_config.name}: {e}") from e

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "PlaywrightRenderer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _new_context(self, viewport: ViewportConfig) -> BrowserContext:
        if self._browser is None:
            raise CaptureError("Renderer not started. Use 'async with PlaywrightRenderer(...)'.")
        context = await self._browser.new_context(
            viewport={"width": viewport.width, "height": viewport.height},
            device_scale_factor=viewport.device_scale_factor,
        )
        context.set_default_timeout(self.browser_config.timeout_ms)
        return context

    async def render_and_capture(self, url: str, viewport: ViewportConfig) -> bytes:
        """Navigate to ``url`` in a fresh context sized to ``viewport`` and screenshot it.

        The page and context are closed on every exit path, cancellation included.
        """
        capture = self.capture_config
        try:
            context = await self._new_context(viewport)
        except PlaywrightError as e:
            raise CaptureError(f"Could not open browser context: {e}") from e

        try:
            page = await context.new_page()
            try:
                logger.debug("Navigating to %s (%s)", url, viewport.label)
                await page.goto(
                    url, wait_until="networkidle" if capture.wait_for_network else "load",
                )
                await page.wait_for_selector(
                    capture.wait_selector, timeout=capture.wait_selector_timeout_ms,
                )
                if capture.hide_elements:
                    selectors = ", ".join(capture.hide_elements)
                    await page.add_style_tag(
                        content=f"{selectors} {{ visibility: hidden !important; }}"
                    )
                # Let transitions and animations finish
                await page.wait_for_timeout(capture.settle_time_ms)

                screenshot_kwargs: dict = {"full_page": capture.full_page}
                if capture.mask_elements:
                    screenshot_kwargs["mask"] = [page.locator(s) for s in capture.mask_elements]
                return await page.screenshot(**screenshot_kwargs)
            finally:
                await page.close()
        except PlaywrightError as e:
            raise CaptureError(f"Capture of {url} failed: {e}") from e
        finally:
            await context.close()
