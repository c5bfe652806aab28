"""
Direct Playwright client for one phase.

Launches the browser engine of the phase's profile in-process and creates
browser contexts that carry the profile's device emulation, viewport,
locale and base URL, optionally seeded with a captured session state.

Usage:
    async with PlaywrightClient(phase.profile, base_url=config.base_url) as client:
        await client.page.goto("/dashboard")
"""

import logging
from typing import Any, Dict, Optional, Sequence

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Response,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from frontend_e2e.config import Timeouts
from frontend_e2e.errors import ActionTimeout
from frontend_e2e.graph import BrowserProfile

logger = logging.getLogger(__name__)


class PlaywrightClient:
    """
    Playwright client bound to a browser profile.

    Example:
        async with PlaywrightClient(DESKTOP_FIREFOX, headless=True) as client:
            page = await client.new_page()
            await page.goto("https://example.com")
    """

    def __init__(
        self,
        profile: BrowserProfile,
        headless: bool = True,
        timeouts: Optional[Timeouts] = None,
        base_url: Optional[str] = None,
        locale: Optional[str] = None,
        context_options: Optional[Dict[str, Any]] = None,
    ):
        self.profile = profile
        self.headless = headless
        self.timeouts = timeouts or Timeouts()
        self.base_url = base_url
        self.locale = locale
        self.extra_context_options = dict(context_options or {})

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def connect(self):
        """Launch the profile's browser engine and open a default context + page."""
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.profile.engine)
        self._browser = await launcher.launch(headless=self.headless)
        logger.debug("Launched %s (headless=%s) for %s", self.profile.engine, self.headless, self.profile.name)

        self._context = await self.new_context()
        self._page = await self._context.new_page()

    def context_options(self) -> Dict[str, Any]:
        """Options for new contexts: device descriptor, then profile, then overrides."""
        options: Dict[str, Any] = {}
        if self.profile.device:
            if not self._playwright:
                raise RuntimeError("Client not connected. Use 'async with' or call connect()")
            options.update(self._playwright.devices[self.profile.device])
            options.pop("default_browser_type", None)
        options["viewport"] = self.profile.viewport_size
        if self.base_url:
            options["base_url"] = self.base_url
        if self.locale:
            options["locale"] = self.locale
        options.update(self.extra_context_options)
        return options

    async def new_context(self, **kwargs) -> BrowserContext:
        """
        Create a new browser context with the profile's options.

        Args:
            **kwargs: Context options overriding the profile (storage_state, ...)
        """
        if not self._browser:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")

        context = await self._browser.new_context(**{**self.context_options(), **kwargs})
        context.set_default_timeout(Timeouts.ms(self.timeouts.action))
        context.set_default_navigation_timeout(Timeouts.ms(self.timeouts.navigation))
        return context

    async def new_page(self) -> Page:
        if not self._context:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")
        return await self._context.new_page()

    async def close(self):
        """Close all connections and cleanup resources."""
        if self._page:
            await self._page.close()
            self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def browser(self) -> Browser:
        if not self._browser:
            raise RuntimeError("Client not connected")
        return self._browser

    @property
    def context(self) -> BrowserContext:
        if not self._context:
            raise RuntimeError("Client not connected")
        return self._context

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Client not connected or page not created")
        return self._page


async def navigate(page: Page, url: str, timeouts: Timeouts, wait_until: str = "domcontentloaded") -> Optional[Response]:
    """``page.goto`` bounded by the navigation timeout."""
    try:
        return await page.goto(url, wait_until=wait_until, timeout=Timeouts.ms(timeouts.navigation))
    except PlaywrightTimeout as exc:
        raise ActionTimeout(
            name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc)
        ) from exc


async def wait_for_route(page: Page, url: str, timeouts: Timeouts) -> None:
    """Wait for a page transition to ``url`` (glob or absolute URL)."""
    try:
        await page.wait_for_url(url, timeout=Timeouts.ms(timeouts.navigation))
    except PlaywrightTimeout as exc:
        raise ActionTimeout(
            name="wait_for_url", payload={"url": url, "current": page.url}, message=str(exc)
        ) from exc


async def wait_for_settled_route(page: Page, routes: Sequence[str], timeouts: Timeouts) -> str:
    """Wait until ``page`` shows one of ``routes`` and client-side redirects settled.

    ``routes`` are globs like ``**/dashboard``. The single-page app may still
    redirect (e.g. to the login form) after ``domcontentloaded``, so the
    network has to go idle before the URL counts. Returns the final URL.
    """
    fragments = [route.strip("*") for route in routes]
    try:
        await page.wait_for_url(
            lambda url: any(fragment in url for fragment in fragments),
            timeout=Timeouts.ms(timeouts.navigation),
        )
    except PlaywrightTimeout as exc:
        raise ActionTimeout(
            name="wait_for_url", payload={"url": list(routes), "current": page.url}, message=str(exc)
        ) from exc

    try:
        await page.wait_for_load_state("networkidle", timeout=Timeouts.ms(timeouts.navigation))
    except PlaywrightTimeout:
        # Long-polling pages never go idle; the route reached above stands.
        logger.debug("Network did not go idle on %s", page.url)
    return page.url
