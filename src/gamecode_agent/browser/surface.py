"""
Automation Surface

Owns one Playwright browser, one isolated context and one page for the
duration of a single login or submission. Surfaces are never shared between
operations.

Usage:
    >>> surface = AutomationSurface()
    >>> async with opened(surface, debug=False):
    ...     await surface.navigate("https://example.com")
"""

import json
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Literal, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
)

from ..config import DEFAULT_USER_AGENT
from ..errors import CleanupError, ElementTimeout, SurfaceInitError
from ..models import RawFeedback

logger = logging.getLogger(__name__)


BrowserType = Literal["chromium", "firefox", "webkit"]

_READ_LOCAL_STATE_JS = """() => {
    const data = {};
    for (let i = 0; i < window.localStorage.length; i++) {
        const key = window.localStorage.key(i);
        if (key) {
            data[key] = window.localStorage.getItem(key);
        }
    }
    return data;
}"""

_READ_FEEDBACK_JS = """(elements) => elements.map((element) => ({
    text: element.textContent || "",
    classes: Array.from(element.classList),
}))"""

_CHECK_ALL_JS = """(elements) => {
    for (const element of elements) {
        element.checked = true;
    }
    return elements.length;
}"""


def _write_local_state_script(state: dict[str, str], origin: Optional[str]) -> str:
    # Storage is origin-bound, so entries are applied as each matching document loads
    return (
        "(() => {"
        f" const entries = {json.dumps(state)};"
        f" const origin = {json.dumps(origin)};"
        " if (origin !== null && window.location.origin !== origin) { return; }"
        " try {"
        "  for (const [key, value] of Object.entries(entries)) {"
        "   window.localStorage.setItem(key, value);"
        "  }"
        " } catch (e) {}"
        "})();"
    )


@dataclass
class SurfaceConfig:
    """
    Configuration for one automation surface.

    Reads from environment variables with sensible defaults.
    """

    browser_type: BrowserType = "chromium"

    # Fixed desktop user agent for every context
    user_agent: str = DEFAULT_USER_AGENT

    viewport_width: int = 1280
    viewport_height: int = 720

    # Slow motion delay in ms applied in debug mode
    debug_slow_mo: int = 1000

    # Default timeout for navigation and actions in ms
    default_timeout: int = 30000

    @classmethod
    def from_env(cls) -> "SurfaceConfig":
        """
        Create SurfaceConfig from environment variables.

        Environment variables:
            BROWSER_TYPE: chromium, firefox, or webkit (default: chromium)
            BROWSER_DEBUG_SLOW_MO: int in ms (default: 1000)
            BROWSER_DEFAULT_TIMEOUT: int in ms (default: 30000)
        """
        env_type = os.getenv("BROWSER_TYPE", "chrome").lower()
        browser_type_map = {
            "chrome": "chromium",
            "chromium": "chromium",
            "firefox": "firefox",
            "webkit": "webkit",
            "safari": "webkit",
        }
        return cls(
            browser_type=browser_type_map.get(env_type, "chromium"),
            debug_slow_mo=int(os.getenv("BROWSER_DEBUG_SLOW_MO", "1000")),
            default_timeout=int(os.getenv("BROWSER_DEFAULT_TIMEOUT", "30000")),
        )


class AutomationSurface:
    """
    One disposable browser + context + page.

    Resources are acquired in order by open() and released in reverse order by
    close(). A failed open() leaves whatever it did acquire for close() to
    release, so callers always pair the two (see opened()).
    """

    def __init__(self, config: Optional[SurfaceConfig] = None):
        self.config = config or SurfaceConfig.from_env()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def is_open(self) -> bool:
        return self._page is not None

    async def open(self, debug: bool = False) -> None:
        """
        Launch the browser and open one isolated context with one page.

        Args:
            debug: Show the browser window and slow every action down

        Raises:
            SurfaceInitError: If any part of the surface cannot be created
        """
        if self._playwright is not None:
            raise SurfaceInitError("Surface already opened")

        try:
            self._playwright = await async_playwright().start()
            launcher = self._get_browser_launcher()

            self._browser = await launcher.launch(
                headless=not debug,
                slow_mo=self.config.debug_slow_mo if debug else 0,
            )
            self._context = await self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height,
                },
            )
            self._context.set_default_timeout(self.config.default_timeout)
            self._page = await self._context.new_page()
        except Exception as e:
            logger.error(f"Failed to initialize automation surface: {e}")
            raise SurfaceInitError(f"Failed to launch {self.config.browser_type}: {e!s}") from e

        logger.debug(f"Automation surface opened (debug={debug})")

    def _get_browser_launcher(self):
        """Get the appropriate browser launcher based on config."""
        launchers = {
            "chromium": self._playwright.chromium,
            "firefox": self._playwright.firefox,
            "webkit": self._playwright.webkit,
        }
        return launchers.get(self.config.browser_type, self._playwright.chromium)

    async def close(self) -> list[CleanupError]:
        """
        Release page, context, browser and driver, in that order.

        Each stage is guarded on its own so one failure never skips the rest.
        Failures are logged and returned, never raised.
        """
        errors: list[CleanupError] = []

        stages = (
            ("page", self._page, lambda handle: handle.close()),
            ("context", self._context, lambda handle: handle.close()),
            ("browser", self._browser, lambda handle: handle.close()),
            ("playwright", self._playwright, lambda handle: handle.stop()),
        )
        for stage, handle, release in stages:
            if handle is None:
                continue
            try:
                await release(handle)
            except Exception as e:
                error = CleanupError(stage, e)
                logger.warning(f"Cleanup error: {error}")
                errors.append(error)

        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        logger.debug("Automation surface closed")
        return errors

    def _require_page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Surface not open")
        return self._page

    def _require_context(self) -> BrowserContext:
        if self._context is None:
            raise RuntimeError("Surface not open")
        return self._context

    async def navigate(self, url: str, timeout_ms: Optional[int] = None) -> None:
        page = self._require_page()
        await page.goto(url, timeout=timeout_ms)

    async def wait_for_element(self, selector: str, timeout_ms: int) -> None:
        """
        Wait for an element to be attached and visible.

        Raises:
            ElementTimeout: If it does not appear within timeout_ms
        """
        page = self._require_page()
        try:
            await page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeout as e:
            raise ElementTimeout(selector, timeout_ms) from e

    async def fill(self, selector: str, value: str, timeout_ms: Optional[int] = None) -> None:
        page = self._require_page()
        await page.fill(selector, value, timeout=timeout_ms)

    async def click(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        page = self._require_page()
        await page.click(selector, timeout=timeout_ms)

    async def evaluate(self, page_function: str, arg: Any = None) -> Any:
        page = self._require_page()
        return await page.evaluate(page_function, arg)

    async def wait_for_network_idle(self, timeout_ms: Optional[int] = None) -> None:
        page = self._require_page()
        await page.wait_for_load_state("networkidle", timeout=timeout_ms)

    def current_url(self) -> str:
        return self._require_page().url

    async def read_cookies(self) -> list[dict[str, Any]]:
        context = self._require_context()
        return [dict(cookie) for cookie in await context.cookies()]

    async def write_cookies(self, cookies: list[dict[str, Any]]) -> None:
        if not cookies:
            return
        context = self._require_context()
        await context.add_cookies(cookies)

    async def read_local_state(self) -> dict[str, str]:
        """Snapshot the current page's local storage."""
        data = await self.evaluate(_READ_LOCAL_STATE_JS)
        return {str(key): str(value) for key, value in (data or {}).items()}

    async def write_local_state(self, state: dict[str, str], origin: Optional[str] = None) -> None:
        """
        Restore a local storage snapshot.

        The entries are written into every document of ``origin`` (any origin
        if None) that this surface loads from now on. This is not a one-shot
        restore: each load, including pages after a form post, starts from the
        snapshot again and overwrites whatever the site stored in between.
        """
        if not state:
            return
        context = self._require_context()
        await context.add_init_script(script=_write_local_state_script(state, origin))

    async def check_all(self, selector: str) -> int:
        """Mark every element matching selector as checked. Returns the count."""
        page = self._require_page()
        return await page.eval_on_selector_all(selector, _CHECK_ALL_JS)

    async def read_feedback(self, selector: str) -> list[RawFeedback]:
        """Read text and CSS classes of every element matching selector, in page order."""
        page = self._require_page()
        elements = await page.eval_on_selector_all(selector, _READ_FEEDBACK_JS)
        return [RawFeedback(**element) for element in elements]


@asynccontextmanager
async def opened(surface: AutomationSurface, debug: bool = False) -> AsyncIterator[AutomationSurface]:
    """
    Scoped acquisition of a surface.

    close() runs exactly once on every exit path, including a failed open().
    """
    try:
        await surface.open(debug)
        yield surface
    finally:
        await surface.close()
