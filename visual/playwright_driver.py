"""
Playwright Driver Module
Headless Chromium implementation of the browser capability using Playwright.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from core.browser import BrowserDriver, BrowserElement, BrowserPage
from core.errors import ElementNotFoundError, NavigationError

logger = logging.getLogger(__name__)


class PlaywrightElement(BrowserElement):
    def __init__(self, handle):
        self._handle = handle

    def screenshot(self) -> bytes:
        return self._handle.screenshot(type='png')

    def evaluate(self, script: str) -> Dict[str, Any]:
        return self._handle.evaluate(script)


class PlaywrightPage(BrowserPage):
    def __init__(self, page):
        self._page = page

    def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        try:
            self._page.wait_for_selector(selector, state='attached', timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            raise ElementNotFoundError(f"invalid selector {selector!r}: {e.message}") from e
        return True

    def query_selector(self, selector: str) -> Optional[BrowserElement]:
        handle = self._page.query_selector(selector)
        return PlaywrightElement(handle) if handle is not None else None

    def add_style_tag(self, css: str) -> None:
        self._page.add_style_tag(content=css)


class PlaywrightDriver(BrowserDriver):
    """
    Fresh Chromium instance with its own non-persistent context.

    Each driver owns its Playwright runtime, so concurrent requests never
    share a browser session.
    """

    def __init__(self, viewport: Tuple[int, int] = (1920, 1080), headless: bool = True):
        self._closed = False
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(headless=headless)
            self._context = self._browser.new_context(
                viewport={'width': viewport[0], 'height': viewport[1]})
        except BaseException:
            self._playwright.stop()
            self._closed = True
            raise
        logger.debug("Launched headless Chromium (%dx%d)", *viewport)

    def navigate(self, url: str, timeout_ms: int) -> BrowserPage:
        page = self._context.new_page()
        try:
            page.goto(url, wait_until='domcontentloaded', timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationError(f"{url} did not load within {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise NavigationError(f"failed to load {url}: {e.message}") from e
        return PlaywrightPage(page)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._context.close()
            self._browser.close()
        finally:
            self._playwright.stop()
        logger.debug("Closed headless Chromium")
