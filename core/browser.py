"""
Browser Capability Module
Narrow interface the style extractor needs from a headless browser.

Implementations: visual.playwright_driver.PlaywrightDriver for real pages,
and in-memory fakes in the test suite.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BrowserElement(ABC):
    @abstractmethod
    def screenshot(self) -> bytes:
        """PNG bytes clipped to the element's bounding box."""

    @abstractmethod
    def evaluate(self, script: str) -> Dict[str, Any]:
        """Run ``script`` (a JS function taking the element) and return its JSON result."""


class BrowserPage(ABC):
    @abstractmethod
    def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        """Wait until ``selector`` matches; False when the timeout elapses."""

    @abstractmethod
    def query_selector(self, selector: str) -> Optional[BrowserElement]:
        """First element matching ``selector`` or None."""

    @abstractmethod
    def add_style_tag(self, css: str) -> None:
        """Inject a stylesheet into the current document."""


class BrowserDriver(ABC):
    """
    One isolated, non-persistent browser instance.

    Used as a context manager; ``__exit__`` must release the browser on
    every exit path.
    """

    @abstractmethod
    def navigate(self, url: str, timeout_ms: int) -> BrowserPage:
        """Open ``url`` and return once the DOM is parsed. Raises NavigationError."""

    @abstractmethod
    def close(self) -> None:
        """Release the browser. Must be safe to call more than once."""

    def __enter__(self) -> 'BrowserDriver':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
