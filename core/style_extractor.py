"""
Element Style Extractor Module
Locates one element on a live page, captures it and records its computed style.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from utils.file_utils import ensure_directory, sanitize_filename, write_json_atomic

from .browser import BrowserDriver
from .errors import ElementNotFoundError, PersistenceError
from .raster import RasterImage
from .style_snapshot import StyleSnapshot

logger = logging.getLogger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_MS = 60000
DEFAULT_SELECTOR_TIMEOUT_MS = 30000

DISABLE_HOVER_CSS = '*:hover { pointer-events: none !important; }'

# Runs in the page; font weight is normalized on the Python side.
EXTRACT_ELEMENT_JS = """
(el) => {
  const computed = window.getComputedStyle(el);
  const rect = el.getBoundingClientRect();
  const inputFields = Array.from(el.querySelectorAll('input'))
    .filter((input) => input.type !== 'hidden')
    .map((input) => ({
      type: input.type,
      name: input.name || null,
      placeholder: input.placeholder || null,
      value: input.value || ''
    }));
  const dropdownOptions = Array.from(el.querySelectorAll('select')).flatMap((select) =>
    Array.from(select.options).map((opt) => opt.textContent.trim())
  );
  return {
    tag: el.tagName,
    textContent: el.textContent.trim(),
    placeholder: el.getAttribute('placeholder') || null,
    inputFields,
    dropdownOptions,
    fontFamily: computed.fontFamily,
    fontSize: computed.fontSize,
    fontWeight: computed.fontWeight,
    color: computed.color,
    backgroundColor: computed.backgroundColor,
    padding: computed.padding,
    margin: computed.margin,
    textAlign: computed.textAlign,
    display: computed.display,
    position: computed.position,
    width: rect.width,
    height: rect.height,
    style: el.getAttribute('style') || null
  };
}
"""


def escape_selector(selector: str) -> str:
    """Escape literal colons so utility classes like md:mb-4 are not read as pseudo-classes."""
    return selector.replace(':', '\\:')


def snapshot_filename(selector: str) -> str:
    return f"{sanitize_filename(selector)}-styles.json"


@dataclass(frozen=True)
class ExtractionResult:
    screenshot: RasterImage
    snapshot: StyleSnapshot
    snapshot_path: Path
    screenshot_path: Optional[Path] = None


class ElementStyleExtractor:
    def __init__(self,
                 driver_factory: Callable[[], BrowserDriver],
                 output_dir: Path,
                 screenshot_dir: Optional[Path] = None,
                 navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
                 selector_timeout_ms: int = DEFAULT_SELECTOR_TIMEOUT_MS):
        self.driver_factory = driver_factory
        self.output_dir = Path(output_dir)
        self.screenshot_dir = Path(screenshot_dir) if screenshot_dir else None
        self.navigation_timeout_ms = navigation_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms

    def extract(self, url: str, selector: str) -> ExtractionResult:
        """
        Capture the element matched by ``selector`` on ``url``.

        Args:
            url: Page to load
            selector: CSS selector; colons are escaped before use

        Returns:
            ExtractionResult with the element screenshot, its style snapshot
            and the path of the persisted snapshot JSON

        Raises:
            NavigationError: page did not load in time
            ElementNotFoundError: nothing matched within the selector timeout
            PersistenceError: snapshot JSON could not be written
        """
        escaped = escape_selector(selector)
        screenshot_path = None
        logger.info("Extracting %r from %s", escaped, url)
        try:
            with self.driver_factory() as driver:
                page = driver.navigate(url, self.navigation_timeout_ms)
                if not page.wait_for_selector(escaped, self.selector_timeout_ms):
                    raise ElementNotFoundError(
                        f"no element matched {selector!r} within {self.selector_timeout_ms}ms")
                element = page.query_selector(escaped)
                if element is None:
                    raise ElementNotFoundError(f"no element matched {selector!r}")
                page.add_style_tag(DISABLE_HOVER_CSS)
                png = element.screenshot()
                if self.screenshot_dir is not None:
                    screenshot_path = self._write_screenshot(png)
                raw = element.evaluate(EXTRACT_ELEMENT_JS)
            screenshot = RasterImage.from_png_bytes(png)
            snapshot = StyleSnapshot.from_computed(raw)
            snapshot_path = self.persist(selector, snapshot)
        except BaseException:
            if screenshot_path is not None:
                screenshot_path.unlink(missing_ok=True)
            raise
        return ExtractionResult(screenshot=screenshot,
                                snapshot=snapshot,
                                snapshot_path=snapshot_path,
                                screenshot_path=screenshot_path)

    def _write_screenshot(self, png: bytes) -> Path:
        path = self.screenshot_dir / f"extracted-{time.time_ns()}.png"
        try:
            ensure_directory(self.screenshot_dir)
            path.write_bytes(png)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise PersistenceError(f"could not write element screenshot to {path}: {e}") from e
        return path

    def persist(self, selector: str, snapshot: StyleSnapshot) -> Path:
        """Write the snapshot to <output_dir>/<sanitized selector>-styles.json."""
        path = self.output_dir / snapshot_filename(selector)
        try:
            ensure_directory(self.output_dir)
            write_json_atomic(path, snapshot.to_dict())
        except OSError as e:
            raise PersistenceError(f"could not write style snapshot to {path}: {e}") from e
        logger.info("Saved style snapshot to %s", path)
        return path
