"""In-memory browser used to test the extraction pipeline without Chromium."""

import io
import os
import sys

from PIL import Image
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from core.browser import BrowserDriver, BrowserElement, BrowserPage


def png_bytes(width=4, height=3, color=(10, 20, 30, 255)):
    out = io.BytesIO()
    Image.new('RGBA', (width, height), color).save(out, format='PNG')
    return out.getvalue()


SAMPLE_RAW_STYLES = {
    'tag': 'FORM',
    'textContent': '  Sign in  ',
    'placeholder': None,
    'inputFields': [
        {'type': 'email', 'name': 'email', 'placeholder': 'you@example.com', 'value': ''},
        {'type': 'hidden', 'name': 'csrf', 'placeholder': None, 'value': 'abc'},
    ],
    'dropdownOptions': [' One ', 'Two'],
    'fontFamily': 'Inter, sans-serif',
    'fontSize': '16px',
    'fontWeight': 'bold',
    'color': 'rgb(0, 0, 0)',
    'backgroundColor': 'rgba(0, 0, 0, 0)',
    'padding': '8px',
    'margin': '0px',
    'textAlign': 'left',
    'display': 'block',
    'position': 'static',
    'width': 320,
    'height': 48.5,
    'style': None,
}


class FakeElement(BrowserElement):
    def __init__(self, calls, png=None, raw=None, evaluate_error=None):
        self.calls = calls
        self.png = png or png_bytes()
        self.raw = SAMPLE_RAW_STYLES if raw is None else raw
        self.evaluate_error = evaluate_error

    def screenshot(self):
        self.calls.append(('screenshot',))
        return self.png

    def evaluate(self, script):
        self.calls.append(('evaluate',))
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return dict(self.raw)


class FakePage(BrowserPage):
    def __init__(self, calls, elements):
        self.calls = calls
        self.elements = elements

    def wait_for_selector(self, selector, timeout_ms):
        self.calls.append(('wait_for_selector', selector, timeout_ms))
        return selector in self.elements

    def query_selector(self, selector):
        self.calls.append(('query_selector', selector))
        return self.elements.get(selector)

    def add_style_tag(self, css):
        self.calls.append(('add_style_tag', css))


class FakeDriver(BrowserDriver):
    def __init__(self, elements=None, navigation_error=None):
        self.calls = []
        self.elements = elements if elements is not None else {}
        self.navigation_error = navigation_error
        self.closed = False

    def navigate(self, url, timeout_ms):
        self.calls.append(('navigate', url, timeout_ms))
        if self.navigation_error is not None:
            raise self.navigation_error
        return FakePage(self.calls, self.elements)

    def close(self):
        self.closed = True


class FakeDriverFactory:
    """Hands out one FakeDriver per call and remembers them for assertions."""

    def __init__(self, selector=None, element_kwargs=None, navigation_error=None):
        self.selector = selector
        self.element_kwargs = element_kwargs or {}
        self.navigation_error = navigation_error
        self.drivers = []

    def __call__(self):
        driver = FakeDriver(navigation_error=self.navigation_error)
        if self.selector is not None:
            driver.elements[self.selector] = FakeElement(driver.calls, **self.element_kwargs)
        self.drivers.append(driver)
        return driver
