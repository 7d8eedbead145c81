import sys
import os
import json
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.style_extractor import (
    ElementStyleExtractor, escape_selector, snapshot_filename, DISABLE_HOVER_CSS
)
from core.errors import ElementNotFoundError, NavigationError, PersistenceError
from utils.file_utils import sanitize_filename
from fake_browser import FakeDriverFactory, png_bytes


def make_extractor(factory, tmp_path, **kwargs):
    return ElementStyleExtractor(factory, output_dir=tmp_path / 'extracted', **kwargs)


def test_escape_selector():
    assert escape_selector('md:mb-4') == 'md\\:mb-4'
    assert escape_selector('.sm:flex.lg:hidden') == '.sm\\:flex.lg\\:hidden'
    assert escape_selector('#plain') == '#plain'


def test_sanitize_filename():
    assert sanitize_filename('.md:mb-4 > a') == '_md_mb-4___a'
    assert snapshot_filename('#login_form') == '_login_form-styles.json'


def test_extract_success(tmp_path):
    factory = FakeDriverFactory(selector='.md\\:mb-4', element_kwargs={'png': png_bytes(7, 5)})
    result = make_extractor(factory, tmp_path).extract('https://example.com', '.md:mb-4')

    assert result.screenshot.size == (7, 5)
    assert result.snapshot.font_weight == '700'
    assert result.snapshot.font_weight_name == 'bold'
    assert result.snapshot_path == tmp_path / 'extracted' / '_md_mb-4-styles.json'

    driver = factory.drivers[0]
    assert driver.closed
    assert driver.calls[0] == ('navigate', 'https://example.com', 60000)
    assert ('wait_for_selector', '.md\\:mb-4', 30000) in driver.calls


def test_hover_disabled_before_screenshot(tmp_path):
    factory = FakeDriverFactory(selector='#hero')
    make_extractor(factory, tmp_path).extract('https://example.com', '#hero')
    calls = [c[0] for c in factory.drivers[0].calls]
    assert calls.index('add_style_tag') < calls.index('screenshot')
    assert ('add_style_tag', DISABLE_HOVER_CSS) in factory.drivers[0].calls


def test_snapshot_persisted_with_sorted_keys(tmp_path):
    factory = FakeDriverFactory(selector='#hero')
    result = make_extractor(factory, tmp_path).extract('https://example.com', '#hero')
    with open(result.snapshot_path, encoding='utf-8') as f:
        data = json.load(f)
    assert list(data) == sorted(data)
    assert data == result.snapshot.to_dict()


def test_retry_overwrites_snapshot(tmp_path):
    factory = FakeDriverFactory(selector='#hero')
    extractor = make_extractor(factory, tmp_path)
    first = extractor.extract('https://example.com', '#hero')
    second = extractor.extract('https://example.com', '#hero')
    assert first.snapshot_path == second.snapshot_path
    assert len(list((tmp_path / 'extracted').iterdir())) == 1


def test_selector_timeout_raises_and_releases_browser(tmp_path):
    factory = FakeDriverFactory()
    extractor = make_extractor(factory, tmp_path, selector_timeout_ms=50)
    with pytest.raises(ElementNotFoundError):
        extractor.extract('https://example.com', '.missing')
    assert factory.drivers[0].closed
    assert not (tmp_path / 'extracted').exists()


def test_zero_matches_after_wait(tmp_path):
    factory = FakeDriverFactory(selector='#flaky')

    def vanish():
        driver = factory()
        driver.elements['#flaky'] = None
        return driver

    with pytest.raises(ElementNotFoundError):
        make_extractor(vanish, tmp_path).extract('https://example.com', '#flaky')
    assert factory.drivers[0].closed


def test_navigation_error_releases_browser(tmp_path):
    factory = FakeDriverFactory(navigation_error=NavigationError('timed out'))
    with pytest.raises(NavigationError):
        make_extractor(factory, tmp_path).extract('https://example.com', '#hero')
    assert factory.drivers[0].closed


def test_write_failure_is_persistence_error(tmp_path):
    blocker = tmp_path / 'extracted'
    blocker.write_text('not a directory')
    factory = FakeDriverFactory(selector='#hero')
    with pytest.raises(PersistenceError):
        make_extractor(factory, tmp_path).extract('https://example.com', '#hero')
    assert factory.drivers[0].closed


def test_screenshot_file_kept_on_success(tmp_path):
    factory = FakeDriverFactory(selector='#hero')
    extractor = make_extractor(factory, tmp_path, screenshot_dir=tmp_path / 'shots')
    result = extractor.extract('https://example.com', '#hero')
    assert result.screenshot_path.exists()
    assert result.screenshot_path.parent == tmp_path / 'shots'


@pytest.mark.parametrize('error', [RuntimeError('script failed'), KeyboardInterrupt()])
def test_partial_screenshot_removed_on_failure(tmp_path, error):
    factory = FakeDriverFactory(selector='#hero', element_kwargs={'evaluate_error': error})
    extractor = make_extractor(factory, tmp_path, screenshot_dir=tmp_path / 'shots')
    with pytest.raises(type(error)):
        extractor.extract('https://example.com', '#hero')
    assert factory.drivers[0].closed
    assert list((tmp_path / 'shots').iterdir()) == []
